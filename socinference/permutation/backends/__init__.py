"""Computational backends for permutation tests."""

from socinference.permutation.backends.cpu import (
    CPUKSampleBackend,
    CPUSignFlipBackend,
)

__all__ = ["CPUSignFlipBackend", "CPUKSampleBackend"]
