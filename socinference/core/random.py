"""
Random source handling.

Every stochastic operation accepts either a seed or a live Generator.
Passing the same Generator through successive calls advances one stream
in a fixed order, which is how a full analysis stays reproducible
without module-level RNG state.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from socinference.core.exceptions import ValidationError

SeedLike = int | np.random.Generator | None


def as_generator(seed: SeedLike, name: str = "seed") -> np.random.Generator:
    """
    Coerce a seed or Generator to a Generator.

    An int or None builds a fresh PCG64 generator. A Generator is returned
    unchanged so that draws made with it advance the caller's stream.
    """
    if isinstance(seed, np.random.Generator):
        return seed
    if seed is None:
        return np.random.default_rng()
    if isinstance(seed, (bool, np.bool_)) or not isinstance(seed, (int, np.integer)):
        raise ValidationError(
            f"{name}: expected int, numpy Generator or None, "
            f"got {type(seed).__name__}"
        )
    if seed < 0:
        raise ValidationError(f"{name}: must be non-negative, got {seed}")
    return np.random.default_rng(int(seed))


def generator_state(rng: np.random.Generator) -> dict[str, Any]:
    """Snapshot of the generator state after a call (for Result.info)."""
    return rng.bit_generator.state
