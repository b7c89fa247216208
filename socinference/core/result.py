"""
Generic result container for all socinference computations.

Domain-specific results wrap a parameter payload P in this envelope so
timing, warnings and reproducibility metadata are handled the same way
everywhere.

Design decisions:
    - Generic over parameter payload P
    - info dict for flexible metadata (method, sizes, rng_state)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True) for reproducibility
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for statistical computations.

    Type Parameters:
        P: The domain-specific parameter payload type

    Attributes:
        params: Domain-specific payload (estimates, statistics, p-values)
        info: Structured metadata (method, sizes, generator state)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the code path that produced this result
        warnings: Non-fatal issues encountered during computation

    Examples:
        >>> Result(
        ...     params=PermutationParams(...),
        ...     info={'n': 12, 'rng_state': rng.bit_generator.state},
        ...     timing={'total_seconds': 0.01},
        ...     backend_name='cpu_sign_flip'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
