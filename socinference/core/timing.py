"""
Wall-clock timing for Result.timing.
"""

import time
from contextlib import contextmanager
from typing import Iterator


class Timer:
    """
    Overall timer with named, accumulating sections.

    A section entered more than once (e.g. once per treatment) reports
    the summed time.

        timer = Timer()
        timer.start()
        with timer.section('permutation_replicates'):
            signs = rng.integers(0, 2, size=(reps, n))
        timer.stop()
        timer.result()
        # {'total_seconds': ..., 'permutation_replicates': ...}
    """

    def __init__(self):
        self._sections: dict[str, float] = {}
        self._t0: float | None = None
        self._total: float | None = None

    def start(self) -> None:
        self._t0 = time.perf_counter()

    def stop(self) -> None:
        if self._t0 is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._total = time.perf_counter() - self._t0

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        t0 = time.perf_counter()
        try:
            yield
        finally:
            self._sections[name] = (
                self._sections.get(name, 0.0) + time.perf_counter() - t0
            )

    def result(self) -> dict[str, float]:
        """'total_seconds' followed by every section, in first-use order."""
        if self._total is None:
            raise RuntimeError("Timer.result() called before stop()")
        return {'total_seconds': self._total, **self._sections}
