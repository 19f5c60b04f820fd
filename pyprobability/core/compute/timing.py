"""
Wall-clock timing for backends.

Every backend times its work in named sections; the breakdown ends up in
Result.timing next to 'total_seconds'.
"""

import time
from contextlib import contextmanager
from typing import Iterator


class Timer:
    """
    Total plus per-section wall-clock time.

    A simulation backend typically does:

        timer = Timer()
        timer.start()
        with timer.section('factor'):
            L = cholesky(cov)
        with timer.section('simulation'):
            path = simulate(design)
        timer.stop()
        timer.result()   # {'total_seconds': ..., 'factor': ..., 'simulation': ...}

    Re-entering a section adds to its time.
    """

    def __init__(self):
        self._elapsed: dict[str, float] = {}
        self._t0: float | None = None
        self._total_seconds: float | None = None

    def start(self) -> None:
        self._t0 = time.perf_counter()
        self._total_seconds = None

    def stop(self) -> None:
        if self._t0 is None:
            raise RuntimeError("Timer.stop(): timer was never started")
        self._total_seconds = time.perf_counter() - self._t0

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """Add the time spent inside the block to section ``name``."""
        t0 = time.perf_counter()
        try:
            yield
        finally:
            self._elapsed[name] = self._elapsed.get(name, 0.0) + (time.perf_counter() - t0)

    def result(self) -> dict[str, float]:
        """
        Timing breakdown for Result.timing.

        Raises:
            RuntimeError: If the timer has not been stopped
        """
        if self._total_seconds is None:
            raise RuntimeError("Timer.result(): call stop() first")
        return {'total_seconds': self._total_seconds, **self._elapsed}


@contextmanager
def timed() -> Iterator[Timer]:
    """
    Time a block as a whole.

        with timed() as timer:
            sol = draw('normal', 100_000, source)
        timer.result()['total_seconds']
    """
    timer = Timer()
    timer.start()
    try:
        yield timer
    finally:
        timer.stop()
