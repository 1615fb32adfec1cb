from datetime import datetime, timezone
from typing import Optional
import time


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_duration(seconds: float) -> str:
    """Human-readable span in the style CI build logs use: ``350 ms``, ``4.2 sec``, ``3 min 7 sec``."""
    if seconds < 1:
        return f"{max(int(seconds * 1000), 0)} ms"
    if seconds < 60:
        return f"{seconds:.1f} sec"
    minutes, secs = divmod(int(seconds), 60)
    if minutes < 60:
        return f"{minutes} min {secs} sec"
    hours, minutes = divmod(minutes, 60)
    return f"{hours} hr {minutes} min"


class Timer:
    """Monotonic stopwatch for timing a launch."""

    def __init__(self):
        self._started: Optional[float] = None
        self._stopped: Optional[float] = None

    def start(self) -> "Timer":
        self._started = time.monotonic()
        self._stopped = None
        return self

    def stop(self) -> float:
        if self._started is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._stopped = time.monotonic()
        return self.elapsed

    @property
    def elapsed(self) -> float:
        if self._started is None:
            return 0.0
        return (self._stopped or time.monotonic()) - self._started

    @property
    def elapsed_formatted(self) -> str:
        return format_duration(self.elapsed)
