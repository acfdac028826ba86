"""Monotonic millisecond clock for deadline-bounded I/O."""

import time


def now_ms() -> int:
    """Return the current monotonic instant in milliseconds."""
    return time.monotonic_ns() // 1_000_000


def deadline_after(timeout_ms: int) -> int:
    """Return the absolute deadline ``timeout_ms`` from now."""
    return now_ms() + timeout_ms


def remaining_ms(deadline: int) -> int:
    """Return the time left until ``deadline``, never negative.

    Parameters
    ----------
    deadline : int
        Absolute monotonic instant in milliseconds

    Returns
    -------
    int
        Milliseconds left, clamped to zero
    """
    return max(0, deadline - now_ms())


def format_duration(duration_ms: int) -> str:
    """Format a duration as ``SSS.mmm``."""
    return f"{duration_ms // 1000:03d}.{duration_ms % 1000:03d}"
