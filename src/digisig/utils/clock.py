"""Time source used wherever a unix timestamp enters a signature or token."""
from __future__ import annotations

import time
from typing import Callable

Clock = Callable[[], int]


def unix_now() -> int:
    return int(time.time())


def frozen(ts: int) -> Clock:
    """Return a clock that always reports ``ts``."""
    return lambda: ts


__all__ = ["Clock", "unix_now", "frozen"]
