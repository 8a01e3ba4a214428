"""Rate limit status reports."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import timedelta

from webshield.limitation_errors import OtherError

# Largest number of seconds a signed 64-bit millisecond count can hold.
_MAX_DURATION_SECS = (2**63 - 1) // 1000
_NS_PER_SEC = 1_000_000_000


@dataclass(frozen=True)
class Status:
    """A report for a key: its limit, remaining requests and reset time."""

    limit: int
    remaining: int
    reset_epoch_utc: int

    @classmethod
    def from_count(cls, count: int, limit: int, reset_epoch_utc: int) -> Status:
        """Build a status from the number of requests counted so far."""
        remaining = 0 if count >= limit else limit - count
        return cls(limit=limit, remaining=remaining, reset_epoch_utc=reset_epoch_utc)


def _to_nanoseconds(duration: timedelta | int | float) -> int:
    if isinstance(duration, timedelta):
        micros = duration // timedelta(microseconds=1)
        return micros * 1000
    if isinstance(duration, int):
        return duration * _NS_PER_SEC
    return int(round(duration * _NS_PER_SEC))


def epoch_utc_plus(duration: timedelta | int | float) -> int:
    """Return the UNIX timestamp, rounded to the second, ``duration`` from now.

    ``duration`` is a :class:`~datetime.timedelta` or a number of seconds.
    """
    nanos = _to_nanoseconds(duration)
    if nanos < 0:
        raise ValueError("duration must not be negative")
    if nanos // _NS_PER_SEC > _MAX_DURATION_SECS:
        raise OtherError("Source duration value is out of range for the target type")
    total = time.time_ns() + nanos
    seconds = (total + _NS_PER_SEC // 2) // _NS_PER_SEC
    return max(seconds, 0)