"""Failure modes of the rate limiter."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from webshield.status import Status


class LimitationError(Exception):
    """Base class for rate limiter failures."""

    message = "Rate limiter failure"

    def __str__(self) -> str:
        return self.message


class ClientError(LimitationError):
    """The Redis client failed to connect or run a query."""

    message = "Redis client failed to connect or run a query"

    def __init__(self, error: BaseException) -> None:
        super().__init__(error)
        self.error = error
        self.__cause__ = error


class LimitExceeded(LimitationError):
    """The limit is exceeded for a key."""

    message = "Limit is exceeded for a key"

    def __init__(self, status: Status) -> None:
        super().__init__(status)
        self.status = status


class TimeError(LimitationError):
    """A time conversion failed."""

    message = "Time conversion failed"

    def __init__(self, error: BaseException) -> None:
        super().__init__(error)
        self.error = error
        self.__cause__ = error


class OtherError(LimitationError):
    """A generic failure carrying a description."""

    message = "Generic error"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def __repr__(self) -> str:
        return f"OtherError({self.detail!r})"