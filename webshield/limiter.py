"""Fixed-window rate limiter for arbitrary keys, backed by Redis."""

from __future__ import annotations

import warnings
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Optional

import redis

from webshield.limitation_errors import ClientError, LimitExceeded
from webshield.messages import Request
from webshield.status import Status, epoch_utc_plus

DEFAULT_REQUEST_LIMIT = 5000
"""Default request limit."""

DEFAULT_PERIOD_SECS = 3600
"""Default period, in seconds."""

DEFAULT_COOKIE_NAME = "sid"
"""Default name of the cookie used as the rate limit key."""

KeyFn = Callable[[Request], Optional[str]]


def _cookie_key_fn(cookie_name: str) -> KeyFn:
    """Key requests by the ``name=value`` form of the named cookie."""

    def key(request: Request) -> str | None:
        value = request.cookie(cookie_name)
        return None if value is None else f"{cookie_name}={value}"

    return key


@dataclass
class Builder:
    """Rate limiter builder; obtain one from :meth:`Limiter.builder`."""

    redis_url: str
    request_limit: int = DEFAULT_REQUEST_LIMIT
    window: timedelta = field(default_factory=lambda: timedelta(seconds=DEFAULT_PERIOD_SECS))
    get_key_fn: KeyFn | None = field(default=None, repr=False)
    key_cookie_name: str = DEFAULT_COOKIE_NAME

    def limit(self, limit: int) -> Builder:
        """Set the upper limit of requests per period."""
        self.request_limit = limit
        return self

    def period(self, period: timedelta) -> Builder:
        """Set the length of the limit window."""
        self.window = period
        return self

    def key_by(self, resolver: KeyFn) -> Builder:
        """Set the function deriving a rate limit key from a request.

        A resolver returning ``None`` exempts the request from limiting.
        """
        self.get_key_fn = resolver
        return self

    def cookie_name(self, cookie_name: str) -> Builder:
        """Set the cookie used as the key. Deprecated: prefer :meth:`key_by`."""
        warnings.warn("Prefer `key_by`.", DeprecationWarning, stacklevel=2)
        if self.get_key_fn is not None:
            raise ValueError(
                "This method should not be used in combination of get_key "
                "as they overwrite each other"
            )
        self.key_cookie_name = cookie_name
        return self

    def build(self) -> Limiter:
        """Create the limiter; raises :class:`ClientError` for a bad Redis URL."""
        get_key = self.get_key_fn or _cookie_key_fn(self.key_cookie_name)
        try:
            client = redis.Redis.from_url(self.redis_url)
        except (ValueError, redis.RedisError) as err:
            raise ClientError(err) from err
        return Limiter(
            client=client,
            limit=self.request_limit,
            period=self.window,
            get_key_fn=get_key,
        )


@dataclass
class Limiter:
    """Counts requests per key in fixed windows stored in Redis."""

    client: Any
    limit: int
    period: timedelta
    get_key_fn: KeyFn = field(repr=False)

    @classmethod
    def builder(cls, redis_url: str) -> Builder:
        """Start a builder with the default limit, period and key cookie."""
        return Builder(redis_url=str(redis_url))

    def count(self, key: str) -> Status:
        """Consume one unit for ``key`` and return its status.

        Raises :class:`LimitExceeded` when the limit is passed and
        :class:`ClientError` when Redis fails.
        """
        count, reset = self._track(str(key))
        status = Status.from_count(count, self.limit, reset)
        if count > self.limit:
            raise LimitExceeded(status)
        return status

    def _track(self, key: str) -> tuple[int, int]:
        """Increment ``key`` in its window; return the count and reset time."""
        expires = self.period // timedelta(seconds=1)
        try:
            pipe = self.client.pipeline(transaction=True)
            pipe.set(key, 0, ex=expires, nx=True)
            pipe.incr(key)
            pipe.ttl(key)
            _, count, ttl = pipe.execute()
        except redis.RedisError as err:
            raise ClientError(err) from err
        count, ttl = int(count), int(ttl)
        if ttl < 0:
            err = ValueError(f"unexpected TTL {ttl} for rate limit key")
            raise ClientError(err) from err
        return count, epoch_utc_plus(timedelta(seconds=ttl))