"""Middleware enforcing the rate limit of a :class:`Limiter`."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from http import HTTPStatus

from webshield.limitation_errors import ClientError, LimitationError, LimitExceeded
from webshield.limiter import Limiter
from webshield.messages import Request, Response
from webshield.middleware import Service

logger = logging.getLogger(__name__)


@dataclass
class RateLimiter:
    """Wraps a service and rejects requests over the limit with ``429``.

    The :class:`Limiter` is read from ``request.app_data[Limiter]``.
    """

    service: Service

    def __call__(self, request: Request) -> Response:
        limiter = request.app_data.get(Limiter)
        if limiter is None:
            raise LookupError(
                "a Limiter should be set in app data for RateLimiter middleware"
            )

        key = limiter.get_key_fn(request)
        if key is None:
            return self.service(request)

        try:
            limiter.count(key)
        except LimitExceeded:
            logger.warning("Rate limit exceed error for %s", key)
            return Response(status=HTTPStatus.TOO_MANY_REQUESTS)
        except ClientError as err:
            logger.error("Client request failed, redis error: %s", err.error)
            return Response(status=HTTPStatus.INTERNAL_SERVER_ERROR)
        except LimitationError as err:
            logger.error("Count failed: %s", err)
            return Response(status=HTTPStatus.INTERNAL_SERVER_ERROR)

        return self.service(request)