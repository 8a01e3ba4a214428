"""Middleware that applies CORS checks and headers around a request handler."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from http import HTTPStatus

from webshield.cors_error import CorsError
from webshield.inner import (
    Inner,
    add_vary_header,
    header_value_to_method,
    intersperse_header_values,
)
from webshield.messages import (
    ACCESS_CONTROL_ALLOW_CREDENTIALS,
    ACCESS_CONTROL_ALLOW_HEADERS,
    ACCESS_CONTROL_ALLOW_METHODS,
    ACCESS_CONTROL_ALLOW_ORIGIN,
    ACCESS_CONTROL_EXPOSE_HEADERS,
    ACCESS_CONTROL_MAX_AGE,
    ACCESS_CONTROL_REQUEST_HEADERS,
    ACCESS_CONTROL_REQUEST_METHOD,
    ORIGIN,
    Request,
    Response,
)

logger = logging.getLogger(__name__)

Service = Callable[[Request], Response]


def is_request_preflight(request: Request) -> bool:
    """Return whether the request is ``OPTIONS`` with a valid request-method header."""
    if request.method != "OPTIONS":
        return False
    raw = request.headers.get(ACCESS_CONTROL_REQUEST_METHOD)
    return raw is not None and header_value_to_method(raw) is not None


@dataclass
class CorsMiddleware:
    """Wraps a service, validating CORS requests and adding CORS response headers."""

    service: Service
    inner: Inner

    def __call__(self, request: Request) -> Response:
        if self.inner.preflight and is_request_preflight(request):
            return self.handle_preflight(request)

        if ORIGIN in request.headers:
            try:
                self.inner.validate_origin(request)
            except CorsError as err:
                logger.debug("origin validation failed; inner service is not called")
                response = err.error_response()
                if self.inner.vary_header:
                    add_vary_header(response.headers)
                return response

        response = self.service(request)
        return self.augment_response(request, response)

    def handle_preflight(self, request: Request) -> Response:
        """Validate a preflight request and build its response."""
        inner = self.inner
        try:
            inner.validate_origin(request)
            inner.validate_allowed_method(request)
            inner.validate_allowed_headers(request)
        except CorsError as err:
            return err.error_response()

        response = Response(status=HTTPStatus.OK)
        headers = response.headers

        origin = inner.access_control_allow_origin(request)
        if origin is not None:
            headers[ACCESS_CONTROL_ALLOW_ORIGIN] = origin

        if inner.allowed_methods_baked is not None:
            headers[ACCESS_CONTROL_ALLOW_METHODS] = inner.allowed_methods_baked

        if inner.allowed_headers_baked is not None:
            headers[ACCESS_CONTROL_ALLOW_HEADERS] = inner.allowed_headers_baked
        else:
            requested = request.headers.get(ACCESS_CONTROL_REQUEST_HEADERS)
            if requested is not None:
                headers[ACCESS_CONTROL_ALLOW_HEADERS] = requested

        if inner.supports_credentials:
            headers[ACCESS_CONTROL_ALLOW_CREDENTIALS] = "true"

        if inner.max_age is not None:
            headers[ACCESS_CONTROL_MAX_AGE] = str(inner.max_age)

        if inner.vary_header:
            add_vary_header(headers)

        return response

    def augment_response(self, request: Request, response: Response) -> Response:
        """Add CORS headers to a response produced by the wrapped service."""
        inner = self.inner
        headers = response.headers

        origin = inner.access_control_allow_origin(request)
        if origin is not None:
            headers[ACCESS_CONTROL_ALLOW_ORIGIN] = origin

        if inner.expose_headers_baked is not None:
            logger.debug("exposing selected headers: %r", inner.expose_headers_baked)
            headers[ACCESS_CONTROL_EXPOSE_HEADERS] = inner.expose_headers_baked
        elif inner.expose_headers.is_all() and len(headers) > 0:
            value = intersperse_header_values(set(headers))
            logger.debug("exposing all headers from response: %r", value)
            headers[ACCESS_CONTROL_EXPOSE_HEADERS] = value

        if inner.supports_credentials:
            headers[ACCESS_CONTROL_ALLOW_CREDENTIALS] = "true"

        if inner.vary_header:
            add_vary_header(headers)

        return response