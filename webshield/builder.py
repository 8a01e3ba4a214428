"""Fluent builder for the CORS middleware."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

from webshield.all_or_some import AllOrSome
from webshield.cors_error import CorsError, CorsErrorKind
from webshield.inner import Inner, OriginFn, intersperse_header_values
from webshield.messages import (
    STANDARD_METHODS,
    HttpError,
    parse_header_name,
    parse_method,
    parse_uri,
)
from webshield.middleware import CorsMiddleware, Service

logger = logging.getLogger(__name__)


class CorsConfigError(Exception):
    """The CORS configuration is invalid; raised when the middleware is built."""


def _copy_some(value: AllOrSome[set[str]]) -> AllOrSome[set[str]]:
    if value.is_all():
        return AllOrSome.all()
    return AllOrSome.some(set(value.value or ()))


class Cors:
    """Builder for :class:`CorsMiddleware`.

    ``Cors()`` starts from restrictive defaults: no allowed origins, methods,
    request headers or exposed headers, no credentials and no max age.
    Configuration errors are recorded and raised by :meth:`new_transform`;
    only the first error is kept.
    """

    def __init__(self) -> None:
        self._inner = Inner()
        self._error: Exception | None = None

    @classmethod
    def permissive(cls) -> Cors:
        """Wide-open settings for development; not for production use.

        All origins, methods, request headers and exposed headers are allowed,
        credentials are supported, max age is one hour and no wildcard is sent.
        """
        cors = cls()
        cors._inner = Inner(
            allowed_origins=AllOrSome.all(),
            allowed_methods=set(STANDARD_METHODS),
            allowed_headers=AllOrSome.all(),
            expose_headers=AllOrSome.all(),
            max_age=3600,
            supports_credentials=True,
        )
        return cors

    def _config(self) -> Inner | None:
        """The settings to modify, or ``None`` once an error is recorded."""
        return None if self._error is not None else self._inner

    def allow_any_origin(self) -> Cors:
        """Accept requests from any origin."""
        if (inner := self._config()) is not None:
            inner.allowed_origins = AllOrSome.all()
        return self

    def allowed_origin(self, origin: str) -> Cors:
        """Add an origin allowed to make requests; compared case-sensitively.

        A wildcard (``*``) or an invalid URI is a configuration error.
        """
        if (inner := self._config()) is None:
            return self
        try:
            parse_uri(origin)
        except HttpError as err:
            self._error = err
            return self
        if origin == "*":
            logger.error("Wildcard in `allowed_origin` is not allowed. Use `send_wildcard`.")
            self._error = CorsError(CorsErrorKind.WILDCARD_ORIGIN)
            return self
        if inner.allowed_origins.is_all():
            inner.allowed_origins = AllOrSome.some(set())
        origins = inner.allowed_origins.value
        if origins is not None:
            origins.add(origin)
        return self

    def allowed_origin_fn(self, f: OriginFn) -> Cors:
        """Add a predicate ``f(origin, request)`` accepting origins not listed."""
        if (inner := self._config()) is not None:
            inner.allowed_origins_fns.append(f)
        return self

    def allow_any_method(self) -> Cors:
        """Allow every standard HTTP method."""
        if (inner := self._config()) is not None:
            inner.allowed_methods = set(STANDARD_METHODS)
        return self

    def allowed_methods(self, methods: Iterable[str]) -> Cors:
        """Add methods that allowed origins may use."""
        if (inner := self._config()) is None:
            return self
        for method in methods:
            try:
                inner.allowed_methods.add(parse_method(method))
            except HttpError as err:
                self._error = err
                break
        return self

    def allow_any_header(self) -> Cors:
        """Accept any request header."""
        if (inner := self._config()) is not None:
            inner.allowed_headers = AllOrSome.all()
        return self

    def _allowed_header_set(self, inner: Inner) -> set[str]:
        if inner.allowed_headers.is_all():
            inner.allowed_headers = AllOrSome.some(set())
        headers = inner.allowed_headers.value
        assert headers is not None
        return headers

    def allowed_header(self, header: str) -> Cors:
        """Add one allowed request header."""
        if (inner := self._config()) is None:
            return self
        try:
            name = parse_header_name(header)
        except HttpError as err:
            self._error = err
            return self
        self._allowed_header_set(inner).add(name)
        return self

    def allowed_headers(self, headers: Iterable[str]) -> Cors:
        """Add request headers that allowed origins may send."""
        if (inner := self._config()) is None:
            return self
        for header in headers:
            try:
                name = parse_header_name(header)
            except HttpError as err:
                self._error = err
                break
            self._allowed_header_set(inner).add(name)
        return self

    def expose_any_header(self) -> Cors:
        """Expose every response header."""
        if (inner := self._config()) is not None:
            inner.expose_headers = AllOrSome.all()
        return self

    def expose_headers(self, headers: Iterable[str]) -> Cors:
        """Add response headers that are safe to expose to the client."""
        for header in headers:
            try:
                name = parse_header_name(header)
            except HttpError as err:
                self._error = err
                break
            if (inner := self._config()) is not None:
                if inner.expose_headers.is_all():
                    inner.expose_headers = AllOrSome.some(set())
                exposed = inner.expose_headers.value
                if exposed is not None:
                    exposed.add(name)
        return self

    def max_age(self, max_age: int | None) -> Cors:
        """Set the preflight cache time in seconds; ``None`` sends no header."""
        if (inner := self._config()) is not None:
            inner.max_age = max_age
        return self

    def send_wildcard(self) -> Cors:
        """Send ``*`` instead of the echoed origin when all origins are allowed."""
        if (inner := self._config()) is not None:
            inner.send_wildcard = True
        return self

    def supports_credentials(self) -> Cors:
        """Send ``Access-Control-Allow-Credentials: true``."""
        if (inner := self._config()) is not None:
            inner.supports_credentials = True
        return self

    def disable_vary_header(self) -> Cors:
        """Stop adding CORS request headers to the ``Vary`` header."""
        if (inner := self._config()) is not None:
            inner.vary_header = False
        return self

    def disable_preflight(self) -> Cors:
        """Pass ``OPTIONS`` requests through instead of answering them."""
        if (inner := self._config()) is not None:
            inner.preflight = False
        return self

    def new_transform(self, service: Service) -> CorsMiddleware:
        """Build a middleware wrapping ``service``.

        Raises :class:`CorsConfigError` if the configuration is invalid.
        """
        if self._error is not None:
            logger.error("%s", self._error)
            raise CorsConfigError(str(self._error)) from self._error

        source = self._inner
        if (
            source.supports_credentials
            and source.send_wildcard
            and source.allowed_origins.is_all()
        ):
            message = (
                "Illegal combination of CORS options: credentials can not be supported "
                "when all origins are allowed and `send_wildcard` is enabled."
            )
            logger.error(message)
            raise CorsConfigError(message)

        inner = replace(
            source,
            allowed_origins=_copy_some(source.allowed_origins),
            allowed_origins_fns=list(source.allowed_origins_fns),
            allowed_methods=set(source.allowed_methods),
            allowed_headers=_copy_some(source.allowed_headers),
            expose_headers=_copy_some(source.expose_headers),
        )

        if inner.allowed_headers.value:
            inner.allowed_headers_baked = intersperse_header_values(inner.allowed_headers.value)
        if inner.allowed_methods:
            inner.allowed_methods_baked = intersperse_header_values(inner.allowed_methods)
        if inner.expose_headers.value:
            inner.expose_headers_baked = intersperse_header_values(inner.expose_headers.value)

        return CorsMiddleware(service=service, inner=inner)