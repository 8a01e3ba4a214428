"""CORS configuration state and the checks it performs on requests."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from webshield.all_or_some import AllOrSome
from webshield.cors_error import CorsError, CorsErrorKind
from webshield.messages import (
    ACCESS_CONTROL_REQUEST_HEADERS,
    ACCESS_CONTROL_REQUEST_METHOD,
    ORIGIN,
    VARY,
    Headers,
    HttpError,
    Request,
    parse_header_name,
    parse_method,
)

OriginFn = Callable[[str, Request], bool]

VARY_VALUE = "Origin, Access-Control-Request-Method, Access-Control-Request-Headers"


def _is_visible_ascii(value: str) -> bool:
    return all(ch == "\t" or " " <= ch <= "~" for ch in value)


def header_value_to_method(value: str) -> str | None:
    """Parse a header value as an HTTP method, or return ``None``."""
    if not _is_visible_ascii(value):
        return None
    try:
        return parse_method(value)
    except HttpError:
        return None


def _empty_some() -> AllOrSome[set[str]]:
    return AllOrSome.some(set())


@dataclass
class Inner:
    """Settings for CORS validation; defaults are the restrictive ones."""

    allowed_origins: AllOrSome[set[str]] = field(default_factory=_empty_some)
    allowed_origins_fns: list[OriginFn] = field(default_factory=list)

    allowed_methods: set[str] = field(default_factory=set)
    allowed_methods_baked: str | None = None

    allowed_headers: AllOrSome[set[str]] = field(default_factory=_empty_some)
    allowed_headers_baked: str | None = None

    expose_headers: AllOrSome[set[str]] = field(default_factory=_empty_some)
    expose_headers_baked: str | None = None

    max_age: int | None = None
    preflight: bool = True
    send_wildcard: bool = False
    supports_credentials: bool = False
    vary_header: bool = True

    def validate_origin(self, request: Request) -> None:
        """Raise :class:`CorsError` unless the request's origin is allowed."""
        if self.allowed_origins.is_all():
            if not self.allowed_origins_fns:
                return
            allowed: set[str] | frozenset[str] = frozenset()
        else:
            allowed = self.allowed_origins.value or frozenset()

        origin = request.headers.get(ORIGIN)
        if origin is None:
            raise CorsError(CorsErrorKind.MISSING_ORIGIN)
        if origin in allowed or self._validate_origin_fns(origin, request):
            return
        raise CorsError(CorsErrorKind.ORIGIN_NOT_ALLOWED)

    def _validate_origin_fns(self, origin: str, request: Request) -> bool:
        return any(origin_fn(origin, request) for origin_fn in self.allowed_origins_fns)

    def access_control_allow_origin(self, request: Request) -> str | None:
        """Value for ``Access-Control-Allow-Origin``; call after validation."""
        if self.allowed_origins.is_all() and self.send_wildcard:
            return "*"
        return request.headers.get(ORIGIN)

    def validate_allowed_method(self, request: Request) -> None:
        """Check ``Access-Control-Request-Method`` against the allowed methods."""
        raw = request.headers.get(ACCESS_CONTROL_REQUEST_METHOD)
        if raw is None:
            raise CorsError(CorsErrorKind.MISSING_REQUEST_METHOD)
        method = header_value_to_method(raw)
        if method is None:
            raise CorsError(CorsErrorKind.BAD_REQUEST_METHOD)
        if method not in self.allowed_methods:
            raise CorsError(CorsErrorKind.METHOD_NOT_ALLOWED)

    def validate_allowed_headers(self, request: Request) -> None:
        """Check ``Access-Control-Request-Headers`` against the allowed headers."""
        if self.allowed_headers.is_all():
            return
        allowed = self.allowed_headers.value or set()

        raw = request.headers.get(ACCESS_CONTROL_REQUEST_HEADERS)
        if raw is None:
            return
        if not _is_visible_ascii(raw):
            raise CorsError(CorsErrorKind.BAD_REQUEST_HEADERS)

        try:
            requested = {parse_header_name(name.strip()) for name in raw.split(",")}
        except HttpError:
            raise CorsError(CorsErrorKind.BAD_REQUEST_HEADERS) from None

        if not requested:
            raise CorsError(CorsErrorKind.BAD_REQUEST_HEADERS)
        if not requested <= allowed:
            raise CorsError(CorsErrorKind.HEADERS_NOT_ALLOWED)


def add_vary_header(headers: Headers) -> None:
    """Append the CORS request headers to the ``Vary`` header in place."""
    existing = headers.get(VARY)
    headers[VARY] = VARY_VALUE if existing is None else f"{existing}, {VARY_VALUE}"


def intersperse_header_values(values: Iterable[str]) -> str:
    """Join a non-empty collection of header values with ``", "``."""
    ordered = sorted(values)
    if not ordered:
        raise ValueError("cannot build a header value from an empty collection")
    return ", ".join(ordered)