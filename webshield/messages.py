"""HTTP request and response primitives shared by the middleware."""

from __future__ import annotations

import re
import string
from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Union
from urllib.parse import urlsplit

ORIGIN = "origin"
VARY = "vary"
COOKIE = "cookie"
ACCESS_CONTROL_REQUEST_METHOD = "access-control-request-method"
ACCESS_CONTROL_REQUEST_HEADERS = "access-control-request-headers"
ACCESS_CONTROL_ALLOW_ORIGIN = "access-control-allow-origin"
ACCESS_CONTROL_ALLOW_METHODS = "access-control-allow-methods"
ACCESS_CONTROL_ALLOW_HEADERS = "access-control-allow-headers"
ACCESS_CONTROL_ALLOW_CREDENTIALS = "access-control-allow-credentials"
ACCESS_CONTROL_EXPOSE_HEADERS = "access-control-expose-headers"
ACCESS_CONTROL_MAX_AGE = "access-control-max-age"

STANDARD_METHODS = (
    "GET",
    "POST",
    "PUT",
    "DELETE",
    "HEAD",
    "OPTIONS",
    "CONNECT",
    "PATCH",
    "TRACE",
)

_TOKEN_CHARS = frozenset(string.ascii_letters + string.digits + "!#$%&'*+-.^_`|~")
_URI_CHARS = frozenset(string.ascii_letters + string.digits + "-._~:/?#[]@!$&'()*+,;=%")
_SCHEME_CHARS = frozenset(string.ascii_letters + string.digits + "+-.")


class HttpError(ValueError):
    """An invalid HTTP method, header name or URI."""


def parse_method(value: str) -> str:
    """Validate an HTTP method token; methods are case-sensitive."""
    if not value or not set(value) <= _TOKEN_CHARS:
        raise HttpError(f"invalid HTTP method: {value!r}")
    return value


def parse_header_name(name: str) -> str:
    """Validate a header name and return its lower-case form."""
    if not name or not set(name) <= _TOKEN_CHARS:
        raise HttpError(f"invalid header name: {name!r}")
    return name.lower()


def parse_uri(value: str) -> str:
    """Validate a URI (absolute, authority, path or ``*`` form) and return it."""
    if not value:
        raise HttpError("empty URI")
    if not set(value) <= _URI_CHARS:
        raise HttpError(f"invalid URI: {value!r}")
    scheme, sep, rest = value.partition("://")
    if sep:
        if not scheme or scheme[0] not in string.ascii_letters or not set(scheme) <= _SCHEME_CHARS:
            raise HttpError(f"invalid URI scheme: {value!r}")
        authority = re.split(r"[/?#]", rest, maxsplit=1)[0]
        if not authority:
            raise HttpError(f"URI has no authority: {value!r}")
        try:
            urlsplit(value).port
        except ValueError as exc:
            raise HttpError(f"invalid URI: {value!r}") from exc
    return value


HeadersInit = Union[Mapping[str, str], Iterable[tuple[str, str]], None]


class Headers(MutableMapping[str, str]):
    """Case-insensitive multi-map of header names to values.

    Item access works on the first value of a name; assignment replaces
    every value of that name. Use :meth:`add` to append another value.
    """

    def __init__(self, initial: HeadersInit = None) -> None:
        self._entries: dict[str, list[str]] = {}
        if initial is None:
            return
        if isinstance(initial, Headers):
            pairs: Iterable[tuple[str, str]] = initial.multi_items()
        elif isinstance(initial, Mapping):
            pairs = initial.items()
        else:
            pairs = initial
        for name, value in pairs:
            self.add(name, value)

    def __getitem__(self, name: str) -> str:
        return self._entries[name.lower()][0]

    def __setitem__(self, name: str, value: str) -> None:
        self._entries[name.lower()] = [value]

    def __delitem__(self, name: str) -> None:
        removed = self._entries.pop(name.lower(), None)
        if removed is None:
            raise KeyError(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, name: str, value: str) -> None:
        """Append a value for ``name``, keeping any existing values."""
        self._entries.setdefault(name.lower(), []).append(value)

    def get_all(self, name: str) -> list[str]:
        """Return every value of ``name``, in insertion order."""
        return list(self._entries.get(name.lower(), ()))

    def multi_items(self) -> Iterator[tuple[str, str]]:
        """Yield every (name, value) pair, including repeated names."""
        for name, values in self._entries.items():
            for value in values:
                yield name, value

    def __repr__(self) -> str:
        return f"Headers({list(self.multi_items())!r})"


@dataclass
class Request:
    """An incoming HTTP request."""

    method: str = "GET"
    path: str = "/"
    headers: Headers = field(default_factory=Headers)
    app_data: dict[Any, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.headers, Headers):
            self.headers = Headers(self.headers)

    def cookie(self, name: str) -> str | None:
        """Return the value of the cookie called ``name``, if sent."""
        for header in self.headers.get_all(COOKIE):
            for part in header.split(";"):
                key, sep, value = part.strip().partition("=")
                if sep and key.strip() == name:
                    return value.strip()
        return None


@dataclass
class Response:
    """An outgoing HTTP response."""

    status: int = HTTPStatus.OK
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""

    def __post_init__(self) -> None:
        if not isinstance(self.headers, Headers):
            self.headers = Headers(self.headers)

    @property
    def text(self) -> str:
        """The body decoded as UTF-8."""
        return self.body.decode()