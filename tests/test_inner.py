import pytest

from webshield.all_or_some import AllOrSome
from webshield.cors_error import CorsError, CorsErrorKind
from webshield.inner import (
    Inner,
    add_vary_header,
    header_value_to_method,
    intersperse_header_values,
)
from webshield.messages import STANDARD_METHODS, Headers, Request

VARY = "Origin, Access-Control-Request-Method, Access-Control-Request-Headers"


def _kind(call, request):
    with pytest.raises(CorsError) as info:
        call(request)
    return info.value.kind


def _preflight_inner():
    return Inner(
        allowed_origins=AllOrSome.all(),
        send_wildcard=True,
        max_age=3600,
        allowed_methods={"GET", "OPTIONS", "POST"},
        allowed_headers=AllOrSome.some({"authorization", "accept", "content-type"}),
    )


def test_validate_not_allowed_origin():
    inner = Inner(allowed_origins=AllOrSome.some({"https://www.example.com"}))
    request = Request(
        method="GET",
        headers={"Origin": "https://www.unknown.com", "Access-Control-Request-Headers": "DNT"},
    )
    assert _kind(inner.validate_origin, request) is CorsErrorKind.ORIGIN_NOT_ALLOWED
    assert _kind(inner.validate_allowed_method, request) is CorsErrorKind.MISSING_REQUEST_METHOD
    assert _kind(inner.validate_allowed_headers, request) is CorsErrorKind.HEADERS_NOT_ALLOWED


def test_preflight_not_allowed_header():
    inner = _preflight_inner()
    request = Request(
        method="OPTIONS",
        headers={"Origin": "https://www.example.com", "Access-Control-Request-Headers": "X-Not-Allowed"},
    )
    assert _kind(inner.validate_allowed_method, request) is CorsErrorKind.MISSING_REQUEST_METHOD
    assert _kind(inner.validate_allowed_headers, request) is CorsErrorKind.HEADERS_NOT_ALLOWED


def test_preflight_method_is_case_sensitive():
    inner = _preflight_inner()
    request = Request(
        method="OPTIONS",
        headers={"Origin": "https://www.example.com", "Access-Control-Request-Method": "put"},
    )
    assert _kind(inner.validate_allowed_method, request) is CorsErrorKind.METHOD_NOT_ALLOWED
    assert inner.validate_allowed_headers(request) is None


def test_preflight_allowed_request_passes():
    inner = _preflight_inner()
    request = Request(
        method="OPTIONS",
        headers={
            "Origin": "https://www.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "AUTHORIZATION,ACCEPT",
        },
    )
    inner.validate_origin(request)
    inner.validate_allowed_method(request)
    inner.validate_allowed_headers(request)
    assert inner.access_control_allow_origin(request) == "*"


def test_bad_request_method():
    inner = Inner(allowed_methods=set(STANDARD_METHODS))
    for value in ("", "GE T", "GÉT"):
        request = Request(headers={"Access-Control-Request-Method": value})
        assert _kind(inner.validate_allowed_method, request) is CorsErrorKind.BAD_REQUEST_METHOD


@pytest.mark.parametrize("value", ["a,,b", "bad name", "é"])
def test_bad_request_headers(value):
    inner = Inner(allowed_headers=AllOrSome.some({"a", "b"}))
    request = Request(headers={"Access-Control-Request-Headers": value})
    assert _kind(inner.validate_allowed_headers, request) is CorsErrorKind.BAD_REQUEST_HEADERS


def test_any_header_allowed_when_all():
    inner = Inner(allowed_headers=AllOrSome.all())
    request = Request(headers={"Access-Control-Request-Headers": "x,,y"})
    assert inner.validate_allowed_headers(request) is None


def test_missing_origin():
    inner = Inner(allowed_origins=AllOrSome.some({"https://www.example.com"}))
    assert _kind(inner.validate_origin, Request()) is CorsErrorKind.MISSING_ORIGIN


def test_all_origins_without_fns_need_no_origin():
    inner = Inner(allowed_origins=AllOrSome.all())
    assert inner.validate_origin(Request()) is None
    assert inner.access_control_allow_origin(Request()) is None


def test_allow_fn_origin_equals_head_origin():
    seen = []

    def origin_fn(origin, request):
        seen.append(origin)
        assert origin == request.headers["origin"]
        return True

    inner = Inner(
        allowed_origins=AllOrSome.some(set()),
        allowed_origins_fns=[origin_fn],
        allowed_methods=set(STANDARD_METHODS),
        allowed_headers=AllOrSome.all(),
    )
    request = Request(
        method="OPTIONS",
        headers={"Origin": "https://www.example.com", "Access-Control-Request-Method": "POST"},
    )
    inner.validate_origin(request)
    inner.validate_allowed_method(request)
    assert seen == ["https://www.example.com"]


def test_all_origins_with_fn_only_allows_when_fn_agrees():
    inner = Inner(
        allowed_origins=AllOrSome.all(),
        allowed_origins_fns=[lambda origin, request: "dnt" in request.headers],
    )
    plain = Request(headers={"Origin": "http://example.com"})
    assert _kind(inner.validate_origin, plain) is CorsErrorKind.ORIGIN_NOT_ALLOWED

    with_dnt = Request(headers={"Origin": "http://example.com", "DNT": "1"})
    inner.validate_origin(with_dnt)
    assert inner.access_control_allow_origin(with_dnt) == "http://example.com"


def test_access_control_allow_origin_echoes():
    request = Request(headers={"Origin": "https://example.org"})
    some = Inner(allowed_origins=AllOrSome.some({"https://example.org"}), send_wildcard=True)
    assert some.access_control_allow_origin(request) == "https://example.org"
    all_no_wildcard = Inner(allowed_origins=AllOrSome.all())
    assert all_no_wildcard.access_control_allow_origin(request) == "https://example.org"


def test_add_vary_header_fresh():
    headers = Headers()
    add_vary_header(headers)
    assert headers["vary"] == VARY


def test_add_vary_header_appends():
    headers = Headers({"Vary": "Accept"})
    add_vary_header(headers)
    assert headers["vary"] == "Accept, " + VARY


def test_intersperse_single():
    assert intersperse_header_values({"GET"}) == "GET"


def test_intersperse_multiple_round_trip():
    values = {"GET", "OPTIONS", "POST"}
    joined = intersperse_header_values(values)
    assert set(joined.split(", ")) == values


def test_intersperse_empty_raises():
    with pytest.raises(ValueError):
        intersperse_header_values(set())


def test_header_value_to_method():
    assert header_value_to_method("POST") == "POST"
    assert header_value_to_method("") is None
    assert header_value_to_method("PÖST") is None


def test_default_inner_is_restrictive():
    inner = Inner()
    assert inner.allowed_origins == AllOrSome.some(set())
    assert inner.allowed_methods == set()
    assert inner.preflight and inner.vary_header
    assert not inner.send_wildcard and not inner.supports_credentials