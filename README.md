# webshield

Two pieces of protective middleware for Python web services:

- **CORS**: a builder (`webshield.builder.Cors`) that validates cross-origin
  requests, answers `OPTIONS` preflight requests and adds the
  `Access-Control-*` and `Vary` headers to responses.
- **Rate limiting**: a fixed-window counter per key, stored in Redis
  (`webshield.limiter.Limiter`), and a middleware
  (`webshield.rate_limiter.RateLimiter`) that answers `429 Too Many Requests`
  once a key has used up its allowance.

Both work on the small request/response types in `webshield.messages`:
`Request` (method, path, case-insensitive `Headers`, an `app_data` dict and a
`cookie(name)` helper) and `Response` (status, `Headers`, bytes body). A
service is any callable that takes a `Request` and returns a `Response`, and
each middleware is itself such a callable.

## Installation

```
pip install webshield
```

Rate limiting needs a reachable Redis server; CORS uses only the standard
library.

## CORS

`Cors()` starts from restrictive defaults: no origins, methods, request
headers or exposed headers are allowed, credentials are not supported and no
max age is sent. Each builder method returns the builder, so settings chain:

```python
from webshield.builder import Cors

cors = (
    Cors()
    .allowed_origin("http://project.local:8080")
    .allowed_origin_fn(lambda origin, request: origin.startswith("http://localhost"))
    .allowed_methods(["GET", "POST"])
    .allowed_headers(["Authorization", "Accept"])
    .allowed_header("Content-Type")
    .expose_headers(["Content-Disposition"])
    .max_age(3600)
)

middleware = cors.new_transform(service)
response = middleware(request)
```

Configuration mistakes, such as passing `"*"` to `allowed_origin` (use
`send_wildcard` instead), an invalid origin URI, method or header name, or
combining `supports_credentials` and `send_wildcard` while any origin is
allowed, are recorded by the builder and reported when `new_transform` raises
`CorsConfigError`. Only the first mistake is kept.

Requests that fail CORS validation are not passed to the service; they get a
`400 Bad Request` response whose body is the message of the matching
`webshield.cors_error.CorsError` (see `CorsErrorKind` for the list).

`Cors.permissive()` allows every standard origin, method and header, exposes
all response headers, supports credentials and sets a one-hour max age. It is
meant for local development only.

Other switches: `allow_any_origin`, `allow_any_method`, `allow_any_header`,
`expose_any_header`, `send_wildcard`, `supports_credentials`,
`disable_vary_header` and `disable_preflight`. `max_age(None)` stops the
`Access-Control-Max-Age` header from being sent.

## Rate limiting

```python
from datetime import timedelta

from webshield.limiter import Limiter

limiter = (
    Limiter.builder("redis://localhost:6379/0")
    .limit(5000)
    .period(timedelta(hours=1))
    .key_by(lambda request: request.cookie("sid"))
    .build()
)

status = limiter.count("client-key")
print(status.limit, status.remaining, status.reset_epoch_utc)
```

`build` raises `ClientError` if the Redis URL cannot be parsed; it does not
open a connection. `count` consumes one unit for the key and returns a
`Status`. Once the limit is exceeded it raises `LimitExceeded`, which carries
the `Status` in its `status` attribute; Redis failures surface as
`ClientError`. All of these derive from
`webshield.limitation_errors.LimitationError`.

Without `key_by`, requests are keyed by the cookie named by the deprecated
`cookie_name` method (default `sid`); calling `cookie_name` after `key_by`
raises `ValueError`. The default limit is 5000 requests per 3600 seconds.

`RateLimiter(service)` wraps a service and looks up the limiter in
`request.app_data[Limiter]` (raising `LookupError` if it is missing).
Requests whose key function returns `None` pass straight through, requests
over the limit get `429`, and Redis errors give `500`.

## Demo server

A greeting service wrapped in the CORS middleware, served with the standard
library's WSGI server on `127.0.0.1:8080`:

```
webshield-cors-demo --host 127.0.0.1 --port 8080
```

`webshield.cors_demo.to_wsgi(service)` is the adapter it uses to turn any
service into a WSGI application.

## What it does not do

There is no adapter for ASGI or asynchronous frameworks, and rate limit keys
cannot be taken from server-side sessions; supply a `key_by` function for
anything beyond a cookie.

## Running the tests

```
pip install -e ".[test]"
pytest
```