"""A small demo server answering every request through a CORS middleware."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable, Iterable
from http import HTTPStatus
from typing import Any
from wsgiref.simple_server import make_server

from webshield.builder import Cors
from webshield.messages import Headers, Request, Response
from webshield.middleware import CorsMiddleware, Service

logger = logging.getLogger(__name__)

GREETING = "Hello, cross-origin world!"


def _hello(request: Request) -> Response:
    return Response(
        headers={"content-type": "text/plain; charset=utf-8"},
        body=GREETING.encode(),
    )


def _localhost_origin(origin: str, request: Request) -> bool:
    return origin.startswith("http://localhost")


def create_app() -> CorsMiddleware:
    """Build the demo service with a restrictive CORS configuration."""
    return (
        Cors()
        .allowed_origin("http://project.local:8080")
        .allowed_origin_fn(_localhost_origin)
        .allowed_methods(["GET", "POST"])
        .allowed_headers(["Authorization", "Accept"])
        .allowed_header("Content-Type")
        .expose_headers(["Content-Disposition"])
        .max_age(3600)
        .new_transform(_hello)
    )


def _request_from_environ(environ: dict[str, Any]) -> Request:
    headers = Headers()
    for key, value in environ.items():
        if key.startswith("HTTP_"):
            headers.add(key[5:].replace("_", "-").lower(), value)
        elif key in ("CONTENT_TYPE", "CONTENT_LENGTH") and value:
            headers.add(key.replace("_", "-").lower(), value)
    return Request(
        method=environ.get("REQUEST_METHOD", "GET"),
        path=environ.get("PATH_INFO", "/") or "/",
        headers=headers,
    )


def _status_line(status: int) -> str:
    try:
        phrase = HTTPStatus(status).phrase
    except ValueError:
        phrase = ""
    return f"{int(status)} {phrase}".rstrip()


def to_wsgi(service: Service) -> Callable[[dict[str, Any], Callable[..., Any]], Iterable[bytes]]:
    """Adapt a request/response service into a WSGI application."""

    def app(environ: dict[str, Any], start_response: Callable[..., Any]) -> Iterable[bytes]:
        response = service(_request_from_environ(environ))
        start_response(_status_line(response.status), list(response.headers.multi_items()))
        return [response.body]

    return app


def main(argv: list[str] | None = None) -> int:
    """Serve the demo application until interrupted."""
    parser = argparse.ArgumentParser(description="Serve a CORS-protected greeting.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8080)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    logger.info("starting HTTP server at http://localhost:%d", args.port)

    with make_server(args.host, args.port, to_wsgi(create_app())) as server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0