"""CORS validation middleware and Redis-backed fixed-window rate limiting for web services."""

__version__ = "0.1.0"