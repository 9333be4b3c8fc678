"""Middleware utilities for the RENTFREE Flask application."""

from .errors import add_cors_headers, cors_preflight, error_response, json_error, register_error_handlers

__all__ = [
    "add_cors_headers",
    "cors_preflight",
    "error_response",
    "json_error",
    "register_error_handlers",
]
