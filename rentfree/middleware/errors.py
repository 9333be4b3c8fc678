"""Error and response helpers.

Any blueprint can produce consistent JSON error bodies through these helpers;
``register_error_handlers`` makes Flask's own 404/405/500 answers follow the
same ``{"error": ...}`` shape.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from flask import Flask, Response, jsonify, make_response, request
from werkzeug.exceptions import HTTPException

from ..errors import RateLimited, RentfreeError

logger = logging.getLogger("rentfree.api")


def json_error(message: str, status: int = 400, *, retry_after: Optional[int] = None):
    """Return a JSON error tuple suitable as a Flask view return value."""
    response = jsonify({"error": str(message)})
    response.status_code = int(status)
    if retry_after is not None:
        response.headers["Retry-After"] = str(retry_after)
    return response


def error_response(exc: RentfreeError, fallback: str):
    """Render a taxonomy error; 5xx errors other than throttling show ``fallback``."""
    if isinstance(exc, RateLimited):
        return json_error(exc.public_message, exc.status, retry_after=exc.retry_after)
    if exc.status >= 500:
        return json_error(fallback, 500)
    return json_error(exc.message, exc.status)


def add_cors_headers(response: Response, allowed_origins: Iterable[str] = ("*",)) -> Response:
    """Add CORS headers for browser clients of the directory API."""
    origins = list(allowed_origins)
    origin = request.headers.get("Origin")
    if "*" in origins:
        response.headers.setdefault("Access-Control-Allow-Origin", "*")
    elif origin and origin in origins:
        response.headers["Access-Control-Allow-Origin"] = origin
        vary = response.headers.get("Vary")
        response.headers["Vary"] = f"{vary}, Origin" if vary else "Origin"
    response.headers.setdefault("Access-Control-Allow-Headers", "Content-Type, Authorization")
    response.headers.setdefault("Access-Control-Allow-Methods", "GET, POST, OPTIONS")
    return response


def cors_preflight() -> Response:
    """Answer an OPTIONS pre-flight request."""
    return make_response("", 204)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return json_error(exc.description or exc.name, exc.code or 500)

    @app.errorhandler(RentfreeError)
    def _rentfree_error(exc: RentfreeError):
        if exc.status >= 500 and not isinstance(exc, RateLimited):
            logger.error("Unhandled %s: %s", type(exc).__name__, exc, exc_info=exc)
        return error_response(exc, "Internal server error")

    @app.errorhandler(Exception)
    def _unexpected(exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return json_error("Internal server error", 500)
