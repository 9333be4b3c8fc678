"""Flask application entry point for the RENTFREE backend."""

from __future__ import annotations

import atexit
import logging
import sys
from typing import Optional

from flask import Flask, request

from .bootstrap import RentfreeContext, build_context
from .config import AppConfig, load_app_config
from .errors import ConfigError
from .middleware.errors import add_cors_headers, cors_preflight, register_error_handlers
from .routes import register_blueprints
from .services.logging import configure_logging


def create_app(config: Optional[AppConfig] = None, *, context: Optional[RentfreeContext] = None) -> Flask:
    """Instantiate and configure the Flask application."""
    cfg = context.config if context is not None else (config or load_app_config())
    ctx = context or build_context(cfg)

    app = Flask(__name__)
    app.config.update(cfg.to_flask_config())
    app.extensions["rentfree"] = ctx
    app.json.sort_keys = False

    origins = tuple(cfg.cors_origins)

    @app.before_request
    def _preflight():
        if request.method == "OPTIONS":
            return cors_preflight()
        return None

    @app.after_request
    def _cors(response):
        return add_cors_headers(response, origins)

    register_error_handlers(app)
    register_blueprints(app, ctx)
    return app


def main() -> None:
    try:
        config = load_app_config()
    except ConfigError as exc:
        configure_logging(level="INFO")
        logging.getLogger("rentfree").error("%s", exc)
        sys.exit(1)
    configure_logging(config.log_file_path, level=config.log_level)
    try:
        ctx = build_context(config)
    except ConfigError as exc:
        logging.getLogger("rentfree").error("%s", exc)
        sys.exit(1)
    app = create_app(context=ctx)
    atexit.register(ctx.shutdown)
    app.logger.info("RENTFREE backend listening on port %s", config.port)
    app.run(host=config.host, port=config.port, threaded=True)


if __name__ == "__main__":
    main()
