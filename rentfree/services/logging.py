"""Logging helpers for RENTFREE.

The package logger gets a console handler and, when a path is configured, a
rotating file handler that writes one JSON object per line. Both handlers mask
the API key that hosted Solana RPC URLs carry in their query string.
"""

from __future__ import annotations

import json
import logging
import os
import re
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

CONSOLE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
PACKAGE_LOGGER = "rentfree"
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 3

_RPC_API_KEY = re.compile(r"(api[_-]?key=)[^&\s]+", re.I)
_BEARER = re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+")


def mask_secrets(text: str) -> str:
    return _BEARER.sub(r"\1***", _RPC_API_KEY.sub(r"\1***", text))


class SensitiveDataFilter(logging.Filter):
    """Renders the record message once and masks RPC credentials in it."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = mask_secrets(record.getMessage())
        record.args = ()
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry = {
            "ts": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = mask_secrets(self.formatException(record.exc_info))
        return json.dumps(entry, ensure_ascii=False)


def resolve_level(level: str | int | None) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level or "INFO").upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def find_file_handler(logger: logging.Logger, log_file_path: Path) -> Optional[RotatingFileHandler]:
    target = os.path.abspath(log_file_path)
    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler) and handler.baseFilename == target:
            return handler
    return None


def configure_logging(
    log_file_path: Optional[Path] = None,
    *,
    level: str | int | None = None,
    console: bool = True,
) -> logging.Logger:
    """Attach handlers to the ``rentfree`` logger; repeated calls reuse them."""
    resolved_level = resolve_level(level)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(resolved_level)

    if console and not any(getattr(h, "_rentfree_console", False) for h in logger.handlers):
        stream = logging.StreamHandler(sys.stdout)
        stream.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        stream.addFilter(SensitiveDataFilter())
        stream._rentfree_console = True  # type: ignore[attr-defined]
        logger.addHandler(stream)

    if log_file_path is not None and find_file_handler(logger, log_file_path) is None:
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_file_path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
        )
        handler.addFilter(SensitiveDataFilter())
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)

    return logger
