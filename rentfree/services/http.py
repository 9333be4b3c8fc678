"""HTTP client helpers for talking to the ledger endpoint."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

import requests
from requests import Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


@dataclass(frozen=True)
class HttpSettings:
    """Runtime configuration for outgoing HTTP requests."""

    timeout: float = 60.0  # read timeout in seconds
    connect_timeout: float = 10.0
    retries: int = 0
    backoff_factor: float = 0.0
    status_forcelist: Iterable[int] = (500, 502, 504)

    def as_timeout(self) -> tuple[float, float]:
        connect = max(0.1, float(self.connect_timeout))
        read = max(connect + 1.0, float(self.timeout))
        return connect, read


_LOGGER = logging.getLogger("rentfree.http")
_ALLOWED_METHODS = frozenset({"GET", "POST"})


def _build_retry(settings: HttpSettings) -> Retry:
    return Retry(
        total=max(0, settings.retries),
        connect=max(0, settings.retries),
        read=max(0, settings.retries),
        backoff_factor=max(0.0, settings.backoff_factor),
        status_forcelist=tuple(settings.status_forcelist),
        allowed_methods=_ALLOWED_METHODS,
        raise_on_status=False,
    )


def create_session(settings: HttpSettings) -> Session:
    """Return a ``requests`` session mounted with the configured retry policy."""
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=_build_retry(settings))
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    _LOGGER.info(
        "HTTP client configured: timeout=%ss connect=%ss retries=%s",
        settings.timeout,
        settings.connect_timeout,
        settings.retries,
    )
    return session
