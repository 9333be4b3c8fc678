"""Service layer helpers for RENTFREE."""

from .logging import configure_logging, find_file_handler
from .http import HttpSettings, create_session
from .signatures import NAME_UPDATE_PREFIX, SignatureVerifier
from .names import NameUpdateService
from .directory import DirectoryService, normalize_mint

__all__ = [
    "configure_logging",
    "find_file_handler",
    "HttpSettings",
    "create_session",
    "NAME_UPDATE_PREFIX",
    "SignatureVerifier",
    "NameUpdateService",
    "DirectoryService",
    "normalize_mint",
]
