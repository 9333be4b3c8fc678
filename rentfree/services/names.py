"""Signature-authorized updates of wallet display names."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional, Sequence

from ..errors import AuthError, ValidationError
from ..registry.repository import DisplayNameRecord, NameRegistry
from .signatures import SignatureVerifier

logger = logging.getLogger("rentfree.names")


def _now_ms() -> int:
    return int(time.time() * 1000)


def signature_bytes(signature: Any) -> bytes:
    """Convert the JSON ``signature`` field (a list of byte values) to ``bytes``."""
    if isinstance(signature, (bytes, bytearray)):
        return bytes(signature)
    if not isinstance(signature, Sequence) or isinstance(signature, str):
        raise ValidationError("Invalid signature encoding")
    if not all(isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 255 for b in signature):
        raise ValidationError("Invalid signature encoding")
    return bytes(signature)


class NameUpdateService:
    """Runs the checks for a name change, then writes it to the registry.

    Checks run in a fixed order and stop at the first failure, so nothing is
    written unless the signature is valid.
    """

    def __init__(
        self,
        registry: NameRegistry,
        verifier: Optional[SignatureVerifier] = None,
        *,
        clock_ms: Callable[[], int] = _now_ms,
    ) -> None:
        self.registry = registry
        self.verifier = verifier or SignatureVerifier()
        self._clock_ms = clock_ms

    def update_display_name(
        self,
        wallet_address: Any,
        display_name: Any,
        message: Any,
        signature: Any,
    ) -> DisplayNameRecord:
        if not wallet_address or not display_name or not message or not signature:
            raise ValidationError("Missing fields")
        if not all(isinstance(v, str) for v in (wallet_address, display_name, message)):
            raise ValidationError("Invalid field types")

        self.verifier.check_message(message)
        self.verifier.check_display_name(display_name)
        sig = signature_bytes(signature)

        if not self.verifier.verify(wallet_address, message, sig):
            logger.info("Rejected display name update for %s: bad signature", wallet_address)
            raise AuthError()

        return self.registry.upsert(wallet_address, display_name, self._clock_ms())
