"""Detached-signature checks for display-name updates."""

from __future__ import annotations

import logging

import base58
from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from ..errors import ValidationError

NAME_UPDATE_PREFIX = "RENTFREE_NAME_UPDATE_V1:"
NAME_MIN_LENGTH = 1
NAME_MAX_LENGTH = 24
PUBLIC_KEY_SIZE = 32

logger = logging.getLogger("rentfree.signatures")


def utf16_length(text: str) -> int:
    """Length in UTF-16 code units, the unit browser clients count in."""
    return len(text.encode("utf-16-le", "surrogatepass")) // 2


class SignatureVerifier:
    """Checks that a wallet owner signed a name-update message.

    The message must carry ``prefix`` so that a signature produced for some
    other purpose cannot be replayed here. Freshness (nonces, timestamps) is
    left to whatever the client embeds after the prefix.
    """

    def __init__(
        self,
        prefix: str = NAME_UPDATE_PREFIX,
        *,
        min_length: int = NAME_MIN_LENGTH,
        max_length: int = NAME_MAX_LENGTH,
    ) -> None:
        self.prefix = prefix
        self.min_length = min_length
        self.max_length = max_length

    def check_message(self, message: str) -> None:
        if not message.startswith(self.prefix):
            raise ValidationError("Invalid message prefix")

    def check_display_name(self, display_name: str) -> None:
        if not self.min_length <= utf16_length(display_name) <= self.max_length:
            raise ValidationError("Invalid name length")

    def verify(self, wallet_address: str, message: str, signature: bytes) -> bool:
        """Return whether ``signature`` signs ``message`` under ``wallet_address``.

        Raises ``ValidationError`` when the message lacks the namespace prefix.
        Undecodable keys and malformed signatures are reported as ``False``.
        """
        self.check_message(message)
        try:
            public_key = base58.b58decode(wallet_address)
        except ValueError:
            logger.debug("Wallet address %r is not base58", wallet_address)
            return False
        if len(public_key) != PUBLIC_KEY_SIZE:
            return False
        try:
            VerifyKey(public_key).verify(message.encode("utf-8"), bytes(signature))
        except (BadSignatureError, ValueError, TypeError):
            return False
        return True
