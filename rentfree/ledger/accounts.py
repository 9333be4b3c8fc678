"""Token-account source backed by a Solana JSON-RPC endpoint."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, List, Optional, Protocol

import requests
from requests import Response, Session

from ..errors import RateLimited, UpstreamUnavailable
from ..services.http import HttpSettings, create_session

# Token account layout (SPL token program):
# offset 0..31  = mint
# offset 32..63 = owner
# offset 64..71 = amount (u64 LE)
TOKEN_ACCOUNT_SIZE = 165
MINT_OFFSET = 0

_RATE_LIMIT_STATUS = 429
_RATE_LIMIT_RPC_CODES = frozenset({429, -32429})

logger = logging.getLogger("rentfree.ledger")


class AccountSource(Protocol):
    """Anything able to return the raw token accounts of a mint."""

    def fetch(self, mint_id: str) -> List[bytes]:
        ...


def _retry_after(response: Response) -> Optional[int]:
    raw = response.headers.get("Retry-After")
    if not raw:
        return None
    try:
        return max(0, int(raw.strip()))
    except ValueError:
        return None


class RpcAccountSource:
    """Fetches token accounts with ``getProgramAccounts``.

    Filtering happens server-side: only accounts of ``TOKEN_ACCOUNT_SIZE``
    bytes whose first 32 bytes equal the mint are returned. The call is made
    exactly once per ``fetch``; throttling surfaces as ``RateLimited`` and
    every other failure as ``UpstreamUnavailable``.
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        program_id: str,
        commitment: str = "confirmed",
        settings: Optional[HttpSettings] = None,
        session: Optional[Session] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.program_id = program_id
        self.commitment = commitment
        self.settings = settings or HttpSettings()
        self._session = session or create_session(self.settings)

    def build_request(self, mint_id: str) -> dict[str, Any]:
        return {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "getProgramAccounts",
            "params": [
                self.program_id,
                {
                    "encoding": "base64",
                    "commitment": self.commitment,
                    "filters": [
                        {"dataSize": TOKEN_ACCOUNT_SIZE},
                        {"memcmp": {"offset": MINT_OFFSET, "bytes": mint_id}},
                    ],
                },
            ],
        }

    def fetch(self, mint_id: str) -> List[bytes]:
        payload = self.build_request(mint_id)
        try:
            response = self._session.post(
                self.rpc_url,
                json=payload,
                timeout=self.settings.as_timeout(),
            )
        except requests.RequestException as exc:
            logger.warning("getProgramAccounts transport failure for %s: %s", mint_id, exc)
            raise UpstreamUnavailable(f"ledger request failed: {exc}") from exc

        if response.status_code == _RATE_LIMIT_STATUS:
            logger.warning("getProgramAccounts rate-limited for %s", mint_id)
            raise RateLimited("ledger endpoint returned 429", retry_after=_retry_after(response))
        if not response.ok:
            raise UpstreamUnavailable(f"ledger endpoint returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamUnavailable("ledger endpoint returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise UpstreamUnavailable("ledger endpoint returned an unexpected payload")

        error = data.get("error")
        if error:
            code = error.get("code") if isinstance(error, dict) else None
            if code in _RATE_LIMIT_RPC_CODES:
                raise RateLimited(f"ledger RPC error {code}")
            raise UpstreamUnavailable(f"ledger RPC error: {error}")

        records = self._decode_result(data.get("result"))
        logger.info("Fetched %s token accounts for mint %s", len(records), mint_id)
        return records

    @staticmethod
    def _decode_result(result: Any) -> List[bytes]:
        if not isinstance(result, list):
            raise UpstreamUnavailable("ledger result is not a list of accounts")
        records: List[bytes] = []
        for item in result:
            try:
                encoded = item["account"]["data"][0]
                records.append(base64.b64decode(encoded, validate=True))
            except (KeyError, IndexError, TypeError, binascii.Error) as exc:
                raise UpstreamUnavailable("ledger returned a malformed account entry") from exc
        return records
