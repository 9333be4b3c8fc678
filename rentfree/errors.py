"""Exception taxonomy for the RENTFREE backend.

Every error raised on purpose by the package derives from ``RentfreeError``
and carries the HTTP status it maps to plus the message that is safe to show
to a client. Route handlers translate these into JSON responses; anything
else is treated as an internal failure.
"""

from __future__ import annotations

from typing import Optional


class RentfreeError(Exception):
    """Base class for all RENTFREE errors."""

    status: int = 500
    public_message: str = "Internal error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.public_message)

    @property
    def message(self) -> str:
        return str(self)


class ConfigError(RentfreeError):
    """Raised when required configuration is missing or invalid."""


class ValidationError(RentfreeError):
    """Client-side mistake: missing fields, bad prefix, bad name length."""

    status = 400
    public_message = "Invalid request"


class AuthError(RentfreeError):
    """Signature verification failed.

    The message is fixed so that callers cannot learn which internal check
    rejected the request.
    """

    status = 401
    public_message = "Signature verification failed"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(self.public_message)
        self.detail = message


class UpstreamError(RentfreeError):
    """Base class for failures of the external ledger service."""


class RateLimited(UpstreamError):
    """The ledger endpoint throttled the request; the caller may retry later."""

    status = 503
    public_message = "Upstream RPC rate-limited. Try again in a minute."

    def __init__(self, message: Optional[str] = None, *, retry_after: Optional[int] = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class UpstreamUnavailable(UpstreamError):
    """The ledger endpoint failed for any reason other than throttling."""

    public_message = "Upstream ledger unavailable"


class InternalError(RentfreeError):
    """Unexpected failure: undecodable records, storage I/O errors."""
