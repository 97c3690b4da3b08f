"""Typed error taxonomy for the generation pipeline.

Adapters translate vendor-specific failures into these classes at the HTTP
boundary. The orchestrator never re-interprets them; callers branch on the
exception type (or :attr:`OrchestrationError.kind`) to decide user messaging
and retry policy. The raw vendor text is kept in ``vendor_message`` for
logging only.
"""

from __future__ import annotations

from enum import StrEnum

__all__ = [
    "ErrorKind",
    "OrchestrationError",
    "InvalidRequest",
    "UnknownProvider",
    "MissingCredentials",
    "TransportFailure",
    "VendorError",
    "VendorProtocolError",
    "VendorResponseUnparsable",
    "VisionUnavailable",
    "VisionMalformed",
    "OrchestrationTimeout",
]

GENERIC_FAILURE_MESSAGE = "Image generation failed, please try again later"


class ErrorKind(StrEnum):
    """Stable identifiers for orchestration failures."""

    INVALID_REQUEST = "invalid_request"
    UNKNOWN_PROVIDER = "unknown_provider"
    MISSING_CREDENTIALS = "missing_credentials"
    TRANSPORT_FAILURE = "transport_failure"
    VENDOR_ERROR = "vendor_error"
    VENDOR_PROTOCOL_ERROR = "vendor_protocol_error"
    VISION_UNAVAILABLE = "vision_unavailable"
    VISION_MALFORMED = "vision_malformed"
    ORCHESTRATION_TIMEOUT = "orchestration_timeout"


class OrchestrationError(Exception):
    """Base class for every failure surfaced by the orchestrator."""

    kind: ErrorKind
    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        provider_key: str | None = None,
        vendor_message: str | None = None,
        http_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.provider_key = provider_key
        self.vendor_message = vendor_message
        self.http_status = http_status

    @property
    def user_message(self) -> str:
        """Text that is safe to show to the end user."""

        return GENERIC_FAILURE_MESSAGE

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(kind={self.kind.value!r}, "
            f"provider_key={self.provider_key!r}, http_status={self.http_status!r}, "
            f"message={self.message!r})"
        )


class InvalidRequest(OrchestrationError):
    """Raised when a request violates its modality requirements."""

    kind = ErrorKind.INVALID_REQUEST

    @property
    def user_message(self) -> str:
        return self.message


class UnknownProvider(OrchestrationError):
    """Raised locally when no adapter is registered for the provider key."""

    kind = ErrorKind.UNKNOWN_PROVIDER


class MissingCredentials(OrchestrationError):
    """Raised before any network call when a provider has no API key."""

    kind = ErrorKind.MISSING_CREDENTIALS


class TransportFailure(OrchestrationError):
    """Connection-level failure reaching a vendor."""

    kind = ErrorKind.TRANSPORT_FAILURE
    retryable = True


class VendorError(OrchestrationError):
    """Vendor returned a well-formed error message."""

    kind = ErrorKind.VENDOR_ERROR

    @property
    def user_message(self) -> str:
        return self.vendor_message or self.message


class VendorProtocolError(OrchestrationError):
    """Vendor response did not match the shape the adapter expects."""

    kind = ErrorKind.VENDOR_PROTOCOL_ERROR


class VendorResponseUnparsable(VendorProtocolError):
    """Vendor response body is not valid JSON."""


class VisionUnavailable(OrchestrationError):
    """Vision endpoint could not be reached or answered with non-2xx."""

    kind = ErrorKind.VISION_UNAVAILABLE
    retryable = True


class VisionMalformed(OrchestrationError):
    """Vision endpoint answered without the expected completion text."""

    kind = ErrorKind.VISION_MALFORMED


class OrchestrationTimeout(OrchestrationError):
    """Polling or request budget was exhausted before a terminal state."""

    kind = ErrorKind.ORCHESTRATION_TIMEOUT
    retryable = True
