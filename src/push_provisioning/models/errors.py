"""Error models for push provisioning."""
from __future__ import annotations

from typing import Any, Optional


class PushProvisioningError(Exception):
    """Base exception for push provisioning.

    ``message`` is always safe to show to the cardholder.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "PUSH_PROVISIONING_ERROR"
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


class ConfigurationError(PushProvisioningError):
    """Invalid or missing configuration. Never retried."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code="CONFIGURATION_ERROR", details=details)


class UnsupportedBrandError(ConfigurationError):
    """Card brand with no known network / token service provider mapping."""

    def __init__(self, brand: str):
        super().__init__(f"Unexpected card brand: {brand}", details={"brand": brand})
        self.code = "UNSUPPORTED_BRAND"
        self.brand = brand


class RelayError(PushProvisioningError):
    """Failure talking to the backend relay."""


class RelayAPIError(RelayError):
    """Non-2xx response from the backend relay."""

    def __init__(self, message: str, status_code: int, body: Optional[str] = None):
        super().__init__(
            message,
            code="RELAY_API_ERROR",
            details={"status_code": status_code, "body": body},
        )
        self.status_code = status_code
        self.body = body

    @classmethod
    def from_response(cls, status_code: int, body: str, action: str) -> "RelayAPIError":
        """Create a RelayAPIError from a relay response body."""
        text = body.strip()
        message = f"Error {action}: {status_code} {text}" if text else f"Error {action}: {status_code}"
        return cls(message, status_code=status_code, body=body)


class AuthenticationError(RelayAPIError):
    """The relay rejected the basic auth credentials."""

    def __init__(self, message: str = "Not authorized", body: Optional[str] = None):
        super().__init__(message, status_code=401, body=body)
        self.code = "AUTHENTICATION_ERROR"


class RelayConnectionError(RelayError):
    """The relay could not be reached (DNS, connect, timeout)."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message, code="RELAY_CONNECTION_ERROR")
        self.cause = cause


class WalletError(PushProvisioningError):
    """Failure reported by the wallet SDK."""

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code=code or "WALLET_ERROR", details=details)


class PushProvisioningDetailsError(PushProvisioningError):
    """The pass-add flow could not produce an add payment pass request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(
            message,
            code="PUSH_PROVISIONING_DETAILS_ERROR",
            details={"status_code": status_code} if status_code is not None else None,
        )
        self.status_code = status_code


class CardNotFoundError(PushProvisioningError):
    """Card id unknown to the current session."""

    def __init__(self, card_id: str):
        super().__init__(
            f"Card not found: {card_id}",
            code="CARD_NOT_FOUND",
            details={"card_id": card_id},
        )
        self.card_id = card_id
