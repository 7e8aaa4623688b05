"""Push provisioning models."""
from .base import ProvisioningModel
from .card import Card, CardsResponse, EphemeralKey, PushProvisioningDetails
from .token import CardNetwork, TokenServiceProvider, TokenState, WalletToken
from .errors import (
    AuthenticationError,
    CardNotFoundError,
    ConfigurationError,
    PushProvisioningDetailsError,
    PushProvisioningError,
    RelayAPIError,
    RelayConnectionError,
    RelayError,
    UnsupportedBrandError,
    WalletError,
)

__all__ = [
    "ProvisioningModel",
    "Card",
    "CardsResponse",
    "EphemeralKey",
    "PushProvisioningDetails",
    "CardNetwork",
    "TokenServiceProvider",
    "TokenState",
    "WalletToken",
    "PushProvisioningError",
    "ConfigurationError",
    "UnsupportedBrandError",
    "RelayError",
    "RelayAPIError",
    "AuthenticationError",
    "RelayConnectionError",
    "WalletError",
    "PushProvisioningDetailsError",
    "CardNotFoundError",
]
