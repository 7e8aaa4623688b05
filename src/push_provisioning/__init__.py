"""
Stripe Issuing push provisioning core.

Classifies Issuing cards against the device wallet (green path, yellow path,
already tokenized) and runs the matching provisioning step through injected
backend relay and wallet SDK handles.
"""

from .brands import PaymentNetwork, network_and_tsp, to_network, to_payment_network, to_tsp
from .classifier import SigningInfo, TokenizationStatusClassifier, classify
from .client import BackendEphemeralKeyProvider, BackendRelayClient
from .config import ProvisioningSettings, get_settings
from .details import PushProvisioningDetailsClient
from .eligibility import classify_cards, describe, get_eligible_cards_by_status
from .extension import AddPaymentPassRequestConfiguration, ExtensionStatus, PassEntry, WalletExtension
from .models.card import Card, EphemeralKey, PushProvisioningDetails
from .models.errors import (
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
from .models.token import CardNetwork, TokenServiceProvider, TokenState, WalletToken
from .orchestrator import (
    NullView,
    ProvisioningAction,
    ProvisioningOrchestrator,
    ProvisioningOutcome,
    ProvisioningResult,
    ProvisioningView,
)
from .session import ProvisioningSession
from .status import (
    CardTokenizationStatus,
    EligibleCards,
    EligibleCardsFailure,
    EligibleCardsResult,
    EligibleCardsSuccess,
    GreenPath,
    NotTokenized,
    TokenizationStatus,
    Tokenized,
    YellowPath,
)

__version__ = "0.1.0"

__all__ = [
    # Clients
    "BackendRelayClient",
    "BackendEphemeralKeyProvider",
    "PushProvisioningDetailsClient",
    # Classification
    "TokenizationStatusClassifier",
    "SigningInfo",
    "classify",
    "classify_cards",
    "get_eligible_cards_by_status",
    "describe",
    # Orchestration
    "ProvisioningOrchestrator",
    "ProvisioningSession",
    "ProvisioningView",
    "NullView",
    "ProvisioningAction",
    "ProvisioningOutcome",
    "ProvisioningResult",
    # Wallet extension
    "WalletExtension",
    "ExtensionStatus",
    "PassEntry",
    "AddPaymentPassRequestConfiguration",
    # Status
    "TokenizationStatus",
    "NotTokenized",
    "Tokenized",
    "GreenPath",
    "YellowPath",
    "CardTokenizationStatus",
    "EligibleCards",
    "EligibleCardsResult",
    "EligibleCardsSuccess",
    "EligibleCardsFailure",
    # Models
    "Card",
    "EphemeralKey",
    "PushProvisioningDetails",
    "WalletToken",
    "CardNetwork",
    "TokenServiceProvider",
    "TokenState",
    # Brands
    "network_and_tsp",
    "to_network",
    "to_tsp",
    "PaymentNetwork",
    "to_payment_network",
    # Config
    "ProvisioningSettings",
    "get_settings",
    # Errors
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
