"""Wallet SDK protocols, change events and the in-memory sandbox wallet."""

from .base import (
    EphemeralKeyProvider,
    PassLibrary,
    ProvisioningCancelled,
    ProvisioningFailed,
    ProvisioningSucceeded,
    PushProvisioningResult,
    SecureElementPass,
    TokenizeCancelled,
    TokenizeResult,
    TokenizeSucceeded,
    WalletClient,
)
from .events import ChangedPass, WalletChangeEvent, WalletEvents, WalletSubscription
from .memory import InMemoryWallet

__all__ = [
    "ChangedPass",
    "EphemeralKeyProvider",
    "InMemoryWallet",
    "PassLibrary",
    "ProvisioningCancelled",
    "ProvisioningFailed",
    "ProvisioningSucceeded",
    "PushProvisioningResult",
    "SecureElementPass",
    "TokenizeCancelled",
    "TokenizeResult",
    "TokenizeSucceeded",
    "WalletChangeEvent",
    "WalletClient",
    "WalletEvents",
    "WalletSubscription",
]
