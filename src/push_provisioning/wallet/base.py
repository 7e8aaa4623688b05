"""Wallet SDK seams.

The platform SDKs (Google TapAndPay plus the Stripe push provisioning
activity on Android, PassKit on iOS) are opaque collaborators. Adapters
implement these protocols and are injected into the classifier and the
orchestrator.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol, Union

from ..models.token import CardNetwork, TokenServiceProvider, WalletToken

# Called by the add-card flow with the Stripe API version; returns the raw
# ephemeral key JSON.
EphemeralKeyProvider = Callable[[str], Awaitable[str]]


@dataclass(frozen=True)
class ProvisioningSucceeded:
    card_token_id: str


@dataclass(frozen=True)
class ProvisioningCancelled:
    """The user exited the push provisioning flow."""


@dataclass(frozen=True)
class ProvisioningFailed:
    code: str
    message: str


PushProvisioningResult = Union[ProvisioningSucceeded, ProvisioningCancelled, ProvisioningFailed]


@dataclass(frozen=True)
class TokenizeSucceeded:
    pass


@dataclass(frozen=True)
class TokenizeCancelled:
    pass


TokenizeResult = Union[TokenizeSucceeded, TokenizeCancelled]


class WalletClient(Protocol):
    """Google Pay side of the wallet SDK."""

    async def list_tokens(self) -> list[WalletToken]:
        """All tokens this app may see, unfiltered and in SDK order."""
        ...

    async def is_tokenized(
        self,
        identifier: str,
        network: CardNetwork,
        token_service_provider: TokenServiceProvider,
    ) -> bool:
        ...

    async def tokenize(
        self,
        token_reference_id: str,
        token_service_provider: TokenServiceProvider,
        display_name: str,
        network: CardNetwork,
    ) -> TokenizeResult:
        """Resume a yellow path tokenization."""
        ...

    async def push_provision(
        self,
        cardholder_name: str,
        ephemeral_key_provider: EphemeralKeyProvider,
        enable_logs: bool = True,
    ) -> PushProvisioningResult:
        """Run the full add-to-wallet flow for a card."""
        ...


@dataclass(frozen=True)
class SecureElementPass:
    primary_account_identifier: str
    primary_account_number_suffix: str


class PassLibrary(Protocol):
    """Apple Pay side of the wallet SDK (PKPassLibrary)."""

    def passes(self) -> list[SecureElementPass]:
        """Passes in the local (this device) wallet."""
        ...

    def remote_secure_element_passes(self) -> list[SecureElementPass]:
        """Passes on paired devices, e.g. a watch."""
        ...

    def can_add_secure_element_pass(self, primary_account_identifier: str) -> bool:
        ...
