"""
Apple Wallet issuer provisioning extension.

After the user taps "+" in Wallet, the platform asks the issuer app three
things in order:

1. ``status()``: is anything available to add, on this device or on a
   paired watch?
2. ``pass_entries()``: one add request configuration per card it may show.
3. ``generate_add_payment_pass_request()``: the encrypted pass material for
   the card the user picked, given the platform's certificate chain and
   nonce.

Wallet enforces tight deadlines on each answer, so none of these retry and
none of them raise. A failure is logged and the answer falls back to its
empty form.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .brands import PaymentNetwork, to_payment_network
from .client import BackendRelayClient
from .details import PushProvisioningDetailsClient
from .logging import get_logger
from .models.card import Card, PushProvisioningDetails
from .models.errors import PushProvisioningError, UnsupportedBrandError
from .passes import in_wallet
from .wallet.base import PassLibrary

logger = get_logger(__name__)

ENCRYPTION_SCHEME = "ECC_V2"
PASS_STYLE = "payment"


@dataclass(frozen=True)
class ExtensionStatus:
    pass_entries_available: bool = False
    remote_pass_entries_available: bool = False
    requires_authentication: bool = False


@dataclass(frozen=True)
class AddPaymentPassRequestConfiguration:
    """Mirrors ``PKAddPaymentPassRequestConfiguration``."""

    cardholder_name: str
    primary_account_suffix: str
    payment_network: PaymentNetwork
    localized_description: str
    primary_account_identifier: Optional[str] = None
    encryption_scheme: str = ENCRYPTION_SCHEME
    style: str = PASS_STYLE


@dataclass(frozen=True)
class PassEntry:
    """One card offered in Wallet; ``identifier`` is the card id."""

    identifier: str
    title: str
    configuration: AddPaymentPassRequestConfiguration


class WalletExtension:
    """
    Answers Wallet's issuer provisioning requests.

    Args:
        relay: Backend relay listing the cardholder's cards
        library: Pass library of the device running the extension
        details: Client for the pass-add material
        title: Entry title shown in Wallet
        description: ``localized_description`` of every entry
        requires_authentication: Whether Wallet must ask the app to
            authenticate the user before listing entries
    """

    def __init__(
        self,
        relay: BackendRelayClient,
        library: PassLibrary,
        details: PushProvisioningDetailsClient,
        title: str = "Stripe Example",
        description: str = "StripeIssuingExample Card",
        requires_authentication: bool = False,
    ) -> None:
        self._relay = relay
        self._library = library
        self._details = details
        self._title = title
        self._description = description
        self._requires_authentication = requires_authentication

    async def _eligible_cards(self) -> list[Card]:
        cards = await self._relay.list_cards()
        return [card for card in cards if card.eligible_for_apple_pay]

    async def status(self) -> ExtensionStatus:
        """Whether any eligible card is missing from the local or remote wallet."""
        try:
            cards = await self._eligible_cards()
        except PushProvisioningError as e:
            logger.error("Error retrieving cards for extension status: %s", e)
            return ExtensionStatus(requires_authentication=self._requires_authentication)

        local = remote = False
        for card in cards:
            found = in_wallet(self._library, card.primary_account_identifier or "")
            local = local or not found.local
            remote = remote or not found.remote

        return ExtensionStatus(
            pass_entries_available=local,
            remote_pass_entries_available=remote,
            requires_authentication=self._requires_authentication,
        )

    def configuration_for(self, card: Card) -> AddPaymentPassRequestConfiguration:
        """
        Raises:
            UnsupportedBrandError: the brand has no PassKit network
        """
        return AddPaymentPassRequestConfiguration(
            cardholder_name=card.cardholder_name,
            primary_account_suffix=card.last4,
            payment_network=to_payment_network(card.brand),
            localized_description=self._description,
            primary_account_identifier=card.primary_account_identifier,
        )

    async def pass_entries(self) -> list[PassEntry]:
        try:
            cards = await self._eligible_cards()
        except PushProvisioningError as e:
            logger.error("Error retrieving cards for pass entries: %s", e)
            return []

        entries = []
        for card in cards:
            try:
                configuration = self.configuration_for(card)
            except UnsupportedBrandError as e:
                logger.warning("Skipping card %s: %s", card.id, e.message)
                continue
            entries.append(PassEntry(identifier=card.id, title=self._title, configuration=configuration))
        return entries

    async def generate_add_payment_pass_request(
        self,
        identifier: str,
        certificates: Sequence[bytes],
        nonce: bytes,
        nonce_signature: bytes,
    ) -> Optional[PushProvisioningDetails]:
        """Pass-add material for the entry the user picked, or None on failure."""
        try:
            return await self._details.retrieve_details(identifier, certificates, nonce, nonce_signature)
        except PushProvisioningError as e:
            logger.error("Error generating add payment pass request for card %s: %s", identifier, e)
            return None
