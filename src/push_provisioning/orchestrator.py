"""
Provisioning orchestrator.

Given a card and its tokenization status, performs the one next action:

| Status      | Action                                                   |
|-------------|----------------------------------------------------------|
| GreenPath   | full push provisioning with a relay-minted ephemeral key |
| YellowPath  | resume the stuck tokenization via its reference id       |
| Tokenized   | nothing                                                  |

This is the only component that touches the view and that calls out to the
relay and the wallet SDK. It never modifies the card itself.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from .brands import network_and_tsp
from .client import BackendEphemeralKeyProvider, BackendRelayClient
from .config import ProvisioningSettings
from .logging import get_logger
from .models.card import Card
from .status import CardTokenizationStatus, GreenPath, Tokenized, YellowPath
from .wallet.base import (
    ProvisioningCancelled,
    ProvisioningFailed,
    ProvisioningSucceeded,
    TokenizeSucceeded,
    WalletClient,
)

logger = get_logger(__name__)


class ProvisioningView(Protocol):
    """UI surface the orchestrator reports to.

    ``is_alive`` turns False once the view is torn down; nothing is shown
    after that.
    """

    @property
    def is_alive(self) -> bool:
        ...

    def show_message(self, message: str) -> None:
        ...

    def show_notice(self, message: str) -> None:
        """Transient confirmation, e.g. a toast."""
        ...

    def show_error(self, message: str) -> None:
        ...

    def set_add_button_visible(self, card: Card, visible: bool) -> None:
        ...


class NullView:
    """View for headless callers; accepts and drops everything."""

    is_alive = True

    def show_message(self, message: str) -> None:
        pass

    def show_notice(self, message: str) -> None:
        pass

    def show_error(self, message: str) -> None:
        pass

    def set_add_button_visible(self, card: Card, visible: bool) -> None:
        pass


class ProvisioningAction(str, Enum):
    PUSH_PROVISION = "push_provision"
    RESOLVE_YELLOW_PATH = "resolve_yellow_path"
    NONE = "none"


class ProvisioningOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    CANCELLED = "cancelled"
    FAILED = "failed"
    ALREADY_TOKENIZED = "already_tokenized"


@dataclass(frozen=True)
class ProvisioningResult:
    action: ProvisioningAction
    outcome: ProvisioningOutcome
    card_token_id: Optional[str] = None
    error_code: Optional[str] = None
    message: Optional[str] = None


class ProvisioningOrchestrator:
    """
    Runs the next provisioning step for a classified card.

    Args:
        relay: Backend relay, used for ephemeral keys on the green path
        wallet: Wallet SDK handle
        view: Where to report progress; defaults to a NullView
        enable_logs: Passed through to the wallet SDK's provisioning flow

    Ephemeral keys are minted for the Stripe API version the wallet SDK asks
    for, so there is no version to configure here.
    """

    def __init__(
        self,
        relay: BackendRelayClient,
        wallet: WalletClient,
        view: Optional[ProvisioningView] = None,
        enable_logs: bool = True,
    ) -> None:
        self._relay = relay
        self._wallet = wallet
        self._view = view or NullView()
        self._enable_logs = enable_logs

    @classmethod
    def from_settings(
        cls,
        relay: BackendRelayClient,
        wallet: WalletClient,
        settings: ProvisioningSettings,
        view: Optional[ProvisioningView] = None,
    ) -> "ProvisioningOrchestrator":
        return cls(relay, wallet, view, enable_logs=settings.enable_logs)

    @property
    def view(self) -> ProvisioningView:
        return self._view

    @view.setter
    def view(self, view: Optional[ProvisioningView]) -> None:
        self._view = view or NullView()

    async def provision(self, card_status: CardTokenizationStatus) -> ProvisioningResult:
        """Dispatch on the card's status.

        Raises:
            UnsupportedBrandError: before any wallet call, for brands other
                than Visa and MasterCard
            Exception: relay or wallet failures

        Every failure is shown on the view before it propagates.
        """
        status = card_status.tokenization_status
        card = card_status.card

        if isinstance(status, Tokenized):
            # The card was not tokenized when the UI offered the action but is now
            logger.debug("card %s already provisioned", card.id)
            return ProvisioningResult(ProvisioningAction.NONE, ProvisioningOutcome.ALREADY_TOKENIZED)

        try:
            network, tsp = network_and_tsp(card.brand)
            if isinstance(status, GreenPath):
                logger.debug("embarking on push provisioning green path for card %s", card.id)
                return await self._push_provision(card)
            if isinstance(status, YellowPath):
                logger.debug("resolving yellow path for card %s", card.id)
                return await self._resolve_yellow_path(card, status, network, tsp)
        except Exception as e:
            logger.error("Provisioning card %s failed: %s", card.id, e)
            self._show_error(getattr(e, "message", None) or str(e) or "Unknown error")
            raise

        raise TypeError(f"Unexpected tokenization status: {status!r}")

    async def _push_provision(self, card: Card) -> ProvisioningResult:
        ephemeral_key_provider = BackendEphemeralKeyProvider(card.id, self._relay)
        result = await self._wallet.push_provision(
            card.cardholder_name,
            ephemeral_key_provider,
            enable_logs=self._enable_logs,
        )

        if isinstance(result, ProvisioningSucceeded):
            message = f"Success! Card token id: {result.card_token_id}"
            logger.info("Card %s provisioned as %s", card.id, result.card_token_id)
            self._show_message(message)
            self._set_add_button_visible(card, False)
            return ProvisioningResult(
                ProvisioningAction.PUSH_PROVISION,
                ProvisioningOutcome.SUCCEEDED,
                card_token_id=result.card_token_id,
                message=message,
            )

        if isinstance(result, ProvisioningCancelled):
            # User exited the push provisioning flow, nothing more to do
            logger.debug("push provisioning cancelled for card %s", card.id)
            return ProvisioningResult(ProvisioningAction.PUSH_PROVISION, ProvisioningOutcome.CANCELLED)

        if isinstance(result, ProvisioningFailed):
            message = f"Push provisioning error {result.code}: {result.message}"
            logger.error("%s (card %s)", message, card.id)
            self._show_error(message)
            return ProvisioningResult(
                ProvisioningAction.PUSH_PROVISION,
                ProvisioningOutcome.FAILED,
                error_code=result.code,
                message=message,
            )

        raise TypeError(f"Unexpected push provisioning result: {result!r}")

    async def _resolve_yellow_path(self, card, status: YellowPath, network, tsp) -> ProvisioningResult:
        """Resume a token stuck at identity verification.

        Happens when the user started adding the card in Google Wallet, stopped
        at the ID&V step-up and then came to this app. See
        https://developers.google.com/pay/issuers/apis/push-provisioning/android/wallet-operations#resolving_yellow_path
        """
        result = await self._wallet.tokenize(
            status.token_reference_id,
            tsp,
            card.display_name,
            network,
        )
        if isinstance(result, TokenizeSucceeded):
            message = "Card successfully provisioned"
            logger.info("%s from yellow path (card %s)", message, card.id)
            self._show_notice(message)
            self._set_add_button_visible(card, False)
            return ProvisioningResult(
                ProvisioningAction.RESOLVE_YELLOW_PATH,
                ProvisioningOutcome.SUCCEEDED,
                message=message,
            )
        logger.debug("yellow path tokenize cancelled for card %s", card.id)
        return ProvisioningResult(ProvisioningAction.RESOLVE_YELLOW_PATH, ProvisioningOutcome.CANCELLED)

    # View updates are dropped once the view is gone

    def _show_message(self, message: str) -> None:
        if self._view.is_alive:
            self._view.show_message(message)

    def _show_notice(self, message: str) -> None:
        if self._view.is_alive:
            self._view.show_notice(message)

    def _show_error(self, message: str) -> None:
        if self._view.is_alive:
            self._view.show_error(message)

    def _set_add_button_visible(self, card: Card, visible: bool) -> None:
        if self._view.is_alive:
            self._view.set_add_button_visible(card, visible)
