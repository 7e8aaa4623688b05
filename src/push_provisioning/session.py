"""Long-lived provisioning session.

Ties classification, provisioning and wallet change events together for a
UI that stays open. Tokenization status is never trusted across a wallet
change. Every handled change event bumps a generation counter, and an event
still queued on the subscription counts as a change as well. Stored statuses
from an older generation are re-classified before anything acts on them. A
refresh that finishes after a newer one started is discarded.
"""
from __future__ import annotations

import asyncio
import contextlib
from typing import Optional

from .classifier import TokenizationStatusClassifier
from .client import BackendRelayClient
from .eligibility import get_eligible_cards_by_status
from .logging import get_logger
from .models.errors import CardNotFoundError
from .orchestrator import ProvisioningOrchestrator, ProvisioningOutcome, ProvisioningResult
from .passes import backfill_primary_account_identifier
from .status import (
    CardTokenizationStatus,
    EligibleCards,
    EligibleCardsResult,
    EligibleCardsSuccess,
)
from .wallet.events import WalletChangeEvent, WalletEvents, WalletSubscription

logger = get_logger(__name__)


class ProvisioningSession:
    """
    Keeps the current classification fresh and provisions from it.

    Args:
        relay: Backend relay client
        classifier: Classifier bound to the wallet
        orchestrator: Orchestrator bound to the same wallet and the view
        events: Wallet change channel to follow with ``start()``
    """

    def __init__(
        self,
        relay: BackendRelayClient,
        classifier: TokenizationStatusClassifier,
        orchestrator: ProvisioningOrchestrator,
        events: Optional[WalletEvents] = None,
    ) -> None:
        self._relay = relay
        self._classifier = classifier
        self._orchestrator = orchestrator
        self._events = events

        self._result: Optional[EligibleCardsResult] = None
        self._wallet_generation = 0
        self._classified_generation = -1
        self._refresh_seq = 0

        self._subscription: Optional[WalletSubscription] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def result(self) -> Optional[EligibleCardsResult]:
        return self._result

    @property
    def eligible_cards(self) -> Optional[EligibleCards]:
        if isinstance(self._result, EligibleCardsSuccess):
            return self._result.eligible_cards
        return None

    @property
    def is_stale(self) -> bool:
        """True when the wallet changed after the stored classification.

        An event already published to the subscription counts as a change
        even before ``run()`` has consumed it.
        """
        if self._subscription is not None and not self._subscription.closed and self._subscription.pending:
            return True
        return self._classified_generation != self._wallet_generation

    async def refresh(self) -> EligibleCardsResult:
        """Run a classification pass and store it unless a newer one started."""
        self._refresh_seq += 1
        seq = self._refresh_seq
        generation = self._wallet_generation

        result = await get_eligible_cards_by_status(self._relay, self._classifier)

        if seq != self._refresh_seq:
            logger.debug("Discarding refresh %d, superseded by %d", seq, self._refresh_seq)
            return result
        self._result = result
        self._classified_generation = generation
        return result

    def invalidate(self) -> None:
        self._wallet_generation += 1

    async def handle_event(self, event: WalletChangeEvent) -> EligibleCardsResult:
        """Back-fill identifiers from added passes, then re-classify."""
        changed = event.added + event.replaced
        self._backfill(changed)

        self.invalidate()
        result = await self.refresh()
        # the relay may not have the identifier yet either
        self._backfill(changed)
        return result

    def _backfill(self, changed) -> None:
        eligible = self.eligible_cards
        if eligible is None:
            return
        for added in changed:
            for card in eligible.cards:
                backfill_primary_account_identifier(card, added)

    async def provision(self, card_id: str) -> ProvisioningResult:
        """Provision a card from the current classification.

        Raises:
            CardNotFoundError: the card is not part of the last successful refresh
        """
        eligible = self.eligible_cards
        entry = eligible.find(card_id) if eligible is not None else None
        if entry is None:
            raise CardNotFoundError(card_id)

        if self.is_stale:
            logger.debug("Wallet changed since card %s was classified; re-classifying", card_id)
            status = await self._classifier.get_tokenization_status(entry.card.last4, entry.card.brand)
            entry = CardTokenizationStatus(card=entry.card, tokenization_status=status)

        result = await self._orchestrator.provision(entry)
        if result.outcome == ProvisioningOutcome.SUCCEEDED:
            self.invalidate()
        return result

    async def run(self) -> None:
        """Follow wallet change events until the subscription closes."""
        if self._events is None:
            raise RuntimeError("Session has no wallet event channel")
        if self._subscription is None or self._subscription.closed:
            self._subscription = self._events.subscribe()
        async for event in self._subscription:
            await self.handle_event(event)

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            if self._events is not None and (self._subscription is None or self._subscription.closed):
                # subscribe eagerly so no event published after start() is missed
                self._subscription = self._events.subscribe()
            self._task = asyncio.create_task(self.run())
        return self._task

    async def close(self) -> None:
        if self._subscription is not None:
            self._subscription.close()
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def __aenter__(self) -> "ProvisioningSession":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
