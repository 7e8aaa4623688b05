"""Eligible cards, classified and split by tokenization status."""
from __future__ import annotations

from .classifier import TokenizationStatusClassifier
from .client import BackendRelayClient
from .logging import get_logger
from .models.card import Card
from .models.errors import PushProvisioningError
from .status import (
    CardTokenizationStatus,
    EligibleCards,
    EligibleCardsFailure,
    EligibleCardsResult,
    EligibleCardsSuccess,
    is_not_tokenized,
)

logger = get_logger(__name__)


async def classify_cards(
    cards: list[Card],
    classifier: TokenizationStatusClassifier,
) -> EligibleCards:
    """Classify cards one after another and partition them.

    Wallet failures propagate.
    """
    eligible = EligibleCards()
    for card in cards:
        status = await classifier.get_tokenization_status(card.last4, card.brand)
        entry = CardTokenizationStatus(card=card, tokenization_status=status)
        if is_not_tokenized(status):
            eligible.not_yet_tokenized.append(entry)
        else:
            eligible.already_tokenized.append(entry)
    return eligible


async def get_eligible_cards_by_status(
    relay: BackendRelayClient,
    classifier: TokenizationStatusClassifier,
) -> EligibleCardsResult:
    """Fetch the cardholder's cards and classify those eligible for Google Pay.

    Never raises for relay or wallet failures; they come back as an
    ``EligibleCardsFailure`` for the UI to show.
    """
    try:
        cards = await relay.list_cards()
    except PushProvisioningError as e:
        logger.error("Fetching cards failed: %s", e)
        return EligibleCardsFailure(e)

    # status == "active" and wallets.google_pay.eligible are combined on the backend
    eligible_cards = [card for card in cards if card.eligible_for_google_pay]
    logger.debug("%d of %d cards eligible for Google Pay", len(eligible_cards), len(cards))

    try:
        return EligibleCardsSuccess(await classify_cards(eligible_cards, classifier))
    except Exception as e:
        logger.error("Classifying cards failed: %s", e, exc_info=True)
        return EligibleCardsFailure(e)


def describe(result: EligibleCardsResult) -> str:
    """The summary line shown above the card picker."""
    if isinstance(result, EligibleCardsFailure):
        return result.message

    eligible = result.eligible_cards
    if not eligible.not_yet_tokenized:
        if not eligible.already_tokenized:
            return "No eligible cards"
        return "All eligible cards are already tokenized"
    count = len(eligible.not_yet_tokenized)
    return f"{count} card{'s' if count != 1 else ''} eligible for push provisioning"
