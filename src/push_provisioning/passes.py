"""Apple pass library helpers.

``primary_account_identifier`` tells us whether a card was added to *this*
wallet before. It is None until the card has been added to any wallet at all,
which is why it gets back-filled from the first "pass added" notification.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Union

from .logging import get_logger
from .models.card import Card
from .wallet.base import PassLibrary, SecureElementPass
from .wallet.events import ChangedPass

logger = get_logger(__name__)


@dataclass(frozen=True)
class InWallet:
    local: bool
    remote: bool


def in_wallet(library: PassLibrary, primary_account_identifier: str) -> InWallet:
    """Which wallets (this device, paired devices) hold the card."""

    def match(secure_pass: SecureElementPass) -> bool:
        return secure_pass.primary_account_identifier == primary_account_identifier

    return InWallet(
        local=any(match(p) for p in library.passes()),
        remote=any(match(p) for p in library.remote_secure_element_passes()),
    )


def can_add_to_wallet(library: PassLibrary, card: Card) -> bool:
    """Step 2 of the Apple Pay eligibility check.

    Unexpected False usually means a simulator, missing Apple Pay approval for
    Issuing, or the card already being in every local and remote wallet.
    """
    return library.can_add_secure_element_pass(card.primary_account_identifier or "")


def should_hide_add_button(library: PassLibrary, card: Optional[Card]) -> bool:
    if card is None:
        return True
    return not can_add_to_wallet(library, card) or not card.eligible_for_apple_pay


def find_matching_pass(
    card: Card,
    passes: Iterable[SecureElementPass],
) -> Optional[SecureElementPass]:
    """First pass matching both last4 and identifier.

    Several passes can match since (last4, identifier) is not guaranteed to be
    unique; none match while the card's identifier is still None.
    """
    for secure_pass in passes:
        if (
            card.last4 == secure_pass.primary_account_number_suffix
            and card.primary_account_identifier == secure_pass.primary_account_identifier
        ):
            return secure_pass
    return None


def backfill_primary_account_identifier(
    card: Card,
    added: Union[SecureElementPass, ChangedPass],
) -> bool:
    """Fill in a missing identifier from a newly added pass.

    Returns True when the card was updated.
    """
    if card.primary_account_identifier is not None:
        return False
    if not added.primary_account_identifier:
        return False
    if card.last4 != added.primary_account_number_suffix:
        return False
    card.primary_account_identifier = added.primary_account_identifier
    logger.info("Back-filled primary account identifier for card %s", card.id)
    return True
