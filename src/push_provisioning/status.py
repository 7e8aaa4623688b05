"""Tokenization status of a card against the current wallet snapshot.

``TokenizationStatus`` is a closed union of three frozen dataclasses. Call
sites dispatch with ``isinstance`` and must handle every member:

- ``Tokenized``: a matching wallet token exists and is usable.
- ``GreenPath``: no matching token, provision from scratch.
- ``YellowPath``: a matching token is stuck waiting for identity
  verification; provisioning resumes through ``token_reference_id``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from .models.card import Card


@dataclass(frozen=True)
class Tokenized:
    pass


@dataclass(frozen=True)
class GreenPath:
    pass


@dataclass(frozen=True)
class YellowPath:
    token_reference_id: str


NotTokenized = Union[GreenPath, YellowPath]
TokenizationStatus = Union[Tokenized, GreenPath, YellowPath]

TOKENIZED = Tokenized()
GREEN_PATH = GreenPath()


def is_not_tokenized(status: TokenizationStatus) -> bool:
    return isinstance(status, (GreenPath, YellowPath))


@dataclass(frozen=True)
class CardTokenizationStatus:
    """A card paired with the status computed for it in one classification pass."""

    card: Card
    tokenization_status: TokenizationStatus


@dataclass
class EligibleCards:
    not_yet_tokenized: list[CardTokenizationStatus] = field(default_factory=list)
    already_tokenized: list[CardTokenizationStatus] = field(default_factory=list)

    def find(self, card_id: str) -> CardTokenizationStatus | None:
        for entry in (*self.not_yet_tokenized, *self.already_tokenized):
            if entry.card.id == card_id:
                return entry
        return None

    @property
    def cards(self) -> list[Card]:
        return [entry.card for entry in (*self.not_yet_tokenized, *self.already_tokenized)]


@dataclass(frozen=True)
class EligibleCardsSuccess:
    eligible_cards: EligibleCards


@dataclass(frozen=True)
class EligibleCardsFailure:
    exception: Exception

    @property
    def message(self) -> str:
        return getattr(self.exception, "message", None) or str(self.exception) or "Unknown error"


EligibleCardsResult = Union[EligibleCardsSuccess, EligibleCardsFailure]
