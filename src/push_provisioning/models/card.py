"""Issuing card models served by the backend relay."""
from __future__ import annotations

import json
from typing import Optional

from pydantic import Field

from .base import ProvisioningModel


class Card(ProvisioningModel):
    """A Stripe Issuing card with just the fields push provisioning needs.

    ``eligible_for_google_pay`` / ``eligible_for_apple_pay`` already combine
    ``status == "active"`` with the wallet eligibility flag on the backend.
    ``primary_account_identifier`` is None until the card has been added to
    any wallet, and is the only field back-filled locally.
    """

    id: str
    last4: str
    brand: str
    cardholder_name: str
    eligible_for_google_pay: bool = False
    eligible_for_apple_pay: bool = False
    primary_account_identifier: Optional[str] = None

    @property
    def display_name(self) -> str:
        return f"{self.brand} •••• {self.last4}"


class CardsResponse(ProvisioningModel):
    data: list[Card] = Field(default_factory=list)


class EphemeralKey(ProvisioningModel):
    """Ephemeral key minted by the relay for a single card.

    The blob is opaque to us; the wallet SDK gets the raw JSON back verbatim.
    """

    id: Optional[str] = None
    secret: str = Field(repr=False)
    created: Optional[int] = None
    expires: Optional[int] = None
    livemode: Optional[bool] = None
    raw: str = Field(default="", repr=False, exclude=True)

    @classmethod
    def from_json(cls, text: str) -> "EphemeralKey":
        """Parse the relay's response body, keeping the original text."""
        key = cls.model_validate(json.loads(text))
        key.raw = text
        return key


class PushProvisioningDetails(ProvisioningModel):
    """Material handed to the platform's add payment pass completion."""

    activation_data: str = Field(repr=False)
    contents: str = Field(repr=False)
    ephemeral_public_key: str

    @property
    def encrypted_pass_data(self) -> str:
        return self.contents
