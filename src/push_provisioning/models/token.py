"""Wallet token records and TapAndPay enumerated values.

Values follow
https://developers.google.com/pay/issuers/apis/push-provisioning/android/enumerated-values
"""
from __future__ import annotations

from enum import IntEnum
from typing import Any, Optional

from pydantic import ConfigDict, Field, field_validator

from ..logging import get_logger
from .base import ProvisioningModel

logger = get_logger(__name__)

# Not a TapAndPay value; stands in for state names missing from TokenState
UNKNOWN_TOKEN_STATE = 0


class CardNetwork(IntEnum):
    MASTERCARD = 3
    VISA = 4


class TokenServiceProvider(IntEnum):
    MASTERCARD = 3
    VISA = 4


class TokenState(IntEnum):
    UNTOKENIZED = 1
    PENDING = 2
    NEEDS_IDENTITY_VERIFICATION = 3
    SUSPENDED = 4
    ACTIVE = 5
    FELICA_PENDING_PROVISIONING = 6


_NETWORK_NAMES = {
    CardNetwork.MASTERCARD: "Mastercard",
    CardNetwork.VISA: "Visa",
}

_TSP_NAMES = {
    TokenServiceProvider.MASTERCARD: "Mastercard",
    TokenServiceProvider.VISA: "Visa",
}

_STATE_NAMES = {
    TokenState.NEEDS_IDENTITY_VERIFICATION: "needs identity verification",
    TokenState.ACTIVE: "active",
}


class WalletToken(ProvisioningModel):
    """A provisioned card proxy as reported by the wallet's ``listTokens()``.

    Integer fields keep whatever the SDK returned; values outside the enums
    above are legal and simply print as ``other``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    network: int = 0
    token_service_provider: int = Field(default=0, alias="tokenServiceProvider")
    token_state: int = Field(default=UNKNOWN_TOKEN_STATE, alias="tokenState")
    dpan_last_four: str = Field(default="", alias="dpanLastFour")
    fpan_last_four: str = Field(default="", alias="fpanLastFour")
    issuer_token_id: str = Field(default="", alias="issuerTokenId")
    issuer_name: Optional[str] = Field(default=None, alias="issuerName")
    portfolio_name: Optional[str] = Field(default=None, alias="portfolioName")

    @field_validator("token_state", mode="before")
    @classmethod
    def parse_token_state(cls, v: Any) -> Any:
        """Accept TapAndPay constant names as well as their integer values.

        Names this SDK version does not know map to ``UNKNOWN_TOKEN_STATE``,
        which counts as tokenized like every state but ID&V.
        """
        if isinstance(v, str) and not v.isdigit():
            name = v.strip().upper().removeprefix("TOKEN_STATE_")
            if name in TokenState.__members__:
                return TokenState[name].value
            logger.warning("Unknown token state %r, treating it as tokenized", v)
            return UNKNOWN_TOKEN_STATE
        return v

    @property
    def needs_identity_verification(self) -> bool:
        return self.token_state == TokenState.NEEDS_IDENTITY_VERIFICATION

    def pretty_print(self) -> str:
        """Render the token for debug logs."""
        network = _NETWORK_NAMES.get(self.network, f"other: {self.network}")
        tsp = _TSP_NAMES.get(self.token_service_provider, f"other: {self.token_service_provider}")
        state = _STATE_NAMES.get(self.token_state, f"other: {self.token_state}")
        return (
            f"network              = {network}\n"
            f"tokenServiceProvider = {tsp}\n"
            f"tokenState           = {state}\n"
            f"dpanLastFour         = {self.dpan_last_four}\n"
            f"fpanLastFour         = {self.fpan_last_four}\n"
            f"issuerName           = {self.issuer_name}\n"
            f"issuerTokenId        = {self.issuer_token_id}\n"
            f"portfolioName        = {self.portfolio_name}"
        )
