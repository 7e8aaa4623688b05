"""Card brand to TapAndPay and PassKit network mapping."""
from __future__ import annotations

from enum import Enum

from .models.errors import UnsupportedBrandError
from .models.token import CardNetwork, TokenServiceProvider

_BRANDS: dict[str, tuple[CardNetwork, TokenServiceProvider]] = {
    "Visa": (CardNetwork.VISA, TokenServiceProvider.VISA),
    "MasterCard": (CardNetwork.MASTERCARD, TokenServiceProvider.MASTERCARD),
}

SUPPORTED_BRANDS = frozenset(_BRANDS)


def network_and_tsp(brand: str) -> tuple[CardNetwork, TokenServiceProvider]:
    """Look up both constants for a brand.

    Provisioning against the wrong network is worse than refusing, so anything
    but an exact match raises UnsupportedBrandError.
    """
    try:
        return _BRANDS[brand]
    except KeyError:
        raise UnsupportedBrandError(brand) from None


def to_network(brand: str) -> CardNetwork:
    return network_and_tsp(brand)[0]


def to_tsp(brand: str) -> TokenServiceProvider:
    return network_and_tsp(brand)[1]


class PaymentNetwork(str, Enum):
    """PassKit ``PKPaymentNetwork`` raw values."""

    VISA = "Visa"
    MASTERCARD = "MasterCard"


_PAYMENT_NETWORKS = {
    "Visa": PaymentNetwork.VISA,
    "MasterCard": PaymentNetwork.MASTERCARD,
}


def to_payment_network(brand: str) -> PaymentNetwork:
    """Apple Pay counterpart of ``to_network``; same exact-match rule."""
    try:
        return _PAYMENT_NETWORKS[brand]
    except KeyError:
        raise UnsupportedBrandError(brand) from None
