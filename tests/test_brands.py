"""Tests for push_provisioning.brands."""
from __future__ import annotations

import pytest

from push_provisioning.brands import (
    SUPPORTED_BRANDS,
    PaymentNetwork,
    network_and_tsp,
    to_network,
    to_payment_network,
    to_tsp,
)
from push_provisioning.models.errors import ConfigurationError, UnsupportedBrandError
from push_provisioning.models.token import CardNetwork, TokenServiceProvider


class TestBrandMapping:
    def test_visa(self):
        assert network_and_tsp("Visa") == (CardNetwork.VISA, TokenServiceProvider.VISA)
        assert to_network("Visa") == 4
        assert to_tsp("Visa") == 4

    def test_mastercard(self):
        assert network_and_tsp("MasterCard") == (
            CardNetwork.MASTERCARD,
            TokenServiceProvider.MASTERCARD,
        )
        assert to_network("MasterCard") == 3
        assert to_tsp("MasterCard") == 3

    def test_supported_brands(self):
        assert SUPPORTED_BRANDS == {"Visa", "MasterCard"}

    @pytest.mark.parametrize("brand", ["Amex", "visa", "Mastercard", "", "Visa "])
    def test_anything_else_is_rejected(self, brand):
        with pytest.raises(UnsupportedBrandError) as exc_info:
            network_and_tsp(brand)
        assert exc_info.value.brand == brand
        assert exc_info.value.message == f"Unexpected card brand: {brand}"
        assert exc_info.value.code == "UNSUPPORTED_BRAND"

    def test_unsupported_brand_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError):
            to_network("Discover")


class TestPaymentNetwork:
    def test_passkit_values(self):
        assert to_payment_network("Visa") == PaymentNetwork.VISA == "Visa"
        assert to_payment_network("MasterCard") == PaymentNetwork.MASTERCARD == "MasterCard"

    def test_same_exact_match_rule(self):
        with pytest.raises(UnsupportedBrandError):
            to_payment_network("visa")
