"""Tests for the Apple Wallet issuer provisioning extension."""
from __future__ import annotations

import re

import pytest

from factories import cards_payload, make_card
from push_provisioning.brands import PaymentNetwork
from push_provisioning.details import PushProvisioningDetailsClient
from push_provisioning.extension import (
    AddPaymentPassRequestConfiguration,
    ExtensionStatus,
    PassEntry,
    WalletExtension,
)
from push_provisioning.wallet.base import SecureElementPass
from push_provisioning.wallet.memory import InMemoryWallet

CARDS_URL = "https://relay.example.com/cards"
EPHEMERAL_KEY_URL = "https://relay.example.com/ephemeral_keys"
DETAILS_URL = re.compile(r"https://api\.stripe\.com/v1/issuing/cards/ic_visa/push_provisioning_details\?.*")

DETAILS = {
    "activation_data": "YWN0aXZhdGlvbg==",
    "contents": "ZW5jcnlwdGVk",
    "ephemeral_public_key": "BBYa8mVyiGJC",
}


@pytest.fixture
async def details_client(relay):
    client = PushProvisioningDetailsClient(relay, livemode=False)
    yield client
    await client.close()


@pytest.fixture
def library():
    return InMemoryWallet()


@pytest.fixture
def extension(relay, library, details_client):
    return WalletExtension(relay, library, details_client)


def serve_cards(httpx_mock, *cards):
    httpx_mock.add_response(url=CARDS_URL, json=cards_payload(*cards))


class TestStatus:
    async def test_card_never_added(self, extension, httpx_mock):
        serve_cards(httpx_mock, make_card("ic_visa"))

        status = await extension.status()

        assert status == ExtensionStatus(pass_entries_available=True, remote_pass_entries_available=True)

    async def test_card_on_this_device_only(self, extension, library, httpx_mock):
        library.local_passes.append(SecureElementPass("V-1", "4242"))
        serve_cards(httpx_mock, make_card("ic_visa", primary_account_identifier="V-1"))

        status = await extension.status()

        assert status.pass_entries_available is False
        assert status.remote_pass_entries_available is True

    async def test_card_in_every_wallet(self, extension, library, httpx_mock):
        library.local_passes.append(SecureElementPass("V-1", "4242"))
        library.remote_passes.append(SecureElementPass("V-1", "4242"))
        serve_cards(httpx_mock, make_card("ic_visa", primary_account_identifier="V-1"))

        status = await extension.status()

        assert status.pass_entries_available is False
        assert status.remote_pass_entries_available is False

    async def test_any_missing_card_makes_entries_available(self, extension, library, httpx_mock):
        library.local_passes.append(SecureElementPass("V-1", "4242"))
        library.remote_passes.append(SecureElementPass("V-1", "4242"))
        serve_cards(
            httpx_mock,
            make_card("ic_visa", primary_account_identifier="V-1"),
            make_card("ic_mc", last4="4444", brand="MasterCard"),
        )

        status = await extension.status()

        assert status.pass_entries_available is True
        assert status.remote_pass_entries_available is True

    async def test_ignores_cards_not_eligible_for_apple_pay(self, extension, httpx_mock):
        serve_cards(httpx_mock, make_card("ic_visa", eligible_for_apple_pay=False))

        assert await extension.status() == ExtensionStatus()

    async def test_relay_failure_reports_nothing_available(self, extension, httpx_mock):
        httpx_mock.add_response(url=CARDS_URL, status_code=500, text="boom")

        assert await extension.status() == ExtensionStatus()

    async def test_requires_authentication(self, relay, library, details_client, httpx_mock):
        httpx_mock.add_response(url=CARDS_URL, status_code=401)
        extension = WalletExtension(relay, library, details_client, requires_authentication=True)

        status = await extension.status()

        assert status.requires_authentication is True
        assert status.pass_entries_available is False


class TestPassEntries:
    async def test_one_entry_per_card(self, extension, httpx_mock):
        serve_cards(
            httpx_mock,
            make_card("ic_visa"),
            make_card("ic_mc", last4="4444", brand="MasterCard", primary_account_identifier="M-1"),
        )

        entries = await extension.pass_entries()

        assert entries == [
            PassEntry(
                identifier="ic_visa",
                title="Stripe Example",
                configuration=AddPaymentPassRequestConfiguration(
                    cardholder_name="Jenny Rosen",
                    primary_account_suffix="4242",
                    payment_network=PaymentNetwork.VISA,
                    localized_description="StripeIssuingExample Card",
                ),
            ),
            PassEntry(
                identifier="ic_mc",
                title="Stripe Example",
                configuration=AddPaymentPassRequestConfiguration(
                    cardholder_name="Jenny Rosen",
                    primary_account_suffix="4444",
                    payment_network=PaymentNetwork.MASTERCARD,
                    localized_description="StripeIssuingExample Card",
                    primary_account_identifier="M-1",
                ),
            ),
        ]
        assert entries[0].configuration.encryption_scheme == "ECC_V2"
        assert entries[0].configuration.style == "payment"

    async def test_skips_unsupported_brand(self, extension, httpx_mock):
        serve_cards(httpx_mock, make_card("ic_amex", brand="Amex"), make_card("ic_visa"))

        entries = await extension.pass_entries()

        assert [entry.identifier for entry in entries] == ["ic_visa"]

    async def test_relay_failure_yields_no_entries(self, extension, httpx_mock):
        httpx_mock.add_response(url=CARDS_URL, status_code=500, text="boom")

        assert await extension.pass_entries() == []


class TestGenerateAddPaymentPassRequest:
    async def test_returns_details(self, extension, httpx_mock):
        httpx_mock.add_response(
            url=EPHEMERAL_KEY_URL,
            method="POST",
            json={"id": "ephkey_1", "secret": "ek_test_secret", "livemode": False},
        )
        httpx_mock.add_response(url=DETAILS_URL, method="GET", json=DETAILS)

        details = await extension.generate_add_payment_pass_request("ic_visa", [b"cert"], b"\x01", b"\x02")

        assert details is not None
        assert details.activation_data == DETAILS["activation_data"]
        assert details.encrypted_pass_data == DETAILS["contents"]

    async def test_failure_returns_none(self, extension, httpx_mock):
        httpx_mock.add_response(url=EPHEMERAL_KEY_URL, method="POST", status_code=500, text="boom")

        assert await extension.generate_add_payment_pass_request("ic_visa", [b"cert"], b"\x01", b"\x02") is None
