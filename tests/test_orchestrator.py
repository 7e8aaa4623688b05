"""Tests for ProvisioningOrchestrator."""
from __future__ import annotations

import json

import pytest

from factories import make_card
from push_provisioning.client import BackendEphemeralKeyProvider
from push_provisioning.config import ProvisioningSettings
from push_provisioning.models.errors import RelayAPIError, UnsupportedBrandError, WalletError
from push_provisioning.models.token import CardNetwork, TokenServiceProvider
from push_provisioning.orchestrator import (
    NullView,
    ProvisioningAction,
    ProvisioningOrchestrator,
    ProvisioningOutcome,
)
from push_provisioning.status import GREEN_PATH, TOKENIZED, CardTokenizationStatus, YellowPath
from push_provisioning.wallet.base import (
    ProvisioningCancelled,
    ProvisioningFailed,
    ProvisioningSucceeded,
    TokenizeCancelled,
)
from push_provisioning.wallet.memory import InMemoryWallet

EPHEMERAL_KEY_URL = "https://relay.example.com/ephemeral_keys"
EPHEMERAL_KEY = {"id": "ephkey_1", "secret": "ek_test_abc123", "livemode": False}


class FailingWallet(InMemoryWallet):
    async def tokenize(self, token_reference_id, token_service_provider, display_name, network):
        self.calls.append(("tokenize", token_reference_id))
        raise WalletError("TapAndPay tokenize failed")


def status_for(card, status):
    return CardTokenizationStatus(card=card, tokenization_status=status)


@pytest.fixture
def orchestrator(relay, wallet, view):
    return ProvisioningOrchestrator(relay, wallet, view)


@pytest.fixture
def mock_ephemeral_key(httpx_mock):
    httpx_mock.add_response(url=EPHEMERAL_KEY_URL, method="POST", json=EPHEMERAL_KEY)


class TestTokenized:
    async def test_does_nothing(self, orchestrator, wallet, view, visa_card):
        result = await orchestrator.provision(status_for(visa_card, TOKENIZED))

        assert result.action == ProvisioningAction.NONE
        assert result.outcome == ProvisioningOutcome.ALREADY_TOKENIZED
        assert wallet.calls == []
        assert view.updates == 0

    async def test_unknown_brand_is_not_checked(self, orchestrator):
        result = await orchestrator.provision(status_for(make_card(brand="Amex"), TOKENIZED))
        assert result.outcome == ProvisioningOutcome.ALREADY_TOKENIZED


class TestYellowPath:
    async def test_resumes_tokenization(self, orchestrator, wallet, view, visa_card):
        result = await orchestrator.provision(status_for(visa_card, YellowPath("tok_1")))

        assert wallet.calls == [
            ("tokenize", "tok_1", TokenServiceProvider.VISA, "Visa •••• 4242", CardNetwork.VISA),
        ]
        assert wallet.calls[0][2] == 4
        assert wallet.calls[0][4] == 4
        assert result.action == ProvisioningAction.RESOLVE_YELLOW_PATH
        assert result.outcome == ProvisioningOutcome.SUCCEEDED
        assert view.notices == ["Card successfully provisioned"]
        assert view.button_updates == [("ic_123", False)]

    async def test_mastercard_constants(self, orchestrator, wallet):
        card = make_card(brand="MasterCard", last4="4444")
        await orchestrator.provision(status_for(card, YellowPath("tok_mc")))

        assert wallet.calls == [
            ("tokenize", "tok_mc", TokenServiceProvider.MASTERCARD, "MasterCard •••• 4444", CardNetwork.MASTERCARD),
        ]

    async def test_cancelled(self, orchestrator, wallet, view, visa_card):
        wallet.tokenize_result = TokenizeCancelled()

        result = await orchestrator.provision(status_for(visa_card, YellowPath("tok_1")))

        assert result.outcome == ProvisioningOutcome.CANCELLED
        assert view.updates == 0

    async def test_unknown_brand_fails_before_wallet(self, orchestrator, wallet, view):
        with pytest.raises(UnsupportedBrandError, match="Unexpected card brand: Amex"):
            await orchestrator.provision(status_for(make_card(brand="Amex"), YellowPath("tok_1")))

        assert wallet.calls == []
        assert view.errors == ["Unexpected card brand: Amex"]
        assert view.button_updates == []

    async def test_wallet_failure_is_shown_and_raised(self, relay, view, visa_card):
        wallet = FailingWallet()
        orchestrator = ProvisioningOrchestrator(relay, wallet, view)

        with pytest.raises(WalletError):
            await orchestrator.provision(status_for(visa_card, YellowPath("tok_1")))

        assert view.errors == ["TapAndPay tokenize failed"]
        assert view.button_updates == []


class TestGreenPath:
    async def test_push_provisions(self, orchestrator, wallet, view, visa_card, mock_ephemeral_key, httpx_mock):
        wallet.push_result = ProvisioningSucceeded(card_token_id="tok_new")

        result = await orchestrator.provision(status_for(visa_card, GREEN_PATH))

        assert result.action == ProvisioningAction.PUSH_PROVISION
        assert result.outcome == ProvisioningOutcome.SUCCEEDED
        assert result.card_token_id == "tok_new"
        assert view.messages == ["Success! Card token id: tok_new"]
        assert view.button_updates == [("ic_123", False)]
        assert wallet.calls == [("push_provision", "Jenny Rosen", True)]
        assert json.loads(wallet.ephemeral_keys[0]) == EPHEMERAL_KEY
        assert b"card_id=ic_123" in httpx_mock.get_request().content

    async def test_cancelled(self, orchestrator, wallet, view, visa_card, mock_ephemeral_key):
        wallet.push_result = ProvisioningCancelled()

        result = await orchestrator.provision(status_for(visa_card, GREEN_PATH))

        assert result.outcome == ProvisioningOutcome.CANCELLED
        assert view.updates == 0

    async def test_failed(self, orchestrator, wallet, view, visa_card, mock_ephemeral_key):
        wallet.push_result = ProvisioningFailed(code="PUSH_PROVISIONING_DECLINED", message="Card declined")

        result = await orchestrator.provision(status_for(visa_card, GREEN_PATH))

        assert result.outcome == ProvisioningOutcome.FAILED
        assert result.error_code == "PUSH_PROVISIONING_DECLINED"
        assert view.errors == ["Push provisioning error PUSH_PROVISIONING_DECLINED: Card declined"]
        assert view.button_updates == []

    async def test_relay_failure_is_shown_and_raised(self, orchestrator, view, visa_card, httpx_mock):
        httpx_mock.add_response(url=EPHEMERAL_KEY_URL, method="POST", status_code=500, text="boom")

        with pytest.raises(RelayAPIError):
            await orchestrator.provision(status_for(visa_card, GREEN_PATH))

        assert view.errors == ["Error creating ephemeral key: 500 boom"]

    async def test_unknown_brand_fails_before_wallet(self, orchestrator, wallet):
        with pytest.raises(UnsupportedBrandError):
            await orchestrator.provision(status_for(make_card(brand="Discover"), GREEN_PATH))
        assert wallet.calls == []

    async def test_enable_logs_passed_through(self, relay, wallet, visa_card, mock_ephemeral_key):
        orchestrator = ProvisioningOrchestrator(relay, wallet, enable_logs=False)
        await orchestrator.provision(status_for(visa_card, GREEN_PATH))
        assert wallet.calls == [("push_provision", "Jenny Rosen", False)]

    async def test_api_version_comes_from_wallet(self, relay, visa_card, mock_ephemeral_key, httpx_mock):
        wallet = InMemoryWallet(api_version="2024-06-20")
        await ProvisioningOrchestrator(relay, wallet).provision(status_for(visa_card, GREEN_PATH))
        assert b"api_version=2024-06-20" in httpx_mock.get_request().content

    async def test_api_version_is_not_an_orchestrator_option(self, relay, wallet):
        with pytest.raises(TypeError):
            ProvisioningOrchestrator(relay, wallet, api_version="2099-01-01")

    async def test_from_settings(self, relay, wallet, view, visa_card, mock_ephemeral_key):
        settings = ProvisioningSettings(enable_logs=False)

        orchestrator = ProvisioningOrchestrator.from_settings(relay, wallet, settings, view)
        await orchestrator.provision(status_for(visa_card, GREEN_PATH))

        assert orchestrator.view is view
        assert wallet.calls == [("push_provision", "Jenny Rosen", False)]


class TestView:
    async def test_dead_view_gets_nothing(self, orchestrator, wallet, view, visa_card, mock_ephemeral_key):
        view.is_alive = False

        result = await orchestrator.provision(status_for(visa_card, GREEN_PATH))

        assert result.outcome == ProvisioningOutcome.SUCCEEDED
        assert view.updates == 0

    async def test_view_torn_down_mid_flow(self, relay, view, visa_card, mock_ephemeral_key):
        class ClosingWallet(InMemoryWallet):
            async def push_provision(self, cardholder_name, ephemeral_key_provider, enable_logs=True):
                result = await super().push_provision(cardholder_name, ephemeral_key_provider, enable_logs)
                view.is_alive = False
                return result

        orchestrator = ProvisioningOrchestrator(relay, ClosingWallet(), view)
        await orchestrator.provision(status_for(visa_card, GREEN_PATH))

        assert view.updates == 0

    async def test_defaults_to_null_view(self, relay, wallet):
        orchestrator = ProvisioningOrchestrator(relay, wallet)
        assert isinstance(orchestrator.view, NullView)

        orchestrator.view = None
        assert isinstance(orchestrator.view, NullView)

    async def test_ephemeral_key_provider_is_bound_to_card(self, relay):
        provider = BackendEphemeralKeyProvider("ic_9", relay)
        assert provider.card_id == "ic_9"
