"""
Pytest configuration and fixtures for push provisioning tests.
"""
from __future__ import annotations

import pytest

from factories import BASE_URL, RecordingView, make_card
from push_provisioning.client import BackendRelayClient
from push_provisioning.wallet.memory import InMemoryWallet


@pytest.fixture
async def relay():
    client = BackendRelayClient(base_url=BASE_URL, username="user", password="hunter2")
    yield client
    await client.close()


@pytest.fixture
def wallet():
    return InMemoryWallet()


@pytest.fixture
def view():
    return RecordingView()


@pytest.fixture
def visa_card():
    return make_card()
