"""
Backend relay client.

The relay is the issuer's own backend: it authenticates the cardholder and
forwards to the Stripe Issuing API so no Stripe secret ever lives on the
device. It exposes two endpoints, both behind HTTP basic auth:

- ``GET cards``: cards available to the authenticated cardholder.
- ``POST ephemeral_keys``: mint an ephemeral key scoped to one card.

Example usage:
    ```python
    async with BackendRelayClient(
        base_url="https://push-provisioning-samples.onrender.com",
        username="user",
        password="secret",
    ) as relay:
        cards = await relay.list_cards()
        key = await relay.create_ephemeral_key("2020-08-27", cards[0].id)
    ```
"""
from __future__ import annotations

import time
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from .config import ProvisioningSettings
from .logging import get_logger, log_request, log_response
from .models.card import Card, CardsResponse, EphemeralKey
from .models.errors import (
    AuthenticationError,
    RelayAPIError,
    RelayConnectionError,
    RelayError,
)

logger = get_logger(__name__)


class BackendRelayClient:
    """
    Async client for the backend relay.

    Failures are never retried here; a retry is the user re-triggering the
    action.

    Args:
        base_url: Relay base URL
        username: Basic auth username shared for the session
        password: Basic auth password shared for the session
        timeout: Connect/read timeout in seconds (default: 15)
    """

    DEFAULT_TIMEOUT = 15.0
    USER_AGENT = "issuing-push-provisioning/0.1.0"

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not base_url:
            raise ValueError("Backend URL is required")

        self._base_url = base_url.rstrip("/") + "/"
        self._auth = httpx.BasicAuth(username, password)
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: ProvisioningSettings) -> "BackendRelayClient":
        settings.require_configured()
        return cls(
            base_url=settings.backend_url,
            username=settings.backend_username,
            password=settings.backend_password,
            timeout=settings.timeout_seconds,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                auth=self._auth,
                headers={"User-Agent": self.USER_AGENT},
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        action: str,
        data: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        client = await self._get_client()
        url = f"{self._base_url}{path}"
        log_request(logger, method, url, {"Authorization": "Basic"}, data)

        started = time.monotonic()
        try:
            response = await client.request(method, path, data=data)
        except httpx.RequestError as e:
            logger.error("Relay request %s %s failed: %s", method, url, e)
            raise RelayConnectionError(f"Error {action}: {e}", cause=e) from e

        log_response(
            logger,
            method,
            url,
            response.status_code,
            response.text,
            (time.monotonic() - started) * 1000,
        )

        if response.status_code == 401:
            raise AuthenticationError(body=response.text)
        if not response.is_success:
            error = RelayAPIError.from_response(response.status_code, response.text, action)
            logger.error("%s", error.message)
            raise error
        return response

    async def list_cards(self) -> list[Card]:
        """
        Auth required!

        Returns the cards available to the authenticated cardholder. The relay
        may already have filtered them by status, wallet eligibility,
        ownership and permissions.
        """
        response = await self._request("GET", "cards", action="fetching cards")
        try:
            return CardsResponse.model_validate(response.json()).data
        except (ValueError, ValidationError) as e:
            raise RelayError(f"Error fetching cards: malformed response ({e})") from e

    async def create_ephemeral_key(self, api_version: str, card_id: str) -> EphemeralKey:
        """
        Auth required!

        Create an ephemeral key for the given card to provision.
        """
        response = await self._request(
            "POST",
            "ephemeral_keys",
            action="creating ephemeral key",
            data={"api_version": api_version, "card_id": card_id},
        )
        try:
            return EphemeralKey.from_json(response.text)
        except (ValueError, ValidationError) as e:
            raise RelayError(f"Error creating ephemeral key: malformed response ({e})") from e

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "BackendRelayClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


class BackendEphemeralKeyProvider:
    """Mints ephemeral keys for one card on behalf of the wallet SDK.

    The wallet's add-card flow calls the provider with the Stripe API version
    it speaks and gets the relay's key JSON back verbatim.
    """

    def __init__(self, card_id: str, relay: BackendRelayClient):
        self.card_id = card_id
        self._relay = relay

    async def create_ephemeral_key(self, api_version: str) -> str:
        key = await self._relay.create_ephemeral_key(api_version=api_version, card_id=self.card_id)
        return key.raw

    async def __call__(self, api_version: str) -> str:
        return await self.create_ephemeral_key(api_version)

    def __repr__(self) -> str:
        return f"BackendEphemeralKeyProvider(card_id={self.card_id!r})"
