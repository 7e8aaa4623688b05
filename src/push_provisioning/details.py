"""
Apple Pay pass-add flow.

``PKAddPaymentPassViewControllerDelegate`` hands the app a certificate chain,
a nonce and a nonce signature. The app asks the relay for an ephemeral key
bound to the card (only the backend may hold a Stripe secret key), then
calls Stripe's ``push_provisioning_details`` endpoint directly with that key,
as Stripe recommends. The response carries the activation data, encrypted
pass data and ephemeral public key the platform needs to finish adding the
pass. Access to the endpoint may be gated:
https://docs.stripe.com/api/issuing/push-provisioning-details
"""
from __future__ import annotations

import base64
from typing import Optional, Sequence

import httpx
from pydantic import ValidationError

from .client import BackendRelayClient
from .config import STRIPE_API_VERSION, ProvisioningSettings
from .logging import get_logger, log_request, log_response
from .models.card import PushProvisioningDetails
from .models.errors import PushProvisioningDetailsError

logger = get_logger(__name__)


def build_query(
    certificates: Sequence[bytes],
    nonce: bytes,
    nonce_signature: bytes,
) -> list[tuple[str, str]]:
    """Stripe form-style query: certificates base64, nonce and signature hex."""
    params = [
        (f"ios[certificates][{index}]", base64.b64encode(certificate).decode("ascii"))
        for index, certificate in enumerate(certificates)
    ]
    params.append(("ios[nonce]", nonce.hex()))
    params.append(("ios[nonce_signature]", nonce_signature.hex()))
    return params


class PushProvisioningDetailsClient:
    """Retrieves push provisioning details for one card at a time.

    Args:
        relay: Backend relay used to mint the ephemeral key
        api_version: Stripe API version (must match the key's version)
        api_base: Stripe API base URL
        livemode: Sent as ``Stripe-Livemode``
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        relay: BackendRelayClient,
        api_version: str = STRIPE_API_VERSION,
        api_base: str = "https://api.stripe.com",
        livemode: bool = True,
        timeout: float = 15.0,
    ) -> None:
        self._relay = relay
        self._api_version = api_version
        self._api_base = api_base.rstrip("/")
        self._livemode = livemode
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, relay: BackendRelayClient, settings: ProvisioningSettings) -> "PushProvisioningDetailsClient":
        return cls(
            relay,
            api_version=settings.stripe_api_version,
            api_base=settings.stripe_api_base,
            livemode=settings.livemode,
            timeout=settings.timeout_seconds,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(base_url=self._api_base, timeout=self._timeout)
        return self._client

    async def retrieve_details(
        self,
        card_id: str,
        certificates: Sequence[bytes],
        nonce: bytes,
        nonce_signature: bytes,
    ) -> PushProvisioningDetails:
        """
        Exchange the pass library's challenge for add payment pass material.

        Args:
            card_id: The ID of the card (``ic_``) to provision
            certificates: Certificate chain passed to the delegate
            nonce: Nonce passed to the delegate
            nonce_signature: Nonce signature passed to the delegate

        Returns:
            PushProvisioningDetails for the platform's completion handler

        Raises:
            RelayError: the ephemeral key could not be minted
            PushProvisioningDetailsError: Stripe refused or returned an incomplete response
        """
        key = await self._relay.create_ephemeral_key(self._api_version, card_id)

        path = f"/v1/issuing/cards/{card_id}/push_provisioning_details"
        headers = {
            "Authorization": f"Bearer {key.secret}",
            "Stripe-Livemode": "true" if self._livemode else "false",
            "Stripe-Version": self._api_version,
        }
        params = build_query(certificates, nonce, nonce_signature)

        client = await self._get_client()
        log_request(logger, "GET", f"{self._api_base}{path}", headers)
        try:
            response = await client.get(path, params=params, headers=headers)
        except httpx.RequestError as e:
            raise PushProvisioningDetailsError(f"Error retrieving push provisioning details: {e}") from e
        log_response(logger, "GET", f"{self._api_base}{path}", response.status_code, response.text)

        if response.status_code != 200:
            logger.info("status code: %s", response.status_code)
            raise PushProvisioningDetailsError(
                f"Error retrieving push provisioning details: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return PushProvisioningDetails.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error("Incomplete push provisioning details: %s", e)
            raise PushProvisioningDetailsError(
                "Push provisioning details are missing activation data, "
                "encrypted pass data or the ephemeral public key",
                status_code=response.status_code,
            ) from e

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "PushProvisioningDetailsClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
