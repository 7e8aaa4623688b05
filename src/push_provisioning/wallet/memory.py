"""In-memory wallet for sandbox use and testing."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Optional, Union

from ..config import STRIPE_API_VERSION
from ..logging import get_logger
from ..models.token import CardNetwork, TokenServiceProvider, TokenState, WalletToken
from .base import (
    EphemeralKeyProvider,
    ProvisioningSucceeded,
    PushProvisioningResult,
    SecureElementPass,
    TokenizeResult,
    TokenizeSucceeded,
)
from .events import ChangedPass, WalletChangeEvent, WalletEvents

logger = get_logger(__name__)


class InMemoryWallet:
    """Wallet that keeps tokens and passes in memory.

    Implements both ``WalletClient`` and ``PassLibrary``. Outcomes of the
    interactive flows are scripted through ``push_result`` / ``tokenize_result``
    and every SDK call is recorded in ``calls``.
    """

    def __init__(
        self,
        tokens: Optional[list[WalletToken]] = None,
        passes: Optional[list[SecureElementPass]] = None,
        remote_passes: Optional[list[SecureElementPass]] = None,
        events: Optional[WalletEvents] = None,
        api_version: str = STRIPE_API_VERSION,
    ) -> None:
        self.tokens: list[WalletToken] = list(tokens or [])
        self.local_passes: list[SecureElementPass] = list(passes or [])
        self.remote_passes: list[SecureElementPass] = list(remote_passes or [])
        self.events = events or WalletEvents()
        self.api_version = api_version

        # identifiers (last4) the TSP reports as tokenized even if hidden from list_tokens
        self.tokenized_identifiers: set[str] = set()
        self.push_result: PushProvisioningResult = ProvisioningSucceeded(card_token_id="tok_sandbox")
        self.tokenize_result: TokenizeResult = TokenizeSucceeded()
        self.list_tokens_error: Optional[Exception] = None
        self.is_tokenized_error: Optional[Exception] = None

        self.calls: list[tuple] = []
        self.ephemeral_keys: list[str] = []

    @classmethod
    def from_snapshot(cls, path: Union[str, Path]) -> "InMemoryWallet":
        """Load tokens from a JSON dump of ``listTokens()``.

        The file holds either a list of tokens or ``{"tokens": [...]}``.
        """
        payload = json.loads(Path(path).read_text())
        if isinstance(payload, dict):
            payload = payload.get("tokens", [])
        return cls(tokens=[WalletToken.model_validate(item) for item in payload])

    # WalletClient

    async def list_tokens(self) -> list[WalletToken]:
        self.calls.append(("list_tokens",))
        if self.list_tokens_error is not None:
            raise self.list_tokens_error
        return list(self.tokens)

    async def is_tokenized(
        self,
        identifier: str,
        network: CardNetwork,
        token_service_provider: TokenServiceProvider,
    ) -> bool:
        self.calls.append(("is_tokenized", identifier, network, token_service_provider))
        if self.is_tokenized_error is not None:
            raise self.is_tokenized_error
        if identifier in self.tokenized_identifiers:
            return True
        return any(
            token.fpan_last_four == identifier
            and token.network == network
            and token.token_service_provider == token_service_provider
            for token in self.tokens
        )

    async def tokenize(
        self,
        token_reference_id: str,
        token_service_provider: TokenServiceProvider,
        display_name: str,
        network: CardNetwork,
    ) -> TokenizeResult:
        self.calls.append(("tokenize", token_reference_id, token_service_provider, display_name, network))
        if isinstance(self.tokenize_result, TokenizeSucceeded):
            self._activate(token_reference_id)
        return self.tokenize_result

    async def push_provision(
        self,
        cardholder_name: str,
        ephemeral_key_provider: EphemeralKeyProvider,
        enable_logs: bool = True,
    ) -> PushProvisioningResult:
        self.calls.append(("push_provision", cardholder_name, enable_logs))
        key = await ephemeral_key_provider(self.api_version)
        self.ephemeral_keys.append(key)
        return self.push_result

    def _activate(self, token_reference_id: str) -> None:
        for index, token in enumerate(self.tokens):
            if token.issuer_token_id == token_reference_id:
                self.tokens[index] = token.model_copy(update={"token_state": TokenState.ACTIVE.value})
                logger.debug("Token %s is now active", token_reference_id)
                return

    # PassLibrary

    def passes(self) -> list[SecureElementPass]:
        return list(self.local_passes)

    def remote_secure_element_passes(self) -> list[SecureElementPass]:
        return list(self.remote_passes)

    def can_add_secure_element_pass(self, primary_account_identifier: str) -> bool:
        # PassKit answers False only once every wallet (local and remote) has the card
        if not primary_account_identifier:
            return True
        in_local = any(p.primary_account_identifier == primary_account_identifier for p in self.local_passes)
        in_remote = any(p.primary_account_identifier == primary_account_identifier for p in self.remote_passes)
        return not (in_local and in_remote)

    def add_pass(self, secure_pass: SecureElementPass, remote: bool = False) -> None:
        """Add a pass and notify subscribers, as the platform would."""
        (self.remote_passes if remote else self.local_passes).append(secure_pass)
        self.events.publish(WalletChangeEvent(added=(_changed(secure_pass),)))

    def remove_pass(self, primary_account_identifier: str) -> None:
        removed = [
            p for p in self.local_passes + self.remote_passes
            if p.primary_account_identifier == primary_account_identifier
        ]
        self.local_passes = [p for p in self.local_passes if p not in removed]
        self.remote_passes = [p for p in self.remote_passes if p not in removed]
        if removed:
            self.events.publish(WalletChangeEvent(removed=tuple(_changed(p) for p in removed)))


def _changed(secure_pass: SecureElementPass) -> ChangedPass:
    return ChangedPass(
        primary_account_identifier=secure_pass.primary_account_identifier,
        primary_account_number_suffix=secure_pass.primary_account_number_suffix,
    )
