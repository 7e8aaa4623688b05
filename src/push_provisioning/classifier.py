"""
Tokenization status classification.

We list every token on the device and match on the funding PAN's last four
digits rather than asking ``isTokenized()`` per card, because only
``listTokens()`` exposes the token state needed to spot a yellow path. See
https://stripe.com/docs/issuing/cards/digital-wallets?platform=Android#update-your-app
and
https://developers.google.com/pay/issuers/apis/push-provisioning/android/reading-wallet#listtokens
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from cryptography import x509
from cryptography.x509.oid import NameOID

from .brands import network_and_tsp
from .logging import get_logger
from .models.token import WalletToken
from .status import GREEN_PATH, TOKENIZED, GreenPath, TokenizationStatus, YellowPath
from .wallet.base import WalletClient

logger = get_logger(__name__)

# Subject of the certificate the Android tooling generates for debug builds:
# "CN=Android Debug,O=Android,C=US"
DEBUG_CERT_SUBJECT = {
    NameOID.COMMON_NAME: "Android Debug",
    NameOID.ORGANIZATION_NAME: "Android",
}


@dataclass(frozen=True)
class SigningInfo:
    """How the running app was built and signed.

    Args:
        debuggable: True for debug builds
        certificates: DER encoded signing certificates
    """

    debuggable: bool = False
    certificates: Sequence[bytes] = field(default_factory=tuple)

    def uses_default_debug_cert(self) -> bool:
        for der in self.certificates:
            cert = x509.load_der_x509_certificate(der)
            subject = {attribute.oid: attribute.value for attribute in cert.subject}
            if all(subject.get(oid) == value for oid, value in DEBUG_CERT_SUBJECT.items()):
                return True
        return False


def classify(
    card_last4: str,
    tokens: Sequence[WalletToken],
    brand: Optional[str] = None,
) -> TokenizationStatus:
    """Classify one card against the full, unfiltered token list.

    ``brand`` only feeds log output here; the returned status never depends
    on it.
    """
    matching = [token for token in tokens if token.fpan_last_four == card_last4]
    if not matching:
        return GREEN_PATH

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("matchingTokens => %s", [token.pretty_print() for token in matching])

    # last4 can collide between cards and we have no better tie-break than
    # the SDK's own order, so the first match wins.
    if len(matching) > 1:
        logger.warning(
            "%d wallet tokens match last4 %s (brand=%s); using the first one",
            len(matching),
            card_last4,
            brand,
        )
    token = matching[0]

    # The user already tried to add this card to Google Pay, likely with
    # manual provisioning, and stopped at the identity verification step-up.
    if token.needs_identity_verification:
        return YellowPath(token_reference_id=token.issuer_token_id)
    return TOKENIZED


class TokenizationStatusClassifier:
    """Classifies cards against the live wallet.

    Args:
        wallet: Wallet SDK handle
        signing: Build/signing info of the running app, used only by the
            incorrect-signing diagnostic
    """

    def __init__(self, wallet: WalletClient, signing: Optional[SigningInfo] = None) -> None:
        self._wallet = wallet
        self._signing = signing or SigningInfo()

    async def list_tokens(self) -> list[WalletToken]:
        tokens = await self._wallet.list_tokens()
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("listTokens() => %s", [token.pretty_print() for token in tokens])
        return tokens

    async def get_tokenization_status(
        self,
        last4: str,
        brand: Optional[str] = None,
    ) -> TokenizationStatus:
        """Query the wallet and classify a card.

        Wallet failures propagate; nothing is retried.
        """
        tokens = await self.list_tokens()
        status = classify(last4, tokens, brand)
        if isinstance(status, GreenPath):
            await self.detect_incorrect_signing(last4, brand)
        return status

    async def detect_incorrect_signing(self, last4: str, brand: Optional[str]) -> None:
        """Warn when a token exists that ``listTokens()`` is not showing us.

        Diagnostic only: every failure is logged and swallowed.
        """
        try:
            # without a brand we cannot ask the TSP, so assume the worst
            confirmed = brand is not None
            if confirmed:
                network, tsp = network_and_tsp(brand)
                is_tokenized = await self._wallet.is_tokenized(last4, network, tsp)
            else:
                is_tokenized = True

            if not is_tokenized:
                return

            if self._signing.debuggable and self._signing.uses_default_debug_cert():
                logger.error(
                    "Default debug signing certificate detected. Please check the readme for signing info"
                )
            elif confirmed:
                # For Visa the issuer app comes from CardMetaData.bankAppAddress in
                # the "Enroll PAN" response; for Mastercard from
                # productConfig.issuerMobileApp.openIssuerMobileAppAndroidIntent.packageName
                # in the "Digitize" response.
                logger.warning(
                    "Card %s may be tokenized but is missing from listTokens(); "
                    "check with your TSP that the issuer app field links to this app",
                    last4,
                )
        except Exception as e:
            logger.warning("Incorrect signing check failed for card %s: %s", last4, e)
