"""Challenge-response authentication for namespace writes.

Clients sign the deployment's challenge text with the key that controls
a namespace. Two token formats are accepted side by side:

- v0 (legacy): base64 JSON ``{"publicKey": hex, "signature": hex DER}``,
  an ECDSA secp256k1 signature over SHA-256 of the challenge text.
- v1: ``v1:`` followed by a compact ES256K JWS whose payload carries the
  challenge (``gaiaChallenge``) and the signer key (``iss``).

Every failure surfaces as the same ValidationError. Reasons are only
logged server-side at DEBUG.
"""

import base64
import hashlib
import json
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from enum import StrEnum

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature

from storehub.core.errors import ValidationError
from storehub.core.logging_schema import Component, LogEvent

logger = logging.getLogger(__name__)

MIN_CHALLENGE_TEXT_LENGTH = 10

V1_TOKEN_PREFIX = "v1:"
_BEARER_PREFIX = "bearer "


class AuthVersion(StrEnum):
    """Supported token protocol versions."""

    V0 = "v0"
    V1 = "v1"


LATEST_AUTH_VERSION = AuthVersion.V1


class TokenRejected(Exception):
    """Internal signal carrying the reason a token failed verification."""


def get_challenge_text(server_name: str) -> str:
    """Return the deterministic challenge text for a deployment."""
    return json.dumps(
        ["storehub", "0", server_name, "storehub_storage_please_sign"],
        separators=(",", ":"),
    )


def _b64decode(data: str) -> bytes:
    """Decode standard or url-safe base64, padding optional."""
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))


def load_public_key(public_key_hex: str) -> ec.EllipticCurvePublicKey:
    try:
        return ec.EllipticCurvePublicKey.from_encoded_point(
            ec.SECP256K1(), bytes.fromhex(public_key_hex)
        )
    except ValueError as e:
        raise TokenRejected("unparseable public key") from e


def address_from_public_key(public_key_hex: str) -> str:
    """Derive the namespace address controlled by a public key.

    The key is normalized to its compressed SEC1 form so that compressed
    and uncompressed encodings of the same key map to one address.
    """
    key = load_public_key(public_key_hex)
    point = key.public_bytes(
        serialization.Encoding.X962, serialization.PublicFormat.CompressedPoint
    )
    return hashlib.sha256(hashlib.sha256(point).digest()).digest()[:20].hex()


def detect_version(token: str) -> AuthVersion:
    if token.startswith(V1_TOKEN_PREFIX):
        return AuthVersion.V1
    return AuthVersion.V0


def extract_token(headers: Mapping[str, str]) -> str | None:
    """Pull the bearer token out of the Authorization header."""
    value = headers.get("authorization") or headers.get("Authorization")
    if not value:
        return None
    if value[: len(_BEARER_PREFIX)].lower() != _BEARER_PREFIX:
        return None
    token = value[len(_BEARER_PREFIX) :].strip()
    return token or None


class TokenVerifier(ABC):
    """Verification strategy for one token version."""

    @abstractmethod
    def verify(self, token: str, namespace: str, challenge_text: str) -> bool:
        """Return True if token was signed by the key controlling namespace.

        Implementations may raise TokenRejected or any parsing error; the
        caller treats every exception as a rejection.
        """
        ...


class LegacyTokenVerifier(TokenVerifier):
    """v0 tokens: signature over the challenge text, no claims."""

    def verify(self, token: str, namespace: str, challenge_text: str) -> bool:
        decoded = json.loads(_b64decode(token))
        if not isinstance(decoded, dict):
            raise TokenRejected("token is not a JSON object")

        public_key_hex = decoded["publicKey"]
        signature = bytes.fromhex(decoded["signature"])

        if address_from_public_key(public_key_hex) != namespace:
            raise TokenRejected("signer does not control namespace")

        key = load_public_key(public_key_hex)
        key.verify(signature, challenge_text.encode(), ec.ECDSA(hashes.SHA256()))
        return True


class JwtTokenVerifier(TokenVerifier):
    """v1 tokens: ES256K compact JWS with challenge and expiry claims."""

    def __init__(
        self,
        hub_urls: Iterable[str] = (),
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._hub_urls = {url.rstrip("/") for url in hub_urls}
        self._clock = clock

    def verify(self, token: str, namespace: str, challenge_text: str) -> bool:
        compact = token[len(V1_TOKEN_PREFIX) :]
        encoded_header, encoded_payload, encoded_signature = compact.split(".")

        header = json.loads(_b64decode(encoded_header))
        if header.get("alg") != "ES256K":
            raise TokenRejected("unsupported signing algorithm")

        payload = json.loads(_b64decode(encoded_payload))
        if not isinstance(payload, dict):
            raise TokenRejected("payload is not a JSON object")

        public_key_hex = payload["iss"]
        if address_from_public_key(public_key_hex) != namespace:
            raise TokenRejected("signer does not control namespace")

        raw_signature = _b64decode(encoded_signature)
        if len(raw_signature) != 64:
            raise TokenRejected("signature must be 64 bytes")
        signature = encode_dss_signature(
            int.from_bytes(raw_signature[:32], "big"),
            int.from_bytes(raw_signature[32:], "big"),
        )
        signing_input = f"{encoded_header}.{encoded_payload}".encode("ascii")
        load_public_key(public_key_hex).verify(
            signature, signing_input, ec.ECDSA(hashes.SHA256())
        )

        if payload.get("gaiaChallenge") != challenge_text:
            raise TokenRejected("challenge text mismatch")

        expires_at = payload.get("exp")
        if expires_at is not None and float(expires_at) <= self._clock():
            raise TokenRejected("token expired")

        hub_url = payload.get("hubUrl")
        if self._hub_urls and hub_url is not None:
            if hub_url.rstrip("/") not in self._hub_urls:
                raise TokenRejected("token bound to a different hub")

        return True


class Authenticator:
    """Binds requests to the key that controls a namespace.

    Args:
        server_name: Deployment identity the challenge text is derived from.
        hub_urls: Accepted ``hubUrl`` claims for v1 tokens (empty: any).
        whitelist: If set, only these namespaces may authenticate.
        clock: Time source for expiry checks.
    """

    def __init__(
        self,
        server_name: str,
        hub_urls: Iterable[str] = (),
        whitelist: Iterable[str] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.server_name = server_name
        self.challenge_text = get_challenge_text(server_name)
        self._whitelist = frozenset(whitelist) if whitelist is not None else None
        self._verifiers: dict[AuthVersion, TokenVerifier] = {
            AuthVersion.V0: LegacyTokenVerifier(),
            AuthVersion.V1: JwtTokenVerifier(hub_urls=hub_urls, clock=clock),
        }

    def verify(self, token: str, namespace: str) -> bool:
        version = detect_version(token)
        verifier = self._verifiers.get(version)
        if verifier is None:
            return False
        try:
            return verifier.verify(token, namespace, self.challenge_text)
        except Exception as e:
            # any decoding failure, including RecursionError on nested JSON
            logger.debug(
                "Token rejected",
                extra={
                    "event": LogEvent.AUTH_REJECTED,
                    "component": Component.AUTH,
                    "auth_version": version.value,
                    "namespace": namespace,
                    "reason": str(e) or type(e).__name__,
                },
            )
            return False

    def authenticate(self, headers: Mapping[str, str], namespace: str) -> None:
        """Raise ValidationError unless headers carry a valid token for namespace."""
        if self._whitelist is not None and namespace not in self._whitelist:
            raise ValidationError()

        token = extract_token(headers)
        if token is None or not self.verify(token, namespace):
            raise ValidationError()
