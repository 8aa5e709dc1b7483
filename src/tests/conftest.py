"""Shared test fixtures for storehub tests."""

import base64
import json
import os
from collections.abc import AsyncIterator, Callable

import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature

from storehub.adapters.storage.memory import MemoryDriver
from storehub.app.config import DriverConfig, Settings
from storehub.core.authentication import address_from_public_key, get_challenge_text
from storehub.core.interfaces import ListFilesResult
from storehub.core.proofs import Proof, ProofSource

SERVER_NAME = "hub.test"
READ_URL_PREFIX = "https://read.hub.test/"


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


class Signer:
    """Test identity holding a secp256k1 key and its namespace address."""

    def __init__(self) -> None:
        self.private_key = ec.generate_private_key(ec.SECP256K1())
        self.public_key_hex = (
            self.private_key.public_key()
            .public_bytes(
                serialization.Encoding.X962,
                serialization.PublicFormat.CompressedPoint,
            )
            .hex()
        )
        self.address = address_from_public_key(self.public_key_hex)

    def v0_token(self, challenge_text: str) -> str:
        signature = self.private_key.sign(
            challenge_text.encode(), ec.ECDSA(hashes.SHA256())
        )
        document = {"publicKey": self.public_key_hex, "signature": signature.hex()}
        return base64.b64encode(json.dumps(document).encode()).decode("ascii")

    def v1_token(self, challenge_text: str, **claims: object) -> str:
        header = _b64url(json.dumps({"typ": "JWT", "alg": "ES256K"}).encode())
        payload = _b64url(
            json.dumps(
                {"gaiaChallenge": challenge_text, "iss": self.public_key_hex, **claims}
            ).encode()
        )
        der = self.private_key.sign(
            f"{header}.{payload}".encode("ascii"), ec.ECDSA(hashes.SHA256())
        )
        r, s = decode_dss_signature(der)
        signature = r.to_bytes(32, "big") + s.to_bytes(32, "big")
        return f"v1:{header}.{payload}.{_b64url(signature)}"


class CountingDriver(MemoryDriver):
    """MemoryDriver that records how often it was called."""

    def __init__(self, read_url_prefix: str = READ_URL_PREFIX, page_size: int = 100) -> None:
        super().__init__(read_url_prefix=read_url_prefix, page_size=page_size)
        self.store_calls = 0
        self.list_calls = 0

    async def store(self, namespace, path, content, content_type) -> str:
        self.store_calls += 1
        return await super().store(namespace, path, content, content_type)

    async def list_files(self, namespace: str, page: str | None) -> ListFilesResult:
        self.list_calls += 1
        return await super().list_files(namespace, page)


class FakeProofSource(ProofSource):
    """ProofSource returning a fixed proof list per namespace."""

    def __init__(self, proofs: dict[str, list[Proof]] | None = None) -> None:
        self.proofs = proofs or {}
        self.calls: list[str] = []
        self.closed = False

    async def fetch_proofs(self, namespace: str) -> list[Proof]:
        self.calls.append(namespace)
        return self.proofs.get(namespace, [])

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove STOREHUB_ env vars to ensure clean test environment."""
    for key in list(os.environ.keys()):
        if key.startswith("STOREHUB_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def challenge_text() -> str:
    return get_challenge_text(SERVER_NAME)


@pytest.fixture
def signer() -> Signer:
    return Signer()


@pytest.fixture
def make_signer() -> Callable[[], Signer]:
    return Signer


@pytest.fixture
def driver() -> CountingDriver:
    return CountingDriver()


@pytest.fixture
def make_driver() -> Callable[..., CountingDriver]:
    return CountingDriver


@pytest.fixture
def proof_source() -> FakeProofSource:
    return FakeProofSource()


@pytest.fixture
def settings() -> Settings:
    """Settings for an in-memory hub named SERVER_NAME."""
    return Settings(
        server={"server_name": SERVER_NAME},
        driver=DriverConfig(backend="memory", read_url_prefix=READ_URL_PREFIX),
    )


@pytest.fixture
def body() -> Callable[..., AsyncIterator[bytes]]:
    """Factory for async request body streams."""

    async def _stream(*chunks: bytes) -> AsyncIterator[bytes]:
        for chunk in chunks:
            yield chunk

    return _stream


@pytest.fixture
def auth_header() -> Callable[[str], dict[str, str]]:
    def _header(token: str) -> dict[str, str]:
        return {"authorization": f"bearer {token}"}

    return _header
