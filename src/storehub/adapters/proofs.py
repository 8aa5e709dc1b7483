"""HTTP client for the external proof verification service.

Expected response for ``GET {service_url}/{namespace}``:

    {"proofs": [{"service": "twitter", "identifier": "alice", "valid": true}]}

A 404 means the service knows no proofs for the namespace.
"""

import logging

import httpx

from storehub.core.errors import ProofServiceError
from storehub.core.proofs import Proof, ProofSource

logger = logging.getLogger(__name__)


class HttpProofSource(ProofSource):
    """Fetches verified proofs over HTTP."""

    def __init__(
        self,
        service_url: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._service_url = service_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def fetch_proofs(self, namespace: str) -> list[Proof]:
        response = await self._client.get(f"{self._service_url}/{namespace}")
        if response.status_code == 404:
            return []
        if response.status_code != 200:
            raise ProofServiceError(
                f"Proof service returned HTTP {response.status_code}"
            )

        try:
            payload = response.json()
            return [
                Proof(
                    service=str(item["service"]),
                    identifier=str(item.get("identifier", "")),
                    valid=item.get("valid") is True,
                )
                for item in payload["proofs"]
            ]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise ProofServiceError("Malformed proof service response") from e

    async def close(self) -> None:
        await self._client.aclose()
