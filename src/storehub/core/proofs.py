"""Proof sufficiency gate for namespace writes."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field

from storehub.core.errors import NotEnoughProofError
from storehub.core.logging_schema import Component, LogEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Proof:
    """One externally verified ownership claim."""

    service: str
    identifier: str
    valid: bool


@dataclass(frozen=True)
class ProofPolicy:
    """How many valid proofs a namespace needs before it may write.

    ``required == 0`` disables the check. An empty ``trusted_services``
    accepts proofs from any service.
    """

    required: int = 0
    trusted_services: frozenset[str] = field(default_factory=frozenset)

    @property
    def enabled(self) -> bool:
        return self.required > 0

    def counts(self, proof: Proof) -> bool:
        if not proof.valid:
            return False
        return not self.trusted_services or proof.service in self.trusted_services


class ProofSource(ABC):
    """Read-only access to the proofs recorded for a namespace."""

    @abstractmethod
    async def fetch_proofs(self, namespace: str) -> list[Proof]:
        """Return all known proofs for namespace (may be slow, may raise)."""
        ...

    async def close(self) -> None:
        """Release resources held by the source."""
        return None


class ProofChecker:
    """Decides whether a namespace has enough proofs under a policy."""

    def __init__(self, policy: ProofPolicy, source: ProofSource | None = None) -> None:
        if policy.enabled and source is None:
            raise ValueError("A proof source is required when proofs are enabled")
        self.policy = policy
        self._source = source

    @property
    def enabled(self) -> bool:
        return self.policy.enabled

    async def check_proofs(self, namespace: str) -> bool:
        if not self.policy.enabled:
            return True

        if self._source is None:
            raise RuntimeError("Proof source not configured")
        proofs = await self._source.fetch_proofs(namespace)
        valid = sum(1 for proof in proofs if self.policy.counts(proof))
        return valid >= self.policy.required

    async def ensure_proofs(self, namespace: str) -> None:
        """Raise NotEnoughProofError unless check_proofs passes."""
        if await self.check_proofs(namespace):
            return
        logger.info(
            "Not enough proofs",
            extra={
                "event": LogEvent.PROOF_REJECTED,
                "component": Component.PROOF,
                "namespace": namespace,
                "required": self.policy.required,
            },
        )
        raise NotEnoughProofError()

    async def close(self) -> None:
        if self._source is not None:
            await self._source.close()


def build_policy(required: int, trusted_services: Iterable[str] = ()) -> ProofPolicy:
    return ProofPolicy(required=required, trusted_services=frozenset(trusted_services))
