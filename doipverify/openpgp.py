"""
OpenPGP key profiles.

Certificate parsing happens elsewhere; this module starts from a key
fingerprint and the proof URIs found in each user ID's notations, and
checks every proof with the shared claim orchestrator.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Mapping, Sequence, Tuple

from doipverify.claims import ClaimOrchestrator, ClaimOutcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserIDVerifiedProofs:
    """Proof outcomes for one user ID of a key."""

    userid: str
    proofs: Tuple[ClaimOutcome, ...]

    def to_dict(self) -> dict:
        return {"userid": self.userid, "proofs": [p.to_dict() for p in self.proofs]}


@dataclass(frozen=True)
class KeyProfile:
    """An OpenPGP key with the verified proofs of each of its user IDs."""

    fingerprint: str
    proof_uri: str
    userid_proofs: Tuple[UserIDVerifiedProofs, ...]

    @classmethod
    async def from_proofs(
        cls,
        fingerprint: str,
        userid_proofs: Mapping[str, Sequence[str]],
        orchestrator: ClaimOrchestrator,
    ) -> "KeyProfile":
        """
        Verify the proofs of every user ID of a key.

        Args:
            fingerprint: Hex fingerprint of the primary key.
            userid_proofs: User ID label -> proof URIs, in certificate order.
            orchestrator: Orchestrator used to check the proofs.
        """
        fingerprint = fingerprint.replace(" ", "").upper()
        proof_uri = f"openpgp4fpr:{fingerprint}"

        labels: List[str] = list(userid_proofs)
        results = await asyncio.gather(
            *(orchestrator.verify_all(proof_uri, list(userid_proofs[label])) for label in labels)
        )

        logger.debug(f"Checked proofs for {len(labels)} user IDs of {fingerprint}")

        return cls(
            fingerprint=fingerprint,
            proof_uri=proof_uri,
            userid_proofs=tuple(
                UserIDVerifiedProofs(userid=label, proofs=tuple(outcomes))
                for label, outcomes in zip(labels, results)
            ),
        )

    def to_dict(self) -> dict:
        return {
            "fingerprint": self.fingerprint,
            "proof_uri": self.proof_uri,
            "userid_proofs": [u.to_dict() for u in self.userid_proofs],
        }


def format_user_id(name: str = "", email: str = "") -> str:
    """Render a user ID label as ``Name <email>``."""
    return f"{name or ''} <{email or ''}>"
