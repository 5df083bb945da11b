"""
Concurrent claim verification.

Every claim URI in a profile is checked independently against the service it
points at. All checks for a profile run concurrently and the batch always
completes: a claim that cannot be checked is recorded as unverified, it never
fails the profile or cancels its siblings.

Example:
    >>> orchestrator = ClaimOrchestrator(HttpClaimChecker(config), warnings_enabled=True)
    >>> outcomes = await orchestrator.verify_all(
    ...     "aspe:keyoxide.org:TOICV3SYXNJP7E4P5AOK5DHW44",
    ...     ["https://github.com/alice"],
    ... )
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, TypeVar, Union

from doipverify.config import MAX_CONCURRENT_CLAIMS

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRUNCATED_SUBJECT_LENGTH = 30


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class ServiceProviderInfo:
    """Identity of the service a claim was checked against."""

    id: str
    name: str
    homepage: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ServiceMatch:
    """A service provider that a claim URI matched, plus what to fetch."""

    provider: ServiceProviderInfo
    proof_url: str
    params: Dict[str, str]


@dataclass(frozen=True)
class ClaimVerificationResult:
    """What a claim checker reports for one claim."""

    result: bool
    provider_info: Optional[ServiceProviderInfo] = None
    proxy_used: Optional[str] = None


@dataclass(frozen=True)
class Verified:
    """The claim was confirmed by its service."""

    provider_info: Optional[ServiceProviderInfo] = None
    proxy_used: Optional[str] = None

    is_verified = True

    def to_dict(self) -> dict:
        return {
            "result": True,
            "service_provider_info": self.provider_info.to_dict() if self.provider_info else None,
            "proxy_used": self.proxy_used,
        }


@dataclass(frozen=True)
class Unverified:
    """The claim could not be confirmed (no match, failed fetch, or mismatch)."""

    reason: Optional[str] = None

    is_verified = False

    def to_dict(self) -> None:
        return None


ClaimVerificationOutcome = Union[Verified, Unverified]


@dataclass(frozen=True)
class ClaimOutcome:
    """A claim URI paired with its verification outcome."""

    claim_uri: str
    outcome: ClaimVerificationOutcome

    @property
    def is_verified(self) -> bool:
        return self.outcome.is_verified

    def to_dict(self) -> dict:
        return {"uri": self.claim_uri, "verification_result": self.outcome.to_dict()}


def outcome_from_result(result: ClaimVerificationResult) -> ClaimVerificationOutcome:
    """Convert a checker result into a claim outcome."""
    if result.result:
        return Verified(provider_info=result.provider_info, proxy_used=result.proxy_used)
    return Unverified(reason="proof not found at service")


# =============================================================================
# Claim Checker Interface
# =============================================================================


class ClaimCheckerInterface(ABC):
    """Abstract interface for checking a single claim against its service."""

    @abstractmethod
    async def find_matches(self, claim_uri: str) -> List[ServiceMatch]:
        """Locate the service providers a claim URI refers to. Raises ClaimError."""
        pass

    @abstractmethod
    async def verify(
        self, claim_uri: str, subject_uri: str, matches: List[ServiceMatch]
    ) -> ClaimVerificationResult:
        """Check the claim against its matched services. Raises ClaimError."""
        pass


# =============================================================================
# Ordered Fan-out
# =============================================================================


async def gather_in_order(
    operations: Sequence[Callable[[], Awaitable[T]]],
    max_concurrent: int = MAX_CONCURRENT_CLAIMS,
) -> List[T]:
    """
    Run independent async operations concurrently and return their results in input order.

    Each result is tagged with the index of the operation that produced it,
    so the ordering does not depend on completion order. Errors are not
    handled here; operations that must not fail the batch catch their own.
    """
    if not operations:
        return []

    semaphore = asyncio.Semaphore(max(1, max_concurrent))

    async def run_one(index: int, operation: Callable[[], Awaitable[T]]):
        async with semaphore:
            return index, await operation()

    tagged = await asyncio.gather(*(run_one(i, op) for i, op in enumerate(operations)))

    results: List[Any] = [None] * len(operations)
    for index, value in tagged:
        results[index] = value
    return results


# =============================================================================
# Orchestrator
# =============================================================================


class ClaimOrchestrator:
    """
    Verifies all claims of one subject concurrently.

    Per-claim failures are logged as warnings (when enabled) and recorded
    as Unverified; they never propagate out of verify_all().
    """

    def __init__(
        self,
        checker: ClaimCheckerInterface,
        warnings_enabled: bool = True,
        max_concurrent: int = MAX_CONCURRENT_CLAIMS,
    ):
        """
        Args:
            checker: Capability that matches and checks single claims.
            warnings_enabled: Emit a warning log for each claim that errors.
            max_concurrent: Maximum claims checked at the same time.
        """
        self._checker = checker
        self._warnings_enabled = warnings_enabled
        self._max_concurrent = max_concurrent

        # Stats
        self._stats = {
            "claims_checked": 0,
            "claims_verified": 0,
            "claims_unverified": 0,
        }

    async def verify_all(self, subject_uri: str, claim_uris: Sequence[str]) -> List[ClaimOutcome]:
        """
        Verify every claim URI for ``subject_uri``.

        Returns:
            One ClaimOutcome per claim URI, in input order.
        """
        if not claim_uris:
            return []

        operations = [
            (lambda uri=claim_uri: self._verify_one(uri, subject_uri)) for claim_uri in claim_uris
        ]
        return await gather_in_order(operations, max_concurrent=self._max_concurrent)

    async def _verify_one(self, claim_uri: str, subject_uri: str) -> ClaimOutcome:
        self._stats["claims_checked"] += 1

        try:
            matches = await self._checker.find_matches(claim_uri)
            result = await self._checker.verify(claim_uri, subject_uri, matches)
            outcome = outcome_from_result(result)
        except Exception as e:
            self._warn(claim_uri, subject_uri, e)
            outcome = Unverified(reason=str(e) or type(e).__name__)

        if outcome.is_verified:
            self._stats["claims_verified"] += 1
        else:
            self._stats["claims_unverified"] += 1

        return ClaimOutcome(claim_uri=claim_uri, outcome=outcome)

    def _warn(self, claim_uri: str, subject_uri: str, error: Exception) -> None:
        if not self._warnings_enabled:
            return
        truncated = subject_uri[:TRUNCATED_SUBJECT_LENGTH]
        logger.warning(f"Failed to verify {truncated!r} for {claim_uri!r} due to {error!r}")

    @property
    def stats(self) -> Dict[str, int]:
        """Return claim verification statistics."""
        return self._stats.copy()
