"""
ASPE profiles: decoding a verified token into a profile and checking its claims.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx

from doipverify.aspe.fetch import fetch_token
from doipverify.aspe.jose import parse_and_verify
from doipverify.aspe.uri import AspeUri
from doipverify.claims import ClaimCheckerInterface, ClaimOrchestrator, ClaimOutcome
from doipverify.config import VerifierConfig

logger = logging.getLogger(__name__)

NAMESPACE = "http://ariadne.id/"
VERSION_CLAIM = NAMESPACE + "version"
NAME_CLAIM = NAMESPACE + "name"
DESCRIPTION_CLAIM = NAMESPACE + "description"
COLOR_CLAIM = NAMESPACE + "color"
CLAIMS_CLAIM = NAMESPACE + "claims"


@dataclass(frozen=True)
class ProfileRecord:
    """Profile attributes read from a verified token payload."""

    uri: str
    version: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    claim_uris: Tuple[str, ...] = ()
    fingerprint: Optional[str] = None


def decode_profile(
    subject_uri: str, payload: Dict[str, Any], fingerprint: Optional[str] = None
) -> ProfileRecord:
    """
    Map a verified payload onto a ProfileRecord.

    Every attribute is optional on its own: a missing or mistyped value
    leaves that field absent and does not affect the others.
    """
    version = payload.get(VERSION_CLAIM)
    if not isinstance(version, int) or isinstance(version, bool) or version < 0:
        version = None

    claims = payload.get(CLAIMS_CLAIM)
    if isinstance(claims, list):
        claim_uris = tuple(c for c in claims if isinstance(c, str))
    else:
        claim_uris = ()

    return ProfileRecord(
        uri=subject_uri,
        version=version,
        name=_optional_str(payload.get(NAME_CLAIM)),
        description=_optional_str(payload.get(DESCRIPTION_CLAIM)),
        color=_optional_str(payload.get(COLOR_CLAIM)),
        claim_uris=claim_uris,
        fingerprint=fingerprint,
    )


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


@dataclass(frozen=True)
class VerifiedProfile:
    """An authenticated profile together with the outcome of each of its claims."""

    record: ProfileRecord
    outcomes: Tuple[ClaimOutcome, ...]

    @property
    def uri(self) -> str:
        return self.record.uri

    @property
    def version(self) -> Optional[int]:
        return self.record.version

    @property
    def name(self) -> Optional[str]:
        return self.record.name

    @property
    def description(self) -> Optional[str]:
        return self.record.description

    @property
    def color(self) -> Optional[str]:
        return self.record.color

    @property
    def fingerprint(self) -> Optional[str]:
        return self.record.fingerprint

    @property
    def claim_uris(self) -> Tuple[str, ...]:
        return self.record.claim_uris

    def to_dict(self) -> dict:
        """Stable machine-readable form."""
        return {
            "profile_uri": self.uri,
            "fingerprint": self.fingerprint,
            "version": self.version,
            "name": self.name,
            "description": self.description,
            "color": self.color,
            "verified_proofs": [outcome.to_dict() for outcome in self.outcomes],
        }


def assemble(record: ProfileRecord, outcomes: Sequence[ClaimOutcome]) -> VerifiedProfile:
    """
    Combine a profile record with its claim outcomes.

    Raises:
        ValueError: If the outcomes do not line up with record.claim_uris.
    """
    outcome_uris = tuple(outcome.claim_uri for outcome in outcomes)
    if outcome_uris != record.claim_uris:
        raise ValueError("Claim outcomes do not match the profile's claim URIs")
    return VerifiedProfile(record=record, outcomes=tuple(outcomes))


async def verify_aspe_profile(
    profile_uri: str,
    checker: ClaimCheckerInterface,
    config: Optional[VerifierConfig] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> VerifiedProfile:
    """
    Fetch, authenticate and claim-check an ASPE profile.

    Args:
        profile_uri: An aspe:<domain>:<local-part> identifier.
        checker: Capability used to check each claim.
        config: Verification settings (defaults from the environment).
        client: Optional shared HTTP client for the token fetch.

    Returns:
        The VerifiedProfile.

    Raises:
        ProfileURIMalformed: If the URI is malformed.
        TokenFetchError: If the token cannot be fetched.
        AuthenticationError: If the token does not authenticate.
    """
    config = config or VerifierConfig.from_env()
    subject_uri = str(AspeUri.parse(profile_uri))

    token = await fetch_token(
        subject_uri,
        skip_verify_ssl=config.skip_verify_ssl,
        timeout=config.http_timeout,
        client=client,
    )
    verified = parse_and_verify(token, clock_skew_seconds=config.clock_skew_seconds)
    record = decode_profile(subject_uri, verified.payload, fingerprint=verified.fingerprint)

    logger.debug(f"Profile {subject_uri} declares {len(record.claim_uris)} claims")

    orchestrator = ClaimOrchestrator(
        checker,
        warnings_enabled=config.warnings_enabled,
        max_concurrent=config.max_concurrent,
    )
    outcomes: List[ClaimOutcome] = await orchestrator.verify_all(subject_uri, record.claim_uris)
    return assemble(record, outcomes)
