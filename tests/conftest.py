"""
Shared pytest fixtures for doip-verify tests.
"""

import asyncio
import json
from typing import Callable, Dict, List, Optional

import pytest
from jwcrypto import jwk, jws
from jwcrypto.common import base64url_encode, json_encode

from doipverify.claims import (
    ClaimCheckerInterface,
    ClaimVerificationResult,
    ServiceMatch,
    ServiceProviderInfo,
)
from doipverify.errors import NoProviderMatch, ProofFetchError

SUBJECT_URI = "aspe:example.org:ABCDEFGHIJKLMNOPQRSTUVWXYZ"

FAKE_PROVIDER = ServiceProviderInfo(id="fake", name="Fake Service", homepage="https://service.example")


def sign_token(key: jwk.JWK, payload: dict, alg: str, header_jwk: Optional[dict] = None) -> str:
    """Sign ``payload`` with ``key``, embedding ``header_jwk`` (default: the public key)."""
    header = {
        "alg": alg,
        "typ": "JWT",
        "jwk": header_jwk if header_jwk is not None else key.export_public(as_dict=True),
    }
    token = jws.JWS(json.dumps(payload))
    token.add_signature(key, None, json_encode(header), None)
    return token.serialize(compact=True)


def replace_payload(token: str, payload: dict) -> str:
    """Swap the payload segment of a compact token, keeping header and signature."""
    header, _, signature = token.split(".")
    return ".".join([header, base64url_encode(json.dumps(payload)), signature])


def encode_header(header: dict) -> str:
    return base64url_encode(json.dumps(header))


@pytest.fixture
def ed25519_key() -> jwk.JWK:
    """Generate a fresh Ed25519 key."""
    return jwk.JWK.generate(kty="OKP", crv="Ed25519")


@pytest.fixture
def p256_key() -> jwk.JWK:
    """Generate a fresh P-256 key."""
    return jwk.JWK.generate(kty="EC", crv="P-256")


@pytest.fixture
def sample_payload() -> dict:
    """Sample profile payload."""
    return {
        "http://ariadne.id/version": 1,
        "http://ariadne.id/type": "profile",
        "http://ariadne.id/name": "Alice",
        "http://ariadne.id/description": "Just Alice",
        "http://ariadne.id/color": "#6855c3",
        "http://ariadne.id/claims": [
            "https://service.example/alice",
            "https://other.example/@alice",
        ],
    }


@pytest.fixture
def make_token(ed25519_key) -> Callable[..., str]:
    """Factory for Ed25519-signed profile tokens."""

    def _make(payload: dict, **kwargs) -> str:
        return sign_token(ed25519_key, payload, "EdDSA", **kwargs)

    return _make


class FakeClaimChecker(ClaimCheckerInterface):
    """
    Claim checker driven by a URI -> behaviour table.

    Behaviours: "ok", "mismatch", "nomatch", "error" (ClaimError),
    "crash" (unexpected exception), "hang" (waits until cancelled).
    """

    def __init__(self, behaviours: Dict[str, str], delays: Optional[Dict[str, float]] = None):
        self.behaviours = behaviours
        self.delays = delays or {}
        self.calls: List[str] = []
        self.subjects: List[str] = []
        self.cancelled = 0

    async def find_matches(self, claim_uri: str) -> List[ServiceMatch]:
        self.calls.append(claim_uri)
        if self.behaviours.get(claim_uri, "ok") == "nomatch":
            raise NoProviderMatch(claim_uri)
        return [ServiceMatch(provider=FAKE_PROVIDER, proof_url=claim_uri, params={})]

    async def verify(self, claim_uri, subject_uri, matches) -> ClaimVerificationResult:
        self.subjects.append(subject_uri)
        behaviour = self.behaviours.get(claim_uri, "ok")

        if behaviour == "hang":
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                self.cancelled += 1
                raise

        await asyncio.sleep(self.delays.get(claim_uri, 0))

        if behaviour == "error":
            raise ProofFetchError(claim_uri, "connection refused")
        if behaviour == "crash":
            raise RuntimeError("network unreachable")
        return ClaimVerificationResult(
            result=behaviour == "ok",
            provider_info=FAKE_PROVIDER,
            proxy_used=None,
        )


@pytest.fixture
def fake_checker_factory() -> Callable[..., FakeClaimChecker]:
    return FakeClaimChecker
