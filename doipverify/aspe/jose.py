"""
JOSE trust boundary for ASPE profile tokens.

A profile token is a compact JWS whose protected header carries the signer's
own public key (``jwk``). The key is trusted on first use: it is accepted
because it verifies the token it arrives with, not because anything vouches
for it. This module is the only place a token payload becomes readable:

    extract_key(token)          -> EmbeddedKeyDescriptor | None   (header only)
    select_verifier(descriptor) -> BoundVerifier                  (curve dispatch)
    BoundVerifier.verify(token) -> (payload, header)              (signature check)
"""

from __future__ import annotations

import base64
import json
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from cryptography.hazmat.primitives import hashes
from jwcrypto import jwk, jws
from jwcrypto.common import JWException, base64url_decode, json_decode

from doipverify.config import CLOCK_SKEW_SECONDS
from doipverify.errors import InvalidKey, SignatureInvalid, UnsupportedAlgorithm

logger = logging.getLogger(__name__)


# =============================================================================
# Key Extraction
# =============================================================================


@dataclass(frozen=True)
class EmbeddedKeyDescriptor:
    """Self-declared key found in a token header. Untrusted until it verifies."""

    kty: str
    curve: Optional[str]
    params: Dict[str, Any] = field(default_factory=dict, compare=False)


def extract_key(token: str) -> Optional[EmbeddedKeyDescriptor]:
    """
    Pull the embedded ``jwk`` out of a compact token header.

    Only the header segment is decoded; the payload and signature are
    never touched.

    Returns:
        The key descriptor, or None if the header is unreadable or carries
        no usable key object.
    """
    if not isinstance(token, str):
        return None

    segments = token.strip().split(".")
    if len(segments) != 3:
        return None

    try:
        header = json_decode(base64url_decode(segments[0]))
    except (ValueError, TypeError, UnicodeDecodeError, RecursionError):
        return None

    if not isinstance(header, dict):
        return None

    key_object = header.get("jwk")
    if not isinstance(key_object, dict):
        return None

    kty = key_object.get("kty")
    if not isinstance(kty, str):
        return None

    curve = key_object.get("crv")
    return EmbeddedKeyDescriptor(
        kty=kty,
        curve=curve if isinstance(curve, str) else None,
        params=dict(key_object),
    )


# =============================================================================
# Algorithm Selection
# =============================================================================


class CurveFamily(Enum):
    """Signature families accepted for embedded keys."""

    EDDSA_25519 = ("Ed25519", "OKP", "EdDSA")
    ECDSA_P256 = ("P-256", "EC", "ES256")

    def __init__(self, tag: str, kty: str, alg: str):
        self.tag = tag
        self.kty = kty
        self.alg = alg

    @classmethod
    def from_tag(cls, tag: Optional[str]) -> "CurveFamily":
        """
        Map a JWK ``crv`` value to its family.

        Raises:
            UnsupportedAlgorithm: For any tag other than "Ed25519" or "P-256".
        """
        if tag == "Ed25519":
            return cls.EDDSA_25519
        if tag == "P-256":
            return cls.ECDSA_P256
        raise UnsupportedAlgorithm(tag)


@dataclass(frozen=True)
class BoundVerifier:
    """A public key pinned to the one JWS algorithm its curve allows."""

    family: CurveFamily
    key: jwk.JWK
    clock_skew_seconds: int = CLOCK_SKEW_SECONDS

    def verify(self, token: str) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """
        Verify the token signature and decode it.

        Returns:
            Tuple of (payload claims, protected header).

        Raises:
            SignatureInvalid: If the signature, structure or validity window is bad.
        """
        try:
            jws_token = jws.JWS()
            jws_token.deserialize(token)
            jws_token.verify(self.key, alg=self.family.alg)

            payload_bytes = jws_token.payload
            if isinstance(payload_bytes, str):
                payload_bytes = payload_bytes.encode("utf-8")
            payload = json.loads(payload_bytes.decode("utf-8"))
            header = dict(jws_token.jose_header)
        except JWException as e:
            raise SignatureInvalid(f"JWS verification failed: {e}") from e
        except (ValueError, TypeError, UnicodeDecodeError, RecursionError) as e:
            raise SignatureInvalid(f"Invalid token payload: {e}") from e

        if not isinstance(payload, dict):
            raise SignatureInvalid("Token payload is not a JSON object")

        self._check_validity_window(payload)
        return payload, header

    def _check_validity_window(self, payload: Dict[str, Any]) -> None:
        now = int(time.time())

        exp = payload.get("exp")
        if _is_number(exp) and now > exp + self.clock_skew_seconds:
            raise SignatureInvalid(f"Token expired: exp={exp}, now={now}")

        nbf = payload.get("nbf")
        if _is_number(nbf) and now < nbf - self.clock_skew_seconds:
            raise SignatureInvalid(f"Token not yet valid: nbf={nbf}, now={now}")


def select_verifier(
    descriptor: Optional[EmbeddedKeyDescriptor],
    clock_skew_seconds: int = CLOCK_SKEW_SECONDS,
) -> BoundVerifier:
    """
    Choose the signature family from the key's curve and bind the key to it.

    Raises:
        InvalidKey: If there is no descriptor or the key material is unusable.
        UnsupportedAlgorithm: If the curve is not Ed25519 or P-256.
    """
    if descriptor is None:
        raise InvalidKey("Token header does not embed a public key")

    family = CurveFamily.from_tag(descriptor.curve)

    if descriptor.kty != family.kty:
        raise InvalidKey(f"Key type {descriptor.kty!r} does not match curve {family.tag!r}")

    try:
        key = jwk.JWK.from_json(json.dumps(descriptor.params))
        # Forces construction of the public key object so bad bytes surface here
        key.get_op_key("verify")
    except (JWException, ValueError, TypeError) as e:
        raise InvalidKey(f"Invalid embedded {family.tag} key: {e}") from e

    return BoundVerifier(family=family, key=key, clock_skew_seconds=clock_skew_seconds)


def select_and_verify(
    descriptor: Optional[EmbeddedKeyDescriptor],
    token: str,
    clock_skew_seconds: int = CLOCK_SKEW_SECONDS,
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Select the verifier for ``descriptor`` and verify ``token`` with it."""
    verifier = select_verifier(descriptor, clock_skew_seconds=clock_skew_seconds)
    return verifier.verify(token)


# =============================================================================
# Full Trust Boundary
# =============================================================================


@dataclass(frozen=True)
class VerifiedToken:
    """Decoded token that passed signature verification."""

    payload: Dict[str, Any]
    header: Dict[str, Any]
    family: CurveFamily
    fingerprint: str


def parse_and_verify(token: str, clock_skew_seconds: int = CLOCK_SKEW_SECONDS) -> VerifiedToken:
    """
    Authenticate a profile token against the key embedded in its own header.

    Raises:
        InvalidKey, UnsupportedAlgorithm, SignatureInvalid: On any
            authentication failure (all are AuthenticationError).
    """
    descriptor = extract_key(token)
    verifier = select_verifier(descriptor, clock_skew_seconds=clock_skew_seconds)
    payload, header = verifier.verify(token)

    logger.debug(f"Token verified with {verifier.family.tag} key")

    return VerifiedToken(
        payload=payload,
        header=header,
        family=verifier.family,
        fingerprint=key_fingerprint(verifier.key),
    )


def key_fingerprint(key: jwk.JWK) -> str:
    """
    ASPE fingerprint of a public key.

    First 16 bytes of the SHA-512 JWK thumbprint (RFC 7638), base32 without padding.
    """
    digest = base64url_decode(key.thumbprint(hashes.SHA512()))
    return base64.b32encode(digest[:16]).decode("ascii").rstrip("=")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
