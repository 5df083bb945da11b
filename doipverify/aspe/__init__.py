"""
ASPE (Ariadne Signature Profile Exchange) profile support.
"""

from .uri import AspeUri, GET_ID_URL_PATH, JWS_MIME
from .fetch import fetch_token
from .jose import (
    BoundVerifier,
    CurveFamily,
    EmbeddedKeyDescriptor,
    VerifiedToken,
    extract_key,
    key_fingerprint,
    parse_and_verify,
    select_and_verify,
    select_verifier,
)
from .profile import ProfileRecord, VerifiedProfile, assemble, decode_profile, verify_aspe_profile

__all__ = [
    "AspeUri",
    "GET_ID_URL_PATH",
    "JWS_MIME",
    "fetch_token",
    "BoundVerifier",
    "CurveFamily",
    "EmbeddedKeyDescriptor",
    "VerifiedToken",
    "extract_key",
    "key_fingerprint",
    "parse_and_verify",
    "select_and_verify",
    "select_verifier",
    "ProfileRecord",
    "VerifiedProfile",
    "assemble",
    "decode_profile",
    "verify_aspe_profile",
]
