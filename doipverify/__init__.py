"""
doip-verify - Verification of decentralized identity profiles.

This package authenticates signed identity profiles (ASPE) against the key
they embed, and checks each identity claim against the service it names.
"""

__version__ = "0.3.0"

# Core pipeline
from .aspe import (
    AspeUri,
    CurveFamily,
    EmbeddedKeyDescriptor,
    ProfileRecord,
    VerifiedProfile,
    decode_profile,
    extract_key,
    parse_and_verify,
    select_and_verify,
    verify_aspe_profile,
)
from .claims import (
    ClaimCheckerInterface,
    ClaimOrchestrator,
    ClaimOutcome,
    ClaimVerificationResult,
    ServiceProviderInfo,
    Unverified,
    Verified,
)
from .config import VerifierConfig
from .errors import (
    AuthenticationError,
    ClaimError,
    DoipError,
    InvalidKey,
    SignatureInvalid,
    TransportError,
    UnsupportedAlgorithm,
)
from .openpgp import KeyProfile


# Outer surfaces (lazy imports to keep the core import light)
def __getattr__(name):
    """Lazy loading of the HTTP checker and renderers."""
    if name in ("HttpClaimChecker", "PROVIDERS"):
        from . import providers

        return getattr(providers, name)
    elif name in ("PrintFormat", "print_profile"):
        from . import render

        return getattr(render, name)
    raise AttributeError(f"module 'doipverify' has no attribute '{name}'")


__all__ = [
    "__version__",
    # Core
    "AspeUri",
    "CurveFamily",
    "EmbeddedKeyDescriptor",
    "ProfileRecord",
    "VerifiedProfile",
    "decode_profile",
    "extract_key",
    "parse_and_verify",
    "select_and_verify",
    "verify_aspe_profile",
    # Claims
    "ClaimCheckerInterface",
    "ClaimOrchestrator",
    "ClaimOutcome",
    "ClaimVerificationResult",
    "ServiceProviderInfo",
    "Verified",
    "Unverified",
    "KeyProfile",
    # Config and errors
    "VerifierConfig",
    "DoipError",
    "AuthenticationError",
    "InvalidKey",
    "SignatureInvalid",
    "UnsupportedAlgorithm",
    "TransportError",
    "ClaimError",
    # Lazy loaded
    "HttpClaimChecker",
    "PROVIDERS",
    "PrintFormat",
    "print_profile",
]
