"""
Error taxonomy for doip-verify.

Three families matter to callers:

- AuthenticationError: the profile token could not be authenticated
  (missing/invalid embedded key, unsupported algorithm, bad signature).
  Never retry without a new token.
- TransportError: the token could not be fetched. Safe to retry.
- ClaimError: a single claim could not be checked. Always recovered by the
  claim orchestrator and downgraded to an "unverified" outcome.
"""

from typing import Optional


class DoipError(Exception):
    """Base exception for doip-verify errors."""

    code: str = "E0000"
    help: Optional[str] = None
    exit_code: int = 1

    def __init__(self, message: Optional[str] = None, help: Optional[str] = None):
        super().__init__(message or self.default_message())
        if help is not None:
            self.help = help

    @classmethod
    def default_message(cls) -> str:
        return cls.__doc__.strip().splitlines()[0] if cls.__doc__ else cls.__name__

    def describe(self) -> str:
        """Render the error with its code and help text for terminal output."""
        text = f"[{self.code}] {self}"
        if self.help:
            text += f"\n  help: {self.help}"
        return text


# =============================================================================
# Input Errors
# =============================================================================


class ProfileURIMalformed(DoipError):
    """Profile URI does not match 'hkp:', 'hkps:', 'wkd:' or 'aspe:' pattern"""

    code = "E0001"
    help = (
        "Make sure the profile URI follows one of these patterns "
        "(hkp(s):<email_address> || hkp(s):<key_fingerprint> || "
        "wkd:<email_address> || aspe:<domain>:<fingerprint>)"
    )
    exit_code = 2


class ProfileNotProvided(DoipError):
    """No profile was provided"""

    code = "E0404"
    help = "Pass one of --aspe-uri, --fetch-key-uri or --input-key-file"
    exit_code = 2


class Unimplemented(DoipError):
    """Sorry this code path is unimplemented"""

    code = "E0000"


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthenticationError(DoipError):
    """Profile could not be authenticated"""

    code = "E0004"
    exit_code = 3


class InvalidKey(AuthenticationError):
    """Token does not carry a usable embedded public key"""


class UnsupportedAlgorithm(AuthenticationError):
    """Embedded key uses an unsupported curve"""

    def __init__(self, tag: Optional[str]):
        self.tag = tag
        super().__init__(f"Embedded key uses an unsupported curve: {tag!r}")


class SignatureInvalid(AuthenticationError):
    """Token signature does not verify against its embedded key"""


# =============================================================================
# Transport Errors
# =============================================================================


class TransportError(DoipError):
    """Failed to fetch profile"""

    code = "E0005"
    exit_code = 4


class TokenFetchError(TransportError):
    """Failed to fetch aspe JWT"""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch aspe JWT from {url}: {reason}")


# =============================================================================
# Per-Claim Errors
# =============================================================================


class ClaimError(DoipError):
    """Failed to verify claim"""

    code = "W0003"


class NoProviderMatch(ClaimError):
    """No service provider matches the claim URI"""

    def __init__(self, claim_uri: str):
        self.claim_uri = claim_uri
        super().__init__(f"No service provider matches {claim_uri}")


class ProofFetchError(ClaimError):
    """Failed to fetch proof from service provider"""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch proof from {url}: {reason}")
