# doipverify/config.py
"""
Centralized configuration for doip-verify.

All configurable values are read from environment variables with sensible defaults.
The module-level constants are only defaults: everything that influences
verification is carried in an explicit VerifierConfig that callers pass in.

Usage:
    from doipverify.config import VerifierConfig

    config = VerifierConfig.from_env(skip_verify_ssl=True)

Environment Variables:
    DOIP_HTTP_TIMEOUT: Timeout in seconds for token and proof fetches (default: 10)
    DOIP_MAX_CONCURRENT_CLAIMS: Max claims checked at once (default: 16)
    DOIP_PROXY_HOSTNAME: Proxy used when a proof cannot be fetched directly (default: unset)
    DOIP_CLOCK_SKEW_SECONDS: Allowed drift for exp/nbf checks (default: 30)
    DOIP_LOG: Set to "off" to silence per-claim warnings (default: on)
    DOIP_KEYSERVER: Keyserver for hkp lookups (default: keys.openpgp.org)
"""

import os
from dataclasses import dataclass, fields, replace
from typing import Final, Optional

# =============================================================================
# Network Configuration
# =============================================================================

HTTP_TIMEOUT: Final[float] = float(os.getenv("DOIP_HTTP_TIMEOUT", "10.0"))

MAX_CONCURRENT_CLAIMS: Final[int] = int(os.getenv("DOIP_MAX_CONCURRENT_CLAIMS", "16"))

# Fallback fetcher for proofs the service blocks direct access to
PROXY_HOSTNAME: Final[Optional[str]] = os.getenv("DOIP_PROXY_HOSTNAME") or None

KEYSERVER_DOMAIN: Final[str] = os.getenv("DOIP_KEYSERVER", "keys.openpgp.org")

# =============================================================================
# Verification Configuration
# =============================================================================

CLOCK_SKEW_SECONDS: Final[int] = int(os.getenv("DOIP_CLOCK_SKEW_SECONDS", "30"))

WARNINGS_ENABLED: Final[bool] = os.getenv("DOIP_LOG", "").lower() != "off"


@dataclass(frozen=True)
class VerifierConfig:
    """Settings threaded through the fetch, verify and claim-check stages."""

    http_timeout: float = HTTP_TIMEOUT
    max_concurrent: int = MAX_CONCURRENT_CLAIMS
    proxy_hostname: Optional[str] = PROXY_HOSTNAME
    skip_verify_ssl: bool = False
    warnings_enabled: bool = WARNINGS_ENABLED
    clock_skew_seconds: int = CLOCK_SKEW_SECONDS

    @classmethod
    def from_env(cls, **overrides) -> "VerifierConfig":
        """
        Build a config from the environment defaults.

        Args:
            **overrides: Field values that take precedence (None values are ignored).

        Raises:
            TypeError: If an override names an unknown field.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise TypeError(f"Unknown config fields: {', '.join(sorted(unknown))}")
        return replace(cls(), **{k: v for k, v in overrides.items() if v is not None})


def print_config(config: Optional[VerifierConfig] = None) -> None:
    """Print current configuration (useful for debugging)."""
    config = config or VerifierConfig.from_env()
    print("doip-verify configuration:")
    print(f"  HTTP_TIMEOUT:       {config.http_timeout}")
    print(f"  MAX_CONCURRENT:     {config.max_concurrent}")
    print(f"  PROXY_HOSTNAME:     {config.proxy_hostname}")
    print(f"  SKIP_VERIFY_SSL:    {config.skip_verify_ssl}")
    print(f"  WARNINGS_ENABLED:   {config.warnings_enabled}")
    print(f"  CLOCK_SKEW_SECONDS: {config.clock_skew_seconds}")
    print(f"  KEYSERVER_DOMAIN:   {KEYSERVER_DOMAIN}")


if __name__ == "__main__":
    print_config()
