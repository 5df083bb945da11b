"""
ASPE profile identifiers.

An ASPE URI names a profile hosted by an ASPE server:

    aspe:keyoxide.org:TOICV3SYXNJP7E4P5AOK5DHW44
         ^ domain     ^ local part (key fingerprint, base32)

The signed profile token lives at a well-known path under the domain.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from doipverify.errors import ProfileURIMalformed

GET_ID_URL_PATH = "/.well-known/aspe/id/"
JWS_MIME = "application/asp+jwt"

_DOMAIN_RE = re.compile(r"^[^\s/:]+$")
_LOCAL_PART_RE = re.compile(r"^[A-Z2-7]+$")


@dataclass(frozen=True)
class AspeUri:
    """Parsed aspe:<domain-part>:<local-part> identifier."""

    domain_part: str
    local_part: str

    @classmethod
    def parse(cls, text: str) -> "AspeUri":
        """
        Parse an ASPE URI.

        Raises:
            ProfileURIMalformed: If the scheme, domain or local part is invalid.
        """
        if not isinstance(text, str):
            raise ProfileURIMalformed(f"Not an aspe URI: {text!r}")

        parts = text.strip().split(":")
        if len(parts) != 3 or parts[0] != "aspe":
            raise ProfileURIMalformed(f"Not an aspe URI: {text!r}")

        domain_part, local_part = parts[1], parts[2].upper()
        if not _DOMAIN_RE.match(domain_part):
            raise ProfileURIMalformed(f"Invalid domain in aspe URI: {text!r}")
        if not _LOCAL_PART_RE.match(local_part):
            raise ProfileURIMalformed(f"Invalid local part in aspe URI: {text!r}")

        return cls(domain_part=domain_part.lower(), local_part=local_part)

    @property
    def fetch_url(self) -> str:
        """HTTPS URL the signed profile token is served from."""
        return f"https://{self.domain_part}{GET_ID_URL_PATH}{self.local_part}"

    def __str__(self) -> str:
        return f"aspe:{self.domain_part}:{self.local_part}"


def is_aspe_uri(text: str) -> bool:
    """Check if a string looks like an aspe URI (without validating it)."""
    return isinstance(text, str) and text.startswith("aspe:")
