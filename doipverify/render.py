"""
Output rendering for verified profiles.

Claims are rendered in the order the profile declares them; nothing here
re-sorts them. A profile without claims renders "Claims: none", which is
distinct from a list of claims that all failed.
"""

from __future__ import annotations

import json
import re
from enum import Enum
from typing import Optional, Sequence, Union

from rich.color import Color
from rich.console import Console
from rich.style import Style

from doipverify.aspe.profile import VerifiedProfile
from doipverify.claims import ClaimOutcome
from doipverify.openpgp import KeyProfile

Profile = Union[VerifiedProfile, KeyProfile]

VERIFIED_MARK = "✅"
UNVERIFIED_MARK = "❌"

_HEX_RGB_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


class PrintFormat(str, Enum):
    """Supported output formats."""

    JSON = "json"
    JSON_PRETTY = "json-pretty"
    TEXT = "text"


def render(profile: Profile, fmt: PrintFormat = PrintFormat.TEXT) -> str:
    """Render a profile as a string in the given format."""
    fmt = PrintFormat(fmt)
    if fmt is PrintFormat.JSON:
        return json.dumps(profile.to_dict(), ensure_ascii=False)
    if fmt is PrintFormat.JSON_PRETTY:
        return json.dumps(profile.to_dict(), indent=2, ensure_ascii=False)
    if isinstance(profile, KeyProfile):
        return _key_profile_text(profile)
    return _aspe_profile_text(profile)


def profile_style(profile: Profile) -> Optional[Style]:
    """Style for text output: the profile's own color, when it declares a valid one."""
    color = getattr(profile, "color", None)
    if not color or not _HEX_RGB_RE.match(color):
        return None
    return Style(color=Color.parse(color.lower()))


def print_profile(
    profile: Profile,
    fmt: PrintFormat = PrintFormat.TEXT,
    console: Optional[Console] = None,
) -> None:
    """Write a rendered profile to the console (stdout by default)."""
    console = console or Console()
    text = render(profile, fmt)
    style = profile_style(profile) if PrintFormat(fmt) is PrintFormat.TEXT else None
    console.out(text, style=style, highlight=False)


def _claim_lines(outcomes: Sequence[ClaimOutcome], indent: str) -> list:
    return [
        f"{indent}{o.claim_uri}: {VERIFIED_MARK if o.is_verified else UNVERIFIED_MARK}"
        for o in outcomes
    ]


def _aspe_profile_text(profile: VerifiedProfile) -> str:
    lines = [
        f"Profile URI: {profile.uri} Version: {profile.version or 0}",
        f"Fingerprint: {profile.fingerprint or ''}",
        f"Name: {profile.name or ''}",
        f"Description: {profile.description or ''}",
    ]
    if profile.outcomes:
        lines.append(f"Claims: {len(profile.outcomes)}")
        lines.extend(_claim_lines(profile.outcomes, "    "))
    else:
        lines.append("Claims: none")
    return "\n".join(lines)


def _key_profile_text(profile: KeyProfile) -> str:
    lines = [f"OpenPGP Key Fingerprint: {profile.fingerprint}"]
    for userid_proofs in profile.userid_proofs:
        lines.append(f"  UserID: {userid_proofs.userid}")
        lines.extend(_claim_lines(userid_proofs.proofs, "    "))
    return "\n".join(lines)
