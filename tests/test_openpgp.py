"""
Tests for OpenPGP key profiles.
"""

import pytest

from doipverify.claims import ClaimOrchestrator
from doipverify.openpgp import KeyProfile, format_user_id

FINGERPRINT = "3637 2025 23E7 C130 9AB7 9E99 EF2D C582 7B44 5F4B"


class TestKeyProfile:
    """Tests for KeyProfile.from_proofs()."""

    @pytest.mark.asyncio
    async def test_verifies_each_user_id(self, fake_checker_factory):
        """Each user ID keeps its own proofs, in input order."""
        userid_proofs = {
            "Alice <alice@example.org>": ["https://a.example/alice", "https://b.example/alice"],
            "Alice Work <alice@work.example>": ["https://c.example/alice"],
            "Alice Old <alice@old.example>": [],
        }
        checker = fake_checker_factory({"https://b.example/alice": "error"})
        orchestrator = ClaimOrchestrator(checker, warnings_enabled=False)

        profile = await KeyProfile.from_proofs(FINGERPRINT, userid_proofs, orchestrator)

        assert profile.fingerprint == "3637202523E7C1309AB79E99EF2DC5827B445F4B"
        assert profile.proof_uri == "openpgp4fpr:3637202523E7C1309AB79E99EF2DC5827B445F4B"
        assert [u.userid for u in profile.userid_proofs] == list(userid_proofs)
        assert [[p.is_verified for p in u.proofs] for u in profile.userid_proofs] == [
            [True, False],
            [True],
            [],
        ]
        assert set(checker.subjects) == {profile.proof_uri}

    @pytest.mark.asyncio
    async def test_no_user_ids(self, fake_checker_factory):
        checker = fake_checker_factory({})
        profile = await KeyProfile.from_proofs(FINGERPRINT, {}, ClaimOrchestrator(checker))

        assert profile.userid_proofs == ()
        assert checker.calls == []

    @pytest.mark.asyncio
    async def test_to_dict(self, fake_checker_factory):
        orchestrator = ClaimOrchestrator(fake_checker_factory({}))
        profile = await KeyProfile.from_proofs(
            FINGERPRINT, {"Alice <alice@example.org>": ["https://a.example/alice"]}, orchestrator
        )

        data = profile.to_dict()
        assert data["fingerprint"] == "3637202523E7C1309AB79E99EF2DC5827B445F4B"
        assert data["userid_proofs"][0]["proofs"][0]["uri"] == "https://a.example/alice"
        assert data["userid_proofs"][0]["proofs"][0]["verification_result"]["result"] is True

    @pytest.mark.asyncio
    async def test_fingerprint_upper_cased(self, fake_checker_factory):
        """Lower-case input is normalized to the upper-case hex form."""
        checker = fake_checker_factory({})
        profile = await KeyProfile.from_proofs(
            "3637202523e7c1309ab79e99ef2dc5827b445f4b",
            {"Alice <alice@example.org>": ["https://a.example/alice"]},
            ClaimOrchestrator(checker),
        )

        assert profile.fingerprint == "3637202523E7C1309AB79E99EF2DC5827B445F4B"
        assert checker.subjects == ["openpgp4fpr:3637202523E7C1309AB79E99EF2DC5827B445F4B"]


class TestFormatUserId:
    """Tests for format_user_id()."""

    def test_name_and_email(self):
        assert format_user_id("Alice", "alice@example.org") == "Alice <alice@example.org>"

    def test_missing_parts(self):
        assert format_user_id(None, "alice@example.org") == " <alice@example.org>"
        assert format_user_id("Alice") == "Alice <>"
