"""
Tests for ASPE URI parsing.
"""

import pytest

from doipverify.aspe.uri import AspeUri, is_aspe_uri
from doipverify.errors import ProfileURIMalformed


class TestAspeUri:
    """Tests for AspeUri.parse()."""

    def test_parse(self):
        uri = AspeUri.parse("aspe:keyoxide.org:TOICV3SYXNJP7E4P5AOK5DHW44")

        assert uri.domain_part == "keyoxide.org"
        assert uri.local_part == "TOICV3SYXNJP7E4P5AOK5DHW44"
        assert uri.fetch_url == "https://keyoxide.org/.well-known/aspe/id/TOICV3SYXNJP7E4P5AOK5DHW44"

    def test_canonical_form(self):
        """Local part is upper-cased and domain lower-cased."""
        uri = AspeUri.parse("aspe:KeyOxide.org:toicv3syxnjp7e4p5aok5dhw44")
        assert str(uri) == "aspe:keyoxide.org:TOICV3SYXNJP7E4P5AOK5DHW44"

    def test_port_not_allowed(self):
        with pytest.raises(ProfileURIMalformed):
            AspeUri.parse("aspe:keyoxide.org:8080:TOICV3SYXNJP7E4P5AOK5DHW44")

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "aspe:",
            "aspe:keyoxide.org",
            "aspe::TOICV3SYXNJP7E4P5AOK5DHW44",
            "aspe:keyoxide.org:",
            "aspe:key oxide.org:TOICV3SYXNJP7E4P5AOK5DHW44",
            "aspe:keyoxide.org/path:TOICV3SYXNJP7E4P5AOK5DHW44",
            "aspe:keyoxide.org:TOICV3SYXNJP7E4P5AOK5DHW1",
            "hkp:keyoxide.org:TOICV3SYXNJP7E4P5AOK5DHW44",
            None,
        ],
    )
    def test_malformed(self, text):
        with pytest.raises(ProfileURIMalformed):
            AspeUri.parse(text)


def test_is_aspe_uri():
    assert is_aspe_uri("aspe:anything")
    assert not is_aspe_uri("wkd:alice@example.org")
    assert not is_aspe_uri(None)
