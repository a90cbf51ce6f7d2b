"""Tests for vendor normalization and synonym rules."""

import pytest

from bank_gl_match.config import BASE_VENDOR_SYNONYMS, VendorConfig
from bank_gl_match.matching.vendors import VendorNormalizer, build_synonym_rules


@pytest.fixture
def normalizer():
    return VendorNormalizer.from_config(VendorConfig())


class TestNormalize:
    """Tests for VendorNormalizer.normalize."""

    def test_empty_vendor(self, normalizer):
        assert normalizer.normalize("") == ""
        assert normalizer.normalize("", "ZELLE PAYMENT TO JOHN SMITH") == ""

    def test_first_word_of_plain_name(self, normalizer):
        assert normalizer.normalize("  acme supply co ") == "ACME"

    def test_peer_payment_uses_description_name(self, normalizer):
        result = normalizer.normalize("ZELLE", "ZELLE PAYMENT TO JOHN SMITH JPM99ABC123")
        assert result == "JOHN"

    def test_peer_payment_from(self, normalizer):
        result = normalizer.normalize("Zelle", "Zelle payment from Paul Odea")
        assert result == "PAUL"

    def test_peer_payment_without_description(self, normalizer):
        assert normalizer.normalize("ZELLE") == "ZELLE"

    def test_peer_payment_unparseable_description_falls_through(self, normalizer):
        assert normalizer.normalize("ZELLE", "ZELLE PAYMENT TO 555-1234") == "ZELLE"

    def test_description_ignored_for_other_vendors(self, normalizer):
        assert normalizer.normalize("ACME", "ZELLE PAYMENT TO JOHN SMITH") == "ACME"

    @pytest.mark.parametrize(
        "vendor,expected",
        [
            ("CITIBANK ONLINE PYMT", "CITI CARD"),
            ("BK OF AMER VISA ONLINE", "BANK OF AMERICA"),
            ("Chase Credit Card Autopay", "CHASE"),
            ("SBA EIDL LOAN PMT", "SBA"),
            ("Katrina Ohanyan", "KATERINA"),
        ],
    )
    def test_synonym_lookup(self, normalizer, vendor, expected):
        assert normalizer.normalize(vendor) == expected

    def test_first_matching_key_wins(self, normalizer):
        # Contains fragments of both BANK OF AMERICA and CHASE; the earlier key wins
        assert normalizer.normalize("CHASE CARD BK OF XFER") == "BANK OF AMERICA"

    @pytest.mark.parametrize(
        "vendor,expected",
        [
            ("ORIG CO NAME:ADP PAYROLL", "ADP"),
            ("PAYMENT TO ACME CORP", "ACME"),
            ("ORIG CO NAME:", ""),
        ],
    )
    def test_prefixes_stripped(self, normalizer, vendor, expected):
        assert normalizer.normalize(vendor) == expected

    @pytest.mark.parametrize("token", ["JOHN", "ACME", "CHASE", "SBA", "KATERINA"])
    def test_normalization_is_idempotent_on_canonical_tokens(self, normalizer, token):
        once = normalizer.normalize(token)
        assert once == token
        assert normalizer.normalize(once) == once


class TestSynonymRules:
    """Tests for build_synonym_rules."""

    def test_base_order_preserved(self):
        rules = build_synonym_rules(BASE_VENDOR_SYNONYMS)
        assert [name for name, _ in rules] == list(BASE_VENDOR_SYNONYMS)

    def test_new_external_keys_follow_base_keys(self):
        rules = build_synonym_rules({"A": ["X"]}, {"B": ["y"]})
        assert rules == [("A", ("X",)), ("B", ("Y",))]

    def test_extend_appends_fragments(self):
        rules = build_synonym_rules({"CHASE": ["CHASE CARD"]}, {"CHASE": ["JPMC", "CHASE CARD"]})
        assert rules == [("CHASE", ("CHASE CARD", "JPMC"))]

    def test_override_replaces_fragments(self):
        rules = build_synonym_rules(
            {"CHASE": ["CHASE CARD"], "SBA": ["SBA LOAN"]},
            {"CHASE": ["JPMC"]},
            precedence="override",
        )
        assert rules == [("CHASE", ("JPMC",)), ("SBA", ("SBA LOAN",))]

    def test_empty_fragments_dropped(self):
        rules = build_synonym_rules({"A": ["", "X"]})
        assert rules == [("A", ("X",))]

    def test_external_group_used_by_normalizer(self):
        normalizer = VendorNormalizer.from_config(
            VendorConfig(), {"GUSTO": ["gusto", "zenpayroll"]}
        )
        assert normalizer.normalize("ZENPAYROLL INC") == "GUSTO"
        assert normalizer.normalize("ORIG CO NAME:GUSTO PAYROLL") == "GUSTO"

    def test_override_precedence_from_config(self):
        config = VendorConfig(synonym_precedence="override")
        normalizer = VendorNormalizer.from_config(config, {"CITI CARD": ["CITI AUTOPAY"]})
        assert normalizer.normalize("CITI AUTOPAY 0042") == "CITI CARD"
        # CITIBANK is no longer a CITI CARD fragment
        assert normalizer.normalize("CITIBANK ONLINE") == "CITIBANK"
