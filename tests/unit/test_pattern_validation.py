"""Unit tests for static pattern and rule field validation."""

from __future__ import annotations

import pytest

from auto_tab_groups.core.pattern_validation import (
    is_valid_path_segment,
    normalize_pattern,
    parse_patterns_text,
    sanitize_patterns,
    validate_domain_pattern,
    validate_host_pattern,
    validate_ipv4_pattern,
    validate_minimum_tabs,
    validate_path_pattern,
    validate_pattern,
    validate_rule_name,
)
from auto_tab_groups.models.matching import PatternType


class TestValidatePattern:
    """Tests for validate_pattern across the three pattern kinds."""

    @pytest.mark.parametrize(
        "pattern",
        [
            "example.com",
            "*.example.com",
            "google.**",
            "prefix-*.example.com",
            "example.com/docs/*",
            "192.168.*.*",
        ],
    )
    def test_valid_wildcards(self, pattern: str) -> None:
        result = validate_pattern(pattern)
        assert result.is_valid is True
        assert result.pattern_type is PatternType.SIMPLE_WILDCARD

    def test_triple_asterisk_rejected(self) -> None:
        result = validate_pattern("***.example.com")
        assert result.is_valid is False
        assert result.error == "Invalid wildcard pattern (too many asterisks)"

    def test_invalid_host_characters(self) -> None:
        result = validate_pattern("exa mple.com")
        assert result.error == "Domain pattern contains invalid characters"

    def test_empty_host(self) -> None:
        assert validate_pattern("/docs").error == "Domain pattern cannot be empty"

    def test_invalid_path_characters(self) -> None:
        result = validate_pattern("example.com/a?b=c")
        assert result.error == "Path pattern contains invalid characters"

    def test_invalid_ipv4_octet(self) -> None:
        result = validate_pattern("192.168.1.300")
        assert result.is_valid is False
        assert "between 0 and 255" in (result.error or "")

    @pytest.mark.parametrize("pattern", ["", "   ", None, 5])
    def test_empty_or_non_string(self, pattern: object) -> None:
        assert validate_pattern(pattern).is_valid is False

    def test_too_long(self) -> None:
        result = validate_pattern("a" * 501 + ".com")
        assert result.error == "Pattern too long (max 500 characters)"

    def test_valid_segment(self) -> None:
        result = validate_pattern("{account}-*.{region}.console.aws.amazon.com")
        assert result.is_valid is True
        assert result.pattern_type is PatternType.SEGMENT_EXTRACTION

    def test_segment_duplicate_variable(self) -> None:
        result = validate_pattern("{env}.{env}.example.com")
        assert result.error == "Duplicate variable names in pattern"

    def test_segment_bad_variable_name(self) -> None:
        result = validate_pattern("{1env}.example.com")
        assert result.error == "Invalid variable name: 1env"

    def test_segment_unterminated(self) -> None:
        result = validate_pattern("{env}.{region.example.com")
        assert result.error == "Invalid segment pattern syntax"

    def test_valid_regex(self) -> None:
        result = validate_pattern("/^(\\d+)\\.example\\.com$/")
        assert result.is_valid is True
        assert result.pattern_type is PatternType.REGEX

    def test_broken_regex(self) -> None:
        result = validate_pattern("/(unclosed/")
        assert result.is_valid is False
        assert (result.error or "").startswith("Invalid regex:")

    def test_does_not_mutate_input(self) -> None:
        patterns = ["  Example.COM  "]
        validate_pattern(patterns[0])
        assert patterns == ["  Example.COM  "]


class TestValidateIpv4Pattern:
    def test_valid(self) -> None:
        assert validate_ipv4_pattern("10.0.*.1").is_valid is True

    def test_wrong_octet_count(self) -> None:
        result = validate_ipv4_pattern("10.0.1")
        assert result.error == "IPv4 address must have exactly 4 octets"

    def test_leading_zero(self) -> None:
        result = validate_ipv4_pattern("10.00.0.1")
        assert result.error == 'IPv4 octet "00" cannot have leading zeros'

    def test_non_numeric(self) -> None:
        result = validate_ipv4_pattern("10.a.0.1")
        assert result.error == 'Invalid IPv4 octet "a". Must be 0-255 or *'

    def test_not_a_string(self) -> None:
        assert validate_ipv4_pattern(None).is_valid is False


class TestValidateDomainPattern:
    @pytest.mark.parametrize(
        "pattern", ["example.com", "*.example.com", "google.**", "*.google.**"]
    )
    def test_valid(self, pattern: str) -> None:
        assert validate_domain_pattern(pattern).is_valid is True

    def test_tld_wildcard_needs_dot_prefix(self) -> None:
        result = validate_domain_pattern("google**")
        assert result.error == (
            "** pattern must have domain prefix ending with dot (e.g., google.)"
        )

    def test_leading_wildcard_needs_dotted_base(self) -> None:
        result = validate_domain_pattern("*.com")
        assert result.error == "Invalid * pattern. Use format: *.domain.com"

    def test_multiple_wildcards(self) -> None:
        result = validate_domain_pattern("*.*.example.com")
        assert result.error == "Multiple wildcards not allowed in domain pattern"

    def test_host_pattern_dispatches_ipv4(self) -> None:
        assert validate_host_pattern("192.168.*.*").is_valid is True
        assert validate_host_pattern("192.168.1.999").is_valid is False
        assert validate_host_pattern("example.com").is_valid is True


class TestValidatePathPattern:
    def test_valid(self) -> None:
        assert validate_path_pattern("/docs/*/edit").is_valid is True
        assert validate_path_pattern("docs/**/edit").is_valid is True

    def test_empty(self) -> None:
        assert validate_path_pattern("/").is_valid is False

    def test_consecutive_slashes(self) -> None:
        result = validate_path_pattern("docs//edit")
        assert result.error == "Path pattern cannot contain consecutive slashes"

    def test_too_long(self) -> None:
        assert validate_path_pattern("a" * 101).is_valid is False

    def test_path_segment(self) -> None:
        assert is_valid_path_segment("docs/") is True
        assert is_valid_path_segment("do cs") is False


class TestValidateRuleName:
    def test_valid(self) -> None:
        assert validate_rule_name("Work & Docs (v2)!").is_valid is True

    def test_blank(self) -> None:
        assert validate_rule_name("   ").error == "Rule name cannot be empty"

    def test_too_long(self) -> None:
        assert validate_rule_name("x" * 51).error == "Rule name cannot exceed 50 characters"

    def test_invalid_characters(self) -> None:
        assert validate_rule_name("Work <script>").error == "Rule name contains invalid characters"

    def test_not_a_string(self) -> None:
        assert validate_rule_name(None).error == "Rule name must be a string"


class TestValidateMinimumTabs:
    @pytest.mark.parametrize("value", [None, 1, 5, 10])
    def test_valid(self, value: int | None) -> None:
        assert validate_minimum_tabs(value).is_valid is True

    @pytest.mark.parametrize("value", [0, 11, "3", True, 2.5])
    def test_invalid(self, value: object) -> None:
        assert validate_minimum_tabs(value).is_valid is False


class TestNormalizationHelpers:
    def test_normalize_lowercases_wildcards(self) -> None:
        assert normalize_pattern("  *.Example.COM ") == "*.example.com"

    def test_normalize_keeps_regex_case(self) -> None:
        assert normalize_pattern("/\\D+\\.Example/") == "/\\D+\\.Example/"

    def test_normalize_keeps_segment_variable_names(self) -> None:
        assert (
            normalize_pattern(" {accountId}-*.{Region:segment}.Console.AWS.com ")
            == "{accountId}-*.{Region:segment}.console.aws.com"
        )

    def test_sanitize_drops_invalid_and_duplicates(self) -> None:
        patterns = ["Example.com", "example.com", "***", "*.github.com", 7]
        assert sanitize_patterns(patterns) == ["example.com", "*.github.com"]

    def test_sanitize_non_list(self) -> None:
        assert sanitize_patterns("example.com") == []

    def test_parse_patterns_text(self) -> None:
        text = "github.com\n\n  *.google.com  \nGitHub.com\n"
        assert parse_patterns_text(text) == ["github.com", "*.google.com"]
