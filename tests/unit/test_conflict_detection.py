"""Unit tests for conflict detection between rule patterns."""

from __future__ import annotations

from auto_tab_groups.core.conflict_detection import (
    check_pattern_overlap,
    describe_conflict,
    detect_conflicts,
    is_subdomain_of,
    segment_base_domain,
)
from auto_tab_groups.models.conflict import ConflictType
from auto_tab_groups.models.rule import Rule


def _rule(rule_id: str, name: str, *patterns: str, enabled: bool = True) -> Rule:
    return Rule(id=rule_id, name=name, patterns=list(patterns), enabled=enabled)


class TestCheckPatternOverlap:
    """The five-step overlap classification."""

    def test_exact_duplicate_is_case_insensitive(self) -> None:
        assert check_pattern_overlap("GitHub.com", "github.com") is ConflictType.EXACT_DUPLICATE

    def test_subsumed_by_wildcard(self) -> None:
        assert check_pattern_overlap("mail.google.com", "*.google.com") is (
            ConflictType.SUBSUMED_BY_WILDCARD
        )

    def test_wildcard_subsumes(self) -> None:
        assert check_pattern_overlap("*.google.com", "mail.google.com") is (
            ConflictType.WILDCARD_SUBSUMES
        )

    def test_base_domain_is_not_subsumed(self) -> None:
        assert check_pattern_overlap("google.com", "*.google.com") is None

    def test_tld_wildcard_overlap(self) -> None:
        assert check_pattern_overlap("google.**", "google.com") is (
            ConflictType.TLD_WILDCARD_OVERLAP
        )
        assert check_pattern_overlap("google.co.uk", "google.**") is (
            ConflictType.TLD_WILDCARD_OVERLAP
        )

    def test_two_tld_wildcards_do_not_overlap(self) -> None:
        assert check_pattern_overlap("google.**", "google.com.**") is None

    def test_segment_vs_leading_wildcard(self) -> None:
        assert check_pattern_overlap("{env}.example.com", "*.example.com") is (
            ConflictType.SEGMENT_OVERLAP
        )

    def test_segment_vs_concrete_subdomain(self) -> None:
        assert check_pattern_overlap("dev.example.com", "{env}.example.com") is (
            ConflictType.SEGMENT_OVERLAP
        )

    def test_two_segments_same_base(self) -> None:
        assert check_pattern_overlap("{a}.example.com", "{b}-x.example.com") is None
        assert check_pattern_overlap("{a}.example.com", "{b}.example.com") is (
            ConflictType.SEGMENT_OVERLAP
        )

    def test_segment_other_base(self) -> None:
        assert check_pattern_overlap("{env}.example.com", "*.other.com") is None

    def test_unrelated(self) -> None:
        assert check_pattern_overlap("github.com", "gitlab.com") is None


class TestHelpers:
    def test_is_subdomain_of(self) -> None:
        assert is_subdomain_of("www.example.com", "example.com") is True
        assert is_subdomain_of("example.com", "example.com") is False
        assert is_subdomain_of("badexample.com", "example.com") is False
        assert is_subdomain_of("*.example.com", "example.com") is False

    def test_segment_base_domain(self) -> None:
        assert segment_base_domain("{sub}.example.com") == "example.com"
        assert segment_base_domain("{env}-{region}.console.aws.com") == "console.aws.com"
        assert segment_base_domain("{only}") is None


class TestDetectConflicts:
    def test_mail_google_against_wildcard_rule(self) -> None:
        existing = [_rule("r1", "Google", "*.google.com")]
        conflicts = detect_conflicts(["mail.google.com"], existing)

        assert len(conflicts) == 1
        conflict = conflicts[0]
        assert conflict.conflict_type is ConflictType.SUBSUMED_BY_WILDCARD
        assert conflict.target_rule_id == "r1"
        assert conflict.target_rule_name == "Google"
        assert conflict.description == (
            '"*.google.com" in rule "Google" already covers "mail.google.com"'
        )

    def test_cross_product(self) -> None:
        existing = [
            _rule("r1", "Google", "*.google.com", "google.**"),
            _rule("r2", "Mail", "mail.google.com"),
        ]
        conflicts = detect_conflicts(["mail.google.com", "google.com"], existing)
        pairs = {(c.source_pattern, c.target_pattern, c.conflict_type) for c in conflicts}
        assert pairs == {
            ("mail.google.com", "*.google.com", ConflictType.SUBSUMED_BY_WILDCARD),
            ("mail.google.com", "mail.google.com", ConflictType.EXACT_DUPLICATE),
            ("google.com", "google.**", ConflictType.TLD_WILDCARD_OVERLAP),
        }

    def test_exclude_rule_id(self) -> None:
        existing = [_rule("r1", "Google", "*.google.com")]
        assert detect_conflicts(["mail.google.com"], existing, exclude_rule_id="r1") == []

    def test_disabled_rules_still_conflict(self) -> None:
        existing = [_rule("r1", "Google", "*.google.com", enabled=False)]
        assert len(detect_conflicts(["mail.google.com"], existing)) == 1

    def test_no_rules(self) -> None:
        assert detect_conflicts(["example.com"], []) == []


class TestDescribeConflict:
    def test_exact_duplicate(self) -> None:
        message = describe_conflict("a.com", "a.com", ConflictType.EXACT_DUPLICATE, "Alpha")
        assert message == '"a.com" is already used in rule "Alpha"'

    def test_wildcard_subsumes(self) -> None:
        message = describe_conflict(
            "*.a.com", "x.a.com", ConflictType.WILDCARD_SUBSUMES, "Alpha"
        )
        assert message == '"*.a.com" covers "x.a.com" in rule "Alpha"'
