"""Unit tests for rule validation, rule resolution and URL classification."""

from __future__ import annotations

from auto_tab_groups.core.classification import (
    SYSTEM_GROUP_TITLE,
    classify,
    is_system_url,
    system_target,
)
from auto_tab_groups.core.rule_resolution import RuleResolver, find_matching_rule
from auto_tab_groups.core.rule_validation import coerce_minimum_tabs, validate_rule_data
from auto_tab_groups.models.rule import Rule, RuleData
from auto_tab_groups.models.settings import GroupByMode, GroupingSettings
from auto_tab_groups.models.tab import TabGroupColor


def _rule(rule_id: str, name: str, *patterns: str, **fields: object) -> Rule:
    return Rule(id=rule_id, name=name, patterns=list(patterns), **fields)


# ---------------------------------------------------------------------------
# Rule validation
# ---------------------------------------------------------------------------


class TestValidateRuleData:
    def test_valid(self) -> None:
        result = validate_rule_data(RuleData(name="Dev", patterns=["github.com"]))
        assert result.is_valid is True
        assert result.errors == []

    def test_missing_name(self) -> None:
        result = validate_rule_data(RuleData(patterns=["github.com"]))
        assert result.errors == ["Rule name is required"]

    def test_duplicate_name_case_insensitive(self) -> None:
        existing = [_rule("r1", "Dev", "gitlab.com")]
        result = validate_rule_data(RuleData(name=" dev ", patterns=["github.com"]), existing)
        assert result.errors == ['A rule named "dev" already exists']

    def test_duplicate_name_allowed_for_same_rule(self) -> None:
        existing = [_rule("r1", "Dev", "gitlab.com")]
        result = validate_rule_data(
            RuleData(name="Dev", patterns=["github.com"]), existing, exclude_rule_id="r1"
        )
        assert result.is_valid is True

    def test_patterns_must_be_list(self) -> None:
        result = validate_rule_data(RuleData(name="Dev", patterns="github.com"))
        assert result.errors == ["Patterns must be an array"]

    def test_patterns_required(self) -> None:
        result = validate_rule_data(RuleData(name="Dev", patterns=[]))
        assert result.errors == ["At least one pattern is required"]

    def test_too_many_patterns(self) -> None:
        patterns = [f"site{index}.com" for index in range(21)]
        result = validate_rule_data(RuleData(name="Many", patterns=patterns))
        assert result.errors == ["Maximum 20 patterns per rule"]

    def test_blank_pattern(self) -> None:
        result = validate_rule_data(RuleData(name="Dev", patterns=["github.com", "  "]))
        assert result.errors == ["All patterns must be non-empty strings"]

    def test_invalid_pattern(self) -> None:
        result = validate_rule_data(RuleData(name="Dev", patterns=["***.github.com"]))
        assert result.errors == [
            'Invalid pattern "***.github.com": Invalid wildcard pattern (too many asterisks)'
        ]

    def test_collects_every_error(self) -> None:
        result = validate_rule_data(
            RuleData(name="Bad <name>", patterns=[], minimum_tabs=42, priority=0)
        )
        assert result.errors == [
            "Rule name contains invalid characters",
            "At least one pattern is required",
            "Minimum tabs must be a number between 1 and 10",
            "Priority must be at least 1",
        ]

    def test_minimum_tabs_string_is_coerced(self) -> None:
        result = validate_rule_data(RuleData(name="Dev", patterns=["github.com"], minimum_tabs="3"))
        assert result.is_valid is True

    def test_conflicts_are_warnings(self) -> None:
        existing = [_rule("r1", "Google", "*.google.com")]
        result = validate_rule_data(RuleData(name="Mail", patterns=["mail.google.com"]), existing)
        assert result.is_valid is True
        assert len(result.conflicts) == 1
        assert result.warnings == [
            '"*.google.com" in rule "Google" already covers "mail.google.com"'
        ]

    def test_unknown_color_is_warning(self) -> None:
        result = validate_rule_data(RuleData(name="Dev", patterns=["github.com"], color="teal"))
        assert result.is_valid is True
        assert result.warnings == ['Unknown color "teal", the default color will be used']

    def test_coerce_minimum_tabs(self) -> None:
        assert coerce_minimum_tabs(" 4 ") == 4
        assert coerce_minimum_tabs(4) == 4
        assert coerce_minimum_tabs("four") == "four"
        assert coerce_minimum_tabs(None) is None


# ---------------------------------------------------------------------------
# Rule resolution
# ---------------------------------------------------------------------------


class TestRuleResolver:
    def test_first_match(self) -> None:
        resolver = RuleResolver([_rule("r1", "Dev", "github.com", "gitlab.com")])
        matched = resolver.find_matching_rule("https://gitlab.com/group/project")
        assert matched is not None
        assert matched.rule.id == "r1"
        assert matched.effective_group_name == "Dev"

    def test_no_match(self) -> None:
        resolver = RuleResolver([_rule("r1", "Dev", "github.com")])
        assert resolver.find_matching_rule("https://example.com") is None
        assert resolver.find_matching_rule("") is None

    def test_disabled_rules_ignored(self) -> None:
        resolver = RuleResolver([_rule("r1", "Dev", "github.com", enabled=False)])
        assert len(resolver) == 0
        assert resolver.find_matching_rule("https://github.com") is None

    def test_higher_priority_wins(self) -> None:
        rules = [
            _rule("r1", "Broad", "*.google.com", priority=1),
            _rule("r2", "Mail", "mail.google.com", priority=5),
        ]
        matched = RuleResolver(rules).find_matching_rule("https://mail.google.com/inbox")
        assert matched is not None
        assert matched.rule.name == "Mail"

    def test_ties_keep_catalog_order(self) -> None:
        rules = [
            _rule("r1", "First", "*.google.com"),
            _rule("r2", "Second", "mail.google.com"),
        ]
        resolver = RuleResolver(rules)
        assert [rule.name for rule in resolver.rules] == ["First", "Second"]
        matched = resolver.find_matching_rule("https://mail.google.com")
        assert matched is not None
        assert matched.rule.name == "First"

    def test_extracted_group_name(self) -> None:
        rules = [_rule("r1", "AWS", "{account}-*.{region}.console.aws.amazon.com")]
        matched = find_matching_rule(
            "https://123456-prod.us-east-1.console.aws.amazon.com/", rules
        )
        assert matched is not None
        assert matched.effective_group_name == "123456"
        assert matched.match.extracted_values["region"] == "us-east-1"


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


class TestClassify:
    def test_domain_mode(self) -> None:
        target = classify("https://www.bbc.co.uk/news", GroupingSettings(), RuleResolver([]))
        assert target is not None
        assert target.group_name == "Bbc"
        assert target.color is None
        assert target.source_rule is None

    def test_subdomain_mode(self) -> None:
        settings = GroupingSettings(group_by_mode=GroupByMode.SUBDOMAIN)
        target = classify("https://mail.google.com", settings, RuleResolver([]))
        assert target is not None
        assert target.group_name == "Mail.google"

    def test_rule_beats_domain(self) -> None:
        resolver = RuleResolver([_rule("r1", "Dev", "github.com", color="purple")])
        target = classify("https://github.com/org", GroupingSettings(), resolver)
        assert target is not None
        assert target.group_name == "Dev"
        assert target.color is TabGroupColor.PURPLE
        assert target.source_rule is not None

    def test_rules_only_without_match(self) -> None:
        settings = GroupingSettings(group_by_mode=GroupByMode.RULES_ONLY)
        assert classify("https://example.com", settings, RuleResolver([])) is None

    def test_rules_only_system_page(self) -> None:
        settings = GroupingSettings(group_by_mode=GroupByMode.RULES_ONLY)
        target = classify("chrome://settings", settings, RuleResolver([]))
        assert target == system_target()
        assert target is not None
        assert target.default_color is TabGroupColor.GREY

    def test_domain_mode_system_page(self) -> None:
        target = classify("about:blank", GroupingSettings(), RuleResolver([]))
        assert target is not None
        assert target.group_name == SYSTEM_GROUP_TITLE

    def test_empty_url(self) -> None:
        assert classify("", GroupingSettings(), RuleResolver([])) is None

    def test_deterministic(self) -> None:
        resolver = RuleResolver([_rule("r1", "Dev", "github.com")])
        settings = GroupingSettings()
        first = classify("https://github.com", settings, resolver)
        assert first == classify("https://github.com", settings, resolver)

    def test_is_system_url(self) -> None:
        assert is_system_url("chrome://newtab/") is True
        assert is_system_url("https://example.com") is False
