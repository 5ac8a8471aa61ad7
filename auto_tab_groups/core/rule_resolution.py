"""Resolve a URL to at most one enabled custom rule."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from auto_tab_groups.core.pattern_matching import CompiledPattern, compile_pattern, match_compiled
from auto_tab_groups.models.matching import MatchOptions
from auto_tab_groups.models.rule import MatchedRule, Rule

if TYPE_CHECKING:
    from collections.abc import Iterable


@dataclass(frozen=True)
class CompiledRule:
    rule: Rule
    patterns: tuple[CompiledPattern, ...]
    options: MatchOptions


class RuleResolver:
    """Evaluates the enabled rule catalog against URLs.

    Patterns are compiled once at construction. Rules are tried in descending
    priority; equal priorities keep catalog order. Within a rule the first
    matching pattern wins.
    """

    def __init__(self, rules: Iterable[Rule]) -> None:
        enabled = [rule for rule in rules if rule.enabled]
        ordered = sorted(enabled, key=lambda rule: -rule.priority)
        self._rules = tuple(
            CompiledRule(
                rule=rule,
                patterns=tuple(compile_pattern(pattern) for pattern in rule.patterns),
                options=MatchOptions(rule_name=rule.name),
            )
            for rule in ordered
        )

    @property
    def rules(self) -> list[Rule]:
        """Enabled rules in evaluation order."""
        return [compiled.rule for compiled in self._rules]

    def __len__(self) -> int:
        return len(self._rules)

    def find_matching_rule(self, url: str) -> MatchedRule | None:
        if not url:
            return None

        for compiled in self._rules:
            for pattern in compiled.patterns:
                match = match_compiled(url, pattern, compiled.options)
                if match.matched:
                    return MatchedRule(
                        rule=compiled.rule,
                        match=match,
                        effective_group_name=match.group_name or compiled.rule.name,
                    )
        return None


def find_matching_rule(url: str, rules: Iterable[Rule]) -> MatchedRule | None:
    """One-shot convenience wrapper around ``RuleResolver``."""
    return RuleResolver(rules).find_matching_rule(url)
