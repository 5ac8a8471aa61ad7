"""Custom grouping rule models.

Rules are serialised with camelCase aliases (``domains``, ``minimumTabs``,
``createdAt``) so stored settings and export documents keep the browser
extension's JSON shape.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auto_tab_groups.core.pattern_validation import (
    MAX_PATTERNS_PER_RULE,
    normalize_pattern,
    validate_minimum_tabs,
    validate_pattern,
    validate_rule_name,
)
from auto_tab_groups.models.matching import MatchResult
from auto_tab_groups.models.tab import TabGroupColor

DEFAULT_RULE_COLOR = TabGroupColor.BLUE


def _utc_now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(UTC).isoformat()


class Rule(BaseModel):
    """A named, prioritized, colored set of patterns."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    id: str
    name: str
    patterns: list[str] = Field(alias="domains")
    color: TabGroupColor = DEFAULT_RULE_COLOR
    enabled: bool = True
    priority: int = 1
    minimum_tabs: int | None = Field(default=None, alias="minimumTabs")
    created_at: str = Field(default_factory=_utc_now_iso, alias="createdAt")

    @field_validator("id")
    @classmethod
    def validate_id(cls, value: str) -> str:
        if not value.strip():
            msg = "Rule id must not be empty"
            raise ValueError(msg)
        return value

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        """Strip surrounding whitespace and enforce the rule-name charset."""
        result = validate_rule_name(value)
        if not result.is_valid:
            raise ValueError(result.error)
        return value.strip()

    @field_validator("patterns")
    @classmethod
    def validate_patterns(cls, value: list[str]) -> list[str]:
        """Normalize every pattern and require 1-20 valid, distinct entries."""
        patterns: list[str] = []
        for pattern in value:
            result = validate_pattern(pattern)
            if not result.is_valid:
                msg = f'Invalid pattern "{pattern}": {result.error}'
                raise ValueError(msg)
            clean = normalize_pattern(pattern)
            if clean not in patterns:
                patterns.append(clean)

        if not patterns:
            msg = "At least one pattern is required"
            raise ValueError(msg)
        if len(patterns) > MAX_PATTERNS_PER_RULE:
            msg = f"Maximum {MAX_PATTERNS_PER_RULE} patterns per rule"
            raise ValueError(msg)
        return patterns

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, value: int) -> int:
        if value < 1:
            msg = "Priority must be at least 1"
            raise ValueError(msg)
        return value

    @field_validator("minimum_tabs")
    @classmethod
    def check_minimum_tabs(cls, value: int | None) -> int | None:
        result = validate_minimum_tabs(value)
        if not result.is_valid:
            raise ValueError(result.error)
        return value

    def to_storage(self) -> dict[str, Any]:
        """Serialise with camelCase keys, omitting an unset minimum."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class RuleData(BaseModel):
    """Un-persisted rule input for create, update and import.

    Fields are loosely typed on purpose: values arrive from JSON files and the
    command line, and ``validate_rule_data`` reports every problem at once
    instead of failing on the first.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Any = None
    patterns: Any = Field(default=None, alias="domains")
    color: str | None = None
    enabled: bool = True
    priority: int | None = None
    minimum_tabs: Any = Field(default=None, alias="minimumTabs")
    created_at: str | None = Field(default=None, alias="createdAt")

    @classmethod
    def from_rule(cls, rule: Rule) -> RuleData:
        return cls(
            name=rule.name,
            patterns=list(rule.patterns),
            color=rule.color.value,
            enabled=rule.enabled,
            priority=rule.priority,
            minimum_tabs=rule.minimum_tabs,
            created_at=rule.created_at,
        )


class MatchedRule(BaseModel):
    """A rule that claimed a URL, with the match that claimed it."""

    rule: Rule
    match: MatchResult
    effective_group_name: str


class RulesStats(BaseModel):
    """Counts over the rule catalog."""

    total_rules: int = 0
    enabled_rules: int = 0
    disabled_rules: int = 0
    total_patterns: int = 0

    @property
    def export_ready(self) -> bool:
        return self.total_rules > 0


class ImportResult(BaseModel):
    """Outcome of importing a rules document."""

    success: bool
    imported: int = 0
    total: int = 0
    skipped: int = 0
    validation_errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    replaced_existing: bool = False
    error: str | None = None
