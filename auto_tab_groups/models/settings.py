"""Persisted grouping settings."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

MIN_TABS_FOR_GROUP = 1
MAX_TABS_FOR_GROUP = 10


class GroupByMode(StrEnum):
    """How tabs are assigned to groups when no rule claims them."""

    RULES_ONLY = "rules-only"
    DOMAIN = "domain"
    SUBDOMAIN = "subdomain"


class RuleMatchingMode(StrEnum):
    """Stored rule-matching preference, kept for settings compatibility."""

    EXACT = "exact"
    CONTAINS = "contains"
    REGEX = "regex"


class GroupingSettings(BaseModel):
    """The settings object the reconciler reads before every decision.

    Field aliases are the stored key names. ``custom_rules`` holds the raw
    stored rule documents; ``SettingsRepository.get_custom_rules`` parses them.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    auto_grouping_enabled: bool = Field(default=True, alias="autoGroupingEnabled")
    group_new_tabs: bool = Field(default=True, alias="groupNewTabs")
    group_by_mode: GroupByMode = Field(default=GroupByMode.DOMAIN, alias="groupByMode")
    custom_rules: dict[str, dict[str, Any]] = Field(default_factory=dict, alias="customRules")
    rule_matching_mode: RuleMatchingMode = Field(
        default=RuleMatchingMode.EXACT, alias="ruleMatchingMode"
    )
    minimum_tabs_for_group: int = Field(default=1, alias="minimumTabsForGroup")
    group_color_mapping: dict[str, str] = Field(default_factory=dict, alias="groupColorMapping")
    auto_collapse_enabled: bool = Field(default=False, alias="autoCollapseEnabled")
    auto_collapse_delay_ms: int = Field(default=0, alias="autoCollapseDelayMs")

    @field_validator("minimum_tabs_for_group")
    @classmethod
    def validate_minimum_tabs_for_group(cls, value: int) -> int:
        """The global minimum is between 1 and 10 tabs."""
        if value < MIN_TABS_FOR_GROUP or value > MAX_TABS_FOR_GROUP:
            msg = (
                f"minimum_tabs_for_group must be between "
                f"{MIN_TABS_FOR_GROUP} and {MAX_TABS_FOR_GROUP}"
            )
            raise ValueError(msg)
        return value

    @field_validator("auto_collapse_delay_ms")
    @classmethod
    def validate_auto_collapse_delay_ms(cls, value: int) -> int:
        if value < 0:
            msg = "auto_collapse_delay_ms must not be negative"
            raise ValueError(msg)
        return value

    @property
    def include_subdomain(self) -> bool:
        return self.group_by_mode is GroupByMode.SUBDOMAIN

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
