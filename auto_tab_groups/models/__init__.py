"""Pydantic data models for the tab grouping engine.

Rule-bearing models (``models.rule``, ``models.group_target``) validate their
patterns with ``core.pattern_validation`` and are imported from their own
modules.
"""

from auto_tab_groups.models.config import Config
from auto_tab_groups.models.conflict import Conflict, ConflictType
from auto_tab_groups.models.matching import (
    MatchOptions,
    MatchResult,
    PatternType,
    PatternValidationResult,
    RuleValidationResult,
    ValidationResult,
)
from auto_tab_groups.models.settings import GroupByMode, GroupingSettings, RuleMatchingMode
from auto_tab_groups.models.tab import TAB_GROUP_ID_NONE, Tab, TabGroup, TabGroupColor, Window

__all__ = [
    "TAB_GROUP_ID_NONE",
    "Config",
    "Conflict",
    "ConflictType",
    "GroupByMode",
    "GroupingSettings",
    "MatchOptions",
    "MatchResult",
    "PatternType",
    "PatternValidationResult",
    "RuleMatchingMode",
    "RuleValidationResult",
    "Tab",
    "TabGroup",
    "TabGroupColor",
    "ValidationResult",
    "Window",
]
