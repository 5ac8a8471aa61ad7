"""Whole-rule validation: field errors, duplicate names and conflict warnings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from auto_tab_groups.core.colors import is_valid_color
from auto_tab_groups.core.conflict_detection import detect_conflicts
from auto_tab_groups.core.pattern_validation import (
    MAX_PATTERNS_PER_RULE,
    normalize_pattern,
    validate_minimum_tabs,
    validate_pattern,
    validate_rule_name,
)
from auto_tab_groups.models.matching import RuleValidationResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from auto_tab_groups.models.rule import Rule, RuleData


def coerce_minimum_tabs(value: object) -> object:
    """Accept numeric strings such as ``"3"`` from JSON documents and forms."""
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return value


def validate_rule_data(
    rule_data: RuleData,
    existing_rules: Iterable[Rule] = (),
    exclude_rule_id: str | None = None,
) -> RuleValidationResult:
    """Validate rule input against the field constraints and the existing catalog.

    Field problems and duplicate names are errors. Pattern overlaps with other
    rules and an unknown color are warnings. Never raises.
    """
    others = [rule for rule in existing_rules if rule.id != exclude_rule_id]
    errors: list[str] = []
    warnings: list[str] = []

    name = rule_data.name
    if not isinstance(name, str) or not name:
        errors.append("Rule name is required")
    else:
        name_result = validate_rule_name(name)
        if not name_result.is_valid:
            errors.append(name_result.error or "Invalid rule name")
        elif any(rule.name.lower() == name.strip().lower() for rule in others):
            errors.append(f'A rule named "{name.strip()}" already exists')

    patterns = rule_data.patterns
    valid_patterns: list[str] = []
    if not isinstance(patterns, list):
        errors.append("Patterns must be an array")
    elif not patterns:
        errors.append("At least one pattern is required")
    elif len(patterns) > MAX_PATTERNS_PER_RULE:
        errors.append(f"Maximum {MAX_PATTERNS_PER_RULE} patterns per rule")
    elif not all(isinstance(pattern, str) and pattern.strip() for pattern in patterns):
        errors.append("All patterns must be non-empty strings")
    else:
        for pattern in patterns:
            result = validate_pattern(pattern)
            if result.is_valid:
                valid_patterns.append(normalize_pattern(pattern))
            else:
                errors.append(f'Invalid pattern "{pattern}": {result.error}')

    minimum_result = validate_minimum_tabs(coerce_minimum_tabs(rule_data.minimum_tabs))
    if not minimum_result.is_valid:
        errors.append(minimum_result.error or "Invalid minimum tabs")

    if rule_data.priority is not None and rule_data.priority < 1:
        errors.append("Priority must be at least 1")

    if rule_data.color is not None and not is_valid_color(rule_data.color):
        warnings.append(f'Unknown color "{rule_data.color}", the default color will be used')

    conflicts = detect_conflicts(valid_patterns, others)
    warnings.extend(conflict.description for conflict in conflicts)

    return RuleValidationResult(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        conflicts=conflicts,
    )
