"""Custom rule management: CRUD, validation, stats, import and export."""

from __future__ import annotations

import json
import secrets
import string
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from auto_tab_groups.core.colors import parse_color
from auto_tab_groups.core.conflict_detection import detect_conflicts
from auto_tab_groups.core.rule_validation import coerce_minimum_tabs, validate_rule_data
from auto_tab_groups.models.rule import DEFAULT_RULE_COLOR, ImportResult, Rule, RuleData, RulesStats

if TYPE_CHECKING:
    from collections.abc import Iterable

    from auto_tab_groups.models.conflict import Conflict
    from auto_tab_groups.models.matching import RuleValidationResult
    from auto_tab_groups.repositories.settings_repository import SettingsRepository
    from auto_tab_groups.services.protocols import RulesChangeListener

logger = structlog.get_logger(__name__)

EXPORT_FORMAT_VERSION = "1.0"
_RULE_ID_ALPHABET = string.ascii_lowercase + string.digits


class RuleValidationError(ValueError):
    """Rule input failed validation. ``errors`` lists every problem found."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__(f"Invalid rule: {', '.join(errors)}")


class RuleNotFoundError(KeyError):
    """No rule with the given id exists."""

    def __init__(self, rule_id: str) -> None:
        self.rule_id = rule_id
        super().__init__(f"Rule with ID {rule_id} not found")

    def __str__(self) -> str:
        return str(self.args[0])


def generate_rule_id() -> str:
    """``rule-<epoch ms>-<9 random base36 chars>``."""
    suffix = "".join(secrets.choice(_RULE_ID_ALPHABET) for _ in range(9))
    return f"rule-{int(time.time() * 1000)}-{suffix}"


class RulesService:
    """Reads and writes the rule catalog through the settings repository.

    When a listener is attached it is told about every successful change so
    open tabs can be regrouped.
    """

    def __init__(
        self,
        settings_repo: SettingsRepository,
        listener: RulesChangeListener | None = None,
    ) -> None:
        self.settings_repo = settings_repo
        self.listener = listener

    def _notify(self, full_regroup: bool) -> None:
        if self.listener is not None:
            self.listener.rules_changed(full_regroup=full_regroup)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_custom_rules(self) -> dict[str, Rule]:
        return self.settings_repo.get_custom_rules()

    def get_rule(self, rule_id: str) -> Rule:
        rule = self.get_custom_rules().get(rule_id)
        if rule is None:
            raise RuleNotFoundError(rule_id)
        return rule

    def get_rules_stats(self) -> RulesStats:
        rules = list(self.get_custom_rules().values())
        enabled = sum(1 for rule in rules if rule.enabled)
        return RulesStats(
            total_rules=len(rules),
            enabled_rules=enabled,
            disabled_rules=len(rules) - enabled,
            total_patterns=sum(len(rule.patterns) for rule in rules),
        )

    def validate_rule(
        self, rule_data: RuleData, exclude_rule_id: str | None = None
    ) -> RuleValidationResult:
        """Validate input against the catalog: errors block a save, warnings do not."""
        return validate_rule_data(
            rule_data, self.get_custom_rules().values(), exclude_rule_id=exclude_rule_id
        )

    def check_conflicts(
        self, patterns: Iterable[str], exclude_rule_id: str | None = None
    ) -> list[Conflict]:
        return detect_conflicts(patterns, self.get_custom_rules().values(), exclude_rule_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_rule(self, rule_data: RuleData) -> tuple[str, list[Conflict]]:
        """Create a rule. Returns its id and the advisory conflicts it introduced.

        Raises ``RuleValidationError`` when the input is invalid.
        """
        rules = self.get_custom_rules()
        validation = validate_rule_data(rule_data, rules.values())
        if not validation.is_valid:
            raise RuleValidationError(validation.errors)

        rule_id = generate_rule_id()
        while rule_id in rules:
            rule_id = generate_rule_id()

        rule = self._build_rule(rule_id, rule_data)
        rules[rule_id] = rule
        self.settings_repo.save_custom_rules(rules)
        logger.info(
            "rule_added",
            rule_id=rule_id,
            name=rule.name,
            patterns=len(rule.patterns),
            conflicts=len(validation.conflicts),
        )
        self._notify(full_regroup=False)
        return rule_id, validation.conflicts

    def update_rule(self, rule_id: str, rule_data: RuleData) -> Rule:
        """Replace a rule's fields, keeping color, priority and minimum when not given."""
        rules = self.get_custom_rules()
        existing = rules.get(rule_id)
        if existing is None:
            raise RuleNotFoundError(rule_id)

        validation = validate_rule_data(rule_data, rules.values(), exclude_rule_id=rule_id)
        if not validation.is_valid:
            raise RuleValidationError(validation.errors)

        minimum_tabs = coerce_minimum_tabs(rule_data.minimum_tabs)
        updated = Rule(
            id=rule_id,
            name=rule_data.name.strip(),
            patterns=list(rule_data.patterns),
            color=parse_color(rule_data.color) or existing.color,
            enabled=rule_data.enabled,
            priority=rule_data.priority or existing.priority,
            minimum_tabs=minimum_tabs if minimum_tabs is not None else existing.minimum_tabs,
            created_at=existing.created_at,
        )
        rules[rule_id] = updated
        self.settings_repo.save_custom_rules(rules)
        logger.info("rule_updated", rule_id=rule_id, name=updated.name)
        self._notify(full_regroup=True)
        return updated

    def delete_rule(self, rule_id: str) -> None:
        rules = self.get_custom_rules()
        if rule_id not in rules:
            raise RuleNotFoundError(rule_id)
        del rules[rule_id]
        self.settings_repo.save_custom_rules(rules)
        logger.info("rule_deleted", rule_id=rule_id)
        self._notify(full_regroup=True)

    def _build_rule(self, rule_id: str, rule_data: RuleData) -> Rule:
        return Rule(
            id=rule_id,
            name=rule_data.name.strip(),
            patterns=list(rule_data.patterns),
            color=parse_color(rule_data.color) or DEFAULT_RULE_COLOR,
            enabled=rule_data.enabled,
            priority=rule_data.priority or 1,
            minimum_tabs=coerce_minimum_tabs(rule_data.minimum_tabs),
            created_at=rule_data.created_at or datetime.now(UTC).isoformat(),
        )

    # ------------------------------------------------------------------
    # Import and export
    # ------------------------------------------------------------------

    def export_rules(self) -> str:
        """Serialise the catalog as a versioned JSON document."""
        rules = self.get_custom_rules()
        document = {
            "version": EXPORT_FORMAT_VERSION,
            "exportDate": datetime.now(UTC).isoformat(),
            "rules": {rule_id: rule.to_storage() for rule_id, rule in rules.items()},
            "totalRules": len(rules),
        }
        logger.info("rules_exported", total=len(rules))
        return json.dumps(document, indent=2)

    def import_rules(self, json_data: str, replace_existing: bool = False) -> ImportResult:
        """Import a ``{"rules": {id: rule}}`` document.

        Invalid and duplicate-name entries are reported and skipped. The import
        fails only when the document is unreadable or holds no valid rule.
        Ids already in the catalog are regenerated unless ``replace_existing``.
        """
        try:
            document = json.loads(json_data)
        except json.JSONDecodeError as exc:
            return self._failed_import(f"Invalid JSON: {exc.msg}")

        raw_rules = document.get("rules") if isinstance(document, dict) else None
        if not isinstance(raw_rules, dict):
            return self._failed_import("Invalid import file: Missing or invalid rules data")
        if not raw_rules:
            return self._failed_import("No rules found in import file")

        existing = {} if replace_existing else self.get_custom_rules()
        accepted: dict[str, Rule] = {}
        validation_errors: list[str] = []
        warnings: list[str] = []

        for rule_id, raw in raw_rules.items():
            label = raw.get("name") if isinstance(raw, dict) and raw.get("name") else rule_id
            try:
                rule_data = RuleData.model_validate(raw)
            except ValidationError as exc:
                validation_errors.append(f'Rule "{label}": {_first_error(exc)}')
                continue

            catalog = [*existing.values(), *accepted.values()]
            validation = validate_rule_data(rule_data, catalog)
            if not validation.is_valid:
                validation_errors.append(f'Rule "{label}": {", ".join(validation.errors)}')
                continue

            final_id = rule_id
            while final_id in existing or final_id in accepted:
                final_id = generate_rule_id()
            accepted[final_id] = self._build_rule(final_id, rule_data)
            warnings.extend(f'Rule "{label}": {warning}' for warning in validation.warnings)

        if not accepted:
            return self._failed_import(
                f"No valid rules found. Errors: {'; '.join(validation_errors)}",
                total=len(raw_rules),
                validation_errors=validation_errors,
            )

        self.settings_repo.save_custom_rules({**existing, **accepted})
        result = ImportResult(
            success=True,
            imported=len(accepted),
            total=len(raw_rules),
            skipped=len(raw_rules) - len(accepted),
            validation_errors=validation_errors,
            warnings=warnings,
            replaced_existing=replace_existing,
        )
        logger.info(
            "rules_imported",
            imported=result.imported,
            skipped=result.skipped,
            replaced_existing=replace_existing,
        )
        self._notify(full_regroup=True)
        return result

    @staticmethod
    def _failed_import(error: str, **fields: Any) -> ImportResult:
        logger.error("rules_import_failed", error=error)
        return ImportResult(success=False, error=error, **fields)


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    error = errors[0]
    location = ".".join(str(part) for part in error["loc"])
    return f"{location}: {error['msg']}" if location else error["msg"]
