"""Settings repository: flat key/value JSON rows in SQLite."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from auto_tab_groups.core.colors import parse_color
from auto_tab_groups.models.rule import Rule
from auto_tab_groups.models.settings import GroupingSettings

if TYPE_CHECKING:
    from collections.abc import Mapping

    from auto_tab_groups.models.tab import TabGroupColor
    from auto_tab_groups.services.database import Database

logger = structlog.get_logger(__name__)

CUSTOM_RULES_KEY = "customRules"
GROUP_COLOR_MAPPING_KEY = "groupColorMapping"


class SettingsRepository:
    """Read/write access to the persisted grouping settings.

    Each top-level settings key is one row whose value is a JSON document.
    Missing keys fall back to the ``GroupingSettings`` defaults.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    def _read_all(self) -> dict[str, Any]:
        rows = self.db.fetchall("SELECT key, value FROM settings")
        stored: dict[str, Any] = {}
        for row in rows:
            try:
                stored[row["key"]] = json.loads(row["value"])
            except json.JSONDecodeError:
                logger.warning("settings_value_unreadable", key=row["key"])
        return stored

    def _read(self, key: str) -> Any:
        row = self.db.fetchone("SELECT value FROM settings WHERE key = ?", (key,))
        if row is None:
            return None
        try:
            return json.loads(row["value"])
        except json.JSONDecodeError:
            logger.warning("settings_value_unreadable", key=key)
            return None

    def load_settings(self) -> GroupingSettings:
        """Load the full settings object, dropping stored values that fail validation."""
        stored = self._read_all()
        try:
            return GroupingSettings.model_validate(stored)
        except ValidationError as exc:
            invalid_keys = {str(error["loc"][0]) for error in exc.errors() if error["loc"]}
            logger.warning("invalid_settings_ignored", keys=sorted(invalid_keys))
            cleaned = {key: value for key, value in stored.items() if key not in invalid_keys}
            return GroupingSettings.model_validate(cleaned)

    def save_settings(self, values: Mapping[str, Any]) -> None:
        """Upsert the given stored keys, e.g. ``{"groupByMode": "subdomain"}``."""
        now = datetime.now(UTC).isoformat()
        with self.db.transaction() as cursor:
            for key, value in values.items():
                cursor.execute(
                    """INSERT INTO settings (key, value, updated_at) VALUES (?, ?, ?)
                       ON CONFLICT(key) DO UPDATE SET
                           value = excluded.value, updated_at = excluded.updated_at""",
                    (key, json.dumps(value), now),
                )
        logger.debug("settings_saved", keys=sorted(values))

    def save_grouping_settings(self, settings: GroupingSettings) -> None:
        self.save_settings(settings.to_storage())

    # ------------------------------------------------------------------
    # Group colors
    # ------------------------------------------------------------------

    def get_color_mapping(self) -> dict[str, str]:
        mapping = self._read(GROUP_COLOR_MAPPING_KEY)
        return mapping if isinstance(mapping, dict) else {}

    def save_color_mapping(self, mapping: Mapping[str, str]) -> None:
        self.save_settings({GROUP_COLOR_MAPPING_KEY: dict(mapping)})

    def get_group_color(self, title: str) -> TabGroupColor | None:
        """Saved color for a group title, or None when unset or not in the palette."""
        return parse_color(self.get_color_mapping().get(title))

    def update_group_color(self, title: str, color: TabGroupColor) -> None:
        mapping = self.get_color_mapping()
        mapping[title] = str(color)
        self.save_color_mapping(mapping)

    def clear_group_color(self, title: str) -> None:
        mapping = self.get_color_mapping()
        if mapping.pop(title, None) is not None:
            self.save_color_mapping(mapping)

    # ------------------------------------------------------------------
    # Custom rules
    # ------------------------------------------------------------------

    def get_custom_rules(self) -> dict[str, Rule]:
        return parse_custom_rules(self._read(CUSTOM_RULES_KEY))

    def save_custom_rules(self, rules: Mapping[str, Rule]) -> None:
        self.save_settings(
            {CUSTOM_RULES_KEY: {rule_id: rule.to_storage() for rule_id, rule in rules.items()}}
        )


def parse_custom_rules(stored: object) -> dict[str, Rule]:
    """Parse stored rule documents in catalog order, skipping any that fail validation."""
    if not isinstance(stored, dict):
        return {}

    rules: dict[str, Rule] = {}
    for rule_id, data in stored.items():
        if not isinstance(data, dict):
            logger.warning("invalid_rule_skipped", rule_id=rule_id, error="not an object")
            continue
        try:
            rules[rule_id] = Rule.model_validate({**data, "id": data.get("id") or rule_id})
        except ValidationError as exc:
            logger.warning("invalid_rule_skipped", rule_id=rule_id, error=str(exc))
    return rules
