"""Shared test fixtures for the tab grouping engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from auto_tab_groups.models.rule import Rule
from auto_tab_groups.repositories.settings_repository import SettingsRepository
from auto_tab_groups.services.database import Database
from auto_tab_groups.services.memory_browser import InMemoryBrowser
from auto_tab_groups.services.tab_group_service import TabGroupService

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


@pytest.fixture
def tmp_db_path(tmp_path: Path) -> str:
    """Provide a temporary database file path."""
    return str(tmp_path / "test.db")


@pytest.fixture
def db(tmp_db_path: str) -> Database:
    """Provide an initialized temporary database."""
    database = Database(db_path=tmp_db_path)
    database.init_db()
    return database


@pytest.fixture
def settings_repo(db: Database) -> SettingsRepository:
    return SettingsRepository(db)


@pytest.fixture
def browser() -> InMemoryBrowser:
    """Browser with a single focused window."""
    memory_browser = InMemoryBrowser()
    memory_browser.add_window(focused=True)
    return memory_browser


@pytest.fixture
def make_service(
    browser: InMemoryBrowser, settings_repo: SettingsRepository
) -> Callable[..., TabGroupService]:
    """Build a TabGroupService after storing the given settings keys.

    Delays are zeroed so bulk passes and retries run instantly.
    """

    def _make(**stored: Any) -> TabGroupService:
        if stored:
            settings_repo.save_settings(stored)
        return TabGroupService(
            browser,
            settings_repo,
            bulk_delay=0,
            retry_base_delay=0,
        )

    return _make


@pytest.fixture
def service(make_service: Callable[..., TabGroupService]) -> TabGroupService:
    """Reconciler with default settings: domain mode, threshold 1."""
    return make_service()


def _rule(rule_id: str, name: str, patterns: list[str], **fields: Any) -> Rule:
    """Build a valid rule with sensible defaults."""
    return Rule(id=rule_id, name=name, patterns=patterns, **fields)


@pytest.fixture
def store_rules(settings_repo: SettingsRepository) -> Callable[..., dict[str, Rule]]:
    """Persist rules into the settings store and return the catalog."""

    def _store(*rules: Rule) -> dict[str, Rule]:
        catalog = {rule.id: rule for rule in rules}
        settings_repo.save_custom_rules(catalog)
        return catalog

    return _store


@pytest.fixture
def sample_rules() -> list[Rule]:
    return [
        _rule("rule-dev", "Dev", ["github.com", "gitlab.com"], color="purple"),
        _rule("rule-google", "Google", ["*.google.com"], color="blue"),
        _rule(
            "rule-aws",
            "AWS",
            ["{account}-*.{region}.console.aws.amazon.com"],
            color="orange",
            priority=2,
        ),
    ]
