"""CLI command implementations for the tab grouping engine."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from auto_tab_groups.models.config import Config
from auto_tab_groups.models.settings import GroupByMode
from auto_tab_groups.services.database import Database
from auto_tab_groups.utils.logger import configure_logging

if TYPE_CHECKING:
    from auto_tab_groups.repositories.settings_repository import SettingsRepository
    from auto_tab_groups.services.protocols import TabProviderProtocol
    from auto_tab_groups.services.tab_group_service import TabGroupService


def _get_config() -> Config:
    """Load configuration from ATG_* environment variables and .env file."""
    return Config()


def _get_db(config: Config) -> Database:
    """Initialize database with schema."""
    db = Database(db_path=config.database_path)
    db.init_db()
    return db


def _get_repo(db: Database) -> SettingsRepository:
    from auto_tab_groups.repositories.settings_repository import SettingsRepository

    return SettingsRepository(db)


def _get_service(
    config: Config,
    repo: SettingsRepository,
    provider: TabProviderProtocol | None = None,
) -> TabGroupService:
    from auto_tab_groups.services.memory_browser import InMemoryBrowser
    from auto_tab_groups.services.tab_group_service import TabGroupService

    return TabGroupService(
        provider if provider is not None else InMemoryBrowser(),
        repo,
        bulk_delay=config.bulk_delay_seconds,
        retry_attempts=config.retry_max_attempts,
        retry_base_delay=config.retry_base_delay_seconds,
    )


def _print_summary(title: str, stats: dict[str, Any]) -> None:
    """Print a formatted summary of an operation's results."""
    click.echo(f"\n[SUCCESS] {title}")
    for key, value in stats.items():
        if isinstance(value, list):
            if value:
                click.echo(f"  {key} ({len(value)}):")
                for item in value[:10]:
                    click.echo(f"    - {item}")
                if len(value) > 10:
                    click.echo(f"    ... and {len(value) - 10} more")
        else:
            click.echo(f"  {key}: {value}")


# --- Classification & patterns ---


@click.command()
@click.argument("url")
@click.option(
    "--mode",
    default=None,
    type=click.Choice([mode.value for mode in GroupByMode]),
    help="Override the stored grouping mode",
)
def classify(url: str, mode: str | None) -> None:
    """Show which group a URL would be placed in."""
    config = _get_config()
    configure_logging(config.log_level)
    db = _get_db(config)

    from auto_tab_groups.core.classification import classify as classify_url
    from auto_tab_groups.core.rule_resolution import RuleResolver

    repo = _get_repo(db)
    settings = repo.load_settings()
    if mode is not None:
        settings = settings.model_copy(update={"group_by_mode": GroupByMode(mode)})
    resolver = RuleResolver(repo.get_custom_rules().values())

    target = classify_url(url, settings, resolver)
    if target is None:
        click.echo(f"[INFO] No group for {url} (mode: {settings.group_by_mode})")
    else:
        click.echo(f"[INFO] {url}")
        click.echo(f"  Group: {target.group_name}")
        click.echo(f"  Color: {target.color or target.default_color or 'saved or random'}")
        click.echo(f"  Rule: {target.source_rule.name if target.source_rule else 'none'}")
    db.close()


@click.command()
@click.argument("pattern")
def validate_pattern(pattern: str) -> None:
    """Validate a rule pattern and show its detected kind."""
    from auto_tab_groups.core.pattern_matching import (
        get_pattern_help,
        get_pattern_type_display_name,
    )
    from auto_tab_groups.core.pattern_validation import validate_pattern as validate

    result = validate(pattern)
    kind = (
        get_pattern_type_display_name(result.pattern_type) if result.pattern_type else "unknown"
    )
    if result.is_valid:
        click.echo(f"[SUCCESS] Valid {kind} pattern: {pattern}")
    else:
        click.echo(f"[ERROR] Invalid pattern: {result.error}")
    if result.pattern_type:
        click.echo(f"  {get_pattern_help(result.pattern_type)}")


@click.command()
@click.argument("patterns", nargs=-1, required=True)
@click.option("--exclude-rule-id", default=None, type=str, help="Ignore this rule's patterns")
def check_conflicts(patterns: tuple[str, ...], exclude_rule_id: str | None) -> None:
    """Report overlaps between PATTERNS and the stored rules."""
    config = _get_config()
    configure_logging(config.log_level)
    db = _get_db(config)

    from auto_tab_groups.services.rules_service import RulesService

    conflicts = RulesService(_get_repo(db)).check_conflicts(patterns, exclude_rule_id)
    if not conflicts:
        click.echo("[SUCCESS] No conflicts found.")
    else:
        click.echo(f"[WARNING] {len(conflicts)} conflict(s):")
        for conflict in conflicts:
            click.echo(f"  - [{conflict.conflict_type}] {conflict.description}")
    db.close()


# --- Rule management ---


@click.command()
@click.option("--name", required=True, type=str, help="Group name for the rule")
@click.option("--pattern", "patterns", multiple=True, required=True, help="URL pattern")
@click.option("--color", default=None, type=str, help="Group color")
@click.option("--priority", default=1, type=int, help="Higher priority rules win")
@click.option("--minimum-tabs", default=None, type=int, help="Tabs needed before grouping")
@click.option("--disabled", is_flag=True, help="Store the rule disabled")
def add_rule(
    name: str,
    patterns: tuple[str, ...],
    color: str | None,
    priority: int,
    minimum_tabs: int | None,
    disabled: bool,
) -> None:
    """Add a custom grouping rule."""
    config = _get_config()
    configure_logging(config.log_level)
    db = _get_db(config)

    from auto_tab_groups.models.rule import RuleData
    from auto_tab_groups.services.rules_service import RulesService, RuleValidationError

    service = RulesService(_get_repo(db))
    rule_data = RuleData(
        name=name,
        patterns=list(patterns),
        color=color,
        enabled=not disabled,
        priority=priority,
        minimum_tabs=minimum_tabs,
    )
    try:
        rule_id, conflicts = service.add_rule(rule_data)
    except RuleValidationError as exc:
        click.echo("[ERROR] Rule not saved:")
        for error in exc.errors:
            click.echo(f"  - {error}")
        db.close()
        return

    click.echo(f"[SUCCESS] Added rule '{name}' ({rule_id})")
    for conflict in conflicts:
        click.echo(f"  [WARNING] {conflict.description}")
    db.close()


@click.command()
@click.argument("rule_id")
def delete_rule(rule_id: str) -> None:
    """Delete a custom rule by id."""
    config = _get_config()
    configure_logging(config.log_level)
    db = _get_db(config)

    from auto_tab_groups.services.rules_service import RuleNotFoundError, RulesService

    try:
        RulesService(_get_repo(db)).delete_rule(rule_id)
    except RuleNotFoundError as exc:
        click.echo(f"[ERROR] {exc}")
        db.close()
        return

    click.echo(f"[SUCCESS] Deleted rule {rule_id}")
    db.close()


@click.command()
@click.option(
    "--output-format",
    default="summary",
    type=click.Choice(["summary", "json"]),
    help="Output format",
)
def list_rules(output_format: str) -> None:
    """List custom rules in evaluation order."""
    config = _get_config()
    configure_logging(config.log_level)
    db = _get_db(config)

    rules = _get_repo(db).get_custom_rules()
    if output_format == "json":
        click.echo(json.dumps({rid: rule.to_storage() for rid, rule in rules.items()}, indent=2))
        db.close()
        return

    if not rules:
        click.echo("[INFO] No custom rules.")
        db.close()
        return

    ordered = sorted(rules.values(), key=lambda rule: -rule.priority)
    click.echo(f"[INFO] {len(rules)} custom rule(s):")
    for rule in ordered:
        state = "enabled" if rule.enabled else "disabled"
        minimum = f", min {rule.minimum_tabs} tabs" if rule.minimum_tabs else ""
        click.echo(f"  {rule.id} | {rule.name} | {rule.color} | p{rule.priority} | {state}{minimum}")
        for pattern in rule.patterns:
            click.echo(f"    - {pattern}")
    db.close()


@click.command()
@click.option("--output", "output_path", default=None, type=click.Path(), help="Write to file")
def export_rules(output_path: str | None) -> None:
    """Export custom rules as JSON."""
    config = _get_config()
    configure_logging(config.log_level)
    db = _get_db(config)

    from auto_tab_groups.services.rules_service import RulesService

    document = RulesService(_get_repo(db)).export_rules()
    if output_path is None:
        click.echo(document)
    else:
        Path(output_path).write_text(document, encoding="utf-8")
        click.echo(f"[SUCCESS] Rules exported to {output_path}")
    db.close()


@click.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--replace", is_flag=True, help="Replace existing rules instead of merging")
def import_rules(input_path: str, replace: bool) -> None:
    """Import custom rules from a JSON export."""
    config = _get_config()
    configure_logging(config.log_level)
    db = _get_db(config)

    from auto_tab_groups.services.rules_service import RulesService

    result = RulesService(_get_repo(db)).import_rules(
        Path(input_path).read_text(encoding="utf-8"), replace_existing=replace
    )
    if not result.success:
        click.echo(f"[ERROR] Import failed: {result.error}")
    else:
        _print_summary(
            "Rules imported",
            {
                "imported": result.imported,
                "skipped": result.skipped,
                "total": result.total,
                "errors": result.validation_errors,
                "warnings": result.warnings,
            },
        )
    db.close()


# --- Settings ---


@click.command()
@click.argument("mode", type=click.Choice([mode.value for mode in GroupByMode]))
def set_mode(mode: str) -> None:
    """Set how tabs are grouped: rules-only, domain or subdomain."""
    config = _get_config()
    configure_logging(config.log_level)
    db = _get_db(config)

    service = _get_service(config, _get_repo(db))
    service.set_group_by_mode(mode)
    click.echo(f"[SUCCESS] Grouping mode set to {mode}")
    db.close()


@click.command()
@click.argument("minimum_tabs", type=click.IntRange(1, 10))
def set_minimum_tabs(minimum_tabs: int) -> None:
    """Set the global minimum number of tabs before a group is created."""
    config = _get_config()
    configure_logging(config.log_level)
    db = _get_db(config)

    service = _get_service(config, _get_repo(db))
    service.set_minimum_tabs(minimum_tabs)
    click.echo(f"[SUCCESS] Minimum tabs per group set to {minimum_tabs}")
    db.close()


@click.command()
def show_settings() -> None:
    """Display stored grouping settings and rule statistics."""
    config = _get_config()
    configure_logging(config.log_level)
    db = _get_db(config)

    from auto_tab_groups.services.rules_service import RulesService

    repo = _get_repo(db)
    settings = repo.load_settings()
    stats = RulesService(repo).get_rules_stats()

    click.echo("\n[INFO] Grouping settings")
    click.echo(f"  Auto-grouping: {settings.auto_grouping_enabled}")
    click.echo(f"  Group new tabs: {settings.group_new_tabs}")
    click.echo(f"  Mode: {settings.group_by_mode}")
    click.echo(f"  Minimum tabs: {settings.minimum_tabs_for_group}")
    click.echo(
        f"  Auto-collapse: {settings.auto_collapse_enabled} "
        f"({settings.auto_collapse_delay_ms}ms delay)"
    )
    click.echo(f"  Saved group colors: {len(settings.group_color_mapping)}")
    click.echo(
        f"  Rules: {stats.total_rules} ({stats.enabled_rules} enabled, "
        f"{stats.total_patterns} patterns)"
    )
    db.close()


# --- Reconciliation ---


def _load_snapshot(path: Path) -> list[dict[str, Any]]:
    """Read tabs from a JSON list of URLs or of ``{url, pinned, active}`` objects."""
    data = json.loads(path.read_text(encoding="utf-8"))
    entries = data.get("tabs", []) if isinstance(data, dict) else data
    if not isinstance(entries, list):
        msg = "Snapshot must be a list of tabs or an object with a 'tabs' list"
        raise click.BadParameter(msg)
    return [{"url": entry} if isinstance(entry, str) else dict(entry) for entry in entries]


@click.command()
@click.argument("snapshot_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--manual", is_flag=True, help="Group even when auto-grouping is disabled")
@click.option(
    "--output-format",
    default="summary",
    type=click.Choice(["summary", "json"]),
    help="Output format",
)
def group_snapshot(snapshot_path: str, manual: bool, output_format: str) -> None:
    """Group a window of tabs read from SNAPSHOT_PATH with the stored settings and rules."""
    config = _get_config()
    configure_logging(config.log_level)
    db = _get_db(config)

    from auto_tab_groups.services.memory_browser import InMemoryBrowser

    browser = InMemoryBrowser()
    window_id = browser.add_window(focused=True).id
    for entry in _load_snapshot(Path(snapshot_path)):
        browser.open_tab(
            url=str(entry.get("url", "")),
            window_id=window_id,
            pinned=bool(entry.get("pinned", False)),
            active=bool(entry.get("active", False)),
        )

    service = _get_service(config, _get_repo(db), provider=browser)
    if manual:
        service.group_all_tabs_manually()
    elif not service.group_all_tabs():
        click.echo("[INFO] Auto-grouping is disabled; use --manual to group anyway.")

    groups = browser.query_groups(window_id=window_id)
    if output_format == "json":
        result = [
            {
                "title": group.title,
                "color": str(group.color),
                "urls": [tab.url for tab in browser.query_tabs(group_id=group.id)],
            }
            for group in groups
        ]
        click.echo(json.dumps(result, indent=2))
    else:
        click.echo(f"\n[SUCCESS] {len(groups)} group(s)")
        for group in groups:
            click.echo(f"  {group.title} ({group.color})")
            for tab in browser.query_tabs(group_id=group.id):
                click.echo(f"    - {tab.url}")
        ungrouped = [tab for tab in browser.query_tabs(window_id=window_id) if not tab.is_grouped]
        if ungrouped:
            click.echo(f"  Ungrouped ({len(ungrouped)}):")
            for tab in ungrouped:
                click.echo(f"    - {tab.url or '(blank)'}")
    db.close()
