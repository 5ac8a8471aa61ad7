"""CLI entry point for the tab grouping engine."""

from __future__ import annotations

import click

from auto_tab_groups.cli.commands import (
    add_rule,
    check_conflicts,
    classify,
    delete_rule,
    export_rules,
    group_snapshot,
    import_rules,
    list_rules,
    set_minimum_tabs,
    set_mode,
    show_settings,
    validate_pattern,
)


@click.group()
def cli() -> None:
    """Auto Tab Groups: classify URLs into tab groups and manage grouping rules."""


cli.add_command(classify)
cli.add_command(validate_pattern)
cli.add_command(check_conflicts)
cli.add_command(add_rule)
cli.add_command(delete_rule)
cli.add_command(list_rules)
cli.add_command(export_rules)
cli.add_command(import_rules)
cli.add_command(set_mode)
cli.add_command(set_minimum_tabs)
cli.add_command(show_settings)
cli.add_command(group_snapshot)
