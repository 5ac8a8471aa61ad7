"""Compute the desired group for a URL.

This is the pure half of reconciliation: it reads only the URL, the settings
object and the compiled rule catalog, never browser state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from auto_tab_groups.core.colors import SYSTEM_GROUP_COLOR
from auto_tab_groups.core.domain_extraction import (
    SYSTEM_DISPLAY_NAME,
    SYSTEM_DOMAIN,
    extract_domain,
    get_domain_display_name,
)
from auto_tab_groups.models.group_target import GroupTarget
from auto_tab_groups.models.settings import GroupByMode

if TYPE_CHECKING:
    from auto_tab_groups.core.rule_resolution import RuleResolver
    from auto_tab_groups.models.settings import GroupingSettings

SYSTEM_GROUP_TITLE = SYSTEM_DISPLAY_NAME


def system_target() -> GroupTarget:
    """Target for blank tabs and browser-internal pages in rules-only mode."""
    return GroupTarget(group_name=SYSTEM_GROUP_TITLE, default_color=SYSTEM_GROUP_COLOR)


def is_system_url(url: str) -> bool:
    return extract_domain(url) == SYSTEM_DOMAIN


def classify(url: str, settings: GroupingSettings, resolver: RuleResolver) -> GroupTarget | None:
    """Return the group a tab at ``url`` belongs in, or None to leave it alone.

    Rules-only mode consults the rules, then sends system pages to the System
    group. Domain and subdomain modes consult the rules first and fall back to
    the domain's display name. A custom rule always beats domain grouping.
    """
    if not url:
        return None

    if settings.group_by_mode is GroupByMode.RULES_ONLY:
        matched = resolver.find_matching_rule(url)
        if matched is not None:
            return GroupTarget.from_matched(matched)
        if is_system_url(url):
            return system_target()
        return None

    domain = extract_domain(url, include_subdomain=settings.include_subdomain)
    if domain is None:
        return None

    matched = resolver.find_matching_rule(url)
    if matched is not None:
        return GroupTarget.from_matched(matched)
    return GroupTarget(group_name=get_domain_display_name(domain))
