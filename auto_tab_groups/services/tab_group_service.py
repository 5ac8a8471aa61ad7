"""Grouping reconciler: converge browser tab groups to the computed targets.

The browser is the single source of truth for group membership. Every
operation re-reads tabs and groups from the provider right before acting and
keeps no tab-to-group index between calls. The only state held here is the
settings object and the compiled rule catalog, both reloaded through
``reload_settings``.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, TypeVar

import structlog

from auto_tab_groups.core.classification import (
    SYSTEM_GROUP_TITLE,
    classify,
    is_system_url,
    system_target,
)
from auto_tab_groups.core.colors import parse_color, random_group_color
from auto_tab_groups.core.domain_extraction import (
    SYSTEM_DOMAIN,
    extract_domain,
    is_extension_url,
    validate_strict_domain,
)
from auto_tab_groups.core.rule_resolution import RuleResolver
from auto_tab_groups.models.group_target import CollapseState, GroupTarget
from auto_tab_groups.models.rule import RuleData
from auto_tab_groups.models.settings import (
    MAX_TABS_FOR_GROUP,
    MIN_TABS_FOR_GROUP,
    GroupByMode,
)
from auto_tab_groups.repositories.settings_repository import parse_custom_rules
from auto_tab_groups.services.protocols import TabProviderError
from auto_tab_groups.utils.progress import ProgressTracker
from auto_tab_groups.utils.retry import (
    DEFAULT_BASE_DELAY_SECONDS,
    DEFAULT_MAX_RETRIES,
    call_with_retry,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from auto_tab_groups.models.rule import Rule
    from auto_tab_groups.models.settings import GroupingSettings
    from auto_tab_groups.models.tab import Tab, TabGroup, TabGroupColor
    from auto_tab_groups.repositories.settings_repository import SettingsRepository
    from auto_tab_groups.services.protocols import TabProviderProtocol

T = TypeVar("T")

logger = structlog.get_logger(__name__)

DEFAULT_BULK_DELAY_SECONDS = 0.01


class TabGroupService:
    """Reconciles tabs into groups named by rules or by domain."""

    def __init__(
        self,
        provider: TabProviderProtocol,
        settings_repo: SettingsRepository,
        *,
        settings: GroupingSettings | None = None,
        bulk_delay: float = DEFAULT_BULK_DELAY_SECONDS,
        retry_attempts: int = DEFAULT_MAX_RETRIES,
        retry_base_delay: float = DEFAULT_BASE_DELAY_SECONDS,
    ) -> None:
        self.provider = provider
        self.settings_repo = settings_repo
        self.bulk_delay = bulk_delay
        self.retry_attempts = retry_attempts
        self.retry_base_delay = retry_base_delay
        self._settings = settings if settings is not None else settings_repo.load_settings()
        self._rules = parse_custom_rules(self._settings.custom_rules)
        self._resolver = RuleResolver(self._rules.values())

    # ------------------------------------------------------------------
    # Settings boundary
    # ------------------------------------------------------------------

    @property
    def settings(self) -> GroupingSettings:
        return self._settings

    @property
    def rules(self) -> dict[str, Rule]:
        return dict(self._rules)

    @property
    def resolver(self) -> RuleResolver:
        return self._resolver

    def reload_settings(self) -> GroupingSettings:
        """Re-read settings and rules from the repository and recompile the rules."""
        self._settings = self.settings_repo.load_settings()
        self._rules = parse_custom_rules(self._settings.custom_rules)
        self._resolver = RuleResolver(self._rules.values())
        logger.debug(
            "settings_reloaded",
            mode=str(self._settings.group_by_mode),
            rules=len(self._rules),
        )
        return self._settings

    def start(self) -> bool:
        """Startup pass: restore saved colors, then group existing tabs if enabled."""
        self.restore_saved_colors()
        if self._settings.auto_grouping_enabled:
            return self.group_all_tabs()
        return False

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def classify(self, url: str) -> GroupTarget | None:
        """Desired group for a URL under the current settings and rules."""
        return classify(url, self._settings, self._resolver)

    def _target_for_tab(self, tab: Tab) -> GroupTarget | None:
        if not tab.url:
            return system_target() if self._settings.group_new_tabs else None
        if not self._settings.group_new_tabs and is_system_url(tab.url):
            return None
        return self.classify(tab.url)

    def get_effective_minimum_tabs(self, rule: Rule | None) -> int:
        """A rule's own minimum when set, else the global minimum."""
        if rule is not None and rule.minimum_tabs is not None:
            return rule.minimum_tabs
        return self._settings.minimum_tabs_for_group or MIN_TABS_FOR_GROUP

    # ------------------------------------------------------------------
    # Provider access
    # ------------------------------------------------------------------

    def _mutate(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Call a provider mutation, retrying transient rejections with backoff."""
        return call_with_retry(
            func,
            *args,
            max_retries=self.retry_attempts,
            base_delay=self.retry_base_delay,
            **kwargs,
        )

    def _current_window_id(self) -> int | None:
        windows = self.provider.query_windows()
        for window in windows:
            if window.focused:
                return window.id
        return windows[0].id if windows else None

    def _current_window_tabs(self) -> list[Tab]:
        window_id = self._current_window_id()
        if window_id is None:
            return []
        return self.provider.query_tabs(window_id=window_id)

    def _current_window_groups(self) -> list[TabGroup]:
        window_id = self._current_window_id()
        if window_id is None:
            return []
        return self.provider.query_groups(window_id=window_id)

    def _active_group_id(self, window_id: int | None = None) -> int | None:
        window_id = window_id if window_id is not None else self._current_window_id()
        if window_id is None:
            return None
        active_tabs = self.provider.query_tabs(window_id=window_id, active=True)
        if active_tabs and active_tabs[0].is_grouped:
            return active_tabs[0].group_id
        return None

    def find_group_by_title(self, title: str, window_id: int) -> TabGroup | None:
        """First group in the window whose title equals ``title``."""
        if not self.provider.supports_tab_groups:
            return None
        try:
            groups = self.provider.query_groups(window_id=window_id)
        except TabProviderError as exc:
            logger.error("find_group_failed", title=title, window_id=window_id, error=str(exc))
            return None
        return next((group for group in groups if group.title == title), None)

    # ------------------------------------------------------------------
    # Single-tab reconciliation
    # ------------------------------------------------------------------

    def handle_tab_update(self, tab_id: int, force: bool = False) -> bool:
        """Move one tab into the group its current URL belongs to.

        Returns True when the tab ends up in its target group. Skipped tabs,
        tabs held back by a minimum threshold and provider failures all
        return False; nothing is raised.
        """
        if not force and not self._settings.auto_grouping_enabled:
            return False
        if not self.provider.supports_tab_groups:
            logger.warning("tab_groups_unsupported", tab_id=tab_id)
            return False

        try:
            tab = self.provider.get_tab(tab_id)

            if tab.pinned:
                logger.debug("tab_skipped", tab_id=tab_id, reason="pinned")
                return False
            if not self._settings.group_new_tabs and is_system_url(tab.url):
                logger.debug("tab_skipped", tab_id=tab_id, reason="system_tabs_disabled")
                return False

            target = self.classify(tab.url)
            if target is None:
                logger.debug(
                    "tab_skipped",
                    tab_id=tab_id,
                    reason="no_target",
                    mode=str(self._settings.group_by_mode),
                )
                return False

            return self.move_tab_to_target_group(tab, target)
        except TabProviderError as exc:
            logger.error("tab_update_failed", tab_id=tab_id, error=str(exc))
            return False
        except Exception as exc:
            logger.error(
                "tab_update_failed", tab_id=tab_id, error=str(exc), error_type=type(exc).__name__
            )
            return False

    def move_tab_to_target_group(self, tab: Tab, target: GroupTarget) -> bool:
        """Converge one tab onto ``target``: join, create, or stay ungrouped.

        Raises ``TabProviderError`` when the provider rejects a membership
        change. A new group that cannot be titled is undone and reported as False.
        """
        if not self.provider.supports_tab_groups:
            return False

        title = target.group_name
        existing = self.find_group_by_title(title, tab.window_id)

        if existing is not None:
            if tab.group_id == existing.id:
                logger.debug("tab_already_grouped", tab_id=tab.id, group=title)
                return True

            previous_group_id = tab.group_id if tab.is_grouped else None
            self._mutate(self.provider.group_tabs, [tab.id], group_id=existing.id)
            logger.info("tab_moved_to_group", tab_id=tab.id, group=title, group_id=existing.id)

            if target.color is not None and existing.color != target.color:
                self._update_group_quietly(existing.id, color=target.color)

            if previous_group_id is not None:
                self.check_group_threshold(previous_group_id)
            return True

        tab_count = self.count_tabs_for_target(target, tab.window_id)
        minimum_tabs = self.get_effective_minimum_tabs(target.source_rule)
        if tab_count < minimum_tabs:
            logger.info(
                "group_below_threshold",
                group=title,
                tab_count=tab_count,
                minimum_tabs=minimum_tabs,
            )
            if tab.is_grouped:
                self._mutate(self.provider.ungroup_tabs, [tab.id])
                self.check_group_threshold(tab.group_id)
            return False

        previous_group_id = tab.group_id if tab.is_grouped else None
        group_id = self._mutate(self.provider.group_tabs, [tab.id])
        color = self._choose_color(target)
        if not self._update_group_quietly(group_id, title=title, color=color):
            # An untitled group can never be found again by title.
            self._mutate(self.provider.ungroup_tabs, [tab.id])
            logger.error("group_create_failed", tab_id=tab.id, group=title, group_id=group_id)
            return False
        self.settings_repo.update_group_color(title, color)
        logger.info("group_created", group=title, group_id=group_id, color=str(color))

        self.group_matching_ungrouped_tabs(target, tab.window_id)
        if previous_group_id is not None:
            self.check_group_threshold(previous_group_id)
        return True

    def _choose_color(self, target: GroupTarget) -> TabGroupColor:
        """Rule color, else the color saved for the title, else default or random."""
        if target.color is not None:
            return target.color
        saved = self.settings_repo.get_group_color(target.group_name)
        if saved is not None:
            return saved
        return target.default_color or random_group_color()

    def _update_group_quietly(self, group_id: int, **changes: Any) -> bool:
        try:
            self._mutate(self.provider.update_group, group_id, **changes)
        except TabProviderError as exc:
            logger.warning("group_update_failed", group_id=group_id, error=str(exc))
            return False
        return True

    def count_tabs_for_target(self, target: GroupTarget, window_id: int) -> int:
        """Non-pinned tabs in the window, the current one included, that share the target."""
        try:
            tabs = self.provider.query_tabs(window_id=window_id)
        except TabProviderError as exc:
            logger.error("count_tabs_failed", window_id=window_id, error=str(exc))
            return 0

        count = 0
        for tab in tabs:
            if tab.pinned:
                continue
            other = self._target_for_tab(tab)
            if other is not None and other.group_name == target.group_name:
                count += 1
        return count

    def group_matching_ungrouped_tabs(self, target: GroupTarget, window_id: int) -> int:
        """Sweep ungrouped tabs of the window that share the target into its group."""
        group = self.find_group_by_title(target.group_name, window_id)
        if group is None:
            return 0

        try:
            tab_ids = [
                tab.id
                for tab in self.provider.query_tabs(window_id=window_id)
                if not tab.pinned
                and not tab.is_grouped
                and (other := self._target_for_tab(tab)) is not None
                and other.group_name == target.group_name
            ]
            if tab_ids:
                self._mutate(self.provider.group_tabs, tab_ids, group_id=group.id)
                logger.info("matching_tabs_grouped", group=target.group_name, count=len(tab_ids))
        except TabProviderError as exc:
            logger.error("group_matching_tabs_failed", group=target.group_name, error=str(exc))
            return 0
        return len(tab_ids)

    # ------------------------------------------------------------------
    # Bulk operations
    # ------------------------------------------------------------------

    def group_all_tabs(self) -> bool:
        """Group every tab of the current window, when auto-grouping is enabled."""
        if not self._settings.auto_grouping_enabled:
            return False
        return self._group_all(force=False)

    def group_all_tabs_manually(self) -> bool:
        """Group every tab of the current window regardless of the auto-grouping flag."""
        return self._group_all(force=True)

    def _group_all(self, force: bool) -> bool:
        if not self.provider.supports_tab_groups:
            logger.warning("tab_groups_unsupported", operation="group_all")
            return False

        try:
            tabs = self._current_window_tabs()
        except TabProviderError as exc:
            logger.error("group_all_failed", error=str(exc))
            return False

        operation = "group_all_manual" if force else "group_all"
        tracker = ProgressTracker(total=len(tabs))
        logger.info("bulk_grouping_started", operation=operation, tabs=len(tabs))

        for tab in tabs:
            if is_extension_url(tab.url):
                tracker.record_skip()
                continue

            try:
                if not tab.url:
                    grouped = self._group_blank_tab(tab.id)
                elif not self._settings.group_new_tabs and is_system_url(tab.url):
                    grouped = False
                else:
                    grouped = self.handle_tab_update(tab.id, force=force)
            except Exception as exc:
                logger.error("tab_grouping_failed", tab_id=tab.id, error=str(exc))
                tracker.record_failure(f"tab {tab.id}: {exc}")
                continue

            if grouped:
                tracker.record_success()
            else:
                tracker.record_skip()
            if self.bulk_delay > 0:
                time.sleep(self.bulk_delay)

        tracker.log_summary(operation)
        return True

    def _group_blank_tab(self, tab_id: int) -> bool:
        if not self._settings.group_new_tabs:
            return False
        tab = self.provider.get_tab(tab_id)
        if tab.pinned or tab.url:
            return False
        return self.move_tab_to_target_group(tab, system_target())

    def ungroup_all_tabs(self) -> bool:
        """Ungroup every grouped tab of the current window in one call."""
        if not self.provider.supports_tab_groups:
            return False
        try:
            tab_ids = [tab.id for tab in self._current_window_tabs() if tab.is_grouped]
            if tab_ids:
                self._mutate(self.provider.ungroup_tabs, tab_ids)
            logger.info("tabs_ungrouped", count=len(tab_ids))
        except TabProviderError as exc:
            logger.error("ungroup_all_failed", error=str(exc))
            return False
        return True

    def check_group_threshold(self, group_id: int) -> bool:
        """Disband a group whose tab count fell below its minimum.

        The minimum comes from the rule that sorts the group's tabs under its
        title, else the enabled rule named like the group, else the global
        setting. Disbandment ungroups every remaining tab. Returns True
        when the group was disbanded.
        """
        if not self.provider.supports_tab_groups:
            return False

        try:
            group = next(
                (group for group in self.provider.query_groups() if group.id == group_id),
                None,
            )
            if group is None:
                return False

            tabs = self.provider.query_tabs(group_id=group_id)
            rule = self._rule_for_group(group, tabs)
            minimum_tabs = self.get_effective_minimum_tabs(rule)
            if minimum_tabs <= 1:
                return False

            tab_count = sum(1 for tab in tabs if not tab.pinned)
            if tab_count >= minimum_tabs:
                return False

            tab_ids = [tab.id for tab in tabs]
            if tab_ids:
                self._mutate(self.provider.ungroup_tabs, tab_ids)
            logger.info(
                "group_disbanded",
                group=group.title,
                tab_count=tab_count,
                minimum_tabs=minimum_tabs,
            )
        except TabProviderError as exc:
            logger.error("threshold_check_failed", group_id=group_id, error=str(exc))
            return False
        return True

    def _rule_for_group(self, group: TabGroup, tabs: list[Tab]) -> Rule | None:
        # Segment and regex rules title their groups with captured values.
        for tab in tabs:
            if not tab.url:
                continue
            target = self.classify(tab.url)
            if target is None or target.group_name != group.title:
                continue
            if target.source_rule is not None:
                return target.source_rule
        return next(
            (rule for rule in self._rules.values() if rule.enabled and rule.name == group.title),
            None,
        )

    def check_all_groups_threshold(self) -> int:
        """Re-check every group of the current window; returns how many were disbanded."""
        if not self.provider.supports_tab_groups:
            return 0
        try:
            groups = self._current_window_groups()
        except TabProviderError as exc:
            logger.error("threshold_check_all_failed", error=str(exc))
            return 0

        logger.debug("checking_group_thresholds", groups=len(groups))
        return sum(1 for group in groups if self.check_group_threshold(group.id))

    def ungroup_system_tabs(self) -> bool:
        """Release every tab of the System group in the current window."""
        if not self.provider.supports_tab_groups:
            return False
        try:
            system_group = next(
                (
                    group
                    for group in self._current_window_groups()
                    if group.title == SYSTEM_GROUP_TITLE
                ),
                None,
            )
            if system_group is None:
                logger.debug("system_group_not_found")
                return True
            tab_ids = [tab.id for tab in self.provider.query_tabs(group_id=system_group.id)]
            if tab_ids:
                self._mutate(self.provider.ungroup_tabs, tab_ids)
                logger.info("system_tabs_ungrouped", count=len(tab_ids))
        except TabProviderError as exc:
            logger.error("ungroup_system_tabs_failed", error=str(exc))
            return False
        return True

    # ------------------------------------------------------------------
    # Colors
    # ------------------------------------------------------------------

    def generate_new_colors(self) -> bool:
        """Give every group not owned by a rule a fresh random color and save it."""
        if not self.provider.supports_tab_groups:
            return False
        try:
            groups = self.provider.query_groups()
        except TabProviderError as exc:
            logger.error("generate_colors_failed", error=str(exc))
            return False

        rule_names = {rule.name for rule in self._rules.values()}
        mapping = self.settings_repo.get_color_mapping()
        for group in groups:
            if group.title in rule_names:
                continue
            color = random_group_color()
            if self._update_group_quietly(group.id, color=color):
                mapping[group.title] = str(color)

        self.settings_repo.save_color_mapping(mapping)
        logger.info("group_colors_generated", groups=len(groups))
        return True

    def restore_saved_colors(self) -> bool:
        """Re-apply saved colors to groups whose current color differs."""
        if not self.provider.supports_tab_groups:
            return False
        try:
            groups = self.provider.query_groups()
        except TabProviderError as exc:
            logger.error("restore_colors_failed", error=str(exc))
            return False

        mapping = self.settings_repo.get_color_mapping()
        restored = 0
        for group in groups:
            saved = parse_color(mapping.get(group.title))
            if saved is not None and saved != group.color:
                if self._update_group_quietly(group.id, color=saved):
                    restored += 1

        logger.info("group_colors_restored", restored=restored)
        return True

    # ------------------------------------------------------------------
    # Collapse and expand
    # ------------------------------------------------------------------

    def toggle_all_groups_collapse(self) -> CollapseState:
        """Collapse everything if any group is expanded, else expand everything.

        The active tab's group is never collapsed, so it is left out when
        deciding which way to toggle.
        """
        if not self.provider.supports_tab_groups:
            return CollapseState(is_collapsed=False)
        try:
            groups = self.provider.query_groups()
            if not groups:
                return CollapseState(is_collapsed=False)
            active_group_id = self._active_group_id()
        except TabProviderError as exc:
            logger.error("toggle_collapse_failed", error=str(exc))
            return CollapseState(is_collapsed=False)

        collapse = any(not group.collapsed for group in groups if group.id != active_group_id)
        for group in groups:
            if collapse and group.id == active_group_id:
                continue
            self._update_group_quietly(group.id, collapsed=collapse)
        return CollapseState(is_collapsed=collapse, group_count=len(groups))

    def get_groups_collapse_state(self) -> CollapseState:
        """Collapsed when every group except the active tab's one is collapsed."""
        if not self.provider.supports_tab_groups:
            return CollapseState(is_collapsed=False)
        try:
            groups = self.provider.query_groups()
            active_group_id = self._active_group_id() if groups else None
        except TabProviderError as exc:
            logger.error("collapse_state_failed", error=str(exc))
            return CollapseState(is_collapsed=False)

        others = [group for group in groups if group.id != active_group_id]
        if not others:
            return CollapseState(is_collapsed=False, group_count=len(groups))
        return CollapseState(
            is_collapsed=all(group.collapsed for group in others),
            group_count=len(groups),
        )

    def collapse_all_groups(self) -> bool:
        if not self.provider.supports_tab_groups:
            return False
        try:
            groups = self.provider.query_groups()
            active_group_id = self._active_group_id()
        except TabProviderError as exc:
            logger.error("collapse_all_failed", error=str(exc))
            return False

        for group in groups:
            if group.id != active_group_id:
                self._update_group_quietly(group.id, collapsed=True)
        return True

    def expand_all_groups(self) -> bool:
        if not self.provider.supports_tab_groups:
            return False
        try:
            groups = self.provider.query_groups()
        except TabProviderError as exc:
            logger.error("expand_all_failed", error=str(exc))
            return False

        for group in groups:
            self._update_group_quietly(group.id, collapsed=False)
        return True

    def collapse_other_groups(self, active_tab_id: int) -> None:
        """Collapse every group of the tab's window except the active tab's group.

        The active tab is re-queried because the activated tab's snapshot can
        carry a stale group id.
        """
        if not self.provider.supports_tab_groups:
            return
        try:
            window_id = self.provider.get_tab(active_tab_id).window_id
            active_tabs = self.provider.query_tabs(window_id=window_id, active=True)
            if not active_tabs:
                logger.warning("active_tab_not_found", window_id=window_id)
                return

            active = active_tabs[0]
            if not active.is_grouped:
                self.collapse_all_groups()
                return

            groups = self.provider.query_groups(window_id=window_id)
            for group in groups:
                if group.id != active.group_id and not group.collapsed:
                    self._update_group_quietly(group.id, collapsed=True)

            active_group = next((g for g in groups if g.id == active.group_id), None)
            if active_group is not None and active_group.collapsed:
                self._update_group_quietly(active_group.id, collapsed=False)
        except TabProviderError as exc:
            logger.error("collapse_other_groups_failed", tab_id=active_tab_id, error=str(exc))

    # ------------------------------------------------------------------
    # Settings changes
    # ------------------------------------------------------------------

    def set_group_by_mode(self, mode: GroupByMode | str) -> GroupByMode:
        """Persist the mode, then regroup from scratch when auto-grouping is on."""
        group_by_mode = GroupByMode(mode)
        self.settings_repo.save_settings({"groupByMode": group_by_mode.value})
        self.reload_settings()
        logger.info("group_by_mode_changed", mode=group_by_mode.value)

        if self._settings.auto_grouping_enabled:
            self.ungroup_all_tabs()
            self.group_all_tabs()
        return group_by_mode

    def set_minimum_tabs(self, minimum_tabs: int) -> int:
        """Persist the global minimum, disband groups now below it, then regroup."""
        if not MIN_TABS_FOR_GROUP <= minimum_tabs <= MAX_TABS_FOR_GROUP:
            msg = f"Minimum tabs must be between {MIN_TABS_FOR_GROUP} and {MAX_TABS_FOR_GROUP}"
            raise ValueError(msg)

        self.settings_repo.save_settings({"minimumTabsForGroup": minimum_tabs})
        self.reload_settings()
        logger.info("minimum_tabs_changed", minimum_tabs=minimum_tabs)

        if self._settings.auto_grouping_enabled:
            self.check_all_groups_threshold()
            self.group_all_tabs()
        return minimum_tabs

    def set_auto_grouping(self, enabled: bool) -> bool:
        self.settings_repo.save_settings({"autoGroupingEnabled": enabled})
        self.reload_settings()
        if enabled:
            self.group_all_tabs()
        return enabled

    def set_group_new_tabs(self, enabled: bool) -> bool:
        """Toggle grouping of blank and browser-internal tabs into the System group."""
        self.settings_repo.save_settings({"groupNewTabs": enabled})
        self.reload_settings()
        if self._settings.auto_grouping_enabled:
            if enabled:
                self.group_all_tabs()
            else:
                self.ungroup_system_tabs()
        return enabled

    def set_auto_collapse(self, enabled: bool, delay_ms: int = 0) -> None:
        if delay_ms < 0:
            msg = "Auto-collapse delay must not be negative"
            raise ValueError(msg)
        self.settings_repo.save_settings(
            {"autoCollapseEnabled": enabled, "autoCollapseDelayMs": delay_ms}
        )
        self.reload_settings()

    def rules_changed(self, full_regroup: bool = True) -> None:
        """Pick up an edited rule catalog and regroup when auto-grouping is on.

        A full regroup ungroups everything first so tabs leave groups that no
        rule produces anymore.
        """
        self.reload_settings()
        if not self._settings.auto_grouping_enabled:
            return
        if full_regroup:
            self.ungroup_all_tabs()
        self.group_all_tabs()

    # ------------------------------------------------------------------
    # Rule suggestions
    # ------------------------------------------------------------------

    def get_group_rule_data(self, group_id: int) -> RuleData | None:
        """Draft rule input from an existing group: its title, color and base domains."""
        if not self.provider.supports_tab_groups:
            return None
        try:
            group = self.provider.get_group(group_id)
            tabs = self.provider.query_tabs(group_id=group_id)
        except TabProviderError as exc:
            logger.error("group_rule_data_failed", group_id=group_id, error=str(exc))
            return None

        domains: set[str] = set()
        for tab in tabs:
            domain = extract_domain(tab.url)
            if domain and domain != SYSTEM_DOMAIN and validate_strict_domain(domain).is_valid:
                domains.add(domain)

        return RuleData(name=group.title, patterns=sorted(domains), color=str(group.color))
