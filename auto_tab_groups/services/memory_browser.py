"""In-memory tab provider.

Holds windows, tabs and tab groups in plain dicts and behaves like a browser
where it matters to the reconciler: empty groups disappear, snapshots handed
out are copies, and group mutations can be made to fail transiently.
"""

from __future__ import annotations

from itertools import count
from typing import Any

import structlog

from auto_tab_groups.models.tab import TAB_GROUP_ID_NONE, Tab, TabGroup, TabGroupColor, Window
from auto_tab_groups.services.protocols import TabProviderError

logger = structlog.get_logger(__name__)

TRANSIENT_EDIT_ERROR = "Tabs cannot be edited right now (user may be dragging a tab)."


class InMemoryBrowser:
    """A ``TabProviderProtocol`` implementation backed by dicts."""

    def __init__(self, supports_tab_groups: bool = True) -> None:
        self._supports_tab_groups = supports_tab_groups
        self.windows: dict[int, Window] = {}
        self.tabs: dict[int, Tab] = {}
        self.groups: dict[int, TabGroup] = {}
        self.mutations: list[tuple[str, Any]] = []
        self._failures: dict[str, list[str]] = {}
        self._window_ids = count(1)
        self._tab_ids = count(1)
        self._group_ids = count(1)

    # ------------------------------------------------------------------
    # Test and CLI helpers
    # ------------------------------------------------------------------

    def add_window(self, focused: bool | None = None) -> Window:
        window_id = next(self._window_ids)
        is_focused = not self.windows if focused is None else focused
        if is_focused:
            for existing in self.windows.values():
                existing.focused = False
        window = Window(id=window_id, focused=is_focused)
        self.windows[window_id] = window
        return window.model_copy()

    @property
    def current_window_id(self) -> int:
        """The focused window, creating one when the browser has none."""
        for window in self.windows.values():
            if window.focused:
                return window.id
        if not self.windows:
            return self.add_window(focused=True).id
        return next(iter(self.windows))

    def open_tab(
        self,
        url: str = "",
        window_id: int | None = None,
        pinned: bool = False,
        active: bool = False,
    ) -> Tab:
        window_id = window_id if window_id is not None else self.current_window_id
        if window_id not in self.windows:
            msg = f"No window with id: {window_id}."
            raise TabProviderError(msg)
        tab = Tab(id=next(self._tab_ids), url=url, pinned=pinned, window_id=window_id)
        self.tabs[tab.id] = tab
        if active:
            self.activate(tab.id)
        return tab.model_copy()

    def navigate(self, tab_id: int, url: str) -> Tab:
        tab = self._tab(tab_id)
        tab.url = url
        return tab.model_copy()

    def set_pinned(self, tab_id: int, pinned: bool) -> Tab:
        tab = self._tab(tab_id)
        tab.pinned = pinned
        if pinned and tab.group_id != TAB_GROUP_ID_NONE:
            tab.group_id = TAB_GROUP_ID_NONE
            self._prune_empty_groups()
        return tab.model_copy()

    def activate(self, tab_id: int) -> Tab:
        tab = self._tab(tab_id)
        for other in self.tabs.values():
            if other.window_id == tab.window_id:
                other.active = other.id == tab_id
        return tab.model_copy()

    def close_tab(self, tab_id: int) -> None:
        self._tab(tab_id)
        del self.tabs[tab_id]
        self._prune_empty_groups()

    def move_tab_to_window(self, tab_id: int, window_id: int) -> Tab:
        tab = self._tab(tab_id)
        if window_id not in self.windows:
            msg = f"No window with id: {window_id}."
            raise TabProviderError(msg)
        tab.window_id = window_id
        tab.group_id = TAB_GROUP_ID_NONE
        tab.active = False
        self._prune_empty_groups()
        return tab.model_copy()

    def fail_next(self, operation: str, times: int = 1, message: str = TRANSIENT_EDIT_ERROR) -> None:
        """Make the next ``times`` calls of ``operation`` raise ``TabProviderError``."""
        self._failures.setdefault(operation, []).extend([message] * times)

    def group_titles(self, window_id: int | None = None) -> dict[str, list[int]]:
        """Map of group title to member tab ids, for assertions and display."""
        result: dict[str, list[int]] = {}
        for group in self.query_groups(window_id):
            result[group.title] = [tab.id for tab in self.query_tabs(group_id=group.id)]
        return result

    # ------------------------------------------------------------------
    # TabProviderProtocol
    # ------------------------------------------------------------------

    @property
    def supports_tab_groups(self) -> bool:
        return self._supports_tab_groups

    def get_tab(self, tab_id: int) -> Tab:
        self._maybe_fail("get_tab")
        return self._tab(tab_id).model_copy()

    def query_tabs(
        self,
        window_id: int | None = None,
        group_id: int | None = None,
        active: bool | None = None,
    ) -> list[Tab]:
        self._maybe_fail("query_tabs")
        return [
            tab.model_copy()
            for tab in self.tabs.values()
            if (window_id is None or tab.window_id == window_id)
            and (group_id is None or tab.group_id == group_id)
            and (active is None or tab.active == active)
        ]

    def group_tabs(self, tab_ids: list[int], group_id: int | None = None) -> int:
        self._require_groups()
        self._maybe_fail("group_tabs")
        if not tab_ids:
            msg = "No tabs given to group."
            raise TabProviderError(msg)

        tabs = [self._tab(tab_id) for tab_id in tab_ids]
        for tab in tabs:
            if tab.pinned:
                msg = f"Cannot group pinned tab {tab.id}."
                raise TabProviderError(msg)

        if group_id is None:
            group = TabGroup(id=next(self._group_ids), window_id=tabs[0].window_id)
            self.groups[group.id] = group
        else:
            group = self._group(group_id)

        for tab in tabs:
            tab.group_id = group.id
            tab.window_id = group.window_id

        self.mutations.append(("group_tabs", (tuple(tab_ids), group.id)))
        self._prune_empty_groups()
        return group.id

    def ungroup_tabs(self, tab_ids: list[int]) -> None:
        self._require_groups()
        self._maybe_fail("ungroup_tabs")
        for tab_id in tab_ids:
            self._tab(tab_id).group_id = TAB_GROUP_ID_NONE
        self.mutations.append(("ungroup_tabs", tuple(tab_ids)))
        self._prune_empty_groups()

    def query_groups(self, window_id: int | None = None) -> list[TabGroup]:
        self._require_groups()
        self._maybe_fail("query_groups")
        return [
            group.model_copy()
            for group in self.groups.values()
            if window_id is None or group.window_id == window_id
        ]

    def get_group(self, group_id: int) -> TabGroup:
        self._require_groups()
        self._maybe_fail("get_group")
        return self._group(group_id).model_copy()

    def update_group(
        self,
        group_id: int,
        title: str | None = None,
        color: TabGroupColor | None = None,
        collapsed: bool | None = None,
    ) -> TabGroup:
        self._require_groups()
        self._maybe_fail("update_group")
        group = self._group(group_id)
        changes: dict[str, Any] = {}
        if title is not None:
            changes["title"] = title
        if color is not None:
            changes["color"] = TabGroupColor(color)
        if collapsed is not None:
            changes["collapsed"] = collapsed
        for key, value in changes.items():
            setattr(group, key, value)
        self.mutations.append(("update_group", (group_id, changes)))
        return group.model_copy()

    def query_windows(self) -> list[Window]:
        self._maybe_fail("query_windows")
        return [window.model_copy() for window in self.windows.values()]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _tab(self, tab_id: int) -> Tab:
        tab = self.tabs.get(tab_id)
        if tab is None:
            msg = f"No tab with id: {tab_id}."
            raise TabProviderError(msg)
        return tab

    def _group(self, group_id: int) -> TabGroup:
        group = self.groups.get(group_id)
        if group is None:
            msg = f"No group with id: {group_id}."
            raise TabProviderError(msg)
        return group

    def _require_groups(self) -> None:
        if not self._supports_tab_groups:
            msg = "Tab groups are not supported by this browser."
            raise TabProviderError(msg)

    def _maybe_fail(self, operation: str) -> None:
        pending = self._failures.get(operation)
        if pending:
            message = pending.pop(0)
            logger.debug("injected_provider_failure", operation=operation, error=message)
            raise TabProviderError(message)

    def _prune_empty_groups(self) -> None:
        occupied = {tab.group_id for tab in self.tabs.values()}
        for group_id in [gid for gid in self.groups if gid not in occupied]:
            del self.groups[group_id]
