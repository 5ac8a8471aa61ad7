"""Service protocols defining interfaces for dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from auto_tab_groups.models.tab import Tab, TabGroup, TabGroupColor, Window


class TabProviderError(Exception):
    """Raised by a tab provider when the browser rejects a call."""


class TabProviderProtocol(Protocol):
    """Protocol for the browser that owns tabs, tab groups and windows.

    The provider is the single source of truth for group membership. Every
    call may observe state changed out-of-band since the previous one.
    Failures raise ``TabProviderError``.
    """

    @property
    def supports_tab_groups(self) -> bool: ...

    def get_tab(self, tab_id: int) -> Tab: ...

    def query_tabs(
        self,
        window_id: int | None = None,
        group_id: int | None = None,
        active: bool | None = None,
    ) -> list[Tab]: ...

    def group_tabs(self, tab_ids: list[int], group_id: int | None = None) -> int: ...

    def ungroup_tabs(self, tab_ids: list[int]) -> None: ...

    def query_groups(self, window_id: int | None = None) -> list[TabGroup]: ...

    def get_group(self, group_id: int) -> TabGroup: ...

    def update_group(
        self,
        group_id: int,
        title: str | None = None,
        color: TabGroupColor | None = None,
        collapsed: bool | None = None,
    ) -> TabGroup: ...

    def query_windows(self) -> list[Window]: ...


class RulesChangeListener(Protocol):
    """Told when the rule catalog changed so open tabs can be regrouped."""

    def rules_changed(self, full_regroup: bool = True) -> None: ...
