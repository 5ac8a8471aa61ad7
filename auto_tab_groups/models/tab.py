"""Snapshots of browser-owned tabs, tab groups and windows."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel

# Browsers report ungrouped tabs with this sentinel group id.
TAB_GROUP_ID_NONE = -1


class TabGroupColor(StrEnum):
    """Colors a browser tab group can take."""

    GREY = "grey"
    BLUE = "blue"
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    PINK = "pink"
    PURPLE = "purple"
    CYAN = "cyan"
    ORANGE = "orange"


class Tab(BaseModel):
    """A read-mostly snapshot of one open tab.

    The snapshot is only valid until the next call into the provider; the
    reconciler always re-reads it before acting.
    """

    id: int
    url: str = ""
    pinned: bool = False
    group_id: int = TAB_GROUP_ID_NONE
    window_id: int = 1
    active: bool = False

    @property
    def is_grouped(self) -> bool:
        return self.group_id != TAB_GROUP_ID_NONE


class TabGroup(BaseModel):
    """A named, colored, collapsible container of tabs within one window."""

    id: int
    title: str = ""
    color: TabGroupColor = TabGroupColor.GREY
    collapsed: bool = False
    window_id: int = 1


class Window(BaseModel):
    """A browser window."""

    id: int
    focused: bool = False
