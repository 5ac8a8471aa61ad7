"""The fixed tab group color palette."""

from __future__ import annotations

import random

from auto_tab_groups.models.tab import TabGroupColor

GROUP_COLORS: tuple[TabGroupColor, ...] = tuple(TabGroupColor)

# Color used for the System group when rules-only mode creates it.
SYSTEM_GROUP_COLOR = TabGroupColor.GREY


def is_valid_color(color: object) -> bool:
    return isinstance(color, str) and color in GROUP_COLORS


def parse_color(color: object) -> TabGroupColor | None:
    """Return the palette color named by ``color``, or None."""
    if not is_valid_color(color):
        return None
    return TabGroupColor(color)


def random_group_color(rng: random.Random | None = None) -> TabGroupColor:
    """Pick a pseudo-random color from the palette."""
    return (rng or random).choice(GROUP_COLORS)
