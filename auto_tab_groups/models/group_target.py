"""The reconciler's decision output for one tab."""

from __future__ import annotations

from pydantic import BaseModel

from auto_tab_groups.models.rule import MatchedRule, Rule
from auto_tab_groups.models.tab import TabGroupColor


class GroupTarget(BaseModel):
    """Desired group for a tab: computed fresh per event, never persisted.

    ``color`` is imposed on the group (rule colors). ``default_color`` is only
    used when a new group has no saved color yet.
    """

    group_name: str
    color: TabGroupColor | None = None
    default_color: TabGroupColor | None = None
    source_rule: Rule | None = None

    @classmethod
    def from_matched(cls, matched: MatchedRule) -> GroupTarget:
        return cls(
            group_name=matched.effective_group_name,
            color=matched.rule.color,
            source_rule=matched.rule,
        )


class CollapseState(BaseModel):
    """Whether every tab group in the focused window is collapsed."""

    is_collapsed: bool
    group_count: int = 0
