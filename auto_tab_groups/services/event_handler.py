"""Browser event dispatch: map tab and group events onto reconciler calls."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, NamedTuple

import structlog

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from auto_tab_groups.models.tab import Tab
    from auto_tab_groups.services.tab_group_service import TabGroupService

logger = structlog.get_logger(__name__)


class PendingCollapse(NamedTuple):
    tab_id: int
    due_at: float


class BrowserEventHandler:
    """Routes browser events to ``TabGroupService``.

    Handlers never raise: a failing event is logged and the next event
    re-converges whatever it left behind.

    Everything runs on the thread that dispatches events. A delayed
    auto-collapse is recorded as a deadline and carried out by the first
    event (or ``run_pending_collapse`` call) at or after it.
    """

    def __init__(
        self, service: TabGroupService, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self.service = service
        self.clock = clock
        self._pending_collapse: PendingCollapse | None = None

    @property
    def pending_collapse(self) -> PendingCollapse | None:
        return self._pending_collapse

    def on_tab_created(self, tab: Tab) -> None:
        self.run_pending_collapse()
        try:
            logger.debug("tab_created", tab_id=tab.id, url=tab.url)
            if tab.url:
                self.service.handle_tab_update(tab.id)
        except Exception as exc:
            logger.error("tab_created_handler_failed", tab_id=tab.id, error=str(exc))

    def on_tab_updated(self, tab_id: int, change_info: Mapping[str, Any]) -> None:
        """Regroup on a URL change or when the tab gets unpinned."""
        self.run_pending_collapse()
        try:
            if "url" in change_info:
                logger.debug("tab_url_changed", tab_id=tab_id, url=change_info["url"])
                self.service.handle_tab_update(tab_id)
            elif change_info.get("pinned") is False:
                logger.debug("tab_unpinned", tab_id=tab_id)
                self.service.handle_tab_update(tab_id)
        except Exception as exc:
            logger.error("tab_updated_handler_failed", tab_id=tab_id, error=str(exc))

    def on_tab_removed(self, tab_id: int) -> None:
        """A closed tab may leave its group below threshold."""
        self.run_pending_collapse()
        try:
            logger.debug("tab_removed", tab_id=tab_id)
            self.service.check_all_groups_threshold()
        except Exception as exc:
            logger.error("tab_removed_handler_failed", tab_id=tab_id, error=str(exc))

    def on_tab_moved(self, tab_id: int) -> None:
        self.run_pending_collapse()
        try:
            logger.debug("tab_moved", tab_id=tab_id)
            self.service.handle_tab_update(tab_id)
        except Exception as exc:
            logger.error("tab_moved_handler_failed", tab_id=tab_id, error=str(exc))

    def on_tab_activated(self, tab_id: int) -> None:
        """Auto-collapse the other groups, immediately or after the configured delay.

        A pending delayed collapse is replaced by the next activation.
        """
        self.run_pending_collapse()
        try:
            settings = self.service.settings
            if not settings.auto_collapse_enabled:
                return

            self.cancel_pending_collapse()
            delay_seconds = settings.auto_collapse_delay_ms / 1000
            if delay_seconds <= 0:
                self.service.collapse_other_groups(tab_id)
                return

            self._pending_collapse = PendingCollapse(tab_id, self.clock() + delay_seconds)
            logger.debug("auto_collapse_scheduled", tab_id=tab_id, delay_seconds=delay_seconds)
        except Exception as exc:
            logger.error("tab_activated_handler_failed", tab_id=tab_id, error=str(exc))

    def run_pending_collapse(self) -> bool:
        """Carry out the delayed collapse if its deadline has passed.

        Returns True when a collapse ran. Hosts with an idle loop call this
        between events so the collapse does not wait for the next one.
        """
        pending = self._pending_collapse
        if pending is None or self.clock() < pending.due_at:
            return False

        self._pending_collapse = None
        try:
            self.service.collapse_other_groups(pending.tab_id)
        except Exception as exc:
            logger.error("auto_collapse_failed", tab_id=pending.tab_id, error=str(exc))
        return True

    def cancel_pending_collapse(self) -> None:
        self._pending_collapse = None

    def on_group_removed(self, group_id: int) -> None:
        self.run_pending_collapse()
        logger.debug("group_removed", group_id=group_id)
