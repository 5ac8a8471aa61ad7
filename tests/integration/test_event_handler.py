"""Integration tests for browser event dispatch."""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING
from unittest.mock import MagicMock

from auto_tab_groups.models.settings import GroupingSettings
from auto_tab_groups.models.tab import Tab
from auto_tab_groups.services.event_handler import BrowserEventHandler

if TYPE_CHECKING:
    from collections.abc import Callable

    from auto_tab_groups.services.memory_browser import InMemoryBrowser
    from auto_tab_groups.services.tab_group_service import TabGroupService


def _mock_service(**settings: object) -> MagicMock:
    service = MagicMock()
    service.settings = GroupingSettings(**settings)
    return service


class _Clock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestTabEvents:
    def test_url_change_regroups(self) -> None:
        service = _mock_service()
        BrowserEventHandler(service).on_tab_updated(4, {"url": "https://example.com"})
        service.handle_tab_update.assert_called_once_with(4)

    def test_unpinning_regroups(self) -> None:
        service = _mock_service()
        BrowserEventHandler(service).on_tab_updated(4, {"pinned": False})
        service.handle_tab_update.assert_called_once_with(4)

    def test_title_change_ignored(self) -> None:
        service = _mock_service()
        handler = BrowserEventHandler(service)

        handler.on_tab_updated(4, {"title": "New title"})
        handler.on_tab_updated(4, {"pinned": True})

        service.handle_tab_update.assert_not_called()

    def test_created_blank_tab_waits_for_url(self) -> None:
        service = _mock_service()
        BrowserEventHandler(service).on_tab_created(Tab(id=2))
        service.handle_tab_update.assert_not_called()

    def test_removed_rechecks_thresholds(self) -> None:
        service = _mock_service()
        BrowserEventHandler(service).on_tab_removed(3)
        service.check_all_groups_threshold.assert_called_once_with()

    def test_handler_errors_are_swallowed(self) -> None:
        service = _mock_service()
        service.handle_tab_update.side_effect = RuntimeError("boom")
        service.check_all_groups_threshold.side_effect = RuntimeError("boom")
        handler = BrowserEventHandler(service)

        handler.on_tab_created(Tab(id=1, url="https://example.com"))
        handler.on_tab_updated(1, {"url": "https://example.com"})
        handler.on_tab_moved(1)
        handler.on_tab_removed(1)

        assert service.handle_tab_update.call_count == 3


class TestAutoCollapse:
    def test_disabled_does_nothing(self) -> None:
        service = _mock_service(auto_collapse_enabled=False)
        BrowserEventHandler(service).on_tab_activated(1)
        service.collapse_other_groups.assert_not_called()

    def test_immediate_collapse(self) -> None:
        service = _mock_service(auto_collapse_enabled=True, auto_collapse_delay_ms=0)
        BrowserEventHandler(service).on_tab_activated(1)
        service.collapse_other_groups.assert_called_once_with(1)

    def test_delayed_collapse_waits_for_deadline(self) -> None:
        clock = _Clock()
        service = _mock_service(auto_collapse_enabled=True, auto_collapse_delay_ms=500)
        handler = BrowserEventHandler(service, clock=clock)

        handler.on_tab_activated(7)
        assert handler.pending_collapse is not None
        clock.now = 0.4
        assert handler.run_pending_collapse() is False
        service.collapse_other_groups.assert_not_called()

        clock.now = 0.5
        assert handler.run_pending_collapse() is True
        service.collapse_other_groups.assert_called_once_with(7)
        assert handler.pending_collapse is None

    def test_next_activation_replaces_pending_collapse(self) -> None:
        clock = _Clock()
        service = _mock_service(auto_collapse_enabled=True, auto_collapse_delay_ms=500)
        handler = BrowserEventHandler(service, clock=clock)

        handler.on_tab_activated(1)
        clock.now = 0.2
        handler.on_tab_activated(2)
        clock.now = 0.6
        handler.run_pending_collapse()

        service.collapse_other_groups.assert_not_called()
        clock.now = 0.8
        handler.run_pending_collapse()
        service.collapse_other_groups.assert_called_once_with(2)

    def test_cancelled_collapse_never_runs(self) -> None:
        clock = _Clock()
        service = _mock_service(auto_collapse_enabled=True, auto_collapse_delay_ms=500)
        handler = BrowserEventHandler(service, clock=clock)

        handler.on_tab_activated(1)
        handler.cancel_pending_collapse()
        clock.now = 10.0

        assert handler.run_pending_collapse() is False
        service.collapse_other_groups.assert_not_called()

    def test_due_collapse_runs_before_next_event(self) -> None:
        clock = _Clock()
        service = _mock_service(auto_collapse_enabled=True, auto_collapse_delay_ms=500)
        handler = BrowserEventHandler(service, clock=clock)

        handler.on_tab_activated(7)
        clock.now = 1.0
        handler.on_tab_updated(3, {"url": "https://example.com"})

        assert [call[0] for call in service.method_calls] == [
            "collapse_other_groups",
            "handle_tab_update",
        ]

    def test_collapse_stays_on_dispatching_thread(self) -> None:
        clock = _Clock()
        service = _mock_service(auto_collapse_enabled=True, auto_collapse_delay_ms=500)
        seen: list[tuple[str, int]] = []

        def collapse(tab_id: int) -> None:
            seen.append(("collapse", threading.get_ident()))

        def handle(tab_id: int) -> bool:
            seen.append(("handle", threading.get_ident()))
            return True

        service.collapse_other_groups.side_effect = collapse
        service.handle_tab_update.side_effect = handle
        handler = BrowserEventHandler(service, clock=clock)

        handler.on_tab_activated(7)
        time.sleep(0.01)
        assert seen == []

        clock.now = 1.0
        handler.on_tab_moved(3)

        assert [name for name, _ in seen] == ["collapse", "handle"]
        assert {ident for _, ident in seen} == {threading.get_ident()}

    def test_collapse_failure_is_swallowed(self) -> None:
        clock = _Clock()
        service = _mock_service(auto_collapse_enabled=True, auto_collapse_delay_ms=500)
        service.collapse_other_groups.side_effect = RuntimeError("boom")
        handler = BrowserEventHandler(service, clock=clock)

        handler.on_tab_activated(7)
        clock.now = 1.0
        handler.on_tab_removed(3)

        service.check_all_groups_threshold.assert_called_once_with()
        assert handler.pending_collapse is None


class TestEventsAgainstBrowser:
    """The handler wired to a real reconciler and the in-memory browser."""

    def test_created_then_navigated(
        self, browser: InMemoryBrowser, service: TabGroupService
    ) -> None:
        handler = BrowserEventHandler(service)
        tab = browser.open_tab()
        handler.on_tab_created(tab)
        assert browser.group_titles() == {}

        browser.navigate(tab.id, "https://example.com")
        handler.on_tab_updated(tab.id, {"url": "https://example.com", "status": "loading"})

        assert browser.group_titles() == {"Example": [tab.id]}

    def test_unpinned_tab_joins_group(
        self, browser: InMemoryBrowser, service: TabGroupService
    ) -> None:
        handler = BrowserEventHandler(service)
        grouped = browser.open_tab("https://example.com")
        handler.on_tab_created(grouped)
        pinned = browser.open_tab("https://example.com/pinned", pinned=True)
        handler.on_tab_created(pinned)
        assert browser.group_titles() == {"Example": [grouped.id]}

        browser.set_pinned(pinned.id, False)
        handler.on_tab_updated(pinned.id, {"pinned": False})

        assert browser.group_titles() == {"Example": [grouped.id, pinned.id]}

    def test_moved_across_windows(
        self, browser: InMemoryBrowser, make_service: Callable[..., TabGroupService]
    ) -> None:
        handler = BrowserEventHandler(make_service())
        tab = browser.open_tab("https://example.com")
        handler.on_tab_created(tab)
        other_window = browser.add_window(focused=False)

        browser.move_tab_to_window(tab.id, other_window.id)
        handler.on_tab_moved(tab.id)

        assert browser.group_titles(window_id=1) == {}
        assert browser.group_titles(window_id=other_window.id) == {"Example": [tab.id]}
