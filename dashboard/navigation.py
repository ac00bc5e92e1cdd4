"""
Navigation State Machine.

NavigationController owns the current section and drives every transition:
cleanup of the outgoing section, chrome updates, history, cache-or-fetch of
the incoming markup, then init of the incoming section. It is the single
recovery boundary for navigation failures: loading state is always cleared,
the user is always told, and a failed section falls back to the dashboard.

Overlapping navigations are not cancelled. Whichever fetch resolves last
writes the content region, and the loading flag stays up until every
navigation in flight has settled or the failsafe fires.
"""

import itertools
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Set

from dashboard.cache import SectionCache
from dashboard.clock import Clock, TimerHandle
from dashboard.errors import HttpError, TimeoutWarning
from dashboard.gateway import RemoteGateway
from dashboard.layout import (
    NARROW_BREAKPOINT_PX,
    ROOT_SECTION,
    build_breadcrumb,
    format_section_name,
    initial_sidebar_open,
    is_narrow,
    page_title,
)
from dashboard.lifecycle import LifecycleRegistry
from dashboard.logging_config import logger, set_current_section
from dashboard.notifications import Notifier
from dashboard.view import History, PageChrome, ViewRegion, Viewport


LOADING_TIMEOUT_MS = 30_000


@dataclass
class NavigationState:
    current_section: Optional[str] = None
    sidebar_open: bool = True
    is_loading: bool = False
    loading_message: str = ""
    loading_timer: Optional[TimerHandle] = None
    in_flight: Set[int] = field(default_factory=set)

    @property
    def phase(self) -> str:
        if self.current_section is None and not self.is_loading:
            return "idle"
        return "transitioning" if self.is_loading else "active"


class NavigationController:
    """Mediates every move between sections"""

    def __init__(
        self,
        gateway: RemoteGateway,
        cache: SectionCache,
        registry: LifecycleRegistry,
        notifier: Notifier,
        clock: Clock,
        view: ViewRegion,
        chrome: PageChrome,
        history: History,
        viewport: Optional[Viewport] = None,
        fallback_section: str = ROOT_SECTION,
        loading_timeout_ms: int = LOADING_TIMEOUT_MS,
        narrow_breakpoint: int = NARROW_BREAKPOINT_PX,
        on_unauthorized: Optional[Callable[[], None]] = None,
        page_view_sink: Optional[Callable[[str], None]] = None,
    ):
        self.gateway = gateway
        self.cache = cache
        self.registry = registry
        self.notifier = notifier
        self.clock = clock
        self.view = view
        self.chrome = chrome
        self.history = history
        self.viewport = viewport or Viewport()
        self.fallback_section = fallback_section
        self.loading_timeout_ms = loading_timeout_ms
        self.narrow_breakpoint = narrow_breakpoint
        self.on_unauthorized = on_unauthorized
        self.page_view_sink = page_view_sink

        self.state = NavigationState(
            sidebar_open=initial_sidebar_open(self.viewport.width, narrow_breakpoint)
        )
        self._tickets = itertools.count(1)

    @property
    def current_section(self) -> Optional[str]:
        return self.state.current_section

    @property
    def is_loading(self) -> bool:
        return self.state.is_loading

    def location(self) -> str:
        return f"#{self.state.current_section}" if self.state.current_section else ""

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def navigate_to(self, section: str, add_to_history: bool = True) -> bool:
        """
        Move to ``section``. Returns True when its content was installed.

        The current section is updated before content loads so highlighting
        follows the user's intent immediately.
        """
        started = self.clock.now_ms()
        ticket = self._begin_loading(section)
        logger.log_navigation(section, "start", add_to_history=add_to_history)

        try:
            # Current must move before cleanup can suspend
            previous = self.state.current_section
            self.state.current_section = section
            set_current_section(section)
            if previous is not None and previous != section:
                await self.registry.cleanup(previous)

            self._update_chrome(section)

            if is_narrow(self.viewport.width, self.narrow_breakpoint) and self.state.sidebar_open:
                self.close_sidebar()

            if add_to_history:
                self.history.push({"section": section}, page_title(section), f"#{section}")

            markup = await self._resolve_content(section)

            self.view.set_content(markup)
            await self.registry.init(section)
            self._attach_section_listeners(section)
        except Exception as e:
            self._end_loading(ticket)
            return await self._handle_failure(section, e)

        self._end_loading(ticket)
        self.view.scroll_to_top()
        self._record_page_view(section, self.clock.now_ms() - started)
        return True

    async def handle_popstate(self, state: Optional[Dict[str, Any]]) -> bool:
        """Replay a history entry without recording a new one"""
        section = (state or {}).get("section") or self.fallback_section
        return await self.navigate_to(section, add_to_history=False)

    async def reload_current(self) -> bool:
        """Drop the cached markup for the current section and load it again"""
        section = self.state.current_section or self.fallback_section
        self.cache.invalidate(section)
        return await self.navigate_to(section, add_to_history=False)

    async def refresh_section(self, section: Optional[str] = None) -> bool:
        """Invalidate the section's markup, then let its controller reload data"""
        section = section or self.state.current_section
        if section is None:
            return False
        self.cache.invalidate(section)
        return await self.registry.refresh(section)

    # ------------------------------------------------------------------
    # Sidebar
    # ------------------------------------------------------------------

    def toggle_sidebar(self) -> bool:
        self._set_sidebar(not self.state.sidebar_open)
        return self.state.sidebar_open

    def open_sidebar(self) -> None:
        self._set_sidebar(True)

    def close_sidebar(self) -> None:
        self._set_sidebar(False)

    def handle_resize(self, width: int) -> None:
        """Collapse on narrow viewports, reopen when the window grows wide again"""
        was_narrow = is_narrow(self.viewport.width, self.narrow_breakpoint)
        self.viewport.width = width
        now_narrow = is_narrow(width, self.narrow_breakpoint)
        if now_narrow and self.state.sidebar_open:
            self.close_sidebar()
        elif was_narrow and not now_narrow and not self.state.sidebar_open:
            self.open_sidebar()

    def _set_sidebar(self, is_open: bool) -> None:
        self.state.sidebar_open = is_open
        self.chrome.set_sidebar_open(is_open)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _begin_loading(self, section: str) -> int:
        """Raise the loading flag for one more navigation; the failsafe is re-armed"""
        if self.state.loading_timer is not None:
            self.state.loading_timer.cancel()

        ticket = next(self._tickets)
        self.state.in_flight.add(ticket)
        message = f"Loading {format_section_name(section)}..."
        self.state.is_loading = True
        self.state.loading_message = message
        self.chrome.set_loading(True, message)

        self.state.loading_timer = self.clock.call_later(
            self.loading_timeout_ms, lambda: self._loading_timed_out(section)
        )
        return ticket

    def _end_loading(self, ticket: int) -> None:
        if ticket not in self.state.in_flight:
            # Already forced off by the failsafe
            return
        self.state.in_flight.discard(ticket)
        if not self.state.in_flight:
            self._clear_loading()

    def _clear_loading(self) -> None:
        if self.state.loading_timer is not None:
            self.state.loading_timer.cancel()
            self.state.loading_timer = None
        self.state.in_flight.clear()
        self.state.is_loading = False
        self.state.loading_message = ""
        self.chrome.set_loading(False)

    def _loading_timed_out(self, section: str) -> None:
        if not self.state.is_loading:
            return
        self._clear_loading()
        self.notifier.warn(TimeoutWarning(section, self.loading_timeout_ms))

    def _update_chrome(self, section: str) -> None:
        self.chrome.set_active_nav(section)
        self.chrome.set_title(page_title(section))
        self.chrome.set_breadcrumb(build_breadcrumb(section, self.fallback_section))

    async def _resolve_content(self, section: str) -> str:
        markup = self.cache.get_valid(section)
        if markup is not None:
            return markup
        markup = await self.gateway.fetch_fragment(f"/{section}.html")
        self.cache.put(section, markup)
        return markup

    def _attach_section_listeners(self, section: str) -> None:
        self.view.bind_action("refresh", lambda: self.refresh_section(section))

    async def _handle_failure(self, section: str, error: Exception) -> bool:
        logger.log_navigation(section, "failed", error_type=type(error).__name__)

        if isinstance(error, HttpError) and error.is_unauthorized and self.on_unauthorized is not None:
            self.notifier.report_error("api", error)
            self.on_unauthorized()
            return False

        self.notifier.report_error("navigation", error)
        if section != self.fallback_section:
            await self.navigate_to(self.fallback_section, add_to_history=True)
        return False

    def _record_page_view(self, section: str, duration_ms: float) -> None:
        logger.log_navigation(section, "page_view", duration_ms=duration_ms)
        if self.page_view_sink is not None:
            self.page_view_sink(section)
