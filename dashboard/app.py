"""
Wires the dashboard together and exposes the operations the UI calls.
"""

import asyncio
from typing import Optional

import httpx

from dashboard.auth import AuthService
from dashboard.cache import SectionCache
from dashboard.clock import Clock, LoopClock
from dashboard.config import DashboardConfig
from dashboard.errors import DashboardError, HttpError
from dashboard.gateway import RemoteGateway
from dashboard.lifecycle import LifecycleRegistry
from dashboard.logging_config import logger
from dashboard.navigation import NavigationController
from dashboard.notifications import Notifier
from dashboard.sections import register_sections
from dashboard.session import SessionStore
from dashboard.shortcuts import NavigateAction, ReloadAction, ShowHelpAction, help_text, resolve_shortcut
from dashboard.view import History, MemoryHistory, PageChrome, Redirector, ViewRegion, Viewport


class DashboardApp:
    """Builds every collaborator from config and owns their lifetimes"""

    def __init__(
        self,
        config: DashboardConfig,
        view: ViewRegion,
        chrome: PageChrome,
        redirector: Redirector,
        history: Optional[History] = None,
        clock: Optional[Clock] = None,
        viewport: Optional[Viewport] = None,
        session_store: Optional[SessionStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        presenter=None,
        error_sink=None,
    ):
        self.config = config
        self.view = view
        self.chrome = chrome
        self.redirector = redirector
        self.history = history if history is not None else MemoryHistory()
        self.clock = clock or LoopClock()
        self.viewport = viewport or Viewport()

        self.session = session_store or SessionStore(config.credentials_file)
        self.notifier = Notifier(self.clock, presenter=presenter, sink=error_sink,
                                 duration_ms=config.toast_duration_ms)
        self.gateway = RemoteGateway(
            config.server_url,
            token_provider=lambda: self.session.token,
            api_prefix=config.api_prefix,
            timeout=config.request_timeout,
            transport=transport,
        )
        self.cache = SectionCache(
            self.clock,
            default_ttl_ms=config.default_ttl_ms,
            volatile_ttl_ms=config.volatile_ttl_ms,
            volatile_sections=config.volatile_sections,
        )
        self.registry = LifecycleRegistry(self.notifier)
        self.auth = AuthService(self.gateway, self.session, redirector,
                                notifier=self.notifier, login_page=config.login_page)
        self.navigation = NavigationController(
            self.gateway,
            self.cache,
            self.registry,
            self.notifier,
            self.clock,
            view,
            chrome,
            self.history,
            viewport=self.viewport,
            fallback_section=config.fallback_section,
            loading_timeout_ms=config.loading_timeout_ms,
            narrow_breakpoint=config.narrow_viewport_px,
            on_unauthorized=self.auth.handle_unauthorized,
        )
        self.notifier.set_location_provider(self.navigation.location)
        if isinstance(self.history, MemoryHistory):
            self.history.set_popstate_listener(self.navigation.handle_popstate)

        self.sections = {}
        self.started = False

    async def start(self, initial_hash: str = "") -> bool:
        """
        Guard the session, inject the sidebar, register sections, then show
        the section named by ``initial_hash`` (default: the fallback section).
        """
        if not self.auth.require_session():
            return False

        self.notifier.install_global_handlers(asyncio.get_running_loop())
        if not await self.load_sidebar() and not self.session.has_session():
            return False
        self.sections = register_sections(self.registry, self.gateway, self.view,
                                          auth=self.auth, notifier=self.notifier)

        initial = initial_hash.lstrip("#") or self.config.fallback_section
        self.started = True
        logger.info(f"Dashboard started for {self.session.username}")
        await self.navigation.navigate_to(initial, add_to_history=True)
        return True

    async def load_sidebar(self) -> bool:
        try:
            markup = await self.gateway.fetch_fragment("/sidebar.html")
        except HttpError as e:
            if e.is_unauthorized:
                self.auth.handle_unauthorized()
            else:
                self.notifier.report_error("api", e)
            return False
        except DashboardError as e:
            self.notifier.report_error("api", e)
            return False
        self.chrome.set_sidebar(markup)
        return True

    async def handle_key(self, key: str, ctrl: bool = False, meta: bool = False) -> bool:
        """Dispatch a keyboard shortcut; returns False for unbound keys"""
        action = resolve_shortcut(key, ctrl=ctrl, meta=meta)
        if action is None:
            return False
        if isinstance(action, NavigateAction):
            await self.navigation.navigate_to(action.section)
        elif isinstance(action, ReloadAction):
            await self.navigation.reload_current()
        elif isinstance(action, ShowHelpAction):
            self.show_help()
        return True

    def show_help(self) -> str:
        text = help_text()
        self.notifier.notify("info", "Keyboard shortcuts:\n" + text)
        return text

    def handle_resize(self, width: int) -> None:
        self.navigation.handle_resize(width)

    def toggle_sidebar(self) -> bool:
        return self.navigation.toggle_sidebar()

    async def logout(self) -> None:
        self.auth.logout()
        await self.close()

    async def close(self) -> None:
        self.notifier.uninstall_global_handlers()
        await self.gateway.aclose()
