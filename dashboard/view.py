"""
Interfaces the navigation core draws through, plus terminal implementations.

The core never touches a concrete UI: it writes markup into a ViewRegion,
updates a PageChrome, records entries in a History, and leaves through a
Redirector. The terminal classes render with rich; markup is reduced to
text with BeautifulSoup.
"""

import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Sequence

from bs4 import BeautifulSoup
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from dashboard.layout import Crumb, render_breadcrumb_text


ActionHandler = Callable[[], Any]


class ViewRegion(Protocol):
    def set_content(self, markup: str) -> None: ...

    def scroll_to_top(self) -> None: ...

    def bind_action(self, name: str, handler: ActionHandler) -> None: ...

    def show_table(self, title: str, columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> None: ...


class PageChrome(Protocol):
    def set_active_nav(self, section: str) -> None: ...

    def set_title(self, title: str) -> None: ...

    def set_breadcrumb(self, crumbs: List[Crumb]) -> None: ...

    def set_sidebar_open(self, is_open: bool) -> None: ...

    def set_loading(self, active: bool, message: str = "") -> None: ...

    def set_sidebar(self, markup: str) -> None: ...


class History(Protocol):
    def push(self, state: Dict[str, Any], title: str, url: str) -> None: ...


class Redirector(Protocol):
    def redirect(self, url: str) -> None: ...


@dataclass
class Viewport:
    width: int = 1280


@dataclass
class HistoryEntry:
    state: Dict[str, Any]
    title: str
    url: str


class MemoryHistory:
    """
    Back/forward stack. Moving through it replays the stored state through
    the popstate listener, the way a browser fires popstate.
    """

    def __init__(self):
        self.entries: List[HistoryEntry] = []
        self.index = -1
        self._listener: Optional[Callable[[Dict[str, Any]], Awaitable[None]]] = None

    def set_popstate_listener(self, listener: Callable[[Dict[str, Any]], Awaitable[None]]) -> None:
        self._listener = listener

    def push(self, state: Dict[str, Any], title: str, url: str) -> None:
        del self.entries[self.index + 1:]
        self.entries.append(HistoryEntry(dict(state), title, url))
        self.index = len(self.entries) - 1

    @property
    def current(self) -> Optional[HistoryEntry]:
        return self.entries[self.index] if self.index >= 0 else None

    def can_go_back(self) -> bool:
        return self.index > 0

    def can_go_forward(self) -> bool:
        return self.index < len(self.entries) - 1

    async def back(self) -> bool:
        if not self.can_go_back():
            return False
        self.index -= 1
        await self._pop()
        return True

    async def forward(self) -> bool:
        if not self.can_go_forward():
            return False
        self.index += 1
        await self._pop()
        return True

    async def _pop(self) -> None:
        if self._listener is not None:
            await self._listener(dict(self.entries[self.index].state))


def markup_to_text(markup: str) -> str:
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    return soup.get_text("\n", strip=True)


def nav_sections_from_markup(markup: str) -> List[str]:
    """Section names linked from a sidebar fragment, in order"""
    soup = BeautifulSoup(markup, "html.parser")
    return [a["data-section"] for a in soup.select("[data-section]") if a.get("data-section")]


@dataclass
class TerminalView:
    """ViewRegion and PageChrome rendered to a rich console"""

    console: Console = field(default_factory=Console)
    title: str = ""
    active_nav: str = ""
    breadcrumb: List[Crumb] = field(default_factory=list)
    sidebar_open: bool = True
    loading: bool = False
    loading_message: str = ""
    content: str = ""
    nav_sections: List[str] = field(default_factory=list)
    actions: Dict[str, ActionHandler] = field(default_factory=dict)

    # PageChrome

    def set_active_nav(self, section: str) -> None:
        self.active_nav = section

    def set_title(self, title: str) -> None:
        self.title = title

    def set_breadcrumb(self, crumbs: List[Crumb]) -> None:
        self.breadcrumb = list(crumbs)

    def set_sidebar_open(self, is_open: bool) -> None:
        self.sidebar_open = is_open

    def set_loading(self, active: bool, message: str = "") -> None:
        self.loading = active
        self.loading_message = message if active else ""
        if active and message:
            self.console.print(f"[dim]{message}[/dim]")

    def set_sidebar(self, markup: str) -> None:
        self.nav_sections = nav_sections_from_markup(markup)

    # ViewRegion

    def set_content(self, markup: str) -> None:
        self.content = markup
        self.actions = {}
        self.render()

    def scroll_to_top(self) -> None:
        pass

    def bind_action(self, name: str, handler: ActionHandler) -> None:
        self.actions[name] = handler

    async def trigger(self, name: str) -> bool:
        handler = self.actions.get(name)
        if handler is None:
            return False
        result = handler()
        if inspect.isawaitable(result):
            await result
        return True

    def show_table(self, title: str, columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> None:
        table = Table(title=title, show_lines=False)
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*[str(cell) for cell in row])
        self.console.print(table)

    def render_nav(self) -> str:
        if not self.sidebar_open or not self.nav_sections:
            return ""
        items = []
        for i, section in enumerate(self.nav_sections, start=1):
            label = section.capitalize()
            items.append(f"[reverse] {i} {label} [/reverse]" if section == self.active_nav else f" {i} {label} ")
        return " ".join(items)

    def render(self) -> None:
        nav = self.render_nav()
        if nav:
            self.console.print(nav)
        self.console.print(Panel(
            markup_to_text(self.content),
            title=self.title,
            subtitle=render_breadcrumb_text(self.breadcrumb),
            border_style="cyan",
        ))


class TerminalRedirector:
    """Leaving the dashboard in a terminal means ending the shell session"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self.redirected_to: Optional[str] = None

    def redirect(self, url: str) -> None:
        self.redirected_to = url
        self.console.print(
            f"[yellow]Not signed in. Run [bold]nacos-dashboard login[/bold] to continue ({url}).[/yellow]"
        )
