#!/usr/bin/env python3
"""
NACOS Admin Dashboard - Terminal Entry Point

Usage:
    nacos-dashboard login               # Sign in and store the session
    nacos-dashboard logout              # Forget the stored session
    nacos-dashboard status              # Show who is signed in
    nacos-dashboard                     # Open the dashboard shell
    nacos-dashboard run -s complaints   # Open the shell on a section
"""

import argparse
import asyncio
import shlex
import sys
from typing import List, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from prompt_toolkit.key_binding import KeyBindings
from rich.console import Console
from rich.prompt import Prompt

from dashboard import __version__
from dashboard.app import DashboardApp
from dashboard.config import DashboardConfig
from dashboard.errors import AuthenticationFailed, DashboardError
from dashboard.logging_config import setup_logging
from dashboard.sections import STATUS_CYCLE
from dashboard.shortcuts import SHORTCUT_SECTIONS
from dashboard.view import MemoryHistory, TerminalRedirector, TerminalView


SHELL_HELP = """
Commands:
  go <section>              Open a section (dashboard, complaints, users, analytics, settings)
  back / forward            Move through navigation history
  refresh                   Refresh the current section's data
  reload                    Reload the current section
  sidebar                   Toggle the sidebar
  width <px>                Simulate a viewport resize
  status <id> [<status>]    Advance or set a complaint's status
  delete <id>               Delete a complaint
  filter [status] [text]    Filter complaints (use '-' for any status)
  sort <column>             Sort complaints (same column toggles direction)
  page <n>                  Go to a page of complaints
  keys                      Show keyboard shortcuts
  logout                    Sign out and leave
  quit                      Leave the shell

Keys:
  Esc then 1-5              Jump to a section
  F5 / Ctrl+R               Reload current section
  Ctrl+/                    Show keyboard shortcuts
"""


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the dashboard"""
    parser = argparse.ArgumentParser(
        prog="nacos-dashboard",
        description="NACOS Complaint System - admin dashboard",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  nacos-dashboard login -u admin          Sign in as admin
  nacos-dashboard                         Open the dashboard
  nacos-dashboard run -s complaints       Open straight onto complaints
  nacos-dashboard status                  Show the stored session
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    login_parser = subparsers.add_parser("login", help="Sign in to the complaint system")
    login_parser.add_argument("--username", "-u", help="Username or email")

    subparsers.add_parser("logout", help="Forget the stored session")

    subparsers.add_parser("status", help="Show authentication status")

    run_parser = subparsers.add_parser("run", help="Open the dashboard shell")
    run_parser.add_argument("--section", "-s", default="", help="Section to open first")

    parser.add_argument(
        "--server-url",
        type=str,
        help="Backend server URL (default: http://localhost:8000)"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to config file"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def build_app(config: DashboardConfig, console: Console) -> DashboardApp:
    view = TerminalView(console=console)
    return DashboardApp(
        config,
        view=view,
        chrome=view,
        redirector=TerminalRedirector(console),
        history=MemoryHistory(),
    )


class DashboardShell:
    """Line-oriented front end over DashboardApp"""

    def __init__(self, app: DashboardApp, console: Console):
        self.app = app
        self.console = console
        self.running = True

    @property
    def view(self) -> TerminalView:
        return self.app.view

    def _create_key_bindings(self) -> KeyBindings:
        kb = KeyBindings()

        # Terminals do not deliver Ctrl+digit, so Esc+digit stands in for it
        for index in range(1, len(SHORTCUT_SECTIONS) + 1):
            @kb.add('escape', str(index))
            def jump(event, digit=str(index)):
                event.app.create_background_task(self.app.handle_key(digit, ctrl=True))

        @kb.add('f5')
        def reload(event):
            event.app.create_background_task(self.app.handle_key("F5"))

        @kb.add('c-r')
        def ctrl_reload(event):
            event.app.create_background_task(self.app.handle_key("r", ctrl=True))

        @kb.add('c-_')  # Ctrl+/
        def shortcuts(event):
            self.app.show_help()

        return kb

    def _create_session(self) -> PromptSession:
        kwargs = {'key_bindings': self._create_key_bindings()}
        try:
            self.app.config.ensure_config_dir()
            kwargs['history'] = FileHistory(self.app.config.history_file)
        except OSError:
            pass
        return PromptSession(**kwargs)

    def _prompt(self) -> str:
        section = self.app.navigation.current_section or "-"
        return f"nacos:{section}> "

    async def run(self, initial_section: str = "") -> int:
        try:
            if not await self.app.start(initial_section):
                return 1

            session = self._create_session()
            while self.running:
                try:
                    # Keep the notifier's loop handler installed while prompting
                    line = await session.prompt_async(self._prompt(), set_exception_handler=False)
                except KeyboardInterrupt:
                    continue
                except EOFError:
                    break
                await self.execute(line)
        finally:
            await self.app.close()
        return 0

    async def execute(self, line: str) -> bool:
        """Run one shell command; returns False for unknown commands"""
        try:
            parts = shlex.split(line)
        except ValueError as e:
            self.console.print(f"[red]{e}[/red]")
            return False
        if not parts:
            return True

        command, args = parts[0].lower(), parts[1:]
        handler = getattr(self, f"_cmd_{command}", None)
        if handler is None:
            self.console.print(f"[yellow]Unknown command: {command}. Type 'help'.[/yellow]")
            return False

        try:
            await handler(args)
        except DashboardError as e:
            self.app.notifier.report_error("api", e)
        except Exception as e:
            self.app.notifier.report_error("uncaught", e)
        return True

    async def _cmd_go(self, args: List[str]) -> None:
        if not args:
            self.console.print("[yellow]Usage: go <section>[/yellow]")
            return
        await self.app.navigation.navigate_to(args[0].lstrip("#"))

    async def _cmd_back(self, args: List[str]) -> None:
        if not await self.app.history.back():
            self.console.print("[dim]Nothing to go back to[/dim]")

    async def _cmd_forward(self, args: List[str]) -> None:
        if not await self.app.history.forward():
            self.console.print("[dim]Nothing to go forward to[/dim]")

    async def _cmd_refresh(self, args: List[str]) -> None:
        if not await self.view.trigger("refresh"):
            await self.app.navigation.refresh_section()

    async def _cmd_reload(self, args: List[str]) -> None:
        await self.app.navigation.reload_current()

    async def _cmd_sidebar(self, args: List[str]) -> None:
        is_open = self.app.toggle_sidebar()
        self.console.print(f"[dim]Sidebar {'open' if is_open else 'closed'}[/dim]")

    async def _cmd_width(self, args: List[str]) -> None:
        if not args or not args[0].isdecimal():
            self.console.print("[yellow]Usage: width <px>[/yellow]")
            return
        self.app.handle_resize(int(args[0]))

    async def _cmd_status(self, args: List[str]) -> None:
        complaints = self._complaints_section()
        if complaints is None:
            return
        if not args:
            self.console.print("[yellow]Usage: status <id> [<status>][/yellow]")
            return
        if len(args) == 1:
            await complaints.advance_status(args[0])
            return

        status = args[1]
        if status not in STATUS_CYCLE:
            self.console.print(f"[yellow]Status must be one of: {', '.join(STATUS_CYCLE)}[/yellow]")
            return
        complaint = complaints.find(args[0])
        if complaint is None:
            self.app.notifier.notify("error", f"Complaint {args[0]} not found")
            return
        await complaints.set_status(complaint["id"], status)

    async def _cmd_delete(self, args: List[str]) -> None:
        complaints = self._complaints_section()
        if complaints is None:
            return
        if not args:
            self.console.print("[yellow]Usage: delete <id>[/yellow]")
            return
        await complaints.delete(args[0])

    async def _cmd_filter(self, args: List[str]) -> None:
        complaints = self._complaints_section()
        if complaints is None:
            return
        status = args[0] if args and args[0] != "-" else None
        search = " ".join(args[1:]) or None
        complaints.set_filter(status=status, search=search)

    async def _cmd_sort(self, args: List[str]) -> None:
        complaints = self._complaints_section()
        if complaints is None:
            return
        complaints.sort_by(args[0] if args else "created_at")

    async def _cmd_page(self, args: List[str]) -> None:
        complaints = self._complaints_section()
        if complaints is None:
            return
        if not args or not args[0].isdecimal():
            self.console.print("[yellow]Usage: page <n>[/yellow]")
            return
        complaints.go_to_page(int(args[0]))

    async def _cmd_keys(self, args: List[str]) -> None:
        self.app.show_help()

    async def _cmd_help(self, args: List[str]) -> None:
        self.console.print(SHELL_HELP)

    async def _cmd_logout(self, args: List[str]) -> None:
        self.app.auth.logout()
        self.running = False

    async def _cmd_quit(self, args: List[str]) -> None:
        self.running = False

    _cmd_exit = _cmd_quit

    def _complaints_section(self):
        if self.app.navigation.current_section != "complaints":
            self.console.print("[yellow]Open the complaints section first: go complaints[/yellow]")
            return None
        return self.app.sections.get("complaints")


async def login(app: DashboardApp, username: Optional[str], console: Console) -> bool:
    username = username or Prompt.ask("Username or email")
    password = Prompt.ask("Password", password=True)
    try:
        credentials = await app.auth.login(username, password)
    except AuthenticationFailed as e:
        console.print(f"[red]{e.message}[/red]")
        return False
    finally:
        await app.close()

    console.print(f"\n[green]✓ Logged in as[/green] [bold]{credentials.username}[/bold] ({credentials.role})")
    if not credentials.is_admin:
        console.print("[yellow]Note: the dashboard is for admin accounts.[/yellow]")
    return True


def show_status(app: DashboardApp, console: Console) -> None:
    credentials = app.auth.current_user
    if credentials is None or not app.session.has_session():
        console.print("[yellow]Not logged in[/yellow]")
        return
    console.print(f"[green]Logged in as[/green] [bold]{credentials.username}[/bold]")
    console.print(f"Role: {credentials.role}")
    console.print(f"Server: {app.config.server_url}")


def main(argv: Optional[List[str]] = None):
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)

    console = Console()

    config = DashboardConfig.load_default()
    if args.config:
        config.load_from_file(args.config)
    if args.server_url:
        config.server_url = args.server_url
    if args.verbose:
        config.verbose = True
    setup_logging("DEBUG" if config.verbose else None)

    app = build_app(config, console)

    try:
        if args.command == "login":
            success = asyncio.run(login(app, args.username, console))
            sys.exit(0 if success else 1)

        elif args.command == "logout":
            app.auth.logout()
            console.print("[green]Logged out[/green]")
            sys.exit(0)

        elif args.command == "status":
            show_status(app, console)
            sys.exit(0)

        if not app.auth.require_admin():
            sys.exit(1)

        initial = args.section if args.command == "run" else ""
        shell = DashboardShell(app, console)
        sys.exit(asyncio.run(shell.run(initial)))

    except KeyboardInterrupt:
        print("\n\nGoodbye!")
        sys.exit(0)
    except DashboardError as e:
        console.print(f"\n[red]✗ {e.message}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
