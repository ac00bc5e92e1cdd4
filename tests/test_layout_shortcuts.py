"""
Unit Tests for layout helpers and keyboard shortcuts
"""
import pytest

from dashboard.layout import (
    Crumb,
    build_breadcrumb,
    format_section_name,
    initial_sidebar_open,
    is_narrow,
    page_title,
    render_breadcrumb_html,
    render_breadcrumb_text,
)
from dashboard.shortcuts import (
    NavigateAction,
    ReloadAction,
    ShowHelpAction,
    help_lines,
    resolve_shortcut,
)


class TestLayout:
    """Test titles, breadcrumbs and breakpoints"""

    def test_format_section_name(self):
        assert format_section_name("complaints") == "Complaints"
        assert format_section_name("") == ""

    def test_page_title(self):
        assert page_title("analytics") == "Analytics - NACOS Complaint System"

    def test_root_breadcrumb_is_single_active_crumb(self):
        crumbs = build_breadcrumb("dashboard")

        assert crumbs == [Crumb("Dashboard", "dashboard", active=True)]
        assert render_breadcrumb_html(crumbs) == '<span class="active">Dashboard</span>'

    def test_nested_breadcrumb(self):
        crumbs = build_breadcrumb("users")

        assert render_breadcrumb_html(crumbs) == (
            '<a href="#dashboard" data-section="dashboard">Dashboard</a>'
            '<i class="fas fa-chevron-right"></i>'
            '<span class="active">Users</span>'
        )
        assert render_breadcrumb_text(crumbs) == "Dashboard › Users"

    def test_breadcrumb_escapes_markup(self):
        html = render_breadcrumb_html(build_breadcrumb("<x>"))
        assert "<x>" not in html

    @pytest.mark.parametrize("width,narrow", [(320, True), (1024, True), (1025, False), (1920, False)])
    def test_breakpoint(self, width, narrow):
        assert is_narrow(width) is narrow
        assert initial_sidebar_open(width) is (not narrow)


class TestShortcuts:
    """Test key resolution"""

    @pytest.mark.parametrize("key,section", [
        ("1", "dashboard"),
        ("2", "complaints"),
        ("3", "users"),
        ("4", "analytics"),
        ("5", "settings"),
    ])
    def test_ctrl_digits_navigate(self, key, section):
        assert resolve_shortcut(key, ctrl=True) == NavigateAction(section)

    def test_cmd_counts_as_ctrl(self):
        assert resolve_shortcut("2", meta=True) == NavigateAction("complaints")

    def test_digits_without_modifier_ignored(self):
        assert resolve_shortcut("1") is None

    @pytest.mark.parametrize("key", ["0", "6", "x", "²", "١٠"])
    def test_unbound_keys(self, key):
        assert resolve_shortcut(key, ctrl=True) is None

    def test_help(self):
        assert resolve_shortcut("/", ctrl=True) == ShowHelpAction()

    def test_reload(self):
        assert resolve_shortcut("F5") == ReloadAction()
        assert resolve_shortcut("r", ctrl=True) == ReloadAction()
        assert resolve_shortcut("R", meta=True) == ReloadAction()
        assert resolve_shortcut("r") is None

    def test_help_lines_cover_every_shortcut(self):
        lines = help_lines()

        assert len(lines) == 7
        assert lines[0] == "Ctrl/Cmd+1  Dashboard"
