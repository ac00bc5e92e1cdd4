"""Pure helpers for titles, breadcrumbs and sidebar behaviour"""

from dataclasses import dataclass
from html import escape
from typing import List

APP_TITLE = "NACOS Complaint System"
ROOT_SECTION = "dashboard"
NARROW_BREAKPOINT_PX = 1024
BREADCRUMB_SEPARATOR = "›"


@dataclass(frozen=True)
class Crumb:
    label: str
    section: str
    active: bool = False

    @property
    def is_link(self) -> bool:
        return not self.active


def format_section_name(section: str) -> str:
    if not section:
        return ""
    return section[0].upper() + section[1:]


def page_title(section: str) -> str:
    return f"{format_section_name(section)} - {APP_TITLE}"


def build_breadcrumb(section: str, root: str = ROOT_SECTION) -> List[Crumb]:
    """Root renders as one active crumb; anything else is root link then active crumb"""
    if section == root:
        return [Crumb(format_section_name(root), root, active=True)]
    return [
        Crumb(format_section_name(root), root),
        Crumb(format_section_name(section), section, active=True),
    ]


def render_breadcrumb_html(crumbs: List[Crumb]) -> str:
    parts = []
    for i, crumb in enumerate(crumbs):
        if i:
            parts.append('<i class="fas fa-chevron-right"></i>')
        label = escape(crumb.label)
        if crumb.is_link:
            parts.append(f'<a href="#{escape(crumb.section)}" data-section="{escape(crumb.section)}">{label}</a>')
        else:
            parts.append(f'<span class="active">{label}</span>')
    return "".join(parts)


def render_breadcrumb_text(crumbs: List[Crumb]) -> str:
    return f" {BREADCRUMB_SEPARATOR} ".join(c.label for c in crumbs)


def is_narrow(width: int, breakpoint: int = NARROW_BREAKPOINT_PX) -> bool:
    return width <= breakpoint


def initial_sidebar_open(width: int, breakpoint: int = NARROW_BREAKPOINT_PX) -> bool:
    return not is_narrow(width, breakpoint)
