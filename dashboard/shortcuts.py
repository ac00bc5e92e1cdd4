"""Keyboard shortcuts for the dashboard"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

SHORTCUT_SECTIONS: Tuple[str, ...] = ("dashboard", "complaints", "users", "analytics", "settings")


@dataclass(frozen=True)
class NavigateAction:
    section: str


@dataclass(frozen=True)
class ShowHelpAction:
    pass


@dataclass(frozen=True)
class ReloadAction:
    pass


ShortcutAction = Union[NavigateAction, ShowHelpAction, ReloadAction]


def resolve_shortcut(key: str, ctrl: bool = False, meta: bool = False) -> Optional[ShortcutAction]:
    """Map a key press to an action; Cmd counts as Ctrl"""
    modifier = ctrl or meta

    if key == "F5":
        return ReloadAction()
    if not modifier:
        return None

    if key in ("r", "R"):
        return ReloadAction()
    if key == "/":
        return ShowHelpAction()
    if key.isdecimal() and 1 <= int(key) <= len(SHORTCUT_SECTIONS):
        return NavigateAction(SHORTCUT_SECTIONS[int(key) - 1])
    return None


def help_lines() -> Tuple[str, ...]:
    lines = [f"Ctrl/Cmd+{i}  {section.capitalize()}" for i, section in enumerate(SHORTCUT_SECTIONS, start=1)]
    lines.append("Ctrl/Cmd+/  Show keyboard shortcuts")
    lines.append("F5, Ctrl/Cmd+R  Reload current section")
    return tuple(lines)


def help_text() -> str:
    return "\n".join(help_lines())
