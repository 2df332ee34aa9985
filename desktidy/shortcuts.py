"""Keyboard shortcuts for the file list."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from PySide6.QtCore import Qt
from PySide6.QtGui import QKeySequence, QShortcut


@dataclass(frozen=True)
class Shortcut:
    id: str
    key: str  # QKeySequence portable text
    description: str
    category: str = "General"


DEFAULT_SHORTCUTS = [
    Shortcut("select_all", "Ctrl+A", "Select all", "Selection"),
    Shortcut("clear_selection", "Esc", "Clear selection", "Selection"),
    Shortcut("delete", "Del", "Delete selected files", "Files"),
    Shortcut("move", "Ctrl+Shift+M", "Move selected files", "Files"),
    Shortcut("copy", "Ctrl+Shift+C", "Copy selected files", "Files"),
    Shortcut("rename", "F2", "Rename selected file", "Files"),
    Shortcut("new_folder", "Ctrl+Shift+N", "New folder", "Files"),
    Shortcut("undo", "Ctrl+Z", "Undo last operation", "Files"),
    Shortcut("refresh", "F5", "Refresh file list", "Navigation"),
    Shortcut("back", "Alt+Left", "Back", "Navigation"),
    Shortcut("parent", "Alt+Up", "Parent folder", "Navigation"),
    Shortcut("history", "Ctrl+H", "Show operation history", "General"),
    Shortcut("help", "Ctrl+/", "Show keyboard shortcuts", "General"),
]


def install_shortcuts(widget, handlers: dict[str, Callable[[], object]], shortcuts=None) -> list[QShortcut]:
    """Bind a QShortcut on ``widget`` for every shortcut id that has a handler."""
    installed = []
    for sc in shortcuts or DEFAULT_SHORTCUTS:
        handler = handlers.get(sc.id)
        if handler is None:
            continue
        qs = QShortcut(QKeySequence(sc.key), widget)
        qs.setContext(Qt.ShortcutContext.WindowShortcut)
        qs.activated.connect(lambda h=handler: h())
        installed.append(qs)
    logging.debug(f"[shortcuts] installed {len(installed)} shortcuts")
    return installed


def format_help(shortcuts=None) -> str:
    groups: dict[str, list[Shortcut]] = {}
    for sc in shortcuts or DEFAULT_SHORTCUTS:
        groups.setdefault(sc.category, []).append(sc)
    lines = ["Keyboard Shortcuts", ""]
    for category, items in groups.items():
        lines.append(f"{category}:")
        for sc in items:
            lines.append(f"  {sc.key:<20}{sc.description}")
        lines.append("")
    lines.append("Mouse:")
    lines.append(f"  {'Click, Ctrl+Click':<20}Toggle selection")
    lines.append(f"  {'Shift+Click':<20}Select range")
    lines.append(f"  {'Double-click':<20}Open folder")
    return "\n".join(lines)


__all__ = ["Shortcut", "DEFAULT_SHORTCUTS", "install_shortcuts", "format_help"]
