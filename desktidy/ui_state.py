"""Window-level UI flags (history panel, view mode, sidebar).

Plain state record with explicit setters; each setter returns True when the
value actually changed so callers only re-render on real changes.
"""

from __future__ import annotations

VIEW_MODES = ("grid", "list")


class UIState:
    def __init__(self):
        self.reset()

    def reset(self) -> bool:
        before = self.snapshot() if hasattr(self, "view_mode") else None
        self.is_history_open: bool = False
        self.view_mode: str = "grid"
        self.sidebar_collapsed: bool = False
        return before is not None and before != self.snapshot()

    def snapshot(self) -> dict:
        return {
            "is_history_open": self.is_history_open,
            "view_mode": self.view_mode,
            "sidebar_collapsed": self.sidebar_collapsed,
        }

    def set_history_open(self, is_open: bool) -> bool:
        is_open = bool(is_open)
        if is_open == self.is_history_open:
            return False
        self.is_history_open = is_open
        return True

    def toggle_history(self) -> bool:
        return self.set_history_open(not self.is_history_open)

    def set_view_mode(self, mode: str) -> bool:
        if mode not in VIEW_MODES:
            raise ValueError(f"Unknown view mode: {mode}")
        if mode == self.view_mode:
            return False
        self.view_mode = mode
        return True

    def toggle_view_mode(self) -> bool:
        return self.set_view_mode("list" if self.view_mode == "grid" else "grid")

    def set_sidebar_collapsed(self, collapsed: bool) -> bool:
        collapsed = bool(collapsed)
        if collapsed == self.sidebar_collapsed:
            return False
        self.sidebar_collapsed = collapsed
        return True

    def toggle_sidebar(self) -> bool:
        return self.set_sidebar_collapsed(not self.sidebar_collapsed)


__all__ = ["UIState", "VIEW_MODES"]
