import logging

from PySide6.QtCore import QObject, Signal

from .domain import item_ids


class SelectionModel(QObject):
    """Set of selected paths for the active file list.

    Every operation is total: stale or unknown paths are tolerated, never
    rejected. Counts are derived from the set on each call.
    """

    selectionChanged = Signal(list)  # list of selected full paths
    anchorChanged = Signal(object)  # shift-range origin or None

    def __init__(self):
        super().__init__()
        self._selected: set[str] = set()
        self._anchor: str | None = None  # for shift range operations

    def _emit(self):
        self.selectionChanged.emit(list(self._selected))

    def _set_anchor(self, path: str | None):
        if path == self._anchor:
            return
        self._anchor = path
        self.anchorChanged.emit(path)

    def toggle_select(self, path: str):
        if path in self._selected:
            self._selected.remove(path)
        else:
            self._selected.add(path)
        self._set_anchor(path)
        logging.debug(f"[selection] toggle {path} -> {len(self._selected)} selected")
        self._emit()

    def select_all(self, items):
        paths = set(item_ids(items))
        if paths == self._selected:
            return
        self._selected = paths
        logging.debug(f"[selection] select_all -> {len(paths)} selected")
        self._emit()

    def clear_selection(self):
        changed = bool(self._selected)
        self._selected.clear()
        self._set_anchor(None)
        if changed:
            self._emit()

    def select_range(self, start_path: str, end_path: str, items):
        ordered = item_ids(items)
        try:
            start_index = ordered.index(start_path)
            end_index = ordered.index(end_path)
        except ValueError:
            # anchor no longer in the listing; leave the selection alone
            logging.debug(f"[selection] range anchor missing ({start_path!r}, {end_path!r}), ignoring")
            return
        lo, hi = sorted((start_index, end_index))
        rng = ordered[lo : hi + 1]
        before = len(self._selected)
        self._selected.update(rng)
        if len(self._selected) != before:
            self._emit()

    def retain(self, items) -> list[str]:
        """Drop selected paths that are not in ``items``. Returns the dropped paths."""
        keep = set(item_ids(items))
        dropped = [p for p in self._selected if p not in keep]
        if not dropped:
            return []
        self._selected.difference_update(dropped)
        if self._anchor is not None and self._anchor not in keep:
            self._set_anchor(None)
        logging.debug(f"[selection] pruned {len(dropped)} stale paths")
        self._emit()
        return dropped

    def discard(self, paths):
        removed = [p for p in paths if p in self._selected]
        if not removed:
            return
        self._selected.difference_update(removed)
        if self._anchor in removed:
            self._set_anchor(None)
        self._emit()

    def selected(self) -> list[str]:
        return list(self._selected)

    def selected_in_order(self, items) -> list[str]:
        return [p for p in item_ids(items) if p in self._selected]

    @property
    def selected_count(self) -> int:
        return len(self._selected)

    def anchor(self) -> str | None:
        return self._anchor

    def is_selected(self, path: str) -> bool:
        return path in self._selected

    def is_all_selected(self, items) -> bool:
        paths = set(item_ids(items))
        return paths == self._selected
