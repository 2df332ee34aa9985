import logging
import os

from PySide6.QtCore import QObject, Qt, Signal

from .domain import FileBrowserState, OperationResult, OverwriteStrategy
from .errors import ERROR_MESSAGES, Notifier
from .file_ops import BatchOperationError, copy_files, create_folder, delete_files, move_files, rename_file
from .history import HistoryError, OperationHistory
from .listing import ListingError, scan_directory
from .selection import SelectionModel
from .settings import load_settings
from .taskrunner import TaskRunner
from .ui_state import UIState

_FAILED_KEYS = {"move": "MOVE_FAILED", "copy": "COPY_FAILED", "delete": "DELETE_FAILED"}
_DONE_VERBS = {"move": "Moved", "copy": "Copied", "delete": "Deleted"}


class FileBrowserViewModel(QObject):
    """ViewModel for one file list: owns the listing snapshot and the selection.

    The view reads through the query methods and mutates only through the
    explicit entry points below; nothing else writes to ``selection_model``.
    """

    items_changed = Signal(list)
    selection_changed = Signal(list)  # list of selected full paths
    counts_changed = Signal(int, int, bool)  # selected, total, all selected
    browser_state_changed = Signal(object)  # emits FileBrowserState
    directory_changed = Signal(str)
    navigation_changed = Signal(bool)  # can go back
    history_changed = Signal(list)  # HistoryEntry list, newest first
    ui_state_changed = Signal(dict)
    task_started = Signal(str)
    task_progress = Signal(str, int, int, str)
    task_finished = Signal(str, bool)

    def __init__(self, directory: str, settings: dict | None = None, synchronous: bool = False):
        super().__init__()
        self.directory = directory
        self.settings = settings if settings is not None else load_settings()
        self.items = []
        self.nav_history: list[str] = []
        self._synchronous = synchronous
        self._busy_task: str | None = None
        self._retry: dict[str, object] = {}
        self._init_controllers()
        self._connect_signals()

    def _init_controllers(self):
        self.selection_model = SelectionModel()
        self.notifier = Notifier()
        self.ui_state = UIState()
        mode = self.settings.get("view_mode", "grid")
        if mode in ("grid", "list"):
            self.ui_state.set_view_mode(mode)
        self.history = OperationHistory()
        self._tasks = TaskRunner()

    def _connect_signals(self):
        self.selection_model.selectionChanged.connect(self._on_selection_changed)
        self._tasks.task_started.connect(self._on_task_started)
        self._tasks.task_progress.connect(self.task_progress.emit)
        self._tasks.task_result.connect(self._on_task_result)
        self._tasks.task_error.connect(self._on_task_error)
        self._tasks.task_finished.connect(self._on_task_finished)

    # ---------------- listing -----------------
    def load_items(self) -> bool:
        include_hidden = bool(self.settings.get("show_hidden_files", False))
        try:
            self.items = scan_directory(self.directory, include_hidden=include_hidden)
            ok = True
        except ListingError as e:
            logging.warning(f"[viewmodel] could not list {self.directory}: {e}")
            self.items = []
            self.notifier.handle_error_with_retry(e, self.refresh, title=ERROR_MESSAGES["SCAN_FAILED"].title)
            ok = False
        self.items_changed.emit(list(self.items))
        self._emit_counts()
        self._emit_state_snapshot()
        return ok

    def refresh(self) -> bool:
        """Rescan the directory and drop selected paths that disappeared."""
        ok = self.load_items()
        self.selection_model.retain(self.items)
        return ok

    def change_directory(self, new_directory: str) -> bool:
        from .vm_directory import change_directory

        return change_directory(self, new_directory)

    def go_back(self) -> bool:
        from .vm_directory import go_back

        return go_back(self)

    def go_to_parent(self) -> bool:
        from .vm_directory import go_to_parent

        return go_to_parent(self)

    @property
    def can_go_back(self) -> bool:
        return bool(self.nav_history)

    def open_item(self, path: str) -> bool:
        """Enter ``path`` if it is a folder. Returns True when the directory changed."""
        if not os.path.isdir(path):
            return False
        return self.change_directory(path)

    def item_paths(self) -> list[str]:
        return [it.path for it in self.items]

    @property
    def total_count(self) -> int:
        return len(self.items)

    # ---------------- selection -----------------
    def handle_click(self, path: str, modifiers=Qt.KeyboardModifier.NoModifier):
        shift = bool(modifiers & Qt.KeyboardModifier.ShiftModifier)
        if shift:
            anchor = self.selection_model.anchor()
            if anchor is None:
                self.selection_model.toggle_select(path)
            else:
                self.selection_model.select_range(anchor, path, self.items)
            return
        # plain click and ctrl/meta click both toggle in the file grid
        self.selection_model.toggle_select(path)

    def toggle_select(self, path: str):
        self.selection_model.toggle_select(path)

    def select_range(self, start_path: str, end_path: str):
        self.selection_model.select_range(start_path, end_path, self.items)

    def select_all(self):
        self.selection_model.select_all(self.items)

    def clear_selection(self):
        self.selection_model.clear_selection()

    def is_selected(self, path: str) -> bool:
        return self.selection_model.is_selected(path)

    @property
    def selected_count(self) -> int:
        return self.selection_model.selected_count

    @property
    def is_all_selected(self) -> bool:
        return self.selection_model.is_all_selected(self.items)

    def selection_snapshot(self) -> list[str]:
        """Selected paths in listing order, followed by any not in the listing."""
        ordered = self.selection_model.selected_in_order(self.items)
        listed = set(ordered)
        dangling = sorted(p for p in self.selection_model.selected() if p not in listed)
        return ordered + dangling

    def _on_selection_changed(self, selected_paths):
        self.selection_changed.emit(selected_paths)
        self._emit_counts()
        self._emit_state_snapshot()

    def _emit_counts(self):
        self.counts_changed.emit(self.selected_count, self.total_count, self.is_all_selected)

    # ---------------- ui flags -----------------
    def toggle_history(self):
        if self.ui_state.toggle_history():
            self._emit_ui_state()

    def set_history_open(self, is_open: bool):
        if self.ui_state.set_history_open(is_open):
            self._emit_ui_state()

    def toggle_view_mode(self):
        if self.ui_state.toggle_view_mode():
            self.settings["view_mode"] = self.ui_state.view_mode
            self._emit_ui_state()

    def toggle_sidebar(self):
        if self.ui_state.toggle_sidebar():
            self._emit_ui_state()

    def _emit_ui_state(self):
        self.ui_state_changed.emit(self.ui_state.snapshot())
        self._emit_state_snapshot()

    def apply_settings(self, settings: dict):
        hidden_changed = bool(settings.get("show_hidden_files")) != bool(self.settings.get("show_hidden_files"))
        self.settings.update(settings)
        mode = self.settings.get("view_mode")
        if mode in ("grid", "list") and self.ui_state.set_view_mode(mode):
            self._emit_ui_state()
        if hidden_changed:
            self.refresh()

    # ---------------- batch operations -----------------
    @property
    def busy_task(self) -> str | None:
        return self._busy_task

    def move_selected(self, destination: str) -> bool:
        return self._move(self._batch_paths(), destination)

    def copy_selected(self, destination: str) -> bool:
        return self._copy(self._batch_paths(), destination)

    def delete_selected(self) -> bool:
        return self._delete(self._batch_paths())

    def _batch_paths(self) -> list[str]:
        """Selected paths that still exist, in listing order.

        Paths that left the listing or vanished from disk are dropped from the
        selection here instead of being handed to the batch.
        """
        live = [p for p in self.selection_model.selected_in_order(self.items) if os.path.lexists(p)]
        keep = set(live)
        stale = [p for p in self.selection_model.selected() if p not in keep]
        if stale:
            logging.debug(f"[viewmodel] dropping {len(stale)} stale selected paths")
            self.selection_model.discard(stale)
        return live

    def _move(self, paths, destination):
        overwrite = OverwriteStrategy.parse(self.settings.get("overwrite_strategy"))
        return self._run_batch(
            "move",
            lambda progress: move_files(paths, destination, overwrite, progress=progress),
            lambda failed: self._move(failed, destination),
            paths,
        )

    def _copy(self, paths, destination):
        overwrite = OverwriteStrategy.parse(self.settings.get("overwrite_strategy"))
        return self._run_batch(
            "copy",
            lambda progress: copy_files(paths, destination, overwrite, progress=progress),
            lambda failed: self._copy(failed, destination),
            paths,
        )

    def _delete(self, paths):
        to_trash = bool(self.settings.get("use_trash", True))
        return self._run_batch(
            "delete",
            lambda progress: delete_files(paths, to_trash=to_trash, progress=progress),
            self._delete,
            paths,
        )

    def _run_batch(self, name: str, work, rerun, paths) -> bool:
        if not paths:
            logging.info(f"[viewmodel] {name} requested with empty selection, ignoring")
            return False
        if self._busy_task is not None:
            logging.warning(f"[viewmodel] {name} requested while '{self._busy_task}' is running")
            return False
        self._retry[name] = (rerun, list(paths))
        logging.info(f"[viewmodel] {name}: {len(paths)} paths")
        if not self._synchronous:
            self._busy_task = name
            self._tasks.run(name, work)
            return True
        self._on_task_started(name)
        ok = True
        try:
            result = work(None)
        except Exception as e:
            ok = False
            logging.exception(f"[viewmodel] {name} failed")
            self._on_task_error(name, e)
        else:
            self._on_task_result(name, result)
        finally:
            self._on_task_finished(name, ok)
        return True

    def _retry_for(self, name: str, failed_paths=None):
        rerun, paths = self._retry.get(name, (None, []))
        if rerun is None:
            return None
        targets = list(failed_paths) if failed_paths else paths
        return lambda: rerun(targets)

    def _on_task_started(self, name: str):
        self._busy_task = name
        self.task_started.emit(name)
        self._emit_state_snapshot()

    def _on_task_result(self, name: str, result: OperationResult):
        if result.operation in ("move", "delete") and result.succeeded:
            self.selection_model.discard(result.succeeded)
        if self.history.record_result(result, to_trash=result.to_trash) is not None:
            self._emit_history()
        if result.ok:
            n = len(result.succeeded)
            title = f"{_DONE_VERBS.get(result.operation, 'Processed')} {n} file{'s' if n != 1 else ''}"
            detail = None
            if result.skipped:
                detail = f"{len(result.skipped)} skipped (already exist)"
            elif result.destination:
                detail = result.destination
            self.notifier.handle_success(title, detail)
        else:
            key = _FAILED_KEYS.get(result.operation, "UNKNOWN_ERROR")
            self.notifier.handle_error_with_retry(
                BatchOperationError(result),
                self._retry_for(name, result.failures.keys()),
                title=ERROR_MESSAGES[key].title,
            )

    def _on_task_error(self, name: str, error):
        key = _FAILED_KEYS.get(name, "UNKNOWN_ERROR")
        retry = self._retry_for(name)
        if retry is None:
            self.notifier.handle_error(error, title=ERROR_MESSAGES[key].title)
        else:
            self.notifier.handle_error_with_retry(error, retry, title=ERROR_MESSAGES[key].title)

    def _on_task_finished(self, name: str, ok: bool):
        self._busy_task = None
        self.task_finished.emit(name, ok)
        if os.path.isdir(self.directory):
            self.refresh()
        else:
            self._emit_state_snapshot()

    # ---------------- single-item operations -----------------
    def rename_item(self, path: str, new_name: str) -> str | None:
        if self._busy_task is not None:
            return None
        try:
            new_path = rename_file(path, new_name.strip())
        except (OSError, ValueError) as e:
            self.notifier.handle_error(e, title=ERROR_MESSAGES["RENAME_FAILED"].title)
            return None
        self.history.record("rename", f"Renamed {os.path.basename(path)} to {os.path.basename(new_path)}", [(path, new_path)])
        was_selected = self.selection_model.is_selected(path)
        self.selection_model.discard([path])
        self.refresh()
        if was_selected:
            self.selection_model.toggle_select(new_path)
        self._emit_history()
        return new_path

    def create_folder(self, name: str) -> str | None:
        name = name.strip()
        if not name or os.sep in name or (os.altsep and os.altsep in name):
            self.notifier.handle_error(f"invalid filename: {name!r}")
            return None
        try:
            path = create_folder(os.path.join(self.directory, name))
        except OSError as e:
            self.notifier.handle_error(e, title="Could not create folder")
            return None
        self.history.record("create_folder", f"Created folder {name}", [("", path)])
        self.refresh()
        self._emit_history()
        return path

    # ---------------- history -----------------
    def undo(self, entry_id: int | None = None) -> bool:
        if self._busy_task is not None:
            logging.warning(f"[viewmodel] undo requested while '{self._busy_task}' is running")
            return False
        try:
            entry = self.history.undo(entry_id)
        except HistoryError as e:
            self.notifier.handle_error(e, title="Undo failed", description=str(e))
            return False
        finally:
            self._emit_history()
        self.notifier.handle_success("Undone", entry.description)
        if os.path.isdir(self.directory):
            self.refresh()
        return True

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    def _emit_history(self):
        self.history_changed.emit(self.history.entries())

    # ---------------- snapshots -----------------
    def state(self) -> FileBrowserState:
        return FileBrowserState(
            directory=self.directory,
            items=list(self.items),
            selected=self.selection_snapshot(),
            selected_count=self.selected_count,
            total_count=self.total_count,
            is_all_selected=self.is_all_selected,
            busy_task=self._busy_task,
            can_go_back=self.can_go_back,
            view_mode=self.ui_state.view_mode,
        )

    def _emit_state_snapshot(self):
        try:
            self.browser_state_changed.emit(self.state())
        except RuntimeError:
            # UI closed or object deleted
            logging.debug("[viewmodel] state snapshot dropped")

    def cleanup(self):
        self._tasks.shutdown()


__all__ = ["FileBrowserViewModel"]
