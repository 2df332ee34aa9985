import logging
import os

from PySide6.QtCore import QSize, Qt, QTimer, QUrl, Signal
from PySide6.QtGui import QBrush, QColor, QDesktopServices
from PySide6.QtWidgets import (
    QApplication,
    QDockWidget,
    QFileDialog,
    QFrame,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QLineEdit,
    QListView,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QProgressBar,
    QPushButton,
    QStyle,
    QVBoxLayout,
    QWidget,
)

from .constants import ROW_SELECTED_COLOR, TOAST_TIMEOUT_MS
from .errors import Notification, Severity
from .settings import SettingsDialog, save_settings
from .shortcuts import format_help, install_shortcuts
from .toolbar import SelectionToolbar, ToolbarActions

PATH_ROLE = Qt.ItemDataRole.UserRole


def common_places() -> list[tuple[str, str]]:
    home = os.path.expanduser("~")
    places = [("Home", home)]
    for name in ("Desktop", "Documents", "Downloads", "Pictures"):
        p = os.path.join(home, name)
        if os.path.isdir(p):
            places.append((name, p))
    return places


class FileListWidget(QListWidget):
    """File grid/list. Qt's own selection is disabled; rows only render the
    view model's selection."""

    path_clicked = Signal(str, object)  # path, keyboard modifiers
    path_activated = Signal(str)  # double-click

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setSelectionMode(QListWidget.SelectionMode.NoSelection)
        self.setResizeMode(QListView.ResizeMode.Adjust)
        self.setUniformItemSizes(True)
        self.setMovement(QListView.Movement.Static)
        self._rows: dict[str, QListWidgetItem] = {}
        self._selected_brush = QBrush(QColor(ROW_SELECTED_COLOR))
        self.itemClicked.connect(self._on_item_clicked)
        self.itemDoubleClicked.connect(self._on_item_double_clicked)
        self.set_view_mode("grid")

    def set_view_mode(self, mode: str):
        if mode == "list":
            self.setViewMode(QListView.ViewMode.ListMode)
            self.setIconSize(QSize(20, 20))
            self.setGridSize(QSize())
        else:
            self.setViewMode(QListView.ViewMode.IconMode)
            self.setIconSize(QSize(48, 48))
            self.setGridSize(QSize(112, 96))
            self.setWordWrap(True)

    def set_items(self, items, selected=()):
        self.clear()
        self._rows.clear()
        style = self.style()
        dir_icon = style.standardIcon(QStyle.StandardPixmap.SP_DirIcon)
        file_icon = style.standardIcon(QStyle.StandardPixmap.SP_FileIcon)
        for it in items:
            row = QListWidgetItem(dir_icon if it.is_directory else file_icon, it.name)
            row.setData(PATH_ROLE, it.path)
            row.setToolTip(f"{it.path}\n{it.size_formatted} · {it.modified_at}")
            row.setFlags(Qt.ItemFlag.ItemIsEnabled)
            self.addItem(row)
            self._rows[it.path] = row
        self.update_selection(selected)

    def update_selection(self, selected):
        selected = set(selected)
        for path, row in self._rows.items():
            on = path in selected
            row.setCheckState(Qt.CheckState.Checked if on else Qt.CheckState.Unchecked)
            row.setBackground(self._selected_brush if on else QBrush())

    def _on_item_clicked(self, row: QListWidgetItem):
        path = row.data(PATH_ROLE)
        if path:
            self.path_clicked.emit(path, QApplication.keyboardModifiers())

    def _on_item_double_clicked(self, row: QListWidgetItem):
        path = row.data(PATH_ROLE)
        if path:
            self.path_activated.emit(path)


class ToastWidget(QFrame):
    """Non-blocking notification shown in the corner of the window."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("Toast")
        self._retry = None
        layout = QHBoxLayout(self)
        layout.setContentsMargins(14, 10, 10, 10)
        text_col = QVBoxLayout()
        self.title_label = QLabel()
        self.title_label.setStyleSheet("font-weight: 600;")
        self.description_label = QLabel()
        self.description_label.setWordWrap(True)
        text_col.addWidget(self.title_label)
        text_col.addWidget(self.description_label)
        layout.addLayout(text_col, 1)
        self.retry_btn = QPushButton("Retry")
        self.retry_btn.clicked.connect(self._on_retry)
        layout.addWidget(self.retry_btn)
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self.hide)
        self.setMaximumWidth(380)
        self.hide()

    def show_notification(self, n: Notification, timeout_ms: int = TOAST_TIMEOUT_MS):
        self._retry = n.retry
        self.title_label.setText(n.title)
        self.description_label.setText(n.description or "")
        self.description_label.setVisible(bool(n.description))
        self.retry_btn.setVisible(n.retry is not None)
        self.retry_btn.setText(n.action_label or "Retry")
        bg = "#5c1f24" if n.severity is Severity.DESTRUCTIVE else "#23272e"
        self.setStyleSheet(f"QFrame#Toast {{ background: {bg}; border: 1px solid #444; border-radius: 10px; }}")
        self.adjustSize()
        parent = self.parentWidget()
        if parent is not None:
            self.move(max(0, parent.width() - self.width() - 16), 16)
        self.show()
        self.raise_()
        self._timer.start(timeout_ms)

    def _on_retry(self):
        retry, self._retry = self._retry, None
        self.hide()
        if retry is not None:
            retry()


class HistoryPanel(QWidget):
    """Completed operations, newest first, with an Undo button."""

    undo_requested = Signal(object)  # entry id, or None for the newest undoable entry

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        self.list = QListWidget()
        self.list.currentRowChanged.connect(lambda _row: self._update_undo_button())
        self.undo_btn = QPushButton("Undo")
        self.undo_btn.clicked.connect(self._on_undo)
        layout.addWidget(self.list, 1)
        layout.addWidget(self.undo_btn)
        self._entries = []
        self._update_undo_button()

    def set_entries(self, entries):
        self._entries = list(entries)
        self.list.clear()
        for e in self._entries:
            text = f"{e.description}\n{e.created_at}"
            if e.is_undone:
                text += "  (undone)"
            row = QListWidgetItem(text)
            row.setData(PATH_ROLE, e.id)
            if e.is_undone:
                row.setForeground(QBrush(QColor("#888888")))
            self.list.addItem(row)
        self._update_undo_button()

    def _current_entry(self):
        row = self.list.currentRow()
        return self._entries[row] if 0 <= row < len(self._entries) else None

    def _update_undo_button(self):
        entry = self._current_entry()
        if entry is not None:
            self.undo_btn.setEnabled(entry.can_undo)
        else:
            self.undo_btn.setEnabled(any(e.can_undo for e in self._entries))

    def _on_undo(self):
        entry = self._current_entry()
        self.undo_requested.emit(entry.id if entry is not None else None)


class MainWindow(QMainWindow):
    def __init__(self, viewmodel):
        super().__init__()
        self.viewmodel = viewmodel
        self.setWindowTitle("DeskTidy")
        self.resize(1000, 680)
        self._build_ui()
        self._connect_viewmodel()
        self._shortcuts = install_shortcuts(
            self,
            {
                "select_all": viewmodel.select_all,
                "clear_selection": viewmodel.clear_selection,
                "delete": self._on_delete,
                "move": self._on_move,
                "copy": self._on_copy,
                "rename": self._on_rename,
                "new_folder": self._on_new_folder,
                "undo": lambda: viewmodel.undo(),
                "refresh": viewmodel.refresh,
                "back": viewmodel.go_back,
                "parent": viewmodel.go_to_parent,
                "history": viewmodel.toggle_history,
                "help": self._show_shortcuts_help,
            },
        )

    def _build_ui(self):
        vm = self.viewmodel
        central = QWidget(self)
        root = QVBoxLayout(central)
        root.setContentsMargins(8, 8, 8, 8)

        bar = QHBoxLayout()
        self.back_btn = QPushButton("Back")
        self.back_btn.setEnabled(vm.can_go_back)
        self.back_btn.clicked.connect(lambda _checked=False: vm.go_back())
        up_btn = QPushButton("Up")
        up_btn.clicked.connect(lambda _checked=False: vm.go_to_parent())
        self.path_edit = QLineEdit(vm.directory)
        self.path_edit.returnPressed.connect(lambda: vm.change_directory(self.path_edit.text().strip()))
        open_btn = QPushButton("Open…")
        open_btn.clicked.connect(self._browse_directory)
        refresh_btn = QPushButton("Refresh")
        refresh_btn.clicked.connect(lambda _checked=False: vm.refresh())
        self.view_mode_btn = QPushButton()
        self.view_mode_btn.clicked.connect(lambda _checked=False: vm.toggle_view_mode())
        sidebar_btn = QPushButton("Places")
        sidebar_btn.clicked.connect(lambda _checked=False: vm.toggle_sidebar())
        new_folder_btn = QPushButton("New Folder")
        new_folder_btn.clicked.connect(self._on_new_folder)
        history_btn = QPushButton("History")
        history_btn.clicked.connect(lambda _checked=False: vm.toggle_history())
        settings_btn = QPushButton("Settings")
        settings_btn.clicked.connect(self._open_settings)
        for w in (
            sidebar_btn,
            self.back_btn,
            up_btn,
            self.path_edit,
            open_btn,
            refresh_btn,
            new_folder_btn,
            self.view_mode_btn,
            history_btn,
            settings_btn,
        ):
            bar.addWidget(w, 1 if w is self.path_edit else 0)
        root.addLayout(bar)

        body = QHBoxLayout()
        self.places = QListWidget()
        self.places.setMaximumWidth(180)
        for label, path in common_places():
            row = QListWidgetItem(label)
            row.setData(PATH_ROLE, path)
            self.places.addItem(row)
        self.places.itemClicked.connect(lambda row: vm.change_directory(row.data(PATH_ROLE)))
        self.file_list = FileListWidget()
        self.file_list.path_clicked.connect(vm.handle_click)
        self.file_list.path_activated.connect(self._on_path_activated)
        body.addWidget(self.places)
        body.addWidget(self.file_list, 1)
        root.addLayout(body, 1)

        self.setCentralWidget(central)

        self.selection_toolbar = SelectionToolbar(
            ToolbarActions(
                on_select_all=vm.select_all,
                on_clear_selection=vm.clear_selection,
                on_move=self._on_move,
                on_copy=self._on_copy,
                on_delete=self._on_delete,
            ),
            parent=central,
        )
        self.toast = ToastWidget(central)

        self.history_panel = HistoryPanel()
        self.history_panel.undo_requested.connect(vm.undo)
        self.history_dock = QDockWidget("History", self)
        self.history_dock.setObjectName("historyDock")
        self.history_dock.setWidget(self.history_panel)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, self.history_dock)
        self.history_dock.hide()
        self.history_dock.visibilityChanged.connect(self._on_history_dock_visibility)

        self.status_label = QLabel()
        self.progress = QProgressBar()
        self.progress.setMaximumWidth(200)
        self.progress.hide()
        self.statusBar().addWidget(self.status_label, 1)
        self.statusBar().addPermanentWidget(self.progress)
        self._apply_ui_state(vm.ui_state.snapshot())

    def _connect_viewmodel(self):
        vm = self.viewmodel
        vm.items_changed.connect(lambda items: self.file_list.set_items(items, vm.selection_model.selected()))
        vm.selection_changed.connect(self.file_list.update_selection)
        vm.counts_changed.connect(self._on_counts_changed)
        vm.directory_changed.connect(self.path_edit.setText)
        vm.navigation_changed.connect(self.back_btn.setEnabled)
        vm.history_changed.connect(self.history_panel.set_entries)
        vm.ui_state_changed.connect(self._apply_ui_state)
        vm.notifier.notified.connect(self._on_notification)
        vm.task_started.connect(self._on_task_started)
        vm.task_progress.connect(self._on_task_progress)
        vm.task_finished.connect(lambda name, ok: self.progress.hide())

    # ----- viewmodel -> view -----
    def _on_counts_changed(self, selected: int, total: int, all_selected: bool):
        self.selection_toolbar.update_counts(selected, total, all_selected)
        self.status_label.setText(f"{total} items · {selected} selected")

    def _apply_ui_state(self, state: dict):
        mode = state.get("view_mode", "grid")
        self.file_list.set_view_mode(mode)
        self.view_mode_btn.setText("List view" if mode == "grid" else "Grid view")
        self.places.setVisible(not state.get("sidebar_collapsed", False))
        self.history_dock.setVisible(state.get("is_history_open", False))

    def _on_history_dock_visibility(self, visible: bool):
        # closing the dock with its own button updates the flag; minimizing does not
        if self.isVisible() and not self.isMinimized():
            self.viewmodel.set_history_open(visible)

    def _on_notification(self, n: Notification):
        timeout = int(self.viewmodel.settings.get("toast_timeout_ms", TOAST_TIMEOUT_MS))
        self.toast.show_notification(n, timeout)

    def _on_task_started(self, name: str):
        self.progress.setRange(0, 0)
        self.progress.setFormat(name)
        self.progress.show()

    def _on_task_progress(self, name: str, current: int, total: int, detail: str):
        if total > 0:
            self.progress.setRange(0, total)
            self.progress.setValue(current)
        self.progress.setFormat(f"{name} {detail}".strip())

    # ----- toolbar actions -----
    def _ask_destination(self, title: str) -> str | None:
        directory = QFileDialog.getExistingDirectory(self, title, self.viewmodel.directory)
        return directory or None

    def _on_move(self):
        dest = self._ask_destination("Move selected files to")
        if dest:
            self.viewmodel.move_selected(dest)

    def _on_copy(self):
        dest = self._ask_destination("Copy selected files to")
        if dest:
            self.viewmodel.copy_selected(dest)

    def _on_delete(self):
        vm = self.viewmodel
        count = vm.selected_count
        if not count:
            return
        if vm.settings.get("confirm_before_delete", True):
            where = "to the trash" if vm.settings.get("use_trash", True) else "permanently"
            answer = QMessageBox.question(
                self,
                "Delete files",
                f"Delete {count} selected item{'s' if count != 1 else ''} {where}?",
            )
            if answer != QMessageBox.StandardButton.Yes:
                return
        vm.delete_selected()

    def _on_rename(self):
        vm = self.viewmodel
        selected = vm.selection_model.selected_in_order(vm.items)
        if len(selected) != 1:
            self.statusBar().showMessage("Select a single file to rename", 3000)
            return
        path = selected[0]
        name, ok = QInputDialog.getText(self, "Rename", "New name:", text=os.path.basename(path))
        if ok and name and name != os.path.basename(path):
            vm.rename_item(path, name)

    def _on_new_folder(self):
        name, ok = QInputDialog.getText(self, "New Folder", "Folder name:", text="New Folder")
        if ok and name:
            self.viewmodel.create_folder(name)

    def _on_path_activated(self, path: str):
        if not self.viewmodel.open_item(path) and os.path.isfile(path):
            QDesktopServices.openUrl(QUrl.fromLocalFile(path))

    # ----- misc -----
    def _browse_directory(self):
        directory = QFileDialog.getExistingDirectory(self, "Open Folder", self.viewmodel.directory)
        if directory:
            self.viewmodel.change_directory(directory)

    def _open_settings(self):
        dlg = SettingsDialog(self)
        if dlg.exec():
            self.viewmodel.apply_settings(dlg.collect_values())

    def _show_shortcuts_help(self):
        QMessageBox.information(self, "Keyboard Shortcuts", format_help())

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.selection_toolbar.reposition()

    def closeEvent(self, event):
        vm = self.viewmodel
        if vm.settings.get("remember_last_dir", True):
            save_settings({"last_dir": vm.directory, "view_mode": vm.ui_state.view_mode})
        else:
            save_settings({"view_mode": vm.ui_state.view_mode})
        logging.info("[view] closing")
        super().closeEvent(event)
