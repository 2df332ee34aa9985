import json
import logging
import os

from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDialog,
    QFileDialog,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLineEdit,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
)

from .constants import TOAST_TIMEOUT_MS
from .domain import OverwriteStrategy

CONFIG_PATH = os.path.expanduser("~/.desktidy_config.json")

DEFAULT_SETTINGS = {
    "default_directory": os.path.expanduser("~"),
    "remember_last_dir": True,
    "last_dir": None,
    "show_hidden_files": False,
    "confirm_before_delete": True,
    "use_trash": True,
    "overwrite_strategy": OverwriteStrategy.RENAME.value,
    "view_mode": "grid",
    "toast_timeout_ms": TOAST_TIMEOUT_MS,
}


def _read_config(path):
    if not os.path.exists(path):
        return {}
    try:
        with open(path) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logging.warning(f"Could not load settings from {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logging.warning(f"Ignoring malformed settings file {path}")
        return {}
    return data


def load_settings(path=None) -> dict:
    """Defaults merged with whatever the config file holds (unknown keys kept)."""
    settings = DEFAULT_SETTINGS.copy()
    settings.update(_read_config(path or CONFIG_PATH))
    return settings


def save_settings(values: dict, path=None) -> bool:
    path = path or CONFIG_PATH
    existing = _read_config(path)
    existing.update(values)
    try:
        with open(path, "w") as f:
            json.dump(existing, f, indent=2)
    except OSError as e:
        logging.error(f"Could not save settings: {e}")
        return False
    return True


def get_setting(key, default=None, path=None):
    """Utility function to get a single setting value"""
    return load_settings(path).get(key, default)


def set_setting(key, value, path=None) -> bool:
    """Utility function to set a single setting value"""
    return save_settings({key: value}, path)


def load_last_dir(path=None) -> str:
    s = load_settings(path)
    last_dir = s.get("last_dir")
    if s.get("remember_last_dir", True) and last_dir and os.path.isdir(last_dir):
        return last_dir
    default_dir = s.get("default_directory")
    if default_dir and os.path.isdir(default_dir):
        return default_dir
    return os.path.expanduser("~")  # fallback


def save_last_dir(directory: str, path=None) -> bool:
    return set_setting("last_dir", directory, path)


class SettingsDialog(QDialog):
    def __init__(self, parent=None, path=None):
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self.setModal(True)
        self.resize(420, 320)
        self._path = path

        self.settings = load_settings(path)

        self.setup_ui()
        self.load_values()

    def setup_ui(self):
        layout = QVBoxLayout(self)

        layout.addWidget(self._build_directory_group())
        layout.addWidget(self._build_files_group())
        layout.addWidget(self._build_display_group())
        layout.addLayout(self._build_buttons())

    def _build_directory_group(self):
        """Build directory settings group."""
        group = QGroupBox("Directory Settings")
        layout = QFormLayout(group)

        self.default_dir_edit = QLineEdit()
        dir_browse_btn = QPushButton("Browse...")
        dir_browse_btn.clicked.connect(self.browse_default_dir)

        dir_row = QHBoxLayout()
        dir_row.addWidget(self.default_dir_edit, 1)
        dir_row.addWidget(dir_browse_btn)
        layout.addRow("Default Directory:", dir_row)

        self.remember_last_dir = QCheckBox("Remember last opened directory")
        layout.addRow(self.remember_last_dir)

        return group

    def _build_files_group(self):
        """Build file operation settings group."""
        group = QGroupBox("File Operations")
        layout = QFormLayout(group)

        self.show_hidden = QCheckBox("Show hidden files")
        layout.addRow(self.show_hidden)

        self.confirm_delete = QCheckBox("Confirm before deleting")
        layout.addRow(self.confirm_delete)

        self.use_trash = QCheckBox("Move deleted files to the trash")
        layout.addRow(self.use_trash)

        self.overwrite_combo = QComboBox()
        self.overwrite_combo.addItems([s.value for s in OverwriteStrategy])
        layout.addRow("When a file already exists:", self.overwrite_combo)

        return group

    def _build_display_group(self):
        group = QGroupBox("Display")
        layout = QFormLayout(group)

        self.view_mode_combo = QComboBox()
        self.view_mode_combo.addItems(["grid", "list"])
        layout.addRow("View Mode:", self.view_mode_combo)

        self.toast_spin = QSpinBox()
        self.toast_spin.setRange(1000, 30000)
        self.toast_spin.setSingleStep(500)
        self.toast_spin.setSuffix(" ms")
        layout.addRow("Notification Duration:", self.toast_spin)

        return group

    def _build_buttons(self):
        """Build button layout."""
        layout = QHBoxLayout()

        reset_btn = QPushButton("Reset to Defaults")
        reset_btn.clicked.connect(self.reset_defaults)

        cancel_btn = QPushButton("Cancel")
        cancel_btn.clicked.connect(self.reject)

        ok_btn = QPushButton("OK")
        ok_btn.clicked.connect(self.accept)
        ok_btn.setDefault(True)

        layout.addWidget(reset_btn)
        layout.addStretch()
        layout.addWidget(cancel_btn)
        layout.addWidget(ok_btn)

        return layout

    def browse_default_dir(self):
        current_dir = self.default_dir_edit.text() or os.path.expanduser("~")
        directory = QFileDialog.getExistingDirectory(self, "Select Default Directory", current_dir)
        if directory:
            self.default_dir_edit.setText(directory)

    def collect_values(self) -> dict:
        """Collect current values from UI widgets."""
        return {
            "default_directory": self.default_dir_edit.text(),
            "remember_last_dir": self.remember_last_dir.isChecked(),
            "show_hidden_files": self.show_hidden.isChecked(),
            "confirm_before_delete": self.confirm_delete.isChecked(),
            "use_trash": self.use_trash.isChecked(),
            "overwrite_strategy": self.overwrite_combo.currentText(),
            "view_mode": self.view_mode_combo.currentText(),
            "toast_timeout_ms": self.toast_spin.value(),
        }

    def load_values(self):
        """Load current values into UI"""
        s = self.settings

        self.default_dir_edit.setText(s.get("default_directory") or "")
        self.remember_last_dir.setChecked(bool(s.get("remember_last_dir", True)))
        self.show_hidden.setChecked(bool(s.get("show_hidden_files", False)))
        self.confirm_delete.setChecked(bool(s.get("confirm_before_delete", True)))
        self.use_trash.setChecked(bool(s.get("use_trash", True)))
        self.toast_spin.setValue(int(s.get("toast_timeout_ms", TOAST_TIMEOUT_MS)))

        strategy = OverwriteStrategy.parse(s.get("overwrite_strategy"))
        self.overwrite_combo.setCurrentIndex(max(0, self.overwrite_combo.findText(strategy.value)))

        mode = s.get("view_mode", "grid")
        if mode not in ("grid", "list"):
            mode = "grid"
        self.view_mode_combo.setCurrentIndex(self.view_mode_combo.findText(mode))

    def reset_defaults(self):
        """Reset all settings to default values"""
        self.settings = DEFAULT_SETTINGS.copy()
        self.load_values()

    def accept(self):
        """Save settings when OK is clicked"""
        values = self.collect_values()
        self.settings.update(values)
        save_settings(values, self._path)
        super().accept()
