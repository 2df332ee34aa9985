"""User-facing error messages and the notification channel.

Raw errors (exception objects or error strings from the file layer) are
mapped to a title/description pair and emitted as a ``Notification``. The
view shows notifications as non-blocking toasts; a notification may carry a
retry callable that re-runs the operation that failed.
"""

from __future__ import annotations

import errno
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from PySide6.QtCore import QObject, Signal


@dataclass(frozen=True)
class ErrorMessage:
    title: str
    description: str
    action: str | None = None


ERROR_MESSAGES: dict[str, ErrorMessage] = {
    "PERMISSION_DENIED": ErrorMessage(
        "Permission required",
        "You need permission to access this folder. Check the permissions in your system settings.",
        "Open permission settings",
    ),
    "DISK_FULL": ErrorMessage(
        "Not enough disk space",
        "The disk is full. Delete files you no longer need or choose another location.",
        "Find large files",
    ),
    "FILE_IN_USE": ErrorMessage(
        "File is in use",
        "Another program is using this file. Close it and try again.",
        "Retry",
    ),
    "FILE_NOT_FOUND": ErrorMessage(
        "File not found",
        "The file may have been moved or deleted. Refresh the file list.",
        "Refresh",
    ),
    "NETWORK_ERROR": ErrorMessage(
        "Network error",
        "Check your network connection and try again.",
        "Retry",
    ),
    "OPERATION_CANCELLED": ErrorMessage(
        "Operation cancelled",
        "The operation was cancelled by the user.",
    ),
    "INVALID_PATH": ErrorMessage(
        "Invalid path",
        "The path you entered is not valid. Check it and try again.",
    ),
    "READ_ONLY_FILE": ErrorMessage(
        "Read-only file",
        "This file is read-only and cannot be modified.",
    ),
    "DIRECTORY_NOT_EMPTY": ErrorMessage(
        "Folder is not empty",
        "The folder still contains files. Delete or move them first.",
    ),
    "NAME_CONFLICT": ErrorMessage(
        "Name conflict",
        "A file with the same name already exists. Use another name or choose to overwrite.",
    ),
    "UNKNOWN_ERROR": ErrorMessage(
        "Unknown error",
        "An unexpected error occurred. Please try again.",
        "Retry",
    ),
    "SCAN_FAILED": ErrorMessage(
        "Could not scan files",
        "An error occurred while loading the file list.",
        "Retry",
    ),
    "ORGANIZE_FAILED": ErrorMessage(
        "Could not organize files",
        "An error occurred while organizing files. Some files may not have been organized.",
        "View history",
    ),
    "RENAME_FAILED": ErrorMessage(
        "Rename failed",
        "An error occurred while renaming the file.",
        "Retry",
    ),
    "DELETE_FAILED": ErrorMessage(
        "Delete failed",
        "An error occurred while deleting files.",
        "Retry",
    ),
    "MOVE_FAILED": ErrorMessage(
        "Move failed",
        "An error occurred while moving files.",
        "Retry",
    ),
    "COPY_FAILED": ErrorMessage(
        "Copy failed",
        "An error occurred while copying files.",
        "Retry",
    ),
}

# Checked in order; the first matching group wins.
_ERROR_PATTERNS: list[tuple[str, tuple[str, ...]]] = [
    ("PERMISSION_DENIED", ("permission denied", "operation not permitted")),
    ("DISK_FULL", ("no space left", "disk full")),
    ("FILE_IN_USE", ("file is in use", "being used by another process")),
    ("FILE_NOT_FOUND", ("not found", "no such file")),
    ("NETWORK_ERROR", ("network", "connection")),
    ("OPERATION_CANCELLED", ("cancelled", "canceled")),
    ("INVALID_PATH", ("invalid path", "invalid filename")),
    ("READ_ONLY_FILE", ("read-only", "readonly")),
    ("DIRECTORY_NOT_EMPTY", ("directory not empty",)),
    ("NAME_CONFLICT", ("already exists", "file exists")),
]

_ERRNO_KEYS = {
    errno.EACCES: "PERMISSION_DENIED",
    errno.EPERM: "PERMISSION_DENIED",
    errno.ENOSPC: "DISK_FULL",
    errno.ENOENT: "FILE_NOT_FOUND",
    errno.ENOTEMPTY: "DIRECTORY_NOT_EMPTY",
    errno.EEXIST: "NAME_CONFLICT",
    errno.EROFS: "READ_ONLY_FILE",
}


def classify_error(text: str) -> str:
    lower = (text or "").lower()
    for key, needles in _ERROR_PATTERNS:
        if any(n in lower for n in needles):
            return key
    return "UNKNOWN_ERROR"


def error_key(error) -> str:
    if isinstance(error, OSError) and error.errno in _ERRNO_KEYS:
        return _ERRNO_KEYS[error.errno]
    if isinstance(error, str):
        return classify_error(error)
    if isinstance(error, BaseException):
        return classify_error(str(error))
    return "UNKNOWN_ERROR"


def get_error_message(error) -> ErrorMessage:
    return ERROR_MESSAGES.get(error_key(error), ERROR_MESSAGES["UNKNOWN_ERROR"])


class Severity(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Notification:
    title: str
    description: str | None = None
    severity: Severity = Severity.DEFAULT
    retry: Callable[[], object] | None = None
    action_label: str | None = None


class Notifier(QObject):
    """Application-level notification channel (toasts)."""

    notified = Signal(object)  # Notification

    def notify(self, notification: Notification):
        try:
            self.notified.emit(notification)
        except RuntimeError:
            # receiver deleted while the app is closing
            logging.debug(f"[errors] notification dropped: {notification.title}")

    def handle_error(self, error, title: str | None = None, description: str | None = None, retry=None):
        msg = get_error_message(error)
        logging.error(f"[errors] {error!r}")
        self.notify(
            Notification(
                title=title or msg.title,
                description=description or msg.description,
                severity=Severity.DESTRUCTIVE,
                retry=retry,
                action_label=(msg.action or "Retry") if retry is not None else None,
            )
        )

    def handle_success(self, title: str, description: str | None = None):
        self.notify(Notification(title=title, description=description, severity=Severity.DEFAULT))

    def handle_error_with_retry(self, error, retry_fn: Callable[[], object], title: str | None = None):
        def _retry():
            try:
                retry_fn()
            except Exception as retry_error:
                self.handle_error(retry_error)

        self.handle_error(error, title=title, retry=_retry)


__all__ = [
    "ERROR_MESSAGES",
    "ErrorMessage",
    "Notification",
    "Notifier",
    "Severity",
    "classify_error",
    "error_key",
    "get_error_message",
]
