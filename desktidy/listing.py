"""Directory listing provider.

Builds the ordered ``FileItem`` listing the file view displays. The selection
model never calls into this module; the view model passes snapshots to it.
"""

from __future__ import annotations

import logging
import os
import stat
from datetime import datetime

from .constants import CATEGORIES, DATE_FORMAT, DEFAULT_CATEGORY, DIRECTORY_CATEGORY
from .domain import FileItem

_KB = 1024
_MB = _KB * 1024
_GB = _MB * 1024

_EXTENSION_MAP = {ext: cat["id"] for cat in CATEGORIES for ext in cat["extensions"]}


class ListingError(Exception):
    """Raised when a directory cannot be listed at all."""


def format_size(size: int) -> str:
    if size >= _GB:
        return f"{size / _GB:.1f}GB"
    if size >= _MB:
        return f"{size / _MB:.1f}MB"
    if size >= _KB:
        return f"{size / _KB:.1f}KB"
    return f"{size}B"


def classify_extension(extension: str) -> str:
    return _EXTENSION_MAP.get((extension or "").lower(), DEFAULT_CATEGORY)


def _format_time(ts: float | None) -> str:
    if ts is None:
        return ""
    try:
        return datetime.fromtimestamp(ts).strftime(DATE_FORMAT)
    except (OverflowError, OSError, ValueError):
        return ""


def is_hidden(path: str, st: os.stat_result | None = None) -> bool:
    attrs = getattr(st, "st_file_attributes", None) if st is not None else None
    if attrs is not None:
        return bool(attrs & getattr(stat, "FILE_ATTRIBUTE_HIDDEN", 0x2))
    return os.path.basename(path).startswith(".")


def file_info(path: str) -> FileItem:
    st = os.stat(path)
    name = os.path.basename(path)
    is_dir = stat.S_ISDIR(st.st_mode)
    ext = "" if is_dir else os.path.splitext(name)[1].lower()
    # st_birthtime is only present on macOS/BSD; fall back to ctime elsewhere
    created = getattr(st, "st_birthtime", None) or st.st_ctime
    return FileItem(
        path=path,
        name=name,
        extension=ext,
        size=st.st_size,
        size_formatted=format_size(st.st_size),
        created_at=_format_time(created),
        modified_at=_format_time(st.st_mtime),
        is_directory=is_dir,
        is_hidden=is_hidden(path, st),
        category=DIRECTORY_CATEGORY if is_dir else classify_extension(ext),
    )


def _iter_paths(directory: str, recursive: bool, include_hidden: bool):
    if not recursive:
        with os.scandir(directory) as it:
            for entry in it:
                if not include_hidden and is_hidden(entry.path):
                    continue
                yield entry.path
        return
    for root, dirs, files in os.walk(directory):
        if not include_hidden:
            dirs[:] = [d for d in dirs if not is_hidden(os.path.join(root, d))]
        for name in dirs + files:
            p = os.path.join(root, name)
            if not include_hidden and is_hidden(p):
                continue
            yield p


def scan_directory(directory: str, include_hidden: bool = False, recursive: bool = False) -> list[FileItem]:
    if not os.path.exists(directory):
        raise ListingError(f"Directory does not exist: {directory}")
    if not os.path.isdir(directory):
        raise ListingError(f"Path is not a directory: {directory}")

    items: list[FileItem] = []
    try:
        for p in _iter_paths(directory, recursive, include_hidden):
            try:
                items.append(file_info(p))
            except OSError as e:
                logging.debug(f"[listing] skipping unreadable entry {p}: {e}")
    except OSError as e:
        raise ListingError(str(e)) from e

    items.sort(key=lambda it: it.name.lower())
    logging.info(f"[listing] {directory}: {len(items)} entries (hidden={include_hidden}, recursive={recursive})")
    return items


__all__ = ["ListingError", "scan_directory", "file_info", "format_size", "classify_extension", "is_hidden"]
