"""Batch file operations applied to a selection snapshot.

Plain synchronous functions with no Qt dependency; the view model runs them on
the task runner. A failure on one path is recorded in the result and the
batch continues with the next path.
"""

from __future__ import annotations

import errno
import logging
import os
import shutil
from collections.abc import Iterable

from send2trash import send2trash

from .domain import OperationResult, OverwriteStrategy


class BatchOperationError(Exception):
    def __init__(self, result: OperationResult):
        self.result = result
        first = next(iter(result.failures.values()), "")
        super().__init__(first or f"{result.operation} failed")


def unique_path(path: str) -> str:
    """Return ``path`` or the first free ``stem_N.ext`` sibling."""
    if not os.path.exists(path):
        return path
    parent, name = os.path.split(path)
    stem, ext = os.path.splitext(name)
    counter = 1
    while True:
        candidate = os.path.join(parent, f"{stem}_{counter}{ext}")
        if not os.path.exists(candidate):
            return candidate
        counter += 1


def _remove(path: str):
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    else:
        os.remove(path)


def _resolve_target(source: str, destination: str, overwrite: OverwriteStrategy, op: str = "move") -> str | None:
    """Target path for ``source`` inside/at ``destination``; None means skip."""
    target = destination
    if os.path.isdir(destination):
        target = os.path.join(destination, os.path.basename(source.rstrip(os.sep)))
    if os.path.abspath(target) == os.path.abspath(source):
        # copying onto itself with rename makes a numbered duplicate
        if op == "copy" and overwrite is OverwriteStrategy.RENAME:
            return unique_path(target)
        return None
    if os.path.exists(target):
        if overwrite is OverwriteStrategy.SKIP:
            return None
        if overwrite is OverwriteStrategy.RENAME:
            target = unique_path(target)
        else:
            _remove(target)
    parent = os.path.dirname(target)
    if parent:
        os.makedirs(parent, exist_ok=True)
    return target


def _transfer(op: str, paths: Iterable[str], destination: str, overwrite, progress=None) -> OperationResult:
    overwrite = OverwriteStrategy.parse(overwrite)
    paths = list(paths)
    result = OperationResult(operation=op, destination=destination)
    if not os.path.exists(destination):
        os.makedirs(destination, exist_ok=True)
    for i, src in enumerate(paths):
        if progress is not None:
            progress(i, len(paths), os.path.basename(src))
        if not os.path.exists(src):
            result.failures[src] = f"Source file does not exist: {src}"
            continue
        try:
            target = _resolve_target(src, destination, overwrite, op)
            if target is None:
                result.skipped.append(src)
                logging.debug(f"[file_ops] {op} skipped existing target for {src}")
                continue
            if op == "move":
                shutil.move(src, target)
            elif os.path.isdir(src):
                shutil.copytree(src, target)
            else:
                shutil.copy2(src, target)
            result.succeeded.append(src)
            result.outputs[src] = target
        except (OSError, shutil.Error) as e:
            logging.warning(f"[file_ops] {op} failed for {src}: {e}")
            result.failures[src] = str(e)
    logging.info(
        f"[file_ops] {op} -> {destination}: {len(result.succeeded)} ok, "
        f"{len(result.skipped)} skipped, {len(result.failures)} failed"
    )
    return result


def move_files(paths: Iterable[str], destination: str, overwrite=OverwriteStrategy.RENAME, progress=None) -> OperationResult:
    return _transfer("move", paths, destination, overwrite, progress)


def copy_files(paths: Iterable[str], destination: str, overwrite=OverwriteStrategy.RENAME, progress=None) -> OperationResult:
    return _transfer("copy", paths, destination, overwrite, progress)


def delete_files(paths: Iterable[str], to_trash: bool = True, progress=None) -> OperationResult:
    paths = list(paths)
    result = OperationResult(operation="delete", to_trash=to_trash)
    for i, p in enumerate(paths):
        if progress is not None:
            progress(i, len(paths), os.path.basename(p))
        if not os.path.lexists(p):
            result.failures[p] = f"File does not exist: {p}"
            continue
        try:
            if to_trash:
                send2trash(p)
            else:
                _remove(p)
            result.succeeded.append(p)
        except OSError as e:
            logging.warning(f"[file_ops] delete failed for {p}: {e}")
            result.failures[p] = str(e)
    logging.info(
        f"[file_ops] delete (trash={to_trash}): {len(result.succeeded)} ok, {len(result.failures)} failed"
    )
    return result


def rename_file(path: str, new_name: str) -> str:
    """Rename ``path`` inside its own folder and return the new path."""
    if not os.path.lexists(path):
        raise FileNotFoundError(errno.ENOENT, "File does not exist", path)
    if not new_name or os.sep in new_name or (os.altsep and os.altsep in new_name):
        raise ValueError(f"invalid filename: {new_name!r}")
    new_path = os.path.join(os.path.dirname(path), new_name)
    if os.path.lexists(new_path):
        raise FileExistsError(errno.EEXIST, "File already exists", new_path)
    os.rename(path, new_path)
    logging.info(f"[file_ops] renamed {path} -> {new_path}")
    return new_path


def create_folder(path: str) -> str:
    if os.path.lexists(path):
        raise FileExistsError(errno.EEXIST, "Folder already exists", path)
    os.makedirs(path)
    logging.info(f"[file_ops] created folder {path}")
    return path


__all__ = [
    "BatchOperationError",
    "move_files",
    "copy_files",
    "delete_files",
    "rename_file",
    "create_folder",
    "unique_path",
]
