from __future__ import annotations

"""Directory management for FileBrowserViewModel (SRP)."""
import logging
import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .viewmodel import FileBrowserViewModel
from .errors import ERROR_MESSAGES


def change_directory(vm: FileBrowserViewModel, new_directory: str, add_to_history: bool = True) -> bool:
    if not os.path.isdir(new_directory):
        logging.error(f"[vm_directory] Directory does not exist: {new_directory}")
        vm.notifier.handle_error(
            f"invalid path: {new_directory}",
            title=ERROR_MESSAGES["INVALID_PATH"].title,
            description=f"{new_directory} is not a folder.",
        )
        return False
    if vm.busy_task is not None:
        logging.warning(f"[vm_directory] '{vm.busy_task}' is running; not changing directory")
        return False
    previous = vm.directory
    if add_to_history and previous and os.path.abspath(previous) != os.path.abspath(new_directory):
        vm.nav_history.append(previous)
    # A new source directory starts with an empty selection
    vm.selection_model.clear_selection()
    vm.directory = new_directory
    vm.items = []
    logging.info(f"[vm_directory] Changed directory to: {new_directory}")
    vm.directory_changed.emit(new_directory)
    vm.navigation_changed.emit(bool(vm.nav_history))
    vm.load_items()
    return True


def go_back(vm: FileBrowserViewModel) -> bool:
    if not vm.nav_history or vm.busy_task is not None:
        return False
    previous = vm.nav_history.pop()
    logging.debug(f"[vm_directory] back to {previous}")
    if change_directory(vm, previous, add_to_history=False):
        return True
    vm.navigation_changed.emit(bool(vm.nav_history))
    return False


def parent_directory(path: str) -> str | None:
    """Parent of ``path``, or None at a filesystem root."""
    path = os.path.abspath(path)
    parent = os.path.dirname(path)
    return None if parent == path else parent


def go_to_parent(vm: FileBrowserViewModel) -> bool:
    parent = parent_directory(vm.directory)
    if parent is None:
        return False
    return change_directory(vm, parent)


__all__ = ["change_directory", "go_back", "go_to_parent", "parent_directory"]
