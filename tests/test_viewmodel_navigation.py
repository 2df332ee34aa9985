import os

import pytest

from desktidy.viewmodel import FileBrowserViewModel
from desktidy.vm_directory import parent_directory


@pytest.fixture
def vm(qapp, tree, tmp_path):
    tree(['a.txt', 'docs/', 'docs/notes.txt', 'docs/inner/'])
    model = FileBrowserViewModel(str(tmp_path), settings={'use_trash': False}, synchronous=True)
    model.load_items()
    yield model
    model.cleanup()


def test_open_item_enters_folders_only(vm, tmp_path):
    assert not vm.open_item(str(tmp_path / 'a.txt'))
    assert vm.directory == str(tmp_path)
    assert vm.open_item(str(tmp_path / 'docs'))
    assert vm.directory == str(tmp_path / 'docs')
    assert vm.can_go_back


def test_back_returns_to_previous_folder(vm, tmp_path):
    nav = []
    vm.navigation_changed.connect(nav.append)
    vm.change_directory(str(tmp_path / 'docs'))
    vm.change_directory(str(tmp_path / 'docs' / 'inner'))
    assert vm.go_back()
    assert vm.directory == str(tmp_path / 'docs')
    assert vm.go_back()
    assert vm.directory == str(tmp_path)
    assert not vm.can_go_back
    assert not vm.go_back()
    assert nav == [True, True, True, False]


def test_reopening_same_folder_adds_no_history(vm, tmp_path):
    vm.change_directory(str(tmp_path))
    assert not vm.can_go_back


def test_go_to_parent(vm, tmp_path):
    vm.change_directory(str(tmp_path / 'docs' / 'inner'))
    assert vm.go_to_parent()
    assert vm.directory == str(tmp_path / 'docs')
    assert vm.nav_history[-1] == str(tmp_path / 'docs' / 'inner')


def test_parent_directory_of_root_is_none():
    root = os.path.abspath(os.sep)
    assert parent_directory(root) is None
    assert parent_directory(os.path.join(root, 'x')) == root


def test_navigation_clears_selection(vm, tmp_path):
    vm.select_all()
    vm.open_item(str(tmp_path / 'docs'))
    assert vm.selected_count == 0
    vm.select_all()
    vm.go_back()
    assert vm.selected_count == 0


def test_rename_item_keeps_selection_on_new_path(vm, tmp_path):
    a = str(tmp_path / 'a.txt')
    vm.toggle_select(a)
    new_path = vm.rename_item(a, 'b.txt')
    assert new_path == str(tmp_path / 'b.txt')
    assert vm.selection_snapshot() == [new_path]
    assert new_path in vm.item_paths()
    assert vm.history.entries()[0].operation == 'rename'


def test_rename_conflict_notifies(vm, tmp_path):
    got = []
    vm.notifier.notified.connect(got.append)
    assert vm.rename_item(str(tmp_path / 'a.txt'), 'docs') is None
    assert got[0].title == 'Rename failed'
    assert vm.history.entries() == []


def test_create_folder_and_undo(vm, tmp_path):
    path = vm.create_folder('Projects')
    assert path == str(tmp_path / 'Projects')
    assert path in vm.item_paths()
    assert vm.undo()
    assert not os.path.exists(path)
    assert path not in vm.item_paths()


def test_create_folder_rejects_bad_names(vm):
    got = []
    vm.notifier.notified.connect(got.append)
    assert vm.create_folder('') is None
    assert vm.create_folder('docs') is None
    assert len(got) == 2


def test_undo_with_empty_history_notifies(vm):
    got = []
    vm.notifier.notified.connect(got.append)
    assert not vm.undo()
    assert got[0].title == 'Undo failed'
