import errno
import os
import shutil

import pytest

from desktidy.viewmodel import FileBrowserViewModel


@pytest.fixture
def setup(qapp, tree, tmp_path):
    src = tmp_path / 'src'
    dest = tmp_path / 'dest'
    tree(['src/a.txt', 'src/b.txt', 'src/c.txt', 'dest/'])
    settings = {'show_hidden_files': False, 'use_trash': False, 'overwrite_strategy': 'rename'}
    vm = FileBrowserViewModel(str(src), settings=settings, synchronous=True)
    vm.load_items()
    notes = []
    vm.notifier.notified.connect(notes.append)
    yield vm, str(src), str(dest), notes
    vm.cleanup()


def test_empty_selection_is_noop(setup):
    vm, _, dest, notes = setup
    assert not vm.move_selected(dest)
    assert not vm.delete_selected()
    assert notes == []


def test_move_selected(setup):
    vm, src, dest, notes = setup
    vm.toggle_select(os.path.join(src, 'a.txt'))
    vm.toggle_select(os.path.join(src, 'c.txt'))
    assert vm.move_selected(dest)
    assert sorted(os.listdir(dest)) == ['a.txt', 'c.txt']
    assert vm.item_paths() == [os.path.join(src, 'b.txt')]
    assert vm.selected_count == 0
    assert notes[-1].title == 'Moved 2 files'
    assert vm.busy_task is None


def test_copy_keeps_selection(setup):
    vm, src, dest, notes = setup
    vm.select_all()
    assert vm.copy_selected(dest)
    assert len(os.listdir(dest)) == 3
    assert vm.selected_count == 3
    assert vm.is_all_selected
    assert notes[-1].title == 'Copied 3 files'


def test_delete_selected(setup):
    vm, src, _, notes = setup
    vm.toggle_select(os.path.join(src, 'b.txt'))
    assert vm.delete_selected()
    assert not os.path.exists(os.path.join(src, 'b.txt'))
    assert vm.total_count == 2
    assert vm.selected_count == 0
    assert notes[-1].title == 'Deleted 1 file'


def test_task_signals_in_order(setup):
    vm, src, dest, _ = setup
    events = []
    vm.task_started.connect(lambda name: events.append(('started', name)))
    vm.task_finished.connect(lambda name, ok: events.append(('finished', name, ok)))
    vm.select_all()
    vm.copy_selected(dest)
    assert events == [('started', 'copy'), ('finished', 'copy', True)]


def test_partial_failure_retries_failed_paths_only(setup, monkeypatch):
    vm, src, dest, notes = setup
    a = os.path.join(src, 'a.txt')
    b = os.path.join(src, 'b.txt')
    vm.toggle_select(a)
    vm.toggle_select(b)
    real_move = shutil.move
    locked = {b}

    def flaky_move(source, target):
        if source in locked:
            raise PermissionError(errno.EACCES, 'Permission denied', source)
        return real_move(source, target)

    monkeypatch.setattr('desktidy.file_ops.shutil.move', flaky_move)
    assert vm.move_selected(dest)
    failure = notes[-1]
    assert failure.title == 'Move failed'
    assert failure.retry is not None
    assert vm.selection_snapshot() == [b]

    locked.clear()
    failure.retry()
    assert sorted(os.listdir(dest)) == ['a.txt', 'b.txt']
    assert notes[-1].title == 'Moved 1 file'


def test_skip_strategy_reports_skipped(setup):
    vm, src, dest, notes = setup
    with open(os.path.join(dest, 'a.txt'), 'w') as f:
        f.write('existing')
    vm.settings['overwrite_strategy'] = 'skip'
    vm.toggle_select(os.path.join(src, 'a.txt'))
    vm.copy_selected(dest)
    assert notes[-1].description == '1 skipped (already exist)'


def test_rejected_while_busy(setup):
    vm, src, dest, _ = setup
    vm.select_all()
    vm._busy_task = 'copy'
    assert not vm.move_selected(dest)
    assert not vm.change_directory(dest)
    vm._busy_task = None


def test_vanished_selected_file_is_dropped_silently_on_delete(setup):
    vm, src, _, notes = setup
    a = os.path.join(src, 'a.txt')
    b = os.path.join(src, 'b.txt')
    vm.toggle_select(a)
    vm.toggle_select(b)
    os.remove(a)
    assert vm.delete_selected()
    assert not os.path.exists(b)
    assert [n.severity.value for n in notes] == ['default']
    assert notes[-1].title == 'Deleted 1 file'
    assert vm.selected_count == 0


def test_vanished_selected_file_is_dropped_silently_on_move(setup):
    vm, src, dest, notes = setup
    a = os.path.join(src, 'a.txt')
    c = os.path.join(src, 'c.txt')
    vm.toggle_select(a)
    vm.toggle_select(c)
    os.remove(c)
    assert vm.move_selected(dest)
    assert os.listdir(dest) == ['a.txt']
    assert notes[-1].title == 'Moved 1 file'
    assert all(n.retry is None for n in notes)


def test_only_stale_selection_is_a_noop(setup):
    vm, src, dest, notes = setup
    a = os.path.join(src, 'a.txt')
    vm.toggle_select(a)
    os.remove(a)
    assert not vm.copy_selected(dest)
    assert vm.selected_count == 0
    assert notes == []


def test_batch_is_recorded_in_history_and_undoable(setup):
    vm, src, dest, notes = setup
    histories = []
    vm.history_changed.connect(histories.append)
    a = os.path.join(src, 'a.txt')
    vm.toggle_select(a)
    vm.move_selected(dest)
    assert histories[-1][0].operation == 'move'
    assert vm.can_undo

    assert vm.undo()
    assert os.path.exists(a)
    assert a in vm.item_paths()
    assert notes[-1].title == 'Undone'
    assert histories[-1][0].is_undone
    assert not vm.can_undo
