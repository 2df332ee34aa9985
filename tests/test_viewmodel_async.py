import os
import time

import pytest

from desktidy.viewmodel import FileBrowserViewModel


def _drain(qapp, vm, done, timeout=3.0):
    vm._tasks.wait(3000)
    deadline = time.time() + timeout
    while not done() and time.time() < deadline:
        qapp.processEvents()
        time.sleep(0.01)


@pytest.fixture
def setup(qapp, tree, tmp_path):
    tree(['src/a.txt', 'src/b.txt', 'src/c.txt', 'dest/'])
    vm = FileBrowserViewModel(
        str(tmp_path / 'src'),
        settings={'use_trash': False, 'overwrite_strategy': 'rename'},
    )
    vm.load_items()
    notes = []
    vm.notifier.notified.connect(notes.append)
    yield vm, str(tmp_path / 'src'), str(tmp_path / 'dest'), notes
    vm.cleanup()


def test_move_runs_on_task_runner(qapp, setup):
    vm, src, dest, notes = setup
    events = []
    vm.task_started.connect(lambda name: events.append(('started', name)))
    vm.task_finished.connect(lambda name, ok: events.append(('finished', name, ok)))
    vm.history_changed.connect(lambda entries: events.append(('history', len(entries))))
    a = os.path.join(src, 'a.txt')
    b = os.path.join(src, 'b.txt')
    vm.toggle_select(a)
    vm.toggle_select(b)

    assert vm.move_selected(dest)
    # busy from submission, before the worker reports in
    assert vm.busy_task == 'move'
    assert not vm.copy_selected(dest)

    _drain(qapp, vm, lambda: any(e[0] == 'finished' for e in events))
    assert events == [('started', 'move'), ('history', 1), ('finished', 'move', True)]
    assert vm.busy_task is None
    assert vm.selected_count == 0
    assert vm.item_paths() == [os.path.join(src, 'c.txt')]
    assert sorted(os.listdir(dest)) == ['a.txt', 'b.txt']
    assert notes[-1].title == 'Moved 2 files'


def test_worker_exception_is_reported(qapp, setup, monkeypatch):
    vm, src, dest, notes = setup
    finished = []
    vm.task_finished.connect(lambda name, ok: finished.append(ok))

    def broken(*args, **kwargs):
        raise OSError('No space left on device')

    monkeypatch.setattr('desktidy.viewmodel.copy_files', broken)
    vm.select_all()
    assert vm.copy_selected(dest)
    _drain(qapp, vm, lambda: bool(finished))
    assert finished == [False]
    assert notes[-1].title == 'Copy failed'
    assert notes[-1].retry is not None
    assert vm.busy_task is None
    assert vm.selected_count == 3
