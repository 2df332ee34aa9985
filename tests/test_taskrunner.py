import time

from PySide6.QtCore import QCoreApplication

from desktidy.taskrunner import TaskRunner


def _pump(app, done, timeout=3.0):
    deadline = time.time() + timeout
    while not done() and time.time() < deadline:
        app.processEvents()
        time.sleep(0.01)


def test_result_and_progress_are_delivered(qapp):
    runner = TaskRunner()
    events = []
    runner.task_started.connect(lambda name: events.append(('started', name)))
    runner.task_progress.connect(lambda name, cur, total, detail: events.append(('progress', cur, total, detail)))
    runner.task_result.connect(lambda name, result: events.append(('result', result)))
    runner.task_finished.connect(lambda name, ok: events.append(('finished', ok)))

    def work(progress):
        progress(1, 2, 'a.txt')
        return 42

    runner.run('copy', work)
    assert runner.wait(3000)
    _pump(qapp, lambda: any(e[0] == 'finished' for e in events))
    assert events[0] == ('started', 'copy')
    assert ('progress', 1, 2, 'a.txt') in events
    assert ('result', 42) in events
    assert events[-1] == ('finished', True)


def test_exception_reported_as_error(qapp):
    runner = TaskRunner()
    errors, finished = [], []
    runner.task_error.connect(lambda name, e: errors.append(e))
    runner.task_finished.connect(lambda name, ok: finished.append(ok))

    def work(progress):
        raise OSError('No space left on device')

    runner.run('move', work)
    runner.wait(3000)
    _pump(qapp, lambda: bool(finished))
    assert finished == [False]
    assert isinstance(errors[0], OSError)


def test_invalid_arguments_ignored(qapp):
    runner = TaskRunner()
    runner.run('', None)
    runner.shutdown(100)
    assert QCoreApplication.instance() is qapp
