from __future__ import annotations

"""Qt-based background runner for batch file operations.

Moves filesystem work off the GUI thread using QThreadPool + QRunnable.
Selection changes never go through here; they stay synchronous on the GUI
thread. Signals are emitted from the worker and delivered queued to
receivers living on the GUI thread.

- ``task_progress`` emits (name, current, total, detail); total==0 means
  indeterminate.
- The callable's return value is delivered through ``task_result``; an
  exception is delivered through ``task_error`` and ``task_finished`` reports
  success=False.
"""
import logging
from collections.abc import Callable

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal


class ProgressReporter:
    __slots__ = ("_task", "_current", "_total", "_name", "_detail")

    def __init__(self, task: _RunnableTask, name: str):
        self._task = task
        self._name = name
        self._current = 0
        self._total = 0
        self._detail = ""

    def update(self, current: int, total: int | None = None, detail: str | None = None):
        self._current = max(0, int(current))
        if total is not None:
            self._total = int(total) if total > 0 else 0
        if detail is not None:
            self._detail = detail
        self._task._emit_progress(self._name, self._current, self._total, self._detail)

    __call__ = update


class _RunnableTask(QRunnable):
    def __init__(self, name: str, fn: Callable[[ProgressReporter], object], runner: TaskRunner):
        super().__init__()
        self._name = name
        self._fn = fn
        self._runner = runner

    def _emit(self, signal, *args):
        try:
            signal.emit(*args)
        except RuntimeError:
            # Runner QObject was deleted (app closing)
            logging.debug(f"[TaskRunner] signal ignored, runner deleted ({self._name})")

    def _emit_progress(self, name: str, current: int, total: int, detail: str):
        self._emit(self._runner.task_progress, name, current, total, detail)

    def run(self):  # noqa: D401
        logging.debug(f"[TaskRunner] Task '{self._name}' started")
        self._emit(self._runner.task_started, self._name)
        ok = True
        try:
            result = self._fn(ProgressReporter(self, self._name))
        except Exception as e:
            ok = False
            logging.exception(f"[TaskRunner] Task '{self._name}' failed")
            self._emit(self._runner.task_error, self._name, e)
        else:
            self._emit(self._runner.task_result, self._name, result)
        finally:
            self._emit(self._runner.task_finished, self._name, ok)


class TaskRunner(QObject):
    task_started = Signal(str)  # name
    task_progress = Signal(str, int, int, str)  # name, current, total, detail
    task_result = Signal(str, object)  # name, return value
    task_error = Signal(str, object)  # name, exception
    task_finished = Signal(str, bool)  # name, success

    def __init__(self, max_threads: int = 2):
        super().__init__()
        self._pool = QThreadPool.globalInstance()
        self._pool.setMaxThreadCount(max(self._pool.maxThreadCount(), max_threads))

    def run(self, name: str, fn: Callable[[ProgressReporter], object]):
        if not name or not callable(fn):
            logging.error("TaskRunner.run called with invalid arguments")
            return
        logging.debug(
            f"[TaskRunner] Submitting task '{name}' (pool: {self._pool.activeThreadCount()}/{self._pool.maxThreadCount()} active)"
        )
        self._pool.start(_RunnableTask(name, fn, self))

    def wait(self, timeout_ms: int = 3000) -> bool:
        return self._pool.waitForDone(timeout_ms)

    def shutdown(self, timeout_ms: int = 3000):
        """Shutdown TaskRunner, waiting for active tasks to complete."""
        if not self._pool.waitForDone(timeout_ms):
            logging.warning(f"[TaskRunner] {self._pool.activeThreadCount()} tasks still running at shutdown")
        self._pool.clear()
        logging.info("[TaskRunner] Shutdown complete")


__all__ = ["TaskRunner", "ProgressReporter"]
