import os

# Ensure Qt runs in offscreen mode for headless CI/test environments
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Configure logging for tests so debug information from desktidy modules
# (TaskRunner, file_ops, viewmodel) is visible when a test fails or hangs.
import logging
handler = logging.StreamHandler()
formatter = logging.Formatter('%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s')
handler.setFormatter(formatter)
root = logging.getLogger()
if not root.handlers:
	root.addHandler(handler)
root.setLevel(logging.DEBUG)


import pytest
from PySide6.QtCore import QThreadPool
from PySide6.QtWidgets import QApplication


@pytest.fixture
def qapp():
	"""Return the process-wide QApplication, creating it on first use.

	Widget tests need a QApplication (not a QCoreApplication), so every test
	that touches Qt goes through this fixture.
	"""
	app = QApplication.instance() or QApplication([])
	yield app
	app.processEvents()


@pytest.fixture(autouse=True)
def wait_for_qt_tasks(request):
	"""Ensure queued batch operations complete after each test.

	Batch operations run as QRunnable jobs on the global QThreadPool. If a
	test finishes while a job is still running it can leak into the next test.
	"""
	yield
	pool = QThreadPool.globalInstance()
	logging.getLogger(__name__).debug("Waiting for QThreadPool to finish (timeout=2000ms)")
	pool.waitForDone(2000)  # wait up to 2s for pending QRunnables
	logging.getLogger(__name__).debug("QThreadPool.waitForDone finished")


def make_tree(base, names):
	"""Create empty files (or folders for names ending in '/') under ``base``."""
	paths = []
	for name in names:
		p = os.path.join(str(base), name)
		if name.endswith('/'):
			os.makedirs(p, exist_ok=True)
			p = p.rstrip('/')
		else:
			os.makedirs(os.path.dirname(p), exist_ok=True)
			with open(p, 'w') as f:
				f.write(name)
		paths.append(p)
	return paths


@pytest.fixture
def tree(tmp_path):
	def _make(names):
		return make_tree(tmp_path, names)
	return _make
