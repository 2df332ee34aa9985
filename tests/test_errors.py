import errno

import pytest

from desktidy.errors import (
    ERROR_MESSAGES,
    Notifier,
    Severity,
    classify_error,
    error_key,
    get_error_message,
)


@pytest.mark.parametrize('text,key', [
    ('Permission denied (os error 13)', 'PERMISSION_DENIED'),
    ('Operation not permitted', 'PERMISSION_DENIED'),
    ('No space left on device', 'DISK_FULL'),
    ('The process cannot access the file because it is being used by another process', 'FILE_IN_USE'),
    ('No such file or directory', 'FILE_NOT_FOUND'),
    ('connection reset by peer', 'NETWORK_ERROR'),
    ('operation was cancelled', 'OPERATION_CANCELLED'),
    ('Invalid filename syntax', 'INVALID_PATH'),
    ('Read-only file system', 'READ_ONLY_FILE'),
    ('Directory not empty', 'DIRECTORY_NOT_EMPTY'),
    ('File exists', 'NAME_CONFLICT'),
    ('something odd happened', 'UNKNOWN_ERROR'),
    ('', 'UNKNOWN_ERROR'),
])
def test_classify_error(text, key):
    assert classify_error(text) == key


def test_classify_error_order_prefers_permission():
    assert classify_error('permission denied: file not found') == 'PERMISSION_DENIED'


def test_error_key_uses_errno_for_oserror():
    assert error_key(PermissionError(errno.EACCES, 'x')) == 'PERMISSION_DENIED'
    assert error_key(FileNotFoundError(errno.ENOENT, 'x')) == 'FILE_NOT_FOUND'
    assert error_key(OSError(errno.ENOSPC, 'x')) == 'DISK_FULL'


def test_get_error_message_for_non_errors():
    assert get_error_message(42) == ERROR_MESSAGES['UNKNOWN_ERROR']
    assert get_error_message(None) == ERROR_MESSAGES['UNKNOWN_ERROR']
    assert get_error_message(RuntimeError('disk full')) == ERROR_MESSAGES['DISK_FULL']


def test_handle_error_emits_destructive_notification(qapp):
    n = Notifier()
    got = []
    n.notified.connect(got.append)
    n.handle_error('Permission denied')
    assert len(got) == 1
    assert got[0].title == ERROR_MESSAGES['PERMISSION_DENIED'].title
    assert got[0].severity is Severity.DESTRUCTIVE
    assert got[0].retry is None


def test_handle_error_title_override(qapp):
    n = Notifier()
    got = []
    n.notified.connect(got.append)
    n.handle_error('boom', title='Move failed', description='custom')
    assert got[0].title == 'Move failed'
    assert got[0].description == 'custom'


def test_handle_success(qapp):
    n = Notifier()
    got = []
    n.notified.connect(got.append)
    n.handle_success('Copied 2 files', '/tmp/x')
    assert got[0].severity is Severity.DEFAULT
    assert got[0].description == '/tmp/x'


def test_handle_error_with_retry_reinvokes_operation(qapp):
    n = Notifier()
    got = []
    n.notified.connect(got.append)
    calls = []
    n.handle_error_with_retry('file is in use', lambda: calls.append(1))
    assert got[0].retry is not None
    assert got[0].action_label == ERROR_MESSAGES['FILE_IN_USE'].action
    got[0].retry()
    assert calls == [1]
    assert len(got) == 1


def test_retry_failure_is_reported(qapp):
    n = Notifier()
    got = []
    n.notified.connect(got.append)

    def failing():
        raise OSError(errno.ENOSPC, 'No space left on device')

    n.handle_error_with_retry('file is in use', failing)
    got[0].retry()
    assert len(got) == 2
    assert got[1].title == ERROR_MESSAGES['DISK_FULL'].title
    assert got[1].retry is None
