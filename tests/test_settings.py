import json

from desktidy.settings import (
    DEFAULT_SETTINGS,
    SettingsDialog,
    get_setting,
    load_last_dir,
    load_settings,
    save_last_dir,
    save_settings,
    set_setting,
)


def test_defaults_when_file_missing(tmp_path):
    path = str(tmp_path / 'cfg.json')
    assert load_settings(path) == DEFAULT_SETTINGS


def test_save_merges_existing_values(tmp_path):
    path = str(tmp_path / 'cfg.json')
    assert save_settings({'use_trash': False}, path)
    assert save_settings({'view_mode': 'list'}, path)
    with open(path) as f:
        data = json.load(f)
    assert data == {'use_trash': False, 'view_mode': 'list'}
    s = load_settings(path)
    assert s['use_trash'] is False
    assert s['confirm_before_delete'] is True


def test_corrupt_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / 'cfg.json'
    path.write_text('{not json')
    assert load_settings(str(path)) == DEFAULT_SETTINGS
    path.write_text('[1, 2]')
    assert load_settings(str(path)) == DEFAULT_SETTINGS


def test_get_and_set_setting(tmp_path):
    path = str(tmp_path / 'cfg.json')
    assert get_setting('missing', 'x', path) == 'x'
    set_setting('show_hidden_files', True, path)
    assert get_setting('show_hidden_files', path=path) is True


def test_last_dir_round_trip(tmp_path):
    path = str(tmp_path / 'cfg.json')
    folder = tmp_path / 'docs'
    folder.mkdir()
    save_last_dir(str(folder), path)
    assert load_last_dir(path) == str(folder)


def test_last_dir_ignored_when_not_remembered(tmp_path):
    path = str(tmp_path / 'cfg.json')
    folder = tmp_path / 'docs'
    folder.mkdir()
    save_settings({'last_dir': str(folder), 'remember_last_dir': False, 'default_directory': str(tmp_path)}, path)
    assert load_last_dir(path) == str(tmp_path)


def test_dialog_round_trip(qapp, tmp_path):
    path = str(tmp_path / 'cfg.json')
    save_settings({'overwrite_strategy': 'skip', 'view_mode': 'list'}, path)
    dlg = SettingsDialog(path=path)
    values = dlg.collect_values()
    assert values['overwrite_strategy'] == 'skip'
    assert values['view_mode'] == 'list'
    dlg.use_trash.setChecked(False)
    dlg.accept()
    assert load_settings(path)['use_trash'] is False


def test_dialog_reset_defaults(qapp, tmp_path):
    path = str(tmp_path / 'cfg.json')
    save_settings({'confirm_before_delete': False}, path)
    dlg = SettingsDialog(path=path)
    assert not dlg.confirm_delete.isChecked()
    dlg.reset_defaults()
    assert dlg.confirm_delete.isChecked()
    assert dlg.collect_values()['overwrite_strategy'] == 'rename'
