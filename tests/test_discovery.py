import pytest

from cuprum_build.discovery import list_plugins


def test_lists_one_plugin_per_entry_sorted(workspace):
    assert list_plugins(workspace / "plugins") == ["example-plugin", "git-status", "lsp-bridge"]


def test_hidden_entries_are_skipped(workspace):
    (workspace / "plugins" / ".cache").mkdir()
    assert ".cache" not in list_plugins(workspace / "plugins")
    assert ".DS_Store" not in list_plugins(workspace / "plugins")


def test_exclude_removes_names(workspace):
    names = list_plugins(workspace / "plugins", exclude=["git-status"])
    assert names == ["example-plugin", "lsp-bridge"]


def test_empty_dir_yields_no_plugins(tmp_path):
    (tmp_path / "plugins").mkdir()
    assert list_plugins(tmp_path / "plugins") == []


def test_missing_dir_is_an_error(tmp_path):
    with pytest.raises(ValueError, match="Plugins dir not found"):
        list_plugins(tmp_path / "nope")


def test_file_instead_of_dir_is_an_error(tmp_path):
    (tmp_path / "plugins").write_text("")
    with pytest.raises(ValueError, match="not a directory"):
        list_plugins(tmp_path / "plugins")
