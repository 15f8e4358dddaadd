"""Unit tests for the layered window configuration store and resolver."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from sessionizer.config import (
    global_config_path,
    has_repo_config,
    load_config_file,
    load_editable_config,
    load_global_config,
    load_repo_config,
    repo_config_path,
    resolve_config,
    save_config_file,
    save_global_config,
    save_repo_config,
)
from sessionizer.errors import ConfigError
from sessionizer.models import SessionizerConfig, WindowConfig, default_config

REPO_DOC = {
    "version": "1.0",
    "windows": [{"name": "code", "command": "hx ."}, {"name": "tests", "command": "pytest -x"}],
    "initialActiveWindow": 1,
}
GLOBAL_DOC = {
    "version": "1.0",
    "windows": [{"name": "vim", "command": "vim"}, {"name": "shell", "command": ""}],
}


def _write(path: Path, content) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content if isinstance(content, str) else json.dumps(content))
    return path


class TestPaths:

    def test_global_path_uses_xdg_config_home(self, config_home):
        assert global_config_path() == config_home / "tmux-sessionizer" / "config.json"

    def test_global_path_falls_back_to_home(self, monkeypatch, tmp_path):
        monkeypatch.delenv("XDG_CONFIG_HOME")
        monkeypatch.setenv("HOME", str(tmp_path))
        assert global_config_path() == tmp_path / ".config" / "tmux-sessionizer" / "config.json"

    def test_repo_path_is_inside_git_dir(self):
        assert repo_config_path("/src/app") == Path("/src/app/.git/tmux-sessionizer.json")

    def test_has_repo_config(self, make_repo):
        assert has_repo_config(str(make_repo("with", config=REPO_DOC)))
        assert not has_repo_config(str(make_repo("without")))


class TestLoad:

    def test_load_valid_document(self, tmp_path):
        config = load_config_file(_write(tmp_path / "c.json", REPO_DOC))
        assert [w.name for w in config.windows] == ["code", "tests"]
        assert config.windows[0].command == "hx ."
        assert config.initial_active_window == 1
        assert config.version == "1.0"

    def test_missing_command_and_initial_window_default(self, tmp_path):
        config = load_config_file(_write(tmp_path / "c.json", {"windows": [{"name": "only"}]}))
        assert config.windows == [WindowConfig("only", "")]
        assert config.initial_active_window == 0

    @pytest.mark.parametrize("content", [
        "{not json",
        "[]",
        {"windows": []},
        {"windows": "nvim"},
        {"windows": [{"name": ""}]},
        {"windows": [{"command": "nvim"}]},
        {"windows": [{"name": "a", "command": 3}]},
    ])
    def test_invalid_documents_raise(self, tmp_path, content):
        with pytest.raises(ConfigError):
            load_config_file(_write(tmp_path / "c.json", content))

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config_file(tmp_path / "absent.json")

    def test_unreadable_file_raises(self, tmp_path):
        path = _write(tmp_path / "c.json", REPO_DOC)
        with patch("sessionizer.config.open", side_effect=PermissionError("denied"), create=True):
            with pytest.raises(ConfigError, match="Failed to read"):
                load_config_file(path)


class TestSave:

    def test_round_trip_through_global_file(self, global_config_file):
        config = SessionizerConfig(
            windows=[WindowConfig("edit", "nvim"), WindowConfig("logs", "tail -f log")],
            initial_active_window=1,
        )
        save_global_config(config)

        assert json.loads(global_config_file.read_text()) == {
            "version": "1.0",
            "windows": [{"name": "edit", "command": "nvim"}, {"name": "logs", "command": "tail -f log"}],
            "initialActiveWindow": 1,
        }
        assert load_global_config() == config

    def test_save_leaves_no_temp_file(self, tmp_path):
        target = tmp_path / "nested" / "config.json"
        save_config_file(target, default_config())
        assert target.is_file()
        assert not (tmp_path / "nested" / "config.json.tmp").exists()

    def test_repo_save(self, make_repo):
        repo = str(make_repo("app"))
        save_repo_config(repo, SessionizerConfig(windows=[WindowConfig("x")]))
        assert load_repo_config(repo).windows == [WindowConfig("x", "")]

    @pytest.mark.parametrize("config", [
        SessionizerConfig(windows=[]),
        SessionizerConfig(windows=[WindowConfig("")]),
    ])
    def test_invalid_config_is_not_written(self, tmp_path, config):
        target = tmp_path / "config.json"
        with pytest.raises(ConfigError):
            save_config_file(target, config)
        assert not target.exists()

    def test_failed_rename_keeps_old_file_and_cleans_temp(self, tmp_path):
        target = _write(tmp_path / "config.json", GLOBAL_DOC)
        with patch("sessionizer.config.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(ConfigError, match="disk full"):
                save_config_file(target, default_config())

        assert json.loads(target.read_text()) == GLOBAL_DOC
        assert not (tmp_path / "config.json.tmp").exists()


class TestResolve:

    def test_repo_config_wins(self, make_repo, global_config_file):
        _write(global_config_file, GLOBAL_DOC)
        repo = make_repo("app", config=REPO_DOC)

        config = resolve_config(str(repo))

        assert [w.name for w in config.windows] == ["code", "tests"]
        assert config.initial_active_window == 1

    def test_malformed_repo_config_falls_back_to_global(self, make_repo, global_config_file):
        _write(global_config_file, GLOBAL_DOC)
        repo = make_repo("app", raw_config="{oops")

        config = resolve_config(str(repo))

        assert [w.name for w in config.windows] == ["vim", "shell"]

    def test_empty_repo_windows_fall_back_to_global(self, make_repo, global_config_file):
        _write(global_config_file, GLOBAL_DOC)
        repo = make_repo("app", config={"version": "1.0", "windows": []})

        assert [w.name for w in resolve_config(str(repo)).windows] == ["vim", "shell"]

    def test_everything_broken_gives_default(self, make_repo, global_config_file):
        _write(global_config_file, "not json at all")
        repo = make_repo("app", config={"windows": [{"name": ""}]})

        config = resolve_config(str(repo))

        assert config == default_config()
        assert [w.name for w in config.windows] == ["nvim", "server", "term"]
        assert config.initial_active_window == 0

    def test_nothing_present_gives_default(self, tmp_path):
        assert resolve_config(str(tmp_path / "plain-dir")) == default_config()

    def test_first_non_skip_provider_wins(self):
        calls = []

        def skip():
            calls.append("skip")
            return None

        def chosen():
            calls.append("chosen")
            return SessionizerConfig(windows=[WindowConfig("x")])

        def never():
            calls.append("never")
            return default_config()

        config = resolve_config(None, [skip, chosen, never])

        assert config.windows == [WindowConfig("x")]
        assert calls == ["skip", "chosen"]


class TestEditableConfig:

    def test_repo_without_config_starts_from_global(self, make_repo, global_config_file):
        _write(global_config_file, GLOBAL_DOC)
        repo = make_repo("app")

        assert [w.name for w in load_editable_config(str(repo)).windows] == ["vim", "shell"]

    def test_global_missing_starts_from_default(self):
        assert load_editable_config(None) == default_config()
