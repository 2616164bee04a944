"""Tests for configuration management."""

from pathlib import Path

import pytest

from taskboard.config import Config


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the global config at a temporary home directory."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


def test_defaults(tmp_path: Path, home: Path) -> None:
    """Test built-in defaults apply when nothing is set."""
    config = Config(config_dir=tmp_path / "local")
    assert config.get("backend") == "file"
    assert config.get("http.timeout") == 10
    assert config.get("user") is None
    assert config.get("user", "anonymous") == "anonymous"
    assert config.data_dir() == tmp_path / "local" / "data"


def test_set_persists(tmp_path: Path, home: Path) -> None:
    """Test values survive reloading."""
    config = Config(config_dir=tmp_path / "local")
    config.set("backend", "http")
    config.set("http.base_url", "http://localhost:3001/api")

    reloaded = Config(config_dir=tmp_path / "local")
    assert reloaded.get("backend") == "http"
    assert reloaded.list() == {"backend": "http", "http.base_url": "http://localhost:3001/api"}

    reloaded.unset("backend")
    assert Config(config_dir=tmp_path / "local").get("backend") == "file"


def test_local_falls_back_to_global(tmp_path: Path, home: Path) -> None:
    """Test global settings fill in what local config lacks."""
    Config(use_global=True).set("user", "user-global")
    Config(use_global=True).set("backend", "http")
    local = Config(config_dir=tmp_path / "local")
    local.set("backend", "file")

    assert local.get("user") == "user-global"
    assert local.get("backend") == "file"
    assert local.list() == {"user": "user-global", "backend": "file"}


def test_source(tmp_path: Path, home: Path) -> None:
    """Test reporting where a value comes from."""
    Config(use_global=True).set("http.base_url", "http://boards.example.com/api")
    local = Config(config_dir=tmp_path / "local")
    local.set("user", "user-1")
    assert local.source("user") == "local"
    assert local.source("http.base_url") == "global"
    assert local.source("backend") == "default"
    assert local.source("http.session_token") is None


def test_set_validates(tmp_path: Path, home: Path) -> None:
    """Test unknown keys and bad values are rejected, timeouts parsed."""
    config = Config(config_dir=tmp_path / "local")
    with pytest.raises(ValueError, match="Unknown config key"):
        config.set("colour", "blue")
    with pytest.raises(ValueError, match="Invalid backend"):
        config.set("backend", "sqlite")
    with pytest.raises(ValueError, match="positive"):
        config.set("http.timeout", "0")
    assert config.set("http.timeout", "2.5") == 2.5
    assert config.set("http.timeout", "30") == 30
    assert Config(config_dir=tmp_path / "local").get("http.timeout") == 30


def test_unset_reports_missing(tmp_path: Path, home: Path) -> None:
    """Test unsetting a key that is not in this file."""
    config = Config(config_dir=tmp_path / "local")
    assert config.unset("user") is False
    config.set("user", "user-1")
    assert config.unset("user") is True


def test_list_with_defaults(tmp_path: Path, home: Path) -> None:
    """Test listing built-in defaults alongside set values."""
    config = Config(config_dir=tmp_path / "local")
    config.set("user", "user-1")
    assert config.list() == {"user": "user-1"}
    assert config.list(include_defaults=True) == {"backend": "file", "http.timeout": 10, "user": "user-1"}


def test_data_dir_override(tmp_path: Path, home: Path) -> None:
    """Test file.data_dir is expanded."""
    config = Config(config_dir=tmp_path / "local")
    config.set("file.data_dir", "~/boards")
    assert config.data_dir() == home / "boards"


def test_invalid_yaml(tmp_path: Path, home: Path) -> None:
    """Test a config file that is not a mapping."""
    local = tmp_path / "local"
    local.mkdir()
    (local / "config.yaml").write_text("- just\n- a list\n")
    with pytest.raises(ValueError, match="mapping"):
        Config(config_dir=local)
