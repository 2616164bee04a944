"""Tests for the CLI commands against the file backend."""

from pathlib import Path

import pytest

from taskboard import card_commands, cli, column_commands, share_commands
from taskboard.backends import HttpBackend, JsonFileBackend
from taskboard.config import Config


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run with local config in a temporary directory and an empty home."""
    (tmp_path / "home").mkdir()
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _login(username: str) -> str:
    config = Config()
    user = JsonFileBackend(config.data_dir()).create_user(username)
    config.set("user", user.id)
    return user.id


def test_get_store_requires_user(workspace: Path) -> None:
    """Test the acting user must be configured."""
    with pytest.raises(ValueError, match="tb config set user"):
        cli.get_store()


def test_get_backend(workspace: Path) -> None:
    """Test backend selection from config."""
    assert isinstance(cli.get_backend("alice"), JsonFileBackend)

    config = Config()
    config.set("backend", "http")
    with pytest.raises(ValueError, match="http.base_url"):
        cli.get_backend("alice")
    config.set("http.base_url", "http://localhost:3001/api")
    backend = cli.get_backend("alice")
    assert isinstance(backend, HttpBackend)
    assert backend.timeout == 10.0

    # Hand-edited files bypass the key validation of ``config set``.
    config.config_file.write_text("backend: sqlite\n")
    with pytest.raises(ValueError, match="Unknown backend"):
        cli.get_backend("alice")


def test_add_user(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test registering a user."""
    share_commands.add_user("alice", email="alice@example.com")
    assert "Created user user-" in capsys.readouterr().out


def test_add_user_rejects_duplicates(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test a taken username exits with an error instead of a traceback."""
    share_commands.add_user("alice")
    capsys.readouterr()
    with pytest.raises(SystemExit) as excinfo:
        share_commands.add_user("alice")
    assert excinfo.value.code == 1
    assert "Error: Username already taken: alice" in capsys.readouterr().out


def test_add_user_needs_file_backend(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test users are not written to a local file while a server is configured."""
    Config().set("backend", "http")
    with pytest.raises(SystemExit):
        share_commands.add_user("alice")
    assert "only be added with the file backend" in capsys.readouterr().out
    assert not (Config().data_dir() / "users.json").exists()


def test_board_workflow(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test creating a board, a column and a card, then showing it."""
    actor_id = _login("alice")
    cli.create("Sprint")
    out = capsys.readouterr().out
    assert "Created board" in out

    backend = JsonFileBackend(Config().data_dir(), actor_id=actor_id)
    board_id = backend.fetch_boards_for_user(actor_id)[0].id
    column_commands.add(board_id, "Todo")
    column_id = backend.fetch_board(board_id).columns[0].id
    card_commands.add(board_id, column_id, "Write tests", labels="bug, idea")
    capsys.readouterr()

    cli.show(board_id)
    out = capsys.readouterr().out
    assert "Title: Sprint" in out
    assert "Todo" in out
    assert "Write tests (medium) [Bug, Idea]" in out

    cli.boards()
    assert "Found 1 board(s)" in capsys.readouterr().out


def test_refused_mutation_exits(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test a locally refused change reports the error and exits non-zero."""
    actor_id = _login("alice")
    board = JsonFileBackend(Config().data_dir(), actor_id=actor_id).create_board("Sprint")
    with pytest.raises(SystemExit) as excinfo:
        column_commands.add(board.id, "   ")
    assert excinfo.value.code == 1
    assert "Error: Column title is required" in capsys.readouterr().out


def test_share_and_list(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test sharing a board with another user."""
    actor_id = _login("alice")
    data_dir = Config().data_dir()
    bob = JsonFileBackend(data_dir).create_user("bob")
    board = JsonFileBackend(data_dir, actor_id=actor_id).create_board("Sprint")

    share_commands.add_share(board.id, bob.id, permission="write")
    assert f"Shared board {board.id} with {bob.id} (write)" in capsys.readouterr().out

    share_commands.list_shares(board.id)
    assert f"{bob.id}:write" in capsys.readouterr().out

    share_commands.list_users()
    assert "bob" in capsys.readouterr().out


def test_edit_card_clear(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test emptying card fields from the command line."""
    actor_id = _login("alice")
    backend = JsonFileBackend(Config().data_dir(), actor_id=actor_id)
    board = backend.create_board("Sprint")
    column_commands.add(board.id, "Todo")
    column_id = backend.fetch_board(board.id).columns[0].id
    card_commands.add(board.id, column_id, "Write tests", description="Cover the store", due="2026-11-01")
    card_id = backend.fetch_board(board.id).columns[0].cards[0].id

    card_commands.edit(board.id, card_id, clear="description, due_date")
    assert f"Updated card {card_id}" in capsys.readouterr().out
    card = backend.fetch_board(board.id).find_card(card_id)[1]
    assert (card.title, card.description, card.due_date) == ("Write tests", None, None)

    with pytest.raises(SystemExit):
        card_commands.edit(board.id, card_id, clear="title")
    assert "Cannot clear title" in capsys.readouterr().out
