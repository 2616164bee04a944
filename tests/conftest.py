"""Shared fixtures for taskboard tests."""

import threading
from dataclasses import replace
from typing import Iterator, Sequence

import pytest

from taskboard.backend import Backend
from taskboard.errors import NotFoundError
from taskboard.models import Board, Column, Label, ShareLevel, SharePermission, User, columns_from_list, columns_to_list
from taskboard.permissions import find_shareable, set_shared_with, with_share, without_share
from taskboard.store import BoardStore


class InMemoryBackend(Backend):
    """Backend keeping everything in dicts, with injectable failures.

    Put an exception into ``failures`` under a method name to make the next call
    of that method raise it. Clear ``gate`` to hold every call until it is set
    again, which keeps the optimistic state observable.
    """

    def __init__(self, actor_id: str = "alice") -> None:
        """Initialize in-memory backend."""
        self.actor_id = actor_id
        self.boards: dict[str, Board] = {}
        self.labels: dict[str, Label] = {}
        self.users: dict[str, User] = {}
        self.calls: list[str] = []
        self.failures: dict[str, Exception] = {}
        self._next_id = 1
        self.gate = threading.Event()
        self.gate.set()

    def _call(self, name: str) -> None:
        self.gate.wait(timeout=5)
        self.calls.append(name)
        error = self.failures.pop(name, None)
        if error is not None:
            raise error

    def _new_id(self, prefix: str) -> str:
        value = f"{prefix}-{self._next_id}"
        self._next_id += 1
        return value

    def add_board(self, board: Board) -> Board:
        self.boards[board.id] = board
        return board

    def fetch_board(self, board_id: str) -> Board:
        """Fetch a board."""
        self._call("fetch_board")
        if board_id not in self.boards:
            raise NotFoundError(f"Board not found: {board_id}")
        return self.boards[board_id]

    def fetch_boards_for_user(self, user_id: str) -> list[Board]:
        """List boards."""
        self._call("fetch_boards_for_user")
        return [
            b for b in self.boards.values() if b.user_id == user_id or any(s.user_id == user_id for s in b.shared_with)
        ]

    def create_board(self, title: str, description: str | None = None) -> Board:
        """Create a board."""
        self._call("create_board")
        board = Board(id=self._new_id("board"), user_id=self.actor_id, title=title, description=description)
        return self.add_board(board)

    def update_board(
        self,
        board_id: str,
        title: str | None = None,
        description: str | None = None,
        columns: Sequence[Column] | None = None,
    ) -> Board:
        """Update a board."""
        self._call("update_board")
        board = self.boards[board_id]
        if title is not None:
            board = replace(board, title=title)
        if description is not None:
            board = replace(board, description=description)
        if columns is not None:
            board = replace(board, columns=columns_from_list(columns_to_list(columns), board.id, board.user_id))
        return self.add_board(board)

    def delete_board(self, board_id: str) -> None:
        """Delete a board."""
        self._call("delete_board")
        del self.boards[board_id]

    def share_entity(
        self,
        level: ShareLevel,
        entity_id: str,
        target_user_id: str,
        permission: SharePermission,
        board_id: str,
        column_id: str | None = None,
    ) -> Board:
        """Share an entity."""
        self._call("share_entity")
        board = self.boards[board_id]
        entity = find_shareable(board, level, entity_id)
        return self.add_board(
            set_shared_with(board, level, entity_id, with_share(entity.shared_with, target_user_id, permission))
        )

    def unshare_entity(
        self,
        level: ShareLevel,
        entity_id: str,
        target_user_id: str,
        board_id: str,
        column_id: str | None = None,
    ) -> Board:
        """Unshare an entity."""
        self._call("unshare_entity")
        board = self.boards[board_id]
        entity = find_shareable(board, level, entity_id)
        return self.add_board(
            set_shared_with(board, level, entity_id, without_share(entity.shared_with, target_user_id))
        )

    def list_labels(self, user_id: str) -> list[Label]:
        """List labels."""
        self._call("list_labels")
        return [label for label in self.labels.values() if label.user_id == user_id]

    def create_label(self, name: str, color: str) -> Label:
        """Create a label."""
        self._call("create_label")
        label = Label(id=self._new_id("label"), name=name, color=color, user_id=self.actor_id)
        self.labels[label.id] = label
        return label

    def update_label(self, label_id: str, name: str | None = None, color: str | None = None) -> Label:
        """Update a label."""
        self._call("update_label")
        label = self.labels[label_id]
        label = replace(label, name=name or label.name, color=color or label.color)
        self.labels[label_id] = label
        return label

    def delete_label(self, label_id: str) -> None:
        """Delete a label."""
        self._call("delete_label")
        del self.labels[label_id]

    def list_users(self, excluding: str | None = None) -> list[User]:
        """List users."""
        self._call("list_users")
        return [user for user in self.users.values() if user.id != excluding]


def make_board(columns: dict[str, list[str]], owner: str = "alice", board_id: str = "b1") -> Board:
    """Build a board from ``{column_id: [card_id, ...]}``."""
    return Board.from_dict(
        {
            "id": board_id,
            "userId": owner,
            "title": "Board",
            "columns": [
                {"id": column_id, "title": column_id, "cards": [{"id": card_id, "title": card_id} for card_id in cards]}
                for column_id, cards in columns.items()
            ],
        }
    )


def card_ids(board: Board, column_id: str) -> list[str]:
    found = board.find_column(column_id)
    assert found is not None
    return [card.id for card in found[1].cards]


@pytest.fixture
def backend() -> InMemoryBackend:
    """In-memory backend acting as alice."""
    return InMemoryBackend(actor_id="alice")


@pytest.fixture
def sample_board() -> Board:
    """Board b1 owned by alice with c1 [t1, t2], c2 [] and c3 [t3]."""
    return make_board({"c1": ["t1", "t2"], "c2": [], "c3": ["t3"]})


@pytest.fixture
def store(backend: InMemoryBackend, sample_board: Board) -> Iterator[BoardStore]:
    """Store for alice with the sample board loaded."""
    backend.add_board(sample_board)
    board_store = BoardStore(backend, actor_id="alice")
    board_store.load_board(sample_board.id)
    yield board_store
    board_store.close()
