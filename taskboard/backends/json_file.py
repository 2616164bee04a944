"""File backend storing each collection as one JSON document."""

import json
import os
import threading
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Sequence

import structlog

from taskboard.backend import Backend
from taskboard.errors import AccessDeniedError, NotFoundError, RemoteFailure, ValidationError
from taskboard.models import (
    Board,
    Column,
    Label,
    SharedUser,
    ShareLevel,
    SharePermission,
    User,
    columns_from_list,
    columns_to_list,
    new_id,
    now_iso,
    parse_permission,
    validate_color,
    validate_title,
)
from taskboard.permissions import (
    Shareable,
    can_read,
    can_write,
    find_shareable,
    require_owner,
    require_read,
    require_write,
    set_shared_with,
    with_share,
    without_share,
)

logger = structlog.get_logger()

BOARDS_FILE = "boards.json"
LABELS_FILE = "labels.json"
USERS_FILE = "users.json"

DEFAULT_LABEL_OWNER = "default"

DEFAULT_LABELS = [
    {"id": "bug", "name": "Bug", "color": "#ef4444", "userId": DEFAULT_LABEL_OWNER},
    {"id": "feature", "name": "Feature", "color": "#22c55e", "userId": DEFAULT_LABEL_OWNER},
    {"id": "idea", "name": "Idea", "color": "#3b82f6", "userId": DEFAULT_LABEL_OWNER},
    {"id": "todo", "name": "Todo", "color": "#f59e0b", "userId": DEFAULT_LABEL_OWNER},
    {"id": "important", "name": "Important", "color": "#ec4899", "userId": DEFAULT_LABEL_OWNER},
]


class JsonFileBackend(Backend):
    """Backend keeping boards, labels and users in JSON files.

    Every read loads a whole file and filters it; every write loads the file,
    changes it and writes the whole file back. That is fine for a handful of
    users and boards and nothing more.
    """

    def __init__(self, data_dir: str | Path, actor_id: str | None = None) -> None:
        """Initialize the file backend.

        Args:
            data_dir: Directory holding the collection files (created if missing)
            actor_id: User on whose behalf every operation runs; without one only
                user provisioning and read-only listings are useful
        """
        self.data_dir = Path(data_dir)
        self.actor_id = actor_id
        self._lock = threading.RLock()
        self.data_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("File backend initialized", data_dir=str(self.data_dir), actor_id=actor_id)

    # ----- raw file access -----

    def _read(self, filename: str) -> list[dict[str, Any]]:
        path = self.data_dir / filename
        if not path.exists():
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to read collection", file=str(path), error=str(e))
            raise RemoteFailure(f"Failed to read {filename}: {e}") from e
        return data if isinstance(data, list) else []

    def _write(self, filename: str, data: list[dict[str, Any]]) -> None:
        path = self.data_dir / filename
        # The old file stays in place until the new one is complete.
        tmp_path = path.with_suffix(".json.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error("Failed to write collection", file=str(path), error=str(e))
            tmp_path.unlink(missing_ok=True)
            raise RemoteFailure(f"Failed to write {filename}: {e}") from e
        logger.debug("Collection written", file=filename, count=len(data))

    def _require_actor(self) -> str:
        if not self.actor_id:
            raise AccessDeniedError("No acting user configured")
        return self.actor_id

    def _load_boards(self) -> list[Board]:
        return [Board.from_dict(raw) for raw in self._read(BOARDS_FILE)]

    def _save_boards(self, boards: list[Board]) -> None:
        self._write(BOARDS_FILE, [board.to_dict() for board in boards])

    def _board_index(self, boards: list[Board], board_id: str) -> int:
        for index, board in enumerate(boards):
            if board.id == board_id:
                return index
        raise NotFoundError(f"Board not found: {board_id}")

    def _store_board(self, boards: list[Board], index: int, board: Board) -> Board:
        board = replace(board, updated_at=now_iso())
        boards[index] = board
        self._save_boards(boards)
        return board

    # ----- boards -----

    def fetch_board(self, board_id: str) -> Board:
        """Fetch a board the acting user can view."""
        logger.info("Fetching board", board_id=board_id)
        with self._lock:
            boards = self._load_boards()
            board = boards[self._board_index(boards, board_id)]
        require_read(board, self.actor_id, "board")
        return board

    def fetch_boards_for_user(self, user_id: str) -> list[Board]:
        """List boards owned by or shared with ``user_id``, owned boards by their order."""
        with self._lock:
            boards = [board for board in self._load_boards() if can_read(board, user_id)]
        owned = sorted((b for b in boards if b.user_id == user_id), key=lambda b: b.order)
        shared = [b for b in boards if b.user_id != user_id]
        logger.info("Listed boards", user_id=user_id, owned=len(owned), shared=len(shared))
        return owned + shared

    def create_board(self, title: str, description: str | None = None) -> Board:
        """Create a board owned by the acting user, placed after their other boards."""
        actor_id = self._require_actor()
        title = validate_title(title, "Board title")
        with self._lock:
            boards = self._load_boards()
            order = sum(1 for b in boards if b.user_id == actor_id)
            board = Board(
                id=new_id("board"),
                user_id=actor_id,
                title=title,
                description=description,
                order=order,
            )
            boards.append(board)
            self._save_boards(boards)
        logger.info("Board created", board_id=board.id, title=title)
        return board

    def update_board(
        self,
        board_id: str,
        title: str | None = None,
        description: str | None = None,
        columns: Sequence[Column] | None = None,
    ) -> Board:
        """Update board fields and/or replace its column tree."""
        with self._lock:
            boards = self._load_boards()
            index = self._board_index(boards, board_id)
            board = boards[index]

            if title is not None or description is not None:
                require_write(board, self.actor_id, "board")
            if columns is not None and not can_write(board, self.actor_id):
                # Collaborators shared at column or card level may still save the tree.
                if not any(
                    can_write(column, self.actor_id) or any(can_write(card, self.actor_id) for card in column.cards)
                    for column in columns
                ):
                    raise AccessDeniedError("Access denied: cannot modify board")

            if title is not None:
                board = replace(board, title=validate_title(title, "Board title"))
            if description is not None:
                board = replace(board, description=description)
            if columns is not None:
                board = replace(board, columns=columns_from_list(columns_to_list(columns), board.id, board.user_id))
            board = self._store_board(boards, index, board)
        logger.info("Board updated", board_id=board_id, columns=len(board.columns), cards=board.card_count())
        return board

    def delete_board(self, board_id: str) -> None:
        """Delete a board; only its owner may do so."""
        with self._lock:
            boards = self._load_boards()
            board = boards[self._board_index(boards, board_id)]
            if board.user_id != self.actor_id:
                raise AccessDeniedError("Only the owner can delete this board")
            self._save_boards([b for b in boards if b.id != board_id])
        logger.info("Board deleted", board_id=board_id)

    # ----- sharing -----

    def _edit_shares(
        self, level: ShareLevel, entity_id: str, board_id: str, edit: Callable[[Shareable], Sequence[SharedUser]]
    ) -> Board:
        with self._lock:
            boards = self._load_boards()
            index = self._board_index(boards, board_id)
            board = boards[index]
            entity = find_shareable(board, level, entity_id)
            require_owner(entity, self.actor_id, level.value)
            board = set_shared_with(board, level, entity_id, edit(entity))
            return self._store_board(boards, index, board)

    def share_entity(
        self,
        level: ShareLevel,
        entity_id: str,
        target_user_id: str,
        permission: SharePermission,
        board_id: str,
        column_id: str | None = None,
    ) -> Board:
        """Share a board, column or card with another user."""
        level = ShareLevel(level)
        permission = parse_permission(permission)
        if not target_user_id:
            raise ValidationError("User ID is required")
        if not any(user.id == target_user_id for user in self._load_users()):
            raise NotFoundError(f"User not found: {target_user_id}")

        def edit(entity: Shareable) -> Sequence[SharedUser]:
            if entity.user_id == target_user_id:
                raise ValidationError("Cannot share with the owner")
            return with_share(entity.shared_with, target_user_id, permission)

        board = self._edit_shares(level, entity_id, board_id, edit)
        logger.info(
            "Entity shared",
            level=level.value,
            entity_id=entity_id,
            target_user_id=target_user_id,
            permission=permission.value,
        )
        return board

    def unshare_entity(
        self,
        level: ShareLevel,
        entity_id: str,
        target_user_id: str,
        board_id: str,
        column_id: str | None = None,
    ) -> Board:
        """Stop sharing a board, column or card with a user."""
        level = ShareLevel(level)
        board = self._edit_shares(
            level, entity_id, board_id, lambda entity: without_share(entity.shared_with, target_user_id)
        )
        logger.info("Entity unshared", level=level.value, entity_id=entity_id, target_user_id=target_user_id)
        return board

    # ----- labels -----

    def _load_labels(self) -> list[Label]:
        raw = self._read(LABELS_FILE)
        if not any(item.get("userId") == DEFAULT_LABEL_OWNER for item in raw):
            logger.debug("Seeding default labels")
            raw = DEFAULT_LABELS + raw
            self._write(LABELS_FILE, raw)
        return [Label.from_dict(item) for item in raw]

    def _owned_label(self, labels: list[Label], label_id: str) -> int:
        for index, label in enumerate(labels):
            if label.id == label_id:
                if label.user_id != self.actor_id:
                    raise AccessDeniedError("Access denied: cannot modify label")
                return index
        raise NotFoundError(f"Label not found: {label_id}")

    def list_labels(self, user_id: str) -> list[Label]:
        """Default labels plus the user's own labels."""
        with self._lock:
            labels = self._load_labels()
        return [label for label in labels if label.user_id in (DEFAULT_LABEL_OWNER, user_id)]

    def create_label(self, name: str, color: str) -> Label:
        label = Label(
            id=new_id("label"),
            name=validate_title(name, "Label name"),
            color=validate_color(color),
            user_id=self._require_actor(),
        )
        with self._lock:
            labels = self._load_labels()
            labels.append(label)
            self._write(LABELS_FILE, [item.to_dict() for item in labels])
        logger.info("Label created", label_id=label.id, name=label.name)
        return label

    def update_label(self, label_id: str, name: str | None = None, color: str | None = None) -> Label:
        with self._lock:
            labels = self._load_labels()
            index = self._owned_label(labels, label_id)
            label = labels[index]
            if name is not None:
                label = replace(label, name=validate_title(name, "Label name"))
            if color is not None:
                label = replace(label, color=validate_color(color))
            labels[index] = label
            self._write(LABELS_FILE, [item.to_dict() for item in labels])
        logger.info("Label updated", label_id=label_id)
        return label

    def delete_label(self, label_id: str) -> None:
        with self._lock:
            labels = self._load_labels()
            index = self._owned_label(labels, label_id)
            del labels[index]
            self._write(LABELS_FILE, [item.to_dict() for item in labels])
        logger.info("Label deleted", label_id=label_id)

    # ----- users -----

    def _load_users(self) -> list[User]:
        return [User.from_dict(item) for item in self._read(USERS_FILE)]

    def list_users(self, excluding: str | None = None) -> list[User]:
        with self._lock:
            users = self._load_users()
        return [user for user in users if user.id != excluding]

    def create_user(self, username: str, email: str | None = None) -> User:
        """Register a user so boards can be shared with them."""
        username = validate_title(username, "Username")
        with self._lock:
            users = self._load_users()
            if any(user.username == username for user in users):
                raise ValidationError(f"Username already taken: {username}")
            user = User(id=new_id("user"), username=username, email=email)
            users.append(user)
            self._write(USERS_FILE, [item.to_dict() for item in users])
        logger.info("User created", user_id=user.id, username=username)
        return user
