"""Client-side board store with optimistic mutations.

``BoardStore`` holds the board list, the board currently open, the label list
and a single error slot. Every mutation happens in two phases:

1. the new state is computed and swapped in immediately, so readers see the
   intended result right away;
2. the change is sent to the backend on the sync executor. The returned
   ``MutationResult.pending`` future resolves to ``Ack`` or ``Failure``.

Structural changes (anything that reshapes the column/card tree) are sent as a
whole-board columns replace. When one fails the store re-fetches the board and
takes the backend's copy, dropping the optimistic attempt. Entity changes
(boards, labels, sharing) only undo their own optimistic edit on failure.

Remote calls run on a single worker thread by default, so they reach the
backend in the order they were issued. A re-fetch after a failure can still
overwrite local mutations made after the failed one.
"""

import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable, Sequence

import structlog

from taskboard import permissions, reorder
from taskboard.backend import Backend
from taskboard.errors import AccessDeniedError, NotFoundError, RemoteFailure, TaskboardError, ValidationError
from taskboard.models import (
    DEFAULT_COLUMN_COLOR,
    Board,
    Card,
    Column,
    Label,
    SharedUser,
    ShareLevel,
    SharePermission,
    User,
    new_id,
    now_iso,
    parse_permission,
    parse_priority,
    reindex_cards,
    reindex_columns,
    unique_labels,
    validate_color,
    validate_title,
)

logger = structlog.get_logger()

# Optional card fields ``update_card`` can reset to None.
CLEARABLE_CARD_FIELDS = ("description", "due_date", "assignee", "icon")


@dataclass(frozen=True)
class Ack:
    """The backend accepted the change; ``value`` is what it returned."""

    value: Any = None


@dataclass(frozen=True)
class Failure:
    """The backend rejected the change.

    ``reconciled`` is the board fetched to replace local state after a failed
    structural change, or None when no re-fetch happened or it failed too.
    """

    error: TaskboardError
    reconciled: Board | None = None


SyncOutcome = Ack | Failure


@dataclass(frozen=True)
class MutationResult:
    """Locally applied value plus the pending remote confirmation."""

    applied: Any
    pending: "Future[SyncOutcome]"


def _as_error(error: Exception) -> TaskboardError:
    if isinstance(error, TaskboardError):
        return error
    wrapped = RemoteFailure(str(error) or type(error).__name__)
    wrapped.__cause__ = error
    return wrapped


def _without_label(board: Board, label_id: str) -> Board:
    if not any(label_id in card.labels for column in board.columns for card in column.cards):
        return board
    columns = tuple(
        replace(
            column,
            cards=tuple(
                replace(card, labels=tuple(lid for lid in card.labels if lid != label_id))
                if label_id in card.labels
                else card
                for card in column.cards
            ),
        )
        for column in board.columns
    )
    return replace(board, columns=columns)


class BoardStore:
    """In-memory board state for one acting user.

    Build one at startup, hand it to whatever needs it and call ``close()`` (or
    use it as a context manager) when done.
    """

    def __init__(self, backend: Backend, actor_id: str, executor: Executor | None = None) -> None:
        """Initialize the store.

        Args:
            backend: Remote side holding the authoritative data
            actor_id: User every operation is performed as
            executor: Executor for remote calls; defaults to a single worker thread
        """
        self.backend = backend
        self.actor_id = actor_id
        self.boards: tuple[Board, ...] = ()
        self.current_board: Board | None = None
        self.labels: tuple[Label, ...] = ()
        self.users: tuple[User, ...] = ()
        self.error: str | None = None
        self.drag_over_id: str | None = None
        self._lock = threading.RLock()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="taskboard-sync")
        logger.debug("Board store initialized", actor_id=actor_id)

    def close(self) -> None:
        """Wait for pending remote calls and release the sync worker."""
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def __enter__(self) -> "BoardStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ----- error slot -----

    def clear_error(self) -> None:
        self.error = None

    def _fail(self, error: Exception, action: str) -> TaskboardError:
        err = _as_error(error)
        self.error = str(err)
        logger.warning("Board store operation failed", action=action, error=self.error, kind=type(err).__name__)
        return err

    # ----- reads -----

    def _fetch(self, call: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run a backend read on the sync worker and wait for it.

        Backends are only ever used from that one thread, and a read queued
        behind pending writes sees their result.
        """
        return self._executor.submit(call, *args, **kwargs).result()

    def load_boards(self) -> tuple[Board, ...] | None:
        """Fetch the boards the actor owns or can see."""
        try:
            boards = self._fetch(self.backend.fetch_boards_for_user, self.actor_id)
        except Exception as e:
            self._fail(e, "load_boards")
            return None
        with self._lock:
            self.boards = tuple(boards)
        logger.info("Boards loaded", count=len(boards))
        return self.boards

    def load_board(self, board_id: str) -> Board | None:
        """Fetch a board and make it the current one."""
        try:
            board = self._fetch(self.backend.fetch_board, board_id)
        except Exception as e:
            self._fail(e, "load_board")
            return None
        with self._lock:
            self.current_board = board
            self._replace_listed(board)
        logger.info("Board loaded", board_id=board_id, columns=len(board.columns), cards=board.card_count())
        return board

    def load_labels(self) -> tuple[Label, ...] | None:
        try:
            labels = self._fetch(self.backend.list_labels, self.actor_id)
        except Exception as e:
            self._fail(e, "load_labels")
            return None
        with self._lock:
            self.labels = tuple(labels)
        return self.labels

    def load_users(self) -> tuple[User, ...] | None:
        """Fetch the users the actor can share with."""
        try:
            users = self._fetch(self.backend.list_users, excluding=self.actor_id)
        except Exception as e:
            self._fail(e, "load_users")
            return None
        with self._lock:
            self.users = tuple(users)
        return self.users

    def visible_board(self) -> Board | None:
        """The current board reduced to what the actor may see."""
        board = self.current_board
        if board is None:
            return None
        return permissions.visible_board(board, self.actor_id)

    # ----- shared plumbing -----

    def _replace_listed(self, board: Board) -> None:
        self.boards = tuple(board if b.id == board.id else b for b in self.boards)

    def _set_board(self, board: Board) -> None:
        """Swap in a new value for a board wherever it is held."""
        with self._lock:
            if self.current_board is not None and self.current_board.id == board.id:
                self.current_board = board
            self._replace_listed(board)

    def _require_board(self) -> Board:
        if self.current_board is None:
            raise NotFoundError("No board loaded")
        return self.current_board

    def _find_board(self, board_id: str) -> Board:
        if self.current_board is not None and self.current_board.id == board_id:
            return self.current_board
        for board in self.boards:
            if board.id == board_id:
                return board
        raise NotFoundError(f"Board not found: {board_id}")

    def _require_column(self, board: Board, column_id: str) -> Column:
        found = board.find_column(column_id)
        if found is None:
            raise NotFoundError(f"Column not found: {column_id}")
        return found[1]

    def _require_card(self, board: Board, card_id: str) -> tuple[Column, Card]:
        found = board.find_card(card_id)
        if found is None:
            raise NotFoundError(f"Card not found: {card_id}")
        return found

    def _commit_columns(self, board: Board, columns: Sequence[Column], action: str) -> MutationResult:
        """Apply a new column tree locally and queue the whole-board replace."""
        applied = replace(board, columns=tuple(columns), updated_at=now_iso())
        self._set_board(applied)
        logger.info("Structural change applied", action=action, board_id=board.id, cards=applied.card_count())
        pending = self._executor.submit(self._sync_columns, applied, action)
        return MutationResult(applied, pending)

    def _sync_columns(self, board: Board, action: str) -> SyncOutcome:
        try:
            confirmed = self.backend.update_board(board.id, columns=board.columns)
        except Exception as e:
            error = self._fail(e, action)
            return Failure(error, self._reconcile(board.id))
        logger.debug("Structural change confirmed", action=action, board_id=board.id)
        return Ack(confirmed)

    def _reconcile(self, board_id: str) -> Board | None:
        """Replace local state for a board with the backend's copy."""
        logger.info("Reconciling board", board_id=board_id)
        try:
            fresh = self.backend.fetch_board(board_id)
        except Exception as e:
            self._fail(e, "reconcile")
            return None
        self._set_board(fresh)
        return fresh

    def _submit_entity(
        self,
        action: str,
        remote: Callable[[], Any],
        on_success: Callable[[Any], None],
        on_failure: Callable[[], None],
    ) -> "Future[SyncOutcome]":
        """Queue a single-entity remote call with its confirm and undo steps."""

        def run() -> SyncOutcome:
            try:
                value = remote()
            except Exception as e:
                error = self._fail(e, action)
                with self._lock:
                    on_failure()
                return Failure(error)
            with self._lock:
                on_success(value)
            logger.debug("Change confirmed", action=action)
            return Ack(value)

        return self._executor.submit(run)

    def _refuse(self, error: TaskboardError, action: str) -> None:
        self._fail(error, action)
        return None

    # ----- boards -----

    def create_board(self, title: str, description: str | None = None) -> MutationResult | None:
        """Create a board; it shows up in ``boards`` under a temporary id until confirmed."""
        try:
            title = validate_title(title, "Board title")
        except ValidationError as e:
            return self._refuse(e, "create_board")

        with self._lock:
            owned = sum(1 for b in self.boards if b.user_id == self.actor_id)
            placeholder = Board(
                id=new_id("tmp"), user_id=self.actor_id, title=title, description=description, order=owned
            )
            self.boards = self.boards + (placeholder,)
        logger.info("Board created locally", board_id=placeholder.id, title=title)

        def confirm(board: Board) -> None:
            self.boards = tuple(board if b.id == placeholder.id else b for b in self.boards)

        def undo() -> None:
            self.boards = tuple(b for b in self.boards if b.id != placeholder.id)

        pending = self._submit_entity(
            "create_board", lambda: self.backend.create_board(title, description), confirm, undo
        )
        return MutationResult(placeholder, pending)

    def update_board(
        self, board_id: str, title: str | None = None, description: str | None = None
    ) -> MutationResult | None:
        """Rename a board or change its description."""
        try:
            with self._lock:
                previous = self._find_board(board_id)
                permissions.require_write(previous, self.actor_id, "board")
                changes: dict[str, Any] = {}
                if title is not None:
                    changes["title"] = validate_title(title, "Board title")
                if description is not None:
                    changes["description"] = description
                applied = replace(previous, **changes, updated_at=now_iso())
                self._set_board(applied)
        except TaskboardError as e:
            return self._refuse(e, "update_board")

        def confirm(board: Board) -> None:
            self._patch_board_fields(board_id, board.title, board.description, board.updated_at)

        def undo() -> None:
            self._patch_board_fields(board_id, previous.title, previous.description, previous.updated_at)

        pending = self._submit_entity(
            "update_board",
            lambda: self.backend.update_board(board_id, title=changes.get("title"), description=description),
            confirm,
            undo,
        )
        return MutationResult(applied, pending)

    def _patch_board_fields(self, board_id: str, title: str, description: str | None, updated_at: str) -> None:
        # Only the board's own fields; the column tree may have moved on meanwhile.
        try:
            board = self._find_board(board_id)
        except NotFoundError:
            return
        self._set_board(replace(board, title=title, description=description, updated_at=updated_at))

    def delete_board(self, board_id: str) -> MutationResult | None:
        """Delete a board the actor owns, with all of its columns and cards."""
        try:
            with self._lock:
                board = self._find_board(board_id)
                if not permissions.is_owner(board, self.actor_id):
                    raise AccessDeniedError("Only the owner can delete this board")
                index = next((i for i, b in enumerate(self.boards) if b.id == board_id), len(self.boards))
                was_current = self.current_board is not None and self.current_board.id == board_id
                self.boards = tuple(b for b in self.boards if b.id != board_id)
                if was_current:
                    self.current_board = None
        except TaskboardError as e:
            return self._refuse(e, "delete_board")
        logger.info("Board deleted locally", board_id=board_id)

        def undo() -> None:
            if not any(b.id == board_id for b in self.boards):
                self.boards = self.boards[:index] + (board,) + self.boards[index:]
            if was_current and self.current_board is None:
                self.current_board = board

        pending = self._submit_entity(
            "delete_board", lambda: self.backend.delete_board(board_id), lambda _: None, undo
        )
        return MutationResult(None, pending)

    # ----- columns -----

    def create_column(self, title: str, color: str = DEFAULT_COLUMN_COLOR) -> MutationResult | None:
        """Append a column to the current board."""
        try:
            with self._lock:
                board = self._require_board()
                permissions.require_write(board, self.actor_id, "board")
                column = Column(
                    id=new_id("col"),
                    board_id=board.id,
                    title=validate_title(title, "Column title"),
                    user_id=self.actor_id,
                    color=validate_color(color),
                    order=len(board.columns),
                )
                return self._commit_columns(board, reindex_columns(board.columns + (column,)), "create_column")
        except TaskboardError as e:
            return self._refuse(e, "create_column")

    def update_column(self, column_id: str, title: str | None = None, color: str | None = None) -> MutationResult | None:
        try:
            with self._lock:
                board = self._require_board()
                column = self._require_column(board, column_id)
                permissions.require_write(column, self.actor_id, "column")
                changes: dict[str, Any] = {}
                if title is not None:
                    changes["title"] = validate_title(title, "Column title")
                if color is not None:
                    changes["color"] = validate_color(color)
                updated = replace(column, **changes, updated_at=now_iso())
                columns = tuple(updated if c.id == column_id else c for c in board.columns)
                return self._commit_columns(board, columns, "update_column")
        except TaskboardError as e:
            return self._refuse(e, "update_column")

    def delete_column(self, column_id: str) -> MutationResult | None:
        """Remove a column together with its cards."""
        try:
            with self._lock:
                board = self._require_board()
                column = self._require_column(board, column_id)
                permissions.require_write(column, self.actor_id, "column")
                columns = reindex_columns(c for c in board.columns if c.id != column_id)
                return self._commit_columns(board, columns, "delete_column")
        except TaskboardError as e:
            return self._refuse(e, "delete_column")

    def move_column(self, column_id: str, new_index: int) -> MutationResult | None:
        """Move a column; None if it is missing or already there."""
        try:
            with self._lock:
                board = self._require_board()
                self._require_column(board, column_id)
                permissions.require_write(board, self.actor_id, "board")
                columns = reorder.move_column(board.columns, column_id, new_index)
                if columns is None:
                    return None
                return self._commit_columns(board, columns, "move_column")
        except TaskboardError as e:
            return self._refuse(e, "move_column")

    # ----- cards -----

    def create_card(
        self,
        column_id: str,
        title: str,
        description: str | None = None,
        priority: str = "medium",
        labels: Iterable[str] = (),
        due_date: str | None = None,
        assignee: str | None = None,
        icon: str | None = None,
    ) -> MutationResult | None:
        """Add a card at the top of a column."""
        try:
            with self._lock:
                board = self._require_board()
                column = self._require_column(board, column_id)
                permissions.require_write(column, self.actor_id, "column")
                card = Card(
                    id=new_id("card"),
                    column_id=column_id,
                    board_id=board.id,
                    title=validate_title(title, "Card title"),
                    user_id=self.actor_id,
                    description=description,
                    labels=unique_labels(labels),
                    priority=parse_priority(priority),
                    due_date=due_date,
                    assignee=assignee,
                    icon=icon,
                )
                updated = reindex_cards(replace(column, cards=(card,) + column.cards))
                columns = tuple(updated if c.id == column_id else c for c in board.columns)
                return self._commit_columns(board, columns, "create_card")
        except TaskboardError as e:
            return self._refuse(e, "create_card")

    def update_card(
        self,
        card_id: str,
        title: str | None = None,
        description: str | None = None,
        labels: Iterable[str] | None = None,
        priority: str | None = None,
        due_date: str | None = None,
        assignee: str | None = None,
        icon: str | None = None,
        clear: Iterable[str] = (),
    ) -> MutationResult | None:
        """Edit card content. Arguments left as None are not changed.

        ``clear`` names optional fields to empty, any of ``CLEARABLE_CARD_FIELDS``.
        A field both given and cleared ends up cleared.
        """
        try:
            cleared = tuple(clear)
            unknown = [name for name in cleared if name not in CLEARABLE_CARD_FIELDS]
            if unknown:
                raise ValidationError(
                    f"Cannot clear {', '.join(unknown)}. Clearable fields: {', '.join(CLEARABLE_CARD_FIELDS)}"
                )
            with self._lock:
                board = self._require_board()
                column, card = self._require_card(board, card_id)
                permissions.require_write(card, self.actor_id, "card")
                changes: dict[str, Any] = {
                    key: value
                    for key, value in (
                        ("description", description),
                        ("due_date", due_date),
                        ("assignee", assignee),
                        ("icon", icon),
                    )
                    if value is not None
                }
                if title is not None:
                    changes["title"] = validate_title(title, "Card title")
                if labels is not None:
                    changes["labels"] = unique_labels(labels)
                if priority is not None:
                    changes["priority"] = parse_priority(priority)
                changes.update((name, None) for name in cleared)
                updated = replace(card, **changes, updated_at=now_iso())
                new_column = replace(column, cards=tuple(updated if c.id == card_id else c for c in column.cards))
                columns = tuple(new_column if c.id == column.id else c for c in board.columns)
                return self._commit_columns(board, columns, "update_card")
        except TaskboardError as e:
            return self._refuse(e, "update_card")

    def delete_card(self, card_id: str) -> MutationResult | None:
        try:
            with self._lock:
                board = self._require_board()
                column, card = self._require_card(board, card_id)
                permissions.require_write(card, self.actor_id, "card")
                new_column = reindex_cards(replace(column, cards=tuple(c for c in column.cards if c.id != card_id)))
                columns = tuple(new_column if c.id == column.id else c for c in board.columns)
                return self._commit_columns(board, columns, "delete_card")
        except TaskboardError as e:
            return self._refuse(e, "delete_card")

    def move_card(
        self, card_id: str, from_column_id: str, to_column_id: str, destination_index: int
    ) -> MutationResult | None:
        """Move a card, see ``reorder.move_card`` for the index rules.

        Returns None without touching the error slot when the card or the
        destination has gone missing, or when nothing would change.
        """
        try:
            with self._lock:
                board = self._require_board()
                found = board.find_card(card_id)
                if found is None or found[0].id != from_column_id:
                    return None
                permissions.require_write(found[1], self.actor_id, "card")
                if to_column_id != from_column_id:
                    destination = board.find_column(to_column_id)
                    if destination is None:
                        return None
                    permissions.require_write(destination[1], self.actor_id, "column")
                columns = reorder.move_card(board.columns, card_id, from_column_id, to_column_id, destination_index)
                if columns is None:
                    return None
                return self._commit_columns(board, columns, "move_card")
        except TaskboardError as e:
            return self._refuse(e, "move_card")

    # ----- drag and drop -----

    def drag_over(self, over_id: str | None) -> None:
        """Remember the drop target currently hovered."""
        self.drag_over_id = over_id

    def drop(self, active_id: str, over_id: str | None) -> MutationResult | None:
        """Finish a drag of ``active_id`` onto ``over_id`` (None when cancelled)."""
        self.drag_over_id = None
        board = self.current_board
        if board is None:
            return None
        move = reorder.resolve_drop(board.columns, active_id, over_id)
        if isinstance(move, reorder.CardMove):
            return self.move_card(move.card_id, move.from_column_id, move.to_column_id, move.destination_index)
        if isinstance(move, reorder.ColumnMove):
            return self.move_column(move.column_id, move.new_index)
        return None

    # ----- labels -----

    def create_label(self, name: str, color: str) -> MutationResult | None:
        try:
            placeholder = Label(
                id=new_id("tmp"),
                name=validate_title(name, "Label name"),
                color=validate_color(color),
                user_id=self.actor_id,
            )
        except ValidationError as e:
            return self._refuse(e, "create_label")
        with self._lock:
            self.labels = self.labels + (placeholder,)

        def confirm(label: Label) -> None:
            self.labels = tuple(label if item.id == placeholder.id else item for item in self.labels)

        def undo() -> None:
            self.labels = tuple(item for item in self.labels if item.id != placeholder.id)

        pending = self._submit_entity(
            "create_label", lambda: self.backend.create_label(placeholder.name, placeholder.color), confirm, undo
        )
        return MutationResult(placeholder, pending)

    def _find_label(self, label_id: str) -> Label:
        for label in self.labels:
            if label.id == label_id:
                if label.user_id != self.actor_id:
                    raise AccessDeniedError("Access denied: cannot modify label")
                return label
        raise NotFoundError(f"Label not found: {label_id}")

    def update_label(self, label_id: str, name: str | None = None, color: str | None = None) -> MutationResult | None:
        try:
            with self._lock:
                previous = self._find_label(label_id)
                applied = replace(
                    previous,
                    name=validate_title(name, "Label name") if name is not None else previous.name,
                    color=validate_color(color) if color is not None else previous.color,
                )
                self.labels = tuple(applied if item.id == label_id else item for item in self.labels)
        except TaskboardError as e:
            return self._refuse(e, "update_label")

        def swap(label: Label) -> None:
            self.labels = tuple(label if item.id == label_id else item for item in self.labels)

        pending = self._submit_entity(
            "update_label",
            lambda: self.backend.update_label(label_id, name=applied.name, color=applied.color),
            swap,
            lambda: swap(previous),
        )
        return MutationResult(applied, pending)

    def delete_label(self, label_id: str) -> MutationResult | None:
        """Delete a label; once confirmed its id is stripped from every loaded card."""
        try:
            with self._lock:
                label = self._find_label(label_id)
                index = self.labels.index(label)
                self.labels = tuple(item for item in self.labels if item.id != label_id)
        except TaskboardError as e:
            return self._refuse(e, "delete_label")

        def strip(_: Any) -> None:
            if self.current_board is not None:
                self.current_board = _without_label(self.current_board, label_id)
            self.boards = tuple(_without_label(board, label_id) for board in self.boards)
            logger.debug("Label stripped from cards", label_id=label_id)

        def undo() -> None:
            if label not in self.labels:
                self.labels = self.labels[:index] + (label,) + self.labels[index:]

        pending = self._submit_entity("delete_label", lambda: self.backend.delete_label(label_id), strip, undo)
        return MutationResult(None, pending)

    # ----- sharing -----

    def _share_target(self, level: ShareLevel, entity_id: str, board_id: str | None) -> Board:
        if level == ShareLevel.BOARD:
            return self._find_board(board_id or entity_id)
        return self._require_board()

    def _change_shares(
        self,
        action: str,
        level: "ShareLevel | str",
        entity_id: str,
        target_user_id: str,
        permission: SharePermission | None,
        board_id: str | None,
    ) -> MutationResult | None:
        try:
            level = ShareLevel(level)
        except ValueError:
            return self._refuse(ValidationError(f"Invalid share level: {level!r}"), action)
        try:
            with self._lock:
                board = self._share_target(level, entity_id, board_id)
                entity = permissions.find_shareable(board, level, entity_id)
                permissions.require_owner(entity, self.actor_id, level.value)
                previous = tuple(entity.shared_with)
                if permission is None:
                    shared = permissions.without_share(previous, target_user_id)
                else:
                    if target_user_id == entity.user_id:
                        raise ValidationError("Cannot share with the owner")
                    shared = permissions.with_share(previous, target_user_id, permission)
                applied = permissions.set_shared_with(board, level, entity_id, shared)
                self._set_board(applied)
                column_id = board.find_card(entity_id)[0].id if level == ShareLevel.CARD else None
        except TaskboardError as e:
            return self._refuse(e, action)
        logger.info("Sharing changed locally", action=action, level=level.value, entity_id=entity_id)

        def restore(shared_with: Sequence[SharedUser]) -> None:
            try:
                current = self._find_board(board.id)
                self._set_board(permissions.set_shared_with(current, level, entity_id, shared_with))
            except NotFoundError:
                logger.debug("Shared entity gone before confirmation", entity_id=entity_id)

        def confirm(confirmed: Board) -> None:
            try:
                restore(permissions.find_shareable(confirmed, level, entity_id).shared_with)
            except NotFoundError:
                restore(shared)

        def remote() -> Board:
            if permission is None:
                return self.backend.unshare_entity(
                    level, entity_id, target_user_id, board_id=board.id, column_id=column_id
                )
            return self.backend.share_entity(
                level, entity_id, target_user_id, permission, board_id=board.id, column_id=column_id
            )

        pending = self._submit_entity(action, remote, confirm, lambda: restore(previous))
        return MutationResult(applied, pending)

    def share(
        self,
        level: "ShareLevel | str",
        entity_id: str,
        target_user_id: str,
        permission: "SharePermission | str" = SharePermission.READ,
        board_id: str | None = None,
    ) -> MutationResult | None:
        """Grant a user read or write access to a board, column or card.

        Sharing with somebody already listed overwrites their permission.
        Columns and cards are looked up on the current board; boards may be any
        loaded board (``board_id`` defaults to ``entity_id``).
        """
        try:
            permission = parse_permission(permission)
        except ValidationError as e:
            return self._refuse(e, "share")
        return self._change_shares("share", level, entity_id, target_user_id, permission, board_id)

    def unshare(
        self, level: "ShareLevel | str", entity_id: str, target_user_id: str, board_id: str | None = None
    ) -> MutationResult | None:
        """Revoke a user's access; unsharing someone not listed changes nothing."""
        return self._change_shares("unshare", level, entity_id, target_user_id, None, board_id)
