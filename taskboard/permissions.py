"""Permission resolution for boards, columns and cards.

The same rule applies at every level and each level is resolved on its own:

- the owner may read and write,
- a ``write`` sharing entry grants read and write,
- a ``read`` sharing entry grants read only,
- anyone else has no access at that level.

Board access does not imply access to a column or card owned by somebody
else; those are hidden unless the actor is listed in the child's own sharing
list.
"""

from dataclasses import dataclass, replace
from typing import Protocol, Sequence

from taskboard.errors import AccessDeniedError, NotFoundError, ValidationError
from taskboard.models import Board, SharedUser, ShareLevel, SharePermission, parse_permission


class Shareable(Protocol):
    """Anything with an owner and a sharing list."""

    @property
    def user_id(self) -> str: ...

    @property
    def shared_with(self) -> Sequence[SharedUser]: ...


@dataclass(frozen=True)
class Access:
    """Resolved access of one actor to one entity."""

    read: bool = False
    write: bool = False


NO_ACCESS = Access()
READ_ONLY = Access(read=True)
READ_WRITE = Access(read=True, write=True)


def find_share(shared_with: Sequence[SharedUser], user_id: str) -> SharedUser | None:
    for entry in shared_with:
        if entry.user_id == user_id:
            return entry
    return None


def is_owner(entity: Shareable, actor_id: str) -> bool:
    return bool(actor_id) and entity.user_id == actor_id


def resolve_access(entity: Shareable, actor_id: str) -> Access:
    """Resolve what ``actor_id`` may do with ``entity``."""
    if is_owner(entity, actor_id):
        return READ_WRITE
    entry = find_share(entity.shared_with, actor_id)
    if entry is None:
        return NO_ACCESS
    if entry.permission == SharePermission.WRITE:
        return READ_WRITE
    return READ_ONLY


def can_read(entity: Shareable, actor_id: str) -> bool:
    return resolve_access(entity, actor_id).read


def can_write(entity: Shareable, actor_id: str) -> bool:
    return resolve_access(entity, actor_id).write


def require_read(entity: Shareable, actor_id: str, what: str = "entity") -> None:
    if not can_read(entity, actor_id):
        raise AccessDeniedError(f"Access denied: cannot view {what}")


def require_write(entity: Shareable, actor_id: str, what: str = "entity") -> None:
    if not can_write(entity, actor_id):
        raise AccessDeniedError(f"Access denied: cannot modify {what}")


def require_owner(entity: Shareable, actor_id: str, what: str = "entity") -> None:
    if not is_owner(entity, actor_id):
        raise AccessDeniedError(f"Only the owner can change sharing of this {what}")


def with_share(
    shared_with: Sequence[SharedUser], user_id: str, permission: "SharePermission | str"
) -> tuple[SharedUser, ...]:
    """Grant ``permission`` to ``user_id``, overwriting an existing entry in place."""
    if not user_id:
        raise ValidationError("User ID is required")
    entry = SharedUser(user_id, parse_permission(permission))
    if find_share(shared_with, user_id) is None:
        return tuple(shared_with) + (entry,)
    return tuple(entry if s.user_id == user_id else s for s in shared_with)


def without_share(shared_with: Sequence[SharedUser], user_id: str) -> tuple[SharedUser, ...]:
    """Remove ``user_id`` from a sharing list; absent users are ignored."""
    return tuple(s for s in shared_with if s.user_id != user_id)


def find_shareable(board: Board, level: ShareLevel, entity_id: str) -> Shareable:
    """Locate the board, column or card a sharing operation targets.

    Raises:
        NotFoundError: No entity with that id at that level
    """
    if level == ShareLevel.BOARD:
        if board.id != entity_id:
            raise NotFoundError(f"Board not found: {entity_id}")
        return board
    if level == ShareLevel.COLUMN:
        found_column = board.find_column(entity_id)
        if found_column is None:
            raise NotFoundError(f"Column not found: {entity_id}")
        return found_column[1]
    found_card = board.find_card(entity_id)
    if found_card is None:
        raise NotFoundError(f"Card not found: {entity_id}")
    return found_card[1]


def set_shared_with(
    board: Board, level: ShareLevel, entity_id: str, shared_with: Sequence[SharedUser]
) -> Board:
    """Return ``board`` with the sharing list of one entity replaced."""
    find_shareable(board, level, entity_id)
    shared = tuple(shared_with)
    if level == ShareLevel.BOARD:
        return replace(board, shared_with=shared)
    if level == ShareLevel.COLUMN:
        columns = tuple(
            replace(column, shared_with=shared) if column.id == entity_id else column for column in board.columns
        )
        return replace(board, columns=columns)
    columns = tuple(
        replace(
            column,
            cards=tuple(replace(card, shared_with=shared) if card.id == entity_id else card for card in column.cards),
        )
        for column in board.columns
    )
    return replace(board, columns=columns)


def visible_board(board: Board, actor_id: str) -> Board | None:
    """Return the part of ``board`` that ``actor_id`` is allowed to see.

    Returns None when the actor cannot read the board itself. Columns and cards
    the actor cannot read are removed; their ``order`` fields are left as they
    are since this is a view, not a mutation.
    """
    if not can_read(board, actor_id):
        return None
    columns = tuple(
        replace(column, cards=tuple(card for card in column.cards if can_read(card, actor_id)))
        for column in board.columns
        if can_read(column, actor_id)
    )
    return replace(board, columns=columns)
