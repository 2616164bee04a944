"""Data models for taskboard.

Every entity is an immutable value. Mutations build a new value with
``dataclasses.replace`` so an optimistic state can be dropped and replaced
wholesale when a remote write fails.

The ``from_dict``/``to_dict`` pairs speak the camelCase document format used by
the persisted collections and the REST API. Decoding is lenient: missing
fields are filled with defaults and legacy sharing entries are migrated.
"""

import re
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable

from taskboard.errors import ValidationError

DEFAULT_COLUMN_COLOR = "#6b7280"

_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


class SharePermission(str, Enum):
    """Access granted by a sharing entry."""

    READ = "read"
    WRITE = "write"


class Priority(str, Enum):
    """Card priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ShareLevel(str, Enum):
    """Hierarchy level a sharing list is attached to."""

    BOARD = "board"
    COLUMN = "column"
    CARD = "card"


def now_iso() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


def new_id(prefix: str) -> str:
    """Generate a fresh identifier such as ``card-3f2a9c0d1b7e``."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def validate_title(title: str | None, what: str = "Title") -> str:
    """Return the stripped title or raise ValidationError if it is blank."""
    if title is None or not str(title).strip():
        raise ValidationError(f"{what} is required")
    return str(title).strip()


def validate_color(color: str | None) -> str:
    """Return the color if it is a ``#rgb`` or ``#rrggbb`` hex code."""
    if not color or not _COLOR_RE.match(color):
        raise ValidationError(f"Invalid color: {color!r} (expected a hex code like #3b82f6)")
    return color


def parse_permission(value: "str | SharePermission") -> SharePermission:
    """Coerce a permission value, raising ValidationError when it is unknown."""
    try:
        return SharePermission(value)
    except ValueError as e:
        raise ValidationError(f'Invalid permission {value!r}. Must be "read" or "write"') from e


def parse_priority(value: "str | Priority") -> Priority:
    """Coerce a priority value, raising ValidationError when it is unknown."""
    try:
        return Priority(value)
    except ValueError as e:
        allowed = ", ".join(p.value for p in Priority)
        raise ValidationError(f"Invalid priority {value!r}. Must be one of: {allowed}") from e


def unique_labels(labels: Iterable[str]) -> tuple[str, ...]:
    """Drop duplicate label ids while keeping first-seen order."""
    return tuple(dict.fromkeys(labels))


@dataclass(frozen=True)
class SharedUser:
    """One entry of a sharing list."""

    user_id: str
    permission: SharePermission = SharePermission.READ

    def to_dict(self) -> dict[str, str]:
        return {"userId": self.user_id, "permission": self.permission.value}


def parse_shared_with(raw: Any) -> tuple[SharedUser, ...]:
    """Normalize a persisted sharing list.

    Bare user id strings (legacy format) become read entries, malformed entries
    are dropped and a repeated user id keeps its first position but takes the
    last permission seen.
    """
    if not isinstance(raw, list):
        return ()
    entries: dict[str, SharePermission] = {}
    for item in raw:
        if isinstance(item, str) and item:
            entries[item] = SharePermission.READ
        elif isinstance(item, dict) and item.get("userId") and item.get("permission") in ("read", "write"):
            entries[item["userId"]] = SharePermission(item["permission"])
    return tuple(SharedUser(user_id, permission) for user_id, permission in entries.items())


@dataclass(frozen=True)
class Card:
    """A single task within a column."""

    id: str
    column_id: str
    board_id: str
    title: str
    user_id: str
    description: str | None = None
    labels: tuple[str, ...] = ()
    priority: Priority = Priority.MEDIUM
    due_date: str | None = None
    assignee: str | None = None
    icon: str | None = None
    order: int = 0
    shared_with: tuple[SharedUser, ...] = ()
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        column_id: str | None = None,
        board_id: str | None = None,
        owner: str | None = None,
        order: int | None = None,
    ) -> "Card":
        """Decode a card document, filling defaults from its parents."""
        timestamp = now_iso()
        try:
            priority = Priority(data.get("priority") or Priority.MEDIUM.value)
        except ValueError:
            priority = Priority.MEDIUM
        return cls(
            id=str(data.get("id") or new_id("card")),
            column_id=column_id or data.get("columnId") or "",
            board_id=board_id or data.get("boardId") or "",
            title=data.get("title") or "Untitled Card",
            user_id=data.get("userId") or owner or "",
            description=data.get("description"),
            labels=unique_labels(data.get("labels") or []),
            priority=priority,
            due_date=data.get("dueDate"),
            assignee=data.get("assignee"),
            icon=data.get("icon"),
            order=order if order is not None else int(data.get("order") or 0),
            shared_with=parse_shared_with(data.get("sharedWith")),
            created_at=data.get("createdAt") or timestamp,
            updated_at=data.get("updatedAt") or timestamp,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "columnId": self.column_id,
            "boardId": self.board_id,
            "title": self.title,
            "labels": list(self.labels),
            "priority": self.priority.value,
            "order": self.order,
            "userId": self.user_id,
            "sharedWith": [s.to_dict() for s in self.shared_with],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        for key, value in (
            ("description", self.description),
            ("dueDate", self.due_date),
            ("assignee", self.assignee),
            ("icon", self.icon),
        ):
            if value is not None:
                result[key] = value
        return result


@dataclass(frozen=True)
class Column:
    """An ordered list of cards within a board."""

    id: str
    board_id: str
    title: str
    user_id: str
    color: str = DEFAULT_COLUMN_COLOR
    order: int = 0
    cards: tuple[Card, ...] = ()
    shared_with: tuple[SharedUser, ...] = ()
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    def find_card(self, card_id: str) -> tuple[int, Card] | None:
        """Return ``(index, card)`` for a card in this column, or None."""
        for index, card in enumerate(self.cards):
            if card.id == card_id:
                return index, card
        return None

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        board_id: str | None = None,
        owner: str | None = None,
        order: int | None = None,
    ) -> "Column":
        """Decode a column document; cards inherit the column owner when they have none."""
        timestamp = now_iso()
        column_id = str(data.get("id") or new_id("col"))
        resolved_board = board_id or data.get("boardId") or ""
        user_id = data.get("userId") or owner or ""
        return cls(
            id=column_id,
            board_id=resolved_board,
            title=data.get("title") or "Untitled Column",
            user_id=user_id,
            color=data.get("color") or DEFAULT_COLUMN_COLOR,
            order=order if order is not None else int(data.get("order") or 0),
            cards=tuple(
                Card.from_dict(card, column_id=column_id, board_id=resolved_board, owner=user_id, order=index)
                for index, card in enumerate(data.get("cards") or [])
            ),
            shared_with=parse_shared_with(data.get("sharedWith")),
            created_at=data.get("createdAt") or timestamp,
            updated_at=data.get("updatedAt") or timestamp,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "boardId": self.board_id,
            "title": self.title,
            "color": self.color,
            "order": self.order,
            "cards": [card.to_dict() for card in self.cards],
            "userId": self.user_id,
            "sharedWith": [s.to_dict() for s in self.shared_with],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class Board:
    """Top-level container of ordered columns."""

    id: str
    user_id: str
    title: str
    description: str | None = None
    columns: tuple[Column, ...] = ()
    shared_with: tuple[SharedUser, ...] = ()
    order: int = 0
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    def find_column(self, column_id: str) -> tuple[int, Column] | None:
        """Return ``(index, column)`` for a column of this board, or None."""
        for index, column in enumerate(self.columns):
            if column.id == column_id:
                return index, column
        return None

    def find_card(self, card_id: str) -> tuple[Column, Card] | None:
        """Return ``(column, card)`` for a card anywhere on the board, or None."""
        for column in self.columns:
            found = column.find_card(card_id)
            if found is not None:
                return column, found[1]
        return None

    def card_count(self) -> int:
        return sum(len(column.cards) for column in self.columns)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Board":
        """Decode a board document, normalizing the whole column/card tree."""
        timestamp = now_iso()
        board_id = str(data.get("id") or new_id("board"))
        user_id = data.get("userId") or ""
        return cls(
            id=board_id,
            user_id=user_id,
            title=data.get("title") or "Untitled Board",
            description=data.get("description"),
            columns=columns_from_list(data.get("columns") or [], board_id, user_id),
            shared_with=parse_shared_with(data.get("sharedWith")),
            order=int(data.get("order") or 0),
            created_at=data.get("createdAt") or timestamp,
            updated_at=data.get("updatedAt") or timestamp,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "columns": columns_to_list(self.columns),
            "sharedWith": [s.to_dict() for s in self.shared_with],
            "order": self.order,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.description is not None:
            result["description"] = self.description
        return result


def columns_from_list(raw: list[dict[str, Any]], board_id: str, owner: str) -> tuple[Column, ...]:
    """Decode a columns array; ``order`` fields are re-derived from position."""
    return tuple(
        Column.from_dict(column, board_id=board_id, owner=owner, order=index) for index, column in enumerate(raw)
    )


def columns_to_list(columns: Iterable[Column]) -> list[dict[str, Any]]:
    return [column.to_dict() for column in columns]


@dataclass(frozen=True)
class Label:
    """User-scoped tag referenced by id from cards."""

    id: str
    name: str
    color: str
    user_id: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Label":
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            color=data.get("color") or DEFAULT_COLUMN_COLOR,
            user_id=data.get("userId") or "",
        )

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "color": self.color, "userId": self.user_id}


@dataclass(frozen=True)
class User:
    """A user that boards can be shared with."""

    id: str
    username: str
    email: str | None = None
    created_at: str = field(default_factory=now_iso)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        return cls(
            id=str(data["id"]),
            username=data.get("username", ""),
            email=data.get("email"),
            created_at=data.get("createdAt") or now_iso(),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"id": self.id, "username": self.username, "createdAt": self.created_at}
        if self.email is not None:
            result["email"] = self.email
        return result


def reindex_cards(column: Column) -> Column:
    """Set each card's ``order`` (and ``column_id``) to match its array position."""
    cards = tuple(
        card if card.order == index and card.column_id == column.id else replace(card, order=index, column_id=column.id)
        for index, card in enumerate(column.cards)
    )
    return replace(column, cards=cards)


def reindex_columns(columns: Iterable[Column]) -> tuple[Column, ...]:
    """Set each column's ``order`` to match its array position."""
    return tuple(column if column.order == index else replace(column, order=index) for index, column in enumerate(columns))
