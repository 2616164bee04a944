"""Backend interface for board persistence.

A backend is the remote side of the store: it holds the authoritative copy of
boards, labels and users. Implementations are bound to the acting user when
they are constructed and enforce access the way a server would.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from taskboard.models import Board, Column, Label, ShareLevel, SharePermission, User


class Backend(ABC):
    """Abstract base class for taskboard backends."""

    @abstractmethod
    def fetch_board(self, board_id: str) -> Board:
        """Fetch a board with its full column/card tree.

        Raises:
            NotFoundError: The board does not exist
            AccessDeniedError: The acting user cannot view it
        """
        pass

    @abstractmethod
    def fetch_boards_for_user(self, user_id: str) -> list[Board]:
        """List boards the user owns or that are shared with them."""
        pass

    @abstractmethod
    def create_board(self, title: str, description: str | None = None) -> Board:
        """Create a board owned by the acting user."""
        pass

    @abstractmethod
    def update_board(
        self,
        board_id: str,
        title: str | None = None,
        description: str | None = None,
        columns: Sequence[Column] | None = None,
    ) -> Board:
        """Update a board.

        ``columns`` replaces the whole column/card tree; it is how every
        structural change is persisted.
        """
        pass

    @abstractmethod
    def delete_board(self, board_id: str) -> None:
        """Delete a board and everything on it."""
        pass

    @abstractmethod
    def share_entity(
        self,
        level: ShareLevel,
        entity_id: str,
        target_user_id: str,
        permission: SharePermission,
        board_id: str,
        column_id: str | None = None,
    ) -> Board:
        """Grant a user access to a board, column or card.

        Args:
            level: Which kind of entity ``entity_id`` names
            entity_id: Board, column or card id
            target_user_id: User being granted access
            permission: Read or write
            board_id: Board the entity belongs to (equal to entity_id for boards)
            column_id: Column holding the card, for card-level shares

        Returns:
            The updated board the entity belongs to
        """
        pass

    @abstractmethod
    def unshare_entity(
        self,
        level: ShareLevel,
        entity_id: str,
        target_user_id: str,
        board_id: str,
        column_id: str | None = None,
    ) -> Board:
        """Revoke a user's access to a board, column or card; returns the updated board."""
        pass

    @abstractmethod
    def list_labels(self, user_id: str) -> list[Label]:
        """List labels available to a user."""
        pass

    @abstractmethod
    def create_label(self, name: str, color: str) -> Label:
        """Create a label owned by the acting user."""
        pass

    @abstractmethod
    def update_label(self, label_id: str, name: str | None = None, color: str | None = None) -> Label:
        """Update a label."""
        pass

    @abstractmethod
    def delete_label(self, label_id: str) -> None:
        """Delete a label. Cards referencing it are left untouched."""
        pass

    @abstractmethod
    def list_users(self, excluding: str | None = None) -> list[User]:
        """List users, optionally leaving one out (the acting user, for share pickers)."""
        pass
