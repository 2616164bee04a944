"""Sharing and user commands for taskboard CLI."""

from typing import Sequence

from cyclopts import App

from taskboard.models import SharedUser, ShareLevel

share_app = App(name="share", help="Share boards, columns and cards with other users")
user_app = App(name="user", help="Manage users")


def _entity_id(board_id: str, column: str | None, card: str | None) -> tuple[ShareLevel, str]:
    if card:
        return ShareLevel.CARD, card
    if column:
        return ShareLevel.COLUMN, column
    return ShareLevel.BOARD, board_id


@share_app.command(name="add")
def add_share(
    board_id: str,
    user_id: str,
    permission: str = "read",
    column: str | None = None,
    card: str | None = None,
) -> None:
    """Share a board, or one of its columns or cards, with a user.

    Args:
        board_id: Board to share, or holding the column/card
        user_id: User to share with
        permission: read or write
        column: Share this column instead of the whole board
        card: Share this card instead of the whole board
    """
    from taskboard.cli import finish, get_store, open_board

    level, entity_id = _entity_id(board_id, column, card)
    with get_store() as store:
        open_board(store, board_id)
        result = store.share(level, entity_id, user_id, permission, board_id=board_id)
        finish(store, result, f"Shared {level.value} {entity_id} with {user_id} ({permission})")


@share_app.command(name="remove")
def remove_share(board_id: str, user_id: str, column: str | None = None, card: str | None = None) -> None:
    """Stop sharing a board, column or card with a user."""
    from taskboard.cli import finish, get_store, open_board

    level, entity_id = _entity_id(board_id, column, card)
    with get_store() as store:
        open_board(store, board_id)
        result = store.unshare(level, entity_id, user_id, board_id=board_id)
        finish(store, result, f"Unshared {level.value} {entity_id} from {user_id}")


@share_app.command(name="list")
def list_shares(board_id: str) -> None:
    """List who has access to a board and its columns and cards."""
    from taskboard.cli import get_store, open_board

    with get_store() as store:
        board = open_board(store, board_id)

        def describe(kind: str, entity_id: str, title: str, owner: str, shared_with: Sequence[SharedUser]) -> None:
            entries = ", ".join(f"{s.user_id}:{s.permission.value}" for s in shared_with) or "-"
            print(f"  {kind} {entity_id} ({title}), owner {owner}: {entries}")

        print(f"Sharing for board {board.id}:\n")
        describe("board", board.id, board.title, board.user_id, board.shared_with)
        for column in board.columns:
            if column.shared_with:
                describe("column", column.id, column.title, column.user_id, column.shared_with)
            for card in column.cards:
                if card.shared_with:
                    describe("card", card.id, card.title, card.user_id, card.shared_with)


@user_app.command(name="list")
def list_users() -> None:
    """List users you can share with."""
    from taskboard.cli import fail, get_store

    with get_store() as store:
        users = store.load_users()
        if users is None:
            fail(store.error or "Failed to load users")
        if not users:
            print("No other users")
        for user in users:
            print(f"  {user.id}: {user.username}")


@user_app.command(name="add")
def add_user(username: str, email: str | None = None) -> None:
    """Register a user in the file backend's data directory.

    Board servers register users through their own sign-up, so this only works
    with the file backend.
    """
    from taskboard.backends import JsonFileBackend
    from taskboard.cli import fail
    from taskboard.config import get_config
    from taskboard.errors import TaskboardError

    config = get_config()
    backend_type = config.get("backend")
    if backend_type != "file":
        fail(f"Users can only be added with the file backend (configured: {backend_type})")
    backend = JsonFileBackend(config.data_dir(), actor_id=config.get("user"))
    try:
        user = backend.create_user(username, email)
    except TaskboardError as e:
        fail(str(e))
    print(f"Created user {user.id}: {user.username}")
