"""Column commands for taskboard CLI."""

from cyclopts import App

from taskboard.models import DEFAULT_COLUMN_COLOR

column_app = App(name="column", help="Manage the columns of a board")


@column_app.command
def add(board_id: str, title: str, color: str = DEFAULT_COLUMN_COLOR) -> None:
    """Append a column to a board."""
    from taskboard.cli import finish, get_store, open_board

    with get_store() as store:
        open_board(store, board_id)
        finish(store, store.create_column(title, color), f"Added column {title!r}")


@column_app.command
def rename(board_id: str, column_id: str, title: str | None = None, color: str | None = None) -> None:
    """Change a column's title or color."""
    from taskboard.cli import finish, get_store, open_board

    with get_store() as store:
        open_board(store, board_id)
        finish(store, store.update_column(column_id, title=title, color=color), f"Updated column {column_id}")


@column_app.command
def remove(board_id: str, column_id: str) -> None:
    """Delete a column and every card in it."""
    from taskboard.cli import finish, get_store, open_board

    with get_store() as store:
        open_board(store, board_id)
        finish(store, store.delete_column(column_id), f"Removed column {column_id}")


@column_app.command
def move(board_id: str, column_id: str, index: int) -> None:
    """Move a column to a new position (0 is leftmost)."""
    from taskboard.cli import finish, get_store, open_board

    with get_store() as store:
        open_board(store, board_id)
        finish(store, store.move_column(column_id, index), f"Moved column {column_id} to position {index}")
