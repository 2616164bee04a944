"""Card commands for taskboard CLI."""

from cyclopts import App

card_app = App(name="card", help="Manage cards")


def _split(labels: str | None) -> list[str] | None:
    if labels is None:
        return None
    return [label.strip() for label in labels.split(",") if label.strip()]


@card_app.command
def add(
    board_id: str,
    column_id: str,
    title: str,
    description: str | None = None,
    priority: str = "medium",
    labels: str = "",
    due: str | None = None,
) -> None:
    """Add a card to the top of a column.

    Args:
        board_id: Board holding the column
        column_id: Column to add to
        title: Card title
        description: Optional description
        priority: low, medium, high or urgent
        labels: Comma separated label ids
        due: Due date
    """
    from taskboard.cli import finish, get_store, open_board

    with get_store() as store:
        open_board(store, board_id)
        result = store.create_card(
            column_id, title, description=description, priority=priority, labels=_split(labels) or [], due_date=due
        )
        finish(store, result, f"Added card {title!r}")


@card_app.command
def edit(
    board_id: str,
    card_id: str,
    title: str | None = None,
    description: str | None = None,
    priority: str | None = None,
    labels: str | None = None,
    due: str | None = None,
    assignee: str | None = None,
    clear: str | None = None,
) -> None:
    """Edit a card. Only the given fields change.

    Args:
        clear: Comma separated fields to empty: description, due_date, assignee or icon
    """
    from taskboard.cli import finish, get_store, open_board

    with get_store() as store:
        open_board(store, board_id)
        result = store.update_card(
            card_id,
            title=title,
            description=description,
            priority=priority,
            labels=_split(labels),
            due_date=due,
            assignee=assignee,
            clear=_split(clear) or (),
        )
        finish(store, result, f"Updated card {card_id}")


@card_app.command
def remove(board_id: str, card_id: str) -> None:
    """Delete a card."""
    from taskboard.cli import finish, get_store, open_board

    with get_store() as store:
        open_board(store, board_id)
        finish(store, store.delete_card(card_id), f"Removed card {card_id}")


@card_app.command
def move(board_id: str, card_id: str, to_column_id: str, index: int | None = None) -> None:
    """Move a card to another column, or within its own.

    Without an index the card goes to the end of the column. Within one column
    the index is the position of the card it should land in front of.
    """
    from taskboard.cli import fail, finish, get_store, open_board

    with get_store() as store:
        board = open_board(store, board_id)
        found = board.find_card(card_id)
        if found is None:
            fail(f"Card not found: {card_id}")
        destination = board.find_column(to_column_id)
        if destination is None:
            fail(f"Column not found: {to_column_id}")
        if index is None:
            index = len(destination[1].cards)
        result = store.move_card(card_id, found[0].id, to_column_id, index)
        finish(store, result, f"Moved card {card_id}")


@card_app.command
def drop(board_id: str, card_id: str, target_id: str) -> None:
    """Drop a card onto another card or a column, as a drag and drop would."""
    from taskboard.cli import finish, get_store, open_board

    with get_store() as store:
        open_board(store, board_id)
        finish(store, store.drop(card_id, target_id), f"Dropped card {card_id} on {target_id}")
