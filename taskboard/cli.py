"""CLI for taskboard."""

from typing import Annotated, Literal, NoReturn

import structlog
from cyclopts import App, Parameter

from taskboard.backend import Backend
from taskboard.backends import HttpBackend, JsonFileBackend
from taskboard.card_commands import card_app
from taskboard.column_commands import column_app
from taskboard.config import get_config
from taskboard.config_commands import config_app
from taskboard.label_commands import label_app
from taskboard.models import Board
from taskboard.share_commands import share_app, user_app
from taskboard.store import BoardStore, Failure, MutationResult

logger = structlog.get_logger()

app = App(
    help="Taskboard - Shared boards of ordered columns and cards",
)

app.command(column_app)
app.command(card_app)
app.command(label_app)
app.command(share_app)
app.command(user_app)
app.command(config_app)


def configure_logging(log_level: str) -> None:
    """Configure structlog with the specified log level."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(min_level=log_level.lower()))


def get_backend(actor_id: str | None) -> Backend:
    """Get the configured backend."""
    config = get_config()
    backend_type = config.get("backend")

    if backend_type == "file":
        return JsonFileBackend(data_dir=config.data_dir(), actor_id=actor_id)
    elif backend_type == "http":
        base_url = config.get("http.base_url")
        if not base_url:
            raise ValueError("Server URL not configured. Set it using:\n  tb config set http.base_url <url>")
        return HttpBackend(
            base_url=base_url,
            session_token=config.get("http.session_token"),
            timeout=float(config.get("http.timeout")),
        )
    else:
        raise ValueError(f"Unknown backend: {backend_type}")


def get_store() -> BoardStore:
    """Build the store for the configured user and backend."""
    config = get_config()
    actor_id = config.get("user")
    if not actor_id:
        raise ValueError("Acting user not configured. Set it using:\n  tb config set user <user-id>")
    return BoardStore(get_backend(actor_id), actor_id)


def fail(message: str) -> NoReturn:
    print(f"Error: {message}")
    raise SystemExit(1)


def finish(store: BoardStore, result: MutationResult | None, message: str) -> None:
    """Wait for a mutation to be confirmed and report the outcome."""
    if result is None:
        if store.error:
            fail(store.error)
        print("Nothing to change")
        return
    outcome = result.pending.result()
    if isinstance(outcome, Failure):
        fail(str(outcome.error))
    print(message)


def open_board(store: BoardStore, board_id: str) -> Board:
    """Load a board into the store or exit with the error."""
    board = store.load_board(board_id)
    if board is None:
        fail(store.error or f"Board not found: {board_id}")
    return board


@app.command
def boards() -> None:
    """List boards you own or that are shared with you."""
    with get_store() as store:
        listed = store.load_boards()
        if listed is None:
            fail(store.error or "Failed to load boards")
        if not listed:
            print("No boards")
            return
        print(f"Found {len(listed)} board(s):\n")
        for board in listed:
            marker = "●" if board.user_id == store.actor_id else "○"
            print(f"{marker} {board.id}: {board.title} ({len(board.columns)} columns, {board.card_count()} cards)")


@app.command
def create(title: str, description: str | None = None) -> None:
    """Create a new board."""
    with get_store() as store:
        result = store.create_board(title, description)
        finish(store, result, "Created board")
        if result is not None:
            created = result.pending.result().value
            print(f"{created.id}: {created.title}")


@app.command
def show(board_id: str) -> None:
    """Show a board with the columns and cards you can see."""
    with get_store() as store:
        open_board(store, board_id)
        store.load_labels()
        board = store.visible_board()
        if board is None:
            fail("Access denied")
        label_names = {label.id: label.name for label in store.labels}

        print(f"Board: {board.id}")
        print(f"Title: {board.title}")
        if board.description:
            print(f"Description: {board.description}")
        if board.shared_with:
            print("Shared with: " + ", ".join(f"{s.user_id}:{s.permission.value}" for s in board.shared_with))
        for column in board.columns:
            print(f"\n[{column.order}] {column.title} ({column.id}, {column.color})")
            if not column.cards:
                print("    (empty)")
            for card in column.cards:
                labels = [label_names[lid] for lid in card.labels if lid in label_names]
                labels_str = " [" + ", ".join(labels) + "]" if labels else ""
                print(f"    {card.order}. {card.id}: {card.title} ({card.priority.value}){labels_str}")


@app.command
def rename(board_id: str, title: str | None = None, description: str | None = None) -> None:
    """Change a board's title or description."""
    with get_store() as store:
        open_board(store, board_id)
        finish(store, store.update_board(board_id, title=title, description=description), f"Updated board {board_id}")


@app.command
def delete(board_id: str) -> None:
    """Delete a board with all of its columns and cards."""
    with get_store() as store:
        open_board(store, board_id)
        finish(store, store.delete_board(board_id), f"Deleted board {board_id}")


@app.meta.default
def main(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "critical",
) -> None:
    """Main entry point with global options."""
    configure_logging(log_level)
    app(tokens)


if __name__ == "__main__":
    app.meta()
