"""Label commands for taskboard CLI."""

from cyclopts import App

label_app = App(name="label", help="Manage labels")


@label_app.command(name="list")
def list_labels() -> None:
    """List the labels you can put on cards."""
    from taskboard.cli import fail, get_store

    with get_store() as store:
        labels = store.load_labels()
        if labels is None:
            fail(store.error or "Failed to load labels")
        for label in labels:
            owner = "" if label.user_id == store.actor_id else f" (from {label.user_id})"
            print(f"  {label.id}: {label.name} {label.color}{owner}")


@label_app.command
def add(name: str, color: str) -> None:
    """Create a label."""
    from taskboard.cli import finish, get_store

    with get_store() as store:
        store.load_labels()
        finish(store, store.create_label(name, color), f"Created label {name!r}")


@label_app.command
def edit(label_id: str, name: str | None = None, color: str | None = None) -> None:
    """Rename or recolor one of your labels."""
    from taskboard.cli import finish, get_store

    with get_store() as store:
        store.load_labels()
        finish(store, store.update_label(label_id, name=name, color=color), f"Updated label {label_id}")


@label_app.command
def remove(label_id: str) -> None:
    """Delete one of your labels. Cards keep the id until they are next saved."""
    from taskboard.cli import finish, get_store

    with get_store() as store:
        store.load_labels()
        finish(store, store.delete_label(label_id), f"Removed label {label_id}")
