"""Configuration commands for taskboard CLI."""

from cyclopts import App

from taskboard.config import KEYS, get_config

config_app = App(name="config", help="Manage configuration")


def _scope(global_: bool) -> str:
    return "global" if global_ else "local"


@config_app.command
def set(key: str, value: str, global_: bool = False) -> None:
    """Set a configuration setting.

    Args:
        key: One of backend, user, file.data_dir, http.base_url, http.session_token, http.timeout
        value: Configuration value
        global_: Write to ~/.taskboard instead of ./.taskboard
    """
    from taskboard.cli import fail

    try:
        stored = get_config(use_global=global_).set(key, value)
    except ValueError as e:
        fail(str(e))
    shown = "<hidden>" if key == "http.session_token" else stored
    print(f"Set {key} = {shown} ({_scope(global_)})")


@config_app.command
def unset(key: str, global_: bool = False) -> None:
    """Remove a setting from the local (or global) config file."""
    if get_config(use_global=global_).unset(key):
        print(f"Unset {key} ({_scope(global_)})")
    else:
        print(f"{key} is not set in {_scope(global_)} config")


@config_app.command
def get(key: str, global_: bool = False) -> None:
    """Show the effective value of a setting and where it comes from."""
    config = get_config(use_global=global_)
    origin = config.source(key)
    if origin is None:
        print(f"{key} is not set")
        return
    print(f"{key} = {config.get(key)} ({origin})")


@config_app.command(name="list")
def list_config(global_: bool = False, defaults: bool = False) -> None:
    """List configuration settings.

    Args:
        global_: Only show the global config file
        defaults: Include built-in defaults for keys that are not set
    """
    settings = get_config(use_global=global_).list(include_defaults=defaults)
    if not settings:
        print(f"No {_scope(global_)} configuration settings")
        return
    for key, value in settings.items():
        marker = "" if key in KEYS else "  (unknown key)"
        print(f"{key} = {value}{marker}")
