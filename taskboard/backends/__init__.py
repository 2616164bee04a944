"""Backend implementations."""

from taskboard.backends.http import HttpBackend
from taskboard.backends.json_file import JsonFileBackend

__all__ = ["HttpBackend", "JsonFileBackend"]
