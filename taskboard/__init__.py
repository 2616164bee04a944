"""Taskboard - shared boards of ordered columns and cards."""

from taskboard.store import Ack, BoardStore, Failure, MutationResult

__all__ = ["Ack", "BoardStore", "Failure", "MutationResult"]
