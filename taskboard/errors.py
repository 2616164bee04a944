"""Error taxonomy shared by the store, the permission resolver and the backends."""


class TaskboardError(Exception):
    """Base class for all taskboard errors."""


class NotFoundError(TaskboardError):
    """A board, column, card, label or user does not exist."""


class AccessDeniedError(TaskboardError):
    """The acting user lacks the permission required for an operation."""


class ValidationError(TaskboardError, ValueError):
    """Input rejected before reaching the remote store (empty title, bad color, ...)."""


class RemoteFailure(TaskboardError):
    """Transport or storage failure; the underlying cause is chained."""
