"""REST backend talking to a taskboard server with requests."""

from typing import Any, Sequence

import requests
import structlog

from taskboard.backend import Backend
from taskboard.errors import AccessDeniedError, NotFoundError, RemoteFailure, TaskboardError, ValidationError
from taskboard.models import Board, Column, Label, ShareLevel, SharePermission, User, columns_to_list

logger = structlog.get_logger()

SESSION_COOKIE = "kanban_session"

_STATUS_ERRORS: dict[int, type[TaskboardError]] = {
    400: ValidationError,
    401: AccessDeniedError,
    403: AccessDeniedError,
    404: NotFoundError,
}


class HttpBackend(Backend):
    """Backend for the board server's ``/api`` endpoints.

    Holds one ``requests.Session``, which is not safe to share between
    threads. ``BoardStore`` makes every call, reads included, from its sync
    worker; other callers should keep to a single thread too.
    """

    def __init__(self, base_url: str, session_token: str | None = None, timeout: float = 10) -> None:
        """Initialize HTTP backend.

        Args:
            base_url: API root, e.g. ``http://localhost:3001/api``
            session_token: Session token issued by the server's login endpoint
            timeout: Per-request timeout in seconds
        """
        if not base_url:
            raise ValueError("Base URL required")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        if session_token:
            self.session.cookies.set(SESSION_COOKIE, session_token)
        logger.debug("HTTP backend initialized", base_url=self.base_url)

    def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> dict[str, Any]:
        """Send a request and decode the JSON body.

        Raises:
            ValidationError, AccessDeniedError, NotFoundError: Mapped from 400/401/403/404
            RemoteFailure: Connection problems, timeouts and any other error status
        """
        url = f"{self.base_url}{path}"
        logger.debug("Sending request", method=method, url=url)
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Request failed", method=method, url=url, error=str(e))
            raise RemoteFailure(f"{method} {path} failed: {e}") from e

        if not response.ok:
            message = _error_message(response)
            logger.warning("Request rejected", method=method, url=url, status=response.status_code, error=message)
            raise _STATUS_ERRORS.get(response.status_code, RemoteFailure)(message)

        try:
            return response.json()
        except ValueError as e:
            raise RemoteFailure(f"Invalid JSON from {method} {path}") from e

    def _share_path(self, level: ShareLevel, entity_id: str, board_id: str, column_id: str | None) -> str:
        level = ShareLevel(level)
        if level == ShareLevel.BOARD:
            return f"/boards/{board_id}/share"
        if level == ShareLevel.COLUMN:
            return f"/boards/{board_id}/columns/{entity_id}/share"
        if not column_id:
            raise ValidationError("Column ID is required to share a card")
        return f"/boards/{board_id}/columns/{column_id}/cards/{entity_id}/share"

    def fetch_board(self, board_id: str) -> Board:
        logger.info("Fetching board", board_id=board_id)
        data = self._request("GET", f"/boards/{board_id}")
        return Board.from_dict(data["board"])

    def fetch_boards_for_user(self, user_id: str) -> list[Board]:
        # The server resolves the user from the session cookie.
        data = self._request("GET", "/boards")
        boards = [Board.from_dict(raw) for raw in data.get("boards", [])]
        logger.info("Listed boards", user_id=user_id, count=len(boards))
        return boards

    def create_board(self, title: str, description: str | None = None) -> Board:
        payload: dict[str, Any] = {"title": title}
        if description is not None:
            payload["description"] = description
        data = self._request("POST", "/boards", payload)
        board = Board.from_dict(data["board"])
        logger.info("Board created", board_id=board.id)
        return board

    def update_board(
        self,
        board_id: str,
        title: str | None = None,
        description: str | None = None,
        columns: Sequence[Column] | None = None,
    ) -> Board:
        payload: dict[str, Any] = {}
        if title is not None:
            payload["title"] = title
        if description is not None:
            payload["description"] = description
        if columns is not None:
            payload["columns"] = columns_to_list(columns)
        data = self._request("PUT", f"/boards/{board_id}", payload)
        logger.info("Board updated", board_id=board_id)
        return Board.from_dict(data["board"])

    def delete_board(self, board_id: str) -> None:
        self._request("DELETE", f"/boards/{board_id}")
        logger.info("Board deleted", board_id=board_id)

    def share_entity(
        self,
        level: ShareLevel,
        entity_id: str,
        target_user_id: str,
        permission: SharePermission,
        board_id: str,
        column_id: str | None = None,
    ) -> Board:
        path = self._share_path(level, entity_id, board_id, column_id)
        data = self._request("POST", path, {"userId": target_user_id, "permission": SharePermission(permission).value})
        logger.info("Entity shared", level=ShareLevel(level).value, entity_id=entity_id, target_user_id=target_user_id)
        return Board.from_dict(data["board"])

    def unshare_entity(
        self,
        level: ShareLevel,
        entity_id: str,
        target_user_id: str,
        board_id: str,
        column_id: str | None = None,
    ) -> Board:
        path = self._share_path(level, entity_id, board_id, column_id)
        data = self._request("DELETE", f"{path}/{target_user_id}")
        logger.info("Entity unshared", level=ShareLevel(level).value, entity_id=entity_id, target_user_id=target_user_id)
        return Board.from_dict(data["board"])

    def list_labels(self, user_id: str) -> list[Label]:
        data = self._request("GET", "/labels")
        return [Label.from_dict(raw) for raw in data.get("labels", [])]

    def create_label(self, name: str, color: str) -> Label:
        data = self._request("POST", "/labels", {"name": name, "color": color})
        return Label.from_dict(data["label"])

    def update_label(self, label_id: str, name: str | None = None, color: str | None = None) -> Label:
        payload = {key: value for key, value in (("name", name), ("color", color)) if value is not None}
        data = self._request("PUT", f"/labels/{label_id}", payload)
        return Label.from_dict(data["label"])

    def delete_label(self, label_id: str) -> None:
        self._request("DELETE", f"/labels/{label_id}")

    def list_users(self, excluding: str | None = None) -> list[User]:
        data = self._request("GET", "/users")
        return [User.from_dict(raw) for raw in data.get("users", []) if raw.get("id") != excluding]


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"HTTP {response.status_code}: {response.text[:200]}"
