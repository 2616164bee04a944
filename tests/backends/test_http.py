"""Tests for the HTTP backend."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from taskboard.backends.http import HttpBackend
from taskboard.errors import AccessDeniedError, NotFoundError, RemoteFailure, ValidationError
from taskboard.models import Column, ShareLevel, SharePermission

BASE_URL = "http://localhost:3001/api"

BOARD = {
    "id": "b1",
    "userId": "alice",
    "title": "Sprint",
    "columns": [{"id": "c1", "title": "Todo", "cards": [{"id": "t1", "title": "One"}]}],
}


def _response(status: int = 200, body: object = None) -> MagicMock:
    response = MagicMock(ok=status < 400, status_code=status, text="")
    if body is None:
        response.json.side_effect = ValueError("no body")
    else:
        response.json.return_value = body
    return response


@patch("taskboard.backends.http.requests.Session")
def test_http_backend_init(mock_session_cls: MagicMock) -> None:
    """Test HTTP backend initialization."""
    backend = HttpBackend(base_url=BASE_URL + "/", session_token="secret")
    assert backend.base_url == BASE_URL
    mock_session_cls.return_value.cookies.set.assert_called_once_with("kanban_session", "secret")


def test_http_backend_requires_base_url() -> None:
    """Test a missing base URL."""
    with pytest.raises(ValueError, match="Base URL required"):
        HttpBackend(base_url="")


@patch("taskboard.backends.http.requests.Session")
def test_fetch_board(mock_session_cls: MagicMock) -> None:
    """Test fetching a board unwraps and normalizes it."""
    session = mock_session_cls.return_value
    session.request.return_value = _response(body={"board": BOARD})

    board = HttpBackend(base_url=BASE_URL).fetch_board("b1")
    assert board.title == "Sprint"
    assert board.columns[0].cards[0].column_id == "c1"
    assert board.columns[0].cards[0].user_id == "alice"
    session.request.assert_called_once_with("GET", f"{BASE_URL}/boards/b1", json=None, timeout=10)


@patch("taskboard.backends.http.requests.Session")
def test_update_board_sends_columns(mock_session_cls: MagicMock) -> None:
    """Test the whole-board columns replace payload."""
    session = mock_session_cls.return_value
    session.request.return_value = _response(body={"board": BOARD})

    columns = (Column(id="c1", board_id="b1", title="Todo", user_id="alice"),)
    HttpBackend(base_url=BASE_URL).update_board("b1", columns=columns)
    method, url = session.request.call_args.args
    payload = session.request.call_args.kwargs["json"]
    assert (method, url) == ("PUT", f"{BASE_URL}/boards/b1")
    assert list(payload) == ["columns"]
    assert payload["columns"][0]["id"] == "c1"


@pytest.mark.parametrize(
    ("level", "entity_id", "column_id", "path"),
    [
        (ShareLevel.BOARD, "b1", None, "/boards/b1/share"),
        (ShareLevel.COLUMN, "c1", None, "/boards/b1/columns/c1/share"),
        (ShareLevel.CARD, "t1", "c1", "/boards/b1/columns/c1/cards/t1/share"),
    ],
)
@patch("taskboard.backends.http.requests.Session")
def test_share_paths(
    mock_session_cls: MagicMock, level: ShareLevel, entity_id: str, column_id: str | None, path: str
) -> None:
    """Test share and unshare URLs at every level."""
    session = mock_session_cls.return_value
    session.request.return_value = _response(body={"board": BOARD})
    backend = HttpBackend(base_url=BASE_URL)

    backend.share_entity(level, entity_id, "bob", SharePermission.WRITE, board_id="b1", column_id=column_id)
    session.request.assert_called_with(
        "POST", f"{BASE_URL}{path}", json={"userId": "bob", "permission": "write"}, timeout=10
    )

    backend.unshare_entity(level, entity_id, "bob", board_id="b1", column_id=column_id)
    session.request.assert_called_with("DELETE", f"{BASE_URL}{path}/bob", json=None, timeout=10)


@patch("taskboard.backends.http.requests.Session")
def test_share_card_needs_column(mock_session_cls: MagicMock) -> None:
    """Test sharing a card without its column id."""
    with pytest.raises(ValidationError):
        HttpBackend(base_url=BASE_URL).share_entity(ShareLevel.CARD, "t1", "bob", "read", board_id="b1")
    mock_session_cls.return_value.request.assert_not_called()


@pytest.mark.parametrize(
    ("status", "error_type"),
    [
        (400, ValidationError),
        (401, AccessDeniedError),
        (403, AccessDeniedError),
        (404, NotFoundError),
        (409, RemoteFailure),
        (500, RemoteFailure),
    ],
)
@patch("taskboard.backends.http.requests.Session")
def test_status_mapping(mock_session_cls: MagicMock, status: int, error_type: type) -> None:
    """Test error statuses map onto the error taxonomy."""
    mock_session_cls.return_value.request.return_value = _response(status, {"error": "Board not found"})
    with pytest.raises(error_type, match="Board not found"):
        HttpBackend(base_url=BASE_URL).fetch_board("b1")


@patch("taskboard.backends.http.requests.Session")
def test_error_without_json_body(mock_session_cls: MagicMock) -> None:
    """Test an error page without a JSON body."""
    response = _response(502)
    response.text = "Bad Gateway"
    mock_session_cls.return_value.request.return_value = response
    with pytest.raises(RemoteFailure, match="HTTP 502: Bad Gateway"):
        HttpBackend(base_url=BASE_URL).delete_board("b1")


@patch("taskboard.backends.http.requests.Session")
def test_connection_error(mock_session_cls: MagicMock) -> None:
    """Test transport failures become RemoteFailure."""
    mock_session_cls.return_value.request.side_effect = requests.ConnectionError("refused")
    with pytest.raises(RemoteFailure) as excinfo:
        HttpBackend(base_url=BASE_URL).list_labels("alice")
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


@patch("taskboard.backends.http.requests.Session")
def test_labels_and_users(mock_session_cls: MagicMock) -> None:
    """Test label and user envelopes."""
    session = mock_session_cls.return_value
    backend = HttpBackend(base_url=BASE_URL)

    session.request.return_value = _response(
        body={"labels": [{"id": "bug", "name": "Bug", "color": "#ef4444", "userId": "default"}]}
    )
    assert [label.name for label in backend.list_labels("alice")] == ["Bug"]

    session.request.return_value = _response(
        body={"label": {"id": "l1", "name": "Blocked", "color": "#111", "userId": "alice"}}
    )
    assert backend.update_label("l1", color="#111").name == "Blocked"
    assert session.request.call_args.kwargs["json"] == {"color": "#111"}

    session.request.return_value = _response(
        body={"users": [{"id": "alice", "username": "alice"}, {"id": "bob", "username": "bob"}]}
    )
    assert [user.id for user in backend.list_users(excluding="alice")] == ["bob"]
