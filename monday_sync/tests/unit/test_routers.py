"""Unit tests for the HTTP endpoints."""

import httpx
import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock, patch

from monday_sync.core.models import ProcessingResult
from monday_sync.main import app


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


class FakeAsyncClient:
    """Stand-in for httpx.AsyncClient used by the forwarder."""

    response: httpx.Response | None = None
    error: Exception | None = None
    calls: list = []

    def __init__(self, *args, **kwargs):
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def post(self, url, json=None):
        FakeAsyncClient.calls.append((url, json))
        if FakeAsyncClient.error is not None:
            raise FakeAsyncClient.error
        return FakeAsyncClient.response


@pytest.fixture
def fake_httpx():
    FakeAsyncClient.response = None
    FakeAsyncClient.error = None
    FakeAsyncClient.calls = []
    with patch("monday_sync.routers.forward.httpx.AsyncClient", FakeAsyncClient):
        yield FakeAsyncClient


class TestWebhookEndpoint:
    """Tests for POST /webhook."""

    def test_challenge_echo(self, client):
        response = client.post("/webhook", json={"challenge": "abc123"})

        assert response.status_code == 200
        assert response.json() == {"challenge": "abc123"}

    def test_challenge_on_root(self, client):
        response = client.post("/", json={"challenge": "xyz"})
        assert response.json() == {"challenge": "xyz"}

    def test_missing_event(self, client):
        response = client.post("/webhook", json={"foo": "bar"})

        assert response.status_code == 400
        assert response.text == "Invalid payload"

    def test_event_dispatched(self, client, create_pulse_payload):
        handler = MagicMock()
        handler.handle.return_value = ProcessingResult(success=True, action="files_synced")
        with patch("monday_sync.routers.webhook.get_handler", return_value=handler):
            response = client.post("/webhook", json=create_pulse_payload)

        assert response.status_code == 200
        assert response.text == "Webhook received and processed."
        event = handler.handle.call_args.args[0]
        assert event.type == "create_pulse"

    def test_unhandled_event_is_ok(self, client):
        response = client.post("/webhook", json={"event": {"type": "delete_pulse"}})
        assert response.status_code == 200

    def test_handler_failure_returns_500(self, client, create_pulse_payload):
        handler = MagicMock()
        handler.handle.side_effect = RuntimeError("boom")
        with patch("monday_sync.routers.webhook.get_handler", return_value=handler):
            response = client.post("/webhook", json=create_pulse_payload)

        assert response.status_code == 500
        assert response.text == "Error processing the webhook."


class TestForwardEndpoint:
    """Tests for POST /forward."""

    def test_challenge_echo(self, client):
        response = client.post("/forward", json={"challenge": "abc"})
        assert response.json() == {"challenge": "abc"}

    def test_missing_event(self, client):
        response = client.post("/forward", json={})
        assert response.status_code == 400

    def test_unknown_board(self, client):
        response = client.post("/forward", json={"event": {"boardId": 1}})

        assert response.status_code == 400
        assert response.text == "Unknown boardId"

    def test_forwards_to_board_target(self, client, fake_httpx):
        fake_httpx.response = httpx.Response(202, text="accepted")
        payload = {"event": {"boardId": 1525879275, "type": "create_pulse"}}

        response = client.post("/forward", json=payload)

        assert response.status_code == 202
        assert response.text == "accepted"
        assert fake_httpx.calls == [("http://localhost:3001/webhook", payload)]

    def test_forward_error(self, client, fake_httpx):
        fake_httpx.error = httpx.ConnectError("refused")

        response = client.post("/forward", json={"event": {"boardId": 1556224598}})

        assert response.status_code == 500
        assert response.text == "Error forwarding webhook"


class TestOAuthCallback:
    """Tests for GET /oauth/callback."""

    def test_code_received(self, client):
        response = client.get("/oauth/callback", params={"code": "1000.abc"})

        assert response.status_code == 200
        assert response.text == "Auth code received: 1000.abc"

    def test_code_missing(self, client):
        response = client.get("/oauth/callback")

        assert response.status_code == 400
        assert response.text == "No auth code received"


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"
