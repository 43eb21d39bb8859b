"""Tests for the FastAPI webhook app.

WHY: The webhook is the only public surface of the bot. It must reject
calls without the right path secret or shared-secret header, and it must
acknowledge valid calls without waiting on the provider.

HOW: FastAPI TestClient used as a context manager so the lifespan runs
and the UpdateDispatcher is started. The update handler is an AsyncMock;
tests that check the hand-off swap ``dispatcher.submit`` for a MagicMock.

RULES:
- Telegram and the provider are never called
- Each test builds its own app instance
- Tests cover: 200 hand-off, 401 bad header, 404 bad path, 400 bad body, health
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from yt_audio_relay.config import SECRET_HEADER
from yt_audio_relay.server.app import _mask, create_app

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def handler():
    return AsyncMock()


@pytest.fixture
def client(settings, handler):
    """Running app with a mocked update handler."""
    with TestClient(create_app(settings, update_handler=handler)) as test_client:
        yield test_client


@pytest.fixture
def submit(client):
    """Replace the dispatcher's submit so calls can be inspected."""
    mock = MagicMock()
    client.app.state.dispatcher.submit = mock
    return mock


def _headers(secret="tg-shared-secret"):
    return {SECRET_HEADER: secret}


# ---------------------------------------------------------------------------
# POST /webhook/{secret}
# ---------------------------------------------------------------------------


class TestWebhook:
    """Authentication and hand-off of webhook calls."""

    def test_valid_call_is_acknowledged_and_queued(self, client, submit, make_update):
        update = make_update()

        resp = client.post("/webhook/whk_test123", json=update, headers=_headers())

        assert resp.status_code == 200
        assert resp.content == b""
        submit.assert_called_once_with(update)

    def test_wrong_secret_header(self, client, submit, make_update):
        resp = client.post("/webhook/whk_test123", json=make_update(), headers=_headers("wrong"))

        assert resp.status_code == 401
        submit.assert_not_called()

    def test_missing_secret_header(self, client, submit, make_update):
        resp = client.post("/webhook/whk_test123", json=make_update())

        assert resp.status_code == 401
        submit.assert_not_called()

    def test_wrong_path_secret(self, client, submit, make_update):
        resp = client.post("/webhook/not-the-secret", json=make_update(), headers=_headers())

        assert resp.status_code == 404
        submit.assert_not_called()

    def test_path_checked_before_header(self, client, submit, make_update):
        resp = client.post("/webhook/not-the-secret", json=make_update(), headers=_headers("wrong"))
        assert resp.status_code == 404

    def test_non_json_body(self, client, submit):
        resp = client.post(
            "/webhook/whk_test123",
            content=b"not json",
            headers={**_headers(), "Content-Type": "application/json"},
        )

        assert resp.status_code == 400
        submit.assert_not_called()

    def test_json_array_body(self, client, submit):
        resp = client.post("/webhook/whk_test123", json=[1, 2, 3], headers=_headers())

        assert resp.status_code == 400
        submit.assert_not_called()

    def test_get_not_allowed(self, client):
        assert client.get("/webhook/whk_test123").status_code == 405


class TestDispatch:
    """Acknowledged updates reach the handler."""

    def test_update_runs_handler(self, settings, handler, make_update):
        update = make_update()

        with TestClient(create_app(settings, update_handler=handler)) as test_client:
            resp = test_client.post("/webhook/whk_test123", json=update, headers=_headers())
            assert resp.status_code == 200

        # lifespan shutdown drains the queue
        handler.assert_awaited_once_with(update)

    def test_handler_failure_does_not_change_response(self, settings, make_update):
        failing = AsyncMock(side_effect=RuntimeError("boom"))

        with TestClient(create_app(settings, update_handler=failing)) as test_client:
            first = test_client.post("/webhook/whk_test123", json=make_update(update_id=1), headers=_headers())
            second = test_client.post("/webhook/whk_test123", json=make_update(update_id=2), headers=_headers())

        assert first.status_code == 200
        assert second.status_code == 200
        assert failing.await_count == 2

    def test_rejected_call_never_reaches_handler(self, settings, handler, make_update):
        with TestClient(create_app(settings, update_handler=handler)) as test_client:
            test_client.post("/webhook/whk_test123", json=make_update(), headers=_headers("bad"))

        handler.assert_not_awaited()


# ---------------------------------------------------------------------------
# GET /healthz
# ---------------------------------------------------------------------------


class TestHealth:
    def test_healthz(self, client):
        resp = client.get("/healthz")

        assert resp.status_code == 200
        assert resp.text == "ok"
        assert resp.headers["content-type"].startswith("text/plain")

    def test_healthz_with_default_handler(self, settings):
        # Real TelegramClient is opened but never called
        with TestClient(create_app(settings)) as test_client:
            assert test_client.get("/healthz").text == "ok"


class TestMask:
    @pytest.mark.parametrize(
        "secret, expected",
        [("whk_test123", "whk_****"), ("abcd", "****"), ("", "****")],
    )
    def test_mask(self, secret, expected):
        assert _mask(secret) == expected
