"""Shared test fixtures for the yt_audio_relay test suite.

WHY: Several test modules need the same Settings object, the same
provider payloads and the same Telegram update shapes. Centralizing them
here keeps every test on identical sample data.

HOW: Plain pytest fixtures. Provider payloads match the fields the
youtube-mp36 endpoint returns (link, title, filesize, progress, duration,
status, msg). Updates match the Bot API Update object.

RULES:
- Settings never come from the real environment
- No fixture performs network I/O
"""

from __future__ import annotations

from typing import Any, Dict

import pytest

from yt_audio_relay.config import Settings

VIDEO_ID = "dQw4w9WgXcQ"
WATCH_URL = "https://www.youtube.com/watch?v={}".format(VIDEO_ID)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        bot_token="123456:TEST-TOKEN",
        webhook_secret="whk_test123",
        telegram_secret="tg-shared-secret",
        rapidapi_key="rapid-test-key",
        rapidapi_host="youtube-mp36.p.rapidapi.com",
        telegram_api_url="https://api.telegram.test",
    )


@pytest.fixture
def ready_payload() -> Dict[str, Any]:
    """Provider response for a converted, relayable MP3."""
    return {
        "link": "https://x/a.mp3",
        "title": "T",
        "filesize": 40000000,
        "progress": 100,
        "duration": 180,
        "status": "ok",
        "msg": "success",
    }


@pytest.fixture
def processing_payload() -> Dict[str, Any]:
    """Provider response while conversion is still running."""
    return {"status": "processing", "progress": 35, "msg": "in process"}


@pytest.fixture
def make_update():
    """Factory for direct-message Updates."""

    def _make(text: str = WATCH_URL, chat_id: int = 42, update_id: int = 1) -> Dict[str, Any]:
        return {
            "update_id": update_id,
            "message": {
                "message_id": 10,
                "date": 1700000000,
                "chat": {"id": chat_id, "type": "private"},
                "from": {"id": chat_id, "is_bot": False, "first_name": "Ana"},
                "text": text,
            },
        }

    return _make


@pytest.fixture
def make_channel_post():
    """Factory for channel-post Updates; text and caption are optional."""

    def _make(
        text: Any = None,
        caption: Any = None,
        chat_id: int = -100123,
        update_id: int = 2,
    ) -> Dict[str, Any]:
        post: Dict[str, Any] = {
            "message_id": 77,
            "date": 1700000000,
            "chat": {"id": chat_id, "type": "channel", "title": "Music"},
        }
        if text is not None:
            post["text"] = text
        if caption is not None:
            post["caption"] = caption
        return {"update_id": update_id, "channel_post": post}

    return _make
