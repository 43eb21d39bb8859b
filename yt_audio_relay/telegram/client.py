"""Async client for the Telegram Bot API send methods the bot uses.

WHY: Replies, the "uploading audio" indicator and webhook registration are
all Bot API calls of the same shape: POST a JSON body to
``/bot<token>/<method>`` and read ``{"ok": ..., "result": ...}`` back.
One small client keeps the token out of every call site.

HOW: Wraps httpx.AsyncClient. TelegramClient is an async context manager,
entered once for the lifetime of the web app. Each Bot API method is a
thin wrapper around _call(), which raises TelegramAPIError when Telegram
answers ``ok: false`` or a non-JSON body.

RULES:
- Use as: async with TelegramClient(settings) as telegram: ...
- Optional fields with value None are left out of the request body
- The bot token is never logged
- send_audio passes the provider link as ``audio``; Telegram downloads it
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from yt_audio_relay.config import Settings
from yt_audio_relay.core.models import AudioReply

logger = logging.getLogger(__name__)

UPLOAD_AUDIO_ACTION = "upload_audio"
DEFAULT_ALLOWED_UPDATES = ["message", "channel_post"]


class TelegramAPIError(Exception):
    """Raised when a Bot API call fails.

    RULES:
    - method is the Bot API method name (e.g. "sendAudio")
    - error_code is Telegram's error_code, or the HTTP status if absent
    - description is Telegram's human-readable reason
    """

    def __init__(self, method: str, error_code: Optional[int], description: str) -> None:
        self.method = method
        self.error_code = error_code
        self.description = description
        super().__init__(
            "Telegram {} failed ({}): {}".format(method, error_code, description)
        )


class TelegramClient:
    """Async client for the Telegram Bot API."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = "{}/bot{}".format(
            settings.telegram_api_url.rstrip("/"), settings.bot_token
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> TelegramClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(30.0, connect=10.0),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "TelegramClient must be used as an async context manager: "
                "async with TelegramClient(settings) as telegram: ..."
            )
        return self._client

    async def _call(self, method: str, payload: Dict[str, Any]) -> Any:
        """POST ``payload`` to ``method`` and return the ``result`` field."""
        client = self._ensure_client()
        body = {key: value for key, value in payload.items() if value is not None}
        logger.debug("Telegram %s | chat=%s", method, body.get("chat_id"))

        resp = await client.post("/{}".format(method), json=body)
        try:
            data = resp.json()
        except ValueError:
            raise TelegramAPIError(method, resp.status_code, "non-JSON response")

        if not isinstance(data, dict):
            raise TelegramAPIError(method, resp.status_code, "unexpected body")
        if not data.get("ok"):
            raise TelegramAPIError(
                method,
                data.get("error_code", resp.status_code),
                data.get("description", "unknown error"),
            )

        return data.get("result")

    # ------------------------------------------------------------------
    # Bot API methods
    # ------------------------------------------------------------------

    async def send_message(self, chat_id: int, text: str) -> Any:
        """Send a plain text message."""
        return await self._call("sendMessage", {"chat_id": chat_id, "text": text})

    async def send_audio(self, chat_id: int, audio: AudioReply) -> Any:
        """Send an audio file by URL with player metadata."""
        return await self._call(
            "sendAudio",
            {
                "chat_id": chat_id,
                "audio": audio.link,
                "title": audio.title,
                "performer": audio.performer,
                "duration": audio.duration,
                "caption": audio.caption,
            },
        )

    async def send_chat_action(self, chat_id: int, action: str = UPLOAD_AUDIO_ACTION) -> Any:
        """Show a transient status such as "sending audio..." in the chat."""
        return await self._call("sendChatAction", {"chat_id": chat_id, "action": action})

    async def set_webhook(
        self,
        url: str,
        secret_token: str,
        allowed_updates: Optional[List[str]] = None,
    ) -> Any:
        """Register ``url`` as the webhook, with the shared secret header value.

        RULES:
        - secret_token is echoed back by Telegram in X-Telegram-Bot-Api-Secret-Token
        - allowed_updates defaults to message and channel_post
        """
        return await self._call(
            "setWebhook",
            {
                "url": url,
                "secret_token": secret_token,
                "allowed_updates": allowed_updates or list(DEFAULT_ALLOWED_UPDATES),
            },
        )
