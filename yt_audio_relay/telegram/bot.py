"""Telegram bot: turns webhook updates into replies.

WHY: The webhook route only acknowledges and queues updates. Something
has to parse each update, answer commands, run the relay pipeline and
deliver the result to the chat. This module is that glue.

HOW: RelayBot.handle_update() is the dispatcher's per-update handler.
It parses the payload, answers /start directly, and otherwise
opens a request-scoped ProviderClient, runs handle_message() with the
provider call and a chat-action callback, then renders the Reply through
the long-lived TelegramClient.

RULES:
- One call per update; no state kept between calls
- The chat action ("upload_audio") is sent before the provider call
- If sending the audio fails for any reason, the user gets FETCH_FAILED_TEXT instead
- Send failures are logged, never raised back into the dispatcher
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Dict, Optional

import httpx

from yt_audio_relay.api.client import ProviderClient
from yt_audio_relay.config import Settings
from yt_audio_relay.core.models import AudioReply, InboundMessage, MessageSource, Reply
from yt_audio_relay.core.orchestrator import FETCH_FAILED_TEXT, handle_message
from yt_audio_relay.telegram.client import TelegramAPIError, TelegramClient
from yt_audio_relay.telegram.messages import START_TEXT, is_greeting_command
from yt_audio_relay.telegram.models import parse_update

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[], ProviderClient]

_SEND_ERRORS = (TelegramAPIError, httpx.HTTPError)


class RelayBot:
    """Handles Telegram updates end to end."""

    def __init__(
        self,
        settings: Settings,
        telegram: TelegramClient,
        provider_factory: Optional[ProviderFactory] = None,
    ) -> None:
        self._telegram = telegram
        self._provider_factory = provider_factory or functools.partial(ProviderClient, settings)

    async def handle_update(self, update: Dict[str, Any]) -> None:
        """Process one raw webhook update to completion."""
        message = parse_update(update)
        if message is None:
            return

        if message.source is MessageSource.DIRECT and is_greeting_command(message.text):
            await self._send_text(message.chat_id, START_TEXT)
            return

        async with self._provider_factory() as provider:
            reply = await handle_message(
                message,
                provider.fetch_audio_metadata,
                signal_working=functools.partial(
                    self._telegram.send_chat_action, message.chat_id
                ),
            )

        if reply is None:
            return

        await self.deliver(message, reply)

    async def deliver(self, message: InboundMessage, reply: Reply) -> None:
        """Send ``reply`` to the chat ``message`` came from."""
        if isinstance(reply, AudioReply):
            try:
                await self._telegram.send_audio(message.chat_id, reply)
                logger.info("Audio sent to chat %s: %s", message.chat_id, reply.title)
                return
            except Exception:
                logger.exception("Failed to send audio to chat %s", message.chat_id)
            await self._send_text(message.chat_id, FETCH_FAILED_TEXT)
            return

        await self._send_text(message.chat_id, reply.text)

    async def _send_text(self, chat_id: int, text: str) -> None:
        try:
            await self._telegram.send_message(chat_id, text)
        except _SEND_ERRORS:
            logger.exception("Failed to send message to chat %s", chat_id)
