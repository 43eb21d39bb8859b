"""Telegram transport: webhook payload parsing, Bot API client, bot glue.

WHY: Telegram is the only chat transport. Everything that knows about
Update objects, chat ids or Bot API method names lives here, so the core
relay logic stays transport-neutral.

RULES:
- Updates arrive via webhook (no long polling)
- All Bot API calls go through TelegramClient
- RelayBot.handle_update is the per-update entry point
"""

from yt_audio_relay.telegram.bot import RelayBot
from yt_audio_relay.telegram.client import TelegramAPIError, TelegramClient
from yt_audio_relay.telegram.models import parse_update

__all__ = ["RelayBot", "TelegramAPIError", "TelegramClient", "parse_update"]
