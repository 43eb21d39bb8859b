"""Pydantic models for the parts of a Telegram Update the bot reads.

WHY: Telegram posts large, loosely-populated JSON objects to the webhook.
Validating only the handful of fields the bot uses turns a malformed or
unexpected update into a clean "ignore" instead of a KeyError deep inside
a background task.

HOW: TelegramUpdate mirrors the Bot API ``Update`` object, restricted to
``message`` and ``channel_post``. Unknown fields are ignored. parse_update()
converts a raw dict into an InboundMessage, or None when there is
nothing to act on.

RULES:
- Direct messages use ``text`` only; media-only messages are ignored
- Channel posts use ``text`` and fall back to ``caption``
- An update that fails validation is logged and ignored, never raised
- Python 3.9+ compatible (no PEP 604 unions in model fields)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from yt_audio_relay.core.models import InboundMessage, MessageSource

logger = logging.getLogger(__name__)


class TelegramChat(BaseModel):
    """Chat the message belongs to."""

    id: int = Field(description="Unique chat identifier.")
    type: Optional[str] = Field(
        default=None,
        description="private, group, supergroup or channel.",
    )


class TelegramMessage(BaseModel):
    """A message or channel post."""

    message_id: int = Field(description="Message identifier inside the chat.")
    chat: TelegramChat = Field(description="Chat the message was sent to.")
    text: Optional[str] = Field(default=None, description="Message text.")
    caption: Optional[str] = Field(
        default=None,
        description="Caption of a media message.",
    )


class TelegramUpdate(BaseModel):
    """Incoming update delivered to the webhook."""

    update_id: int = Field(description="Monotonic update identifier.")
    message: Optional[TelegramMessage] = Field(
        default=None,
        description="New incoming message of any kind.",
    )
    channel_post: Optional[TelegramMessage] = Field(
        default=None,
        description="New incoming channel post of any kind.",
    )


def parse_update(payload: Dict[str, Any]) -> Optional[InboundMessage]:
    """Convert a raw webhook payload into an InboundMessage.

    Returns:
        InboundMessage for a direct text message or a channel post with text
        or caption, else None.
    """
    try:
        update = TelegramUpdate.model_validate(payload)
    except ValidationError as exc:
        logger.warning("Ignoring malformed update: %s", exc.errors(include_url=False))
        return None

    if update.message is not None:
        if update.message.text is None:
            logger.debug("Ignoring non-text message in update %s", update.update_id)
            return None
        return InboundMessage(
            text=update.message.text,
            chat_id=update.message.chat.id,
            source=MessageSource.DIRECT,
            message_id=update.message.message_id,
        )

    if update.channel_post is not None:
        post = update.channel_post
        return InboundMessage(
            text=post.text or post.caption or "",
            chat_id=post.chat.id,
            source=MessageSource.CHANNEL_POST,
            message_id=post.message_id,
        )

    logger.debug("Ignoring update %s with no message or channel post", update.update_id)
    return None
