"""Per-message value types: inbound messages and outbound replies.

WHY: The orchestrator sits between the Telegram transport and the
provider. Plain dataclasses give it a transport-neutral input and a
closed set of outputs, so it can be tested without either side.

HOW: InboundMessage carries the text, the chat to answer and the kind of
source it came from. A reply is either a TextReply or an AudioReply;
``Reply`` is the union of the two.

RULES:
- All types are frozen; nothing outlives one processing pass
- MessageSource decides whether an unusable message gets an answer
- AudioReply is only built for a ready provider result within the size limit
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Union


class MessageSource(str, enum.Enum):
    """Where an inbound message came from.

    RULES:
    - DIRECT: a message sent to the bot; always gets an answer
    - CHANNEL_POST: a broadcast post in a channel the bot administers; posts
      without a link are not requests to the bot and are dropped silently
    """

    DIRECT = "direct"
    CHANNEL_POST = "channel_post"

    @property
    def replies_when_unrecognized(self) -> bool:
        return self is MessageSource.DIRECT


@dataclass(frozen=True)
class InboundMessage:
    """One chat message ready for orchestration.

    RULES:
    - text may be empty (never None)
    - chat_id is the reply target
    - message_id is kept for logging only
    """

    text: str
    chat_id: int
    source: MessageSource = MessageSource.DIRECT
    message_id: Optional[int] = None


@dataclass(frozen=True)
class TextReply:
    """Plain text answer."""

    text: str


@dataclass(frozen=True)
class AudioReply:
    """Audio sent by URL, with the metadata Telegram shows in the player.

    RULES:
    - duration is None when the provider reported zero or nothing
    - caption is None when the provider gave no title
    """

    link: str
    title: str
    performer: str
    duration: Optional[int] = None
    caption: Optional[str] = None


Reply = Union[TextReply, AudioReply]
