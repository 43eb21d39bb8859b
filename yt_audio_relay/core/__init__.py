"""Core relay logic: identifier extraction, message types, orchestration.

WHY: The decision logic (which link, which reply) is the only part of the
bot worth testing in isolation. This package makes no network calls and
knows nothing about Telegram.

RULES:
- extract_video_id is pure and never raises
- handle_message receives its I/O as injected async callables
"""

from yt_audio_relay.core.extractor import extract_video_id
from yt_audio_relay.core.models import (
    AudioReply,
    InboundMessage,
    MessageSource,
    Reply,
    TextReply,
)
from yt_audio_relay.core.orchestrator import handle_message

__all__ = [
    "AudioReply",
    "InboundMessage",
    "MessageSource",
    "Reply",
    "TextReply",
    "extract_video_id",
    "handle_message",
]
