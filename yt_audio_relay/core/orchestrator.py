"""Per-message pipeline: extract identifier, fetch audio, apply size policy.

WHY: Direct messages and channel posts need the same decisions (is there
a link, is the audio ready, is it small enough to relay). Keeping those
decisions in one function means both entry points share a single state
machine, differing only in what happens when no link is found.

HOW: handle_message() walks Extracting -> Fetching -> SizeCheck -> Ready.
Each terminal state returns a Reply (or None for a silently dropped
channel post). The provider call and the "working" signal are injected
as async callables so this module knows nothing about HTTP or Telegram.

RULES:
- No state is shared between calls
- signal_working is best-effort; its failures are logged and ignored
- Every exception from fetch or reply construction becomes FETCH_FAILED_TEXT
- Users never see internal error detail; logs get the full traceback
- AudioReply only for a ready result with size_bytes <= SIZE_LIMIT_BYTES
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from yt_audio_relay.api.client import ProviderError, ProviderErrorKind
from yt_audio_relay.api.models import AudioMetadata, AudioStatus
from yt_audio_relay.config import SIZE_LIMIT_BYTES
from yt_audio_relay.core.extractor import extract_video_id
from yt_audio_relay.core.models import AudioReply, InboundMessage, Reply, TextReply

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# User-facing texts
# ---------------------------------------------------------------------------

INVALID_LINK_TEXT = "Please send a valid YouTube link (youtube.com or youtu.be)."
FETCH_FAILED_TEXT = "Sorry, couldn’t get that MP3. Try another link or later."
TOO_LARGE_TEXT = "File is too large for Telegram. Try a shorter video."

DEFAULT_TITLE = "Audio"
PERFORMER_LABEL = "YouTube"
CAPTION_PREFIX = "\U0001f3b5 "

FetchAudio = Callable[[str], Awaitable[AudioMetadata]]
SignalWorking = Callable[[], Awaitable[object]]


async def handle_message(
    message: InboundMessage,
    fetch: FetchAudio,
    signal_working: Optional[SignalWorking] = None,
) -> Optional[Reply]:
    """Run one message through the relay pipeline.

    Args:
        message: The inbound chat message.
        fetch: Provider call, usually ProviderClient.fetch_audio_metadata.
        signal_working: Optional async callable that shows a "working"
            indicator in the chat before the provider call.

    Returns:
        The reply to send, or None when the message should be dropped.
    """
    video_id = extract_video_id(message.text)
    if not video_id:
        if message.source.replies_when_unrecognized:
            return TextReply(INVALID_LINK_TEXT)
        logger.debug(
            "Dropping %s in chat %s: no video link", message.source.value, message.chat_id
        )
        return None

    logger.info(
        "Video %s requested | chat=%s | source=%s",
        video_id, message.chat_id, message.source.value,
    )

    if signal_working is not None:
        try:
            await signal_working()
        except Exception:
            logger.debug("Working indicator failed for chat %s", message.chat_id, exc_info=True)

    try:
        meta = await fetch(video_id)
        return build_reply(meta)
    except ProviderError as exc:
        logger.error(
            "Provider failed for %s | kind=%s | status_code=%s | provider_status=%s | %s",
            video_id, exc.kind.value, exc.status_code, exc.provider_status, exc,
        )
    except Exception:
        logger.exception("Unexpected error while relaying %s", video_id)
    return TextReply(FETCH_FAILED_TEXT)


def build_reply(meta: AudioMetadata) -> Reply:
    """Apply the size policy and turn ready metadata into a reply.

    RULES:
    - Non-ready metadata or an empty link is treated as a provider failure
    - size_bytes above SIZE_LIMIT_BYTES -> TOO_LARGE_TEXT
    - Unknown size is allowed through
    - duration rounds to whole seconds; 0 becomes None
    """
    if meta.status is not AudioStatus.READY or not meta.download_link:
        raise ProviderError(
            ProviderErrorKind.EXTRACTION_NOT_READY,
            "Metadata is not ready: status={}".format(meta.status.value),
            provider_status=meta.status.value,
        )

    if meta.size_bytes is not None and meta.size_bytes > SIZE_LIMIT_BYTES:
        logger.info("Audio too large: %d bytes (limit %d)", meta.size_bytes, SIZE_LIMIT_BYTES)
        return TextReply(TOO_LARGE_TEXT)

    # half-up rounding; duration_s is never negative
    duration = int(meta.duration_s + 0.5) or None
    return AudioReply(
        link=meta.download_link,
        title=meta.title or DEFAULT_TITLE,
        performer=PERFORMER_LABEL,
        duration=duration,
        caption=CAPTION_PREFIX + meta.title if meta.title else None,
    )
