"""Provider response dataclasses.

WHY: The RapidAPI youtube-mp36 endpoint answers with a loose JSON object
(``link, title, filesize, progress, duration, status, msg``). Numbers may
arrive as strings or be missing altogether. A typed dataclass pins down
what the rest of the bot may rely on.

HOW: AudioMetadata.from_dict() normalises the payload once: absent title
becomes "", non-numeric duration becomes 0, filesize is kept only when
it is a real number (rounded up to whole bytes).

RULES:
- Provider status "ok" -> READY, "processing" -> PENDING, anything else -> FAILED
- size_bytes is None unless the provider sent a numeric filesize
- A fractional filesize rounds up, so it never slips under the size limit
- duration_s is never negative
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

READY_STATUS = "ok"
PENDING_STATUS = "processing"


class AudioStatus(str, enum.Enum):
    """Conversion state reported by the provider."""

    READY = "ready"
    PENDING = "pending"
    FAILED = "failed"

    @classmethod
    def from_provider(cls, value: Any) -> AudioStatus:
        if value == READY_STATUS:
            return cls.READY
        if value == PENDING_STATUS:
            return cls.PENDING
        return cls.FAILED


@dataclass(frozen=True)
class AudioMetadata:
    """A converted MP3 as described by the provider.

    RULES:
    - download_link: direct MP3 URL, empty when the provider has none yet
    - title: video title, "" when absent
    - size_bytes: file size, None when unknown
    - duration_s: length in seconds, 0 when unknown
    """

    download_link: str
    title: str = ""
    size_bytes: Optional[int] = None
    duration_s: float = 0.0
    status: AudioStatus = AudioStatus.READY

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AudioMetadata:
        """Parse AudioMetadata from a raw provider response dict."""
        return cls(
            download_link=str(data.get("link") or ""),
            title=str(data.get("title") or ""),
            size_bytes=_parse_size(data.get("filesize")),
            duration_s=_parse_duration(data.get("duration")),
            status=AudioStatus.from_provider(data.get("status")),
        )


def _parse_size(value: Any) -> Optional[int]:
    # bool is an int subclass; the provider never means True/False as a size
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value) or math.isinf(value) or value < 0:
        return None
    return math.ceil(value)


def _parse_duration(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(seconds) or math.isinf(seconds) or seconds < 0:
        return 0.0
    return seconds
