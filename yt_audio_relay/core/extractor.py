"""YouTube video identifier extraction from free-form chat text.

WHY: Users paste links in every shape YouTube produces (watch pages,
youtu.be short links, Shorts, live streams, links with tracking
parameters, links buried in a sentence). The provider only wants the
bare video identifier.

HOW: Two stages. First the trimmed text is parsed as an absolute URL and
matched against the known host/path layouts. If that does not produce an
answer, a regex scans the raw text for an 11-character identifier that
sits after ``v=`` or ``/``.

RULES:
- Never raises; malformed input (including a bad port) falls through to
  the regex stage
- None, empty and whitespace-only input return None without parsing
- youtu.be: whole path minus the leading slash
- *youtube.com /watch: first ``v`` query value, returned verbatim
- *youtube.com /shorts/<id> and /live/<id>: token of >= 6 alphabet chars
- Fallback regex can match an 11-char segment of an unrelated URL; this
  over-match is known and kept (see DESIGN.md)
"""

from __future__ import annotations

import re
from typing import Optional, Tuple
from urllib.parse import parse_qs, urlsplit

SHORT_LINK_HOST = "youtu.be"
VIDEO_SITE_DOMAIN = "youtube.com"
WATCH_PATH = "/watch"

VIDEO_ID_LENGTH = 11
"""Length of a canonical YouTube video identifier."""

_SHORTS_OR_LIVE_RE = re.compile(r"^/(?:shorts|live)/([A-Za-z0-9_-]{6,})")

# \Z rather than $ so a trailing newline does not count as end of string
_FALLBACK_ID_RE = re.compile(
    r"(?:v=|/)([A-Za-z0-9_-]{%d})(?:[?&/]|\Z)" % VIDEO_ID_LENGTH
)


def extract_video_id(text: Optional[str]) -> Optional[str]:
    """Return the YouTube video identifier found in ``text``, or None.

    Args:
        text: Raw message text, possibly None or empty.

    Returns:
        The identifier string, or None when nothing usable is found.
    """
    if not text or not text.strip():
        return None

    found, video_id = _match_url(text.strip())
    if found:
        return video_id

    match = _FALLBACK_ID_RE.search(text)
    return match.group(1) if match else None


def _match_url(candidate: str) -> Tuple[bool, Optional[str]]:
    """Apply the URL rules to ``candidate``.

    Returns a (decided, video_id) pair. ``decided`` is False when the text
    is not an absolute URL or no host/path rule applied, meaning the caller
    should try the regex fallback.
    """
    try:
        parts = urlsplit(candidate)
        host = parts.hostname
        # port raises ValueError when it is not a number in range
        parts.port
    except ValueError:
        return False, None

    if not parts.scheme or not parts.netloc or not host:
        return False, None

    if host == SHORT_LINK_HOST:
        video_id = parts.path[1:] if parts.path.startswith("/") else parts.path
        return True, video_id or None

    if host.endswith(VIDEO_SITE_DOMAIN):
        if parts.path == WATCH_PATH:
            values = parse_qs(parts.query, keep_blank_values=True).get("v")
            return True, (values[0] or None) if values else None

        match = _SHORTS_OR_LIVE_RE.match(parts.path)
        if match:
            return True, match.group(1)

    return False, None
