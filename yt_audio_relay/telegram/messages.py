"""Bot command texts and command detection.

WHY: Users send /start when they first open the bot. That gets a short
greeting rather than the "send a valid link" answer. Every other command,
/help included, is treated as ordinary text.

RULES:
- Commands are only recognised in direct messages
- "/start@MyBot" and "/start payload" count as /start
"""

from __future__ import annotations

from typing import Optional

START_TEXT = "Send me a YouTube link and I’ll reply with the MP3. \U0001f642"

GREETING_COMMANDS = frozenset({"start"})


def parse_command(text: str) -> Optional[str]:
    """Return the lower-cased command name of ``text``, or None.

    Examples:
        "/start" -> "start"
        "/Help@relay_bot" -> "help"
        "hello" -> None
    """
    stripped = text.strip()
    if not stripped.startswith("/") or len(stripped) < 2 or stripped[1].isspace():
        return None
    token = stripped[1:].split(maxsplit=1)[0]
    name = token.split("@", 1)[0].lower()
    return name or None


def is_greeting_command(text: str) -> bool:
    """True for /start."""
    return parse_command(text) in GREETING_COMMANDS
