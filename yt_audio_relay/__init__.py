"""YouTube Audio Relay: a Telegram bot that answers YouTube links with MP3s.

WHY: Sharing a song from YouTube into a chat usually means a link nobody
plays. This bot takes the link, has a RapidAPI extraction service convert
the video to MP3, and posts the audio straight into the chat.

HOW: Three layers. The core extracts the video identifier and decides
the reply, the api package talks to the extraction provider, and the
telegram/server packages receive webhook updates and deliver replies.

RULES:
- One independent pass per message; nothing is stored between messages
- The core never imports Telegram code and never makes HTTP calls itself
- Secrets come from Settings, never from ad-hoc environment lookups
"""

__version__ = "0.1.0"
