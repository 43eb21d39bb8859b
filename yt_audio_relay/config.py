"""Configuration constants, secret loading, and .env support.

WHY: The bot needs four secrets (Telegram bot token, webhook path secret,
Telegram shared secret, RapidAPI key) plus a handful of tunables. Keeping
them in one place makes the process boundary obvious and lets tests build
a Settings object without touching the environment.

HOW: python-dotenv loads the .env file on import. Tunables are module-level
constants read from the environment. load_settings() collects the secrets
into a frozen Settings dataclass that is built once at startup and passed
by reference to every component that needs it.

RULES:
- Secrets are never hardcoded and never logged
- load_settings() raises ValueError naming every missing secret
- Settings is immutable; components never read os.environ themselves
- SIZE_LIMIT_BYTES is the largest file Telegram accepts from a URL (49 MiB)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

# Load .env from the project root (where the process is started)
load_dotenv()

# ---------------------------------------------------------------------------
# Provider and transport defaults
# ---------------------------------------------------------------------------

RAPIDAPI_HOST = os.getenv("RAPIDAPI_HOST", "youtube-mp36.p.rapidapi.com")
TELEGRAM_API_URL = os.getenv("TELEGRAM_API_URL", "https://api.telegram.org")
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 10000
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

SIZE_LIMIT_BYTES = 49 * 1024 * 1024
"""Audio larger than this is not relayed (Telegram's URL upload cap is 50 MB)."""

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"
"""Header Telegram sets on every webhook call when a secret_token is registered."""

REQUIRED_ENV_VARS = ("BOT_TOKEN", "WEBHOOK_SECRET", "TELEGRAM_SECRET", "RAPIDAPI_KEY")


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, constructed once at startup.

    WHY: The provider client, the Telegram client and the webhook route all
    need secrets. Passing one explicit object avoids hidden global lookups
    and makes every dependency visible in constructor signatures.

    RULES:
    - bot_token: Telegram bot credential (from BotFather)
    - webhook_secret: path segment of the webhook URL
    - telegram_secret: value Telegram echoes in SECRET_HEADER
    - rapidapi_key: provider credential sent as x-rapidapi-key
    """

    bot_token: str
    webhook_secret: str
    telegram_secret: str
    rapidapi_key: str
    rapidapi_host: str = RAPIDAPI_HOST
    telegram_api_url: str = TELEGRAM_API_URL
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    @property
    def webhook_path(self) -> str:
        """Route path Telegram posts updates to."""
        return "/webhook/{}".format(self.webhook_secret)

    def __repr__(self) -> str:
        return "Settings(rapidapi_host={!r}, host={!r}, port={!r}, secrets=<hidden>)".format(
            self.rapidapi_host, self.host, self.port
        )


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the environment, refusing to start without secrets.

    WHY: A bot missing any of its secrets either cannot talk to Telegram,
    cannot authenticate webhook calls, or cannot reach the provider. Failing
    at startup is clearer than failing on the first message.

    HOW: Reads each required variable (stripped) from ``environ``, which
    defaults to os.environ (already populated from .env). Optional values
    fall back to the module-level defaults.

    RULES:
    - Raises ValueError listing all missing variables, not just the first
    - Empty or whitespace-only values count as missing
    """
    env = os.environ if environ is None else environ

    values = {name: (env.get(name) or "").strip() for name in REQUIRED_ENV_VARS}
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ValueError(
            "Missing required configuration: {}. "
            "Set them in the environment or in a .env file.".format(", ".join(missing))
        )

    port_raw = (env.get("PORT") or "").strip()
    try:
        port = int(port_raw) if port_raw else DEFAULT_PORT
    except ValueError:
        raise ValueError("PORT must be an integer, got {!r}".format(port_raw))

    return Settings(
        bot_token=values["BOT_TOKEN"],
        webhook_secret=values["WEBHOOK_SECRET"],
        telegram_secret=values["TELEGRAM_SECRET"],
        rapidapi_key=values["RAPIDAPI_KEY"],
        rapidapi_host=(env.get("RAPIDAPI_HOST") or RAPIDAPI_HOST).strip(),
        telegram_api_url=(env.get("TELEGRAM_API_URL") or TELEGRAM_API_URL).strip(),
        host=(env.get("HOST") or DEFAULT_HOST).strip(),
        port=port,
    )
