"""Command-line interface for the YouTube Audio Relay bot.

WHY: Operators need three things from a terminal: run the webhook server,
register the webhook URL with Telegram, and check what the bot would
extract from a given piece of text.

HOW: argparse with subcommands. ``serve`` loads Settings (refusing to
start without the four secrets) and runs uvicorn. ``set-webhook`` calls
the Bot API setWebhook with the shared secret. ``extract`` runs the
identifier extractor locally with no network access.

RULES:
- Missing configuration -> message on stderr, exit status 1
- Status output goes to stderr; ``extract`` prints the identifier to stdout
- ``extract`` exits 1 when no identifier is found
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from typing import List, Optional

import httpx

from yt_audio_relay import __version__
from yt_audio_relay.config import LOG_LEVEL, Settings, load_settings
from yt_audio_relay.core.extractor import extract_video_id
from yt_audio_relay.telegram.client import TelegramAPIError, TelegramClient


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def _configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def _try_load_settings() -> Optional[Settings]:
    try:
        return load_settings()
    except ValueError as exc:
        _status("Error: {}".format(exc))
        return None


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="yt-audio-relay",
        description="Telegram bot that replies to YouTube links with MP3 audio.",
    )
    parser.add_argument("--version", action="version", version="%(prog)s " + __version__)
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the webhook server.")
    serve.add_argument("--host", default=None, help="Bind address (default: HOST or 0.0.0.0).")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: PORT or 10000).")

    webhook = sub.add_parser("set-webhook", help="Register the webhook URL with Telegram.")
    webhook.add_argument(
        "public_url",
        help="Public HTTPS base URL of this server, e.g. https://relay.example.com",
    )

    extract = sub.add_parser("extract", help="Print the video identifier found in TEXT.")
    extract.add_argument("text", help="Message text or link to inspect.")

    return parser


def cmd_serve(args: argparse.Namespace) -> int:
    settings = _try_load_settings()
    if settings is None:
        return 1

    overrides = {}
    if args.host:
        overrides["host"] = args.host
    if args.port:
        overrides["port"] = args.port
    if overrides:
        settings = replace(settings, **overrides)

    from yt_audio_relay.server.app import run_server

    run_server(settings)
    return 0


def cmd_set_webhook(args: argparse.Namespace) -> int:
    settings = _try_load_settings()
    if settings is None:
        return 1

    url = "{}{}".format(args.public_url.rstrip("/"), settings.webhook_path)

    async def _register() -> None:
        async with TelegramClient(settings) as telegram:
            await telegram.set_webhook(url, secret_token=settings.telegram_secret)

    try:
        asyncio.run(_register())
    except (TelegramAPIError, httpx.HTTPError) as exc:
        _status("Failed to set webhook: {}".format(exc))
        return 1

    _status("Webhook registered at {}/webhook/<WEBHOOK_SECRET>".format(args.public_url.rstrip("/")))
    return 0


def cmd_extract(args: argparse.Namespace) -> int:
    video_id = extract_video_id(args.text)
    if video_id is None:
        _status("No video identifier found.")
        return 1
    print(video_id)
    return 0


_COMMANDS = {
    "serve": cmd_serve,
    "set-webhook": cmd_set_webhook,
    "extract": cmd_extract,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the yt-audio-relay console script."""
    _configure_logging()
    args = build_parser().parse_args(argv)
    return _COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
