"""Tests for the yt-audio-relay command line.

WHY: Operators rely on exit codes in deploy scripts. A missing secret has
to stop ``serve`` with status 1 rather than start a broken server.

HOW: main() is called with an argv list. load_settings, run_server and
TelegramClient are patched where a test would otherwise need the
environment or the network.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from yt_audio_relay.cli import main
from yt_audio_relay.telegram.client import TelegramAPIError


class TestExtract:
    def test_prints_identifier(self, capsys):
        assert main(["extract", "https://youtu.be/dQw4w9WgXcQ"]) == 0
        assert capsys.readouterr().out.strip() == "dQw4w9WgXcQ"

    def test_no_identifier(self, capsys):
        assert main(["extract", "hello"]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "No video identifier" in captured.err


class TestServe:
    def test_missing_configuration(self, capsys):
        with patch("yt_audio_relay.cli.load_settings", side_effect=ValueError("Missing required configuration: BOT_TOKEN")):
            assert main(["serve"]) == 1
        assert "BOT_TOKEN" in capsys.readouterr().err

    def test_overrides_host_and_port(self, settings):
        with patch("yt_audio_relay.cli.load_settings", return_value=settings), patch(
            "yt_audio_relay.server.app.run_server"
        ) as run_server:
            assert main(["serve", "--host", "127.0.0.1", "--port", "8080"]) == 0

        served = run_server.call_args.args[0]
        assert served.host == "127.0.0.1"
        assert served.port == 8080
        assert served.bot_token == settings.bot_token


class TestSetWebhook:
    def _telegram(self, set_webhook):
        telegram = MagicMock()
        telegram.set_webhook = set_webhook
        client_cls = MagicMock()
        client_cls.return_value.__aenter__ = AsyncMock(return_value=telegram)
        client_cls.return_value.__aexit__ = AsyncMock(return_value=None)
        return client_cls

    def test_registers_url_with_secret(self, settings):
        set_webhook = AsyncMock(return_value=True)
        with patch("yt_audio_relay.cli.load_settings", return_value=settings), patch(
            "yt_audio_relay.cli.TelegramClient", self._telegram(set_webhook)
        ):
            assert main(["set-webhook", "https://relay.example.com/"]) == 0

        set_webhook.assert_awaited_once_with(
            "https://relay.example.com/webhook/whk_test123",
            secret_token="tg-shared-secret",
        )

    def test_api_error_returns_1(self, settings, capsys):
        set_webhook = AsyncMock(side_effect=TelegramAPIError("setWebhook", 401, "Unauthorized"))
        with patch("yt_audio_relay.cli.load_settings", return_value=settings), patch(
            "yt_audio_relay.cli.TelegramClient", self._telegram(set_webhook)
        ):
            assert main(["set-webhook", "https://relay.example.com"]) == 1

        assert "Unauthorized" in capsys.readouterr().err


class TestParser:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            main([])
