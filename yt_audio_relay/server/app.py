"""FastAPI application: Telegram webhook and liveness endpoint.

WHY: Telegram delivers updates by POSTing them to a public HTTPS URL.
The web layer has to authenticate each call, acknowledge it fast enough
that Telegram does not retry, and hand the update off for processing.

HOW: create_app() builds a FastAPI app around an explicit Settings. The
lifespan opens the long-lived TelegramClient, builds a RelayBot and
starts an UpdateDispatcher with the bot's handle_update as handler. The
webhook route checks the path secret and the shared-secret header, then
calls dispatcher.submit() and returns 200 with an empty body.

RULES:
- Path segment != WEBHOOK_SECRET -> 404, nothing else happens
- Missing or wrong X-Telegram-Bot-Api-Secret-Token -> 401, nothing else happens
- Body that is not a JSON object -> 400
- The 200 acknowledgement never waits for the provider or Telegram
- GET /healthz returns the plain text "ok"
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import hmac
import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse, Response

from yt_audio_relay import __version__
from yt_audio_relay.config import SECRET_HEADER, Settings
from yt_audio_relay.server.dispatcher import UpdateDispatcher, UpdateHandler
from yt_audio_relay.telegram.bot import RelayBot
from yt_audio_relay.telegram.client import TelegramClient

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings,
    update_handler: Optional[UpdateHandler] = None,
) -> FastAPI:
    """Build the web app for ``settings``.

    Args:
        settings: Process configuration.
        update_handler: Replaces RelayBot.handle_update; used by tests and
            by anyone embedding the webhook without the Telegram client.

    Returns:
        A FastAPI app. The dispatcher is available as
        ``app.state.dispatcher`` while the app is running.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the Telegram client and run the dispatcher for the app's lifetime."""
        async with AsyncExitStack() as stack:
            handler = update_handler
            if handler is None:
                telegram = await stack.enter_async_context(TelegramClient(settings))
                handler = RelayBot(settings, telegram).handle_update

            dispatcher = UpdateDispatcher(handler)
            app.state.dispatcher = dispatcher
            dispatcher.start()
            try:
                yield
            finally:
                await dispatcher.stop()

    app = FastAPI(
        lifespan=lifespan,
        title="YouTube Audio Relay Bot",
        description=(
            "Telegram webhook that turns YouTube links into MP3 audio messages "
            "via the RapidAPI youtube-mp36 provider."
        ),
        version=__version__,
        docs_url=None,
        redoc_url=None,
    )

    @app.post(
        "/webhook/{path_secret}",
        tags=["telegram"],
        summary="Telegram webhook",
        description="Receives Telegram updates. Acknowledges immediately; processing happens in the background.",
    )
    async def telegram_webhook(path_secret: str, request: Request) -> Response:
        if not hmac.compare_digest(path_secret.encode(), settings.webhook_secret.encode()):
            raise HTTPException(status_code=404, detail="Not Found")

        header_value = request.headers.get(SECRET_HEADER, "")
        if not hmac.compare_digest(header_value.encode(), settings.telegram_secret.encode()):
            logger.warning("Rejected webhook call with bad secret header from %s", _client_host(request))
            return Response(status_code=401)

        try:
            update = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Body must be JSON")
        if not isinstance(update, dict):
            raise HTTPException(status_code=400, detail="Body must be a JSON object")

        request.app.state.dispatcher.submit(update)
        return Response(status_code=200)

    @app.get(
        "/healthz",
        response_class=PlainTextResponse,
        tags=["health"],
        summary="Liveness check",
        description="Returns the plain text 'ok' while the process is up.",
    )
    async def healthz() -> str:
        return "ok"

    return app


def run_server(settings: Settings) -> None:
    """Serve the app with uvicorn on settings.host:settings.port (blocking)."""
    import uvicorn

    logger.info("Listening on %s:%d", settings.host, settings.port)
    logger.info("Webhook path: /webhook/%s", _mask(settings.webhook_secret))
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _mask(secret: str) -> str:
    """Show only the first characters of a secret in logs."""
    if len(secret) <= 4:
        return "****"
    return secret[:4] + "****"
