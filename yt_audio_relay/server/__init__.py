"""Web ingress: FastAPI webhook app and the background update dispatcher.

WHY: Telegram needs a fast 200 for every webhook call, while producing a
reply can take as long as the provider does. This package separates the
two: the app acknowledges, the dispatcher processes.

RULES:
- The webhook authenticates before doing anything else
- Processing errors never reach the HTTP response
"""

from yt_audio_relay.server.app import create_app, run_server
from yt_audio_relay.server.dispatcher import UpdateDispatcher

__all__ = ["UpdateDispatcher", "create_app", "run_server"]
