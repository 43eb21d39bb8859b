"""Extraction provider package: async HTTP interface to RapidAPI youtube-mp36.

WHY: Converting a video to MP3 is delegated to a third-party service.
This package keeps every provider detail (host, headers, payload quirks)
behind one client class and one error type.

RULES:
- All provider HTTP calls go through ProviderClient
- Authentication is via the x-rapidapi-key header from Settings
"""

from yt_audio_relay.api.client import ProviderClient, ProviderError, ProviderErrorKind
from yt_audio_relay.api.models import AudioMetadata, AudioStatus

__all__ = [
    "AudioMetadata",
    "AudioStatus",
    "ProviderClient",
    "ProviderError",
    "ProviderErrorKind",
]
