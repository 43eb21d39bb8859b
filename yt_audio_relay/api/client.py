"""Async HTTP client for the RapidAPI youtube-mp36 extraction provider.

WHY: The bot needs one thing from the provider: given a video identifier,
a direct MP3 link plus title, size and duration. This module hides the
HTTP details and turns every way that can go wrong into one typed error.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. ProviderClient is an
async context manager: enter it to get a client with the RapidAPI
credential headers set, exit to close the connection pool. A single GET
to /dl?id=<video_id> returns the metadata.

RULES:
- Always use the async context manager (async with ProviderClient(...) as provider:)
- Exactly one request per call; no retries, no caching
- httpx default timeout; no override
- Non-2xx and network errors -> ProviderError(TRANSPORT_FAILURE)
- status != "ok", missing link or non-object body -> ProviderError(EXTRACTION_NOT_READY)
- Repeated calls with the same id are safe; the provider may answer
  "processing" first and "ok" later
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Optional

import httpx

from yt_audio_relay.api.models import READY_STATUS, AudioMetadata
from yt_audio_relay.config import Settings

logger = logging.getLogger(__name__)

DOWNLOAD_PATH = "/dl"


class ProviderErrorKind(str, enum.Enum):
    """Why the provider could not deliver a usable result."""

    TRANSPORT_FAILURE = "transport_failure"
    EXTRACTION_NOT_READY = "extraction_not_ready"


class ProviderError(Exception):
    """Raised when the provider call does not yield a ready MP3 link.

    WHY: The orchestrator answers every provider problem the same way, but
    the logs need to tell a 403 from a conversion still in progress.

    RULES:
    - kind is always set
    - status_code is set for HTTP failures, None for network errors
    - provider_status is the payload's status field when there was one
    """

    def __init__(
        self,
        kind: ProviderErrorKind,
        message: str,
        status_code: Optional[int] = None,
        provider_status: Optional[str] = None,
    ) -> None:
        self.kind = kind
        self.status_code = status_code
        self.provider_status = provider_status
        super().__init__(message)


class ProviderClient:
    """Async client for the youtube-mp36 RapidAPI endpoint.

    HOW: Wraps httpx.AsyncClient with base_url https://<rapidapi_host> and
    the x-rapidapi-key / x-rapidapi-host headers. ``transport`` lets tests
    plug in httpx.MockTransport.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = settings.rapidapi_key
        self._host = settings.rapidapi_host
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> ProviderClient:
        self._client = httpx.AsyncClient(
            base_url="https://{}".format(self._host),
            headers={
                "x-rapidapi-key": self._api_key,
                "x-rapidapi-host": self._host,
            },
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "ProviderClient must be used as an async context manager: "
                "async with ProviderClient(settings) as provider: ..."
            )
        return self._client

    async def fetch_audio_metadata(self, video_id: str) -> AudioMetadata:
        """Ask the provider for the MP3 of ``video_id``.

        Args:
            video_id: Identifier returned by extract_video_id().

        Returns:
            AudioMetadata with status READY and a non-empty download_link.

        Raises:
            ProviderError: on HTTP failure or when no ready link is available.
        """
        client = self._ensure_client()

        try:
            resp = await client.get(DOWNLOAD_PATH, params={"id": video_id})
        except httpx.HTTPError as exc:
            raise ProviderError(
                ProviderErrorKind.TRANSPORT_FAILURE,
                "Provider request failed: {}".format(exc),
            ) from exc

        if not resp.is_success:
            raise ProviderError(
                ProviderErrorKind.TRANSPORT_FAILURE,
                "Provider error {}: {}".format(resp.status_code, resp.text[:200]),
                status_code=resp.status_code,
            )

        payload = _decode_payload(resp)
        if payload is None:
            raise ProviderError(
                ProviderErrorKind.EXTRACTION_NOT_READY,
                "Provider returned a non-object body for {}".format(video_id),
            )

        status = payload.get("status")
        if status != READY_STATUS or not payload.get("link"):
            provider_status = str(status) if status is not None else None
            raise ProviderError(
                ProviderErrorKind.EXTRACTION_NOT_READY,
                "Extractor not ready/failed for {}: {} ({})".format(
                    video_id, provider_status or "unknown", payload.get("msg") or "no message"
                ),
                provider_status=provider_status,
            )

        meta = AudioMetadata.from_dict(payload)
        logger.info(
            "Provider ready for %s | size=%s | duration=%.0fs",
            video_id, meta.size_bytes, meta.duration_s,
        )
        return meta


def _decode_payload(resp: httpx.Response) -> Optional[dict]:
    """Return the JSON body if it is an object, else None."""
    try:
        data: Any = resp.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None
