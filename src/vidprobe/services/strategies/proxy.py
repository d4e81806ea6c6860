"""
RapidAPI gateway strategies.

Third-party APIs on the RapidAPI marketplace mirror platform records for
YouTube, TikTok and Instagram. Every call carries the ``X-RapidAPI-Key``
and ``X-RapidAPI-Host`` headers. For TikTok and Instagram, which have no
public first-party metadata API, these are the highest-priority strategies.

Classes
-------
YouTubeRapidAPIStrategy
    youtube-v31 mirror of the Data API ``videos`` resource.
TikTokScraperAPIStrategy
    Specialized TikTok scraper API with its own key.
TikTokRapidAPIStrategy
    General TikTok mirrors, tried host by host within one strategy step.
InstagramRapidAPIStrategy
    Instagram post-info mirror.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar

from vidprobe.exceptions import MalformedResponseError, NotFoundError, StrategyError
from vidprobe.models.enums import StrategyId
from vidprobe.models.payload import RawPayload
from vidprobe.services.detection import extract_youtube_video_id
from vidprobe.services.strategies.base import CredentialedStrategy, first_item

logger = logging.getLogger(__name__)


class RapidAPIStrategy(CredentialedStrategy):
    """Base class for strategies reached through the RapidAPI gateway."""

    credential_setting = "rapidapi_key"
    host: ClassVar[str]

    def _gateway_headers(self, api_key: str, host: str | None = None) -> dict[str, str]:
        headers = self._api_headers()
        headers["X-RapidAPI-Key"] = api_key
        headers["X-RapidAPI-Host"] = host or self.host
        return headers

    def _object_field(self, body: dict[str, Any], key: str) -> dict[str, Any]:
        """Return a mandatory nested object or raise ``MalformedResponseError``."""
        value = body.get(key)
        if not isinstance(value, dict):
            raise MalformedResponseError(self.strategy_id, f"Response has no '{key}' object")
        return value


class YouTubeRapidAPIStrategy(RapidAPIStrategy):
    """
    Extract YouTube metadata through the youtube-v31 RapidAPI mirror.

    The mirror returns Data API shaped items, so the payload shape matches
    the official strategy with no channel record.
    """

    strategy_id = StrategyId.YOUTUBE_RAPIDAPI
    host = "youtube-v31.p.rapidapi.com"
    data_source = "RapidAPI youtube-v31.p.rapidapi.com"

    async def extract(self, url: str, platform_id: str | None = None) -> RawPayload:
        api_key = self._credential()
        video_id = platform_id or extract_youtube_video_id(url)
        if not video_id:
            raise NotFoundError(self.strategy_id, "No YouTube video ID in URL")

        response = await self._request(
            "GET",
            f"https://{self.host}/videos",
            params={"part": "contentDetails,snippet,statistics", "id": video_id},
            headers=self._gateway_headers(api_key),
        )
        video = first_item(self.strategy_id, self._json_object(response))
        return self._payload({"video": video, "channel": None})


class TikTokScraperAPIStrategy(RapidAPIStrategy):
    """
    Extract TikTok metadata through the specialized tiktok-scraper7 API.

    Uses its own ``RAPIDAPI_KEY_TIKTOK`` subscription. The response carries
    ``data.video``, ``data.author`` and ``data.stats`` objects; only
    ``data.video`` is mandatory.
    """

    strategy_id = StrategyId.TIKTOK_SCRAPER_API
    credential_setting = "rapidapi_key_tiktok"
    host = "tiktok-scraper7.p.rapidapi.com"
    data_source = "TikTok Scraper API"

    async def extract(self, url: str, platform_id: str | None = None) -> RawPayload:
        api_key = self._credential()
        response = await self._request(
            "POST",
            f"https://{self.host}/video/info",
            headers=self._gateway_headers(api_key),
            json={"url": url},
        )
        data = self._object_field(self._json_object(response), "data")
        if not isinstance(data.get("video"), dict):
            raise MalformedResponseError(self.strategy_id, "No video data returned from TikTok API")
        return self._payload(data)


class TikTokRapidAPIStrategy(RapidAPIStrategy):
    """
    Extract TikTok metadata through general RapidAPI TikTok mirrors.

    Each mirror in ``HOSTS`` is tried in order inside this single strategy
    step. The first mirror returning a ``data`` or ``video`` object wins and
    is named in the payload's data source. If all mirrors fail, the last
    mirror's failure is raised.
    """

    strategy_id = StrategyId.TIKTOK_RAPIDAPI
    data_source = "RapidAPI TikTok"
    HOSTS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("tiktok-video-no-watermark2.p.rapidapi.com", "/video/info"),
        ("tiktok-download-without-watermark.p.rapidapi.com", "/video-info"),
    )

    async def extract(self, url: str, platform_id: str | None = None) -> RawPayload:
        api_key = self._credential()
        last_error: StrategyError | None = None

        for host, path in self.HOSTS:
            try:
                response = await self._request(
                    "POST",
                    f"https://{host}{path}",
                    headers=self._gateway_headers(api_key, host),
                    json={"url": url},
                )
                body = self._json_object(response)
            except StrategyError as e:
                logger.debug("TikTok mirror %s failed: %s", host, e.message)
                last_error = e
                continue

            info = body.get("data") if isinstance(body.get("data"), dict) else body.get("video")
            if isinstance(info, dict):
                return self._payload(info, data_source=f"RapidAPI {host}")
            last_error = MalformedResponseError(
                self.strategy_id, f"Mirror {host} returned no video object"
            )

        raise last_error or MalformedResponseError(
            self.strategy_id, "No TikTok mirrors configured"
        )


class InstagramRapidAPIStrategy(RapidAPIStrategy):
    """Extract Instagram post metadata through the instagram-scraper-api2 mirror."""

    strategy_id = StrategyId.INSTAGRAM_RAPIDAPI
    host = "instagram-scraper-api2.p.rapidapi.com"
    data_source = "RapidAPI instagram-scraper-api2.p.rapidapi.com"

    async def extract(self, url: str, platform_id: str | None = None) -> RawPayload:
        api_key = self._credential()
        response = await self._request(
            "GET",
            f"https://{self.host}/v1/post_info",
            params={"code_or_id_or_url": platform_id or url},
            headers=self._gateway_headers(api_key),
        )
        data = self._object_field(self._json_object(response), "data")
        return self._payload(data)
