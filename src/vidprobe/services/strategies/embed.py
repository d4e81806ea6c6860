"""
oEmbed strategies.

oEmbed endpoints need no credential but only return coarse fields: title,
author name/URL and a thumbnail. They never carry engagement counters or
hashtags, so results from here are always low-confidence.
"""

from __future__ import annotations

from typing import ClassVar

from vidprobe.exceptions import MalformedResponseError
from vidprobe.models.enums import StrategyId
from vidprobe.models.payload import RawPayload
from vidprobe.services.strategies.base import ExtractionStrategy


class OEmbedStrategy(ExtractionStrategy):
    """Base class for oEmbed lookups against a fixed endpoint."""

    endpoint: ClassVar[str]

    def _endpoint(self) -> str:
        return self.endpoint

    async def extract(self, url: str, platform_id: str | None = None) -> RawPayload:
        response = await self._request(
            "GET",
            self._endpoint(),
            params={"url": url, "format": "json"},
            headers=self._api_headers(),
        )
        body = self._json_object(response)
        if not body.get("title") and not body.get("author_name"):
            raise MalformedResponseError(
                self.strategy_id, "oEmbed response has neither title nor author_name"
            )
        return self._payload(body)


class YouTubeOEmbedStrategy(OEmbedStrategy):
    strategy_id = StrategyId.YOUTUBE_OEMBED
    data_source = "YouTube oEmbed"
    endpoint = "https://www.youtube.com/oembed"


class TikTokOEmbedStrategy(OEmbedStrategy):
    strategy_id = StrategyId.TIKTOK_OEMBED
    data_source = "TikTok oEmbed"
    endpoint = "https://www.tiktok.com/oembed"


class InstagramOEmbedStrategy(OEmbedStrategy):
    """Instagram oEmbed; the endpoint is configurable through settings."""

    strategy_id = StrategyId.INSTAGRAM_OEMBED
    data_source = "Instagram oEmbed"
    endpoint = "https://api.instagram.com/oembed/"

    def _endpoint(self) -> str:
        return self._settings.instagram_oembed_url or self.endpoint
