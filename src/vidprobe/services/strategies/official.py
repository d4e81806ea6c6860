"""
Official YouTube Data API v3 strategy.

Looks up the video (snippet, statistics, contentDetails) and then, as a
single dependent call, the uploading channel. A failed channel lookup
never fails the strategy; author fields simply fall back to defaults.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from vidprobe.exceptions import NotFoundError, RateLimitedError, StrategyError
from vidprobe.models.enums import StrategyId
from vidprobe.models.payload import RawPayload
from vidprobe.services.detection import extract_youtube_video_id
from vidprobe.services.strategies.base import CredentialedStrategy, first_item

logger = logging.getLogger(__name__)

YOUTUBE_API_BASE_URL = "https://www.googleapis.com/youtube/v3"

# Error reasons in a 403 body that mean quota or rate exhaustion rather
# than a rejected key.
_QUOTA_REASONS = frozenset(
    {"quotaExceeded", "rateLimitExceeded", "dailyLimitExceeded", "userRateLimitExceeded"}
)


def _error_reasons(response: httpx.Response) -> set[str]:
    """Collect ``error.errors[].reason`` values from a YouTube error body."""
    try:
        body = response.json()
    except ValueError:
        return set()
    error = body.get("error") if isinstance(body, dict) else None
    if not isinstance(error, dict):
        return set()
    errors = error.get("errors")
    if not isinstance(errors, list):
        return set()
    return {str(e.get("reason")) for e in errors if isinstance(e, dict) and e.get("reason")}


class YouTubeDataAPIStrategy(CredentialedStrategy):
    """
    Extract YouTube metadata through the official Data API v3.

    Requires ``YOUTUBE_API_KEY``. Produces a payload of the form
    ``{"video": <videos.list item>, "channel": <channels.list item> | None}``.
    """

    strategy_id = StrategyId.YOUTUBE_DATA_API
    data_source = "YouTube Data API v3"
    credential_setting = "youtube_api_key"

    async def extract(self, url: str, platform_id: str | None = None) -> RawPayload:
        api_key = self._credential()
        video_id = platform_id or extract_youtube_video_id(url)
        if not video_id:
            raise NotFoundError(self.strategy_id, "No YouTube video ID in URL")

        response = await self._request(
            "GET",
            f"{YOUTUBE_API_BASE_URL}/videos",
            params={"part": "snippet,statistics,contentDetails", "id": video_id, "key": api_key},
            headers=self._api_headers(),
        )
        video = first_item(self.strategy_id, self._json_object(response))
        channel = await self._fetch_channel(video, api_key)
        return self._payload({"video": video, "channel": channel})

    async def _fetch_channel(self, video: dict[str, Any], api_key: str) -> dict[str, Any] | None:
        """
        Look up the uploading channel for author enrichment.

        Parameters
        ----------
        video : dict[str, Any]
            The ``videos.list`` item.
        api_key : str
            YouTube Data API key.

        Returns
        -------
        dict[str, Any] | None
            The ``channels.list`` item, or ``None`` if the video names no
            channel or the lookup failed for any reason.
        """
        snippet = video.get("snippet")
        channel_id = snippet.get("channelId") if isinstance(snippet, dict) else None
        if not channel_id:
            return None

        try:
            response = await self._request(
                "GET",
                f"{YOUTUBE_API_BASE_URL}/channels",
                params={"part": "snippet,statistics", "id": str(channel_id), "key": api_key},
                headers=self._api_headers(),
            )
            return first_item(self.strategy_id, self._json_object(response))
        except StrategyError as e:
            logger.info(
                "Channel lookup for %s failed (%s); author fields use defaults",
                channel_id,
                e.kind.value,
            )
            return None

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.status_code == 403 and _error_reasons(response) & _QUOTA_REASONS:
            raise RateLimitedError(
                self.strategy_id, "YouTube API quota exceeded", response.status_code
            )
        super()._raise_for_status(response)
