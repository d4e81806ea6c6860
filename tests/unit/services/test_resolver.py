"""
End-to-end tests for the VideoResolver facade.

The real default strategy chains run against a fake HTTP backend, so these
tests cover detection, chain ordering, normalization and enrichment
together.
"""

from __future__ import annotations

import json

import httpx
import pytest

from tests.fakes import FakeBackend
from vidprobe.config.settings import Settings
from vidprobe.exceptions import ExtractionFailedError, UnsupportedPlatformError
from vidprobe.models.enums import FailureKind, Platform, StrategyId
from vidprobe.services.resolver import VideoResolver, resolve_video
from vidprobe.services.strategies.official import YOUTUBE_API_BASE_URL

# CRITICAL: Ensures async tests work with coverage
pytestmark = pytest.mark.asyncio

YOUTUBE_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
TIKTOK_URL = "https://www.tiktok.com/@dancer/video/7234567890123456789"
INSTAGRAM_URL = "https://www.instagram.com/reel/Cxyz123/"

VIDEO_ITEM = {
    "id": "dQw4w9WgXcQ",
    "snippet": {
        "title": "Never Gonna Give You Up",
        "description": "Official video #80s #pop #80s",
        "channelId": "UCuAXFkgsw1L7xaCfnd5JJOw",
        "channelTitle": "Rick Astley",
        "publishedAt": "2009-10-25T06:57:33Z",
    },
    "statistics": {"viewCount": "1000", "likeCount": "150", "commentCount": "7"},
    "contentDetails": {"duration": "PT3M33S"},
}


def _resolver(client: httpx.AsyncClient, settings: Settings) -> VideoResolver:
    return VideoResolver(settings=settings, client=client)


class TestYouTubeResolution:
    """YouTube resolution through the default chain."""

    async def test_official_api_success_is_authentic(
        self, http_client: httpx.AsyncClient, settings: Settings, backend: FakeBackend
    ) -> None:
        backend.add(
            f"{YOUTUBE_API_BASE_URL}/videos", httpx.Response(200, json={"items": [VIDEO_ITEM]})
        )
        backend.add(f"{YOUTUBE_API_BASE_URL}/channels", httpx.Response(200, json={"items": []}))

        metadata = await _resolver(http_client, settings).resolve_video(YOUTUBE_URL)

        assert metadata.platform is Platform.YOUTUBE
        assert metadata.title == "Never Gonna Give You Up"
        assert metadata.engagement.views == 1000
        assert metadata.engagement.likes == 150
        assert metadata.rating == 5
        assert metadata.duration_seconds == 213
        assert metadata.hashtags == ["#80s", "#pop"]
        assert metadata.source_url == YOUTUBE_URL
        assert metadata.provenance.is_authentic is True
        assert metadata.provenance.extraction_method is StrategyId.YOUTUBE_DATA_API
        assert metadata.provenance.data_source == "YouTube Data API v3"
        assert set(backend.hosts()) == {"www.googleapis.com"}

    async def test_without_keys_falls_back_to_oembed(
        self,
        http_client: httpx.AsyncClient,
        keyless_settings: Settings,
        backend: FakeBackend,
    ) -> None:
        backend.add(
            "https://www.youtube.com/oembed",
            httpx.Response(
                200,
                json={
                    "title": "Never Gonna Give You Up",
                    "author_name": "Rick Astley",
                    "author_url": "https://www.youtube.com/@RickAstleyYT",
                },
            ),
        )

        metadata = await _resolver(http_client, keyless_settings).resolve_video(YOUTUBE_URL)

        assert metadata.provenance.is_authentic is False
        assert metadata.provenance.extraction_method is StrategyId.YOUTUBE_OEMBED
        assert metadata.author.handle == "RickAstleyYT"
        assert metadata.engagement.views == 0
        assert metadata.rating == 0
        # Keyless strategies fail fast without touching the network.
        assert backend.hosts() == ["www.youtube.com"]

    async def test_every_strategy_failing_raises_with_reasons(
        self,
        http_client: httpx.AsyncClient,
        keyless_settings: Settings,
        backend: FakeBackend,
    ) -> None:
        with pytest.raises(ExtractionFailedError) as exc_info:
            await _resolver(http_client, keyless_settings).resolve_video(YOUTUBE_URL)

        error = exc_info.value
        assert error.url == YOUTUBE_URL
        assert error.platform is Platform.YOUTUBE
        assert [r.strategy_id for r in error.reasons] == [
            StrategyId.YOUTUBE_DATA_API,
            StrategyId.YOUTUBE_RAPIDAPI,
            StrategyId.YOUTUBE_OEMBED,
            StrategyId.YOUTUBE_SCRAPE,
        ]
        assert [r.kind for r in error.reasons] == [
            FailureKind.MISSING_CREDENTIAL,
            FailureKind.MISSING_CREDENTIAL,
            FailureKind.NETWORK_ERROR,
            FailureKind.NETWORK_ERROR,
        ]
        assert error.all_missing_credentials is True
        assert error.failure_counts == {
            FailureKind.MISSING_CREDENTIAL: 2,
            FailureKind.NETWORK_ERROR: 2,
        }

    async def test_quota_exhaustion_moves_to_proxy(
        self, http_client: httpx.AsyncClient, settings: Settings, backend: FakeBackend
    ) -> None:
        backend.add(
            f"{YOUTUBE_API_BASE_URL}/videos",
            httpx.Response(403, json={"error": {"errors": [{"reason": "quotaExceeded"}]}}),
        )
        backend.add(
            "https://youtube-v31.p.rapidapi.com/videos",
            httpx.Response(200, json={"items": [VIDEO_ITEM]}),
        )

        metadata = await _resolver(http_client, settings).resolve_video(YOUTUBE_URL)

        assert metadata.provenance.extraction_method is StrategyId.YOUTUBE_RAPIDAPI
        assert metadata.provenance.is_authentic is True
        assert metadata.author.display_name == "Rick Astley"


class TestTikTokResolution:
    """TikTok resolution through the default chain."""

    async def test_strategy_hashtags_are_kept(
        self, http_client: httpx.AsyncClient, settings: Settings, backend: FakeBackend
    ) -> None:
        data = {
            "video": {"desc": "Dance #fyp", "challenges": [{"title": "viral"}]},
            "author": {"uniqueId": "dancer"},
            "stats": {"playCount": 100, "diggCount": 3},
        }
        backend.add(
            "https://tiktok-scraper7.p.rapidapi.com/video/info",
            httpx.Response(200, json={"data": data}),
        )

        metadata = await _resolver(http_client, settings).resolve_video(TIKTOK_URL)

        assert metadata.provenance.extraction_method is StrategyId.TIKTOK_SCRAPER_API
        assert metadata.hashtags == ["#fyp", "#viral"]
        assert metadata.rating == 3

    async def test_proxy_failures_fall_through_to_oembed(
        self, http_client: httpx.AsyncClient, settings: Settings, backend: FakeBackend
    ) -> None:
        backend.add("https://tiktok-scraper7.p.rapidapi.com/", httpx.Response(429))
        backend.add("https://tiktok-video-no-watermark2.p.rapidapi.com/", httpx.Response(500))
        backend.add("https://tiktok-download-without-watermark.p.rapidapi.com/", httpx.Response(502))
        backend.add(
            "https://www.tiktok.com/oembed",
            httpx.Response(200, json={"title": "Dance #fyp #dance", "author_unique_id": "dancer"}),
        )

        metadata = await _resolver(http_client, settings).resolve_video(TIKTOK_URL)

        assert metadata.provenance.extraction_method is StrategyId.TIKTOK_OEMBED
        assert metadata.provenance.is_authentic is False
        assert metadata.author.handle == "dancer"
        assert backend.hosts() == [
            "tiktok-scraper7.p.rapidapi.com",
            "tiktok-video-no-watermark2.p.rapidapi.com",
            "tiktok-download-without-watermark.p.rapidapi.com",
            "www.tiktok.com",
        ]


class TestInstagramResolution:
    """Instagram resolution through the default chain."""

    async def test_scrape_is_last_resort(
        self,
        http_client: httpx.AsyncClient,
        keyless_settings: Settings,
        backend: FakeBackend,
    ) -> None:
        page = (
            '<html><body><script type="application/ld+json">'
            + json.dumps(
                {
                    "@type": "VideoObject",
                    "name": "Reel",
                    "caption": "Beach day #summer #sea",
                    "author": {"alternateName": "@photog"},
                }
            )
            + "</script></body></html>"
        )
        backend.add("https://api.instagram.com/oembed/", httpx.Response(404))
        backend.add("https://www.instagram.com/reel/", httpx.Response(200, text=page))

        metadata = await _resolver(http_client, keyless_settings).resolve_video(INSTAGRAM_URL)

        assert metadata.provenance.extraction_method is StrategyId.INSTAGRAM_SCRAPE
        assert metadata.provenance.is_authentic is False
        assert metadata.author.handle == "photog"
        assert metadata.hashtags == ["#summer", "#sea"]


class TestResolverLifecycle:
    """Detection errors and client ownership."""

    async def test_unsupported_url_makes_no_request(
        self, http_client: httpx.AsyncClient, settings: Settings, backend: FakeBackend
    ) -> None:
        with pytest.raises(UnsupportedPlatformError):
            await _resolver(http_client, settings).resolve_video("https://vimeo.com/123")
        assert backend.requests == []

    async def test_owned_client_is_closed(self, settings: Settings) -> None:
        async with VideoResolver(settings=settings) as resolver:
            client = resolver._client
            assert client.is_closed is False
        assert client.is_closed is True

    async def test_injected_client_is_left_open(
        self, http_client: httpx.AsyncClient, settings: Settings
    ) -> None:
        async with VideoResolver(settings=settings, client=http_client):
            pass
        assert http_client.is_closed is False
        await http_client.aclose()

    async def test_module_level_helper_rejects_unsupported_url(
        self, settings: Settings
    ) -> None:
        with pytest.raises(UnsupportedPlatformError):
            await resolve_video("ftp://files.example.com/video.mp4", settings=settings)
