"""
Unit tests for the oEmbed strategies.
"""

from __future__ import annotations

import httpx
import pytest

from tests.fakes import FakeBackend
from vidprobe.config.settings import Settings
from vidprobe.exceptions import MalformedResponseError, NotFoundError
from vidprobe.services.strategies.embed import (
    InstagramOEmbedStrategy,
    TikTokOEmbedStrategy,
    YouTubeOEmbedStrategy,
)

# CRITICAL: Ensures async tests work with coverage
pytestmark = pytest.mark.asyncio

YOUTUBE_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


class TestOEmbedStrategies:
    """Tests for oEmbed lookups."""

    async def test_youtube_success_without_credentials(
        self,
        http_client: httpx.AsyncClient,
        keyless_settings: Settings,
        backend: FakeBackend,
    ) -> None:
        body = {"title": "Never Gonna Give You Up", "author_name": "Rick Astley"}
        backend.add("https://www.youtube.com/oembed", httpx.Response(200, json=body))
        strategy = YouTubeOEmbedStrategy(http_client, keyless_settings)

        payload = await strategy.extract(YOUTUBE_URL, "dQw4w9WgXcQ")

        assert payload.data == body
        assert payload.data_source == "YouTube oEmbed"
        params = backend.requests[0].url.params
        assert params["url"] == YOUTUBE_URL
        assert params["format"] == "json"

    async def test_tiktok_author_only_is_enough(
        self, http_client: httpx.AsyncClient, settings: Settings, backend: FakeBackend
    ) -> None:
        body = {"author_name": "The Dancer", "author_unique_id": "dancer"}
        backend.add("https://www.tiktok.com/oembed", httpx.Response(200, json=body))
        strategy = TikTokOEmbedStrategy(http_client, settings)

        payload = await strategy.extract("https://www.tiktok.com/@dancer/video/1")

        assert payload.data == body

    async def test_empty_body_is_malformed(
        self, http_client: httpx.AsyncClient, settings: Settings, backend: FakeBackend
    ) -> None:
        backend.add("https://www.youtube.com/oembed", httpx.Response(200, json={"version": "1.0"}))
        strategy = YouTubeOEmbedStrategy(http_client, settings)

        with pytest.raises(MalformedResponseError):
            await strategy.extract(YOUTUBE_URL)

    async def test_private_video_is_not_found(
        self, http_client: httpx.AsyncClient, settings: Settings, backend: FakeBackend
    ) -> None:
        backend.add("https://www.youtube.com/oembed", httpx.Response(404, text="Not Found"))
        strategy = YouTubeOEmbedStrategy(http_client, settings)

        with pytest.raises(NotFoundError):
            await strategy.extract(YOUTUBE_URL)

    async def test_instagram_endpoint_is_configurable(
        self, http_client: httpx.AsyncClient, backend: FakeBackend
    ) -> None:
        endpoint = "https://graph.facebook.com/v18.0/instagram_oembed"
        custom = Settings(instagram_oembed_url=endpoint, _env_file=None)
        backend.add(endpoint, httpx.Response(200, json={"title": "Post"}))
        strategy = InstagramOEmbedStrategy(http_client, custom)

        payload = await strategy.extract("https://www.instagram.com/p/Abc123/")

        assert payload.data == {"title": "Post"}
        assert backend.hosts() == ["graph.facebook.com"]

    async def test_instagram_default_endpoint(
        self, http_client: httpx.AsyncClient, settings: Settings, backend: FakeBackend
    ) -> None:
        backend.add("https://api.instagram.com/oembed/", httpx.Response(200, json={"title": "P"}))
        strategy = InstagramOEmbedStrategy(http_client, settings)

        await strategy.extract("https://www.instagram.com/p/Abc123/")

        assert backend.hosts() == ["api.instagram.com"]
