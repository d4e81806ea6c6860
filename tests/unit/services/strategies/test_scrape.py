"""
Unit tests for the HTML scrape strategies.

Tests cover:
- Balanced JSON extraction from page source
- Meta tag extraction (BeautifulSoup)
- Embedded state blobs per platform, with meta-tag fallback

All tests mock httpx responses. No live HTTP calls are made.
"""

from __future__ import annotations

import json

import httpx
import pytest
from bs4 import BeautifulSoup

from tests.fakes import FakeBackend
from vidprobe.config.settings import Settings
from vidprobe.exceptions import MalformedResponseError, NotFoundError
from vidprobe.services.strategies.scrape import (
    InstagramScrapeStrategy,
    TikTokScrapeStrategy,
    YouTubeScrapeStrategy,
    extract_json_object,
    extract_meta_tags,
)

YOUTUBE_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
TIKTOK_URL = "https://www.tiktok.com/@dancer/video/7234567890123456789"
INSTAGRAM_URL = "https://www.instagram.com/reel/Cxyz123/"

# ============================================================================
# HTML Test Fixtures
# ============================================================================

YOUTUBE_PAGE_WITH_JSON = """
<html><head>
<meta property="og:title" content="Meta Title Fallback">
</head><body>
<script>var ytInitialPlayerResponse = {"videoDetails":{"title":"JSON Title","shortDescription":"Uses {braces} and \\"quotes\\"","author":"Test Channel","viewCount":"1000000","lengthSeconds":"212"},"microformat":{"playerMicroformatRenderer":{"publishDate":"2021-06-15"}}};var other = {};</script>
</body></html>
"""

YOUTUBE_PAGE_BROKEN_JSON = """
<html><head>
<title>Meta Video Title - YouTube</title>
<meta property="og:title" content="Meta Video Title">
<meta property="og:description" content="Meta description">
<meta property="og:image" content="https://i.ytimg.com/vi/x/hqdefault.jpg">
<meta name="description" content="Plain description">
<meta name="keywords" content="music, classic">
</head><body>
<script>var ytInitialPlayerResponse = {"videoDetails": {"title": "unterminated"</script>
</body></html>
"""

EMPTY_PAGE = "<html><head></head><body><p>Nothing here</p></body></html>"

TIKTOK_ITEM = {
    "id": "7234567890123456789",
    "desc": "Dance #fyp",
    "stats": {"playCount": 100, "diggCount": 10},
    "author": {"uniqueId": "dancer", "nickname": "The Dancer"},
}

TIKTOK_REHYDRATION_PAGE = (
    '<html><head><meta property="og:title" content="fallback"></head><body>'
    '<script id="__UNIVERSAL_DATA_FOR_REHYDRATION__" type="application/json">'
    + json.dumps(
        {"__DEFAULT_SCOPE__": {"webapp.video-detail": {"itemInfo": {"itemStruct": TIKTOK_ITEM}}}}
    )
    + "</script></body></html>"
)

TIKTOK_ASSIGNMENT_PAGE = (
    "<html><body><script>window.__UNIVERSAL_DATA_FOR_REHYDRATION__ = "
    + json.dumps({"default": {"webapp.video-detail": {"itemInfo": {"itemStruct": TIKTOK_ITEM}}}})
    + ";</script></body></html>"
)

TIKTOK_SIGI_PAGE = (
    '<html><body><script id="SIGI_STATE" type="application/json">'
    + json.dumps(
        {
            "ItemModule": {
                "7234567890123456789": {
                    "id": "7234567890123456789",
                    "desc": "Old layout #retro",
                    "author": "dancer",
                    "stats": {"playCount": 50},
                }
            },
            "UserModule": {
                "users": {"dancer": {"nickname": "The Dancer", "verified": True}},
                "stats": {"dancer": {"followerCount": 777}},
            },
        }
    )
    + "</script></body></html>"
)

INSTAGRAM_LD_PAGE = (
    '<html><head><meta property="og:title" content="fallback"></head><body>'
    '<script type="application/ld+json">{"@type": "BreadcrumbList"}</script>'
    '<script type="application/ld+json">'
    + json.dumps([{"@type": "VideoObject", "name": "Reel", "caption": "Beach #summer"}])
    + "</script></body></html>"
)

INSTAGRAM_META_PAGE = """
<html><head>
<meta property="og:title" content="Photo G on Instagram">
<meta property="og:description" content="1,234 likes, 56 comments - photog on August 1, 2023: hi">
</head><body></body></html>
"""


def _html(text: str, status: int = 200) -> httpx.Response:
    return httpx.Response(status, text=text, headers={"Content-Type": "text/html"})


# ============================================================================
# Helpers
# ============================================================================


class TestExtractJsonObject:
    """Tests for brace-counting JSON extraction."""

    def test_nested_object(self) -> None:
        html = 'x = {"a": {"b": {"c": 1}}}; rest'
        assert extract_json_object(html, 4) == '{"a": {"b": {"c": 1}}}'

    def test_braces_inside_strings(self) -> None:
        html = '{"text": "a } tricky { value", "n": 1} trailing'
        result = extract_json_object(html, 0)
        assert result is not None
        assert json.loads(result) == {"text": "a } tricky { value", "n": 1}

    def test_escaped_quotes(self) -> None:
        html = r'{"text": "say \"}\" now"}'
        assert extract_json_object(html, 0) == html

    def test_unbalanced_returns_none(self) -> None:
        assert extract_json_object('{"a": {"b": 1}', 0) is None

    def test_start_not_on_brace(self) -> None:
        assert extract_json_object("abc {}", 0) is None
        assert extract_json_object("{}", 5) is None


class TestExtractMetaTags:
    """Tests for extract_meta_tags."""

    def test_collects_known_tags(self) -> None:
        soup = BeautifulSoup(YOUTUBE_PAGE_BROKEN_JSON, "html.parser")
        meta = extract_meta_tags(soup)

        assert meta["og:title"] == "Meta Video Title"
        assert meta["og:description"] == "Meta description"
        assert meta["og:image"] == "https://i.ytimg.com/vi/x/hqdefault.jpg"
        assert meta["description"] == "Plain description"
        assert meta["keywords"] == "music, classic"
        assert meta["title"] == "Meta Video Title - YouTube"

    def test_absent_tags_are_omitted(self) -> None:
        assert extract_meta_tags(BeautifulSoup(EMPTY_PAGE, "html.parser")) == {}


# ============================================================================
# Strategies
# ============================================================================


@pytest.mark.asyncio
class TestYouTubeScrapeStrategy:
    """Tests for YouTubeScrapeStrategy."""

    async def test_state_blob(
        self, http_client: httpx.AsyncClient, keyless_settings: Settings, backend: FakeBackend
    ) -> None:
        backend.add("https://www.youtube.com/watch", _html(YOUTUBE_PAGE_WITH_JSON))
        strategy = YouTubeScrapeStrategy(http_client, keyless_settings)

        payload = await strategy.extract(YOUTUBE_URL)

        assert payload.data["kind"] == "state"
        assert payload.data["marker"] == "ytInitialPlayerResponse"
        item = payload.data["item"]
        assert item["videoDetails"]["title"] == "JSON Title"
        assert item["videoDetails"]["shortDescription"] == 'Uses {braces} and "quotes"'
        assert item["microformat"] == {"publishDate": "2021-06-15"}

    async def test_sends_browser_user_agent(
        self, http_client: httpx.AsyncClient, settings: Settings, backend: FakeBackend
    ) -> None:
        backend.add("https://www.youtube.com/watch", _html(YOUTUBE_PAGE_WITH_JSON))
        strategy = YouTubeScrapeStrategy(http_client, settings)

        await strategy.extract(YOUTUBE_URL)

        assert backend.requests[0].headers["User-Agent"] == settings.scrape_user_agent
        assert "text/html" in backend.requests[0].headers["Accept"]

    async def test_broken_state_falls_back_to_meta(
        self, http_client: httpx.AsyncClient, settings: Settings, backend: FakeBackend
    ) -> None:
        backend.add("https://www.youtube.com/watch", _html(YOUTUBE_PAGE_BROKEN_JSON))
        strategy = YouTubeScrapeStrategy(http_client, settings)

        payload = await strategy.extract(YOUTUBE_URL)

        assert payload.data["kind"] == "meta"
        assert payload.data["meta"]["og:title"] == "Meta Video Title"

    async def test_page_without_metadata_is_malformed(
        self, http_client: httpx.AsyncClient, settings: Settings, backend: FakeBackend
    ) -> None:
        backend.add("https://www.youtube.com/watch", _html(EMPTY_PAGE))
        strategy = YouTubeScrapeStrategy(http_client, settings)

        with pytest.raises(MalformedResponseError):
            await strategy.extract(YOUTUBE_URL)

    async def test_missing_page_is_not_found(
        self, http_client: httpx.AsyncClient, settings: Settings, backend: FakeBackend
    ) -> None:
        backend.add("https://www.youtube.com/watch", _html(EMPTY_PAGE, status=404))
        strategy = YouTubeScrapeStrategy(http_client, settings)

        with pytest.raises(NotFoundError):
            await strategy.extract(YOUTUBE_URL)

    async def test_scheme_less_url_is_fetched_over_https(
        self, http_client: httpx.AsyncClient, settings: Settings, backend: FakeBackend
    ) -> None:
        backend.add("https://www.youtube.com/watch", _html(YOUTUBE_PAGE_WITH_JSON))
        strategy = YouTubeScrapeStrategy(http_client, settings)

        await strategy.extract("www.youtube.com/watch?v=dQw4w9WgXcQ")

        assert backend.requests[0].url.scheme == "https"


@pytest.mark.asyncio
class TestTikTokScrapeStrategy:
    """Tests for TikTokScrapeStrategy."""

    async def test_rehydration_script(
        self, http_client: httpx.AsyncClient, settings: Settings, backend: FakeBackend
    ) -> None:
        backend.add("https://www.tiktok.com/", _html(TIKTOK_REHYDRATION_PAGE))
        strategy = TikTokScrapeStrategy(http_client, settings)

        payload = await strategy.extract(TIKTOK_URL)

        assert payload.data["kind"] == "state"
        assert payload.data["item"] == TIKTOK_ITEM

    async def test_rehydration_assignment(
        self, http_client: httpx.AsyncClient, settings: Settings, backend: FakeBackend
    ) -> None:
        backend.add("https://www.tiktok.com/", _html(TIKTOK_ASSIGNMENT_PAGE))
        strategy = TikTokScrapeStrategy(http_client, settings)

        payload = await strategy.extract(TIKTOK_URL)

        assert payload.data["item"] == TIKTOK_ITEM

    async def test_sigi_state_resolves_author(
        self, http_client: httpx.AsyncClient, settings: Settings, backend: FakeBackend
    ) -> None:
        backend.add("https://www.tiktok.com/", _html(TIKTOK_SIGI_PAGE))
        strategy = TikTokScrapeStrategy(http_client, settings)

        payload = await strategy.extract(TIKTOK_URL)

        item = payload.data["item"]
        assert item["desc"] == "Old layout #retro"
        assert item["author"] == {
            "nickname": "The Dancer",
            "verified": True,
            "uniqueId": "dancer",
        }
        assert item["authorStats"] == {"followerCount": 777}

    async def test_meta_fallback(
        self, http_client: httpx.AsyncClient, settings: Settings, backend: FakeBackend
    ) -> None:
        page = '<html><head><meta property="og:title" content="Funny cat | TikTok"></head></html>'
        backend.add("https://www.tiktok.com/", _html(page))
        strategy = TikTokScrapeStrategy(http_client, settings)

        payload = await strategy.extract(TIKTOK_URL)

        assert payload.data == {"kind": "meta", "meta": {"og:title": "Funny cat | TikTok"}}


@pytest.mark.asyncio
class TestInstagramScrapeStrategy:
    """Tests for InstagramScrapeStrategy."""

    async def test_ld_json_video_object(
        self, http_client: httpx.AsyncClient, settings: Settings, backend: FakeBackend
    ) -> None:
        backend.add("https://www.instagram.com/", _html(INSTAGRAM_LD_PAGE))
        strategy = InstagramScrapeStrategy(http_client, settings)

        payload = await strategy.extract(INSTAGRAM_URL)

        assert payload.data["kind"] == "state"
        assert payload.data["item"]["@type"] == "VideoObject"
        assert payload.data["item"]["caption"] == "Beach #summer"

    async def test_meta_fallback(
        self, http_client: httpx.AsyncClient, settings: Settings, backend: FakeBackend
    ) -> None:
        backend.add("https://www.instagram.com/", _html(INSTAGRAM_META_PAGE))
        strategy = InstagramScrapeStrategy(http_client, settings)

        payload = await strategy.extract(INSTAGRAM_URL)

        assert payload.data["kind"] == "meta"
        assert payload.data["meta"]["og:description"].startswith("1,234 likes")
