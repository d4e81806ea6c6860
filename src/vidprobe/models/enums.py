"""
Enums for vidprobe models.

Defines the platform, strategy and failure enumerations shared by the
detector, the strategies, the chain executor and the normalizer.
"""

from __future__ import annotations

from enum import Enum


class Platform(str, Enum):
    """Supported short-form video platforms."""

    YOUTUBE = "YouTube"
    TIKTOK = "TikTok"
    INSTAGRAM = "Instagram"


class StrategyKind(str, Enum):
    """Families of extraction strategy, richest first."""

    OFFICIAL_API = "official_api"
    PROXY_API = "proxy_api"
    EMBED = "embed"
    SCRAPE = "scrape"


class FailureKind(str, Enum):
    """Typed reasons an extraction strategy can fail."""

    MISSING_CREDENTIAL = "missing_credential"
    RATE_LIMITED = "rate_limited"
    NOT_FOUND = "not_found"
    MALFORMED_RESPONSE = "malformed_response"
    NETWORK_ERROR = "network_error"


class StrategyId(str, Enum):
    """Identifiers of every concrete extraction strategy."""

    YOUTUBE_DATA_API = "youtube_data_api"
    YOUTUBE_RAPIDAPI = "youtube_rapidapi"
    YOUTUBE_OEMBED = "youtube_oembed"
    YOUTUBE_SCRAPE = "youtube_scrape"
    TIKTOK_SCRAPER_API = "tiktok_scraper_api"
    TIKTOK_RAPIDAPI = "tiktok_rapidapi"
    TIKTOK_OEMBED = "tiktok_oembed"
    TIKTOK_SCRAPE = "tiktok_scrape"
    INSTAGRAM_RAPIDAPI = "instagram_rapidapi"
    INSTAGRAM_OEMBED = "instagram_oembed"
    INSTAGRAM_SCRAPE = "instagram_scrape"

    @property
    def platform(self) -> Platform:
        """Platform this strategy extracts from."""
        return _STRATEGY_PLATFORMS[self]

    @property
    def kind(self) -> StrategyKind:
        """Strategy family."""
        return _STRATEGY_KINDS[self]

    @property
    def is_authentic(self) -> bool:
        """
        Whether results from this strategy count as first-party data.

        Official APIs and the RapidAPI mirrors return the platform's own
        records; oEmbed lookups and HTML scrapes are best-effort.
        """
        return self.kind in (StrategyKind.OFFICIAL_API, StrategyKind.PROXY_API)


_STRATEGY_PLATFORMS: dict[StrategyId, Platform] = {
    StrategyId.YOUTUBE_DATA_API: Platform.YOUTUBE,
    StrategyId.YOUTUBE_RAPIDAPI: Platform.YOUTUBE,
    StrategyId.YOUTUBE_OEMBED: Platform.YOUTUBE,
    StrategyId.YOUTUBE_SCRAPE: Platform.YOUTUBE,
    StrategyId.TIKTOK_SCRAPER_API: Platform.TIKTOK,
    StrategyId.TIKTOK_RAPIDAPI: Platform.TIKTOK,
    StrategyId.TIKTOK_OEMBED: Platform.TIKTOK,
    StrategyId.TIKTOK_SCRAPE: Platform.TIKTOK,
    StrategyId.INSTAGRAM_RAPIDAPI: Platform.INSTAGRAM,
    StrategyId.INSTAGRAM_OEMBED: Platform.INSTAGRAM,
    StrategyId.INSTAGRAM_SCRAPE: Platform.INSTAGRAM,
}

_STRATEGY_KINDS: dict[StrategyId, StrategyKind] = {
    StrategyId.YOUTUBE_DATA_API: StrategyKind.OFFICIAL_API,
    StrategyId.YOUTUBE_RAPIDAPI: StrategyKind.PROXY_API,
    StrategyId.YOUTUBE_OEMBED: StrategyKind.EMBED,
    StrategyId.YOUTUBE_SCRAPE: StrategyKind.SCRAPE,
    StrategyId.TIKTOK_SCRAPER_API: StrategyKind.PROXY_API,
    StrategyId.TIKTOK_RAPIDAPI: StrategyKind.PROXY_API,
    StrategyId.TIKTOK_OEMBED: StrategyKind.EMBED,
    StrategyId.TIKTOK_SCRAPE: StrategyKind.SCRAPE,
    StrategyId.INSTAGRAM_RAPIDAPI: StrategyKind.PROXY_API,
    StrategyId.INSTAGRAM_OEMBED: StrategyKind.EMBED,
    StrategyId.INSTAGRAM_SCRAPE: StrategyKind.SCRAPE,
}
