"""
Extraction strategies and the default per-platform chains.

Modules
-------
base
    Strategy interface and shared HTTP error mapping
official
    YouTube Data API v3
proxy
    RapidAPI gateway mirrors
embed
    oEmbed lookups
scrape
    HTML scraping (embedded JSON state, then meta tags)
"""

from __future__ import annotations

import httpx

from vidprobe.config.settings import Settings
from vidprobe.models.enums import Platform
from vidprobe.services.strategies.base import CredentialedStrategy, ExtractionStrategy
from vidprobe.services.strategies.embed import (
    InstagramOEmbedStrategy,
    TikTokOEmbedStrategy,
    YouTubeOEmbedStrategy,
)
from vidprobe.services.strategies.official import YouTubeDataAPIStrategy
from vidprobe.services.strategies.proxy import (
    InstagramRapidAPIStrategy,
    TikTokRapidAPIStrategy,
    TikTokScraperAPIStrategy,
    YouTubeRapidAPIStrategy,
)
from vidprobe.services.strategies.scrape import (
    InstagramScrapeStrategy,
    TikTokScrapeStrategy,
    YouTubeScrapeStrategy,
)

DEFAULT_CHAIN_CLASSES: dict[Platform, tuple[type[ExtractionStrategy], ...]] = {
    Platform.YOUTUBE: (
        YouTubeDataAPIStrategy,
        YouTubeRapidAPIStrategy,
        YouTubeOEmbedStrategy,
        YouTubeScrapeStrategy,
    ),
    Platform.TIKTOK: (
        TikTokScraperAPIStrategy,
        TikTokRapidAPIStrategy,
        TikTokOEmbedStrategy,
        TikTokScrapeStrategy,
    ),
    Platform.INSTAGRAM: (
        InstagramRapidAPIStrategy,
        InstagramOEmbedStrategy,
        InstagramScrapeStrategy,
    ),
}
"""Strategy priority per platform: official/proxy API, then embed, then scrape."""


def build_default_chains(
    settings: Settings, client: httpx.AsyncClient
) -> dict[Platform, list[ExtractionStrategy]]:
    """
    Instantiate the default strategy chain for every platform.

    Parameters
    ----------
    settings : Settings
        Read-only settings holding the credentials.
    client : httpx.AsyncClient
        HTTP client shared by every strategy.

    Returns
    -------
    dict[Platform, list[ExtractionStrategy]]
        Ordered strategies per platform.
    """
    return {
        platform: [cls(client, settings) for cls in classes]
        for platform, classes in DEFAULT_CHAIN_CLASSES.items()
    }


__all__ = [
    "DEFAULT_CHAIN_CLASSES",
    "CredentialedStrategy",
    "ExtractionStrategy",
    "build_default_chains",
    "InstagramOEmbedStrategy",
    "InstagramRapidAPIStrategy",
    "InstagramScrapeStrategy",
    "TikTokOEmbedStrategy",
    "TikTokRapidAPIStrategy",
    "TikTokScrapeStrategy",
    "TikTokScraperAPIStrategy",
    "YouTubeDataAPIStrategy",
    "YouTubeOEmbedStrategy",
    "YouTubeRapidAPIStrategy",
    "YouTubeScrapeStrategy",
]
