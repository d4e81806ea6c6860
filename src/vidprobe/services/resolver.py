"""
Resolution facade.

``VideoResolver`` is the single public entry point: it detects the
platform, runs the strategy chain, normalizes the winning payload and
enriches the record. It owns the shared ``httpx.AsyncClient`` unless one
is injected.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from types import TracebackType
from typing import Optional, Type

import httpx

from vidprobe.config.settings import Settings, get_settings
from vidprobe.exceptions import AllStrategiesExhausted, ExtractionFailedError
from vidprobe.models.video import VideoMetadata
from vidprobe.services.chain import StrategyChain
from vidprobe.services.detection import detect_platform, extract_platform_id
from vidprobe.services.enrichment import extract_hashtags
from vidprobe.services.normalizer import normalize
from vidprobe.services.strategies import build_default_chains

logger = logging.getLogger(__name__)


class VideoResolver:
    """
    Resolve video URLs into ``VideoMetadata`` records.

    Parameters
    ----------
    settings : Settings | None, optional
        Settings holding credentials and timeouts (default: environment).
    client : httpx.AsyncClient | None, optional
        HTTP client to share across strategies. When omitted the resolver
        creates one and closes it in ``aclose``.
    chain : StrategyChain | None, optional
        Strategy chain to run (default: the built-in per-platform chains).

    Examples
    --------
    >>> async with VideoResolver() as resolver:
    ...     metadata = await resolver.resolve_video(
    ...         "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
    ...     )
    >>> metadata.provenance.extraction_method
    <StrategyId.YOUTUBE_DATA_API: 'youtube_data_api'>
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
        chain: Optional[StrategyChain] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self.settings.request_timeout,
            follow_redirects=True,
        )
        self.chain = chain or StrategyChain(build_default_chains(self.settings, self._client))

    async def __aenter__(self) -> "VideoResolver":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this resolver created it."""
        if self._owns_client:
            await self._client.aclose()

    async def resolve_video(self, url: str) -> VideoMetadata:
        """
        Resolve one URL into a metadata record.

        Parameters
        ----------
        url : str
            Video URL on a supported platform.

        Returns
        -------
        VideoMetadata
            Normalized record from the first successful strategy.

        Raises
        ------
        UnsupportedPlatformError
            If the URL is empty, unparsable or on an unsupported host. No
            network call is made.
        ExtractionFailedError
            If every strategy for the platform failed. ``reasons`` holds
            one failure per strategy in priority order.
        """
        platform = detect_platform(url)
        platform_id = extract_platform_id(platform, url)
        logger.debug(
            "Resolving %s URL %s (id=%s)", platform.value, url, platform_id or "unknown"
        )

        try:
            payload, strategy_id = await self.chain.resolve(platform, url, platform_id)
        except AllStrategiesExhausted as e:
            raise ExtractionFailedError.from_exhausted(url, e) from e

        metadata = normalize(
            payload,
            strategy_id,
            platform,
            source_url=url,
            resolved_at=datetime.now(timezone.utc),
        )
        if not metadata.hashtags and metadata.description:
            hashtags = extract_hashtags(metadata.description)
            if hashtags:
                metadata = metadata.model_copy(update={"hashtags": hashtags})

        logger.info(
            "Resolved %s via %s (authentic=%s, rating=%d)",
            url,
            strategy_id.value,
            metadata.provenance.is_authentic,
            metadata.rating,
        )
        return metadata


async def resolve_video(url: str, settings: Optional[Settings] = None) -> VideoMetadata:
    """
    Resolve one URL with a short-lived resolver.

    Parameters
    ----------
    url : str
        Video URL on a supported platform.
    settings : Settings | None, optional
        Settings to use (default: environment).

    Returns
    -------
    VideoMetadata
        Normalized record.
    """
    async with VideoResolver(settings=settings) as resolver:
        return await resolver.resolve_video(url)
