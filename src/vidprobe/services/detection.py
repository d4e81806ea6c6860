"""
Platform detection and platform-native identifier parsing.

``detect_platform`` classifies a URL by a case-insensitive substring match of
its host against a fixed domain table. No network access is made.
"""

from __future__ import annotations

import re
from urllib.parse import SplitResult, parse_qs, urlsplit

from vidprobe.exceptions import UnsupportedPlatformError
from vidprobe.models.enums import Platform

PLATFORM_DOMAINS: tuple[tuple[Platform, tuple[str, ...]], ...] = (
    (Platform.YOUTUBE, ("youtube.com", "youtu.be")),
    (Platform.TIKTOK, ("tiktok.com", "vm.tiktok.com")),
    (Platform.INSTAGRAM, ("instagram.com", "instagr.am")),
)
"""Known domains per platform. Domains are disjoint, so order only breaks ties."""

_YOUTUBE_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")
_YOUTUBE_PATH_RE = re.compile(r"^/(?:embed|shorts|v|live)/([A-Za-z0-9_-]{11})")
_TIKTOK_VIDEO_RE = re.compile(r"/video/(\d+)")
_TIKTOK_USER_RE = re.compile(r"/@([^/?#]+)")
_INSTAGRAM_CODE_RE = re.compile(r"^/(?:[^/]+/)?(?:p|reel|reels|tv)/([A-Za-z0-9_-]+)")


def _split(url: str) -> SplitResult:
    """Split a URL, assuming https when the scheme is missing."""
    candidate = url.strip()
    if "://" not in candidate:
        candidate = f"https://{candidate}"
    return urlsplit(candidate)


def _host_of(url: str) -> str:
    """
    Return the lower-cased host of a URL.

    Raises
    ------
    ValueError
        If the URL cannot be parsed or has no host.
    """
    host = _split(url).hostname
    if not host:
        raise ValueError(f"URL has no host: {url!r}")
    return host.lower()


def detect_platform(url: str) -> Platform:
    """
    Classify a URL into a supported platform.

    Parameters
    ----------
    url : str
        Any-case video URL, optionally with tracking parameters.

    Returns
    -------
    Platform
        The first platform whose domain appears in the URL's host.

    Raises
    ------
    UnsupportedPlatformError
        If the URL is unparsable or its host matches no known domain.
    """
    if not isinstance(url, str) or not url.strip():
        raise UnsupportedPlatformError(str(url))
    try:
        host = _host_of(url)
    except ValueError as e:
        raise UnsupportedPlatformError(url) from e

    for platform, domains in PLATFORM_DOMAINS:
        if any(domain in host for domain in domains):
            return platform
    raise UnsupportedPlatformError(url)


def extract_youtube_video_id(url: str) -> str | None:
    """
    Extract the 11-character YouTube video ID from a URL.

    Handles ``watch?v=``, ``youtu.be/<id>``, ``/embed/``, ``/shorts/``,
    ``/v/`` and ``/live/`` forms.
    """
    try:
        parts = _split(url)
    except ValueError:
        return None
    host = (parts.hostname or "").lower()

    if "youtu.be" in host:
        candidate = parts.path.lstrip("/").split("/", 1)[0]
        return candidate if _YOUTUBE_ID_RE.match(candidate) else None

    values = parse_qs(parts.query).get("v")
    if values and _YOUTUBE_ID_RE.match(values[0]):
        return values[0]

    match = _YOUTUBE_PATH_RE.match(parts.path)
    return match.group(1) if match else None


def extract_tiktok_video_id(url: str) -> str | None:
    """Extract the numeric TikTok video ID; short ``vm.`` links have none."""
    match = _TIKTOK_VIDEO_RE.search(url)
    return match.group(1) if match else None


def extract_tiktok_username(url: str) -> str | None:
    """Extract the ``@username`` segment of a TikTok URL, without the ``@``."""
    match = _TIKTOK_USER_RE.search(url)
    return match.group(1) if match else None


def extract_instagram_shortcode(url: str) -> str | None:
    """Extract the shortcode from ``/p/``, ``/reel/``, ``/reels/`` or ``/tv/`` URLs."""
    try:
        parts = _split(url)
    except ValueError:
        return None
    match = _INSTAGRAM_CODE_RE.match(parts.path)
    return match.group(1) if match else None


def extract_platform_id(platform: Platform, url: str) -> str | None:
    """
    Extract the platform-native identifier of a video URL.

    Parameters
    ----------
    platform : Platform
        Platform previously returned by ``detect_platform``.
    url : str
        The input URL.

    Returns
    -------
    str | None
        Video ID (YouTube, TikTok) or shortcode (Instagram), or ``None``
        when the URL does not carry one.
    """
    if platform is Platform.YOUTUBE:
        return extract_youtube_video_id(url)
    if platform is Platform.TIKTOK:
        return extract_tiktok_video_id(url)
    return extract_instagram_shortcode(url)
