"""
Field normalization from strategy payloads to ``VideoMetadata``.

This is the only module that knows both the raw response shapes and the
unified record. Each strategy has one mapping function that reads its
payload defensively into a ``_Draft``; ``normalize`` then coerces the draft
into a ``VideoMetadata`` with documented defaults. ``normalize`` is total:
missing or oddly typed fields become defaults, never exceptions.

Functions
---------
normalize
    Map a ``RawPayload`` into a ``VideoMetadata``.
clean_text
    Collapse whitespace and trim.
coerce_count
    Parse-or-zero for counters, including "1.2K" / "3M" / "1B" suffixes.
parse_duration
    Seconds from numbers, ISO-8601 durations or clock strings.
to_iso_timestamp
    ISO-8601 UTC timestamp from ISO strings, dates or epoch seconds.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any
from urllib.parse import urlsplit

from vidprobe.models.enums import Platform, StrategyId
from vidprobe.models.payload import RawPayload
from vidprobe.models.video import Author, Engagement, Provenance, VideoMetadata
from vidprobe.services.enrichment import extract_hashtags

_COMPACT_COUNT_RE = re.compile(r"^(\d+(?:\.\d+)?)([KMB])?$", re.IGNORECASE)
_COMPACT_MULTIPLIERS = {"K": 1_000, "M": 1_000_000, "B": 1_000_000_000}
_ISO_DURATION_RE = re.compile(
    r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?)?$", re.IGNORECASE
)
_CLOCK_DURATION_RE = re.compile(r"^(?:(\d+):)?(\d{1,2}):(\d{2})$")
_TITLE_SUFFIX_RE = re.compile(r"\s*(?:\|\s*TikTok|-\s*YouTube|\u2022\s*Instagram.*)$")
_INSTAGRAM_META_RE = re.compile(
    r"^(?P<likes>[\d.,]+[KMB]?)\s+likes?,\s*(?P<comments>[\d.,]+[KMB]?)\s+comments?"
    r"\s*-\s*(?P<handle>[^\s]+)\s+on\s+[^:]*:\s*(?P<caption>.*)$",
    re.IGNORECASE | re.DOTALL,
)
_EPOCH_MS_THRESHOLD = 100_000_000_000
_EPOCH_DIGITS_RE = re.compile(r"[0-9]+")

_YOUTUBE_THUMBNAIL_ORDER = ("maxres", "standard", "high", "medium", "default")


# =============================================================================
# Coercion helpers
# =============================================================================


def clean_text(value: Any) -> str:
    """
    Collapse runs of whitespace to single spaces and trim.

    Non-string values other than numbers become the empty string.
    """
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        return ""
    return " ".join(value.split())


def coerce_count(value: Any) -> int:
    """
    Parse a counter, returning 0 for anything unusable.

    Accepts ints, floats (floored), numeric strings with thousands
    separators and compact suffixes (``"1.2K"`` -> 1200, ``"3M"``,
    ``"1B"``). Negative values clamp to 0.

    Examples
    --------
    >>> coerce_count("1.2K")
    1200
    >>> coerce_count(None)
    0
    """
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return max(0, value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        return max(0, int(value))
    if not isinstance(value, str):
        return 0

    text = value.strip().replace(",", "").replace("_", "").replace(" ", "")
    match = _COMPACT_COUNT_RE.match(text)
    if not match:
        return 0
    try:
        number = Decimal(match.group(1))
    except InvalidOperation:
        return 0
    suffix = match.group(2)
    if suffix:
        number *= _COMPACT_MULTIPLIERS[suffix.upper()]
    return max(0, int(number))


def coerce_bool(value: Any) -> bool:
    """True for ``True``, 1 and the strings "true"/"1"/"yes"; False otherwise."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return False


def parse_duration(value: Any) -> int:
    """
    Duration in whole seconds.

    Accepts numbers, digit strings, ISO-8601 durations (``PT1H2M3S``) and
    clock strings (``1:02:03``). Anything else is 0.

    Examples
    --------
    >>> parse_duration("PT4M13S")
    253
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return coerce_count(value)
    if not isinstance(value, str):
        return 0

    text = value.strip()
    if not text:
        return 0
    if re.fullmatch(r"\d+(?:\.\d+)?", text):
        return coerce_count(float(text))

    iso = _ISO_DURATION_RE.match(text)
    if iso and any(iso.groups()):
        days, hours, minutes, seconds = iso.groups()
        total = (
            int(days or 0) * 86_400
            + int(hours or 0) * 3_600
            + int(minutes or 0) * 60
            + float(seconds or 0)
        )
        return int(total)

    clock = _CLOCK_DURATION_RE.match(text)
    if clock:
        hours, minutes, seconds = clock.groups()
        return int(hours or 0) * 3_600 + int(minutes) * 60 + int(seconds)
    return 0


def _format_timestamp(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def to_iso_timestamp(value: Any, default: datetime) -> str:
    """
    Normalize a publish time to an ISO-8601 UTC string.

    Parameters
    ----------
    value : Any
        ISO-8601 string, ``YYYY-MM-DD`` date, or epoch seconds (int, float
        or digit string; millisecond epochs are detected).
    default : datetime
        Used when ``value`` is missing or unparsable.

    Returns
    -------
    str
        Timestamp formatted as ``YYYY-MM-DDTHH:MM:SSZ``.
    """
    epoch: float | None = None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        epoch = float(value)
    elif isinstance(value, str) and _EPOCH_DIGITS_RE.fullmatch(value.strip()):
        epoch = float(value.strip())

    if epoch is not None:
        if epoch <= 0:
            return _format_timestamp(default)
        if epoch >= _EPOCH_MS_THRESHOLD:
            epoch /= 1000
        try:
            return _format_timestamp(datetime.fromtimestamp(epoch, tz=timezone.utc))
        except (OverflowError, OSError, ValueError):
            return _format_timestamp(default)

    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return _format_timestamp(datetime.fromisoformat(text))
        except ValueError:
            return _format_timestamp(default)

    return _format_timestamp(default)


def clean_title(value: Any) -> str:
    """Clean a page title and drop trailing platform suffixes."""
    return _TITLE_SUFFIX_RE.sub("", clean_text(value)).strip()


def _handle(value: Any) -> str:
    return clean_text(value).lstrip("@")


def _handle_from_url(url: Any) -> str:
    """Last path segment of a profile URL, without ``@``."""
    if not isinstance(url, str) or not url:
        return ""
    try:
        path = urlsplit(url).path
    except ValueError:
        return ""
    segments = [s for s in path.split("/") if s]
    return _handle(segments[-1]) if segments else ""


def _obj(value: Any) -> dict[str, Any]:
    """The value if it is a dict, else an empty dict."""
    return value if isinstance(value, dict) else {}


def _first(*values: Any) -> Any:
    """First value that is not None and not an empty string."""
    for value in values:
        if value is not None and value != "":
            return value
    return None


# =============================================================================
# Draft record
# =============================================================================


@dataclass
class _Draft:
    """Loosely typed fields read from a payload, before coercion."""

    title: Any = None
    description: Any = None
    views: Any = None
    likes: Any = None
    comments: Any = None
    shares: Any = None
    handle: Any = None
    display_name: Any = None
    follower_count: Any = None
    verified: Any = None
    avatar_url: Any = None
    bio: Any = None
    hashtags: list[str] = field(default_factory=list)
    published_at: Any = None
    duration: Any = None
    thumbnail_url: Any = None


# =============================================================================
# YouTube
# =============================================================================


def _youtube_thumbnail(thumbnails: Any) -> Any:
    thumbnails = _obj(thumbnails)
    for key in _YOUTUBE_THUMBNAIL_ORDER:
        url = _obj(thumbnails.get(key)).get("url")
        if url:
            return url
    return None


def _map_youtube_api(data: dict[str, Any]) -> _Draft:
    video = _obj(data.get("video"))
    snippet = _obj(video.get("snippet"))
    statistics = _obj(video.get("statistics"))
    content = _obj(video.get("contentDetails"))
    channel = _obj(data.get("channel"))
    channel_snippet = _obj(channel.get("snippet"))
    channel_stats = _obj(channel.get("statistics"))

    return _Draft(
        title=snippet.get("title"),
        description=snippet.get("description"),
        views=statistics.get("viewCount"),
        likes=statistics.get("likeCount"),
        comments=statistics.get("commentCount"),
        handle=_first(channel_snippet.get("customUrl"), snippet.get("channelTitle")),
        display_name=_first(channel_snippet.get("title"), snippet.get("channelTitle")),
        follower_count=channel_stats.get("subscriberCount"),
        avatar_url=_youtube_thumbnail(channel_snippet.get("thumbnails")),
        bio=channel_snippet.get("description"),
        published_at=snippet.get("publishedAt"),
        duration=content.get("duration"),
        thumbnail_url=_youtube_thumbnail(snippet.get("thumbnails")),
    )


def _map_youtube_state(item: dict[str, Any]) -> _Draft:
    details = _obj(item.get("videoDetails"))
    renderer = _obj(item.get("microformat"))
    thumbnails = _obj(details.get("thumbnail")).get("thumbnails")
    thumbnail = None
    if isinstance(thumbnails, list) and thumbnails:
        thumbnail = _obj(thumbnails[-1]).get("url")

    return _Draft(
        title=details.get("title"),
        description=details.get("shortDescription"),
        views=details.get("viewCount"),
        likes=renderer.get("likeCount"),
        handle=_first(_handle_from_url(renderer.get("ownerProfileUrl")), details.get("author")),
        display_name=_first(details.get("author"), renderer.get("ownerChannelName")),
        published_at=_first(renderer.get("publishDate"), renderer.get("uploadDate")),
        duration=details.get("lengthSeconds"),
        thumbnail_url=thumbnail,
    )


# =============================================================================
# TikTok
# =============================================================================


def _tiktok_hashtags(description: Any, *tag_lists: Any) -> list[str]:
    """Hashtags from the caption first, then any listed challenge names."""
    tags = extract_hashtags(clean_text(description))
    for tag_list in tag_lists:
        if not isinstance(tag_list, list):
            continue
        for entry in tag_list:
            entry = _obj(entry)
            name = clean_text(_first(entry.get("title"), entry.get("hashtagName")))
            if name:
                tags.append(f"#{name}")
    return tags


def _map_tiktok_scraper_api(data: dict[str, Any]) -> _Draft:
    video = _obj(data.get("video"))
    author = _obj(data.get("author"))
    stats = _obj(data.get("stats"))
    description = video.get("desc")

    return _Draft(
        title=_first(video.get("desc"), video.get("title")),
        description=description,
        views=stats.get("playCount"),
        likes=stats.get("diggCount"),
        comments=stats.get("commentCount"),
        shares=stats.get("shareCount"),
        handle=author.get("uniqueId"),
        display_name=author.get("nickname"),
        follower_count=author.get("followerCount"),
        verified=author.get("verified"),
        avatar_url=_first(author.get("avatarMedium"), author.get("avatarThumb")),
        bio=author.get("signature"),
        hashtags=_tiktok_hashtags(description, video.get("challenges")),
        published_at=video.get("createTime"),
        duration=video.get("duration"),
        thumbnail_url=video.get("cover"),
    )


def _map_tiktok_rapidapi(data: dict[str, Any]) -> _Draft:
    author = _obj(data.get("author"))
    description = _first(data.get("desc"), data.get("description"), data.get("title"))

    return _Draft(
        title=_first(data.get("title"), data.get("desc")),
        description=description,
        views=_first(data.get("play_count"), data.get("playCount")),
        likes=_first(data.get("digg_count"), data.get("diggCount"), data.get("likeCount")),
        comments=_first(data.get("comment_count"), data.get("commentCount")),
        shares=_first(data.get("share_count"), data.get("shareCount")),
        handle=_first(author.get("unique_id"), author.get("uniqueId"), author.get("username")),
        display_name=_first(author.get("nickname"), author.get("display_name")),
        follower_count=_first(author.get("follower_count"), author.get("followerCount")),
        verified=author.get("verified"),
        avatar_url=_first(author.get("avatar"), author.get("avatarThumb")),
        bio=author.get("signature"),
        hashtags=_tiktok_hashtags(description),
        published_at=_first(data.get("create_time"), data.get("createTime")),
        duration=data.get("duration"),
        thumbnail_url=_first(data.get("cover"), data.get("origin_cover"), data.get("thumbnail")),
    )


def _map_tiktok_state(item: dict[str, Any]) -> _Draft:
    stats = _obj(item.get("stats"))
    stats_v2 = _obj(item.get("statsV2"))
    author = _obj(item.get("author"))
    author_stats = _obj(item.get("authorStats"))
    video = _obj(item.get("video"))
    description = item.get("desc")

    return _Draft(
        title=description,
        description=description,
        views=_first(stats.get("playCount"), stats_v2.get("playCount")),
        likes=_first(stats.get("diggCount"), stats_v2.get("diggCount")),
        comments=_first(stats.get("commentCount"), stats_v2.get("commentCount")),
        shares=_first(stats.get("shareCount"), stats_v2.get("shareCount")),
        handle=author.get("uniqueId"),
        display_name=author.get("nickname"),
        follower_count=author_stats.get("followerCount"),
        verified=author.get("verified"),
        avatar_url=_first(author.get("avatarMedium"), author.get("avatarThumb")),
        bio=author.get("signature"),
        hashtags=_tiktok_hashtags(description, item.get("challenges"), item.get("textExtra")),
        published_at=item.get("createTime"),
        duration=video.get("duration"),
        thumbnail_url=_first(video.get("cover"), video.get("originCover")),
    )


# =============================================================================
# Instagram
# =============================================================================


def _caption_title(caption: Any) -> Any:
    """First line of a caption, used as the title of captioned posts."""
    text = caption if isinstance(caption, str) else ""
    first_line = text.strip().split("\n", 1)[0] if text.strip() else ""
    return first_line[:100] or None


def _map_instagram_rapidapi(data: dict[str, Any]) -> _Draft:
    caption_obj = data.get("caption")
    caption = _obj(caption_obj).get("text") if isinstance(caption_obj, dict) else caption_obj
    user = _obj(data.get("user"))

    hashtags: list[str] = []
    listed = _obj(caption_obj).get("hashtags")
    if isinstance(listed, list):
        hashtags = [f"#{clean_text(t).lstrip('#')}" for t in listed if clean_text(t)]

    return _Draft(
        title=_caption_title(caption),
        description=caption,
        views=_first(data.get("play_count"), data.get("ig_play_count"), data.get("view_count")),
        likes=data.get("like_count"),
        comments=data.get("comment_count"),
        shares=_first(data.get("share_count"), data.get("reshare_count")),
        handle=user.get("username"),
        display_name=user.get("full_name"),
        follower_count=user.get("follower_count"),
        verified=user.get("is_verified"),
        avatar_url=user.get("profile_pic_url"),
        bio=user.get("biography"),
        hashtags=extract_hashtags(clean_text(caption)) or hashtags,
        published_at=data.get("taken_at"),
        duration=data.get("video_duration"),
        thumbnail_url=_first(data.get("thumbnail_url"), data.get("display_url")),
    )


def _interaction_count(item: dict[str, Any], action: str) -> Any:
    stats = item.get("interactionStatistic")
    for stat in stats if isinstance(stats, list) else [stats]:
        stat = _obj(stat)
        kind = stat.get("interactionType")
        kind_name = _obj(kind).get("@type") if isinstance(kind, dict) else kind
        if isinstance(kind_name, str) and kind_name.endswith(action):
            return stat.get("userInteractionCount")
    return None


def _map_instagram_state(item: dict[str, Any]) -> _Draft:
    author = item.get("author")
    author = _obj(author[0] if isinstance(author, list) and author else author)
    caption = _first(item.get("caption"), item.get("articleBody"), item.get("description"))
    thumbnail = item.get("thumbnailUrl")
    if isinstance(thumbnail, list):
        thumbnail = thumbnail[0] if thumbnail else None

    return _Draft(
        title=_first(item.get("name"), item.get("headline"), _caption_title(caption)),
        description=caption,
        views=_interaction_count(item, "WatchAction"),
        likes=_interaction_count(item, "LikeAction"),
        comments=_first(_interaction_count(item, "CommentAction"), item.get("commentCount")),
        handle=_first(author.get("alternateName"), _handle_from_url(author.get("url"))),
        display_name=author.get("name"),
        avatar_url=author.get("image"),
        published_at=_first(
            item.get("uploadDate"), item.get("dateCreated"), item.get("datePublished")
        ),
        duration=item.get("duration"),
        thumbnail_url=thumbnail,
    )


# =============================================================================
# Shared shapes
# =============================================================================


def _map_oembed(data: dict[str, Any]) -> _Draft:
    # oEmbed carries no counters or hashtags; only coarse fields are kept.
    return _Draft(
        title=data.get("title"),
        handle=_first(data.get("author_unique_id"), _handle_from_url(data.get("author_url"))),
        display_name=data.get("author_name"),
        thumbnail_url=data.get("thumbnail_url"),
    )


def _map_meta(meta: dict[str, Any], platform: Platform) -> _Draft:
    draft = _Draft(
        title=clean_title(_first(meta.get("og:title"), meta.get("title"))),
        description=_first(meta.get("og:description"), meta.get("description")),
        duration=meta.get("og:video:duration"),
        thumbnail_url=meta.get("og:image"),
    )
    if platform is Platform.INSTAGRAM and isinstance(draft.description, str):
        match = _INSTAGRAM_META_RE.match(draft.description.strip())
        if match:
            draft.likes = match.group("likes")
            draft.comments = match.group("comments")
            draft.handle = match.group("handle")
            draft.description = match.group("caption").strip().strip('"\u201c\u201d')
    return draft


def _scrape_mapper(
    state_mapper: Callable[[dict[str, Any]], _Draft],
) -> Callable[[dict[str, Any], Platform], _Draft]:
    def mapper(data: dict[str, Any], platform: Platform) -> _Draft:
        if data.get("kind") == "state":
            return state_mapper(_obj(data.get("item")))
        return _map_meta(_obj(data.get("meta")), platform)

    return mapper


def _ignore_platform(
    mapper: Callable[[dict[str, Any]], _Draft],
) -> Callable[[dict[str, Any], Platform], _Draft]:
    return lambda data, _platform: mapper(data)


_MAPPERS: dict[StrategyId, Callable[[dict[str, Any], Platform], _Draft]] = {
    StrategyId.YOUTUBE_DATA_API: _ignore_platform(_map_youtube_api),
    StrategyId.YOUTUBE_RAPIDAPI: _ignore_platform(_map_youtube_api),
    StrategyId.YOUTUBE_OEMBED: _ignore_platform(_map_oembed),
    StrategyId.YOUTUBE_SCRAPE: _scrape_mapper(_map_youtube_state),
    StrategyId.TIKTOK_SCRAPER_API: _ignore_platform(_map_tiktok_scraper_api),
    StrategyId.TIKTOK_RAPIDAPI: _ignore_platform(_map_tiktok_rapidapi),
    StrategyId.TIKTOK_OEMBED: _ignore_platform(_map_oembed),
    StrategyId.TIKTOK_SCRAPE: _scrape_mapper(_map_tiktok_state),
    StrategyId.INSTAGRAM_RAPIDAPI: _ignore_platform(_map_instagram_rapidapi),
    StrategyId.INSTAGRAM_OEMBED: _ignore_platform(_map_oembed),
    StrategyId.INSTAGRAM_SCRAPE: _scrape_mapper(_map_instagram_state),
}


# =============================================================================
# Public entry point
# =============================================================================


def normalize(
    payload: RawPayload,
    strategy_id: StrategyId,
    platform: Platform,
    *,
    source_url: str,
    resolved_at: datetime | None = None,
) -> VideoMetadata:
    """
    Map a strategy payload into the unified ``VideoMetadata`` record.

    Parameters
    ----------
    payload : RawPayload
        Payload returned by the successful strategy.
    strategy_id : StrategyId
        Identifier of that strategy; selects the mapping.
    platform : Platform
        Platform assigned by the detector.
    source_url : str
        The input URL, stored unmodified.
    resolved_at : datetime | None, optional
        Resolution time, used when the source gives no publish time
        (default: now, UTC).

    Returns
    -------
    VideoMetadata
        Record with every missing field set to its documented default.
        ``hashtags`` holds only what the strategy itself supplied.
    """
    resolved_at = resolved_at or datetime.now(timezone.utc)
    draft = _MAPPERS[strategy_id](_obj(payload.data), platform)

    description = clean_text(draft.description)
    return VideoMetadata(
        title=clean_text(draft.title) or f"{platform.value} Video",
        description=description,
        engagement=Engagement(
            views=coerce_count(draft.views),
            likes=coerce_count(draft.likes),
            comments=coerce_count(draft.comments),
            shares=coerce_count(draft.shares),
        ),
        author=Author(
            handle=_handle(draft.handle),
            display_name=clean_text(draft.display_name),
            follower_count=coerce_count(draft.follower_count),
            verified=coerce_bool(draft.verified),
            avatar_url=clean_text(draft.avatar_url),
            bio=clean_text(draft.bio),
        ),
        hashtags=draft.hashtags,
        platform=platform,
        published_at=to_iso_timestamp(draft.published_at, resolved_at),
        duration_seconds=parse_duration(draft.duration),
        source_url=source_url,
        thumbnail_url=clean_text(draft.thumbnail_url),
        provenance=Provenance(
            is_authentic=strategy_id.is_authentic,
            data_source=clean_text(payload.data_source) or strategy_id.value,
            extraction_method=strategy_id,
        ),
    )
