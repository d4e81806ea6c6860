"""
HTML scrape strategies.

Fetches the public video page with a browser-like User-Agent and extracts
metadata using two approaches in priority order:

1. JSON state blobs embedded in the page source (``ytInitialPlayerResponse``
   on YouTube, ``__UNIVERSAL_DATA_FOR_REHYDRATION__`` / ``SIGI_STATE`` on
   TikTok, JSON-LD on Instagram)
2. HTML meta tags using BeautifulSoup (Open Graph, ``<title>``,
   ``meta[name=description]``)

A state blob that is missing or fails to parse falls through to the meta
tags inside the same strategy step. Only a page offering neither is a
failure. Results from this strategy are never marked authentic.

Functions
---------
extract_json_object
    Extract a balanced JSON object from raw HTML by brace counting.
extract_meta_tags
    Collect Open Graph and basic meta tags from a page.

Classes
-------
HTMLScrapeStrategy
    Base class coordinating fetch, state-blob and meta-tag extraction.
"""

from __future__ import annotations

import json
import logging
import re
from abc import abstractmethod
from typing import Any, ClassVar

from bs4 import BeautifulSoup, Tag

from vidprobe.exceptions import MalformedResponseError
from vidprobe.models.enums import StrategyId
from vidprobe.models.payload import RawPayload
from vidprobe.services.strategies.base import ExtractionStrategy

logger = logging.getLogger(__name__)

# Regexes locate only the START of an assignment; the JSON body is
# extracted by brace counting in extract_json_object().
# Handles: var ytInitialPlayerResponse = {...};
#          ytInitialPlayerResponse = {...};
#          window["ytInitialPlayerResponse"] = {...};
_YT_INITIAL_PLAYER_RE = re.compile(
    r'(?:var\s+|window\["|)ytInitialPlayerResponse(?:"\])?\s*=\s*',
)
_TIKTOK_REHYDRATION_RE = re.compile(
    r"window\.__UNIVERSAL_DATA_FOR_REHYDRATION__\s*=\s*",
)

_MAX_JSON_SCAN = 5_000_000

_META_PROPERTIES = (
    "og:title",
    "og:description",
    "og:image",
    "og:url",
    "og:video:duration",
)


def extract_json_object(html: str, start: int) -> str | None:
    """
    Extract a balanced JSON object from HTML starting at the given position.

    Uses brace-counting to handle arbitrarily nested ``{...}`` structures
    that would break a simple non-greedy regex.

    Parameters
    ----------
    html : str
        Raw HTML source.
    start : int
        Position of the opening ``{`` in the HTML string.

    Returns
    -------
    str | None
        The balanced JSON string, or None if no opening brace at start
        or braces are unbalanced within the first 5MB of text.
    """
    if start >= len(html) or html[start] != "{":
        return None

    depth = 0
    in_string = False
    escape = False
    limit = min(len(html), start + _MAX_JSON_SCAN)

    for i in range(start, limit):
        ch = html[i]

        if escape:
            escape = False
            continue

        if ch == "\\":
            if in_string:
                escape = True
            continue

        if ch == '"':
            in_string = not in_string
            continue

        if in_string:
            continue

        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return html[start : i + 1]

    return None


def load_assigned_json(html: str, pattern: re.Pattern[str]) -> dict[str, Any] | None:
    """
    Parse the JSON object assigned right after ``pattern`` in the page source.

    Returns ``None`` when the marker is absent, the braces do not balance or
    the text is not a JSON object.
    """
    match = pattern.search(html)
    if not match:
        return None
    json_str = extract_json_object(html, match.end())
    if not json_str:
        return None
    try:
        data = json.loads(json_str)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def load_script_json(soup: BeautifulSoup, **attrs: str) -> Any:
    """Parse the JSON body of the first ``<script>`` matching ``attrs``, or None."""
    script = soup.find("script", attrs=attrs)
    if not isinstance(script, Tag):
        return None
    text = script.string or script.get_text()
    if not text or not text.strip():
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def _meta_content(soup: BeautifulSoup, **attrs: str) -> str | None:
    tag = soup.find("meta", attrs=attrs)
    if isinstance(tag, Tag) and tag.get("content"):
        return str(tag["content"])
    return None


def extract_meta_tags(soup: BeautifulSoup) -> dict[str, str]:
    """
    Collect Open Graph and basic meta tags from a parsed page.

    Parameters
    ----------
    soup : BeautifulSoup
        Parsed page.

    Returns
    -------
    dict[str, str]
        Keys are Open Graph property names (``og:title`` ...) plus
        ``title`` (the ``<title>`` text), ``description``
        (``meta[name=description]``) and ``keywords``. Absent tags are
        omitted.
    """
    meta: dict[str, str] = {}
    for prop in _META_PROPERTIES:
        value = _meta_content(soup, property=prop)
        if value:
            meta[prop] = value

    for name in ("description", "keywords"):
        value = _meta_content(soup, name=name)
        if value:
            meta[name] = value

    title_tag = soup.find("title")
    if isinstance(title_tag, Tag):
        title_text = title_tag.get_text(strip=True)
        if title_text:
            meta["title"] = title_text

    return meta


class HTMLScrapeStrategy(ExtractionStrategy):
    """
    Base class for page-scraping strategies.

    Subclasses implement ``_extract_state`` to pull the platform's embedded
    JSON state out of the page. Payloads take one of two shapes:

    - ``{"kind": "state", "marker": <marker name>, "item": {...}}``
    - ``{"kind": "meta", "meta": {<meta tags>}}``
    """

    state_marker: ClassVar[str]

    def _browser_headers(self) -> dict[str, str]:
        return {
            "User-Agent": self._settings.scrape_user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }

    async def extract(self, url: str, platform_id: str | None = None) -> RawPayload:
        page_url = url.strip() if "://" in url else f"https://{url.strip()}"
        response = await self._request("GET", page_url, headers=self._browser_headers())
        html = response.text
        soup = BeautifulSoup(html, "html.parser")

        try:
            item = self._extract_state(html, soup)
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.info(
                "%s state blob unusable (%s); falling back to meta tags",
                self.state_marker,
                type(e).__name__,
            )
            item = None

        if item:
            return self._payload({"kind": "state", "marker": self.state_marker, "item": item})

        meta = extract_meta_tags(soup)
        if not any(meta.get(key) for key in ("og:title", "og:description", "title")):
            raise MalformedResponseError(
                self.strategy_id,
                f"Page has no {self.state_marker} state and no usable meta tags",
                response.status_code,
            )
        return self._payload({"kind": "meta", "meta": meta})

    @abstractmethod
    def _extract_state(self, html: str, soup: BeautifulSoup) -> dict[str, Any] | None:
        """Return the embedded state item, or None when the page has none."""


class YouTubeScrapeStrategy(HTMLScrapeStrategy):
    """
    Scrape a YouTube watch page.

    The state item is ``{"videoDetails": {...}, "microformat": {...}}``
    taken from ``ytInitialPlayerResponse``.
    """

    strategy_id = StrategyId.YOUTUBE_SCRAPE
    data_source = "YouTube page scrape"
    state_marker = "ytInitialPlayerResponse"

    def _extract_state(self, html: str, soup: BeautifulSoup) -> dict[str, Any] | None:
        data = load_assigned_json(html, _YT_INITIAL_PLAYER_RE)
        if not data:
            return None
        video_details = data.get("videoDetails")
        if not isinstance(video_details, dict):
            return None
        microformat = data.get("microformat") or {}
        renderer = microformat.get("playerMicroformatRenderer") or {}
        return {"videoDetails": video_details, "microformat": renderer}


class TikTokScrapeStrategy(HTMLScrapeStrategy):
    """
    Scrape a TikTok video page.

    Looks for the rehydration blob (as a JSON ``<script>`` or a
    ``window.`` assignment), then the older ``SIGI_STATE`` blob. The state
    item is always shaped like ``itemStruct`` with a nested ``author``.
    """

    strategy_id = StrategyId.TIKTOK_SCRAPE
    data_source = "TikTok page scrape"
    state_marker = "__UNIVERSAL_DATA_FOR_REHYDRATION__"

    def _extract_state(self, html: str, soup: BeautifulSoup) -> dict[str, Any] | None:
        rehydration = load_script_json(soup, id="__UNIVERSAL_DATA_FOR_REHYDRATION__")
        if not isinstance(rehydration, dict):
            rehydration = load_assigned_json(html, _TIKTOK_REHYDRATION_RE)
        if isinstance(rehydration, dict):
            item = self._item_from_rehydration(rehydration)
            if item:
                return item

        sigi = load_script_json(soup, id="SIGI_STATE")
        if isinstance(sigi, dict):
            return self._item_from_sigi(sigi)
        return None

    @staticmethod
    def _item_from_rehydration(data: dict[str, Any]) -> dict[str, Any] | None:
        scope = data.get("__DEFAULT_SCOPE__") or data.get("default") or {}
        detail = scope.get("webapp.video-detail") or {}
        item = (detail.get("itemInfo") or {}).get("itemStruct")
        return item if isinstance(item, dict) and item else None

    @staticmethod
    def _item_from_sigi(data: dict[str, Any]) -> dict[str, Any] | None:
        items = data.get("ItemModule")
        if not isinstance(items, dict) or not items:
            return None
        item = next(iter(items.values()))
        if not isinstance(item, dict):
            return None

        # SIGI_STATE stores the author as a uniqueId string with the
        # profile under UserModule.
        item = dict(item)
        author = item.get("author")
        if isinstance(author, str):
            user_module = data.get("UserModule") or {}
            profile = dict((user_module.get("users") or {}).get(author) or {})
            profile.setdefault("uniqueId", author)
            item["author"] = profile
            item["authorStats"] = (user_module.get("stats") or {}).get(author) or {}
        return item


class InstagramScrapeStrategy(HTMLScrapeStrategy):
    """
    Scrape an Instagram post or reel page.

    The state item is the first JSON-LD object of type ``VideoObject`` or
    ``SocialMediaPosting``.
    """

    strategy_id = StrategyId.INSTAGRAM_SCRAPE
    data_source = "Instagram page scrape"
    state_marker = "ld+json"
    _LD_TYPES = frozenset({"VideoObject", "SocialMediaPosting", "ImageObject"})

    def _extract_state(self, html: str, soup: BeautifulSoup) -> dict[str, Any] | None:
        for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
            text = script.string or script.get_text()
            if not text:
                continue
            try:
                data = json.loads(text)
            except ValueError:
                continue
            for candidate in data if isinstance(data, list) else [data]:
                if isinstance(candidate, dict) and candidate.get("@type") in self._LD_TYPES:
                    return candidate
        return None
