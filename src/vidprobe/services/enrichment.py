"""
Derived enrichment for resolved video metadata.

Pure functions applied after normalization:

- ``extract_hashtags`` pulls an ordered, deduplicated, bounded list of
  hashtags out of free text (Latin, Hebrew and Arabic letters).
- ``rate_engagement`` maps (views, likes) to a 0-5 rating band.
"""

from __future__ import annotations

import re

MAX_HASHTAGS = 15
"""Maximum number of hashtags kept on a record."""

_HASHTAG_RE = re.compile(r"#[0-9A-Za-z_\u00C0-\u024F\u0590-\u05FF\u0600-\u06FF]+")

# (minimum engagement rate in percent, rating), checked top-down.
_RATING_THRESHOLDS: tuple[tuple[float, int], ...] = (
    (10.0, 5),
    (5.0, 4),
    (2.0, 3),
    (1.0, 2),
)


def extract_hashtags(text: str) -> list[str]:
    """
    Extract hashtags from free text.

    Parameters
    ----------
    text : str
        Description, caption or title text.

    Returns
    -------
    list[str]
        Hashtags including the leading ``#``, in order of first appearance,
        deduplicated case-sensitively and truncated to ``MAX_HASHTAGS``.

    Examples
    --------
    >>> extract_hashtags("great #foo video #bar #foo")
    ['#foo', '#bar']
    """
    if not text:
        return []
    seen: dict[str, None] = {}
    for match in _HASHTAG_RE.finditer(text):
        seen.setdefault(match.group(0), None)
        if len(seen) >= MAX_HASHTAGS:
            break
    return list(seen)


def rate_engagement(views: int, likes: int) -> int:
    """
    Rate engagement on a 0-5 scale.

    The engagement rate is ``likes / views * 100``; the bands are fixed
    (>=10 -> 5, >=5 -> 4, >=2 -> 3, >=1 -> 2, otherwise 1) and zero views
    always rate 0.

    Parameters
    ----------
    views : int
        View count.
    likes : int
        Like count.

    Returns
    -------
    int
        Rating band in [0, 5].

    Examples
    --------
    >>> rate_engagement(1000, 150)
    5
    >>> rate_engagement(0, 10)
    0
    """
    if views <= 0:
        return 0
    engagement_rate = likes / views * 100
    for threshold, rating in _RATING_THRESHOLDS:
        if engagement_rate >= threshold:
            return rating
    return 1
