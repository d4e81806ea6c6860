"""
Pydantic models for resolved video metadata.

Provides the unified, immutable record produced once per resolution call,
regardless of which extraction strategy supplied the data.

Models
------
Engagement
    Non-negative integer counters (views, likes, comments, shares).
Author
    Creator profile fields, defaulting to empty values.
Provenance
    Which strategy produced the record and whether it is first-party data.
VideoMetadata
    The unified output record. Serializes with camelCase field names.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from vidprobe.models.enums import Platform, StrategyId
from vidprobe.services.enrichment import MAX_HASHTAGS, rate_engagement

_RECORD_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
)


class Engagement(BaseModel):
    """
    Engagement counters for a video.

    Attributes
    ----------
    views : int
        View or play count. Must be >= 0.
    likes : int
        Like count. Must be >= 0.
    comments : int
        Comment count. Must be >= 0.
    shares : int
        Share count. Must be >= 0.
    """

    model_config = _RECORD_CONFIG

    views: int = Field(default=0, ge=0, strict=True)
    likes: int = Field(default=0, ge=0, strict=True)
    comments: int = Field(default=0, ge=0, strict=True)
    shares: int = Field(default=0, ge=0, strict=True)


class Author(BaseModel):
    """Creator profile; every field defaults to an empty value."""

    model_config = _RECORD_CONFIG

    handle: str = ""
    display_name: str = ""
    follower_count: int = Field(default=0, ge=0, strict=True)
    verified: bool = False
    avatar_url: str = ""
    bio: str = ""


class Provenance(BaseModel):
    """
    Where a record came from.

    Attributes
    ----------
    is_authentic : bool
        True only for strategies documented as returning first-party data.
    data_source : str
        Human-readable backend label (e.g. "YouTube Data API v3").
    extraction_method : StrategyId
        Identifier of the strategy that succeeded.
    """

    model_config = _RECORD_CONFIG

    is_authentic: bool
    data_source: str = Field(min_length=1)
    extraction_method: StrategyId


class VideoMetadata(BaseModel):
    """
    Unified metadata record for one resolved video URL.

    Constructed once per resolution and immutable afterwards. ``rating`` is
    not stored: it is computed from ``engagement`` so it can never drift
    from the counters or be supplied by a strategy.

    Attributes
    ----------
    title : str
        Video title, or a platform placeholder when unrecoverable.
    description : str
        Video description or caption; may be empty.
    engagement : Engagement
        Engagement counters.
    author : Author
        Creator profile.
    hashtags : list[str]
        Deduplicated hashtags in first-seen order, at most 15.
    platform : Platform
        Platform assigned by the detector.
    published_at : str
        ISO-8601 timestamp.
    duration_seconds : int
        Duration in whole seconds. Must be >= 0.
    source_url : str
        The input URL, unmodified.
    thumbnail_url : str
        Thumbnail URL; may be empty.
    provenance : Provenance
        Strategy provenance.
    """

    model_config = _RECORD_CONFIG

    title: str
    description: str = ""
    engagement: Engagement = Field(default_factory=Engagement)
    author: Author = Field(default_factory=Author)
    hashtags: list[str] = Field(default_factory=list)
    platform: Platform
    published_at: str
    duration_seconds: int = Field(default=0, ge=0, strict=True)
    source_url: str
    thumbnail_url: str = ""
    provenance: Provenance

    @field_validator("hashtags")
    @classmethod
    def dedupe_hashtags(cls, v: list[str]) -> list[str]:
        """
        Deduplicate hashtags case-sensitively and cap the list length.

        Parameters
        ----------
        v : list[str]
            Hashtags in source order.

        Returns
        -------
        list[str]
            First occurrences only, truncated to ``MAX_HASHTAGS``.
        """
        return list(dict.fromkeys(v))[:MAX_HASHTAGS]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def rating(self) -> int:
        """Engagement rating band in [0, 5], derived from views and likes."""
        return rate_engagement(self.engagement.views, self.engagement.likes)

    def to_json_dict(self) -> dict[str, object]:
        """Serialize with the camelCase field names expected by callers."""
        return self.model_dump(mode="json", by_alias=True)
