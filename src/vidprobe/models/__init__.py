"""
Data models for vidprobe.

Contains the platform/strategy enums, the raw strategy payload and the
unified ``VideoMetadata`` record.
"""

from __future__ import annotations

from vidprobe.models.enums import FailureKind, Platform, StrategyId, StrategyKind
from vidprobe.models.payload import RawPayload
from vidprobe.models.video import Author, Engagement, Provenance, VideoMetadata

__all__ = [
    "FailureKind",
    "Platform",
    "StrategyId",
    "StrategyKind",
    "RawPayload",
    "Author",
    "Engagement",
    "Provenance",
    "VideoMetadata",
]
