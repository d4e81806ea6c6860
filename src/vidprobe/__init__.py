"""
vidprobe - Multi-source short-form video metadata resolution.

Given a YouTube, TikTok or Instagram URL, tries a prioritized chain of
extraction strategies and normalizes the first successful payload into a
single ``VideoMetadata`` record with provenance information.
"""

from __future__ import annotations

__version__ = "0.3.0"
__author__ = "vidprobe"
__email__ = "noreply@vidprobe.dev"
__license__ = "AGPL-3.0-or-later"

from vidprobe.exceptions import ExtractionFailedError, UnsupportedPlatformError
from vidprobe.models.video import VideoMetadata
from vidprobe.services.resolver import VideoResolver, resolve_video

__all__ = [
    "__version__",
    "__author__",
    "__email__",
    "__license__",
    "ExtractionFailedError",
    "UnsupportedPlatformError",
    "VideoMetadata",
    "VideoResolver",
    "resolve_video",
]
