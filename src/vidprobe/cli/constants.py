"""
CLI constants for vidprobe.

This module provides shared display constants for CLI commands:
- Log formatting for the console handler
- Truncation limits for rich output
- Labels for strategy kinds and failure kinds

NOTE: Exit codes live in ``vidprobe.exceptions`` next to the errors that
produce them.
"""

from __future__ import annotations

from typing import Final

from vidprobe.models.enums import FailureKind, StrategyKind

# =============================================================================
# Logging
# =============================================================================

LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

# =============================================================================
# Display Limits
# =============================================================================

DESCRIPTION_PREVIEW_LENGTH: Final[int] = 200
"""Characters of the description shown in the metadata panel."""

MESSAGE_PREVIEW_LENGTH: Final[int] = 80
"""Characters of a failure message shown in the diagnostics table."""

# =============================================================================
# Labels
# =============================================================================

STRATEGY_KIND_LABELS: Final[dict[StrategyKind, str]] = {
    StrategyKind.OFFICIAL_API: "Official API",
    StrategyKind.PROXY_API: "Proxy API",
    StrategyKind.EMBED: "oEmbed",
    StrategyKind.SCRAPE: "HTML scrape",
}

FAILURE_KIND_STYLES: Final[dict[FailureKind, str]] = {
    FailureKind.MISSING_CREDENTIAL: "dim",
    FailureKind.RATE_LIMITED: "yellow",
    FailureKind.NOT_FOUND: "magenta",
    FailureKind.MALFORMED_RESPONSE: "red",
    FailureKind.NETWORK_ERROR: "red",
}
