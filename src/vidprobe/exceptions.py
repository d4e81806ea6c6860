"""
Custom exceptions for the vidprobe application.

This module defines the error taxonomy for video metadata resolution:
caller-facing errors raised by the resolver, strategy-local errors that the
chain executor always recovers from, and the aggregate failure raised when
every strategy for a platform has been exhausted.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

from vidprobe.models.enums import FailureKind, Platform, StrategyId


class VidprobeError(Exception):
    """Base exception for all vidprobe errors."""

    def __init__(self, message: str) -> None:
        """
        Initialize VidprobeError.

        Parameters
        ----------
        message : str
            Human-readable error message.
        """
        self.message = message
        super().__init__(message)


class UnsupportedPlatformError(VidprobeError):
    """
    Exception raised when a URL does not belong to a supported platform.

    Malformed URLs raise this same error: the caller cannot (and need not)
    distinguish an unparsable URL from an unknown domain.

    Attributes
    ----------
    message : str
        Human-readable error message.
    url : str
        The rejected input URL, unmodified.

    Examples
    --------
    >>> try:
    ...     detect_platform("https://vimeo.com/123")
    ... except UnsupportedPlatformError as e:
    ...     print(f"Cannot resolve {e.url}")
    """

    def __init__(self, url: str, message: str | None = None) -> None:
        """
        Initialize UnsupportedPlatformError.

        Parameters
        ----------
        url : str
            The rejected input URL.
        message : str | None, optional
            Human-readable error message (default: derived from the URL).
        """
        self.url = url
        super().__init__(message or f"Unsupported video platform for URL: {url!r}")


# =============================================================================
# Strategy-local errors
# =============================================================================


class StrategyError(VidprobeError):
    """
    Base class for failures raised by a single extraction strategy.

    These errors never reach the resolver's caller directly. The chain
    executor records them as ``StrategyFailure`` entries and moves on to
    the next strategy.

    Attributes
    ----------
    message : str
        Human-readable error message.
    strategy_id : StrategyId
        The strategy that failed.
    status_code : int | None
        HTTP status code of the failing response, when there was one.
    """

    kind: FailureKind = FailureKind.NETWORK_ERROR

    def __init__(
        self,
        strategy_id: StrategyId,
        message: str,
        status_code: int | None = None,
    ) -> None:
        """
        Initialize StrategyError.

        Parameters
        ----------
        strategy_id : StrategyId
            The strategy that failed.
        message : str
            Human-readable error message.
        status_code : int | None, optional
            HTTP status code of the failing response (default: None).
        """
        self.strategy_id = strategy_id
        self.status_code = status_code
        super().__init__(message)

    def to_failure(self) -> StrategyFailure:
        """Convert this error into an immutable diagnostic record."""
        return StrategyFailure(
            strategy_id=self.strategy_id,
            kind=self.kind,
            message=self.message,
            status_code=self.status_code,
        )


class MissingCredentialError(StrategyError):
    """Raised before any network call when a strategy's credential is unset."""

    kind = FailureKind.MISSING_CREDENTIAL


class RateLimitedError(StrategyError):
    """Raised when the backend rejects the call for quota or rate reasons."""

    kind = FailureKind.RATE_LIMITED


class NotFoundError(StrategyError):
    """Raised when the backend reports the video as missing or private."""

    kind = FailureKind.NOT_FOUND


class MalformedResponseError(StrategyError):
    """Raised when a response's top-level shape is unusable."""

    kind = FailureKind.MALFORMED_RESPONSE


class NetworkError(StrategyError):
    """
    Raised for transport failures, timeouts and unexpected HTTP statuses.

    A credential that is present but rejected by the remote service
    (HTTP 401/403) also surfaces as a ``NetworkError`` carrying the status
    code, which keeps it distinguishable from ``MissingCredentialError``.
    """

    kind = FailureKind.NETWORK_ERROR


@dataclass(frozen=True)
class StrategyFailure:
    """One entry of the ordered diagnostic list for a failed resolution."""

    strategy_id: StrategyId
    kind: FailureKind
    message: str
    status_code: int | None = None

    def to_dict(self) -> dict[str, object]:
        """Serialize for logging and JSON output."""
        return {
            "strategy": self.strategy_id.value,
            "kind": self.kind.value,
            "message": self.message,
            "statusCode": self.status_code,
        }


# =============================================================================
# Aggregate failures
# =============================================================================


def _summarize(reasons: tuple[StrategyFailure, ...]) -> str:
    return ", ".join(f"{r.strategy_id.value}={r.kind.value}" for r in reasons)


class AllStrategiesExhausted(VidprobeError):
    """
    Raised by the chain executor when every configured strategy failed.

    Attributes
    ----------
    platform : Platform
        The platform whose chain was exhausted.
    reasons : tuple[StrategyFailure, ...]
        One entry per configured strategy, in priority order.
    """

    def __init__(self, platform: Platform, reasons: list[StrategyFailure]) -> None:
        """
        Initialize AllStrategiesExhausted.

        Parameters
        ----------
        platform : Platform
            The platform whose chain was exhausted.
        reasons : list[StrategyFailure]
            Ordered per-strategy failures.
        """
        self.platform = platform
        self.reasons = tuple(reasons)
        super().__init__(
            f"All {platform.value} extraction strategies failed: {_summarize(self.reasons)}"
        )


class ExtractionFailedError(VidprobeError):
    """
    Exception raised to the caller when no strategy could resolve a URL.

    Carries the platform and the ordered per-strategy reasons so operators
    can tell missing configuration apart from remote outages and page
    layout changes. Callers wanting a placeholder record must build one
    themselves from this error.

    Attributes
    ----------
    message : str
        Human-readable error message.
    url : str
        The input URL.
    platform : Platform
        The detected platform.
    reasons : tuple[StrategyFailure, ...]
        Ordered per-strategy failures.

    Examples
    --------
    >>> try:
    ...     metadata = await resolver.resolve_video(url)
    ... except ExtractionFailedError as e:
    ...     if e.all_missing_credentials:
    ...         print("Configure YOUTUBE_API_KEY or RAPIDAPI_KEY")
    """

    def __init__(
        self,
        url: str,
        platform: Platform,
        reasons: tuple[StrategyFailure, ...] | list[StrategyFailure],
    ) -> None:
        """
        Initialize ExtractionFailedError.

        Parameters
        ----------
        url : str
            The input URL.
        platform : Platform
            The detected platform.
        reasons : tuple[StrategyFailure, ...] | list[StrategyFailure]
            Ordered per-strategy failures.
        """
        self.url = url
        self.platform = platform
        self.reasons = tuple(reasons)
        super().__init__(
            f"Could not fetch authentic {platform.value} data for {url!r}: "
            f"{_summarize(self.reasons)}"
        )

    @classmethod
    def from_exhausted(cls, url: str, exc: AllStrategiesExhausted) -> ExtractionFailedError:
        """Wrap a chain exhaustion for the caller."""
        return cls(url=url, platform=exc.platform, reasons=exc.reasons)

    @property
    def failure_counts(self) -> dict[FailureKind, int]:
        """Number of strategies that failed with each kind."""
        return dict(Counter(r.kind for r in self.reasons))

    @property
    def all_missing_credentials(self) -> bool:
        """True when every credentialed strategy was skipped for lack of a key."""
        credentialed = [r for r in self.reasons if r.strategy_id.is_authentic]
        return bool(credentialed) and all(
            r.kind is FailureKind.MISSING_CREDENTIAL for r in credentialed
        )


# Exit codes for CLI
EXIT_CODE_SUCCESS = 0
EXIT_CODE_GENERAL_ERROR = 1
EXIT_CODE_UNSUPPORTED_PLATFORM = 2
EXIT_CODE_EXTRACTION_FAILED = 3
