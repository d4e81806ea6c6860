"""
Extraction strategy interface and shared HTTP handling.

Every concrete strategy turns a URL into a ``RawPayload`` or raises one of
the typed ``StrategyError`` subclasses. This module owns the translation of
httpx transport errors and HTTP status codes into that taxonomy so each
strategy only has to deal with its own response shape.

Classes
-------
ExtractionStrategy
    Abstract base class for all strategies.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar

import httpx

from vidprobe import __version__
from vidprobe.config.settings import Settings
from vidprobe.exceptions import (
    MalformedResponseError,
    MissingCredentialError,
    NetworkError,
    NotFoundError,
    RateLimitedError,
)
from vidprobe.models.enums import Platform, StrategyId
from vidprobe.models.payload import RawPayload

logger = logging.getLogger(__name__)

_NOT_FOUND_STATUSES = frozenset({404, 410})
_RATE_LIMITED_STATUSES = frozenset({429})


class ExtractionStrategy(ABC):
    """
    Abstract base class for extraction strategies.

    Subclasses declare a ``strategy_id`` and a ``data_source`` label and
    implement ``extract``. Strategies share the resolver's
    ``httpx.AsyncClient`` and read credentials only from the ``Settings``
    instance passed to the constructor.

    Parameters
    ----------
    client : httpx.AsyncClient
        Shared HTTP client.
    settings : Settings
        Read-only application settings.
    """

    strategy_id: ClassVar[StrategyId]
    data_source: ClassVar[str]

    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        """
        Initialize the strategy.

        Parameters
        ----------
        client : httpx.AsyncClient
            Shared HTTP client.
        settings : Settings
            Read-only application settings.
        """
        self._client = client
        self._settings = settings

    @property
    def platform(self) -> Platform:
        """Platform this strategy extracts from."""
        return self.strategy_id.platform

    @abstractmethod
    async def extract(self, url: str, platform_id: str | None = None) -> RawPayload:
        """
        Extract raw metadata for a video URL.

        Parameters
        ----------
        url : str
            The input URL, unmodified.
        platform_id : str | None, optional
            Pre-parsed platform-native identifier (video ID or shortcode).

        Returns
        -------
        RawPayload
            Strategy-specific payload for the normalizer.

        Raises
        ------
        StrategyError
            One of ``MissingCredentialError``, ``RateLimitedError``,
            ``NotFoundError``, ``MalformedResponseError`` or ``NetworkError``.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(strategy_id={self.strategy_id.value!r})"

    # ------------------------------------------------------------------
    # Helpers for subclasses
    # ------------------------------------------------------------------

    def _require_credential(self, value: str, name: str) -> str:
        """
        Return a configured credential or fail fast without network I/O.

        Raises
        ------
        MissingCredentialError
            If ``value`` is empty.
        """
        if not Settings.has_credential(value):
            raise MissingCredentialError(self.strategy_id, f"{name} is not configured")
        return value

    def _api_headers(self) -> dict[str, str]:
        return {"User-Agent": f"vidprobe/{__version__}", "Accept": "application/json"}

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """
        Issue one HTTP request with the configured timeout.

        Transport failures and timeouts become ``NetworkError``; non-2xx
        responses are classified by ``_raise_for_status``.
        """
        logger.debug("%s: %s %s", self.strategy_id.value, method, url)
        try:
            response = await self._client.request(
                method,
                url,
                params=params,
                headers=headers,
                json=json,
                timeout=self._settings.request_timeout,
                follow_redirects=True,
            )
        except httpx.TimeoutException as e:
            raise NetworkError(
                self.strategy_id,
                f"Request timed out after {self._settings.request_timeout:.0f}s "
                f"({type(e).__name__})",
            ) from e
        except httpx.HTTPError as e:
            raise NetworkError(
                self.strategy_id, f"Request failed: {type(e).__name__}"
            ) from e

        self._raise_for_status(response)
        return response

    def _raise_for_status(self, response: httpx.Response) -> None:
        """
        Map a non-2xx response onto the strategy error taxonomy.

        Subclasses may override to inspect backend-specific error bodies
        and should defer to this implementation for everything else.
        """
        status = response.status_code
        if response.is_success:
            return
        if status in _NOT_FOUND_STATUSES:
            raise NotFoundError(self.strategy_id, f"HTTP {status}: video not found", status)
        if status in _RATE_LIMITED_STATUSES:
            raise RateLimitedError(self.strategy_id, f"HTTP {status}: rate limited", status)
        if status in (401, 403):
            raise NetworkError(
                self.strategy_id, f"HTTP {status}: request rejected by backend", status
            )
        raise NetworkError(self.strategy_id, f"HTTP {status} from backend", status)

    def _json_object(self, response: httpx.Response) -> dict[str, Any]:
        """
        Decode a JSON object body.

        Raises
        ------
        MalformedResponseError
            If the body is not JSON or is not a JSON object.
        """
        try:
            body = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                self.strategy_id, "Response body is not valid JSON", response.status_code
            ) from e
        if not isinstance(body, dict):
            raise MalformedResponseError(
                self.strategy_id,
                f"Expected a JSON object, got {type(body).__name__}",
                response.status_code,
            )
        return body

    def _payload(self, data: dict[str, Any], data_source: str | None = None) -> RawPayload:
        return RawPayload(
            strategy_id=self.strategy_id,
            data=data,
            data_source=data_source or self.data_source,
        )


class CredentialedStrategy(ExtractionStrategy):
    """
    Base class for strategies that need an API key.

    Subclasses name the ``Settings`` attribute holding their key in
    ``credential_setting``.
    """

    credential_setting: ClassVar[str]

    def _credential(self) -> str:
        return self._require_credential(
            getattr(self._settings, self.credential_setting),
            self.credential_setting.upper(),
        )


def first_item(strategy_id: StrategyId, body: dict[str, Any], key: str = "items") -> dict[str, Any]:
    """
    Return the first element of a mandatory list field.

    Raises
    ------
    MalformedResponseError
        If the field is missing, not a list, or its first element is not an object.
    NotFoundError
        If the list is empty.
    """
    items = body.get(key)
    if not isinstance(items, list):
        raise MalformedResponseError(strategy_id, f"Response has no '{key}' array")
    if not items:
        raise NotFoundError(strategy_id, "Video not found or private")
    item = items[0]
    if not isinstance(item, dict):
        raise MalformedResponseError(strategy_id, f"First '{key}' entry is not an object")
    return item


__all__ = [
    "CredentialedStrategy",
    "ExtractionStrategy",
    "first_item",
]
