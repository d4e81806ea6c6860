"""
Test doubles shared across the vidprobe test suite.
"""

from __future__ import annotations

from typing import Any, Callable, Union

import httpx

from vidprobe.config.settings import Settings
from vidprobe.models.enums import StrategyId
from vidprobe.models.payload import RawPayload
from vidprobe.services.strategies.base import ExtractionStrategy

Responder = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class FakeBackend:
    """Route requests by URL prefix to canned responses and record them."""

    def __init__(self) -> None:
        self.routes: list[tuple[str, Responder]] = []
        self.requests: list[httpx.Request] = []

    def add(self, url_prefix: str, responder: Responder) -> None:
        """Register a response (or a request -> response callable)."""
        self.routes.append((url_prefix, responder))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        for prefix, responder in self.routes:
            if url.startswith(prefix):
                return responder(request) if callable(responder) else responder
        raise httpx.ConnectError(f"No route for {url}", request=request)

    def hosts(self) -> list[str]:
        """Hosts contacted, in request order."""
        return [request.url.host for request in self.requests]


class StubStrategy(ExtractionStrategy):
    """Strategy returning a fixed payload or raising a fixed error."""

    data_source = "stub backend"

    def __init__(
        self,
        strategy_id: StrategyId,
        outcome: Union[dict[str, Any], Exception],
        settings: Settings,
    ) -> None:
        super().__init__(httpx.AsyncClient(), settings)
        self.strategy_id = strategy_id  # type: ignore[misc]
        self.outcome = outcome
        self.calls = 0

    async def extract(self, url: str, platform_id: str | None = None) -> RawPayload:
        self.calls += 1
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self._payload(self.outcome)
