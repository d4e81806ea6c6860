"""
Strategy chain executor.

Holds an ordered list of extraction strategies per platform and tries them
strictly one at a time, stopping at the first success. Strategies are
never run in parallel: a later, rate-limited or paid call is only made
when every earlier strategy has already failed. There is no retry or
backoff at this layer.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from vidprobe.exceptions import (
    AllStrategiesExhausted,
    MissingCredentialError,
    StrategyError,
    StrategyFailure,
)
from vidprobe.models.enums import Platform, StrategyId
from vidprobe.models.payload import RawPayload
from vidprobe.services.strategies.base import ExtractionStrategy

logger = logging.getLogger(__name__)


class StrategyChain:
    """
    Sequential, short-circuiting executor over per-platform strategy lists.

    Parameters
    ----------
    chains : Mapping[Platform, Sequence[ExtractionStrategy]]
        Strategies per platform, highest priority first.

    Raises
    ------
    ValueError
        If a strategy is registered under a platform it does not serve.

    Examples
    --------
    >>> chain = StrategyChain(build_default_chains(settings, client))
    >>> payload, strategy_id = await chain.resolve(Platform.YOUTUBE, url, "dQw4w9WgXcQ")
    """

    def __init__(self, chains: Mapping[Platform, Sequence[ExtractionStrategy]]) -> None:
        for platform, strategies in chains.items():
            for strategy in strategies:
                if strategy.platform is not platform:
                    raise ValueError(
                        f"{strategy!r} serves {strategy.platform.value}, "
                        f"not {platform.value}"
                    )
        self._chains: dict[Platform, tuple[ExtractionStrategy, ...]] = {
            platform: tuple(strategies) for platform, strategies in chains.items()
        }

    def strategies_for(self, platform: Platform) -> tuple[ExtractionStrategy, ...]:
        """Return the ordered strategies configured for a platform."""
        return self._chains.get(platform, ())

    async def resolve(
        self,
        platform: Platform,
        url: str,
        platform_id: str | None = None,
    ) -> tuple[RawPayload, StrategyId]:
        """
        Run the platform's strategies in order until one succeeds.

        Parameters
        ----------
        platform : Platform
            Detected platform.
        url : str
            The input URL.
        platform_id : str | None, optional
            Pre-parsed platform-native identifier.

        Returns
        -------
        tuple[RawPayload, StrategyId]
            The first successful payload and the id of its strategy.

        Raises
        ------
        AllStrategiesExhausted
            If every configured strategy failed; ``reasons`` holds one entry
            per strategy in priority order.
        """
        reasons: list[StrategyFailure] = []

        for strategy in self.strategies_for(platform):
            strategy_id = strategy.strategy_id
            try:
                payload = await strategy.extract(url, platform_id)
            except MissingCredentialError as e:
                logger.debug("Skipping %s: %s", strategy_id.value, e.message)
                reasons.append(e.to_failure())
                continue
            except StrategyError as e:
                logger.info(
                    "Strategy %s failed (%s): %s", strategy_id.value, e.kind.value, e.message
                )
                reasons.append(e.to_failure())
                continue

            logger.info("Resolved %s URL via %s", platform.value, strategy_id.value)
            return payload, strategy_id

        logger.warning(
            "All %d %s strategies failed for %s",
            len(reasons),
            platform.value,
            url,
        )
        raise AllStrategiesExhausted(platform, reasons)
