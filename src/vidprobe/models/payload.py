"""
Raw strategy payload model.

A ``RawPayload`` is what an extraction strategy hands back on success: the
strategy-specific response data, untouched apart from selecting the parts
the normalizer needs. Only the normalizer interprets ``data``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from vidprobe.models.enums import Platform, StrategyId


class RawPayload(BaseModel):
    """
    Strategy-specific result of one successful extraction.

    Attributes
    ----------
    strategy_id : StrategyId
        The strategy that produced the payload.
    data : dict[str, Any]
        Backend response data in the strategy's own shape.
    data_source : str
        Human-readable label of the backend that answered (e.g. the
        RapidAPI host that served the request).
    """

    model_config = ConfigDict(frozen=True)

    strategy_id: StrategyId
    data: dict[str, Any] = Field(default_factory=dict)
    data_source: str

    @property
    def platform(self) -> Platform:
        """Platform of the producing strategy."""
        return self.strategy_id.platform
