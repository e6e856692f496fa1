from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

from packages.common.config import DecisionConfig
from packages.runtime.ports import BarSeriesView
from packages.strategies.indicators import sma


@dataclass(frozen=True)
class SmaCrossDecision:
    """
    Fast/slow SMA crossover on bar closes.

      enter: fast crosses above slow at `index` (fast <= slow on index-1, fast > slow on index)
      exit:  fast crosses below slow at `index`

    Both need slow_period + 1 bars of history; before that neither fires.
    """
    fast_period: int = 5
    slow_period: int = 20

    def __post_init__(self) -> None:
        if self.fast_period <= 0 or self.slow_period <= 0:
            raise ValueError("SMA periods must be > 0")
        if self.fast_period >= self.slow_period:
            raise ValueError(
                f"fast_period must be < slow_period (got {self.fast_period} >= {self.slow_period})"
            )

    @classmethod
    def from_config(cls, cfg: DecisionConfig) -> "SmaCrossDecision":
        return cls(fast_period=cfg.fast_period, slow_period=cfg.slow_period)

    def _pair(self, series: BarSeriesView, index: int) -> Optional[Tuple[Decimal, Decimal]]:
        fast = sma(series, index, self.fast_period)
        slow = sma(series, index, self.slow_period)
        if fast is None or slow is None:
            return None
        return fast, slow

    def should_enter(self, index: int, series: BarSeriesView) -> bool:
        now = self._pair(series, index)
        prev = self._pair(series, index - 1)
        if now is None or prev is None:
            return False
        return prev[0] <= prev[1] and now[0] > now[1]

    def should_exit(self, index: int, series: BarSeriesView) -> bool:
        now = self._pair(series, index)
        prev = self._pair(series, index - 1)
        if now is None or prev is None:
            return False
        return prev[0] >= prev[1] and now[0] < now[1]
