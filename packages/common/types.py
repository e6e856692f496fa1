from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Symbol:
    value: str  # e.g. "BTC/USDT"

    @property
    def base(self) -> str:
        return self.value.split("/", 1)[0]

    @property
    def quote(self) -> str:
        return self.value.split("/", 1)[1]

    def __str__(self) -> str:
        return self.value


class BoundaryAnchor(str, Enum):
    # Boundary = last tick time + delay (merge ticks push it forward)
    LAST_TICK = "last_tick"
    # Boundary = current bar open time + delay (fixed buckets)
    BAR_OPEN = "bar_open"
