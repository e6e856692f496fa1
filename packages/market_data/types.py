from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

ZERO = Decimal(0)


@dataclass(frozen=True)
class Bar:
    """
    OHLCV bar.

    begin_ms is the time of the tick that opened the bar; duration_ms grows as
    later ticks are merged in (0 for a freshly opened bar).
    """
    begin_ms: int
    duration_ms: int
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal = ZERO

    @property
    def end_ms(self) -> int:
        return self.begin_ms + self.duration_ms


@dataclass(frozen=True)
class ResolvedPrices:
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal


@dataclass(frozen=True)
class Tick:
    """
    One price/volume observation for an instrument.

    Only `symbol` and `ts_ms` are mandatory; missing price fields are resolved
    by resolve().
    """
    symbol: str
    ts_ms: int
    last: Optional[Decimal]
    open: Optional[Decimal] = None
    high: Optional[Decimal] = None
    low: Optional[Decimal] = None
    volume: Optional[Decimal] = None

    def resolve(self) -> ResolvedPrices:
        """
        Default resolution for missing fields:
          open/high/low -> last
          close         -> last, else 0
          volume        -> 0
        """
        return ResolvedPrices(
            open=_first_present(self.open, self.last),
            high=_first_present(self.high, self.last),
            low=_first_present(self.low, self.last),
            close=_first_present(self.last, ZERO),
            volume=_first_present(self.volume, ZERO),
        )


def _first_present(*values: Optional[Decimal]) -> Decimal:
    for v in values:
        if v is not None:
            return v
    # open/high/low with neither the field nor last present
    return ZERO
