from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from packages.runtime.ports import BarSeriesView


def _closes(series: BarSeriesView, index: int, n: Optional[int] = None) -> List[Decimal]:
    if series.begin_index is None or index < series.begin_index:
        return []
    count = len(series) if n is None else n
    return [b.close for b in series.window(count, end_index=index)]


def sma(series: BarSeriesView, index: int, period: int) -> Optional[Decimal]:
    """Simple moving average of closes ending at `index`; None until `period` bars exist."""
    if period <= 0:
        raise ValueError(f"period must be > 0 (got {period})")
    closes = _closes(series, index, period)
    if len(closes) < period:
        return None
    return sum(closes, Decimal(0)) / Decimal(period)


def ema(series: BarSeriesView, index: int, period: int) -> Optional[Decimal]:
    """
    Exponential moving average of closes ending at `index`.

    Seeded with the oldest retained close, so values depend on how much
    history the series still holds. None until `period` bars exist.
    """
    if period <= 0:
        raise ValueError(f"period must be > 0 (got {period})")
    closes = _closes(series, index)
    if len(closes) < period:
        return None

    alpha = Decimal(2) / Decimal(period + 1)
    value = closes[0]
    for x in closes[1:]:
        value = (alpha * x) + ((1 - alpha) * value)
    return value
