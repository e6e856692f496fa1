from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from packages.common.errors import EmptySeries, InvalidConfiguration
from packages.common.types import BoundaryAnchor
from packages.market_data.bar_series import BoundedBarSeries
from packages.market_data.types import Bar, Tick


@dataclass(frozen=True)
class AggregationResult:
    bar: Bar        # the bar now at the end of the series
    created: bool   # True -> appended, False -> merged into the last bar


class BarAggregator:
    """
    Online tick -> bar aggregator for a single instrument.

    For a tick at t:
      - new bar when there is no boundary timestamp yet, or t >= boundary + delay
        (inclusive on the "new" side)
      - otherwise merge into the last bar: keep open/begin, widen high/low,
        sum volume, take the tick's close, stretch duration to t - begin

    The boundary timestamp starts absent and is set to t on every new bar.
    With BoundaryAnchor.LAST_TICK it is also set to t on every merge, so the
    next boundary is measured from the latest tick rather than the bar open.

    Tick ordering is not validated here.

    Example:
        agg = BarAggregator(series, delay_ms=60_000)
        for tick in ticks:
            res = agg.on_tick(tick)
            if res.created:
                handle(res.bar)
    """

    def __init__(
        self,
        series: BoundedBarSeries,
        delay_ms: int,
        anchor: BoundaryAnchor = BoundaryAnchor.LAST_TICK,
    ):
        if delay_ms <= 0:
            raise InvalidConfiguration(f"delay_ms must be > 0 (got {delay_ms})")
        self.series = series
        self.delay_ms = int(delay_ms)
        self.anchor = BoundaryAnchor(anchor)
        self._last_added_bar_ts_ms: Optional[int] = None

    @property
    def last_added_bar_ts_ms(self) -> Optional[int]:
        return self._last_added_bar_ts_ms

    def is_new_bar(self, ts_ms: int) -> bool:
        last = self._last_added_bar_ts_ms
        return last is None or ts_ms >= last + self.delay_ms

    def on_tick(self, tick: Tick) -> AggregationResult:
        px = tick.resolve()
        t = int(tick.ts_ms)

        if self.is_new_bar(t):
            bar = Bar(
                begin_ms=t,
                duration_ms=0,
                open=px.open,
                high=px.high,
                low=px.low,
                close=px.close,
                volume=px.volume,
            )
            self.series.append(bar)
            self._last_added_bar_ts_ms = t
            logger.debug(
                "Bar opened symbol={} t={} index={} o={} h={} l={} c={} v={}",
                tick.symbol,
                t,
                self.series.end_index,
                bar.open,
                bar.high,
                bar.low,
                bar.close,
                bar.volume,
            )
            return AggregationResult(bar=bar, created=True)

        prev = self.series.last()
        if prev is None:
            raise EmptySeries(
                f"merge at t={t} but series {self.series.name!r} holds no bar "
                f"(last_added_bar_ts_ms={self._last_added_bar_ts_ms})"
            )

        bar = Bar(
            begin_ms=prev.begin_ms,
            duration_ms=t - prev.begin_ms,
            open=prev.open,
            high=max(prev.high, px.high),
            low=min(prev.low, px.low),
            close=px.close,
            volume=prev.volume + px.volume,
        )
        self.series.replace_last(bar)
        if self.anchor == BoundaryAnchor.LAST_TICK:
            self._last_added_bar_ts_ms = t

        logger.debug(
            "Bar merged symbol={} t={} begin={} duration_ms={} h={} l={} c={} v={}",
            tick.symbol,
            t,
            bar.begin_ms,
            bar.duration_ms,
            bar.high,
            bar.low,
            bar.close,
            bar.volume,
        )
        return AggregationResult(bar=bar, created=False)
