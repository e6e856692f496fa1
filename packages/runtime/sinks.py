from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from loguru import logger

from packages.common.datetime_utils import ms_to_iso8601_z
from packages.market_data.types import Bar, Tick
from packages.runtime.signals import Signal


@dataclass(frozen=True)
class SignalEvent:
    ts_ms: int       # open time of the bar that triggered the signal
    signal: Signal
    close: Decimal


@dataclass
class RecordingSink:
    """
    StrategyCallbacks that keeps everything in memory:
    - enter/exit decisions as SignalEvents (in dispatch order)
    - count + last of observed ticks
    """
    events: List[SignalEvent] = field(default_factory=list)
    ticks_observed: int = 0
    last_tick: Optional[Tick] = None

    def on_enter(self, bar: Bar) -> None:
        self.events.append(SignalEvent(ts_ms=bar.begin_ms, signal=Signal.ENTER, close=bar.close))

    def on_exit(self, bar: Bar) -> None:
        self.events.append(SignalEvent(ts_ms=bar.begin_ms, signal=Signal.EXIT, close=bar.close))

    def on_tick_observed(self, tick: Tick) -> None:
        self.ticks_observed += 1
        self.last_tick = tick


@dataclass
class LoggingSink:
    """Logs every callback and forwards to an optional inner sink."""
    inner: Optional[RecordingSink] = None
    log_ticks: bool = False

    def on_enter(self, bar: Bar) -> None:
        logger.info("on_enter bar_open={} close={}", ms_to_iso8601_z(bar.begin_ms), bar.close)
        if self.inner is not None:
            self.inner.on_enter(bar)

    def on_exit(self, bar: Bar) -> None:
        logger.info("on_exit bar_open={} close={}", ms_to_iso8601_z(bar.begin_ms), bar.close)
        if self.inner is not None:
            self.inner.on_exit(bar)

    def on_tick_observed(self, tick: Tick) -> None:
        if self.log_ticks:
            logger.debug("tick symbol={} t={} last={}", tick.symbol, ms_to_iso8601_z(tick.ts_ms), tick.last)
        if self.inner is not None:
            self.inner.on_tick_observed(tick)
