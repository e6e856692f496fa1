from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping, Optional

from loguru import logger

from packages.common.config import RuntimeConfig
from packages.market_data.aggregator import BarAggregator
from packages.market_data.bar_series import BoundedBarSeries
from packages.market_data.types import Tick
from packages.runtime import accounts as acct
from packages.runtime.ports import Account, AccountLookup, BarSeriesView, DecisionFunction, StrategyCallbacks
from packages.runtime.signals import Signal, SignalEvaluator


@dataclass(frozen=True)
class ReplayResult:
    symbol: str
    ticks_total: int
    ticks_accepted: int
    bars_opened: int
    enters: int
    exits: int


class StrategyRuntime:
    """
    Single-instrument tick runtime.

    Owns one BoundedBarSeries + BarAggregator + SignalEvaluator and exposes
    on_tick() as the only entry point:
      1) ignore ticks for other symbols
      2) remember the tick as last observed for the symbol
      3) aggregate (new bar or merge; a late tick merges into the last bar)
      4) on a new bar only: evaluate and dispatch on_enter / on_exit
      5) always: on_tick_observed(tick)

    Not thread-safe: feed each runtime from one serialized tick source.
    """

    def __init__(
        self,
        cfg: RuntimeConfig,
        *,
        decision: DecisionFunction,
        callbacks: StrategyCallbacks,
        accounts: Optional[AccountLookup] = None,
    ):
        self.cfg = cfg
        self.callbacks = callbacks
        self.accounts = accounts

        self._series = BoundedBarSeries(cfg.max_bar_count, name=cfg.symbol)
        self._aggregator = BarAggregator(self._series, cfg.delay_ms, cfg.anchor)
        self._evaluator = SignalEvaluator(decision)

        self._last_ticks: Dict[str, Tick] = {}

        logger.info(
            "StrategyRuntime symbol={} max_bar_count={} delay_ms={} anchor={}",
            cfg.symbol,
            cfg.max_bar_count,
            cfg.delay_ms,
            cfg.anchor.value,
        )

    # ---- identity / read access

    @property
    def requested_symbols(self) -> FrozenSet[str]:
        return frozenset({self.cfg.symbol})

    @property
    def series(self) -> BarSeriesView:
        return self._series

    @property
    def last_ticks(self) -> Mapping[str, Tick]:
        return MappingProxyType(self._last_ticks)

    @property
    def last_added_bar_ts_ms(self) -> Optional[int]:
        return self._aggregator.last_added_bar_ts_ms

    # ---- tick path

    def on_tick(self, tick: Tick) -> Optional[Signal]:
        """
        Process one tick. Returns None when the tick was for another symbol,
        Signal.NONE for a merge or a new bar without a decision, else the
        dispatched ENTER/EXIT.
        """
        # Every runtime may see every symbol's ticks; keep ours only.
        if tick.symbol != self.cfg.symbol:
            return None

        self._last_ticks[tick.symbol] = tick

        res = self._aggregator.on_tick(tick)

        signal = Signal.NONE
        if res.created:
            index = self._series.end_index
            signal = self._evaluator.evaluate(index, self._series)
            if signal == Signal.ENTER:
                logger.info("ENTER symbol={} index={} t={} close={}", tick.symbol, index, tick.ts_ms, res.bar.close)
                self.callbacks.on_enter(res.bar)
            elif signal == Signal.EXIT:
                logger.info("EXIT symbol={} index={} t={} close={}", tick.symbol, index, tick.ts_ms, res.bar.close)
                self.callbacks.on_exit(res.bar)

        self.callbacks.on_tick_observed(tick)
        return signal

    def replay(self, ticks: Iterable[Tick]) -> ReplayResult:
        total = accepted = opened = enters = exits = 0
        for tick in ticks:
            total += 1
            before = self._series.end_index
            signal = self.on_tick(tick)
            if signal is None:
                continue
            accepted += 1
            if self._series.end_index != before:
                opened += 1
            if signal == Signal.ENTER:
                enters += 1
            elif signal == Signal.EXIT:
                exits += 1

        return ReplayResult(
            symbol=self.cfg.symbol,
            ticks_total=total,
            ticks_accepted=accepted,
            bars_opened=opened,
            enters=enters,
            exits=exits,
        )

    # ---- affordability

    def _lookup(self) -> AccountLookup:
        # No lookup means no trade account; an explicit account still reads its own balances.
        if self.accounts is None:
            return acct.StaticAccountBook([])
        return self.accounts

    def can_buy(
        self,
        amount: Decimal,
        minimum_balance_after: Decimal = acct.ZERO,
        account: Optional[Account] = None,
    ) -> bool:
        """True when the quote-currency balance covers amount and still leaves minimum_balance_after."""
        return acct.can_buy(self._lookup(), self.cfg.pair, amount, minimum_balance_after, account)

    def can_sell(
        self,
        amount: Decimal,
        minimum_balance_after: Decimal = acct.ZERO,
        account: Optional[Account] = None,
    ) -> bool:
        """Same check against the base-currency balance."""
        return acct.can_sell(self._lookup(), self.cfg.pair, amount, minimum_balance_after, account)
