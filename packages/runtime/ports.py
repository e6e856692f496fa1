from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, List, Mapping, Optional, Protocol, runtime_checkable

from packages.market_data.types import Bar, Tick


@runtime_checkable
class BarSeriesView(Protocol):
    """Read-only series access handed to decision functions."""

    @property
    def begin_index(self) -> Optional[int]: ...

    @property
    def end_index(self) -> Optional[int]: ...

    def __len__(self) -> int: ...

    def get_bar(self, index: int) -> Bar: ...

    def window(self, n: int, end_index: Optional[int] = None) -> List[Bar]: ...


@runtime_checkable
class DecisionFunction(Protocol):
    """
    Entry/exit rules over the bar history.

    Both predicates must be side-effect free; `index` is the absolute index of
    the bar that was just opened, and series.get_bar(index) is that bar.
    """

    def should_enter(self, index: int, series: BarSeriesView) -> bool: ...

    def should_exit(self, index: int, series: BarSeriesView) -> bool: ...


@runtime_checkable
class StrategyCallbacks(Protocol):
    def on_enter(self, bar: Bar) -> None:
        """Decision function says enter (at most once per new bar)."""
        ...

    def on_exit(self, bar: Bar) -> None:
        """Decision function says exit (never together with on_enter)."""
        ...

    def on_tick_observed(self, tick: Tick) -> None:
        """Called once per accepted tick, after aggregation."""
        ...


@dataclass(frozen=True)
class Account:
    account_id: str
    name: str
    balances: Mapping[str, Decimal] = field(default_factory=dict)  # currency -> available


@runtime_checkable
class AccountLookup(Protocol):
    def get_account(self, symbol: str) -> Optional[Account]:
        """Trade account used for `symbol`, or None when there is none."""
        ...

    def balance(self, account: Account, currency: str) -> Decimal:
        ...


@runtime_checkable
class TickSource(Protocol):
    def stream_ticks(self) -> Iterable[Tick]:
        """Yield ticks in arrival order."""
        ...
