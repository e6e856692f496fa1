from __future__ import annotations

from collections import deque
from typing import Deque, Iterator, List, Optional, Tuple

from packages.common.errors import EmptySeries, InvalidConfiguration
from packages.market_data.types import Bar


class BoundedBarSeries:
    """
    Capacity-bounded, chronological bar series (oldest first).

    Indexing is absolute, like a rolling-window series:
      - begin_index == number of bars evicted so far
      - end_index   == begin_index + len(series) - 1
    so the index of a given bar never changes while it is retained.

    Invariants:
      - len(series) <= max_bar_count at all times
      - append() past capacity evicts the oldest bar (FIFO)
      - replace_last() never changes length and never evicts
    """

    def __init__(self, max_bar_count: int, *, name: str = ""):
        if max_bar_count <= 0:
            raise InvalidConfiguration(f"max_bar_count must be > 0 (got {max_bar_count})")
        self.name = name
        self.max_bar_count = int(max_bar_count)
        self._bars: Deque[Bar] = deque(maxlen=self.max_bar_count)
        self._removed = 0

    def __len__(self) -> int:
        return len(self._bars)

    def __iter__(self) -> Iterator[Bar]:
        return iter(tuple(self._bars))

    def __repr__(self) -> str:
        return (
            f"BoundedBarSeries(name={self.name!r}, bars={len(self._bars)}, "
            f"max_bar_count={self.max_bar_count}, begin_index={self.begin_index})"
        )

    # ---- mutation (owned by the aggregator)

    def append(self, bar: Bar) -> None:
        if len(self._bars) == self.max_bar_count:
            # deque(maxlen) drops the left element on append
            self._removed += 1
        self._bars.append(bar)

    def replace_last(self, bar: Bar) -> None:
        if not self._bars:
            raise EmptySeries(f"replace_last on empty series {self.name!r}")
        self._bars[-1] = bar

    # ---- read access

    @property
    def removed_count(self) -> int:
        return self._removed

    @property
    def begin_index(self) -> Optional[int]:
        return self._removed if self._bars else None

    @property
    def end_index(self) -> Optional[int]:
        return self._removed + len(self._bars) - 1 if self._bars else None

    def last(self) -> Optional[Bar]:
        return self._bars[-1] if self._bars else None

    def last_index(self) -> Optional[int]:
        return self.end_index

    def get_bar(self, index: int) -> Bar:
        """
        Bar at absolute `index`.

        Evicted indices resolve to the oldest retained bar; anything past
        end_index is an IndexError.
        """
        if not self._bars:
            raise IndexError(f"series {self.name!r} is empty")
        pos = index - self._removed
        if pos < 0:
            return self._bars[0]
        if pos >= len(self._bars):
            raise IndexError(f"index {index} beyond end_index {self.end_index}")
        return self._bars[pos]

    def window(self, n: int, end_index: Optional[int] = None) -> List[Bar]:
        """Last n bars ending at end_index (default: the last bar), oldest first."""
        if n <= 0 or not self._bars:
            return []

        if end_index is None:
            idx = len(self._bars) - 1
        else:
            idx = end_index - self._removed
            if idx < 0:
                return []
            idx = min(idx, len(self._bars) - 1)

        start = max(0, idx - (n - 1))
        return [self._bars[i] for i in range(start, idx + 1)]

    def bars(self) -> Tuple[Bar, ...]:
        return tuple(self._bars)
