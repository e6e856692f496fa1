# packages/market_data/tests/test_bar_series.py

from __future__ import annotations

from decimal import Decimal

import pytest

from packages.common.errors import EmptySeries, InvalidConfiguration
from packages.market_data.bar_series import BoundedBarSeries
from packages.market_data.types import Bar


def _bar(ts_ms: int, close: int) -> Bar:
    px = Decimal(close)
    return Bar(begin_ms=ts_ms, duration_ms=0, open=px, high=px, low=px, close=px, volume=Decimal(1))


def test_empty_series_reads():
    s = BoundedBarSeries(3, name="BTC/USDT")
    assert len(s) == 0
    assert s.last() is None
    assert s.last_index() is None
    assert s.begin_index is None
    assert s.end_index is None
    assert s.window(5) == []
    with pytest.raises(IndexError):
        s.get_bar(0)


def test_replace_last_on_empty_series_raises():
    s = BoundedBarSeries(2)
    with pytest.raises(EmptySeries):
        s.replace_last(_bar(0, 100))


def test_non_positive_capacity_rejected():
    with pytest.raises(InvalidConfiguration):
        BoundedBarSeries(0)
    with pytest.raises(InvalidConfiguration):
        BoundedBarSeries(-1)


def test_append_evicts_oldest_and_keeps_absolute_indices():
    s = BoundedBarSeries(3)
    for i in range(5):
        s.append(_bar(i * 60_000, 100 + i))
        assert len(s) <= 3

    assert len(s) == 3
    assert s.removed_count == 2
    assert s.begin_index == 2
    assert s.end_index == 4
    assert s.last_index() == 4
    assert [b.close for b in s] == [Decimal(102), Decimal(103), Decimal(104)]

    assert s.get_bar(4).close == Decimal(104)
    assert s.get_bar(2).close == Decimal(102)
    # evicted index resolves to the oldest retained bar
    assert s.get_bar(0).close == Decimal(102)
    with pytest.raises(IndexError):
        s.get_bar(5)


def test_replace_last_keeps_length_and_does_not_evict():
    s = BoundedBarSeries(2)
    s.append(_bar(0, 100))
    s.append(_bar(60_000, 101))

    s.replace_last(_bar(60_000, 150))

    assert len(s) == 2
    assert s.removed_count == 0
    assert s.last().close == Decimal(150)
    assert s.get_bar(0).close == Decimal(100)


def test_window_slices_oldest_first():
    s = BoundedBarSeries(10)
    for i in range(6):
        s.append(_bar(i, i))

    assert [b.close for b in s.window(3)] == [Decimal(3), Decimal(4), Decimal(5)]
    assert [b.close for b in s.window(3, end_index=2)] == [Decimal(0), Decimal(1), Decimal(2)]
    assert [b.close for b in s.window(100, end_index=1)] == [Decimal(0), Decimal(1)]
    assert s.window(0) == []
    assert s.bars() == tuple(s)
