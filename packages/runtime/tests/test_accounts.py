# packages/runtime/tests/test_accounts.py

from __future__ import annotations

from decimal import Decimal

import pytest

from packages.common.config import AccountConfig, build_runtime_config
from packages.common.types import Symbol
from packages.runtime.accounts import StaticAccountBook, can_buy, can_sell, has_enough
from packages.runtime.engine import StrategyRuntime
from packages.runtime.ports import Account
from packages.runtime.sinks import RecordingSink

PAIR = Symbol("BTC/USDT")


class NeverDecides:
    def should_enter(self, index, series) -> bool:
        return False

    def should_exit(self, index, series) -> bool:
        return False


def _book(usdt: str, btc: str = "0") -> StaticAccountBook:
    return StaticAccountBook(
        [Account(account_id="01", name="trade", balances={"USDT": Decimal(usdt), "BTC": Decimal(btc)})]
    )


def test_can_buy_compares_quote_balance():
    assert can_buy(_book("40"), PAIR, Decimal(50)) is False
    assert can_buy(_book("60"), PAIR, Decimal(50)) is True
    assert can_buy(_book("50"), PAIR, Decimal(50)) is True


def test_can_buy_with_reserve():
    # 60 - 50 = 10 left, reserve asks for 20
    assert can_buy(_book("60"), PAIR, Decimal(50), Decimal(20)) is False
    assert can_buy(_book("60"), PAIR, Decimal(50), Decimal(10)) is True


def test_can_sell_uses_base_currency():
    book = _book(usdt="1000000", btc="0.5")
    assert can_sell(book, PAIR, Decimal("0.4")) is True
    assert can_sell(book, PAIR, Decimal("0.6")) is False
    assert can_sell(book, PAIR, Decimal("0.4"), Decimal("0.2")) is False


def test_no_trade_account_means_false():
    empty = StaticAccountBook([])
    assert can_buy(empty, PAIR, Decimal(1)) is False
    assert can_sell(empty, PAIR, Decimal(1)) is False


def test_trade_account_selection():
    savings = Account(account_id="a", name="savings", balances={"USDT": Decimal(1000)})
    trade = Account(account_id="b", name="Trade", balances={"USDT": Decimal(10)})

    assert StaticAccountBook([savings, trade]).get_account("BTC/USDT") == trade
    assert StaticAccountBook([savings]).get_account("BTC/USDT") == savings
    other = Account(account_id="c", name="other", balances={})
    assert StaticAccountBook([savings, other]).get_account("BTC/USDT") is None


def test_explicit_account_bypasses_lookup():
    book = _book("0")
    rich = Account(account_id="x", name="x", balances={"USDT": Decimal(100)})
    assert can_buy(book, PAIR, Decimal(50), account=rich) is True


def test_missing_currency_is_zero_balance():
    book = StaticAccountBook([Account(account_id="01", name="trade", balances={})])
    assert can_buy(book, PAIR, Decimal(0)) is True
    assert can_buy(book, PAIR, Decimal("0.01")) is False


def test_negative_amounts_rejected():
    with pytest.raises(ValueError):
        has_enough(Decimal(10), Decimal(-1))
    with pytest.raises(ValueError):
        has_enough(Decimal(10), Decimal(1), Decimal(-1))


def test_runtime_delegates_to_account_lookup():
    book = StaticAccountBook.from_config(
        [AccountConfig(account_id="01", name="trade", balances={"usdt": "60", "btc": "1"})]
    )
    rt = StrategyRuntime(
        build_runtime_config(symbol="BTC/USDT", max_bar_count=3, delay_ms="1m"),
        decision=NeverDecides(),
        callbacks=RecordingSink(),
        accounts=book,
    )

    assert rt.can_buy(Decimal(50)) is True
    assert rt.can_buy(Decimal(50), Decimal(20)) is False
    assert rt.can_sell(Decimal(1)) is True
    assert rt.can_sell(Decimal(2)) is False
