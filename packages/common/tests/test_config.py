# packages/common/tests/test_config.py

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest

from packages.common.config import RuntimeConfig, build_runtime_config, load_barsignal_config
from packages.common.errors import InvalidConfiguration
from packages.common.types import BoundaryAnchor


def test_runtime_config_normalizes_fields():
    cfg = build_runtime_config(symbol=" eth/usdt ", max_bar_count=10, delay_ms="30s")
    assert cfg.symbol == "ETH/USDT"
    assert cfg.pair.base == "ETH"
    assert cfg.pair.quote == "USDT"
    assert cfg.delay_ms == 30_000
    assert cfg.anchor == BoundaryAnchor.LAST_TICK


def test_single_element_symbol_list_accepted():
    cfg = build_runtime_config(symbol=["BTC/USDT"], max_bar_count=1, delay_ms=1)
    assert cfg.symbol == "BTC/USDT"


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(symbol="BTC/USDT", max_bar_count=0, delay_ms=60_000),
        dict(symbol="BTC/USDT", max_bar_count=-3, delay_ms=60_000),
        dict(symbol="BTC/USDT", max_bar_count=5, delay_ms=0),
        dict(symbol="BTC/USDT", max_bar_count=5, delay_ms="0s"),
        dict(symbol="BTC/USDT", max_bar_count=5, delay_ms=-1),
        dict(symbol="BTC/USDT", max_bar_count=5, delay_ms="soon"),
        dict(symbol="BTCUSDT", max_bar_count=5, delay_ms=60_000),
        dict(symbol=["BTC/USDT", "ETH/USDT"], max_bar_count=5, delay_ms=60_000),
        dict(symbol=[], max_bar_count=5, delay_ms=60_000),
        dict(symbol="BTC/USDT", max_bar_count=5, delay_ms=60_000, anchor="bar_close"),
    ],
)
def test_invalid_runtime_config_rejected(kwargs):
    with pytest.raises(InvalidConfiguration):
        build_runtime_config(**kwargs)


def test_runtime_config_is_immutable():
    cfg = build_runtime_config(symbol="BTC/USDT", max_bar_count=5, delay_ms=60_000)
    with pytest.raises(Exception):
        cfg.max_bar_count = 10  # type: ignore[misc]
    assert isinstance(cfg, RuntimeConfig)


def test_load_yaml_config(tmp_path: Path):
    p = tmp_path / "barsignal.yaml"
    p.write_text(
        "runtime:\n"
        "  symbol: btc/usdt\n"
        "  max_bar_count: 100\n"
        "  delay_ms: 1m\n"
        "  anchor: bar_open\n"
        "decision:\n"
        "  fast_period: 3\n"
        "  slow_period: 8\n"
        "accounts:\n"
        "  - account_id: '01'\n"
        "    balances:\n"
        "      usdt: '250.5'\n"
    )

    cfg = load_barsignal_config(p)
    assert cfg.runtime.symbol == "BTC/USDT"
    assert cfg.runtime.delay_ms == 60_000
    assert cfg.runtime.anchor == BoundaryAnchor.BAR_OPEN
    assert cfg.decision.fast_period == 3
    assert cfg.accounts[0].name == "trade"
    assert cfg.accounts[0].balances == {"USDT": Decimal("250.5")}


def test_load_yaml_config_errors(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_barsignal_config(tmp_path / "missing.yaml")

    p = tmp_path / "list.yaml"
    p.write_text("- 1\n- 2\n")
    with pytest.raises(InvalidConfiguration):
        load_barsignal_config(p)

    p = tmp_path / "bad_decision.yaml"
    p.write_text(
        "runtime: {symbol: BTC/USDT, max_bar_count: 5, delay_ms: 1m}\n"
        "decision: {fast_period: 10, slow_period: 5}\n"
    )
    with pytest.raises(InvalidConfiguration):
        load_barsignal_config(p)

    p = tmp_path / "dup_accounts.yaml"
    p.write_text(
        "runtime: {symbol: BTC/USDT, max_bar_count: 5, delay_ms: 1m}\n"
        "accounts: [{account_id: a}, {account_id: a}]\n"
    )
    with pytest.raises(InvalidConfiguration):
        load_barsignal_config(p)
