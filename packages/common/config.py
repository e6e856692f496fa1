from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import InvalidConfiguration
from .timeframes import delay_to_ms
from .types import BoundaryAnchor, Symbol


def normalize_symbol(symbol: str) -> str:
    s = symbol.strip().upper()
    if "/" not in s:
        raise ValueError(f"symbol must be canonical like 'BTC/USDT' (got {symbol!r})")
    base, quote = s.split("/", 1)
    if not base or not quote:
        raise ValueError(f"symbol must be canonical like 'BTC/USDT' (got {symbol!r})")
    return f"{base}/{quote}"


class RuntimeConfig(BaseModel):
    """
    Fixed for the lifetime of a StrategyRuntime.

    - symbol: the single instrument this runtime aggregates
    - max_bar_count: rolling history capacity
    - delay_ms: time separating two bars (accepts "1m", "30s", ... in YAML)
    - anchor: what the delay is measured from (see BoundaryAnchor)
    """
    model_config = ConfigDict(frozen=True)

    symbol: str
    max_bar_count: int
    delay_ms: int
    anchor: BoundaryAnchor = BoundaryAnchor.LAST_TICK

    @field_validator("symbol", mode="before")
    @classmethod
    def _single_symbol(cls, v):
        # One bar series per instrument, one instrument per runtime.
        if isinstance(v, (list, tuple, set, frozenset)):
            items = list(v)
            if len(items) != 1:
                raise ValueError(f"exactly one instrument per runtime is supported (got {len(items)})")
            v = items[0]
        if not isinstance(v, str):
            raise ValueError(f"symbol must be a string (got {type(v).__name__})")
        return normalize_symbol(v)

    @field_validator("max_bar_count")
    @classmethod
    def _positive_bar_count(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"max_bar_count must be > 0 (got {v})")
        return v

    @field_validator("delay_ms", mode="before")
    @classmethod
    def _delay(cls, v):
        ms = delay_to_ms(v)
        if ms <= 0:
            raise ValueError(f"delay must be > 0 (got {ms}ms)")
        return ms

    @property
    def pair(self) -> Symbol:
        return Symbol(self.symbol)


class DecisionConfig(BaseModel):
    fast_period: int = Field(default=5, gt=0)
    slow_period: int = Field(default=20, gt=0)

    @model_validator(mode="after")
    def _ordered(self) -> "DecisionConfig":
        if self.fast_period >= self.slow_period:
            raise ValueError(
                f"fast_period must be < slow_period (got {self.fast_period} >= {self.slow_period})"
            )
        return self


class AccountConfig(BaseModel):
    account_id: str
    name: str = "trade"
    balances: Dict[str, Decimal] = Field(default_factory=dict)

    @field_validator("balances")
    @classmethod
    def _upper_currencies(cls, v: Dict[str, Decimal]) -> Dict[str, Decimal]:
        return {k.strip().upper(): amt for k, amt in v.items()}


class BarSignalConfig(BaseModel):
    runtime: RuntimeConfig
    decision: DecisionConfig = Field(default_factory=DecisionConfig)
    accounts: List[AccountConfig] = Field(default_factory=list)


def build_runtime_config(**kwargs: Any) -> RuntimeConfig:
    """Programmatic RuntimeConfig construction; validation failures become InvalidConfiguration."""
    try:
        return RuntimeConfig.model_validate(kwargs)
    except ValidationError as e:
        raise InvalidConfiguration(str(e)) from e


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    data = yaml.safe_load(path.read_text())
    if not isinstance(data, dict):
        raise InvalidConfiguration(f"Invalid YAML structure in {path}")
    return data


def load_barsignal_config(path: Path = Path("config/barsignal.yaml")) -> BarSignalConfig:
    raw = _load_yaml(Path(path))
    try:
        cfg = BarSignalConfig.model_validate(raw)
    except ValidationError as e:
        raise InvalidConfiguration(f"Invalid config {path}: {e}") from e

    # ---- account sanity: the runtime looks up one trade account
    ids = [a.account_id for a in cfg.accounts]
    if len(ids) != len(set(ids)):
        raise InvalidConfiguration(f"Duplicate account_id in {path}: {ids}")

    return cfg
