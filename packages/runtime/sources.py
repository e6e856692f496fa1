from __future__ import annotations

import csv
import json
from dataclasses import dataclass
from decimal import InvalidOperation
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from loguru import logger

from packages.common.config import normalize_symbol
from packages.common.datetime_utils import to_epoch_ms
from packages.common.numeric import maybe_D
from packages.market_data.types import Tick

_TS_KEYS = ("ts_ms", "timestamp", "ts")


def tick_from_row(row: Mapping[str, Any], default_symbol: Optional[str] = None) -> Tick:
    """
    Build a Tick from a flat record.

    Required: a timestamp (ts_ms | timestamp | ts, epoch ms or ISO8601) and a
    symbol (row or default_symbol). Price/volume fields may be missing or "".
    """
    raw_symbol = row.get("symbol") or default_symbol
    if not raw_symbol:
        raise ValueError("tick row has no symbol and no default symbol was given")

    raw_ts = next((row[k] for k in _TS_KEYS if row.get(k) not in (None, "")), None)
    if raw_ts is None:
        raise ValueError(f"tick row has no timestamp (expected one of {_TS_KEYS})")

    return Tick(
        symbol=normalize_symbol(str(raw_symbol)),
        ts_ms=to_epoch_ms(raw_ts),
        last=maybe_D(row.get("last")),
        open=maybe_D(row.get("open")),
        high=maybe_D(row.get("high")),
        low=maybe_D(row.get("low")),
        volume=maybe_D(row.get("volume")),
    )


@dataclass(frozen=True)
class JsonlTickSource:
    """One JSON object per line; blank lines are skipped."""
    path: Path
    default_symbol: Optional[str] = None
    strict: bool = False

    def stream_ticks(self) -> Iterable[Tick]:
        with Path(self.path).open("r", encoding="utf-8") as fh:
            for lineno, line in enumerate(fh, start=1):
                if not line.strip():
                    continue
                try:
                    row = json.loads(line)
                    if not isinstance(row, dict):
                        raise ValueError("expected a JSON object")
                    tick = tick_from_row(row, self.default_symbol)
                except (ValueError, TypeError, InvalidOperation) as e:
                    if self.strict:
                        raise ValueError(f"{self.path}:{lineno}: {e}") from e
                    logger.warning("Skipping tick row {}:{} ({})", self.path, lineno, e)
                    continue
                yield tick


@dataclass(frozen=True)
class CsvTickSource:
    """CSV with a header row; columns as accepted by tick_from_row()."""
    path: Path
    default_symbol: Optional[str] = None
    strict: bool = False

    def stream_ticks(self) -> Iterable[Tick]:
        with Path(self.path).open("r", encoding="utf-8", newline="") as fh:
            reader = csv.DictReader(fh)
            # header is line 1
            for lineno, row in enumerate(reader, start=2):
                try:
                    tick = tick_from_row(row, self.default_symbol)
                except (ValueError, TypeError, InvalidOperation) as e:
                    if self.strict:
                        raise ValueError(f"{self.path}:{lineno}: {e}") from e
                    logger.warning("Skipping tick row {}:{} ({})", self.path, lineno, e)
                    continue
                yield tick


def open_tick_source(path: Path, default_symbol: Optional[str] = None, strict: bool = False):
    """Pick a source by file extension (.csv, else JSON lines)."""
    p = Path(path)
    if p.suffix.lower() == ".csv":
        return CsvTickSource(path=p, default_symbol=default_symbol, strict=strict)
    return JsonlTickSource(path=p, default_symbol=default_symbol, strict=strict)
