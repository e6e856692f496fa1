from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger

from packages.common.config import load_barsignal_config
from packages.common.datetime_utils import ms_to_iso8601_z
from packages.runtime.accounts import StaticAccountBook
from packages.runtime.engine import StrategyRuntime
from packages.runtime.sinks import LoggingSink, RecordingSink
from packages.runtime.sources import open_tick_source
from packages.strategies.sma_cross import SmaCrossDecision


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="barsignal tick replay")
    p.add_argument("--config", default="config/barsignal.yaml", help="Path to YAML config")
    p.add_argument("--ticks", required=True, help="Tick file (.jsonl or .csv)")
    p.add_argument("--strict", action="store_true", help="Fail on malformed tick rows instead of skipping")
    p.add_argument("--log-level", default="INFO", help="loguru level (DEBUG, INFO, WARNING, ...)")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level=args.log_level.upper())

    cfg = load_barsignal_config(Path(args.config))

    recorder = RecordingSink()
    runtime = StrategyRuntime(
        cfg.runtime,
        decision=SmaCrossDecision.from_config(cfg.decision),
        callbacks=LoggingSink(inner=recorder),
        accounts=StaticAccountBook.from_config(cfg.accounts),
    )

    source = open_tick_source(Path(args.ticks), default_symbol=cfg.runtime.symbol, strict=args.strict)
    res = runtime.replay(source.stream_ticks())

    series = runtime.series
    print("")
    print("===== BARSIGNAL REPLAY RESULT =====")
    print(f"Symbol:          {res.symbol}")
    print(f"Delay:           {cfg.runtime.delay_ms}ms ({cfg.runtime.anchor.value})")
    print(f"Ticks read:      {res.ticks_total}")
    print(f"Ticks accepted:  {res.ticks_accepted}")
    print(f"Bars opened:     {res.bars_opened}")
    print(f"Bars retained:   {len(series)} / {cfg.runtime.max_bar_count}")
    print(f"Enter signals:   {res.enters}")
    print(f"Exit signals:    {res.exits}")
    print("")

    if recorder.events:
        print("Last 10 signals:")
        for ev in recorder.events[-10:]:
            print(f"- {ms_to_iso8601_z(ev.ts_ms)} {ev.signal.value} close={ev.close}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
