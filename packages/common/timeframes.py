from __future__ import annotations

import re
from datetime import timedelta

_TIMEFRAME_RE = re.compile(r"^(\d+)(ms|[smhdw])$")

_UNIT_MS = {
    "ms": 1,
    "s": 1_000,
    "m": 60_000,
    "h": 3_600_000,
    "d": 86_400_000,
    "w": 604_800_000,
}


def timeframe_to_ms(tf: str) -> int:
    m = _TIMEFRAME_RE.match(tf.strip())
    if not m:
        raise ValueError(f"Invalid timeframe: {tf!r} (expected e.g. '30s', '1m', '1h')")

    n = int(m.group(1))
    unit = m.group(2)
    return n * _UNIT_MS[unit]


def delay_to_ms(value) -> int:
    """
    Normalize a bar delay to milliseconds.

    Accepts:
      - int ms (60000)
      - timeframe string ("1m", "30s", "250ms")
      - digit string ("60000")
      - datetime.timedelta
    Sign/zero checks are left to the caller.
    """
    if isinstance(value, bool):
        raise ValueError("delay must be a duration, not a bool")
    if isinstance(value, timedelta):
        return int(value / timedelta(milliseconds=1))
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        s = value.strip()
        if s.lstrip("-").isdigit():
            return int(s)
        return timeframe_to_ms(s)
    raise ValueError(f"Unsupported delay value: {value!r}")
