from __future__ import annotations

from datetime import datetime, timezone


def parse_iso8601_to_ms(s: str) -> int:
    """
    Accepts ISO8601 strings like:
      - 2017-08-17T00:00:00Z
      - 2017-08-17T00:00:00+00:00
      - 2017-08-17T00:00:00 (assumed UTC)
    Returns epoch ms.
    """
    ss = s.strip()
    if ss.endswith("Z"):
        ss = ss[:-1] + "+00:00"

    dt = datetime.fromisoformat(ss)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)

    return int(dt.timestamp() * 1000)


def ms_to_iso8601_z(ts_ms: int) -> str:
    """
    Epoch ms -> ISO8601 Zulu string, e.g. 1700000000000 -> "2023-11-14T22:13:20Z"
    """
    dt = datetime.fromtimestamp(ts_ms / 1000, tz=timezone.utc)
    return dt.isoformat().replace("+00:00", "Z")


def to_epoch_ms(value) -> int:
    """
    Tick timestamps arrive as epoch ms (int, integral float or digit string),
    ISO8601 strings or aware datetimes. Naive datetimes are assumed UTC.
    """
    if isinstance(value, bool):
        raise ValueError("timestamp must not be a bool")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        # JSON decoders hand back 1.7e12 as a float
        if not value.is_integer():
            raise ValueError(f"timestamp must be whole milliseconds (got {value!r})")
        return int(value)
    if isinstance(value, datetime):
        dt = value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
        return int(dt.timestamp() * 1000)
    if isinstance(value, str):
        s = value.strip()
        if s.lstrip("-").isdigit():
            return int(s)
        return parse_iso8601_to_ms(s)
    raise ValueError(f"Unsupported timestamp value: {value!r}")
