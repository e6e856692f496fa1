from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Optional


def D(x) -> Decimal:
    """
    Decimal conversion for ints/floats/strings/Decimals.

    Floats go through str() first so 0.1 stays 0.1 instead of the binary expansion.
    """
    if isinstance(x, Decimal):
        return x
    if isinstance(x, bool):
        raise TypeError("bool is not a numeric quantity")
    if isinstance(x, int):
        return Decimal(x)
    if isinstance(x, float):
        return Decimal(str(x))
    if isinstance(x, str):
        try:
            return Decimal(x.strip())
        except InvalidOperation as e:
            raise ValueError(f"Not a decimal number: {x!r}") from e
    raise TypeError(f"Unsupported numeric type: {type(x)}")


def maybe_D(x) -> Optional[Decimal]:
    # None and "" both mean "field absent" for tick inputs
    if x is None:
        return None
    if isinstance(x, str) and not x.strip():
        return None
    return D(x)
