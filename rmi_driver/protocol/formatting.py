# rmi_driver/protocol/formatting.py
from __future__ import annotations

import math
from typing import Iterable


def float_to_string(value: float, precision: int) -> str:
    """
    Fixed-precision rendering without trailing zeros.

    Always uses '.' as decimal separator (wire protocol, not UI text).
    1.0 -> "1", 2.50 -> "2.5", -0.0 -> "0"
    """
    if precision < 0:
        raise ValueError(f"precision must be >= 0 (got {precision})")

    v = float(value)
    if not math.isfinite(v):
        raise ValueError(f"Cannot format non-finite value {v!r}")

    s = f"{v:.{int(precision)}f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")

    if s in ("-0", ""):
        return "0"
    return s


def params_to_string(values: Iterable[float], precision: int) -> str:
    """Space-separated tokens; empty input gives ""."""
    return " ".join(float_to_string(v, precision) for v in values)
