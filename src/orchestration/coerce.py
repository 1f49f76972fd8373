from __future__ import annotations

"""Lenient numeric parsing for untyped upstream and environment values."""

import math
import re
from typing import Any

_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")
_LEADING_FLOAT_RE = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_int(value: Any) -> int | None:
    """Parse the leading integer of a value, or return None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT_RE.match(value)
        if match:
            return int(match.group(1))
    return None


def parse_float(value: Any) -> float | None:
    """Parse the leading finite float of a value, or return None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _LEADING_FLOAT_RE.match(value)
        if not match:
            return None
        number = float(match.group(1))
    else:
        return None
    if not math.isfinite(number):
        return None
    return number
