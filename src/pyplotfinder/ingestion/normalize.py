"""Normalization helpers.

Centralizes defensive parsing of loosely-typed values.
"""

from __future__ import annotations

import math
from typing import Any


def safe_float(value: Any) -> float | None:
    """Parse *value* as a finite float, ``None`` otherwise.

    Booleans are rejected even though ``float(True)`` works.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result
