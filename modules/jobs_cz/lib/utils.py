from __future__ import annotations

import math
import re
from typing import Any

_WS_RE = re.compile(r"\s+")


def truthy(v: Any) -> bool:
    """
    Normalize common truthy inputs from env/kwargs.
    Accepts bools or strings like: '1', 'true', 'yes', 'on'.
    """
    if isinstance(v, bool):
        return v
    if v is None:
        return False
    if isinstance(v, (int, float)):
        return v != 0
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "on", "y", "t"}


def collapse_ws(s: str | None) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    if not s:
        return ""
    return _WS_RE.sub(" ", str(s)).strip()


def finite_number(v: Any) -> float | None:
    """
    Coerce v to a finite float, or None when it is missing, non-numeric,
    NaN or infinite. Booleans count as numbers (True -> 1.0).
    """
    if v is None:
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None
