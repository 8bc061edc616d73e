import math
from datetime import datetime
from typing import Optional

import pandas as pd


def _is_blank(v) -> bool:
    if v is None:
        return True
    if isinstance(v, float) and math.isnan(v):
        return True
    return isinstance(v, str) and (v.strip() == "" or v.strip().lower() in ("null", "nan"))


def to_int(v) -> Optional[int]:
    try:
        if _is_blank(v):
            return None
        return int(float(v))
    except Exception:
        return None

def to_float(v) -> Optional[float]:
    try:
        if _is_blank(v):
            return None
        result = float(v)
        return None if math.isnan(result) else result
    except Exception:
        return None

def to_str(v) -> str:
    return "" if _is_blank(v) else str(v).strip()


def to_bool(v) -> bool:
    if isinstance(v, bool):
        return v
    if _is_blank(v):
        return False
    return str(v).strip().lower() in ("1", "true", "yes", "on")


def to_datetime(v) -> Optional[datetime]:
    """Parse ISO strings, epoch seconds and exported ``{"seconds": ...}`` timestamps."""

    if isinstance(v, dict):
        v = v.get("seconds", v.get("_seconds"))
    if _is_blank(v):
        return None
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        ts = pd.to_datetime(v, unit="s", utc=True, errors="coerce")
    else:
        ts = pd.to_datetime(v, utc=True, errors="coerce")
    if pd.isna(ts):
        return None
    return ts.to_pydatetime()


def to_list(v, sep: str = "|") -> list[str]:
    if _is_blank(v):
        return []
    if isinstance(v, str):
        return [part.strip() for part in v.split(sep) if part.strip()]
    return [str(item) for item in v if not _is_blank(item)]
