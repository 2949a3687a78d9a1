#!/usr/bin/env python3
"""
FitFlow Utilities Module - lenient value coercion for decoded fitness payloads
"""
import math
from datetime import datetime, timezone
from typing import Optional

from dateutil.parser import parse as parse_datetime


def to_number(value) -> Optional[float]:
    """Coerce numbers and numeric strings to a finite float, else None"""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str) and value.strip():
        try:
            parsed = float(value)
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def to_datetime(value) -> Optional[datetime]:
    """
    Coerce a decoded timestamp to an aware datetime.

    Naive datetimes are assumed to be UTC (FIT decoders emit naive UTC values),
    numbers are epoch seconds and strings go through dateutil. Anything that
    cannot be interpreted yields None.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str) and value.strip():
        try:
            parsed = parse_datetime(value.strip())
        except (ValueError, OverflowError):
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit]
