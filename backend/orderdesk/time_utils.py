from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Union


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Read an ISO-8601 order timestamp into the canonical UTC-naive form.

    Checkout documents carry "2026-10-01T08:00:00Z", offset forms, or bare
    local-less strings; bare strings are taken as UTC. Blank -> None.
    """
    if not value or not value.strip():
        return None

    raw = value.strip()
    if raw[-1] in "zZ":
        raw = f"{raw[:-1]}+00:00"

    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def as_datetime(value: Union[datetime, str, None]) -> Optional[datetime]:
    """Accept either a stored datetime or an ISO string from an order document."""
    if isinstance(value, str):
        return parse_iso_datetime(value)
    return value


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """API form of a timestamp: second precision, trailing 'Z'. Naive means UTC."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt.replace(microsecond=0).isoformat() + "Z"
