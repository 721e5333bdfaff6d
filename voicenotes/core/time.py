"""
Helpers de fecha/hora (UTC, ISO-8601) compartidos por servidor y cliente.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

_TICK = timedelta(microseconds=1)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(dt: datetime) -> str:
    """Serializa a ISO-8601 UTC con microsegundos y sufijo Z (orden lexicográfico = cronológico)."""
    return ensure_utc(dt).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def ensure_utc(dt: datetime) -> datetime:
    # Asegura timezone-aware en UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_iso(value: str | datetime) -> datetime:
    """Reconstruye un datetime aware desde ISO (acepta sufijo Z)."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))


def advance(previous: Optional[datetime], floor: Optional[datetime] = None) -> datetime:
    """Devuelve un instante estrictamente mayor que `previous` y no menor que `floor`.

    El reloj puede no avanzar entre dos mutaciones seguidas (resolución del sistema),
    así que se garantiza al menos un microsegundo de diferencia.
    """
    now = now_utc()
    if floor is not None and now < ensure_utc(floor):
        now = ensure_utc(floor)
    if previous is not None and now <= ensure_utc(previous):
        now = ensure_utc(previous) + _TICK
    return now
