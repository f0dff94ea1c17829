"""Utility helpers for formatting provider values."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any


def format_duration(runtime_minutes: int | None) -> str | None:
    """Return ``"{h}h {m}m"`` for a runtime in minutes, or ``None`` if unknown."""

    if runtime_minutes is None:
        return None
    hours, minutes = divmod(int(runtime_minutes), 60)
    return f"{hours}h {minutes}m"


def round_half_up(value: float | None, places: int = 1) -> float | None:
    """Round a score using half-up rounding (``7.85`` becomes ``7.9``).

    The value goes through its decimal string form so binary float noise does
    not pull ``x.x5`` values down.
    """

    if value is None:
        return None
    try:
        quantum = Decimal(1).scaleb(-places)
        rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return None
    return float(rounded)


def parse_release_year(value: Any) -> int | None:
    """Return the leading year of a ``YYYY-MM-DD`` date string."""

    if not isinstance(value, str) or len(value) < 4:
        return None
    head = value[:4]
    if not head.isdigit():
        return None
    return int(head)


def build_image_url(base_url: str, size: str, path: str | None) -> str | None:
    """Join the image base, a size token and a provider-relative path."""

    if not path:
        return None
    if path.startswith("http"):
        return path
    if not path.startswith("/"):
        path = f"/{path}"
    return f"{base_url.rstrip('/')}/{size}{path}"
