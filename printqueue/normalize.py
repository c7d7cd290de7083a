import math
from typing import Any, Optional


def normalize_integer(value: Any, fallback: Optional[int] = 0) -> Optional[int]:
    """Wandelt Formular-/JSON-Werte tolerant in int um (abgerundet).

    Leere oder nicht numerische Werte liefern `fallback`.
    """
    if value is None or value == "":
        return fallback
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(parsed):
        return fallback
    return math.floor(parsed)


def normalize_float(value: Any, fallback: Optional[float] = 0.0) -> Optional[float]:
    if value is None or value == "":
        return fallback
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(parsed):
        return fallback
    return parsed


def normalize_text(value: Any) -> Optional[str]:
    """Getrimmter Text oder None für leere Eingaben."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_identifier(value: Any) -> Optional[str]:
    text = normalize_text(value)
    return text.upper() if text else None


def build_fallback_identifier(job_id: int) -> str:
    return f"JOB-{job_id:06d}"
