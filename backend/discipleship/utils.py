"""Shared utility helpers used across services."""
import unicodedata
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def normalize_tag(value: str | None) -> str:
    """Upper-case, trim and strip accents ("Manhã " -> "MANHA")."""
    decomposed = unicodedata.normalize("NFD", value or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.strip().upper()
