from __future__ import annotations

import re
import unicodedata
from typing import Optional

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def generate_slug(name: str) -> str:
    """URL slug: lowercase ascii, accents stripped, runs of other chars -> '-'."""
    decomposed = unicodedata.normalize("NFD", name.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM.sub("-", stripped).strip("-")


def clean_referee_name(raw: Optional[str]) -> Optional[str]:
    """API-Football appends the nationality after a comma ('M. Oliver, England')."""
    if not raw:
        return None
    name = raw.split(",")[0].strip()
    return name or None


__all__ = ["generate_slug", "clean_referee_name"]
