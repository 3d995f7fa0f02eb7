from __future__ import annotations
from typing import Any, Mapping
from .config import SUPPORTED_LANGS, DEFAULT_LANG


def localized(record: Any, field: str, lang: str | None) -> str:
    """Pick ``<field>_<lang>`` from a row or dataclass, falling back to English."""
    code = (lang or DEFAULT_LANG).lower()
    if code not in SUPPORTED_LANGS:
        code = DEFAULT_LANG
    for candidate in (code, DEFAULT_LANG):
        key = f"{field}_{candidate}"
        if isinstance(record, Mapping):
            val = record.get(key)
        else:
            val = getattr(record, key, None)
        if isinstance(val, str) and val:
            return val
    return ""


def format_clock(seconds: int) -> str:
    secs = max(0, int(seconds))
    return f"{secs // 60}:{secs % 60:02d}"
