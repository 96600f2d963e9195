from __future__ import annotations

import re

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    flags=re.IGNORECASE,
)


def looks_like_uuid(value: str | None) -> bool:
    return bool(_UUID_RE.match(str(value or "").strip()))


def title_from_filename(value: str | None) -> str:
    """Readable title guess for an uploaded file, or '' when nothing usable remains."""
    raw = str(value or "").strip()
    if not raw:
        return ""
    cleaned = re.sub(r"\?.*$", "", raw)
    cleaned = re.sub(r"^.*[\\/]", "", cleaned)
    cleaned = re.sub(r"\.[a-z0-9]{2,6}$", "", cleaned, flags=re.IGNORECASE)
    if looks_like_uuid(cleaned):
        return ""
    cleaned = re.sub(r"[_\-]+", " ", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    return cleaned
