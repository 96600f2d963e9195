from __future__ import annotations

import os
import re
from pathlib import Path

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def make_read_only(path: Path) -> None:
    current_mode = path.stat().st_mode
    # Strip write permissions for user/group/other.
    path.chmod(current_mode & ~0o222)


def safe_write_atomic(data: bytes, dst: Path) -> None:
    ensure_directory(dst.parent)
    temp_path = dst.parent / f".{dst.name}.tmp"
    try:
        with temp_path.open("wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(temp_path, dst)
    finally:
        temp_path.unlink(missing_ok=True)


def sanitize_filename(name: str, max_length: int | None = None) -> str:
    """Reduce an uploaded filename to a single safe path segment.

    With max_length, the stem is cut down so the result fits while the
    extension is kept.
    """
    base = re.sub(r"^.*[\\/]", "", str(name or "").strip())
    cleaned = _UNSAFE_NAME_CHARS.sub("_", base).strip("._") or "upload"
    if max_length is None or len(cleaned) <= max_length:
        return cleaned
    stem, dot, ext = cleaned.rpartition(".")
    room = max_length - len(ext) - 1
    if not dot or not stem or room < 1:
        return cleaned[:max_length].rstrip("._") or "upload"[:max_length]
    stem = stem[:room].rstrip("._") or "upload"[:room]
    return f"{stem}.{ext}"


def file_extension(name: str) -> str:
    base = re.sub(r"^.*[\\/]", "", str(name or "").strip())
    suffix = Path(base).suffix
    return suffix[1:].lower() if suffix else ""
