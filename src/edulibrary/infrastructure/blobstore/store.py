from __future__ import annotations

import stat
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator
from urllib.parse import quote

from edulibrary.core.config import DEFAULT_PUBLIC_BASE_URL
from edulibrary.core.files import ensure_directory, make_read_only, safe_write_atomic


@dataclass(slots=True)
class BlobInfo:
    key: str
    size_bytes: int
    modified_at: datetime


class BlobStore:
    """Flat directory of immutable blobs, each addressable by a public URL."""

    def __init__(self, base_dir: Path, public_base_url: str = DEFAULT_PUBLIC_BASE_URL) -> None:
        self.base_dir = base_dir
        self.public_base_url = public_base_url.rstrip("/")

    def ensure_layout(self) -> None:
        ensure_directory(self.base_dir)

    def path_for_key(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key in {".", ".."} or key.startswith("."):
            raise ValueError(f"Invalid blob key: {key!r}")
        return self.base_dir / key

    def put(self, key: str, data: bytes) -> Path:
        self.ensure_layout()
        dst = self.path_for_key(key)
        if dst.exists():
            raise FileExistsError(f"Blob key already in use: {key}")
        safe_write_atomic(data, dst)
        make_read_only(dst)
        return dst

    def public_url(self, key: str) -> str:
        self.path_for_key(key)
        return f"{self.public_base_url}/{quote(key)}"

    def exists(self, key: str) -> bool:
        return self.path_for_key(key).is_file()

    def delete(self, key: str) -> bool:
        path = self.path_for_key(key)
        if not path.exists():
            return False
        path.chmod(path.stat().st_mode | stat.S_IWUSR)
        path.unlink()
        return True

    def iter_blobs(self) -> Iterator[BlobInfo]:
        if not self.base_dir.exists():
            return
        for path in sorted(self.base_dir.iterdir()):
            if not path.is_file() or path.name.startswith("."):
                continue
            info = path.stat()
            yield BlobInfo(
                key=path.name,
                size_bytes=info.st_size,
                modified_at=datetime.fromtimestamp(info.st_mtime, tz=timezone.utc),
            )
