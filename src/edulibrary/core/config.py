from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from edulibrary.core.errors import ConfigurationError


@dataclass(frozen=True)
class AppPaths:
    project_root: Path
    library_dir: Path
    db_path: Path
    blob_dir: Path


DEFAULT_LIBRARY_DIRNAME = ".edulib"
DEFAULT_PUBLIC_BASE_URL = "/files"
DEFAULT_MAX_UPLOAD_BYTES = 100 * 1024 * 1024


def load_paths(project_root: Path | None = None) -> AppPaths:
    root = (project_root or Path.cwd()).expanduser().resolve()

    library_home_raw = os.getenv("EDULIB_HOME")
    if library_home_raw:
        library_dir = Path(library_home_raw).expanduser().resolve()
    else:
        library_dir = root / DEFAULT_LIBRARY_DIRNAME

    return AppPaths(
        project_root=root,
        library_dir=library_dir,
        db_path=library_dir / "library.db",
        blob_dir=library_dir / "files",
    )


def read_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def read_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def load_public_base_url() -> str:
    raw = os.getenv("EDULIB_PUBLIC_BASE_URL")
    if raw is None or not raw.strip():
        return DEFAULT_PUBLIC_BASE_URL
    value = raw.strip().rstrip("/")
    if not (value.startswith("/") or value.startswith("http://") or value.startswith("https://")):
        raise ConfigurationError(
            f"EDULIB_PUBLIC_BASE_URL must be an absolute path or http(s) URL, got: {raw!r}"
        )
    return value


def load_max_upload_bytes() -> int:
    return read_int_env("EDULIB_MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES)


def load_admin_token() -> str | None:
    raw = os.getenv("EDULIB_ADMIN_TOKEN")
    if raw is None or not raw.strip():
        return None
    return raw.strip()
