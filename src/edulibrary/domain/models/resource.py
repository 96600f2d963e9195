from __future__ import annotations

from dataclasses import dataclass

from edulibrary.core.errors import ValidationError

SUBJECTS_SENTINEL = "All Subjects"
LEVELS_SENTINEL = "All Levels"
CATEGORIES_SENTINEL = "All Categories"

SUBJECTS: tuple[str, ...] = (
    "Mathematics",
    "Physics",
    "Chemistry",
    "Biology",
    "English",
    "History",
    "Geography",
    "Computer Science",
    "Economics",
    "Literature",
)
LEVELS: tuple[str, ...] = ("O-Level", "A-Level", "University", "General")
CATEGORIES: tuple[str, ...] = ("Textbook", "Notes", "Exam", "Video", "Reference")

_PREVIEW_KINDS = {
    "pdf": "document",
    "mp4": "video",
    "epub": "ebook",
    "docx": "word",
}


@dataclass(slots=True)
class Resource:
    id: str
    title: str
    description: str
    subject: str
    level: str
    category: str
    file_url: str
    file_type: str
    download_count: int
    created_at: str
    updated_at: str
    storage_key: str | None = None

    @property
    def preview_kind(self) -> str:
        return preview_kind(self.file_type)


@dataclass(slots=True)
class ResourceDraft:
    """Admin-editable metadata for a catalog entry."""

    title: str
    description: str = ""
    subject: str = ""
    level: str = ""
    category: str = ""

    def validate(self) -> None:
        if not str(self.title or "").strip():
            raise ValidationError("Resource title must not be empty")


@dataclass(frozen=True, slots=True)
class FilePayload:
    data: bytes
    filename: str


@dataclass(frozen=True, slots=True)
class FileReference:
    file_url: str
    file_type: str
    storage_key: str | None = None


@dataclass(slots=True)
class CatalogStats:
    total_resources: int
    total_downloads: int
    subjects: int


def preview_kind(file_type: str | None) -> str:
    """Icon/preview family for a file type; unknown types fall back to 'file'."""
    return _PREVIEW_KINDS.get(str(file_type or "").lower(), "file")
