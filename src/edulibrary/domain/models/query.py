from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from edulibrary.domain.models.resource import (
    CATEGORIES_SENTINEL,
    LEVELS_SENTINEL,
    SUBJECTS_SENTINEL,
    Resource,
)

TEXT_FIELDS = ("title", "description", "subject", "level", "category")


@dataclass(frozen=True, slots=True)
class AnyValue:
    """Field filter that accepts every value."""


@dataclass(frozen=True, slots=True)
class Exactly:
    value: str


FieldFilter = Union[AnyValue, Exactly]


def parse_field_filter(raw: str | None, sentinel: str) -> FieldFilter:
    """Map a UI selection onto a field filter; blanks and the sentinel mean any."""
    if raw is None:
        return AnyValue()
    if not raw.strip() or raw == sentinel:
        return AnyValue()
    return Exactly(raw)


@dataclass(frozen=True, slots=True)
class FilterState:
    search_term: str = ""
    subject: FieldFilter = AnyValue()
    level: FieldFilter = AnyValue()
    category: FieldFilter = AnyValue()

    @classmethod
    def from_selections(
        cls,
        search_term: str | None = None,
        subject: str | None = None,
        level: str | None = None,
        category: str | None = None,
    ) -> FilterState:
        return cls(
            search_term=str(search_term or ""),
            subject=parse_field_filter(subject, SUBJECTS_SENTINEL),
            level=parse_field_filter(level, LEVELS_SENTINEL),
            category=parse_field_filter(category, CATEGORIES_SENTINEL),
        )

    @property
    def is_unfiltered(self) -> bool:
        return (
            not self.search_term
            and isinstance(self.subject, AnyValue)
            and isinstance(self.level, AnyValue)
            and isinstance(self.category, AnyValue)
        )


@dataclass(frozen=True, slots=True)
class MatchAll:
    def matches(self, resource: Resource) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Contains:
    """Case-insensitive substring test on one text field."""

    field: str
    term: str

    def __post_init__(self) -> None:
        if self.field not in TEXT_FIELDS:
            raise ValueError(f"Unsupported filter field: {self.field}")

    def matches(self, resource: Resource) -> bool:
        return self.term.lower() in str(getattr(resource, self.field) or "").lower()


@dataclass(frozen=True, slots=True)
class Equals:
    """Case-sensitive equality on one text field."""

    field: str
    value: str

    def __post_init__(self) -> None:
        if self.field not in TEXT_FIELDS:
            raise ValueError(f"Unsupported filter field: {self.field}")

    def matches(self, resource: Resource) -> bool:
        return getattr(resource, self.field) == self.value


@dataclass(frozen=True, slots=True)
class AnyOf:
    clauses: tuple[Predicate, ...]

    def matches(self, resource: Resource) -> bool:
        return any(clause.matches(resource) for clause in self.clauses)


@dataclass(frozen=True, slots=True)
class AllOf:
    clauses: tuple[Predicate, ...]

    def matches(self, resource: Resource) -> bool:
        return all(clause.matches(resource) for clause in self.clauses)


Predicate = Union[MatchAll, Contains, Equals, AnyOf, AllOf]


@dataclass(frozen=True, slots=True)
class ResourceQuery:
    predicate: Predicate
    order_by: str = "created_at"
    descending: bool = True
    limit: int | None = None
