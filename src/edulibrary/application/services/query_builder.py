from __future__ import annotations

from edulibrary.domain.models.query import (
    AllOf,
    AnyOf,
    Contains,
    Equals,
    Exactly,
    FieldFilter,
    FilterState,
    MatchAll,
    Predicate,
    ResourceQuery,
)

SEARCH_FIELDS = ("title", "description", "subject")
ADMIN_SEARCH_FIELDS = ("title", "subject", "category")
DEFAULT_RECENT_LIMIT = 6


def build_query(filter_state: FilterState | None = None, limit: int | None = None) -> ResourceQuery:
    """Translate a filter state into a newest-first query over the catalog.

    The search term is an OR group across title, description and subject;
    every active field selection is conjoined as an exact match.
    """
    state = filter_state or FilterState()
    clauses: list[Predicate] = []

    if state.search_term:
        clauses.append(_search_group(state.search_term, SEARCH_FIELDS))

    for field, selection in (
        ("subject", state.subject),
        ("level", state.level),
        ("category", state.category),
    ):
        clause = _equality(field, selection)
        if clause is not None:
            clauses.append(clause)

    return ResourceQuery(predicate=_conjoin(clauses), limit=_normalize_limit(limit))


def recent_query(limit: int = DEFAULT_RECENT_LIMIT) -> ResourceQuery:
    return ResourceQuery(predicate=MatchAll(), limit=_normalize_limit(limit))


def admin_search_predicate(term: str | None) -> Predicate:
    if not term:
        return MatchAll()
    return _search_group(term, ADMIN_SEARCH_FIELDS)


def _search_group(term: str, fields: tuple[str, ...]) -> AnyOf:
    return AnyOf(tuple(Contains(field, term) for field in fields))


def _equality(field: str, selection: FieldFilter) -> Equals | None:
    if isinstance(selection, Exactly):
        return Equals(field, selection.value)
    return None


def _conjoin(clauses: list[Predicate]) -> Predicate:
    if not clauses:
        return MatchAll()
    if len(clauses) == 1:
        return clauses[0]
    return AllOf(tuple(clauses))


def _normalize_limit(limit: int | None) -> int | None:
    if limit is None:
        return None
    if limit < 1:
        raise ValueError(f"Query limit must be positive, got {limit}")
    return int(limit)
