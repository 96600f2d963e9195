from __future__ import annotations

from edulibrary.domain.models.query import (
    AllOf,
    AnyOf,
    Contains,
    Equals,
    MatchAll,
    Predicate,
    ResourceQuery,
    TEXT_FIELDS,
)

ORDERABLE_COLUMNS = ("created_at", "updated_at", "download_count", "title")


def escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def compile_predicate(predicate: Predicate) -> tuple[str, list[object]]:
    """Render a predicate tree as a parameterised SQLite WHERE fragment."""
    if isinstance(predicate, MatchAll):
        return "1 = 1", []
    if isinstance(predicate, Contains):
        column = _column(predicate.field)
        return (
            f"lower_unicode({column}) LIKE ? ESCAPE '\\'",
            [f"%{escape_like(predicate.term.lower())}%"],
        )
    if isinstance(predicate, Equals):
        return f"{_column(predicate.field)} = ?", [predicate.value]
    if isinstance(predicate, (AnyOf, AllOf)):
        if not predicate.clauses:
            # Empty OR matches nothing, empty AND matches everything.
            return ("1 = 0" if isinstance(predicate, AnyOf) else "1 = 1"), []
        joiner = " OR " if isinstance(predicate, AnyOf) else " AND "
        parts: list[str] = []
        params: list[object] = []
        for clause in predicate.clauses:
            sql, clause_params = compile_predicate(clause)
            parts.append(f"({sql})")
            params.extend(clause_params)
        return joiner.join(parts), params
    raise TypeError(f"Unsupported predicate: {predicate!r}")


def compile_query(query: ResourceQuery) -> tuple[str, list[object]]:
    if query.order_by not in ORDERABLE_COLUMNS:
        raise ValueError(f"Unsupported order column: {query.order_by}")
    where_sql, params = compile_predicate(query.predicate)
    direction = "DESC" if query.descending else "ASC"
    # rowid keeps insertion order stable for identical timestamps.
    sql = (
        f"SELECT * FROM resources WHERE {where_sql} "
        f"ORDER BY {query.order_by} {direction}, rowid {direction}"
    )
    if query.limit is not None:
        sql += " LIMIT ?"
        params = [*params, query.limit]
    return sql, params


def _column(field: str) -> str:
    if field not in TEXT_FIELDS:
        raise ValueError(f"Unsupported filter field: {field}")
    return field
