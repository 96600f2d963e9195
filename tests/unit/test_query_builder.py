import pytest

from edulibrary.application.services.query_builder import (
    admin_search_predicate,
    build_query,
    recent_query,
)
from edulibrary.domain.models.query import (
    AllOf,
    AnyOf,
    AnyValue,
    Contains,
    Equals,
    Exactly,
    FilterState,
    MatchAll,
)
from edulibrary.domain.models.resource import Resource


def _resource(**overrides) -> Resource:
    fields = dict(
        id="r1",
        title="Calculus Notes",
        description="Limits and derivatives",
        subject="Mathematics",
        level="A-Level",
        category="Notes",
        file_url="/files/1-calc.pdf",
        file_type="pdf",
        download_count=0,
        created_at="2024-01-01T00:00:00+00:00",
        updated_at="2024-01-01T00:00:00+00:00",
    )
    fields.update(overrides)
    return Resource(**fields)


def test_sentinels_and_blanks_parse_to_any_value() -> None:
    state = FilterState.from_selections(
        search_term="",
        subject="All Subjects",
        level="",
        category=None,
    )
    assert state.subject == AnyValue()
    assert state.level == AnyValue()
    assert state.category == AnyValue()
    assert state.is_unfiltered is True


def test_sentinel_of_another_field_is_treated_as_a_value() -> None:
    state = FilterState.from_selections(subject="All Levels")
    assert state.subject == Exactly("All Levels")


def test_empty_filter_state_is_unfiltered_newest_first() -> None:
    query = build_query(FilterState())
    assert query.predicate == MatchAll()
    assert query.order_by == "created_at"
    assert query.descending is True
    assert query.limit is None
    assert build_query(None) == query


def test_search_term_builds_or_group_over_title_description_subject() -> None:
    query = build_query(FilterState(search_term="phys"))
    assert query.predicate == AnyOf(
        (
            Contains("title", "phys"),
            Contains("description", "phys"),
            Contains("subject", "phys"),
        )
    )


def test_search_term_is_used_untrimmed() -> None:
    query = build_query(FilterState(search_term=" science"))
    assert query.predicate == AnyOf(
        (
            Contains("title", " science"),
            Contains("description", " science"),
            Contains("subject", " science"),
        )
    )
    assert not query.predicate.matches(_resource(title="Sciencefiction", description="", subject="Literature"))
    assert query.predicate.matches(_resource(title="Computer Science", description="", subject="Literature"))


def test_whitespace_only_search_term_still_filters() -> None:
    state = FilterState(search_term="   ")
    assert state.is_unfiltered is False
    assert build_query(state).predicate == AnyOf(
        (
            Contains("title", "   "),
            Contains("description", "   "),
            Contains("subject", "   "),
        )
    )


def test_search_and_selections_are_conjoined() -> None:
    state = FilterState.from_selections(
        search_term="calc",
        subject="Mathematics",
        level="A-Level",
        category="Notes",
    )
    query = build_query(state)
    assert isinstance(query.predicate, AllOf)
    search, subject, level, category = query.predicate.clauses
    assert isinstance(search, AnyOf)
    assert subject == Equals("subject", "Mathematics")
    assert level == Equals("level", "A-Level")
    assert category == Equals("category", "Notes")


def test_single_selection_is_not_wrapped() -> None:
    query = build_query(FilterState.from_selections(category="Exam"))
    assert query.predicate == Equals("category", "Exam")


def test_build_query_is_idempotent() -> None:
    state = FilterState.from_selections(search_term="bio", level="University")
    assert build_query(state) == build_query(state)
    assert build_query(state, limit=5) == build_query(state, limit=5)


def test_search_matching_is_case_insensitive_but_equality_is_exact() -> None:
    resource = _resource()
    assert Contains("subject", "MATH").matches(resource)
    assert Contains("description", "DERIV").matches(resource)
    assert Equals("subject", "Mathematics").matches(resource)
    assert not Equals("subject", "mathematics").matches(resource)


def test_predicate_rejects_unknown_field() -> None:
    with pytest.raises(ValueError):
        Contains("file_url", "x")


def test_recent_query_is_bounded() -> None:
    query = recent_query()
    assert query.limit == 6
    assert query.predicate == MatchAll()
    with pytest.raises(ValueError):
        recent_query(0)


def test_admin_search_covers_title_subject_category() -> None:
    predicate = admin_search_predicate("notes")
    assert predicate.matches(_resource(title="Other", subject="Physics", category="Notes"))
    assert not predicate.matches(_resource(title="Other", subject="Physics", category="Exam", description="notes"))
    assert admin_search_predicate("") == MatchAll()
    assert admin_search_predicate(None) == MatchAll()
    assert admin_search_predicate(" physics") == AnyOf(
        (
            Contains("title", " physics"),
            Contains("subject", " physics"),
            Contains("category", " physics"),
        )
    )
