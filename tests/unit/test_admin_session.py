import pytest

from edulibrary.application.services.admin_session import (
    SIGNED_IN,
    SIGNED_OUT,
    AdminSessionRegistry,
)
from edulibrary.core.errors import AuthorizationError


def test_sign_in_issues_session_and_notifies_listeners() -> None:
    registry = AdminSessionRegistry("s3cret")
    events: list[tuple[str, str]] = []
    registry.subscribe(lambda event, session: events.append((event, session.user)))

    session = registry.sign_in("s3cret", user="librarian")

    assert registry.resolve(session.token) == session
    assert registry.require(session.token) == session
    assert events == [(SIGNED_IN, "librarian")]

    assert registry.sign_out(session.token) is True
    assert registry.sign_out(session.token) is False
    assert registry.resolve(session.token) is None
    assert events[-1] == (SIGNED_OUT, "librarian")


def test_wrong_secret_is_rejected() -> None:
    registry = AdminSessionRegistry("s3cret")
    with pytest.raises(AuthorizationError):
        registry.sign_in("guess")


def test_sign_in_disabled_without_admin_token() -> None:
    registry = AdminSessionRegistry(None)
    assert registry.enabled is False
    with pytest.raises(AuthorizationError):
        registry.sign_in("")


def test_require_without_session_raises() -> None:
    registry = AdminSessionRegistry("s3cret")
    with pytest.raises(AuthorizationError):
        registry.require(None)
    with pytest.raises(AuthorizationError):
        registry.require("not-a-session")


def test_unsubscribe_and_failing_listener_do_not_break_sign_in() -> None:
    registry = AdminSessionRegistry("s3cret")
    seen: list[str] = []

    def broken(event, session):
        raise RuntimeError("listener bug")

    registry.subscribe(broken)
    unsubscribe = registry.subscribe(lambda event, session: seen.append(event))
    registry.sign_in("s3cret")
    unsubscribe()
    registry.sign_in("s3cret")

    assert seen == [SIGNED_IN]
