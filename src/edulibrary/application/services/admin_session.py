from __future__ import annotations

import hmac
import logging
import threading
from dataclasses import dataclass
from typing import Callable

from edulibrary.core.errors import AuthorizationError
from edulibrary.core.ids import new_token
from edulibrary.core.time import now_utc_iso

logger = logging.getLogger(__name__)

SIGNED_IN = "signed_in"
SIGNED_OUT = "signed_out"


@dataclass(frozen=True, slots=True)
class AdminSession:
    token: str
    user: str
    signed_in_at: str


SessionListener = Callable[[str, AdminSession], None]


class AdminSessionRegistry:
    """Sign-in/sign-out front for the admin console.

    Stands in for an external identity provider: a shared admin secret is
    exchanged for an opaque session token, and listeners are pushed every
    sign-in and sign-out. The catalog itself never consults this registry.
    """

    def __init__(self, admin_token: str | None) -> None:
        self.admin_token = admin_token
        self._sessions: dict[str, AdminSession] = {}
        self._listeners: list[SessionListener] = []
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return bool(self.admin_token)

    def sign_in(self, secret: str, user: str = "admin") -> AdminSession:
        if not self.admin_token:
            raise AuthorizationError("Admin sign-in is disabled; set EDULIB_ADMIN_TOKEN to enable it")
        if not hmac.compare_digest(str(secret or "").encode("utf-8"), self.admin_token.encode("utf-8")):
            raise AuthorizationError("Invalid admin credentials")
        session = AdminSession(token=new_token(), user=user, signed_in_at=now_utc_iso())
        with self._lock:
            self._sessions[session.token] = session
        self._notify(SIGNED_IN, session)
        return session

    def sign_out(self, token: str) -> bool:
        with self._lock:
            session = self._sessions.pop(token, None)
        if session is None:
            return False
        self._notify(SIGNED_OUT, session)
        return True

    def resolve(self, token: str | None) -> AdminSession | None:
        if not token:
            return None
        with self._lock:
            return self._sessions.get(token)

    def require(self, token: str | None) -> AdminSession:
        session = self.resolve(token)
        if session is None:
            raise AuthorizationError("Admin session required")
        return session

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str, session: AdminSession) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event, session)
            except Exception:
                logger.exception("Admin session listener failed on %s", event)
