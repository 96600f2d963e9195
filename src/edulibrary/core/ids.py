from __future__ import annotations

import secrets
import uuid


def new_uuid() -> str:
    """Generate a new UUID4 as a string."""
    return str(uuid.uuid4())


def new_token(nbytes: int = 24) -> str:
    """Generate an opaque URL-safe session token."""
    return secrets.token_urlsafe(nbytes)


def short_disambiguator(nbytes: int = 4) -> str:
    return secrets.token_hex(nbytes)
