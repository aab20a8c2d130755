"""Request gates applied before the service is called.

Tokens are plain timestamps: `Authorization: Bearer 2024-05-01T10:00:00Z`
is valid for one hour after that instant. `GET /auth/fake-token` hands
one out.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import Header, Path

from .config import TOKEN_MAX_AGE_SECONDS
from .exceptions import InvalidMovieIdError, UnauthorizedError

NO_HEADER = "Unauthorized; no Authorization header"
INVALID_TIMESTAMP = "Unauthorized; invalid token timestamp"


def issue_token(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.isoformat().replace("+00:00", "Z")


def _parse_timestamp(value: str) -> datetime | None:
    try:
        issued_at = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if issued_at.tzinfo is None:
        issued_at = issued_at.replace(tzinfo=timezone.utc)
    return issued_at


def is_valid_token(token: str, now: datetime | None = None) -> bool:
    issued_at = _parse_timestamp(token)
    if issued_at is None:
        return False
    now = now or datetime.now(timezone.utc)
    age = (now - issued_at).total_seconds()
    return 0 <= age <= TOKEN_MAX_AGE_SECONDS


def require_token(authorization: str | None = Header(default=None)) -> None:
    """FastAPI dependency: reject requests without a fresh bearer timestamp."""
    if not authorization:
        raise UnauthorizedError(NO_HEADER)

    token = authorization.replace("Bearer ", "", 1)
    if not is_valid_token(token):
        raise UnauthorizedError(INVALID_TIMESTAMP)


def movie_id_param(raw_id: str = Path(alias="id")) -> int:
    """FastAPI dependency: the `{id}` path segment as a positive integer."""
    if not (raw_id.isascii() and raw_id.isdigit()) or int(raw_id) <= 0:
        raise InvalidMovieIdError(raw_id)
    return int(raw_id)
