"""Domain models for authenticated users."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class UserRecord:
    """Represents an authenticated Supabase user."""

    id: UUID
    email: str | None


@dataclass(frozen=True)
class AuthSession:
    """Tokens issued after a successful sign-in."""

    access_token: str
    refresh_token: str | None
    user: UserRecord
