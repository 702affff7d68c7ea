"""Supabase Auth adapter."""

import logging
from dataclasses import dataclass
from uuid import UUID

from supabase import AuthError, Client

from caffeine_tracker.domain.models import AuthSession, UserRecord
from caffeine_tracker.services.auth import AuthClient

logger = logging.getLogger(__name__)


@dataclass
class SupabaseAuthClient(AuthClient):
    """Auth client that delegates to Supabase Auth."""

    client: Client

    def sign_up(self, email: str, password: str) -> UserRecord | None:
        """Register a user with email and password."""
        try:
            response = self.client.auth.sign_up(
                {"email": email, "password": password}
            )
        except AuthError:
            logger.warning("Supabase sign-up rejected", extra={"email": email})
            return None
        if response.user is None:
            return None
        return _to_user(response.user)

    def sign_in(self, email: str, password: str) -> AuthSession | None:
        """Sign in with email and password."""
        try:
            response = self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError:
            logger.info("Supabase sign-in rejected", extra={"email": email})
            return None
        if response.session is None or response.user is None:
            return None
        return AuthSession(
            access_token=response.session.access_token,
            refresh_token=response.session.refresh_token,
            user=_to_user(response.user),
        )

    def get_user(self, access_token: str) -> UserRecord | None:
        """Resolve an access token into a user."""
        try:
            response = self.client.auth.get_user(access_token)
        except AuthError:
            return None
        if response is None or response.user is None:
            return None
        return _to_user(response.user)

    def sign_out(self, access_token: str) -> None:
        """Revoke the token's session."""
        try:
            self.client.auth.admin.sign_out(access_token)
        except AuthError:
            logger.warning("Supabase sign-out failed")


def _to_user(user: object) -> UserRecord:
    return UserRecord(
        id=UUID(str(getattr(user, "id", ""))),
        email=getattr(user, "email", None),
    )
