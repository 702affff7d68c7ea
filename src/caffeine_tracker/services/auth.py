"""Authentication service backed by the hosted auth provider."""

from dataclasses import dataclass
from typing import Protocol

from caffeine_tracker.domain.models import AuthSession, UserRecord


class AuthClient(Protocol):
    """Interface for the hosted auth provider."""

    def sign_up(self, email: str, password: str) -> UserRecord | None:
        """Register a new account and return the created user."""

    def sign_in(self, email: str, password: str) -> AuthSession | None:
        """Exchange credentials for a session."""

    def get_user(self, access_token: str) -> UserRecord | None:
        """Return the user owning an access token."""

    def sign_out(self, access_token: str) -> None:
        """Revoke the session tied to an access token."""


class AuthenticationError(Exception):
    """Raised when credentials or tokens are rejected."""


@dataclass
class AuthService:
    """Application service for sign-in and token checks."""

    client: AuthClient

    def sign_up(self, email: str, password: str) -> UserRecord:
        """Create an account."""
        user = self.client.sign_up(email, password)
        if user is None:
            raise AuthenticationError("Sign-up was rejected")
        return user

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in with email and password."""
        session = self.client.sign_in(email, password)
        if session is None:
            raise AuthenticationError("Invalid email or password")
        return session

    def authenticate(self, access_token: str | None) -> UserRecord:
        """Return the user for a bearer token or raise."""
        if not access_token:
            raise AuthenticationError("Missing access token")
        user = self.client.get_user(access_token)
        if user is None:
            raise AuthenticationError("Invalid access token")
        return user

    def sign_out(self, access_token: str) -> None:
        """End the session for a token."""
        self.client.sign_out(access_token)
