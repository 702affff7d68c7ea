"""Auth endpoints and the bearer-token dependency."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from caffeine_tracker.api.schemas import Credentials
from caffeine_tracker.domain.models import UserRecord  # noqa: TC001
from caffeine_tracker.services.auth import AuthenticationError

if TYPE_CHECKING:
    from caffeine_tracker.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def current_user(
    request: Request,
    authorization: str | None = Header(default=None),
) -> UserRecord:
    """Resolve the bearer token into the signed-in user."""
    container: AppContainer = request.app.state.container
    try:
        return container.auth_service.authenticate(_bearer_token(authorization))
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


@router.post("/sign-up", status_code=status.HTTP_201_CREATED)
async def sign_up(payload: Credentials, request: Request) -> dict[str, object]:
    """Create an account."""
    container: AppContainer = request.app.state.container
    try:
        user = container.auth_service.sign_up(payload.email, payload.password)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return {"user": {"id": str(user.id), "email": user.email}}


@router.post("/sign-in")
async def sign_in(payload: Credentials, request: Request) -> dict[str, object]:
    """Exchange credentials for an access token."""
    container: AppContainer = request.app.state.container
    try:
        session = container.auth_service.sign_in(payload.email, payload.password)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)
        ) from exc
    return {
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "token_type": "bearer",
        "user": {"id": str(session.user.id), "email": session.user.email},
    }


@router.post("/sign-out", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out(
    request: Request,
    authorization: str | None = Header(default=None),
    user: UserRecord = Depends(current_user),
) -> None:
    """End the current session."""
    container: AppContainer = request.app.state.container
    token = _bearer_token(authorization)
    if token:
        container.auth_service.sign_out(token)
    logger.info("User signed out", extra={"user_id": str(user.id)})
