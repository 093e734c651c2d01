"""JWT login/registration and auth dependencies (get_store, get_current_user)."""

from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, HTTPException, Path, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from quickdesk.core.database import get_db
from quickdesk.core.security import create_access_token, user_id_from_token
from quickdesk.models.base import MAX_ID
from quickdesk.schemas.auth import (
    CurrentUser,
    LoginRequest,
    PasswordChangeRequest,
    ProfileUpdate,
    RegisterRequest,
    TokenResponse,
)
from quickdesk.schemas.user import UserPublic
from quickdesk.services import users as user_service
from quickdesk.services.store import SqlStore, Store

router = APIRouter()
security = HTTPBearer(auto_error=False)

# Path ids must fit the Integer key columns.
ResourceId = Annotated[int, Path(ge=1, le=MAX_ID)]


def get_store(db: Annotated[Session, Depends(get_db)]) -> Store:
    """Dependency: request-scoped store over the request's DB session."""
    return SqlStore(db)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    store: Annotated[Store, Depends(get_store)],
) -> CurrentUser:
    """Dependency: require valid Bearer JWT and return the current user. Raises 401 if missing or invalid."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    try:
        user_id = user_id_from_token(credentials.credentials)
    except jwt.PyJWTError:
        raise _unauthorized("Invalid or expired token")
    user = store.get_user(user_id)
    if user is None:
        raise _unauthorized("User not found")
    return CurrentUser.model_validate(user)


def _token_for(user) -> TokenResponse:
    token = create_access_token(user.id, user.role)
    return TokenResponse(access_token=token, token_type="bearer", user=UserPublic.model_validate(user))


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    store: Annotated[Store, Depends(get_store)],
) -> TokenResponse:
    """
    Authenticate with email and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    user = user_service.authenticate(store, body.email, body.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )
    return _token_for(user)


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    store: Annotated[Store, Depends(get_store)],
) -> TokenResponse:
    """Create a role=user account and return a token for it."""
    user = user_service.register_user(store, body)
    return _token_for(user)


@router.get("/me", response_model=UserPublic)
def me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> UserPublic:
    return UserPublic.model_validate(store.get_user(current_user.id))


@router.put("/me", response_model=UserPublic)
def update_me(
    body: ProfileUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> UserPublic:
    """Edit the caller's own name and email."""
    return user_service.update_profile(store, current_user, body)


@router.post("/change-password", status_code=status.HTTP_204_NO_CONTENT)
def change_password(
    body: PasswordChangeRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> None:
    user_service.change_password(store, current_user, body)
