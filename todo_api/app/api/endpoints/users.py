"""
User endpoints.

Signup and login are public and hand the new session token back in
the ``x-auth`` response header, with the public profile in the body.
``/users/me`` and ``/users/me/token`` require a token.
"""

from fastapi import APIRouter, Depends, Response

from todo_api.app.api.deps import (
    AUTH_HEADER,
    CurrentUser,
    get_current_user,
    get_password_policy,
    get_settings,
)
from todo_api.app.core.config import Settings
from todo_api.app.core.db import Database, get_db
from todo_api.app.core.security import PasswordPolicy
from todo_api.app.schemas.user import UserCreate, UserLogin, UserRead
from todo_api.app.services.user_service import UserService

router = APIRouter()


@router.post("", response_model=UserRead)
async def register_user(
    data: UserCreate,
    response: Response,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
    password_policy: PasswordPolicy = Depends(get_password_policy),
) -> UserRead:
    """Sign up a new user.

    Returns 400 if the email is malformed or already registered, or if
    the password fails the configured policy.
    """
    user, token = await UserService.create_user(db, settings, data, password_policy)
    response.headers[AUTH_HEADER] = token
    return user


@router.post("/login", response_model=UserRead)
async def login_user(
    credentials: UserLogin,
    response: Response,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> UserRead:
    """Authenticate with email and password and start a new session."""
    user, token = await UserService.login(db, settings, credentials.email, credentials.password)
    response.headers[AUTH_HEADER] = token
    return user


@router.get("/me", response_model=UserRead)
async def read_current_user(current_user: CurrentUser = Depends(get_current_user)) -> UserRead:
    return current_user.user


@router.delete("/me/token")
async def logout_user(
    current_user: CurrentUser = Depends(get_current_user),
    db: Database = Depends(get_db),
) -> dict:
    """Revoke the token used for this request.  Other sessions stay valid."""
    await UserService.remove_token(db, current_user.id, current_user.token)
    return {}
