"""
Shared FastAPI dependencies.

Everything a route needs from the running application (datastore
handle, settings, password policy, authenticated caller) is injected
here from ``app.state``.  ``get_current_user`` runs before the route
body, so an unresolvable token ends the request with 401 before any
route-specific validation happens.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, Request

from ..core.config import Settings
from ..core.db import Database, get_db
from ..core.errors import AuthError
from ..core.security import PasswordPolicy
from ..schemas.user import UserRead
from ..services.user_service import UserService

AUTH_HEADER = "x-auth"


@dataclass
class CurrentUser:
    """The authenticated caller and the token they presented."""

    user: UserRead
    token: str

    @property
    def id(self) -> str:
        return self.user.id


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_password_policy(request: Request) -> PasswordPolicy:
    return request.app.state.password_policy


async def get_current_user(
    x_auth: Optional[str] = Header(None, alias=AUTH_HEADER),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> CurrentUser:
    """Resolve the ``x-auth`` header to a user or raise ``AuthError``."""
    if not x_auth:
        raise AuthError()
    user = await UserService.find_by_token(db, settings, x_auth)
    if user is None:
        raise AuthError()
    return CurrentUser(user=user, token=x_auth)
