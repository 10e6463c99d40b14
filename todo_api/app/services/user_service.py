"""
Business logic for users and their session tokens.

A user owns an ordered list of tokens (``user_tokens`` rows in
insertion order).  Signup and login each append one token; logout
removes the presented token by exact value and leaves the others, so
sessions on other devices stay signed in.  Tokens are never modified
in place.

Password hashing and sqlite access block, so both run in a worker
thread via ``run_in_threadpool``.
"""

import logging
from typing import Optional, Tuple

from starlette.concurrency import run_in_threadpool

from ..core.config import Settings
from ..core.db import Database, new_object_id
from ..core.errors import ValidationError
from ..core.security import (
    TOKEN_ACCESS,
    PasswordPolicy,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from ..schemas.user import UserCreate, UserRead

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class UserService:
    """Signup, login, logout and token lookup."""

    @staticmethod
    def _issue_token(cursor, user_id: str, settings: Settings) -> str:
        token = create_access_token(
            user_id, settings.secret_key, settings.access_token_expire_minutes * 60
        )
        cursor.execute(
            "INSERT INTO user_tokens (user_id, access, token) VALUES (?, ?, ?)",
            (user_id, TOKEN_ACCESS, token),
        )
        return token

    @classmethod
    async def create_user(
        cls,
        db: Database,
        settings: Settings,
        data: UserCreate,
        password_policy: PasswordPolicy,
    ) -> Tuple[UserRead, str]:
        """Register a user and issue their first token.

        The user row and the token row are written in one transaction,
        so a failure leaves no partial user behind.  A duplicate email
        surfaces as ``PersistenceError`` from the UNIQUE index.

        Returns
        -------
        tuple
            The public profile and the new token.
        """
        if not password_policy(data.password):
            raise ValidationError("Password does not meet the password policy")
        logger.info("Registering user %s", data.email)
        user_id = new_object_id()
        hashed = await run_in_threadpool(hash_password, data.password)

        def _insert() -> str:
            with db.transaction() as cursor:
                cursor.execute(
                    "INSERT INTO users (id, email, password) VALUES (?, ?, ?)",
                    (user_id, data.email, hashed),
                )
                return cls._issue_token(cursor, user_id, settings)

        token = await run_in_threadpool(_insert)
        return UserRead(id=user_id, email=data.email), token

    @classmethod
    async def login(
        cls,
        db: Database,
        settings: Settings,
        email: str,
        password: str,
    ) -> Tuple[UserRead, str]:
        """Verify credentials and append a new token.

        Unknown emails and wrong passwords raise the same
        ``ValidationError`` so the two cases cannot be told apart.
        """

        def _login() -> Tuple[UserRead, str]:
            with db.transaction() as cursor:
                row = cursor.execute(
                    "SELECT id, email, password FROM users WHERE email = ?",
                    (email,),
                ).fetchone()
                if row is None or not verify_password(password, row["password"]):
                    logger.info("Failed login attempt for %s", email)
                    raise ValidationError(INVALID_CREDENTIALS)
                token = cls._issue_token(cursor, row["id"], settings)
            return UserRead(id=row["id"], email=row["email"]), token

        return await run_in_threadpool(_login)

    @classmethod
    async def find_by_token(cls, db: Database, settings: Settings, token: str) -> Optional[UserRead]:
        """Resolve a token to its user.

        The token must carry a valid signature and still be attached to
        the user it names; revoked tokens resolve to ``None``.
        """
        claims = decode_access_token(token, settings.secret_key)
        if claims is None:
            return None

        def _select():
            with db.transaction() as cursor:
                return cursor.execute(
                    "SELECT u.id, u.email FROM users u "
                    "JOIN user_tokens t ON t.user_id = u.id "
                    "WHERE u.id = ? AND t.access = ? AND t.token = ?",
                    (claims["_id"], TOKEN_ACCESS, token),
                ).fetchone()

        row = await run_in_threadpool(_select)
        if row is None:
            return None
        return UserRead(id=row["id"], email=row["email"])

    @classmethod
    async def remove_token(cls, db: Database, user_id: str, token: str) -> int:
        """Delete ``token`` from the user's token list.  Returns the number of rows removed."""

        def _delete() -> int:
            with db.transaction() as cursor:
                cursor.execute(
                    "DELETE FROM user_tokens WHERE user_id = ? AND token = ?",
                    (user_id, token),
                )
                return cursor.rowcount

        removed = await run_in_threadpool(_delete)
        logger.info("Removed %s token(s) for user %s", removed, user_id)
        return removed
