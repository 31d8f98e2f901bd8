"""UserService: register, login, refresh.

Registration creates the user's accounts row (zero balance) in the same
transaction, so every authenticated caller can hold value immediately.
Emails are matched case-insensitively. Transactions are owned by the router
(``async with db.begin()``).
"""

import logging

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.block_clock import utc_now
from src.pm_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    UsernameExistsError,
)
from src.pm_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.pm_gateway.auth.password import hash_password, verify_password
from src.pm_gateway.user.db_models import UserModel

logger = logging.getLogger(__name__)

_CREATE_ACCOUNT_SQL = text("""
    INSERT INTO accounts (user_id) VALUES (:user_id)
""")


class UserService:
    async def register(
        self,
        username: str,
        email: str,
        password: str,
        db: AsyncSession,
    ) -> UserModel:
        result = await db.execute(select(UserModel).where(UserModel.username == username))
        if result.scalar_one_or_none() is not None:
            raise UsernameExistsError()

        result = await db.execute(
            select(UserModel).where(func.lower(UserModel.email) == email.lower())
        )
        if result.scalar_one_or_none() is not None:
            raise EmailExistsError()

        user = UserModel(
            username=username,
            email=email,
            password_hash=hash_password(password),
            is_active=True,
        )
        db.add(user)
        await db.flush()  # assigns user.id

        await db.execute(_CREATE_ACCOUNT_SQL, {"user_id": user.caller_id})
        logger.info("User registered: id=%s username=%s", user.id, username)
        return user

    async def login(
        self,
        username: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str, str]:
        """Return (user, access_token, refresh_token) and stamp last_login_at.

        Unknown user and wrong password raise the same error.
        """
        result = await db.execute(select(UserModel).where(UserModel.username == username))
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            logger.warning("Login failed: username=%s", username)
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountDisabledError()

        user.last_login_at = utc_now()
        return user, create_access_token(user.caller_id), create_refresh_token(user.caller_id)

    async def refresh(self, refresh_token: str) -> str:
        payload = decode_token(refresh_token, expected_type="refresh")
        return create_access_token(str(payload["sub"]))
