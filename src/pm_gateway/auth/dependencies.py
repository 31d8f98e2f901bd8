"""FastAPI dependencies resolving the Bearer token to a caller.

Protected routers depend on ``get_caller_id``: the authenticated user's id as
a string, which is what the owner and oracle gates and the position store
compare against. ``get_current_user`` is available where the full row is
needed.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.errors import AccountDisabledError, InvalidCredentialsError
from src.pm_gateway.auth.jwt_handler import decode_token
from src.pm_gateway.user.db_models import UserModel

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> UserModel:
    """Resolve the Bearer token to an active user.

    Raises HTTP 401 if the token is missing, invalid, expired, or names an
    unknown user. Raises AccountDisabledError (403) for disabled users.
    """
    try:
        payload = decode_token(token, expected_type="access")
    except InvalidCredentialsError:
        raise _unauthenticated("Invalid or expired token") from None

    subject = payload.get("sub")
    if not subject:
        raise _unauthenticated("Token has no subject")

    user = (
        await db.execute(select(UserModel).where(UserModel.id == subject))
    ).scalar_one_or_none()
    if user is None:
        raise _unauthenticated("Unknown user")
    if not user.is_active:
        raise AccountDisabledError()
    return user


async def get_caller_id(
    user: Annotated[UserModel, Depends(get_current_user)],
) -> str:
    return user.caller_id


CallerId = Annotated[str, Depends(get_caller_id)]
