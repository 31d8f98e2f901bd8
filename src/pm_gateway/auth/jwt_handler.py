"""JWT issuing and verification for caller identity.

Tokens are HS256-signed with the shared JWT_SECRET. The "sub" claim carries
the user id, which is the identity the protocol roles (owner, oracle) are
compared against. There is no revocation list; a token stays valid until
it expires.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.pm_common.errors import AppError, InvalidCredentialsError, InvalidRefreshTokenError

_ALGORITHM = settings.JWT_ALGORITHM
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
_REFRESH_EXPIRE = timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS)


def _issue(user_id: str, token_type: str, lifetime: timedelta) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "type": token_type,
        "iat": now,
        "exp": now + lifetime,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def create_access_token(user_id: str) -> str:
    """Short-lived token sent as the Bearer credential."""
    return _issue(user_id, "access", _ACCESS_EXPIRE)


def create_refresh_token(user_id: str) -> str:
    """Long-lived token exchanged at /auth/refresh for a new access token."""
    return _issue(user_id, "refresh", _REFRESH_EXPIRE)


def decode_token(token: str, expected_type: str) -> dict[str, str]:
    """Verify signature, expiry and token type.

    Raises InvalidCredentialsError when an access token was expected and
    InvalidRefreshTokenError when a refresh token was expected.
    """
    try:
        payload: dict[str, str] = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[_ALGORITHM]
        )
    except JWTError:
        raise _auth_error(expected_type) from None

    if payload.get("type") != expected_type:
        raise _auth_error(expected_type)
    return payload


def _auth_error(expected_type: str) -> AppError:
    if expected_type == "access":
        return InvalidCredentialsError()
    return InvalidRefreshTokenError()
