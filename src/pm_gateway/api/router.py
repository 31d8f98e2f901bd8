"""Auth endpoints: register, login, refresh.

The access token's subject is the caller identity used by every protected
endpoint in the markets, settlement and protocol routers.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.user.schemas import (
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    RegisterResponse,
    UserInfo,
)
from src.pm_gateway.user.service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])
_service = UserService()

Session = Annotated[AsyncSession, Depends(get_db_session)]


def _access_ttl_seconds() -> int:
    return settings.JWT_EXPIRE_MINUTES * 60


def _reply(payload: BaseModel, request: Request, message: str) -> ApiResponse:
    resp = success_response(payload.model_dump(), request)
    resp.message = message
    return resp


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Open an identity and its account",
)
async def register(body: RegisterRequest, request: Request, db: Session) -> ApiResponse:
    # User row and zero-balance account commit together.
    async with db.begin():
        user = await _service.register(body.username, body.email, body.password, db)
    payload = RegisterResponse(
        **UserInfo.from_user(user).model_dump(),
        created_at=user.created_at.isoformat(),
    )
    return _reply(payload, request, "Registered")


@router.post("/login", summary="Exchange credentials for a token pair")
async def login(body: LoginRequest, request: Request, db: Session) -> ApiResponse:
    async with db.begin():
        user, access, refresh = await _service.login(body.username, body.password, db)
    payload = LoginResponse(
        access_token=access,
        refresh_token=refresh,
        expires_in=_access_ttl_seconds(),
        user=UserInfo.from_user(user),
    )
    return _reply(payload, request, "Logged in")


@router.post("/refresh", summary="Trade a refresh token for a new access token")
async def refresh(body: RefreshRequest, request: Request) -> ApiResponse:
    payload = RefreshResponse(
        access_token=await _service.refresh(body.refresh_token),
        expires_in=_access_ttl_seconds(),
    )
    return _reply(payload, request, "Access token renewed")
