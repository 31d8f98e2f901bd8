"""pm_market REST endpoints.

POST /markets                               — create_market (owner only)
GET  /markets                               — list with cursor pagination
GET  /markets/{market_id}                   — market detail with derived phase
POST /markets/{market_id}/predictions       — make_prediction (escrows stake)
GET  /markets/{market_id}/predictions/me    — caller's position
POST /markets/{market_id}/resolve           — resolve_market (oracle only)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.enums import MarketPhase
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import CallerId
from src.pm_market.application.schemas import (
    CreateMarketRequest,
    MakePredictionRequest,
    ResolveMarketRequest,
)
from src.pm_market.application.service import MarketLifecycleService

router = APIRouter(prefix="/markets", tags=["markets"])

_service = MarketLifecycleService()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_market(
    body: CreateMarketRequest,
    request: Request,
    caller_id: CallerId,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.create_market(
        db, caller_id, body.start_price, body.start_block, body.end_block
    )
    return success_response(result.model_dump(mode="json"), request)


@router.get("")
async def list_markets(
    request: Request,
    caller_id: CallerId,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    phase: MarketPhase | None = Query(None, description="Filter by derived phase"),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    result = await _service.list_markets(db, phase, cursor, limit)
    return success_response(result.model_dump(mode="json"), request)


@router.get("/{market_id}")
async def get_market(
    market_id: int,
    request: Request,
    caller_id: CallerId,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_market(db, market_id)
    return success_response(result.model_dump(mode="json"), request)


@router.post("/{market_id}/predictions")
async def make_prediction(
    market_id: int,
    body: MakePredictionRequest,
    request: Request,
    caller_id: CallerId,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.make_prediction(
        db, market_id, caller_id, body.side, body.stake
    )
    return success_response(result.model_dump(mode="json"), request)


@router.get("/{market_id}/predictions/me")
async def get_user_prediction(
    market_id: int,
    request: Request,
    caller_id: CallerId,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_user_prediction(db, market_id, caller_id)
    return success_response(result.model_dump(mode="json"), request)


@router.post("/{market_id}/resolve")
async def resolve_market(
    market_id: int,
    body: ResolveMarketRequest,
    request: Request,
    caller_id: CallerId,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.resolve_market(db, market_id, caller_id, body.end_price)
    return success_response(result.model_dump(mode="json"), request)
