"""pm_settlement REST endpoint.

POST /markets/{market_id}/claim — claim_winnings for the caller's position
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import CallerId
from src.pm_settlement.application.service import SettlementService

router = APIRouter(prefix="/markets", tags=["settlement"])

_service = SettlementService()


@router.post("/{market_id}/claim")
async def claim_winnings(
    market_id: int,
    request: Request,
    caller_id: CallerId,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.claim_winnings(db, market_id, caller_id)
    return success_response(result.model_dump(mode="json"), request)
