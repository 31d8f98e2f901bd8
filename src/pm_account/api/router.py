"""pm_account REST API — balance, simulated funding and ledger history."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.application.schemas import FundingRequest
from src.pm_account.application.service import AccountApplicationService
from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import CallerId

router = APIRouter(prefix="/account", tags=["account"])

_service = AccountApplicationService()


@router.get("/balance")
async def get_balance(
    caller_id: CallerId,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_balance(db, caller_id)
    return success_response(data.model_dump(mode="json"), request)


@router.post("/deposit")
async def deposit(
    body: FundingRequest,
    caller_id: CallerId,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.deposit(db, caller_id, body.amount)
    return success_response(data.model_dump(mode="json"), request)


@router.post("/withdraw")
async def withdraw(
    body: FundingRequest,
    caller_id: CallerId,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.withdraw(db, caller_id, body.amount)
    return success_response(data.model_dump(mode="json"), request)


@router.get("/ledger")
async def list_ledger(
    caller_id: CallerId,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    entry_type: str | None = Query(None, description="Filter by LedgerEntryType"),
) -> ApiResponse:
    data = await _service.list_ledger(db, caller_id, cursor, limit, entry_type)
    return success_response(data.model_dump(mode="json"), request)
