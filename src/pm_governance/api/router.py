# src/pm_governance/api/router.py
"""Protocol governance REST API.

GET  /protocol/config                    — current parameters
GET  /protocol/balance                   — get_contract_balance
PUT  /protocol/oracle                    — owner only
PUT  /protocol/minimum-stake             — owner only
PUT  /protocol/fee-percentage            — owner only
POST /protocol/withdraw-fees             — owner only
GET  /protocol/markets/{market_id}/stats — owner only
GET  /protocol/invariants                — owner only
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import CallerId
from src.pm_governance.application.schemas import (
    SetFeePercentageRequest,
    SetMinimumStakeRequest,
    SetOracleRequest,
    WithdrawFeesRequest,
)
from src.pm_governance.application.service import GovernanceService

router = APIRouter(prefix="/protocol", tags=["protocol"])
_service = GovernanceService()


@router.get("/config")
async def get_config(
    request: Request,
    caller_id: CallerId,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_config(db)
    return success_response(result.model_dump(), request)


@router.get("/balance")
async def get_contract_balance(
    request: Request,
    caller_id: CallerId,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_contract_balance(db)
    return success_response(result.model_dump(), request)


@router.put("/oracle")
async def set_oracle(
    body: SetOracleRequest,
    request: Request,
    caller_id: CallerId,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.set_oracle(db, caller_id, body.oracle_id)
    return success_response(result.model_dump(), request)


@router.put("/minimum-stake")
async def set_minimum_stake(
    body: SetMinimumStakeRequest,
    request: Request,
    caller_id: CallerId,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.set_minimum_stake(db, caller_id, body.minimum_stake)
    return success_response(result.model_dump(), request)


@router.put("/fee-percentage")
async def set_fee_percentage(
    body: SetFeePercentageRequest,
    request: Request,
    caller_id: CallerId,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.set_fee_percentage(db, caller_id, body.fee_percentage)
    return success_response(result.model_dump(), request)


@router.post("/withdraw-fees")
async def withdraw_fees(
    body: WithdrawFeesRequest,
    request: Request,
    caller_id: CallerId,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.withdraw_fees(db, caller_id, body.amount)
    return success_response(result.model_dump(), request)


@router.get("/markets/{market_id}/stats")
async def get_market_stats(
    market_id: int,
    request: Request,
    caller_id: CallerId,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_market_stats(db, caller_id, market_id)
    return success_response(result.model_dump(), request)


@router.get("/invariants")
async def verify_invariants(
    request: Request,
    caller_id: CallerId,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.verify_all_invariants(db, caller_id)
    return success_response(result.model_dump(), request)
