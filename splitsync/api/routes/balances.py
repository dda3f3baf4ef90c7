"""
Balance and settlement routes.
"""
from typing import List
from fastapi import APIRouter, Depends
from splitsync.api.dependencies import get_coordinator, http_error
from splitsync.core.errors import SyncError
from splitsync.schemas.balance import (
    Balance, BalanceReport, BalanceRequest, GroupSummary, Settlement
)
from splitsync.services.balance_service import calculate_group_summary, calculate_net_balances
from splitsync.services.settlement_service import optimize_settlements, simplify_debts
from splitsync.services.sync_service import SyncCoordinator

router = APIRouter(tags=["balances"])


@router.post("/balances/calculate", response_model=BalanceReport)
async def calculate_balances(request: BalanceRequest, optimize: bool = False):
    """Compute balances and settlements for a group and expenses sent in the body."""
    balances = calculate_net_balances(request.group, request.expenses)
    settlements = optimize_settlements(balances) if optimize else simplify_debts(balances)
    return BalanceReport(
        balances=balances,
        settlements=settlements,
        summary=calculate_group_summary(request.group, request.expenses)
    )


@router.get("/groups/{group_id}/balances", response_model=List[Balance])
async def get_group_balances(
    group_id: str,
    coordinator: SyncCoordinator = Depends(get_coordinator)
):
    """Net balance per participant, largest magnitude first."""
    try:
        return coordinator.balances(group_id)
    except SyncError as e:
        raise http_error(e)


@router.get("/groups/{group_id}/settlements", response_model=List[Settlement])
async def get_group_settlements(
    group_id: str,
    optimize: bool = False,
    coordinator: SyncCoordinator = Depends(get_coordinator)
):
    try:
        return coordinator.settlements(group_id, optimize=optimize)
    except SyncError as e:
        raise http_error(e)


@router.get("/groups/{group_id}/summary", response_model=GroupSummary)
async def get_group_summary(
    group_id: str,
    coordinator: SyncCoordinator = Depends(get_coordinator)
):
    try:
        return coordinator.summary(group_id)
    except SyncError as e:
        raise http_error(e)
