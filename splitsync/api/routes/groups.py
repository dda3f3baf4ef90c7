"""
Group and expense routes. Writes land in the local cache first and are
queued for the remote store.
"""
from typing import List
from fastapi import APIRouter, Depends, status
from splitsync.api.dependencies import get_coordinator, http_error
from splitsync.core.errors import SyncError
from splitsync.schemas.expense import Expense, ExpenseCreate
from splitsync.schemas.group import Group, GroupCreate
from splitsync.services.sync_service import SyncCoordinator

router = APIRouter(tags=["groups"])


@router.get("/groups", response_model=List[Group])
async def list_groups(
    active_only: bool = True,
    coordinator: SyncCoordinator = Depends(get_coordinator)
):
    """List local groups with look-alike duplicates collapsed."""
    return coordinator.groups(active_only=active_only)


@router.post("/groups", response_model=Group, status_code=status.HTTP_201_CREATED)
async def create_group(
    group_data: GroupCreate,
    coordinator: SyncCoordinator = Depends(get_coordinator)
):
    """Create a group, or return an existing one that looks the same."""
    try:
        return await coordinator.create_group(
            group_data.name, group_data.participants, currency=group_data.currency
        )
    except SyncError as e:
        raise http_error(e)


@router.get("/groups/{group_id}", response_model=Group)
async def get_group(
    group_id: str,
    coordinator: SyncCoordinator = Depends(get_coordinator)
):
    try:
        return coordinator.group(group_id)
    except SyncError as e:
        raise http_error(e)


@router.put("/groups/{group_id}", response_model=Group)
async def update_group(
    group_id: str,
    group: Group,
    coordinator: SyncCoordinator = Depends(get_coordinator)
):
    try:
        coordinator.group(group_id)
        group.id = group_id
        return await coordinator.save_group(group)
    except SyncError as e:
        raise http_error(e)


@router.delete("/groups/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_group(
    group_id: str,
    coordinator: SyncCoordinator = Depends(get_coordinator)
):
    try:
        await coordinator.delete_group(group_id)
    except SyncError as e:
        raise http_error(e)


@router.get("/groups/{group_id}/expenses", response_model=List[Expense])
async def list_expenses(
    group_id: str,
    coordinator: SyncCoordinator = Depends(get_coordinator)
):
    """Expenses of a group, newest first."""
    try:
        coordinator.group(group_id)
    except SyncError as e:
        raise http_error(e)
    return coordinator.expenses(group_id)


@router.post("/expenses", response_model=Expense, status_code=status.HTTP_201_CREATED)
async def create_expense(
    expense_data: ExpenseCreate,
    coordinator: SyncCoordinator = Depends(get_coordinator)
):
    expense = Expense(**expense_data.model_dump(exclude_none=True))
    try:
        return await coordinator.save_expense(expense)
    except SyncError as e:
        raise http_error(e)


@router.put("/expenses/{expense_id}", response_model=Expense)
async def update_expense(
    expense_id: str,
    expense: Expense,
    coordinator: SyncCoordinator = Depends(get_coordinator)
):
    expense.id = expense_id
    try:
        return await coordinator.save_expense(expense)
    except SyncError as e:
        raise http_error(e)


@router.delete("/expenses/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: str,
    coordinator: SyncCoordinator = Depends(get_coordinator)
):
    try:
        await coordinator.delete_expense(expense_id)
    except SyncError as e:
        raise http_error(e)
