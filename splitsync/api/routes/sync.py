"""
Sync status and control routes.
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from splitsync.api.dependencies import get_coordinator
from splitsync.schemas.sync import PendingOperation, SyncStatusResponse
from splitsync.services.sync_service import SyncCoordinator

router = APIRouter(prefix="/sync", tags=["sync"])


class ConnectivityUpdate(BaseModel):
    online: bool


@router.get("/status", response_model=SyncStatusResponse)
async def get_sync_status(coordinator: SyncCoordinator = Depends(get_coordinator)):
    return coordinator.status_report()


@router.get("/pending", response_model=List[PendingOperation])
async def get_pending_operations(coordinator: SyncCoordinator = Depends(get_coordinator)):
    """Queued operations waiting for the remote store, oldest first."""
    return coordinator.pending_operations()


@router.get("/dropped", response_model=List[PendingOperation])
async def get_dropped_operations(coordinator: SyncCoordinator = Depends(get_coordinator)):
    """Operations given up on after repeated failures."""
    return coordinator.dropped_operations()


@router.post("/run", response_model=SyncStatusResponse)
async def run_sync(
    include_deletions: bool = False,
    coordinator: SyncCoordinator = Depends(get_coordinator)
):
    """Run one sync pass now."""
    if not coordinator.is_online:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Cannot sync while offline"
        )
    ok = await coordinator.run_sync(include_deletions=include_deletions)
    if not ok:
        alert = coordinator.errors.current
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=alert.message if alert else "Sync failed"
        )
    return coordinator.status_report()


@router.post("/connectivity", response_model=SyncStatusResponse)
async def set_connectivity(
    update: ConnectivityUpdate,
    coordinator: SyncCoordinator = Depends(get_coordinator)
):
    """Record a network transition; going online starts a sync pass."""
    await coordinator.set_online(update.online)
    return coordinator.status_report()


@router.delete("/local-data", status_code=status.HTTP_204_NO_CONTENT)
async def clear_local_data(coordinator: SyncCoordinator = Depends(get_coordinator)):
    await coordinator.clear_local_data()
