"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from splitsync.api.routes import balances, groups, sync

api_router = APIRouter()

# Include all route modules
api_router.include_router(groups.router)
api_router.include_router(balances.router)
api_router.include_router(sync.router)
