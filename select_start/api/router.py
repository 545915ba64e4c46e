"""
API router that includes all endpoint routers.
"""
from fastapi import APIRouter
from select_start.api.endpoints import (
    leaderboard,
    nominations,
    admin
)

# Create main router
router = APIRouter()

# Include all endpoint routers
router.include_router(leaderboard.router, tags=["Leaderboards"])
router.include_router(nominations.router, tags=["Nominations"])
router.include_router(admin.router, tags=["Admin"])
