# /select_start/models/admin_models.py
"""
Pydantic models for admin endpoints.
"""
from pydantic import BaseModel, Field
from typing import List, Optional


class ForceUpdateRequest(BaseModel):
    """Request model for cache invalidation."""
    # Checked by the service so an unknown target is a 400, not a 422
    target: Optional[str] = Field(None, description="'all', 'leaderboards' or 'nominations'")


class ForceUpdateResponse(BaseModel):
    """Response model for cache invalidation."""
    status: str
    message: str
    cleared: List[str] = Field(..., description="Report types whose cache entry was cleared")
