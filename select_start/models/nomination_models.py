# /select_start/models/nomination_models.py
"""
Pydantic models for the nominations endpoint.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class NominationEntry(BaseModel):
    """One nomination made this month."""
    username: str
    discordId: Optional[str] = None
    gameId: str
    gameTitle: str = "Unknown Game"
    consoleName: str = "Unknown Console"
    nominatedAt: datetime


class GameNominations(BaseModel):
    """All nominations for one game."""
    gameId: str
    gameTitle: str
    consoleName: str
    count: int = Field(..., description="Number of distinct users who nominated the game")
    nominatedBy: List[str] = Field(default_factory=list, description="Nominating usernames, first nomination first")


class NominationsResponse(BaseModel):
    """Response model for the nominations endpoint."""
    nominations: List[NominationEntry]
    gamesList: List[GameNominations] = Field(..., description="Games ordered by popularity")
    monthYear: str
    lastUpdated: str
