# /select_start/models/leaderboard_models.py
"""
Pydantic models for leaderboard-related endpoints.
"""
from pydantic import BaseModel, Field
from typing import List, Optional


class LeaderboardEntry(BaseModel):
    """Model for a single monthly leaderboard entry."""
    username: str = Field(..., description="RetroAchievements username")
    discordId: Optional[str] = Field(None, description="Discord user ID")
    monthlyPoints: int = Field(..., description="Points from the monthly challenge (stored progress tier)")
    shadowPoints: int = Field(0, description="Points from the shadow challenge, 0 while it is hidden")
    totalPoints: int = Field(..., description="monthlyPoints + shadowPoints")
    percentage: float = Field(0.0, description="Completion percentage recorded by the bot")
    achieved: int = Field(0, description="Achievements earned in the monthly game")
    achievements: int = Field(0, description="Same as achieved")
    totalAchievements: Optional[int] = Field(None, description="Achievements in the monthly game")
    gameTitle: str = Field("Unknown Game", description="Game title recorded with the user's progress")
    gameIconUrl: Optional[str] = None
    rank: int = Field(..., description="Competition rank; equal points and achievements share a rank")


class ChallengeSummary(BaseModel):
    """Current challenge details shown above the leaderboard."""
    monthYear: str = Field(..., description="e.g. 'April 2025'")
    monthlyGame: str = Field(..., description="RetroAchievements game ID of the monthly game")
    gameTitle: str
    gameIconUrl: Optional[str] = None
    consoleName: str
    totalAchievements: int
    endDate: str = Field(..., description="e.g. 'April 30th, 2025 at 11:59 PM'")
    timeRemaining: str = Field(..., description="e.g. '3 days and 4 hours'")
    shadowGame: Optional[str] = Field(None, description="Shadow game ID, only once revealed")
    shadowGameTitle: Optional[str] = None
    shadowRevealed: bool = False


class MonthlyLeaderboardResponse(BaseModel):
    """Response model for the monthly leaderboard endpoint."""
    leaderboard: List[LeaderboardEntry]
    challenge: ChallengeSummary
    lastUpdated: str = Field(..., description="When the leaderboard was computed (ISO-8601)")


class YearlyStats(BaseModel):
    mastery: int = 0
    beaten: int = 0
    participation: int = 0
    shadowBeaten: int = 0
    shadowParticipation: int = 0


class YearlyLeaderboardEntry(BaseModel):
    """Model for a single yearly leaderboard entry."""
    username: str
    discordId: Optional[str] = None
    monthlyPoints: int = Field(0, description="Monthly challenge points earned in the year")
    shadowPoints: int = Field(0, description="Shadow challenge points earned in the year")
    communityPoints: int = Field(0, description="Community award points awarded in the year")
    yearlyPoints: int = Field(..., description="Sum of monthly, shadow and community points")
    rank: int
    stats: YearlyStats


class PointSystem(BaseModel):
    """Display-only description of what each tier is worth."""
    mastery: int = 7
    beaten: int = 4
    participation: int = 1
    shadowBeaten: int = 4
    shadowParticipation: int = 1


class YearlyLeaderboardResponse(BaseModel):
    """Response model for the yearly leaderboard endpoint."""
    leaderboard: List[YearlyLeaderboardEntry]
    year: int
    challengeCount: int = Field(0, description="Challenges stored for the year")
    pointSystem: PointSystem
    lastUpdated: str
