# /select_start/models/record_models.py
"""
Pydantic models for the documents the Discord bot writes to MongoDB.

Only the fields the reports read are declared; anything else on the stored
documents is ignored.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, Optional
from datetime import datetime

from select_start.services.periods import current_period, period_key
from select_start.utils.helpers import ensure_utc, parse_datetime

PROGRESS_NONE = 0
PROGRESS_PARTICIPATED = 1
PROGRESS_BEATEN = 2
PROGRESS_MASTERED = 3


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


class ProgressRecord(BaseModel):
    """One user's standing in one challenge track for one period."""
    progress: int = Field(PROGRESS_NONE, description="0 none, 1 participated, 2 beaten, 3 mastered")
    achievements: int = Field(0, description="Achievements earned in the challenge game")
    totalAchievements: Optional[int] = Field(None, description="Achievement total when the record was written")
    percentage: float = Field(0.0, description="Completion percentage when the record was written")
    gameTitle: Optional[str] = None
    gameIconUrl: Optional[str] = None

    @field_validator("progress", "achievements", mode="before")
    @classmethod
    def null_as_zero(cls, v):
        return 0 if v is None else v

    @field_validator("percentage", mode="before")
    @classmethod
    def null_percentage(cls, v):
        return 0.0 if v is None or v == "" else v


class CommunityAward(BaseModel):
    """Bonus points handed out by admins."""
    title: Optional[str] = None
    points: int = 0
    awardedAt: Optional[datetime] = None
    awardedBy: Optional[str] = None

    @field_validator("points", mode="before")
    @classmethod
    def null_points(cls, v):
        return 0 if v is None else v

    @field_validator("awardedAt", mode="before")
    @classmethod
    def parse_awarded_at(cls, v):
        return parse_datetime(v)


class NominationRecord(BaseModel):
    """A user's proposal of a game for the next challenge."""
    gameId: str
    gameTitle: Optional[str] = None
    consoleName: Optional[str] = None
    nominatedAt: datetime

    @field_validator("gameId", mode="before")
    @classmethod
    def game_id_as_str(cls, v):
        if v is None or v == "":
            raise ValueError("gameId is required")
        return str(v)

    @field_validator("nominatedAt", mode="before")
    @classmethod
    def parse_nominated_at(cls, v):
        parsed = parse_datetime(v)
        if parsed is None:
            raise ValueError("nominatedAt is required")
        return parsed


class ChallengePeriod(BaseModel):
    """A monthly challenge, normalised from its stored document."""
    start: datetime
    end: datetime
    key: str
    game_id: str
    game_total: int
    shadow_game_id: Optional[str] = None
    shadow_game_total: Optional[int] = None
    shadow_revealed: bool = False
    game_title: Optional[str] = None
    game_icon_url: Optional[str] = None
    console_name: Optional[str] = None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "ChallengePeriod":
        """
        Build a period from a stored challenge document

        The period runs from the challenge date to the first instant of the
        following calendar month.
        """
        start = parse_datetime(doc.get("date"))
        if start is None:
            raise ValueError("Challenge document has no date")
        start = ensure_utc(start)
        _, end = current_period(start)
        return cls(
            start=start,
            end=end,
            key=period_key(start),
            game_id=_optional_str(doc.get("monthly_challange_gameid")) or "",
            game_total=doc.get("monthly_challange_game_total") or 0,
            shadow_game_id=_optional_str(doc.get("shadow_challange_gameid")),
            shadow_game_total=doc.get("shadow_challange_game_total"),
            shadow_revealed=bool(doc.get("shadow_challange_revealed", False)),
            game_title=doc.get("monthly_game_title"),
            game_icon_url=doc.get("monthly_game_icon_url"),
            console_name=doc.get("monthly_game_console"),
        )
