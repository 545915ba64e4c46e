"""
Monthly and yearly leaderboard computation.

Points are always the progress values stored by the bot; nothing here
re-derives a tier from achievement counts.
"""
import logging
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Tuple

from select_start.models.leaderboard_models import (
    LeaderboardEntry,
    PointSystem,
    YearlyLeaderboardEntry,
    YearlyStats,
)
from select_start.models.record_models import (
    PROGRESS_BEATEN,
    PROGRESS_MASTERED,
    PROGRESS_PARTICIPATED,
    ChallengePeriod,
    CommunityAward,
    ProgressRecord,
)
from select_start.services.periods import in_year

# Set up logger for this module
logger = logging.getLogger(__name__)

# Shipped with the yearly response for display only
POINT_SYSTEM = PointSystem()

# Errors that mean "this user's document is malformed"; ValidationError is a ValueError
RECORD_ERRORS = (ValueError, TypeError, AttributeError, KeyError)


def assign_ranks(rows: List[Dict[str, Any]], key: Callable[[Dict[str, Any]], Hashable]) -> List[Dict[str, Any]]:
    """
    Set 'rank' on rows that are already sorted best first.

    A row shares its predecessor's rank when key() is equal for both,
    otherwise its rank is its 1-based position (1, 1, 3, 4, 4, 6...).
    """
    previous = None
    for position, row in enumerate(rows, start=1):
        current = key(row)
        if position > 1 and current == previous:
            row["rank"] = rows[position - 2]["rank"]
        else:
            row["rank"] = position
        previous = current
    return rows


def user_identity(user: Dict[str, Any]) -> Tuple[str, Optional[str]]:
    username = user.get("raUsername")
    if not username or not isinstance(username, str):
        raise ValueError("user document has no raUsername")
    discord_id = user.get("discordId")
    return username, (str(discord_id) if discord_id is not None else None)


def _challenge_map(user: Dict[str, Any], field: str) -> Dict[str, Any]:
    value = user.get(field)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise TypeError(f"{field} is {type(value).__name__}, expected a mapping")
    return value


def _progress_for(user: Dict[str, Any], field: str, key: str) -> Optional[ProgressRecord]:
    raw = _challenge_map(user, field).get(key)
    if raw is None:
        return None
    return ProgressRecord.model_validate(raw)


def compute_monthly(period: ChallengePeriod, users: Iterable[Dict[str, Any]]) -> List[LeaderboardEntry]:
    """
    Rank users on the given challenge period.

    Args:
        period: The current challenge
        users: Raw user documents

    Returns:
        Entries sorted by total points then achievements, users with no points left out
    """
    rows = []

    for user in users:
        try:
            username, discord_id = user_identity(user)

            monthly = _progress_for(user, "monthlyChallenges", period.key) or ProgressRecord()
            shadow = None
            if period.shadow_revealed:
                shadow = _progress_for(user, "shadowChallenges", period.key)

            monthly_points = monthly.progress
            shadow_points = shadow.progress if shadow else 0
            total_points = monthly_points + shadow_points

            if total_points == 0:
                continue

            rows.append({
                "username": username,
                "discordId": discord_id,
                "monthlyPoints": monthly_points,
                "shadowPoints": shadow_points,
                "totalPoints": total_points,
                "percentage": monthly.percentage,
                "achieved": monthly.achievements,
                "achievements": monthly.achievements,
                "totalAchievements": monthly.totalAchievements or period.game_total,
                "gameTitle": monthly.gameTitle or "Unknown Game",
                "gameIconUrl": monthly.gameIconUrl,
            })
        except RECORD_ERRORS as e:
            logger.warning(f"Skipping user {user.get('raUsername') if isinstance(user, dict) else user!r} "
                           f"in monthly leaderboard: {e}")

    rows.sort(key=lambda r: (r["totalPoints"], r["achieved"]), reverse=True)
    assign_ranks(rows, key=lambda r: (r["totalPoints"], r["achieved"]))

    logger.info(f"Monthly leaderboard for {period.key}: {len(rows)} ranked users")
    return [LeaderboardEntry(**row) for row in rows]


def _yearly_row(year: int, user: Dict[str, Any]) -> Dict[str, Any]:
    username, discord_id = user_identity(user)
    stats = YearlyStats()

    monthly_points = 0
    for key, raw in _challenge_map(user, "monthlyChallenges").items():
        if not in_year(key, year):
            continue
        progress = ProgressRecord.model_validate(raw or {}).progress
        monthly_points += progress
        if progress == PROGRESS_MASTERED:
            stats.mastery += 1
        elif progress == PROGRESS_BEATEN:
            stats.beaten += 1
        elif progress == PROGRESS_PARTICIPATED:
            stats.participation += 1

    shadow_points = 0
    for key, raw in _challenge_map(user, "shadowChallenges").items():
        if not in_year(key, year):
            continue
        progress = ProgressRecord.model_validate(raw or {}).progress
        shadow_points += progress
        # Shadow games have no mastery tier
        if progress == PROGRESS_BEATEN:
            stats.shadowBeaten += 1
        elif progress == PROGRESS_PARTICIPATED:
            stats.shadowParticipation += 1

    community_points = 0
    for raw in user.get("communityAwards") or []:
        award = CommunityAward.model_validate(raw)
        if award.awardedAt is not None and award.awardedAt.year == year:
            community_points += award.points

    return {
        "username": username,
        "discordId": discord_id,
        "monthlyPoints": monthly_points,
        "shadowPoints": shadow_points,
        "communityPoints": community_points,
        "yearlyPoints": monthly_points + shadow_points + community_points,
        "stats": stats,
    }


def compute_yearly(year: int, users: Iterable[Dict[str, Any]]) -> List[YearlyLeaderboardEntry]:
    """
    Rank users on everything they earned in `year`.

    Challenge records count when their period key starts with the year;
    community awards count by the calendar year they were awarded in.
    Ties on yearly points share a rank and keep encounter order.
    """
    rows = []

    for user in users:
        try:
            row = _yearly_row(year, user)
        except RECORD_ERRORS as e:
            logger.warning(f"Skipping user {user.get('raUsername') if isinstance(user, dict) else user!r} "
                           f"in yearly leaderboard: {e}")
            continue
        if row["yearlyPoints"] <= 0:
            continue
        rows.append(row)

    rows.sort(key=lambda r: r["yearlyPoints"], reverse=True)
    assign_ranks(rows, key=lambda r: r["yearlyPoints"])

    logger.info(f"Yearly leaderboard for {year}: {len(rows)} ranked users")
    return [YearlyLeaderboardEntry(**row) for row in rows]
