"""
Current-month nomination aggregation.

"Current" means the nomination's calendar month and year match the reference
instant. This is deliberately independent of challenge period lookup.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Tuple

from pydantic import ValidationError

from select_start.models.nomination_models import GameNominations, NominationEntry
from select_start.models.record_models import NominationRecord
from select_start.services.rankings import user_identity
from select_start.utils.helpers import ensure_utc

# Set up logger for this module
logger = logging.getLogger(__name__)

UNKNOWN_GAME = "Unknown Game"
UNKNOWN_CONSOLE = "Unknown Console"


def is_current(nominated_at: datetime, reference: datetime) -> bool:
    nominated_at = ensure_utc(nominated_at)
    reference = ensure_utc(reference)
    return nominated_at.year == reference.year and nominated_at.month == reference.month


def compute_current_nominations(
    users: Iterable[Dict[str, Any]],
    reference: datetime,
) -> Tuple[List[NominationEntry], List[GameNominations]]:
    """
    Collect this month's nominations and rank games by popularity

    Args:
        users: Raw user documents
        reference: Instant whose calendar month counts as current

    Returns:
        (every current nomination, games sorted by number of distinct nominators)
    """
    nominations: List[NominationEntry] = []
    by_game: Dict[str, Dict[str, Any]] = {}

    for user in users:
        try:
            username, discord_id = user_identity(user)
            raw_nominations = user.get("nominations") or []
            if not isinstance(raw_nominations, list):
                raise TypeError("nominations is not a list")
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Skipping user in nominations: {e}")
            continue

        for raw in raw_nominations:
            try:
                record = NominationRecord.model_validate(raw)
            except ValidationError as e:
                logger.warning(f"Skipping malformed nomination from {username}: {e.error_count()} error(s)")
                continue

            if not is_current(record.nominatedAt, reference):
                continue

            title = record.gameTitle or UNKNOWN_GAME
            console = record.consoleName or UNKNOWN_CONSOLE

            nominations.append(NominationEntry(
                username=username,
                discordId=discord_id,
                gameId=record.gameId,
                gameTitle=title,
                consoleName=console,
                nominatedAt=record.nominatedAt,
            ))

            game = by_game.setdefault(record.gameId, {
                "gameId": record.gameId,
                "gameTitle": title,
                "consoleName": console,
                "nominatedBy": [],
            })
            if username not in game["nominatedBy"]:
                game["nominatedBy"].append(username)

    games = [
        GameNominations(count=len(game["nominatedBy"]), **game)
        for game in by_game.values()
    ]
    # sorted() is stable, so ties keep the order games were first nominated in
    games = sorted(games, key=lambda g: g.count, reverse=True)

    logger.info(f"Found {len(nominations)} current nominations across {len(games)} games")
    return nominations, games
