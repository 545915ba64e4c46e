"""
Report facade: cache lookup, recomputation on miss, write-back.

Two concurrent misses for the same report both recompute; whichever put
lands last is what the cache holds.
"""
import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from select_start.models.leaderboard_models import (
    ChallengeSummary,
    MonthlyLeaderboardResponse,
    YearlyLeaderboardResponse,
)
from select_start.models.nomination_models import NominationsResponse
from select_start.models.record_models import ChallengePeriod
from select_start.services import periods
from select_start.services.cache import ReportCache, ReportType
from select_start.services.enrichment import GameInfoClient
from select_start.services.errors import NotFoundError, SourceUnavailableError, ValidationError
from select_start.services.nominations import compute_current_nominations
from select_start.services.rankings import POINT_SYSTEM, compute_monthly, compute_yearly
from select_start.utils.helpers import isoformat_utc, utcnow

# Set up logger for this module
logger = logging.getLogger(__name__)

INVALIDATION_TARGETS = {
    "all": [ReportType.MONTHLY, ReportType.YEARLY, ReportType.NOMINATIONS],
    "leaderboards": [ReportType.MONTHLY, ReportType.YEARLY],
    "nominations": [ReportType.NOMINATIONS],
}

MIN_YEAR = 1970
MAX_YEAR = 9998


class AggregationService:
    """Serves monthly, yearly and nomination reports through a ReportCache."""

    def __init__(
        self,
        cache: ReportCache,
        store=None,
        enrichment: Optional[GameInfoClient] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.cache = cache
        self.store = store
        self.enrichment = enrichment
        self.clock = clock

    async def get_report(
        self,
        report_type: ReportType,
        params: Optional[Dict[str, Any]] = None,
        force_refresh: bool = False,
    ) -> Dict[str, Any]:
        """
        Return a report, recomputing it when the cache has nothing fresh

        Args:
            report_type: monthly, yearly or nominations
            params: {'year': int} for yearly reports, ignored otherwise
            force_refresh: clear the cache entry before looking it up

        Raises:
            ValidationError: bad parameters
            NotFoundError: no challenge for the current month (monthly only)
            SourceUnavailableError: the store is missing, failing or timed out
        """
        report_type = ReportType(report_type)
        params = params or {}
        now = self.clock()

        year = None
        if report_type is ReportType.YEARLY:
            year = self._resolve_year(params.get("year"), now)

        if force_refresh:
            logger.info(f"{report_type.value} cache cleared by refresh request")
            self.cache.invalidate(report_type)

        cached = self.cache.get(report_type, now)
        if cached is not None and (year is None or cached.get("year") == year):
            logger.info(f"Serving {report_type.value} report from cache")
            return cached

        if report_type is ReportType.MONTHLY:
            payload = await self.build_monthly(now)
        elif report_type is ReportType.YEARLY:
            payload = await self.build_yearly(year, now)
        else:
            payload = await self.build_nominations(now)

        await asyncio.to_thread(self.cache.put, report_type, payload, now)
        return payload

    def invalidate(self, target: Optional[str]) -> List[ReportType]:
        """Clear the cache entries named by an admin target; idempotent."""
        if target not in INVALIDATION_TARGETS:
            raise ValidationError('Invalid target. Must be "all", "leaderboards", or "nominations"')
        cleared = INVALIDATION_TARGETS[target]
        for report_type in cleared:
            self.cache.invalidate(report_type)
        return cleared

    def _resolve_year(self, value: Any, now: datetime) -> int:
        if value is None:
            return now.year
        try:
            year = int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid year: {value!r}")
        if not MIN_YEAR <= year <= MAX_YEAR:
            raise ValidationError(f"Year must be between {MIN_YEAR} and {MAX_YEAR}")
        return year

    def _require_store(self):
        if self.store is None:
            logger.error("MongoDB not initialized - cannot build report")
            raise SourceUnavailableError("Database is not available")
        return self.store

    async def build_monthly(self, now: datetime) -> Dict[str, Any]:
        store = self._require_store()
        start, end = periods.current_period(now)
        logger.info(f"Finding challenge between {start.isoformat()} and {end.isoformat()}")

        doc = await store.find_challenge(start, end)
        if not doc:
            logger.info("No challenge found for current month")
            raise NotFoundError("No current challenge found")

        period = ChallengePeriod.from_document(doc)
        users = await store.find_all_users()
        leaderboard = compute_monthly(period, users)

        game_info, shadow_info = await self._lookup_games(period)

        challenge = ChallengeSummary(
            monthYear=periods.month_year_label(period.start),
            monthlyGame=period.game_id,
            gameTitle=(game_info and game_info.title) or period.game_title or "Unknown Game",
            gameIconUrl=(game_info and game_info.icon_url) or period.game_icon_url,
            consoleName=(game_info and game_info.console_name) or period.console_name or "Unknown Console",
            totalAchievements=period.game_total,
            endDate=periods.end_of_period_display(period.end),
            timeRemaining=periods.time_remaining(period.end, now),
            shadowGame=period.shadow_game_id if period.shadow_revealed else None,
            shadowGameTitle=shadow_info.title if shadow_info else None,
            shadowRevealed=period.shadow_revealed,
        )

        return MonthlyLeaderboardResponse(
            leaderboard=leaderboard,
            challenge=challenge,
            lastUpdated=isoformat_utc(now),
        ).model_dump(mode="json")

    async def _lookup_games(self, period: ChallengePeriod):
        if self.enrichment is None:
            return None, None
        shadow_id = period.shadow_game_id if period.shadow_revealed else None
        return await asyncio.gather(
            self.enrichment.get_game_info(period.game_id),
            self.enrichment.get_game_info(shadow_id),
        )

    async def build_yearly(self, year: int, now: datetime) -> Dict[str, Any]:
        store = self._require_store()
        logger.info(f"Building yearly leaderboard for {year}")

        users = await store.find_all_users()
        challenges = await store.find_challenges(*periods.year_window(year))
        logger.info(f"Found {len(challenges)} challenges for {year}")

        return YearlyLeaderboardResponse(
            leaderboard=compute_yearly(year, users),
            year=year,
            challengeCount=len(challenges),
            pointSystem=POINT_SYSTEM,
            lastUpdated=isoformat_utc(now),
        ).model_dump(mode="json")

    async def build_nominations(self, now: datetime) -> Dict[str, Any]:
        store = self._require_store()
        users = await store.find_all_users()
        nominations, games = compute_current_nominations(users, now)

        return NominationsResponse(
            nominations=nominations,
            gamesList=games,
            monthYear=periods.month_year_label(now),
            lastUpdated=isoformat_utc(now),
        ).model_dump(mode="json")
