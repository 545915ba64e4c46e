# /select_start/api/endpoints/leaderboard.py
"""
Leaderboard API endpoints - monthly and yearly standings
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from typing import Dict, Any, Optional

from select_start.api.dependencies import api_key_auth, get_service, raise_http
from select_start.models.leaderboard_models import MonthlyLeaderboardResponse, YearlyLeaderboardResponse
from select_start.services.cache import ReportType
from select_start.services.errors import AggregationError

# Set up logger for this module
logger = logging.getLogger(__name__)

# Create router
router = APIRouter()


@router.get(
    "/leaderboard/monthly",
    summary="Get the monthly challenge leaderboard",
    description="Rank users on the current month's challenge. Cached for 15 minutes unless refresh=true.",
    response_model=MonthlyLeaderboardResponse,
    dependencies=[Depends(api_key_auth)],
    responses={
        200: {"description": "Successfully retrieved the monthly leaderboard", "model": MonthlyLeaderboardResponse},
        401: {"description": "Unauthorized - Invalid API key"},
        404: {"description": "No current challenge found"},
        503: {"description": "Database unavailable"},
        500: {"description": "Internal Server Error"}
    }
)
async def get_monthly_leaderboard(
    request: Request,
    refresh: bool = Query(False, description="Recompute even if a cached leaderboard is fresh"),
    force_refresh: bool = Query(False, alias="forceRefresh", description="Same as refresh"),
) -> Dict[str, Any]:
    """
    GET endpoint for the monthly leaderboard.

    - Requires valid API key in the x-api-key header
    - Users with no points this month are left out
    - Users tied on points and achievements share a rank
    """
    try:
        logger.info(f"GET /leaderboard/monthly (refresh={refresh or force_refresh})")
        return await get_service(request).get_report(ReportType.MONTHLY, force_refresh=refresh or force_refresh)
    except AggregationError as e:
        raise_http(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error fetching monthly leaderboard: {str(e)}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get(
    "/leaderboard/yearly",
    summary="Get the yearly leaderboard",
    description="Rank users on all challenge and community award points for a year. Cached for 30 minutes unless refresh=true.",
    response_model=YearlyLeaderboardResponse,
    dependencies=[Depends(api_key_auth)],
    responses={
        200: {"description": "Successfully retrieved the yearly leaderboard", "model": YearlyLeaderboardResponse},
        400: {"description": "Invalid year"},
        401: {"description": "Unauthorized - Invalid API key"},
        503: {"description": "Database unavailable"},
        500: {"description": "Internal Server Error"}
    }
)
async def get_yearly_leaderboard(
    request: Request,
    year: Optional[int] = Query(None, description="Year to rank, defaults to the current year"),
    refresh: bool = Query(False, description="Recompute even if a cached leaderboard is fresh"),
    force_refresh: bool = Query(False, alias="forceRefresh", description="Same as refresh"),
) -> Dict[str, Any]:
    """
    GET endpoint for the yearly leaderboard.

    - Requires valid API key in the x-api-key header
    - pointSystem in the response is for display; points come from stored progress
    """
    try:
        logger.info(f"GET /leaderboard/yearly (year={year}, refresh={refresh or force_refresh})")
        return await get_service(request).get_report(
            ReportType.YEARLY,
            params={"year": year},
            force_refresh=refresh or force_refresh,
        )
    except AggregationError as e:
        raise_http(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error fetching yearly leaderboard: {str(e)}")
        raise HTTPException(status_code=500, detail="Internal server error")
