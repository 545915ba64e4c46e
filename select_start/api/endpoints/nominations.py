# /select_start/api/endpoints/nominations.py
"""
Nominations API endpoint
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from typing import Dict, Any

from select_start.api.dependencies import api_key_auth, get_service, raise_http
from select_start.models.nomination_models import NominationsResponse
from select_start.services.cache import ReportType
from select_start.services.errors import AggregationError

# Set up logger for this module
logger = logging.getLogger(__name__)

# Create router
router = APIRouter()


@router.get(
    "/nominations",
    summary="Get this month's game nominations",
    description="List every nomination made this calendar month plus nominated games ordered by popularity.",
    response_model=NominationsResponse,
    dependencies=[Depends(api_key_auth)],
    responses={
        200: {"description": "Successfully retrieved nominations", "model": NominationsResponse},
        401: {"description": "Unauthorized - Invalid API key"},
        503: {"description": "Database unavailable"},
        500: {"description": "Internal Server Error"}
    }
)
async def get_nominations(
    request: Request,
    refresh: bool = Query(False, description="Recompute even if cached nominations are fresh"),
    force_refresh: bool = Query(False, alias="forceRefresh", description="Same as refresh"),
) -> Dict[str, Any]:
    try:
        return await get_service(request).get_report(ReportType.NOMINATIONS, force_refresh=refresh or force_refresh)
    except AggregationError as e:
        raise_http(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error fetching nominations: {str(e)}")
        raise HTTPException(status_code=500, detail="Internal server error")
