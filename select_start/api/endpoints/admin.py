# /select_start/api/endpoints/admin.py
"""
Admin endpoints - cache control
"""
import logging
from fastapi import APIRouter, Body, Depends, HTTPException, Request
from typing import Dict, Any, Optional

from select_start.api.dependencies import admin_api_key_auth, get_service, raise_http
from select_start.models.admin_models import ForceUpdateRequest, ForceUpdateResponse
from select_start.services.errors import AggregationError

# Set up logger for this module
logger = logging.getLogger(__name__)

# Create router
router = APIRouter()


@router.post(
    "/admin/force-update",
    summary="Clear cached reports",
    description="Clear cached leaderboards and/or nominations so the next request recomputes them.",
    response_model=ForceUpdateResponse,
    dependencies=[Depends(admin_api_key_auth)],
    responses={
        200: {"description": "Cache cleared", "model": ForceUpdateResponse},
        400: {"description": "Invalid target"},
        403: {"description": "Forbidden - Admin API key required"},
        500: {"description": "Internal Server Error"}
    }
)
async def force_update(
    request: Request,
    body: Optional[ForceUpdateRequest] = Body(None),
) -> Dict[str, Any]:
    """
    POST endpoint to invalidate cache entries.

    - Requires the admin API key in the x-api-key header
    - target=all clears everything, leaderboards clears monthly and yearly,
      nominations clears nominations only
    - Clearing an already empty entry is not an error
    """
    try:
        target = body.target if body else None
        cleared = get_service(request).invalidate(target)
        logger.info(f"Admin cleared cache for {target}")
        return {
            "status": "success",
            "message": f"Cleared cache for {target}. Data will be refreshed on next request.",
            "cleared": [t.value for t in cleared],
        }
    except AggregationError as e:
        raise_http(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error in force update: {str(e)}")
        raise HTTPException(status_code=500, detail="Internal server error")
