"""
Health check endpoint.

Used by:
  - Docker HEALTHCHECK instruction
  - Load balancers / orchestrators
  - The mobile app to check API connectivity

Returns status + Gemini state so callers can tell "API down" apart from
"API up but serving curated hotspots only".
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from gigmate.ai.hotspot_service import HotspotService
from gigmate.core.config import settings
from gigmate.core.dependencies import get_hotspot_service

logger = logging.getLogger(__name__)
router = APIRouter()


class HealthResponse(BaseModel):
    status: str  # Always "ok" if the API process is alive
    version: str
    gemini: str  # "configured" | "mock" | "disabled"
    environment: str


@router.get("", response_model=HealthResponse, summary="API health check")
async def health_check(service: HotspotService = Depends(get_hotspot_service)) -> HealthResponse:
    """
    Returns the liveness status of the API and the AI backend state.

    A missing Gemini key is reported, not treated as unhealthy: the demand
    map keeps working on the fallback dataset.
    """
    if service.client is None:
        gemini = "disabled"
    elif service.client.mock_mode:
        gemini = "mock"
    else:
        gemini = "configured"

    return HealthResponse(
        status="ok",
        version="0.1.0",
        gemini=gemini,
        environment=settings.environment,
    )
