"""
demand.py — Demand map routes.

Routes:
  POST   /api/v1/demand/sessions                  — open a map session
  GET    /api/v1/demand/sessions/{id}             — poll {hotspots, loading, ...}
  PUT    /api/v1/demand/sessions/{id}/mode        — LIVE ⇄ PREDICTED toggle
  PUT    /api/v1/demand/sessions/{id}/platforms   — subscribed platforms changed
  PUT    /api/v1/demand/sessions/{id}/city        — profile city changed
  POST   /api/v1/demand/sessions/{id}/refresh     — manual refresh (rate limited)
  POST   /api/v1/demand/sessions/{id}/location    — device fix or sensor error
  DELETE /api/v1/demand/sessions/{id}             — map view torn down
  GET    /api/v1/demand/hotspots                  — one-shot query, no session

HOW THE DATA FLOWS
──────────────────
1. The app opens a session when the map tab mounts. The response already
   carries loading=true and a usable map centre (profile city centroid).
2. In parallel it asks the phone for a low-accuracy fix and posts the
   result (or the error code) to /location within ~5 s.
3. Every change goes through the session's debounce; the client polls
   GET /sessions/{id} until loading=false.
4. hotspots is never empty: when Gemini is unavailable the curated list is
   returned and source="fallback".
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from gigmate.ai.hotspot_service import HotspotService
from gigmate.core.config import settings
from gigmate.core.dependencies import get_hotspot_service, get_registry
from gigmate.core.rate_limit import limiter
from gigmate.models.demand import (
    CityUpdate,
    CreateSessionRequest,
    DemandSnapshot,
    LocationReport,
    ModeUpdate,
    PlatformsUpdate,
)
from gigmate.models.hotspot import DataSource, FetchMode, Hotspot
from gigmate.models.location import Named, Precise
from gigmate.services.pipeline import DemandPipeline
from gigmate.services.session import DemandSession, SessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/demand", tags=["demand"])


def _session_or_404(registry: SessionRegistry, session_id: str) -> DemandSession:
    session = registry.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


# ── Sessions ──────────────────────────────────────────────────────────────────

@router.post("/sessions", response_model=DemandSnapshot, status_code=status.HTTP_201_CREATED)
async def create_session(
    payload: CreateSessionRequest,
    registry: SessionRegistry = Depends(get_registry),
):
    session = registry.create(city=payload.city, platforms=payload.platforms, mode=payload.mode)
    return session.snapshot()


@router.get("/sessions/{session_id}", response_model=DemandSnapshot)
async def get_session(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    return _session_or_404(registry, session_id).snapshot()


@router.put("/sessions/{session_id}/mode", response_model=DemandSnapshot)
async def update_mode(
    session_id: str,
    payload: ModeUpdate,
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session_or_404(registry, session_id)
    session.set_mode(payload.mode)
    return session.snapshot()


@router.put("/sessions/{session_id}/platforms", response_model=DemandSnapshot)
async def update_platforms(
    session_id: str,
    payload: PlatformsUpdate,
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session_or_404(registry, session_id)
    session.set_platforms(payload.platforms)
    return session.snapshot()


@router.put("/sessions/{session_id}/city", response_model=DemandSnapshot)
async def update_city(
    session_id: str,
    payload: CityUpdate,
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session_or_404(registry, session_id)
    session.set_city(payload.city)
    return session.snapshot()


@router.post("/sessions/{session_id}/refresh", response_model=DemandSnapshot)
@limiter.limit("30/minute")
async def refresh_session(
    request: Request,
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session_or_404(registry, session_id)
    session.refresh()
    return session.snapshot()


@router.post("/sessions/{session_id}/location", response_model=DemandSnapshot)
async def report_location(
    session_id: str,
    payload: LocationReport,
    registry: SessionRegistry = Depends(get_registry),
):
    """
    Device geolocation result. Errors are soft: the session keeps its
    city-based location and the call still returns 200.
    """
    session = _session_or_404(registry, session_id)
    if payload.error is not None:
        try:
            session.report_sensor_error(payload.error)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
    else:
        session.report_position(payload.lat, payload.lng)
    return session.snapshot()


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    if not await registry.close(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ── One-shot ──────────────────────────────────────────────────────────────────

@router.get("/hotspots", response_model=list[Hotspot])
async def get_hotspots(
    response: Response,
    mode: FetchMode = Query(default=FetchMode.LIVE),
    city: Optional[str] = Query(default=None, max_length=100),
    lat: Optional[float] = Query(default=None, ge=-90, le=90),
    lng: Optional[float] = Query(default=None, ge=-180, le=180),
    platforms: list[str] = Query(default=[]),
    service: HotspotService = Depends(get_hotspot_service),
):
    """
    Run the pipeline once without a session (widgets, notifications).
    A lat/lng pair wins over city. X-Data-Source tells live / forecast /
    fallback apart.
    """
    if lat is not None and lng is not None:
        location = Precise(lat=lat, lng=lng)
    else:
        location = Named(city or settings.default_city)

    pipeline = DemandPipeline(service)
    hotspots = await pipeline.run(location, mode, platforms)
    response.headers["X-Data-Source"] = (pipeline.last_source or DataSource.FALLBACK).value
    return hotspots
