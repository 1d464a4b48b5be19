"""
FastAPI dependencies for the process-wide services.

Everything is built once in main.lifespan and parked on app.state. Routes
ask for it with Depends(...) so tests can swap any piece through
app.dependency_overrides without touching module globals.
"""

from fastapi import Request

from gigmate.ai.advice_service import AdviceService
from gigmate.ai.hotspot_service import HotspotService
from gigmate.services.session import SessionRegistry


def get_hotspot_service(request: Request) -> HotspotService:
    return request.app.state.hotspot_service


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_advice_service(request: Request) -> AdviceService:
    return request.app.state.advice_service
