"""
hotspot_request.py — Builds the Gemini request for a hotspot query.

LIVE and PREDICTED share the output contract and differ in what they ask:

    LIVE       5 current hotspots within 35 km
    PREDICTED  5 hotspots for the next 4 hours within 100 km, accounting
               for weather, time of day and events

The response schema below is a hard contract. hotspot_service parses
against the same shape and rejects anything else instead of repairing it.
"""

from dataclasses import dataclass, field
from typing import Any, Sequence

from gigmate.ai.gemini_client import GeminiModel
from gigmate.models.hotspot import FetchMode
from gigmate.models.location import LocationQuery, Named
from gigmate.services.location import centroid_for

LIVE_RADIUS_KM = 35
FORECAST_RADIUS_KM = 100
FORECAST_HORIZON_HOURS = 4
HOTSPOT_COUNT = 5

_FIELD_GUIDE = """Return JSON format.
area: name of locality,
intensity: number 1 to 10,
demandReason: short reason (e.g. '{reason_example}'),
expectedIncentive: price string (e.g. '₹50'),
distance: distance string (e.g. '1.2 km'),
coordinates: {{lat: number, lng: number}} (exact latitude and longitude)."""

_LIVE_PROMPT = """List {count} high-demand {platforms} hotspots within a {radius}km radius of {location}.
Focus strictly on the selected city and its immediate surrounding districts within this range.
""" + _FIELD_GUIDE

_FORECAST_PROMPT = """Predict {count} demand hotspots for the next {hours} hours within {radius}km radius of {location}.
{platforms}
Consider weather, time of day, and events.
""" + _FIELD_GUIDE

HOTSPOT_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "area": {"type": "STRING"},
            "intensity": {"type": "NUMBER"},
            "demandReason": {"type": "STRING"},
            "expectedIncentive": {"type": "STRING"},
            "distance": {"type": "STRING"},
            "coordinates": {
                "type": "OBJECT",
                "properties": {
                    "lat": {"type": "NUMBER"},
                    "lng": {"type": "NUMBER"},
                },
                "required": ["lat", "lng"],
            },
        },
        "required": [
            "area", "intensity", "demandReason",
            "expectedIncentive", "distance", "coordinates",
        ],
    },
}


@dataclass(frozen=True)
class HotspotRequest:
    mode: FetchMode
    model: str
    prompt: str
    radius_km: int
    response_key: str
    generation_config: dict[str, Any] = field(default_factory=dict)


def serialize_location(location: LocationQuery) -> str:
    """A city is sent as free text; anything else as a "lat, lng" pair."""
    if isinstance(location, Named):
        return location.city_name
    center = centroid_for(location)
    return f"{center.lat}, {center.lng}"


def build_hotspot_request(
    location: LocationQuery,
    platforms: Sequence[str],
    mode: FetchMode,
    model: str = GeminiModel.FLASH.value,
) -> HotspotRequest:
    location_str = serialize_location(location)
    generation_config = {
        "response_mime_type": "application/json",
        "response_schema": HOTSPOT_RESPONSE_SCHEMA,
    }

    if mode is FetchMode.LIVE:
        prompt = _LIVE_PROMPT.format(
            count=HOTSPOT_COUNT,
            platforms=", ".join(platforms) if platforms else "gig worker",
            radius=LIVE_RADIUS_KM,
            location=location_str,
            reason_example="Office exit",
        )
        return HotspotRequest(
            mode=mode,
            model=model,
            prompt=prompt,
            radius_km=LIVE_RADIUS_KM,
            response_key="hotspots_live",
            generation_config=generation_config,
        )

    prompt = _FORECAST_PROMPT.format(
        count=HOTSPOT_COUNT,
        hours=FORECAST_HORIZON_HOURS,
        radius=FORECAST_RADIUS_KM,
        location=location_str,
        platforms=f"Platforms: {', '.join(platforms)}." if platforms else "",
        reason_example="Rain expected",
    )
    return HotspotRequest(
        mode=mode,
        model=model,
        prompt=prompt,
        radius_km=FORECAST_RADIUS_KM,
        response_key="hotspots_forecast",
        generation_config=generation_config,
    )
