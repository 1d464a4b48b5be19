"""
hotspot.py — Pydantic models for demand hotspots.

Two layers of validation
────────────────────────
HotspotPayload mirrors the response schema declared to Gemini: types only,
checked strictly. A NUMBER must be a JSON number (an integer is fine), so
"7", true or "30.7" are not coerced.
A payload that does not match it is a malformed response and fails the
whole attempt.

Hotspot carries the invariants (intensity 1–10, valid lat/lng, non-empty
area). A payload element that matches the shape but breaks an invariant
is dropped on its own; the rest of the list survives.

Wire names are camelCase (demandReason, expectedIncentive) to match both
the Gemini schema and the mobile client; Python code uses snake_case.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictStr


class FetchMode(str, Enum):
    LIVE = "LIVE"            # demand right now, 35 km radius
    PREDICTED = "PREDICTED"  # next few hours, 100 km radius


class DataSource(str, Enum):
    """Where the list currently on screen came from (freshness indicator)."""

    LIVE = "live"
    FORECAST = "forecast"
    FALLBACK = "fallback"


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class Hotspot(BaseModel):
    """A scored geographic point representing expected order/ride demand."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, str_strip_whitespace=True)

    area:               str = Field(..., min_length=1)       # locality display name
    intensity:          int = Field(..., ge=1, le=10)        # demand score
    demand_reason:      str = Field(default="", alias="demandReason")       # e.g. "Office exit"
    expected_incentive: str = Field(default="", alias="expectedIncentive")  # e.g. "₹50"
    distance:           str = ""                             # e.g. "1.2 km"
    coordinates:        Coordinates


# ── Response-shape models (what Gemini is told to emit) ───────────────────────

class CoordinatesPayload(BaseModel):
    lat: StrictFloat
    lng: StrictFloat


class HotspotPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    area:               StrictStr
    intensity:          StrictFloat
    demand_reason:      StrictStr = Field(default="", alias="demandReason")
    expected_incentive: StrictStr = Field(default="", alias="expectedIncentive")
    distance:           StrictStr = ""
    coordinates:        CoordinatesPayload
