"""
demand.py — Request / response models for the /api/v1/demand routes.

The mobile map screen only needs {hotspots, loading}; the remaining
snapshot fields drive the header ("Precise Location" vs "<city> Central"),
the map centre, the top-zones list and the freshness badge.
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, Field, model_validator

from gigmate.models.hotspot import Coordinates, DataSource, FetchMode, Hotspot


class CreateSessionRequest(BaseModel):
    city:      Optional[str] = Field(default=None, max_length=100)  # profile city
    platforms: list[str]     = Field(default_factory=list, max_length=20)
    mode:      FetchMode     = FetchMode.LIVE


class ModeUpdate(BaseModel):
    mode: FetchMode


class PlatformsUpdate(BaseModel):
    platforms: list[str] = Field(default_factory=list, max_length=20)


class CityUpdate(BaseModel):
    city: Optional[str] = Field(default=None, max_length=100)


class LocationReport(BaseModel):
    """
    What the device's geolocation call produced: a fix, or an error code
    ("permission-denied" | "position-unavailable" | "timeout", or 1 | 2 | 3).
    """

    lat:   Optional[float]          = Field(default=None, ge=-90, le=90)
    lng:   Optional[float]          = Field(default=None, ge=-180, le=180)
    error: Optional[Union[int, str]] = None

    @model_validator(mode="after")
    def _fix_or_error(self) -> "LocationReport":
        has_fix = self.lat is not None and self.lng is not None
        if has_fix == (self.error is not None):
            raise ValueError("send either lat+lng or error")
        return self


class DemandSnapshot(BaseModel):
    session_id:     str
    mode:           FetchMode
    loading:        bool
    hotspots:       list[Hotspot]
    top_hotspots:   list[Hotspot]
    center:         Coordinates
    location_label: str                     # "Precise Location" | "<city> Central"
    source:         Optional[DataSource] = None   # None until the first run lands
    updated_at:     Optional[datetime]   = None
