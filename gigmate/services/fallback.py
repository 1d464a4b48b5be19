"""
fallback.py — Curated hotspots shown whenever Gemini can't supply any.

Covers: no API key, malformed output, exhausted retries, and an empty or
fully-invalid array. Entries are Hotspot models, so they are validated at
import time. A dataset can never be empty.
"""

from typing import Optional, Sequence

from gigmate.models.hotspot import Coordinates, Hotspot

# Chandigarh, the default city.
CHANDIGARH_HOTSPOTS: list[Hotspot] = [
    Hotspot(area="Sector 17 Plaza",  intensity=9,  demand_reason="High footfall & Shopping Hub",
            expected_incentive="₹45", distance="1.2 km",
            coordinates=Coordinates(lat=30.7333, lng=76.7794)),
    Hotspot(area="Elante Mall",      intensity=10, demand_reason="Peak Hours & Multiplex Crowd",
            expected_incentive="₹60", distance="3.5 km",
            coordinates=Coordinates(lat=30.7056, lng=76.8015)),
    Hotspot(area="Sector 35 Market", intensity=8,  demand_reason="Food & Restaurants Zone",
            expected_incentive="₹30", distance="2.1 km",
            coordinates=Coordinates(lat=30.7180, lng=76.7700)),
    Hotspot(area="Sector 22 Market", intensity=7,  demand_reason="Budget Shopping Crowd",
            expected_incentive="₹25", distance="1.8 km",
            coordinates=Coordinates(lat=30.7290, lng=76.7640)),
    Hotspot(area="Sukhna Lake",      intensity=7,  demand_reason="Tourist & Evening Crowd",
            expected_incentive="₹40", distance="4.0 km",
            coordinates=Coordinates(lat=30.7421, lng=76.8188)),
]


class FallbackDataset:
    def __init__(self, hotspots: Optional[Sequence[Hotspot]] = None) -> None:
        entries = list(CHANDIGARH_HOTSPOTS if hotspots is None else hotspots)
        if not entries:
            raise ValueError("FallbackDataset needs at least one hotspot")
        self._hotspots = entries

    def get(self) -> list[Hotspot]:
        """A fresh list each call; Hotspot models are frozen, so sharing them is safe."""
        return list(self._hotspots)
