"""Presentation helpers for the zone list under the map."""

from typing import Sequence

from gigmate.models.hotspot import Hotspot

# Above this the marker and bonus badge render red.
HOT_INTENSITY = 8


def top_hotspots(hotspots: Sequence[Hotspot], limit: int = 3) -> list[Hotspot]:
    """Highest intensity first; ties keep their original order."""
    ranked = sorted(hotspots, key=lambda h: h.intensity, reverse=True)
    return ranked[:max(limit, 0)]


def marker_tone(hotspot: Hotspot) -> str:
    return "hot" if hotspot.intensity > HOT_INTENSITY else "normal"
