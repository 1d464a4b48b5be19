"""
pipeline.py — DemandPipeline: location + mode + platforms → hotspots, always.

    run()
      ├─ same query key as last run (and not forced)? → cached list, no calls
      ├─ LIVE      → HotspotService.fetch_live
      ├─ PREDICTED → HotspotService.fetch_forecast
      ├─ non-empty success → adopt it
      └─ anything else     → FallbackDataset.get()

run() never raises for service problems and never returns an empty list.
The query-key memo is the only mutable state; a DemandSession lets exactly
one run touch it at a time.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from gigmate.ai.hotspot_service import HotspotService
from gigmate.models.hotspot import DataSource, FetchMode, Hotspot
from gigmate.models.location import LocationQuery
from gigmate.services.fallback import FallbackDataset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryKey:
    location: LocationQuery
    mode: FetchMode
    platforms: frozenset[str]


class DemandPipeline:
    def __init__(
        self,
        service: HotspotService,
        fallback: Optional[FallbackDataset] = None,
    ) -> None:
        self.service = service
        self.fallback = fallback or FallbackDataset()
        self._last_key: Optional[QueryKey] = None
        self._last_result: list[Hotspot] = []
        self.last_source: Optional[DataSource] = None

    async def run(
        self,
        location: LocationQuery,
        mode: FetchMode,
        platforms: Sequence[str],
        force: bool = False,
    ) -> list[Hotspot]:
        key = QueryKey(location=location, mode=mode, platforms=frozenset(platforms))

        if not force and key == self._last_key and self._last_result:
            logger.debug("Query unchanged (%s), reusing %d hotspots", mode.value, len(self._last_result))
            return list(self._last_result)

        if mode is FetchMode.LIVE:
            result = await self.service.fetch_live(location, platforms)
            source = DataSource.LIVE
        else:
            result = await self.service.fetch_forecast(location, platforms)
            source = DataSource.FORECAST

        if result.ok and result.value:
            hotspots = result.value
        else:
            reason = result.error.value if result.error else "empty result"
            logger.warning("Using fallback hotspots for %s query (%s)", mode.value, reason)
            hotspots = self.fallback.get()
            source = DataSource.FALLBACK

        self._last_key = key
        self._last_result = list(hotspots)
        self.last_source = source
        return hotspots
