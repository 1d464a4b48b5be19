"""
session.py — Per-device state holder for the demand map screen.

One DemandSession backs one open map view. It owns:

  - a LocationResolver fed by a ReportedPositionSensor (the phone posts
    its fix to /location),
  - a FetchScheduler that debounces location / mode / platform changes,
  - a DemandPipeline with its own query-key memo,
  - the {hotspots, loading} state the client polls.

Supersession
────────────
Every scheduled change bumps the generation number and cancels any run
still in flight, before the debounce window even starts. The run the
timer launches carries the generation current at that moment. A run only
writes its result if its generation is still current and the session is
open, so an answer to an older intent can never overwrite a newer one or
clear loading early (last-scheduled-wins).

Teardown
────────
close() cancels the debounce timer, the in-flight run (including a retry
back-off sleep) and the sensor wait. Nothing is written afterwards.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence, Union

from gigmate.ai.hotspot_service import HotspotService
from gigmate.core.config import Settings
from gigmate.models.demand import DemandSnapshot
from gigmate.models.hotspot import Coordinates, DataSource, FetchMode, Hotspot
from gigmate.models.location import LocationQuery
from gigmate.services.fallback import FallbackDataset
from gigmate.services.location import LocationResolver, ReportedPositionSensor, SensorError
from gigmate.services.pipeline import DemandPipeline
from gigmate.services.result_view import top_hotspots
from gigmate.services.scheduler import FetchScheduler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchParams:
    location: LocationQuery
    mode: FetchMode
    platforms: tuple[str, ...]
    force: bool = False


class DemandSession:
    def __init__(
        self,
        session_id: str,
        pipeline: DemandPipeline,
        resolver: LocationResolver,
        sensor: Optional[ReportedPositionSensor] = None,
        mode: FetchMode = FetchMode.LIVE,
        platforms: Sequence[str] = (),
        debounce_ms: int = 300,
        sensor_timeout_ms: int = 5000,
        high_accuracy: bool = False,
        top_n: int = 3,
    ) -> None:
        self.session_id = session_id
        self.mode = mode
        self.platforms: tuple[str, ...] = tuple(platforms)
        self.hotspots: list[Hotspot] = []
        self.loading = True
        self.source: Optional[DataSource] = None
        self.updated_at: Optional[datetime] = None

        self._pipeline = pipeline
        self._resolver = resolver
        self._sensor = sensor
        self._sensor_timeout_ms = sensor_timeout_ms
        self._high_accuracy = high_accuracy
        self._top_n = top_n

        self._scheduler: FetchScheduler[FetchParams] = FetchScheduler(self._launch, delay_ms=debounce_ms)
        self._generation = 0
        self._force_pending = False
        self._run_task: Optional[asyncio.Task] = None
        self._locate_task: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def resolver(self) -> LocationResolver:
        return self._resolver

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def start(self) -> None:
        """Begin location tracking; the first fetch is scheduled straight away."""
        self._locate_task = asyncio.create_task(self._track_location())

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._scheduler.cancel()

        tasks = [t for t in (self._run_task, self._locate_task) if t is not None and not t.done()]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("Session %s closed", self.session_id)

    # ── Inputs from the map screen ────────────────────────────────────────────

    def set_mode(self, mode: FetchMode) -> None:
        if mode != self.mode:
            self.mode = mode
            self._schedule()

    def set_platforms(self, platforms: Sequence[str]) -> None:
        platforms = tuple(platforms)
        if set(platforms) != set(self.platforms):
            self.platforms = platforms
            self._schedule()

    def set_city(self, city: Optional[str]) -> None:
        if self._resolver.set_city(city):
            self._schedule()

    def refresh(self) -> None:
        """Manual refresh: bypasses the unchanged-query shortcut."""
        self._schedule(force=True)

    def report_position(self, lat: float, lng: float) -> None:
        coords = Coordinates(lat=lat, lng=lng)
        if self._sensor is not None and self._sensor.report(coords):
            return  # the pending resolve() picks it up
        # Late fix (after the bounded wait) or a repeat fix.
        if self._resolver.apply_fix(coords.lat, coords.lng):
            self._schedule()

    def report_sensor_error(self, code: Union[str, int]) -> None:
        error = SensorError.from_code(code)
        if self._sensor is not None and self._sensor.report_error(error):
            return
        self._resolver.record_sensor_error(error.kind)

    # ── Output ────────────────────────────────────────────────────────────────

    def snapshot(self) -> DemandSnapshot:
        return DemandSnapshot(
            session_id=self.session_id,
            mode=self.mode,
            loading=self.loading,
            hotspots=self.hotspots,
            top_hotspots=top_hotspots(self.hotspots, self._top_n),
            center=self._resolver.center(),
            location_label=self._resolver.label(),
            source=self.source,
            updated_at=self.updated_at,
        )

    # ── Internals ─────────────────────────────────────────────────────────────

    async def _track_location(self) -> None:
        async for _query in self._resolver.resolve(self._sensor_timeout_ms, self._high_accuracy):
            self._schedule()

    def _schedule(self, force: bool = False) -> None:
        if self._closed:
            return
        # A refresh inside a burst still forces the run the burst collapses into.
        self._force_pending = self._force_pending or force
        self.loading = True
        # Any run in flight answers an older intent; it must not clear loading.
        self._generation += 1
        if self._run_task is not None and not self._run_task.done():
            logger.info("Session %s: superseding in-flight run", self.session_id)
            self._run_task.cancel()
        self._scheduler.schedule(
            FetchParams(
                location=self._resolver.query,
                mode=self.mode,
                platforms=self.platforms,
                force=self._force_pending,
            )
        )

    def _launch(self, params: FetchParams) -> None:
        if self._closed:
            return
        self._force_pending = False
        self._run_task = asyncio.create_task(self._run(params, self._generation))

    async def _run(self, params: FetchParams, generation: int) -> None:
        try:
            hotspots = await self._pipeline.run(
                params.location, params.mode, params.platforms, force=params.force
            )
            source = self._pipeline.last_source
        except Exception:
            logger.exception("Session %s: pipeline run crashed, showing fallback", self.session_id)
            hotspots = self._pipeline.fallback.get()
            source = DataSource.FALLBACK

        if self._closed or generation != self._generation:
            logger.info("Session %s: discarding stale result (generation %d)", self.session_id, generation)
            return

        self.hotspots = hotspots
        self.source = source
        self.loading = False
        self.updated_at = datetime.now(timezone.utc)
class SessionRegistry:
    """
    All open map sessions in this process, keyed by session id.

    A phone that is killed or drops off the network never sends DELETE, so
    every get() refreshes the session's last_seen and sweep_idle() closes
    sessions nobody has touched for `session_idle_ttl_s`. The app lifespan
    runs the sweep every `session_sweep_interval_s`.
    """

    def __init__(
        self,
        service: HotspotService,
        settings: Settings,
        fallback: Optional[FallbackDataset] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.service = service
        self.settings = settings
        self.fallback = fallback or FallbackDataset()
        self._clock = clock
        self._sessions: dict[str, DemandSession] = {}
        self._last_seen: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(
        self,
        city: Optional[str] = None,
        platforms: Sequence[str] = (),
        mode: FetchMode = FetchMode.LIVE,
    ) -> DemandSession:
        sensor = ReportedPositionSensor()
        session = DemandSession(
            session_id=uuid.uuid4().hex,
            pipeline=DemandPipeline(self.service, self.fallback),
            resolver=LocationResolver(
                city=city,
                sensor=sensor,
                default_city=self.settings.default_city,
            ),
            sensor=sensor,
            mode=mode,
            platforms=platforms,
            debounce_ms=self.settings.debounce_ms,
            sensor_timeout_ms=self.settings.sensor_timeout_ms,
            high_accuracy=self.settings.sensor_high_accuracy,
            top_n=self.settings.top_hotspots,
        )
        self._sessions[session.session_id] = session
        self._last_seen[session.session_id] = self._clock()
        session.start()
        logger.info("Session %s opened (city=%s, mode=%s)", session.session_id, city, mode.value)
        return session

    def get(self, session_id: str) -> Optional[DemandSession]:
        session = self._sessions.get(session_id)
        if session is not None:
            self._last_seen[session_id] = self._clock()
        return session

    async def close(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        self._last_seen.pop(session_id, None)
        if session is None:
            return False
        await session.close()
        return True

    async def close_all(self) -> None:
        for session_id in list(self._sessions):
            await self.close(session_id)

    async def sweep_idle(self) -> int:
        """Close sessions idle for longer than the TTL. Returns how many."""
        cutoff = self._clock() - self.settings.session_idle_ttl_s
        idle = [sid for sid, seen in self._last_seen.items() if seen < cutoff]
        for session_id in idle:
            await self.close(session_id)
        if idle:
            logger.info("Evicted %d idle sessions (%d still open)", len(idle), len(self._sessions))
        return len(idle)

    async def run_sweeper(self) -> None:
        """Background loop owned by the app lifespan; cancelled on shutdown."""
        while True:
            await asyncio.sleep(self.settings.session_sweep_interval_s)
            await self.sweep_idle()
