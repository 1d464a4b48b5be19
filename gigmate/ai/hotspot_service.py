"""
hotspot_service.py — Fetches LIVE / PREDICTED hotspots from Gemini.

Flow per call:
  1. No client configured → empty success, logged once per call. Missing
     credentials are an expected deployment state, not an error.
  2. Build the request (hotspot_request.py) for the mode.
  3. Run it through the mode's RetryPolicy. Each attempt = one Gemini call
     + parse_hotspots(). SDK exceptions count as TRANSIENT, bad payloads as
     MALFORMED_RESPONSE; both use up the same budget.
  4. Return the validated list (possibly empty) or EXHAUSTED.

This module does not know about the fallback dataset — DemandPipeline
decides what an empty or failed result turns into.
"""

import json
import logging
from typing import Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from gigmate.ai.gemini_client import GeminiClient, GeminiModel
from gigmate.ai.hotspot_request import build_hotspot_request
from gigmate.core.result import ErrorKind, Result
from gigmate.core.retry import RetryPolicy
from gigmate.models.hotspot import FetchMode, Hotspot, HotspotPayload
from gigmate.models.location import LocationQuery

logger = logging.getLogger(__name__)

_PAYLOAD_LIST = TypeAdapter(list[HotspotPayload])


def parse_hotspots(text: str) -> Result[list[Hotspot]]:
    """
    Parse a Gemini response body into validated Hotspots.

    The whole payload is rejected (MALFORMED_RESPONSE) when it is not JSON,
    not an array, or an element does not match the declared schema shape.
    Elements that match the shape but break a Hotspot invariant (intensity
    outside 1–10, lat/lng out of range, blank area) are dropped one by one.
    """
    try:
        data = json.loads(text.strip())
    except (json.JSONDecodeError, AttributeError) as exc:
        return Result.failure(ErrorKind.MALFORMED_RESPONSE, f"not JSON: {exc}")

    if not isinstance(data, list):
        return Result.failure(
            ErrorKind.MALFORMED_RESPONSE,
            f"expected a JSON array, got {type(data).__name__}",
        )

    try:
        payloads = _PAYLOAD_LIST.validate_python(data)
    except ValidationError as exc:
        return Result.failure(
            ErrorKind.MALFORMED_RESPONSE,
            f"schema mismatch ({exc.error_count()} errors)",
        )

    hotspots: list[Hotspot] = []
    for payload in payloads:
        try:
            hotspots.append(Hotspot.model_validate(payload.model_dump(by_alias=True)))
        except ValidationError as exc:
            logger.info(
                "Dropping hotspot %r: %s",
                payload.area,
                "; ".join(f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in exc.errors()),
            )

    return Result.success(hotspots)


class HotspotService:
    """
    Gemini-backed hotspot source.

    Args:
        client:          Injected GeminiClient, or None when AI is disabled.
        live_policy:     Retry budget for LIVE calls (default 3 × 1000 ms).
        forecast_policy: Retry budget for PREDICTED calls (default 2 × 1000 ms).
        model:           Gemini model identifier.
    """

    def __init__(
        self,
        client: Optional[GeminiClient],
        live_policy: RetryPolicy = RetryPolicy(max_attempts=3, delay_ms=1000),
        forecast_policy: RetryPolicy = RetryPolicy(max_attempts=2, delay_ms=1000),
        model: str = GeminiModel.FLASH.value,
    ) -> None:
        self.client = client
        self.live_policy = live_policy
        self.forecast_policy = forecast_policy
        self.model = model

    @property
    def enabled(self) -> bool:
        return self.client is not None

    async def fetch_live(
        self, location: LocationQuery, platforms: Sequence[str]
    ) -> Result[list[Hotspot]]:
        return await self._fetch(location, platforms, FetchMode.LIVE)

    async def fetch_forecast(
        self, location: LocationQuery, platforms: Sequence[str]
    ) -> Result[list[Hotspot]]:
        return await self._fetch(location, platforms, FetchMode.PREDICTED)

    async def _fetch(
        self,
        location: LocationQuery,
        platforms: Sequence[str],
        mode: FetchMode,
    ) -> Result[list[Hotspot]]:
        if self.client is None:
            logger.warning("Gemini not configured (%s), returning no %s hotspots",
                           ErrorKind.NO_CREDENTIAL.value, mode.value)
            return Result.success([])

        client = self.client
        request = build_hotspot_request(location, platforms, mode, model=self.model)
        policy = self.live_policy if mode is FetchMode.LIVE else self.forecast_policy

        async def attempt() -> Result[list[Hotspot]]:
            text = await client.generate(
                request.prompt,
                model=request.model,
                response_key=request.response_key,
                generation_config=request.generation_config,
            )
            return parse_hotspots(text)

        result = await policy.execute(attempt)
        if result.ok:
            logger.info("Gemini returned %d valid %s hotspots", len(result.value), mode.value)
        else:
            logger.error("Gemini %s hotspots failed: %s", mode.value, result.detail)
        return result
