"""
GeminiClient — Async wrapper around Google Generative AI SDK.

Three deployment states, decided once by build_gemini_client():
  - REAL:     GEMINI_API_KEY is set → actual Gemini API calls.
  - MOCK:     AI_MOCK_MODE=true → deterministic canned responses, no key
              needed. Use for local dev and demos of the map screen.
  - DISABLED: neither → build_gemini_client() returns None and callers take
              their "no credential" branch (hotspots fall back to the
              curated list, advice returns a fixed notice).

The client is built by the app lifespan and passed to the services that
need it; nothing imports a module-level instance.

Extension pattern: add new mock response keys to _MOCK_RESPONSES and
reference them in generate() calls via the response_key parameter.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

# Python 3.14 + protobuf native extension can fail when importing Gemini deps.
# Keep this as default-only so users can still override it explicitly.
os.environ.setdefault("PROTOCOL_BUFFERS_PYTHON_IMPLEMENTATION", "python")

import google.generativeai as genai

from gigmate.core.config import Settings

logger = logging.getLogger(__name__)


class GeminiModel(str, Enum):
    FLASH = "gemini-1.5-flash"


# Canned responses for mock mode.
# Keys map to response_key arguments in generate() calls.
_MOCK_RESPONSES: dict[str, str] = {
    "default": (
        "[MOCK] This is a placeholder Gemini response. "
        "Set AI_MOCK_MODE=false and provide GEMINI_API_KEY for real responses."
    ),
    "hotspots_live": (
        '[{"area": "Sector 17 Plaza", "intensity": 9, "demandReason": "[MOCK] Office exit rush", '
        '"expectedIncentive": "₹45", "distance": "1.2 km", '
        '"coordinates": {"lat": 30.7398, "lng": 76.7827}}, '
        '{"area": "Elante Mall", "intensity": 8, "demandReason": "[MOCK] Evening shoppers", '
        '"expectedIncentive": "₹40", "distance": "3.5 km", '
        '"coordinates": {"lat": 30.7056, "lng": 76.8015}}, '
        '{"area": "Sector 35 Market", "intensity": 7, "demandReason": "[MOCK] Dinner orders", '
        '"expectedIncentive": "₹30", "distance": "2.1 km", '
        '"coordinates": {"lat": 30.7180, "lng": 76.7700}}]'
    ),
    "hotspots_forecast": (
        '[{"area": "Sukhna Lake", "intensity": 8, "demandReason": "[MOCK] Clear evening expected", '
        '"expectedIncentive": "₹40", "distance": "4.0 km", '
        '"coordinates": {"lat": 30.7421, "lng": 76.8188}}, '
        '{"area": "IT Park", "intensity": 7, "demandReason": "[MOCK] Shift change at 7 PM", '
        '"expectedIncentive": "₹35", "distance": "6.8 km", '
        '"coordinates": {"lat": 30.7270, "lng": 76.8460}}]'
    ),
    "advice": (
        "[MOCK] Keep a simple log of fuel and maintenance costs. Under Section 44ADA "
        "presumptive taxation you can declare a share of gross receipts as income; "
        "check whether your turnover requires GST registration and consider an "
        "accident insurance cover for working hours."
    ),
}


@dataclass
class GroundedText:
    """Text plus the web sources Gemini grounded it on."""

    text: str
    sources: list[dict[str, str]] = field(default_factory=list)


class GeminiClient:
    """
    Central Gemini interface for the GigMate backend.

    One instance per process, created in the app lifespan and injected into
    HotspotService and AdviceService. The handle is read-only after
    construction, so concurrent sessions share it without locking.
    """

    def __init__(self, api_key: str = "", mock_mode: bool = False) -> None:
        self.mock_mode = mock_mode

        if not self.mock_mode:
            if not api_key:
                raise ValueError("GeminiClient needs an api_key outside mock mode")
            genai.configure(api_key=api_key)
            self._genai = genai

        if self.mock_mode:
            logger.info("GeminiClient initialised in MOCK mode")
        else:
            logger.info("GeminiClient initialised in REAL mode")

    async def generate(
        self,
        prompt: str,
        model: str = GeminiModel.FLASH.value,
        response_key: str = "default",
        **generation_kwargs: Any,
    ) -> str:
        """
        Generate text from a Gemini model.

        Args:
            prompt:             The full prompt string.
            model:              Gemini model identifier.
            response_key:       Mock response key (ignored in real mode).
            **generation_kwargs: Passed through to GenerativeModel.generate_content_async()
                                 (e.g. generation_config with a response_schema).

        Returns:
            Generated text string.

        Raises:
            Exception: Propagates Gemini SDK errors in real mode.
        """
        if self.mock_mode:
            return _MOCK_RESPONSES.get(response_key, _MOCK_RESPONSES["default"])

        try:
            gemini_model = self._genai.GenerativeModel(model)
            response = await gemini_model.generate_content_async(prompt, **generation_kwargs)
            return response.text
        except Exception as exc:
            logger.error("Gemini API error (model=%s): %s", model, exc)
            raise

    async def generate_grounded(
        self,
        prompt: str,
        model: str = GeminiModel.FLASH.value,
        response_key: str = "default",
    ) -> GroundedText:
        """
        Generate text with Google Search grounding and collect the cited
        web sources as {"title", "uri"} dicts.
        """
        if self.mock_mode:
            return GroundedText(text=_MOCK_RESPONSES.get(response_key, _MOCK_RESPONSES["default"]))

        try:
            gemini_model = self._genai.GenerativeModel(model, tools="google_search_retrieval")
            response = await gemini_model.generate_content_async(prompt)
        except Exception as exc:
            logger.error("Gemini grounded API error (model=%s): %s", model, exc)
            raise

        return GroundedText(text=response.text, sources=_grounding_sources(response))


def _grounding_sources(response: Any) -> list[dict[str, str]]:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    sources = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        if web is None:
            continue
        uri = getattr(web, "uri", "") or ""
        if uri:
            sources.append({"title": getattr(web, "title", "") or uri, "uri": uri})
    return sources


def build_gemini_client(settings: Settings) -> Optional[GeminiClient]:
    """Return the client for this deployment, or None when AI is disabled."""
    if settings.ai_mock_mode:
        return GeminiClient(mock_mode=True)

    if not settings.gemini_api_key:
        logger.warning(
            "GEMINI_API_KEY not set — AI features disabled, curated hotspots will be shown. "
            "Set AI_MOCK_MODE=true for canned responses."
        )
        return None

    return GeminiClient(api_key=settings.gemini_api_key)
