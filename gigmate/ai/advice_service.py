"""
advice_service.py — Financial Q&A for gig workers.

Grounded Gemini call (Google Search) with the worker's own numbers as
context. Runs through the default RetryPolicy. Without a client it answers
with a fixed notice instead of failing.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from gigmate.ai.gemini_client import GeminiClient, GeminiModel, GroundedText
from gigmate.core.result import Result
from gigmate.core.retry import RetryPolicy

logger = logging.getLogger(__name__)

DISABLED_NOTICE = "AI features are disabled (no API key configured)."

_ADVICE_PROMPT = """User Query: {query}
Worker Financial Context: {context}

You are an expert financial advisor for Indian gig workers. Provide actionable advice in simple terms.
Include information on GST, Income Tax (Section 44ADA/44AD), and insurance."""


class AdviceUnavailable(Exception):
    """All attempts failed; the route turns this into a 503."""


@dataclass
class AdviceResult:
    text: str
    sources: list[dict[str, str]] = field(default_factory=list)


class AdviceService:
    def __init__(
        self,
        client: Optional[GeminiClient],
        policy: RetryPolicy = RetryPolicy(),
        model: str = GeminiModel.FLASH.value,
    ) -> None:
        self.client = client
        self.policy = policy
        self.model = model

    async def ask(self, query: str, context: str = "") -> AdviceResult:
        if self.client is None:
            return AdviceResult(text=DISABLED_NOTICE)

        client = self.client
        prompt = _ADVICE_PROMPT.format(query=query, context=context or "Not provided")

        async def attempt() -> Result[GroundedText]:
            grounded = await client.generate_grounded(prompt, model=self.model, response_key="advice")
            return Result.success(grounded)

        result = await self.policy.execute(attempt)
        if not result.ok:
            logger.error("Gemini advice failed: %s", result.detail)
            raise AdviceUnavailable(result.detail)

        return AdviceResult(text=result.value.text, sources=result.value.sources)
