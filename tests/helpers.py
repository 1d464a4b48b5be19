"""Shared test doubles and polling helpers."""

import asyncio
import time

VALID_HOTSPOT = {
    "area": "Sector 17 Plaza",
    "intensity": 9,
    "demandReason": "Office exit",
    "expectedIncentive": "₹45",
    "distance": "1.2 km",
    "coordinates": {"lat": 30.7398, "lng": 76.7827},
}


def hotspot_dict(**overrides) -> dict:
    return {**VALID_HOTSPOT, **overrides}


class FakeGeminiClient:
    """
    Scripted GeminiClient replacement.

    Each generate() call consumes the next script entry:
      str        → returned as the response text
      Exception  → raised (looks like an SDK / network failure)
      callable   → awaited with no args; its return value is the text
    The last entry repeats once the script runs out.
    """

    mock_mode = False

    def __init__(self, *script):
        self.script = list(script) or ["[]"]
        self.calls: list[dict] = []

    async def generate(self, prompt, model="gemini-1.5-flash", response_key="default", **kwargs):
        self.calls.append({"prompt": prompt, "model": model, "response_key": response_key, **kwargs})
        index = min(len(self.calls) - 1, len(self.script) - 1)
        step = self.script[index]
        if isinstance(step, Exception):
            raise step
        if callable(step):
            return await step()
        return step


async def wait_until(predicate, timeout: float = 2.0, interval: float = 0.01) -> None:
    """Poll `predicate` until it is truthy or fail after `timeout` seconds."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(interval)
