"""
rate_limit.py — Global rate limiter instance.

Uses slowapi (a Starlette-compatible wrapper around the `limits` library).
Requests are keyed by client IP address.

Every limited route hits the Gemini API, so manual refreshes and advice
queries are the endpoints that opt in:

    from fastapi import Request
    from gigmate.core.rate_limit import limiter

    @router.post("/sessions/{session_id}/refresh")
    @limiter.limit("30/minute")
    async def refresh(request: Request, session_id: str):
        ...
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Key requests by client IP.
# Can be swapped to a device-ID key function once sessions are authenticated.
limiter = Limiter(key_func=get_remote_address)
