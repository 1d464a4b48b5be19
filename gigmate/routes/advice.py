"""
advice.py — Financial coach endpoint.

Route:
  POST /api/v1/advice — one grounded Gemini call with the worker's
                        earnings/expense summary as context.

With no Gemini key the answer is a fixed "AI features are disabled"
notice (HTTP 200). A 503 means every retry attempt failed.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from gigmate.ai.advice_service import AdviceService, AdviceUnavailable
from gigmate.core.dependencies import get_advice_service
from gigmate.core.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/advice", tags=["advice"])


class AdviceRequest(BaseModel):
    query:   str = Field(..., min_length=3, max_length=1000)
    context: str = Field(default="", max_length=4000)  # earnings / expenses summary


class AdviceSource(BaseModel):
    title: str
    uri:   str


class AdviceResponse(BaseModel):
    text:    str
    sources: list[AdviceSource]


@router.post("", response_model=AdviceResponse)
@limiter.limit("20/minute")
async def ask_advice(
    request: Request,
    payload: AdviceRequest,
    service: AdviceService = Depends(get_advice_service),
):
    try:
        result = await service.ask(payload.query, payload.context)
    except AdviceUnavailable as exc:
        raise HTTPException(status_code=503, detail="Advice service unavailable, try again shortly") from exc

    return AdviceResponse(
        text=result.text,
        sources=[AdviceSource(**s) for s in result.sources],
    )
