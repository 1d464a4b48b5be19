"""
result.py — Error taxonomy and the Result value passed between pipeline stages.

The hotspot path never raises across stage boundaries: the Gemini call,
the JSON parse step and the retry loop all hand back a Result so that a
malformed payload and a network failure travel through the same channel.

    ok = Result.success([...])
    bad = Result.failure(ErrorKind.MALFORMED_RESPONSE, "not a JSON array")
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    # Soft: no Gemini client configured. Surfaces as an empty success.
    NO_CREDENTIAL = "no_credential"
    # Network / service-side failure. Retried up to the budget.
    TRANSIENT = "transient"
    # Non-JSON or schema-violating payload. Counted against the budget.
    MALFORMED_RESPONSE = "malformed_response"
    # Device geolocation failures. Always soft.
    SENSOR_DENIED = "sensor_denied"
    SENSOR_TIMEOUT = "sensor_timeout"
    SENSOR_UNAVAILABLE = "sensor_unavailable"
    # Retry budget used up. Terminal for one service call.
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    detail: str = ""
    cause: Optional[ErrorKind] = None  # last attempt's error when error is EXHAUSTED

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(
        cls,
        error: ErrorKind,
        detail: str = "",
        cause: Optional[ErrorKind] = None,
    ) -> "Result[T]":
        return cls(error=error, detail=detail, cause=cause)
