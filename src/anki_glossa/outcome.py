"""Result type for best-effort collaborator calls.

A failed duplicate lookup or audio request still falls back to a default,
but the result records that the value was not actually confirmed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

CONFIRMED = "confirmed"
UNKNOWN = "unknown"


@dataclass(frozen=True)
class Outcome:
    """Value of a collaborator call together with how it was obtained.

    Attributes:
        status: ``"confirmed"`` if the collaborator answered, ``"unknown"`` if
            the call failed and ``value`` is a default
        value: The answer, or the default applied on failure
        error: Failure message for unknown outcomes
    """
    status: str
    value: Any
    error: str = ""

    @classmethod
    def confirmed(cls, value: Any) -> "Outcome":
        return cls(status=CONFIRMED, value=value)

    @classmethod
    def unknown(cls, default: Any, error: str) -> "Outcome":
        return cls(status=UNKNOWN, value=default, error=error)

    @property
    def is_confirmed(self) -> bool:
        return self.status == CONFIRMED

    @property
    def is_unknown(self) -> bool:
        return self.status == UNKNOWN
