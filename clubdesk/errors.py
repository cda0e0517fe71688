"""Error types shared by the ledger and standings computations."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class ValidationError(ValueError):
    """Raised when a record or a form value cannot be accepted."""


@dataclass(frozen=True)
class SkippedRecord:
    """A record left out of a computation, with the reason why."""

    record_id: Any
    reason: str
    detail: Optional[str] = None

    def to_dict(self) -> dict:
        return {"record_id": self.record_id, "reason": self.reason, "detail": self.detail}
