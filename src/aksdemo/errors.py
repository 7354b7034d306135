"""Structured error utilities for setup steps."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any


class SetupError(RuntimeError):
    """Structured exception for a failed setup step."""

    def __init__(
        self,
        *,
        code: str,
        step: str,
        message: str,
        details: dict[str, Any] | None = None,
        timestamp: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.step = step
        self.message = message
        self.details = details or {}
        self.timestamp = timestamp or datetime.now(UTC).isoformat()

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error for logs."""
        return {
            "code": self.code,
            "step": self.step,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp,
        }

    def to_json(self) -> str:
        """Serialize the error as a compact JSON string."""
        return json.dumps(self.to_dict(), sort_keys=True, ensure_ascii=True)


def ensure_setup_error(
    error: Exception,
    *,
    code: str = "unexpected_error",
    step: str = "setup",
    details: dict[str, Any] | None = None,
) -> SetupError:
    """Normalize unknown exceptions into a structured setup error."""
    if isinstance(error, SetupError):
        return error

    merged_details = dict(details or {})
    merged_details.setdefault("exception_type", type(error).__name__)

    return SetupError(
        code=code,
        step=step,
        message=str(error) or "Unknown setup error",
        details=merged_details,
    )


__all__ = ["SetupError", "ensure_setup_error"]
