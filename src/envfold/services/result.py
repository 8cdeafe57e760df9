"""ServiceResult and ServiceError: what every envfold operation returns.

INVARIANT: ``ok`` and ``error`` agree. A failed result always carries an
error and a successful one never does.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, model_validator


class ErrorCode(StrEnum):
    CONFIG_SYNTAX = "CONFIG_SYNTAX"  # a rule token could not be built
    CONFIG_ERROR = "CONFIG_ERROR"
    NOT_FOUND = "NOT_FOUND"  # lookup of a name absent from the environment


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Operation name: ``resolve``, ``lookup``, ``rules``, ``diff``
            or ``explain``.
        data: Operation-specific payload on success.
        warnings: Non-fatal issues such as excluded snapshot entries.
        error: Set exactly when ``ok`` is False.
        meta: Telemetry span tree in verbose mode, otherwise None.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _error_matches_ok(self) -> ServiceResult:
        if self.ok and self.error is not None:
            raise ValueError("a successful result cannot carry an error")
        if not self.ok and self.error is None:
            raise ValueError("a failed result needs an error")
        return self

    @classmethod
    def failure(
        cls,
        op: str,
        code: ErrorCode | str,
        message: str,
        *,
        detail: dict[str, Any] | None = None,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        return cls(
            ok=False,
            op=op,
            warnings=warnings or [],
            error=ServiceError(code=str(code), message=message, detail=detail or {}),
        )
