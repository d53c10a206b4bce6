"""ServiceResult — what every service method returns.

Services never raise AclError to their callers; failures come back as
``ok=False`` with a ServiceError whose ``code`` names the error kind.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ServiceError(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    Attributes:
        op: Operation name, also the key the CLI renderers dispatch on
            (``"join"``, ``"is"``, ``"tree"`` ...).
        data: JSON-serializable payload; empty on failure.
        warnings: Non-fatal notes, e.g. leaving a group one is not in.
        meta: ``{"telemetry": ...}`` span tree when telemetry is on.
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None
