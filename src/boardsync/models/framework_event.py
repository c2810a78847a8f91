"""Framework-level event model."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


class FrameworkEvent(BaseModel):
    """An event emitted by the board for observability."""

    type: str
    session_id: str | None = None
    user_id: int | None = None
    team_id: int | None = None
    task_id: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    data: dict[str, Any] = Field(default_factory=dict)
