"""Task models: the wire representation and the store write sets."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from boardsync.models.enums import TaskCategory, TaskPriority, TaskStatus

TaskRow = dict[str, Any]
"""A raw store row, snake_case keys as returned by the store adapter."""


class Task(BaseModel):
    """A task as clients see it.

    Serialise with :meth:`to_wire`, which keeps the difference between a
    field the store did not return (absent) and one it returned as null.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: str | None = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    category: TaskCategory = TaskCategory.FEATURE
    created_at: datetime | None = Field(default=None, alias="createdAt")
    team_id: int | None = Field(default=None, alias="teamId")
    assigned_to: int | None = Field(default=None, alias="assignedTo")
    created_by: int | None = Field(default=None, alias="createdBy")
    assigned_to_name: str | None = Field(default=None, alias="assignedToName")
    created_by_name: str | None = Field(default=None, alias="createdByName")

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def is_team_scoped(self) -> bool:
        return self.team_id is not None

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-encodable camelCase dict sent to clients."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class NewTask(BaseModel):
    """Column values for inserting a task."""

    title: str = Field(min_length=1)
    description: str | None = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    category: TaskCategory = TaskCategory.FEATURE
    team_id: int | None = None
    assigned_to: int | None = None
    created_by: int


class TaskChanges(BaseModel):
    """Full-field replacement set applied by an update."""

    title: str = Field(min_length=1)
    description: str | None = None
    status: TaskStatus
    priority: TaskPriority
    category: TaskCategory
    assigned_to: int | None = None
