"""Inbound intents: one validated variant per client event name."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from boardsync.errors import IntentValidationError
from boardsync.models.enums import InboundEvent, TaskCategory, TaskPriority, TaskStatus


def _reject_bool(value: Any) -> Any:
    # JSON true/false would otherwise coerce to user or team 1 and 0.
    if isinstance(value, bool):
        raise ValueError("a boolean is not an id")
    return value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return _reject_bool(value)


def _task_id_to_text(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class _BaseIntent(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class SetUser(_BaseIntent):
    kind: Literal["set:user"] = "set:user"
    user_id: int = Field(alias="userId")

    @field_validator("user_id", mode="before")
    @classmethod
    def user_id_not_bool(cls, value: Any) -> Any:
        return _reject_bool(value)


class JoinTeam(_BaseIntent):
    kind: Literal["join:team"] = "join:team"
    team_id: int = Field(alias="teamId")

    @field_validator("team_id", mode="before")
    @classmethod
    def team_id_not_bool(cls, value: Any) -> Any:
        return _reject_bool(value)


class LeaveTeam(_BaseIntent):
    kind: Literal["leave:team"] = "leave:team"


class GetTasks(_BaseIntent):
    kind: Literal["get:tasks"] = "get:tasks"


class CreateTask(_BaseIntent):
    """A new task. Any ``status`` the client sends is discarded."""

    kind: Literal["task:create"] = "task:create"
    title: str = Field(min_length=1)
    description: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    category: TaskCategory = TaskCategory.FEATURE
    team_id: int | None = Field(default=None, alias="teamId")
    assigned_to: int | None = Field(default=None, alias="assignedTo")

    @field_validator("team_id", "assigned_to", mode="before")
    @classmethod
    def blank_ids_to_none(cls, value: Any) -> Any:
        return _blank_to_none(value)


class UpdateTask(_BaseIntent):
    """Full-field replacement of an existing task."""

    kind: Literal["task:updated"] = "task:updated"
    id: str
    title: str = Field(min_length=1)
    description: str | None = None
    status: TaskStatus
    priority: TaskPriority
    category: TaskCategory
    assigned_to: int | None = Field(default=None, alias="assignedTo")

    @field_validator("id", mode="before")
    @classmethod
    def id_to_text(cls, value: Any) -> Any:
        return _task_id_to_text(value)

    @field_validator("assigned_to", mode="before")
    @classmethod
    def blank_assignee_to_none(cls, value: Any) -> Any:
        return _blank_to_none(value)


class MoveTask(_BaseIntent):
    kind: Literal["task:move"] = "task:move"
    id: str
    new_status: TaskStatus = Field(alias="newStatus")

    @field_validator("id", mode="before")
    @classmethod
    def id_to_text(cls, value: Any) -> Any:
        return _task_id_to_text(value)


class DeleteTask(_BaseIntent):
    kind: Literal["task:delete"] = "task:delete"
    id: str

    @field_validator("id", mode="before")
    @classmethod
    def id_to_text(cls, value: Any) -> Any:
        return _task_id_to_text(value)


Intent = Annotated[
    SetUser | JoinTeam | LeaveTeam | GetTasks | CreateTask | UpdateTask | MoveTask | DeleteTask,
    Field(discriminator="kind"),
]

MUTATING_INTENTS = (CreateTask, UpdateTask, MoveTask, DeleteTask)

_intent_adapter: TypeAdapter[Intent] = TypeAdapter(Intent)

# Events whose payload is a bare scalar rather than an object.
_SCALAR_PAYLOAD_FIELDS: dict[str, str] = {
    InboundEvent.SET_USER: "user_id",
    InboundEvent.JOIN_TEAM: "team_id",
    InboundEvent.TASK_DELETE: "id",
}


def parse_intent(event: str, payload: Any = None) -> Intent:
    """Validate a raw event name and JSON payload into an intent.

    Raises:
        IntentValidationError: The event name is unknown or the payload
            does not satisfy the variant's field contract.
    """
    try:
        name = InboundEvent(event)
    except ValueError:
        raise IntentValidationError(event, f"unknown event {event!r}") from None

    if isinstance(payload, dict):
        data = dict(payload)
    elif name in _SCALAR_PAYLOAD_FIELDS and payload is not None:
        data = {_SCALAR_PAYLOAD_FIELDS[name]: payload}
    elif payload is None:
        data = {}
    else:
        raise IntentValidationError(event, f"unexpected payload type {type(payload).__name__}")

    data["kind"] = name.value
    try:
        return _intent_adapter.validate_python(data)
    except ValidationError as exc:
        raise IntentValidationError(event, str(exc)) from exc
