"""All string enums for boardsync."""

from __future__ import annotations

from enum import StrEnum, unique


@unique
class TaskStatus(StrEnum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"


@unique
class TaskPriority(StrEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


@unique
class TaskCategory(StrEnum):
    BUG = "Bug"
    FEATURE = "Feature"
    ENHANCEMENT = "Enhancement"


@unique
class InboundEvent(StrEnum):
    """Event names a client may send."""

    SET_USER = "set:user"
    JOIN_TEAM = "join:team"
    LEAVE_TEAM = "leave:team"
    GET_TASKS = "get:tasks"
    TASK_CREATE = "task:create"
    TASK_UPDATED = "task:updated"
    TASK_MOVE = "task:move"
    TASK_DELETE = "task:delete"


@unique
class OutboundEvent(StrEnum):
    """Event names the server emits."""

    SYNC_TASKS = "sync:tasks"
    SYNC_TEAM_TASKS = "sync:team-tasks"
    TASK_CREATED = "task:created"
    TASK_UPDATED = "task:updated"
    TASK_DELETED = "task:deleted"


@unique
class DispatchStage(StrEnum):
    """Where an intent stopped in the router state machine."""

    RECEIVED = "received"
    VALIDATED = "validated"
    PERSISTED = "persisted"
    MAPPED = "mapped"
    DISPATCHED = "dispatched"
    DROPPED = "dropped"
    FAILED = "failed"


@unique
class MemberRole(StrEnum):
    OWNER = "owner"
    MEMBER = "member"
