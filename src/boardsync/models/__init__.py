"""Pydantic models and enums shared across boardsync."""

from boardsync.models.enums import (
    DispatchStage,
    InboundEvent,
    MemberRole,
    OutboundEvent,
    TaskCategory,
    TaskPriority,
    TaskStatus,
)
from boardsync.models.framework_event import FrameworkEvent
from boardsync.models.intent import (
    CreateTask,
    DeleteTask,
    GetTasks,
    Intent,
    JoinTeam,
    LeaveTeam,
    MoveTask,
    SetUser,
    UpdateTask,
    parse_intent,
)
from boardsync.models.task import NewTask, Task, TaskChanges, TaskRow
from boardsync.models.team import Team, TeamMember, User

__all__ = [
    "CreateTask",
    "DeleteTask",
    "DispatchStage",
    "FrameworkEvent",
    "GetTasks",
    "InboundEvent",
    "Intent",
    "JoinTeam",
    "LeaveTeam",
    "MemberRole",
    "MoveTask",
    "NewTask",
    "OutboundEvent",
    "SetUser",
    "Task",
    "TaskCategory",
    "TaskChanges",
    "TaskPriority",
    "TaskRow",
    "TaskStatus",
    "Team",
    "TeamMember",
    "UpdateTask",
    "User",
    "parse_intent",
]
