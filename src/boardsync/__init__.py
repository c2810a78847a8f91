"""boardsync - real-time synchronization core for a collaborative task board."""

from boardsync._version import __version__
from boardsync.config import BoardSyncConfig
from boardsync.core.framework import (
    BoardSyncError,
    IntentValidationError,
    SessionNotFoundError,
    TaskBoard,
)
from boardsync.core.mapper import map_task_row, task_payload
from boardsync.core.rooms import RoomMembership, room_name
from boardsync.core.router import DispatchResult, TaskBroadcastRouter
from boardsync.core.session import SendFn, Session, SessionRegistry
from boardsync.models import (
    CreateTask,
    DeleteTask,
    DispatchStage,
    FrameworkEvent,
    GetTasks,
    InboundEvent,
    Intent,
    JoinTeam,
    LeaveTeam,
    MemberRole,
    MoveTask,
    NewTask,
    OutboundEvent,
    SetUser,
    Task,
    TaskCategory,
    TaskChanges,
    TaskPriority,
    TaskRow,
    TaskStatus,
    Team,
    TeamMember,
    UpdateTask,
    User,
    parse_intent,
)
from boardsync.store import InMemoryTaskStore, TaskStore

__all__ = [
    "BoardSyncConfig",
    "BoardSyncError",
    "CreateTask",
    "DeleteTask",
    "DispatchResult",
    "DispatchStage",
    "FrameworkEvent",
    "GetTasks",
    "InMemoryTaskStore",
    "InboundEvent",
    "Intent",
    "IntentValidationError",
    "JoinTeam",
    "LeaveTeam",
    "MemberRole",
    "MoveTask",
    "NewTask",
    "OutboundEvent",
    "RoomMembership",
    "SendFn",
    "Session",
    "SessionNotFoundError",
    "SessionRegistry",
    "SetUser",
    "Task",
    "TaskBoard",
    "TaskBroadcastRouter",
    "TaskCategory",
    "TaskChanges",
    "TaskPriority",
    "TaskRow",
    "TaskStatus",
    "TaskStore",
    "Team",
    "TeamMember",
    "UpdateTask",
    "User",
    "__version__",
    "map_task_row",
    "parse_intent",
    "room_name",
    "task_payload",
]
