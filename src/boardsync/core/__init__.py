"""Real-time synchronization core."""

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

__all__ = [
    "BoardSyncError",
    "DispatchResult",
    "IntentValidationError",
    "RoomMembership",
    "SendFn",
    "Session",
    "SessionNotFoundError",
    "SessionRegistry",
    "TaskBoard",
    "TaskBroadcastRouter",
    "map_task_row",
    "room_name",
    "task_payload",
]
