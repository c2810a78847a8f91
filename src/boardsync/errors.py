"""Exception hierarchy shared by the models and the framework."""

from __future__ import annotations


class BoardSyncError(Exception):
    """Base exception for all boardsync errors."""


class SessionNotFoundError(BoardSyncError):
    """No live session with the given id."""


class IntentValidationError(BoardSyncError):
    """An inbound event name or payload does not describe a valid intent."""

    def __init__(self, event: str, detail: str) -> None:
        super().__init__(f"{event}: {detail}")
        self.event = event
        self.detail = detail
