"""Per-connection session records and the registry that indexes them."""

from __future__ import annotations

from collections.abc import Callable, Coroutine, Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

SendFn = Callable[[str, Any], Coroutine[Any, Any, None]]
"""Deliver ``(event_name, payload)`` to one live connection."""


@dataclass
class Session:
    """Server-side state for one live connection.

    ``user_id`` stays ``None`` until the client binds an identity;
    ``team_id`` names the single team room the session has joined, if any.
    """

    send: SendFn
    id: str = field(default_factory=lambda: uuid4().hex)
    user_id: int | None = None
    team_id: int | None = None
    connected_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    send_errors: int = 0

    @property
    def has_identity(self) -> bool:
        return self.user_id is not None


class SessionRegistry:
    """Session id -> session record."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def register(self, session: Session) -> Session:
        self._sessions[session.id] = session
        return session

    def unregister(self, session_id: str) -> Session | None:
        return self._sessions.pop(session_id, None)

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __iter__(self) -> Iterator[Session]:
        return iter(list(self._sessions.values()))

    def __len__(self) -> int:
        return len(self._sessions)
