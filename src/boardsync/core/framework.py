"""TaskBoard - central orchestrator for live task-board connections."""

from __future__ import annotations

import logging
from collections.abc import Callable, Coroutine
from typing import Any

from boardsync.core.rooms import RoomMembership
from boardsync.core.router import DispatchResult, TaskBroadcastRouter
from boardsync.core.session import SendFn, Session, SessionRegistry
from boardsync.errors import BoardSyncError, IntentValidationError, SessionNotFoundError
from boardsync.models.enums import DispatchStage
from boardsync.models.framework_event import FrameworkEvent
from boardsync.models.intent import parse_intent
from boardsync.store.base import TaskStore
from boardsync.store.memory import InMemoryTaskStore

__all__ = [
    "BoardSyncError",
    "FrameworkEventHandler",
    "IntentValidationError",
    "SessionNotFoundError",
    "TaskBoard",
]

logger = logging.getLogger("boardsync.framework")

FrameworkEventHandler = Callable[[FrameworkEvent], Coroutine[Any, Any, None]]


class TaskBoard:
    """Ties the task store, sessions, team rooms, and the router together.

    A transport calls :meth:`connect` for each new connection, feeds every
    inbound ``(event, payload)`` pair to :meth:`receive`, and calls
    :meth:`disconnect` when the connection closes. Outbound events reach the
    client through the ``send`` callback given to :meth:`connect`.
    """

    def __init__(
        self,
        store: TaskStore | None = None,
        *,
        require_team_membership: bool = False,
    ) -> None:
        """Initialise the board.

        Args:
            store: Task store adapter. Defaults to ``InMemoryTaskStore``.
            require_team_membership: Refuse ``join:team`` for users the store
                does not list as members of the team. Off by default, so any
                identified or anonymous session may join any room.
        """
        self._store = store or InMemoryTaskStore()
        self._sessions = SessionRegistry()
        self._rooms = RoomMembership()
        self._event_handlers: list[tuple[str, FrameworkEventHandler]] = []
        self._router = TaskBroadcastRouter(
            self._store,
            self._sessions,
            self._rooms,
            require_team_membership=require_team_membership,
            event_sink=self._emit_framework_event,
            on_evict=self.disconnect,
        )

    @property
    def store(self) -> TaskStore:
        return self._store

    @property
    def sessions(self) -> SessionRegistry:
        return self._sessions

    @property
    def rooms(self) -> RoomMembership:
        return self._rooms

    @property
    def router(self) -> TaskBroadcastRouter:
        return self._router

    # -- Connection lifecycle ------------------------------------------------

    async def connect(self, send: SendFn, session_id: str | None = None) -> Session:
        """Register a new connection and return its session.

        The session has no identity until the client sends ``set:user``.
        """
        session = Session(send=send) if session_id is None else Session(send=send, id=session_id)
        self._sessions.register(session)
        logger.info("Session %s connected", session.id, extra={"session_id": session.id})
        await self._emit_framework_event("session_connected", session=session)
        return session

    async def disconnect(self, session_id: str) -> None:
        """Drop a connection's session and its room membership.

        The router also calls this to evict a session whose sends keep
        failing. Disconnecting an unknown or already-evicted session is a
        no-op.
        """
        self._rooms.leave(session_id)
        session = self._sessions.unregister(session_id)
        if session is None:
            return
        logger.info(
            "Session %s disconnected",
            session_id,
            extra={"session_id": session_id, "user_id": session.user_id},
        )
        await self._emit_framework_event("session_disconnected", session=session)
        session.team_id = None

    def get_session(self, session_id: str) -> Session:
        """Look up a live session.

        Raises:
            SessionNotFoundError: The session is not connected.
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    # -- Inbound events ------------------------------------------------------

    async def receive(self, session_id: str, event: str, payload: Any = None) -> DispatchResult:
        """Validate and route one inbound event for a session.

        Malformed events are logged and discarded; the client gets no reply.

        Raises:
            SessionNotFoundError: The session is not connected.
        """
        session = self.get_session(session_id)
        try:
            intent = parse_intent(event, payload)
        except IntentValidationError as exc:
            logger.warning(
                "Discarded invalid %s from session %s: %s",
                exc.event,
                session_id,
                exc.detail,
                extra={"session_id": session_id, "user_id": session.user_id},
            )
            await self._emit_framework_event(
                "intent_rejected",
                session=session,
                data={"event": event, "detail": exc.detail},
            )
            return DispatchResult(intent=event, stage=DispatchStage.DROPPED, reason="invalid")
        return await self._router.handle(session, intent)

    # -- Observability -------------------------------------------------------

    def on(self, event_type: str) -> Callable[..., Any]:
        """Decorator to register a framework event handler filtered by type."""

        def decorator(fn: FrameworkEventHandler) -> FrameworkEventHandler:
            self._event_handlers.append((event_type, fn))
            return fn

        return decorator

    async def _emit_framework_event(
        self,
        event_type: str | FrameworkEvent,
        *,
        session: Session | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        """Emit a framework event to handlers registered for its type."""
        if isinstance(event_type, FrameworkEvent):
            fw_event = event_type
        else:
            fw_event = FrameworkEvent(
                type=event_type,
                session_id=session.id if session is not None else None,
                user_id=session.user_id if session is not None else None,
                team_id=session.team_id if session is not None else None,
                data=data or {},
            )
        for filter_type, handler in self._event_handlers:
            if filter_type == fw_event.type:
                try:
                    await handler(fw_event)
                except Exception:
                    logger.exception(
                        "Framework event handler failed",
                        extra={"event_type": fw_event.type, "session_id": fw_event.session_id},
                    )

    async def close(self) -> None:
        """Disconnect every session and close the store."""
        for session in self._sessions:
            await self.disconnect(session.id)
        await self._store.close()
