"""Task broadcast routing: persist each intent, then fan the result out.

Every intent walks the same stages::

    received -> validated -> persisted -> mapped -> dispatched

and stops early as ``dropped`` (no identity, task not found, room changed)
or ``failed`` (the store raised, or returned a row that does not map).
Nothing is re-raised to the transport; the returned :class:`DispatchResult`
records where the intent stopped.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from boardsync.core.mapper import map_task_row, task_payload
from boardsync.core.rooms import RoomMembership, room_name
from boardsync.core.session import Session, SessionRegistry
from boardsync.models.enums import DispatchStage, OutboundEvent, TaskStatus
from boardsync.models.framework_event import FrameworkEvent
from boardsync.models.intent import (
    MUTATING_INTENTS,
    CreateTask,
    DeleteTask,
    GetTasks,
    Intent,
    JoinTeam,
    LeaveTeam,
    MoveTask,
    SetUser,
    UpdateTask,
)
from boardsync.models.task import NewTask, TaskChanges, TaskRow
from boardsync.store.base import TaskStore

logger = logging.getLogger("boardsync.router")

EventSink = Callable[[FrameworkEvent], Awaitable[None]]
EvictFn = Callable[[str], Awaitable[None]]


@dataclass
class DispatchResult:
    """Outcome of routing one intent."""

    intent: str
    stage: DispatchStage
    event: OutboundEvent | None = None
    payload: Any = None
    recipients: list[str] = field(default_factory=list)
    reason: str | None = None
    error: str | None = None
    reached: DispatchStage = DispatchStage.RECEIVED
    """Last stage completed before the intent stopped."""

    @property
    def dispatched(self) -> bool:
        return self.stage == DispatchStage.DISPATCHED


class TaskBroadcastRouter:
    """Applies intents through the store and decides who hears about them.

    Mutations reach the originating session directly and, when the task is
    team-scoped, every *other* session joined to that team's room. Snapshots
    (``sync:tasks`` / ``sync:team-tasks``) only ever go to the requesting
    session.
    """

    _MAX_CONSECUTIVE_SEND_ERRORS = 3

    def __init__(
        self,
        store: TaskStore,
        sessions: SessionRegistry,
        rooms: RoomMembership,
        *,
        require_team_membership: bool = False,
        event_sink: EventSink | None = None,
        on_evict: EvictFn | None = None,
    ) -> None:
        self._store = store
        self._sessions = sessions
        self._rooms = rooms
        self._require_team_membership = require_team_membership
        self._event_sink = event_sink
        self._on_evict = on_evict
        self._handlers: dict[type, Callable[[Session, Any], Awaitable[DispatchResult]]] = {
            SetUser: self.set_identity,
            JoinTeam: self.join_team,
            LeaveTeam: self.leave_team,
            GetTasks: self.refresh,
            CreateTask: self.create,
            UpdateTask: self.update,
            MoveTask: self.move,
            DeleteTask: self.delete,
        }

    async def handle(self, session: Session, intent: Intent) -> DispatchResult:
        """Route a validated intent for *session*."""
        if isinstance(intent, MUTATING_INTENTS) and not session.has_identity:
            return await self._drop(
                session, intent.kind, "no_identity", reached=DispatchStage.RECEIVED
            )
        handler = self._handlers[type(intent)]
        return await handler(session, intent)

    # -- Session context -----------------------------------------------------

    async def set_identity(self, session: Session, intent: SetUser) -> DispatchResult:
        """Bind the session to a user and send its personal board."""
        self._rooms.leave(session.id)
        session.team_id = None
        session.user_id = intent.user_id
        logger.info(
            "Session %s bound to user %s",
            session.id,
            intent.user_id,
            extra={"session_id": session.id, "user_id": intent.user_id},
        )
        return await self._send_personal_snapshot(session, intent.kind)

    async def join_team(self, session: Session, intent: JoinTeam) -> DispatchResult:
        """Switch the session into a team room and send that team's board."""
        team_id = intent.team_id
        if self._require_team_membership:
            if session.user_id is None:
                return await self._drop(session, intent.kind, "no_identity", team_id=team_id)
            try:
                allowed = await self._store.is_team_member(team_id, session.user_id)
            except Exception as exc:
                return await self._store_failed(session, intent.kind, exc, team_id=team_id)
            if not allowed:
                return await self._drop(session, intent.kind, "not_a_member", team_id=team_id)

        self._rooms.join(session.id, team_id)
        session.team_id = team_id
        return await self._send_team_snapshot(session, intent.kind, team_id)

    async def leave_team(self, session: Session, intent: LeaveTeam) -> DispatchResult:
        """Leave the current room and fall back to the personal board."""
        self._rooms.leave(session.id)
        session.team_id = None
        if session.user_id is None:
            return await self._drop(session, intent.kind, "no_identity")
        return await self._send_personal_snapshot(session, intent.kind)

    async def refresh(self, session: Session, intent: GetTasks) -> DispatchResult:
        """Re-send the caller's personal board without changing anything."""
        if session.user_id is None:
            return await self._drop(session, intent.kind, "no_identity")
        return await self._send_personal_snapshot(session, intent.kind)

    # -- Mutations -----------------------------------------------------------

    async def create(self, session: Session, intent: CreateTask) -> DispatchResult:
        """Persist a new task and announce it.

        Team scope is the intent's ``teamId``, else the session's current
        room, else personal. Status always starts at ``todo``.
        """
        if session.user_id is None:
            return await self._drop(session, intent.kind, "no_identity")
        team_id = intent.team_id if intent.team_id is not None else session.team_id
        new_task = NewTask(
            title=intent.title,
            description=intent.description,
            status=TaskStatus.TODO,
            priority=intent.priority,
            category=intent.category,
            team_id=team_id,
            assigned_to=intent.assigned_to,
            created_by=session.user_id,
        )
        try:
            task_id = await self._store.create_task(new_task)
        except Exception as exc:
            return await self._store_failed(session, intent.kind, exc, team_id=team_id)
        try:
            row = await self._store.get_task(task_id)
        except Exception as exc:
            return await self._store_failed(
                session, intent.kind, exc, team_id=team_id, reached=DispatchStage.PERSISTED
            )
        if row is None:
            return await self._drop(
                session, intent.kind, "not_found", task_id=task_id, reached=DispatchStage.PERSISTED
            )
        return await self._dispatch_task(session, intent.kind, OutboundEvent.TASK_CREATED, row)

    async def update(self, session: Session, intent: UpdateTask) -> DispatchResult:
        """Replace every editable field of a task. Last write wins."""
        changes = TaskChanges(
            title=intent.title,
            description=intent.description,
            status=intent.status,
            priority=intent.priority,
            category=intent.category,
            assigned_to=intent.assigned_to,
        )
        try:
            matched = await self._store.update_task(intent.id, changes)
            row = await self._store.get_task(intent.id) if matched else None
        except Exception as exc:
            return await self._store_failed(session, intent.kind, exc, task_id=intent.id)
        if row is None:
            return await self._drop(session, intent.kind, "not_found", task_id=intent.id)
        return await self._dispatch_task(session, intent.kind, OutboundEvent.TASK_UPDATED, row)

    async def move(self, session: Session, intent: MoveTask) -> DispatchResult:
        """Change only a task's status."""
        try:
            matched = await self._store.set_task_status(intent.id, intent.new_status)
            row = await self._store.get_task(intent.id) if matched else None
        except Exception as exc:
            return await self._store_failed(session, intent.kind, exc, task_id=intent.id)
        if row is None:
            return await self._drop(session, intent.kind, "not_found", task_id=intent.id)
        logger.info(
            "Task %s moved to %s",
            intent.id,
            intent.new_status,
            extra={"session_id": session.id, "task_id": intent.id},
        )
        return await self._dispatch_task(session, intent.kind, OutboundEvent.TASK_UPDATED, row)

    async def delete(self, session: Session, intent: DeleteTask) -> DispatchResult:
        """Delete a task; the room is notified if the task was team-scoped."""
        try:
            row = await self._store.get_task(intent.id)
            deleted = await self._store.delete_task(intent.id) if row is not None else False
        except Exception as exc:
            return await self._store_failed(session, intent.kind, exc, task_id=intent.id)
        if row is None or not deleted:
            return await self._drop(session, intent.kind, "not_found", task_id=intent.id)

        task_id = str(row["id"])
        team_id = row.get("team_id")
        recipients = await self._fan_out(session, OutboundEvent.TASK_DELETED, task_id, team_id)
        return await self._dispatched(
            session, intent.kind, OutboundEvent.TASK_DELETED, task_id, recipients, team_id=team_id
        )

    # -- Snapshots -----------------------------------------------------------

    async def _send_personal_snapshot(self, session: Session, kind: str) -> DispatchResult:
        user_id = session.user_id
        assert user_id is not None
        try:
            rows = await self._store.list_personal_tasks(user_id)
        except Exception as exc:
            return await self._store_failed(session, kind, exc)
        try:
            payload = [task_payload(r) for r in rows]
        except ValidationError as exc:
            return await self._unmappable(session, kind, exc)
        if session.user_id != user_id:
            return await self._drop(
                session, kind, "identity_changed", reached=DispatchStage.MAPPED
            )
        recipients = await self._deliver_to(session, OutboundEvent.SYNC_TASKS, payload)
        return await self._dispatched(session, kind, OutboundEvent.SYNC_TASKS, payload, recipients)

    async def _send_team_snapshot(self, session: Session, kind: str, team_id: int) -> DispatchResult:
        try:
            rows = await self._store.list_team_tasks(team_id)
        except Exception as exc:
            return await self._store_failed(session, kind, exc, team_id=team_id)
        try:
            payload = [task_payload(r) for r in rows]
        except ValidationError as exc:
            return await self._unmappable(session, kind, exc, team_id=team_id)
        # The session may have switched rooms while the store was queried.
        if self._rooms.room_of(session.id) != team_id:
            return await self._drop(
                session, kind, "room_changed", team_id=team_id, reached=DispatchStage.MAPPED
            )
        recipients = await self._deliver_to(session, OutboundEvent.SYNC_TEAM_TASKS, payload)
        return await self._dispatched(
            session, kind, OutboundEvent.SYNC_TEAM_TASKS, payload, recipients, team_id=team_id
        )

    # -- Delivery ------------------------------------------------------------

    async def _dispatch_task(
        self, session: Session, kind: str, event: OutboundEvent, row: TaskRow
    ) -> DispatchResult:
        try:
            task = map_task_row(row)
        except ValidationError as exc:
            return await self._unmappable(session, kind, exc, task_id=str(row.get("id")))
        payload = task.to_wire()
        recipients = await self._fan_out(session, event, payload, task.team_id)
        return await self._dispatched(
            session, kind, event, payload, recipients, team_id=task.team_id, task_id=task.id
        )

    async def _fan_out(
        self, origin: Session, event: OutboundEvent, payload: Any, team_id: int | None
    ) -> list[str]:
        """Send to the origin, then to the other members of the team room."""
        recipients = await self._deliver_to(origin, event, payload)
        if team_id is None:
            return recipients
        for session_id in sorted(self._rooms.members(team_id)):
            if session_id == origin.id:
                continue
            member = self._sessions.get(session_id)
            if member is None:
                continue
            recipients.extend(await self._deliver_to(member, event, payload))
        logger.debug(
            "Broadcast %s to %s (%d recipients)",
            event,
            room_name(team_id),
            len(recipients),
            extra={"session_id": origin.id, "team_id": team_id},
        )
        return recipients

    async def _deliver_to(self, session: Session, event: OutboundEvent, payload: Any) -> list[str]:
        if session.id not in self._sessions:
            return []
        try:
            await session.send(event.value, payload)
        except Exception:
            await self._handle_send_error(session)
            return []
        session.send_errors = 0
        return [session.id]

    async def _handle_send_error(self, session: Session) -> None:
        """Count a failed send and evict the session after repeated failures."""
        session.send_errors += 1
        if session.send_errors >= self._MAX_CONSECUTIVE_SEND_ERRORS:
            logger.warning(
                "Session %s removed after %d consecutive send failures",
                session.id,
                session.send_errors,
            )
            if self._on_evict is not None:
                await self._on_evict(session.id)
            else:
                self._rooms.leave(session.id)
                self._sessions.unregister(session.id)
        else:
            logger.warning(
                "Send failed for session %s (attempt %d/%d)",
                session.id,
                session.send_errors,
                self._MAX_CONSECUTIVE_SEND_ERRORS,
                exc_info=True,
            )

    # -- Results -------------------------------------------------------------

    async def _dispatched(
        self,
        session: Session,
        kind: str,
        event: OutboundEvent,
        payload: Any,
        recipients: list[str],
        *,
        team_id: int | None = None,
        task_id: str | None = None,
    ) -> DispatchResult:
        await self._publish(
            "task_dispatched",
            session,
            team_id=team_id,
            task_id=task_id,
            data={"intent": kind, "event": event.value, "recipients": len(recipients)},
        )
        return DispatchResult(
            intent=kind,
            stage=DispatchStage.DISPATCHED,
            event=event,
            payload=payload,
            recipients=recipients,
            reached=DispatchStage.DISPATCHED,
        )

    async def _drop(
        self,
        session: Session,
        kind: str,
        reason: str,
        *,
        team_id: int | None = None,
        task_id: str | None = None,
        reached: DispatchStage = DispatchStage.VALIDATED,
    ) -> DispatchResult:
        logger.info(
            "Dropped %s from session %s: %s",
            kind,
            session.id,
            reason,
            extra={"session_id": session.id, "user_id": session.user_id, "task_id": task_id},
        )
        await self._publish(
            "intent_dropped",
            session,
            team_id=team_id,
            task_id=task_id,
            data={"intent": kind, "reason": reason},
        )
        return DispatchResult(
            intent=kind, stage=DispatchStage.DROPPED, reason=reason, reached=reached
        )

    async def _store_failed(
        self,
        session: Session,
        kind: str,
        exc: Exception,
        *,
        team_id: int | None = None,
        task_id: str | None = None,
        reached: DispatchStage = DispatchStage.VALIDATED,
        message: str = "Store call failed",
    ) -> DispatchResult:
        logger.exception(
            "%s for %s from session %s",
            message,
            kind,
            session.id,
            extra={"session_id": session.id, "user_id": session.user_id, "task_id": task_id},
        )
        error = f"{type(exc).__name__}: {exc}"
        await self._publish(
            "store_failed",
            session,
            team_id=team_id,
            task_id=task_id,
            data={"intent": kind, "error": error},
        )
        return DispatchResult(
            intent=kind, stage=DispatchStage.FAILED, error=error, reached=reached
        )

    async def _unmappable(
        self,
        session: Session,
        kind: str,
        exc: ValidationError,
        *,
        team_id: int | None = None,
        task_id: str | None = None,
    ) -> DispatchResult:
        """A store row that does not fit the task model is a store fault."""
        return await self._store_failed(
            session,
            kind,
            exc,
            team_id=team_id,
            task_id=task_id,
            reached=DispatchStage.PERSISTED,
            message="Store returned an unmappable task row",
        )

    async def _publish(
        self,
        event_type: str,
        session: Session,
        *,
        team_id: int | None = None,
        task_id: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        if self._event_sink is None:
            return
        await self._event_sink(
            FrameworkEvent(
                type=event_type,
                session_id=session.id,
                user_id=session.user_id,
                team_id=team_id if team_id is not None else session.team_id,
                task_id=task_id,
                data=data or {},
            )
        )
