"""Shared test fixtures and helpers."""

from __future__ import annotations

from typing import Any

import pytest

from boardsync.core.framework import TaskBoard
from boardsync.core.session import Session
from boardsync.models.framework_event import FrameworkEvent
from boardsync.store.memory import InMemoryTaskStore


class Inbox:
    """Records every ``(event, payload)`` frame sent to one session."""

    def __init__(self) -> None:
        self.frames: list[tuple[str, Any]] = []

    async def __call__(self, event: str, payload: Any) -> None:
        self.frames.append((event, payload))

    @property
    def events(self) -> list[str]:
        return [event for event, _ in self.frames]

    def payloads(self, event: str) -> list[Any]:
        return [payload for name, payload in self.frames if name == event]

    def last(self, event: str) -> Any:
        matching = self.payloads(event)
        assert matching, f"no {event!r} frame received; got {self.events}"
        return matching[-1]

    def clear(self) -> None:
        self.frames.clear()


@pytest.fixture
def store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


@pytest.fixture
def board(store: InMemoryTaskStore) -> TaskBoard:
    return TaskBoard(store)


@pytest.fixture
def fw_events(board: TaskBoard) -> list[FrameworkEvent]:
    """Every framework event the board emits, in order."""
    received: list[FrameworkEvent] = []

    async def record(event: FrameworkEvent) -> None:
        received.append(event)

    for event_type in (
        "session_connected",
        "session_disconnected",
        "intent_rejected",
        "intent_dropped",
        "store_failed",
        "task_dispatched",
    ):
        board.on(event_type)(record)
    return received


async def connect(
    board: TaskBoard,
    user_id: int | None = None,
    team_id: int | None = None,
) -> tuple[Session, Inbox]:
    """Connect a client, optionally bind a user and join a team, then clear its inbox."""
    inbox = Inbox()
    session = await board.connect(inbox)
    if user_id is not None:
        await board.receive(session.id, "set:user", user_id)
    if team_id is not None:
        await board.receive(session.id, "join:team", team_id)
    inbox.clear()
    return session, inbox
