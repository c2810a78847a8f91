"""Tests for the WebSocket transport."""

from __future__ import annotations

import json
from typing import Any

import pytest
import websockets

from boardsync.core.framework import TaskBoard
from boardsync.transport.websocket import WebSocketServer, decode_frame, encode_frame


class FakeConnection:
    """Stands in for ``ServerConnection``: replays inbound frames, records outbound ones."""

    def __init__(self, frames: list[str | bytes], *, error: Exception | None = None) -> None:
        self._frames = frames
        self._error = error
        self.sent: list[dict[str, Any]] = []

    def __aiter__(self) -> FakeConnection:
        return self

    async def __anext__(self) -> str | bytes:
        if self._frames:
            return self._frames.pop(0)
        if self._error is not None:
            raise self._error
        raise StopAsyncIteration

    async def send(self, message: str) -> None:
        self.sent.append(json.loads(message))

    def events(self) -> list[str]:
        return [frame["event"] for frame in self.sent]


class TestFrames:
    def test_encode(self) -> None:
        assert json.loads(encode_frame("task:deleted", "3")) == {
            "event": "task:deleted",
            "data": "3",
        }

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ('{"event": "set:user", "data": 7}', ("set:user", 7)),
            ('{"event": "get:tasks"}', ("get:tasks", None)),
            ('["join:team", 3]', ("join:team", 3)),
            ('["leave:team"]', ("leave:team", None)),
            (b'{"event": "task:delete", "data": "5"}', ("task:delete", "5")),
        ],
    )
    def test_decode_accepted_shapes(self, raw: str | bytes, expected: tuple[str, Any]) -> None:
        assert decode_frame(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        ["not json", "42", '{"data": 1}', '{"event": 5}', "[]", '["a", 1, 2]', b"\xff\xfe"],
    )
    def test_decode_rejected_shapes(self, raw: str | bytes) -> None:
        assert decode_frame(raw) is None


class TestHandleConnection:
    async def test_frames_reach_board(self, board: TaskBoard) -> None:
        server = WebSocketServer(board)
        conn = FakeConnection(
            [
                json.dumps({"event": "set:user", "data": 7}),
                json.dumps({"event": "task:create", "data": {"title": "write tests"}}),
            ]
        )

        await server.handle_connection(conn)  # type: ignore[arg-type]

        assert conn.events() == ["sync:tasks", "task:created"]
        assert conn.sent[1]["data"]["title"] == "write tests"
        assert conn.sent[1]["data"]["status"] == "todo"

    async def test_session_removed_after_close(self, board: TaskBoard) -> None:
        server = WebSocketServer(board)
        conn = FakeConnection(['["join:team", 3]'])

        await server.handle_connection(conn)  # type: ignore[arg-type]

        assert len(board.sessions) == 0
        assert board.rooms.members(3) == frozenset()

    async def test_undecodable_frame_skipped(self, board: TaskBoard) -> None:
        server = WebSocketServer(board)
        conn = FakeConnection(["garbage", '["set:user", 7]'])

        await server.handle_connection(conn)  # type: ignore[arg-type]

        assert conn.events() == ["sync:tasks"]

    async def test_abrupt_close_still_disconnects(self, board: TaskBoard) -> None:
        server = WebSocketServer(board)
        conn = FakeConnection(
            ['["set:user", 7]'], error=websockets.ConnectionClosed(None, None)
        )

        await server.handle_connection(conn)  # type: ignore[arg-type]

        assert conn.events() == ["sync:tasks"]
        assert len(board.sessions) == 0

    def test_name(self, board: TaskBoard) -> None:
        assert WebSocketServer(board, "127.0.0.1", 4100).name == "websocket:127.0.0.1:4100"
