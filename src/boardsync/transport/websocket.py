"""WebSocket transport: one board session per client connection."""

from __future__ import annotations

import json
import logging
from typing import Any

from boardsync.core.framework import SessionNotFoundError, TaskBoard

# Optional dependency - import for type checking and availability check
try:
    import websockets
    from websockets.asyncio.server import Server, ServerConnection, serve

    HAS_WEBSOCKETS = True
except ImportError:
    websockets = None  # type: ignore[assignment]
    Server = None  # type: ignore[assignment, misc]
    ServerConnection = None  # type: ignore[assignment, misc]
    serve = None  # type: ignore[assignment]
    HAS_WEBSOCKETS = False

logger = logging.getLogger("boardsync.transport.websocket")


def encode_frame(event: str, payload: Any) -> str:
    """Encode an outbound event as ``{"event": ..., "data": ...}``."""
    return json.dumps({"event": event, "data": payload})


def decode_frame(raw: str | bytes) -> tuple[str, Any] | None:
    """Decode an inbound frame into ``(event, payload)``.

    Accepts ``{"event": name, "data": payload}`` objects and
    ``[name, payload]`` arrays (the payload may be omitted in both).
    Returns ``None`` for anything else.
    """
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        data = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.debug("Failed to decode frame: %s", e)
        return None

    if isinstance(data, dict) and isinstance(data.get("event"), str):
        return data["event"], data.get("data")
    if isinstance(data, list) and data and isinstance(data[0], str) and len(data) <= 2:
        return data[0], data[1] if len(data) == 2 else None
    return None


class WebSocketServer:
    """Serves a :class:`TaskBoard` over WebSockets.

    Example:
        board = TaskBoard(store)
        server = WebSocketServer(board, port=4000)
        await server.serve_forever()
    """

    def __init__(
        self,
        board: TaskBoard,
        host: str = "0.0.0.0",
        port: int = 4000,
        *,
        max_size: int = 2**20,  # 1 MB
    ) -> None:
        self._board = board
        self._host = host
        self._port = port
        self._max_size = max_size
        self._server: Server | None = None

    @property
    def name(self) -> str:
        return f"websocket:{self._host}:{self._port}"

    async def handle_connection(self, connection: ServerConnection) -> None:
        """Run one client connection until it closes."""

        async def send(event: str, payload: Any) -> None:
            await connection.send(encode_frame(event, payload))

        session = await self._board.connect(send)
        try:
            async for raw in connection:
                decoded = decode_frame(raw)
                if decoded is None:
                    logger.warning(
                        "Skipping undecodable frame from session %s",
                        session.id,
                        extra={"session_id": session.id},
                    )
                    continue
                event, payload = decoded
                try:
                    await self._board.receive(session.id, event, payload)
                except SessionNotFoundError:
                    logger.info(
                        "Session %s was evicted; closing connection",
                        session.id,
                        extra={"session_id": session.id},
                    )
                    break
        except websockets.ConnectionClosed:
            logger.debug("Connection for session %s closed abruptly", session.id)
        finally:
            await self._board.disconnect(session.id)

    async def start(self) -> None:
        """Start listening without blocking."""
        if not HAS_WEBSOCKETS:
            raise ImportError(
                "websockets is required for WebSocketServer. "
                "Install it with: pip install boardsync[websocket]"
            )
        self._server = await serve(
            self.handle_connection,
            self._host,
            self._port,
            max_size=self._max_size,
        )
        logger.info("Board server listening on %s", self.name)

    async def stop(self) -> None:
        """Stop accepting connections and wait for open ones to close."""
        if self._server is None:
            return
        self._server.close()
        await self._server.wait_closed()
        self._server = None

    async def serve_forever(self) -> None:
        """Start (if needed) and serve until cancelled."""
        if self._server is None:
            await self.start()
        assert self._server is not None
        try:
            await self._server.serve_forever()
        finally:
            await self.stop()
