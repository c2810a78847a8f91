"""Run a board server: ``python -m boardsync``."""

from __future__ import annotations

import asyncio
import contextlib
import logging

from boardsync.config import BoardSyncConfig
from boardsync.core.framework import TaskBoard
from boardsync.store.base import TaskStore
from boardsync.store.memory import InMemoryTaskStore
from boardsync.transport.websocket import WebSocketServer

logger = logging.getLogger("boardsync")


def build_store(config: BoardSyncConfig) -> TaskStore:
    """Postgres when a DSN is configured, otherwise in-memory."""
    if config.postgres_dsn:
        from boardsync.store.postgres import PostgresTaskStore

        return PostgresTaskStore(
            dsn=config.postgres_dsn,
            min_size=config.pool_min_size,
            max_size=config.pool_max_size,
        )
    logger.warning("BOARDSYNC_POSTGRES_DSN not set; tasks are kept in memory only")
    return InMemoryTaskStore()


async def run(config: BoardSyncConfig) -> None:
    store = build_store(config)
    async with store:
        board = TaskBoard(store, require_team_membership=config.require_team_membership)
        server = WebSocketServer(
            board, config.host, config.port, max_size=config.max_message_size
        )
        try:
            await server.serve_forever()
        finally:
            await board.close()


def main() -> None:
    config = BoardSyncConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(run(config))


if __name__ == "__main__":
    main()
