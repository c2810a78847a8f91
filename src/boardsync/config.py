"""Runtime configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

_TRUE = frozenset({"1", "true", "yes", "on"})


@dataclass
class BoardSyncConfig:
    """Settings for running a board server.

    Attributes:
        host: Interface the WebSocket transport binds to.
        port: TCP port for the WebSocket transport.
        postgres_dsn: Connection string for ``PostgresTaskStore``. When
            unset the server runs on ``InMemoryTaskStore``.
        pool_min_size: Minimum asyncpg pool size.
        pool_max_size: Maximum asyncpg pool size.
        require_team_membership: Refuse ``join:team`` for non-members.
        log_level: Root logging level name.
        max_message_size: Largest inbound WebSocket frame, in bytes.
    """

    host: str = "0.0.0.0"
    port: int = 4000
    postgres_dsn: str | None = None
    pool_min_size: int = 2
    pool_max_size: int = 10
    require_team_membership: bool = False
    log_level: str = "INFO"
    max_message_size: int = 2**20

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, prefix: str = "BOARDSYNC_"
    ) -> BoardSyncConfig:
        """Build a config from ``BOARDSYNC_*`` environment variables.

        Unset variables keep their defaults. ``BOARDSYNC_PORT=abc`` and
        similar raise ``ValueError``.
        """
        env = os.environ if environ is None else environ
        config = cls()

        def get(name: str) -> str | None:
            value = env.get(prefix + name)
            return value if value not in (None, "") else None

        if (host := get("HOST")) is not None:
            config.host = host
        if (port := get("PORT")) is not None:
            config.port = int(port)
        config.postgres_dsn = get("POSTGRES_DSN")
        if (min_size := get("POOL_MIN_SIZE")) is not None:
            config.pool_min_size = int(min_size)
        if (max_size := get("POOL_MAX_SIZE")) is not None:
            config.pool_max_size = int(max_size)
        if (membership := get("REQUIRE_TEAM_MEMBERSHIP")) is not None:
            config.require_team_membership = membership.lower() in _TRUE
        if (level := get("LOG_LEVEL")) is not None:
            config.log_level = level.upper()
        if (max_message := get("MAX_MESSAGE_SIZE")) is not None:
            config.max_message_size = int(max_message)
        return config
