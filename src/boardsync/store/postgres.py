"""PostgreSQL implementation of TaskStore using asyncpg."""

from __future__ import annotations

from typing import Any

from boardsync.models.enums import MemberRole, TaskStatus
from boardsync.models.task import NewTask, TaskChanges, TaskRow
from boardsync.models.team import Team, TeamMember, User
from boardsync.store.base import TaskStore, parse_task_id

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS users (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT NOT NULL UNIQUE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS teams (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL,
    created_by INTEGER NOT NULL REFERENCES users(id),
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS team_members (
    team_id INTEGER NOT NULL REFERENCES teams(id) ON DELETE CASCADE,
    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    role TEXT NOT NULL DEFAULT 'member',
    joined_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    PRIMARY KEY (team_id, user_id)
);

CREATE TABLE IF NOT EXISTS tasks (
    id SERIAL PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    status TEXT NOT NULL DEFAULT 'todo',
    priority TEXT NOT NULL DEFAULT 'Medium',
    category TEXT NOT NULL DEFAULT 'Feature',
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    team_id INTEGER REFERENCES teams(id) ON DELETE CASCADE,
    assigned_to INTEGER REFERENCES users(id) ON DELETE SET NULL,
    created_by INTEGER NOT NULL REFERENCES users(id),
    CHECK (status IN ('todo', 'in-progress', 'done')),
    CHECK (priority IN ('Low', 'Medium', 'High')),
    CHECK (category IN ('Bug', 'Feature', 'Enhancement'))
);
CREATE INDEX IF NOT EXISTS idx_tasks_team_id ON tasks(team_id);
CREATE INDEX IF NOT EXISTS idx_tasks_created_by ON tasks(created_by);
CREATE INDEX IF NOT EXISTS idx_tasks_assigned_to ON tasks(assigned_to);
"""

_TASK_SELECT = """\
SELECT t.id, t.title, t.description, t.status, t.priority, t.category,
       t.created_at, t.team_id, t.assigned_to, t.created_by,
       a.name AS assigned_to_name, c.name AS created_by_name
FROM tasks t
LEFT JOIN users a ON a.id = t.assigned_to
LEFT JOIN users c ON c.id = t.created_by
"""

_NEWEST_FIRST = " ORDER BY t.created_at DESC, t.id DESC"


def _affected(tag: str) -> bool:
    """Whether an asyncpg status tag (e.g. ``UPDATE 1``) reports any rows."""
    return not tag.endswith(" 0")


class PostgresTaskStore(TaskStore):
    """PostgreSQL-backed task store using asyncpg."""

    def __init__(
        self,
        dsn: str | None = None,
        pool: Any = None,
        *,
        min_size: int = 2,
        max_size: int = 10,
    ) -> None:
        try:
            import asyncpg as _asyncpg
        except ImportError as exc:
            raise ImportError(
                "asyncpg is required for PostgresTaskStore. "
                "Install it with: pip install boardsync[postgres]"
            ) from exc
        self._asyncpg = _asyncpg
        self._dsn = dsn
        self._pool = pool
        self._owns_pool = pool is None
        self._min_size = min_size
        self._max_size = max_size

    async def init(self) -> None:
        """Create the connection pool (if needed) and ensure schema exists."""
        if self._pool is None:
            self._pool = await self._asyncpg.create_pool(
                self._dsn,
                min_size=self._min_size,
                max_size=self._max_size,
            )
        async with self._pool.acquire() as conn:
            await conn.execute(_SCHEMA)

    async def close(self) -> None:
        """Release the connection pool if we own it."""
        if self._pool is not None and self._owns_pool:
            await self._pool.close()
            self._pool = None

    # ── Task operations ──────────────────────────────────────────

    async def create_task(self, task: NewTask) -> str:
        async with self._pool.acquire() as conn:
            task_id = await conn.fetchval(
                "INSERT INTO tasks "
                "(title, description, status, priority, category, team_id, assigned_to, created_by) "
                "VALUES ($1, $2, $3, $4, $5, $6, $7, $8) RETURNING id",
                task.title,
                task.description,
                task.status.value,
                task.priority.value,
                task.category.value,
                task.team_id,
                task.assigned_to,
                task.created_by,
            )
        return str(task_id)

    async def get_task(self, task_id: str) -> TaskRow | None:
        key = parse_task_id(task_id)
        if key is None:
            return None
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(_TASK_SELECT + " WHERE t.id = $1", key)
        return dict(row) if row is not None else None

    async def update_task(self, task_id: str, changes: TaskChanges) -> bool:
        key = parse_task_id(task_id)
        if key is None:
            return False
        async with self._pool.acquire() as conn:
            tag = await conn.execute(
                "UPDATE tasks SET title = $2, description = $3, status = $4, "
                "priority = $5, category = $6, assigned_to = $7 WHERE id = $1",
                key,
                changes.title,
                changes.description,
                changes.status.value,
                changes.priority.value,
                changes.category.value,
                changes.assigned_to,
            )
        return _affected(tag)

    async def set_task_status(self, task_id: str, status: TaskStatus) -> bool:
        key = parse_task_id(task_id)
        if key is None:
            return False
        async with self._pool.acquire() as conn:
            tag = await conn.execute("UPDATE tasks SET status = $2 WHERE id = $1", key, status.value)
        return _affected(tag)

    async def delete_task(self, task_id: str) -> bool:
        key = parse_task_id(task_id)
        if key is None:
            return False
        async with self._pool.acquire() as conn:
            tag = await conn.execute("DELETE FROM tasks WHERE id = $1", key)
        return bool(tag == "DELETE 1")

    async def list_personal_tasks(self, user_id: int) -> list[TaskRow]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                _TASK_SELECT
                + " WHERE (t.created_by = $1 AND t.team_id IS NULL) OR t.assigned_to = $1"
                + _NEWEST_FIRST,
                user_id,
            )
        return [dict(r) for r in rows]

    async def list_team_tasks(self, team_id: int) -> list[TaskRow]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(_TASK_SELECT + " WHERE t.team_id = $1" + _NEWEST_FIRST, team_id)
        return [dict(r) for r in rows]

    # ── User operations ──────────────────────────────────────────

    async def create_user(self, name: str, email: str) -> User:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                "INSERT INTO users (name, email) VALUES ($1, $2) "
                "RETURNING id, name, email, created_at",
                name,
                email,
            )
        return User(**dict(row))

    async def get_user(self, user_id: int) -> User | None:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT id, name, email, created_at FROM users WHERE id = $1", user_id
            )
        return User(**dict(row)) if row is not None else None

    async def search_users(self, email_fragment: str, limit: int = 10) -> list[User]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT id, name, email, created_at FROM users "
                "WHERE position(lower($1) in lower(email)) > 0 ORDER BY id LIMIT $2",
                email_fragment,
                limit,
            )
        return [User(**dict(r)) for r in rows]

    # ── Team operations ──────────────────────────────────────────

    async def create_team(self, name: str, owner_id: int) -> Team:
        async with self._pool.acquire() as conn, conn.transaction():
            row = await conn.fetchrow(
                "INSERT INTO teams (name, created_by) VALUES ($1, $2) "
                "RETURNING id, name, created_by, created_at",
                name,
                owner_id,
            )
            await conn.execute(
                "INSERT INTO team_members (team_id, user_id, role) VALUES ($1, $2, $3)",
                row["id"],
                owner_id,
                MemberRole.OWNER.value,
            )
        return Team(**dict(row))

    async def get_team(self, team_id: int) -> Team | None:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT id, name, created_by, created_at FROM teams WHERE id = $1", team_id
            )
        return Team(**dict(row)) if row is not None else None

    async def list_teams_for_user(self, user_id: int) -> list[Team]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT t.id, t.name, t.created_by, t.created_at FROM teams t "
                "JOIN team_members m ON m.team_id = t.id WHERE m.user_id = $1 "
                "ORDER BY t.created_at DESC",
                user_id,
            )
        return [Team(**dict(r)) for r in rows]

    async def list_team_members(self, team_id: int) -> list[TeamMember]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT u.id, u.name, u.email, u.created_at, m.role FROM team_members m "
                "JOIN users u ON u.id = m.user_id WHERE m.team_id = $1 ORDER BY m.joined_at",
                team_id,
            )
        return [
            TeamMember(
                team_id=team_id,
                user=User(id=r["id"], name=r["name"], email=r["email"], created_at=r["created_at"]),
                role=MemberRole(r["role"]),
            )
            for r in rows
        ]

    async def add_team_member(self, team_id: int, user_id: int) -> bool:
        async with self._pool.acquire() as conn:
            tag = await conn.execute(
                "INSERT INTO team_members (team_id, user_id) VALUES ($1, $2) "
                "ON CONFLICT DO NOTHING",
                team_id,
                user_id,
            )
        return _affected(tag)

    async def remove_team_member(self, team_id: int, user_id: int) -> bool:
        async with self._pool.acquire() as conn:
            tag = await conn.execute(
                "DELETE FROM team_members WHERE team_id = $1 AND user_id = $2", team_id, user_id
            )
        return bool(tag == "DELETE 1")

    async def is_team_member(self, team_id: int, user_id: int) -> bool:
        async with self._pool.acquire() as conn:
            found = await conn.fetchval(
                "SELECT 1 FROM team_members WHERE team_id = $1 AND user_id = $2", team_id, user_id
            )
        return found is not None
