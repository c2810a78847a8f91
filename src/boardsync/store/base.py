"""Abstract base class for the task store adapter."""

from __future__ import annotations

from abc import ABC, abstractmethod

from boardsync.models.enums import TaskStatus
from boardsync.models.task import NewTask, TaskChanges, TaskRow
from boardsync.models.team import Team, TeamMember, User


def parse_task_id(task_id: str | int) -> int | None:
    """Return the store's numeric key for a wire task id, or ``None``.

    Only the canonical decimal spelling of a row id matches: ``"10"`` does,
    while ``"010"``, ``" 10"``, ``"1_0"`` and non-ASCII digits do not. Callers
    treat ``None`` as not found.
    """
    if isinstance(task_id, bool):
        return None
    if isinstance(task_id, int):
        return task_id
    if not (isinstance(task_id, str) and task_id.isascii() and task_id.isdigit()):
        return None
    key = int(task_id)
    return key if str(key) == task_id else None


class TaskStore(ABC):
    """Persistent storage for tasks, users, teams, and membership.

    Implement this ABC to plug in any relational backend. The library
    ships with ``InMemoryTaskStore`` for development and testing and
    ``PostgresTaskStore`` for production.

    Task reads return raw rows (``TaskRow``) with snake_case keys, the
    derived ``assigned_to_name`` and ``created_by_name`` columns joined
    from users at read time. Any method may raise; the caller decides
    what a failure means.
    """

    async def init(self) -> None:
        """Prepare connections and schema. The default does nothing."""
        return None

    async def close(self) -> None:
        """Release resources. The default does nothing."""
        return None

    async def __aenter__(self) -> TaskStore:
        await self.init()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # Task operations

    @abstractmethod
    async def create_task(self, task: NewTask) -> str:
        """Insert a task and return its store-assigned id as text."""
        ...

    @abstractmethod
    async def get_task(self, task_id: str) -> TaskRow | None:
        """Get a task row with display names, or ``None`` if absent."""
        ...

    @abstractmethod
    async def update_task(self, task_id: str, changes: TaskChanges) -> bool:
        """Replace a task's editable fields. Returns ``False`` if no row matched."""
        ...

    @abstractmethod
    async def set_task_status(self, task_id: str, status: TaskStatus) -> bool:
        """Replace only the status. Returns ``False`` if no row matched."""
        ...

    @abstractmethod
    async def delete_task(self, task_id: str) -> bool:
        """Delete a task. Returns ``True`` if the task existed."""
        ...

    @abstractmethod
    async def list_personal_tasks(self, user_id: int) -> list[TaskRow]:
        """Tasks the user owns outside any team, plus any task assigned to them.

        Newest ``created_at`` first.
        """
        ...

    @abstractmethod
    async def list_team_tasks(self, team_id: int) -> list[TaskRow]:
        """All tasks scoped to the team, newest ``created_at`` first."""
        ...

    # User operations

    @abstractmethod
    async def create_user(self, name: str, email: str) -> User:
        """Create a user record."""
        ...

    @abstractmethod
    async def get_user(self, user_id: int) -> User | None:
        """Get a user by ID."""
        ...

    @abstractmethod
    async def search_users(self, email_fragment: str, limit: int = 10) -> list[User]:
        """Find users whose email contains the fragment (case-insensitive)."""
        ...

    # Team operations

    @abstractmethod
    async def create_team(self, name: str, owner_id: int) -> Team:
        """Create a team and add the owner as its first member."""
        ...

    @abstractmethod
    async def get_team(self, team_id: int) -> Team | None:
        """Get a team by ID."""
        ...

    @abstractmethod
    async def list_teams_for_user(self, user_id: int) -> list[Team]:
        """List teams the user belongs to."""
        ...

    @abstractmethod
    async def list_team_members(self, team_id: int) -> list[TeamMember]:
        """List a team's members."""
        ...

    @abstractmethod
    async def add_team_member(self, team_id: int, user_id: int) -> bool:
        """Add a member. Returns ``False`` if already a member."""
        ...

    @abstractmethod
    async def remove_team_member(self, team_id: int, user_id: int) -> bool:
        """Remove a member. Returns ``True`` if the user was a member."""
        ...

    @abstractmethod
    async def is_team_member(self, team_id: int, user_id: int) -> bool:
        """Return whether the user belongs to the team."""
        ...
