"""In-memory implementation of TaskStore."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from boardsync.models.enums import MemberRole, TaskStatus
from boardsync.models.task import NewTask, TaskChanges, TaskRow
from boardsync.models.team import Team, TeamMember, User
from boardsync.store.base import TaskStore, parse_task_id


class InMemoryTaskStore(TaskStore):
    """Dict-based in-memory store for development and testing.

    Rows are kept as plain column dicts keyed by an auto-incrementing
    integer id, the same shape a relational driver would return.
    """

    def __init__(self) -> None:
        self._tasks: dict[int, dict[str, Any]] = {}
        self._users: dict[int, User] = {}
        self._teams: dict[int, Team] = {}
        self._members: dict[int, dict[int, MemberRole]] = {}  # team_id -> user_id -> role
        self._next_task_id = 1
        self._next_user_id = 1
        self._next_team_id = 1

    def _row(self, columns: dict[str, Any]) -> TaskRow:
        row = dict(columns)
        assignee = self._users.get(columns["assigned_to"]) if columns["assigned_to"] else None
        creator = self._users.get(columns["created_by"])
        row["assigned_to_name"] = assignee.name if assignee is not None else None
        row["created_by_name"] = creator.name if creator is not None else None
        return row

    def _sorted_rows(self, columns: list[dict[str, Any]]) -> list[TaskRow]:
        ordered = sorted(columns, key=lambda c: (c["created_at"], c["id"]), reverse=True)
        return [self._row(c) for c in ordered]

    # Task operations

    async def create_task(self, task: NewTask) -> str:
        task_id = self._next_task_id
        self._next_task_id += 1
        self._tasks[task_id] = {
            "id": task_id,
            "title": task.title,
            "description": task.description,
            "status": task.status.value,
            "priority": task.priority.value,
            "category": task.category.value,
            "created_at": datetime.now(UTC),
            "team_id": task.team_id,
            "assigned_to": task.assigned_to,
            "created_by": task.created_by,
        }
        return str(task_id)

    async def get_task(self, task_id: str) -> TaskRow | None:
        key = parse_task_id(task_id)
        columns = self._tasks.get(key) if key is not None else None
        return self._row(columns) if columns is not None else None

    async def update_task(self, task_id: str, changes: TaskChanges) -> bool:
        key = parse_task_id(task_id)
        columns = self._tasks.get(key) if key is not None else None
        if columns is None:
            return False
        columns.update(
            title=changes.title,
            description=changes.description,
            status=changes.status.value,
            priority=changes.priority.value,
            category=changes.category.value,
            assigned_to=changes.assigned_to,
        )
        return True

    async def set_task_status(self, task_id: str, status: TaskStatus) -> bool:
        key = parse_task_id(task_id)
        columns = self._tasks.get(key) if key is not None else None
        if columns is None:
            return False
        columns["status"] = status.value
        return True

    async def delete_task(self, task_id: str) -> bool:
        key = parse_task_id(task_id)
        if key is None or key not in self._tasks:
            return False
        del self._tasks[key]
        return True

    async def list_personal_tasks(self, user_id: int) -> list[TaskRow]:
        matches = [
            c
            for c in self._tasks.values()
            if (c["created_by"] == user_id and c["team_id"] is None) or c["assigned_to"] == user_id
        ]
        return self._sorted_rows(matches)

    async def list_team_tasks(self, team_id: int) -> list[TaskRow]:
        return self._sorted_rows([c for c in self._tasks.values() if c["team_id"] == team_id])

    # User operations

    async def create_user(self, name: str, email: str) -> User:
        user = User(id=self._next_user_id, name=name, email=email)
        self._next_user_id += 1
        self._users[user.id] = user
        return user

    async def get_user(self, user_id: int) -> User | None:
        user = self._users.get(user_id)
        return user.model_copy() if user is not None else None

    async def search_users(self, email_fragment: str, limit: int = 10) -> list[User]:
        needle = email_fragment.lower()
        found = [u.model_copy() for u in self._users.values() if needle in u.email.lower()]
        return found[:limit]

    # Team operations

    async def create_team(self, name: str, owner_id: int) -> Team:
        team = Team(id=self._next_team_id, name=name, created_by=owner_id)
        self._next_team_id += 1
        self._teams[team.id] = team
        self._members[team.id] = {owner_id: MemberRole.OWNER}
        return team

    async def get_team(self, team_id: int) -> Team | None:
        team = self._teams.get(team_id)
        return team.model_copy() if team is not None else None

    async def list_teams_for_user(self, user_id: int) -> list[Team]:
        return [
            self._teams[team_id].model_copy()
            for team_id, members in self._members.items()
            if user_id in members and team_id in self._teams
        ]

    async def list_team_members(self, team_id: int) -> list[TeamMember]:
        return [
            TeamMember(team_id=team_id, user=self._users[user_id].model_copy(), role=role)
            for user_id, role in self._members.get(team_id, {}).items()
            if user_id in self._users
        ]

    async def add_team_member(self, team_id: int, user_id: int) -> bool:
        members = self._members.setdefault(team_id, {})
        if user_id in members:
            return False
        members[user_id] = MemberRole.MEMBER
        return True

    async def remove_team_member(self, team_id: int, user_id: int) -> bool:
        members = self._members.get(team_id, {})
        if user_id not in members:
            return False
        del members[user_id]
        return True

    async def is_team_member(self, team_id: int, user_id: int) -> bool:
        return user_id in self._members.get(team_id, {})
