"""Tests for InMemoryTaskStore."""

from __future__ import annotations

import pytest

from boardsync.models.enums import MemberRole, TaskCategory, TaskPriority, TaskStatus
from boardsync.models.task import NewTask, TaskChanges
from boardsync.store.base import parse_task_id
from boardsync.store.memory import InMemoryTaskStore


class TestParseTaskId:
    def test_canonical_ids(self) -> None:
        assert parse_task_id("42") == 42
        assert parse_task_id("0") == 0
        assert parse_task_id(9) == 9

    @pytest.mark.parametrize(
        "task_id",
        ["abc", "1.5", " 7", "7 ", "1_0", "\uff15", "\u0667", "010", "+5", "-1", "", True],
    )
    def test_other_spellings_never_match(self, task_id: object) -> None:
        assert parse_task_id(task_id) is None  # type: ignore[arg-type]


class TestTaskOperations:
    async def test_create_and_get(self, store: InMemoryTaskStore) -> None:
        task_id = await store.create_task(NewTask(title="t", created_by=7))
        row = await store.get_task(task_id)
        assert row is not None
        assert row["id"] == int(task_id)
        assert row["status"] == "todo"
        assert row["team_id"] is None
        assert row["created_at"] is not None

    async def test_get_nonexistent(self, store: InMemoryTaskStore) -> None:
        assert await store.get_task("99") is None
        assert await store.get_task("not-a-number") is None

    async def test_ids_are_unique(self, store: InMemoryTaskStore) -> None:
        ids = {await store.create_task(NewTask(title=f"t{i}", created_by=1)) for i in range(5)}
        assert len(ids) == 5

    async def test_display_names_joined_at_read(self, store: InMemoryTaskStore) -> None:
        alice = await store.create_user("Alice", "alice@example.com")
        task_id = await store.create_task(
            NewTask(title="t", created_by=alice.id, assigned_to=alice.id)
        )
        row = await store.get_task(task_id)
        assert row is not None
        assert row["created_by_name"] == "Alice"
        assert row["assigned_to_name"] == "Alice"

    async def test_unknown_users_have_null_names(self, store: InMemoryTaskStore) -> None:
        task_id = await store.create_task(NewTask(title="t", created_by=50, assigned_to=51))
        row = await store.get_task(task_id)
        assert row is not None
        assert row["created_by_name"] is None
        assert row["assigned_to_name"] is None

    async def test_update(self, store: InMemoryTaskStore) -> None:
        task_id = await store.create_task(NewTask(title="t", description="d", created_by=7))
        changes = TaskChanges(
            title="new",
            description=None,
            status=TaskStatus.DONE,
            priority=TaskPriority.HIGH,
            category=TaskCategory.BUG,
            assigned_to=8,
        )
        assert await store.update_task(task_id, changes) is True
        row = await store.get_task(task_id)
        assert row is not None
        assert (row["title"], row["description"], row["status"]) == ("new", None, "done")
        assert row["assigned_to"] == 8

    async def test_update_nonexistent(self, store: InMemoryTaskStore) -> None:
        changes = TaskChanges(
            title="x",
            status=TaskStatus.TODO,
            priority=TaskPriority.LOW,
            category=TaskCategory.BUG,
        )
        assert await store.update_task("5", changes) is False

    async def test_set_status(self, store: InMemoryTaskStore) -> None:
        task_id = await store.create_task(NewTask(title="t", created_by=7))
        assert await store.set_task_status(task_id, TaskStatus.IN_PROGRESS) is True
        row = await store.get_task(task_id)
        assert row is not None
        assert row["status"] == "in-progress"
        assert await store.set_task_status("404", TaskStatus.DONE) is False

    async def test_delete(self, store: InMemoryTaskStore) -> None:
        task_id = await store.create_task(NewTask(title="t", created_by=7))
        assert await store.delete_task(task_id) is True
        assert await store.delete_task(task_id) is False
        assert await store.get_task(task_id) is None

    async def test_rows_are_copies(self, store: InMemoryTaskStore) -> None:
        task_id = await store.create_task(NewTask(title="t", created_by=7))
        row = await store.get_task(task_id)
        assert row is not None
        row["title"] = "mutated"
        again = await store.get_task(task_id)
        assert again is not None
        assert again["title"] == "t"


class TestUserAndTeamOperations:
    async def test_search_users(self, store: InMemoryTaskStore) -> None:
        await store.create_user("Alice", "alice@example.com")
        await store.create_user("Bob", "bob@other.org")
        found = await store.search_users("EXAMPLE")
        assert [u.name for u in found] == ["Alice"]

    async def test_create_team_adds_owner(self, store: InMemoryTaskStore) -> None:
        owner = await store.create_user("Owner", "o@example.com")
        team = await store.create_team("Core", owner.id)
        members = await store.list_team_members(team.id)
        assert [(m.user.id, m.role) for m in members] == [(owner.id, MemberRole.OWNER)]
        assert await store.is_team_member(team.id, owner.id)
        assert [t.id for t in await store.list_teams_for_user(owner.id)] == [team.id]

    async def test_membership_is_idempotent(self, store: InMemoryTaskStore) -> None:
        owner = await store.create_user("Owner", "o@example.com")
        member = await store.create_user("Member", "m@example.com")
        team = await store.create_team("Core", owner.id)

        assert await store.add_team_member(team.id, member.id) is True
        assert await store.add_team_member(team.id, member.id) is False
        assert await store.remove_team_member(team.id, member.id) is True
        assert await store.remove_team_member(team.id, member.id) is False
        assert not await store.is_team_member(team.id, member.id)

    async def test_get_missing(self, store: InMemoryTaskStore) -> None:
        assert await store.get_user(1) is None
        assert await store.get_team(1) is None
