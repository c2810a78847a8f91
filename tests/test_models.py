"""Tests for task models and intent parsing."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from boardsync.errors import BoardSyncError, IntentValidationError
from boardsync.models import (
    CreateTask,
    DeleteTask,
    GetTasks,
    JoinTeam,
    LeaveTeam,
    MoveTask,
    SetUser,
    Task,
    TaskCategory,
    TaskPriority,
    TaskStatus,
    UpdateTask,
    parse_intent,
)


class TestEnums:
    def test_wire_values(self) -> None:
        assert [s.value for s in TaskStatus] == ["todo", "in-progress", "done"]
        assert [p.value for p in TaskPriority] == ["Low", "Medium", "High"]
        assert [c.value for c in TaskCategory] == ["Bug", "Feature", "Enhancement"]


class TestTask:
    def test_numeric_id_becomes_text(self) -> None:
        assert Task(id=42, title="t").id == "42"

    def test_wire_uses_camel_case(self) -> None:
        created = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
        task = Task(
            id="1", title="t", created_at=created, team_id=3, assigned_to=9, assigned_to_name="Bo"
        )
        wire = task.to_wire()
        assert wire["teamId"] == 3
        assert wire["assignedTo"] == 9
        assert wire["assignedToName"] == "Bo"
        assert wire["createdAt"].startswith("2024-05-01T12:00:00")

    def test_null_and_absent_are_distinct(self) -> None:
        wire = Task(id="1", title="t", description=None).to_wire()
        assert "description" in wire
        assert wire["description"] is None
        assert "assignedTo" not in wire

    def test_is_team_scoped(self) -> None:
        assert Task(id="1", title="t", team_id=2).is_team_scoped
        assert not Task(id="1", title="t").is_team_scoped


class TestParseIntent:
    def test_scalar_payloads(self) -> None:
        assert parse_intent("set:user", "7") == SetUser(user_id=7)
        assert parse_intent("join:team", 3) == JoinTeam(team_id=3)
        assert parse_intent("task:delete", 42) == DeleteTask(id="42")

    def test_no_payload(self) -> None:
        assert isinstance(parse_intent("leave:team"), LeaveTeam)
        assert isinstance(parse_intent("get:tasks", None), GetTasks)

    def test_create_defaults_and_status_discarded(self) -> None:
        intent = parse_intent("task:create", {"title": "New", "status": "done"})
        assert isinstance(intent, CreateTask)
        assert intent.priority == TaskPriority.MEDIUM
        assert intent.category == TaskCategory.FEATURE
        assert not hasattr(intent, "status")

    def test_create_blank_assignee_is_null(self) -> None:
        intent = parse_intent("task:create", {"title": "New", "assignedTo": "", "teamId": "3"})
        assert isinstance(intent, CreateTask)
        assert intent.assigned_to is None
        assert intent.team_id == 3

    def test_update_ignores_display_fields(self) -> None:
        intent = parse_intent(
            "task:updated",
            {
                "id": 5,
                "title": "Edited",
                "status": "in-progress",
                "priority": "High",
                "category": "Bug",
                "assignedTo": "9",
                "assignedToName": "Bo",
                "createdAt": "2024-05-01T12:00:00Z",
            },
        )
        assert isinstance(intent, UpdateTask)
        assert intent.id == "5"
        assert intent.assigned_to == 9

    def test_move(self) -> None:
        intent = parse_intent("task:move", {"id": "42", "newStatus": "done"})
        assert intent == MoveTask(id="42", new_status=TaskStatus.DONE)

    def test_unknown_event(self) -> None:
        with pytest.raises(IntentValidationError) as exc_info:
            parse_intent("task:explode", {})
        assert exc_info.value.event == "task:explode"
        assert isinstance(exc_info.value, BoardSyncError)

    @pytest.mark.parametrize(
        ("event", "payload"),
        [
            ("task:create", {"title": ""}),
            ("task:create", {"title": "x", "priority": "Urgent"}),
            ("task:create", "just a string"),
            ("task:updated", {"id": "1", "title": "missing status"}),
            ("task:move", {"id": "1"}),
            ("set:user", None),
            ("set:user", "seven"),
            ("join:team", [3]),
            ("set:user", True),
            ("set:user", {"userId": False}),
            ("join:team", True),
            ("task:create", {"title": "x", "assignedTo": True}),
            (
                "task:updated",
                {
                    "id": "1",
                    "title": "x",
                    "status": "todo",
                    "priority": "Low",
                    "category": "Bug",
                    "assignedTo": True,
                },
            ),
        ],
    )
    def test_invalid_payloads(self, event: str, payload: object) -> None:
        with pytest.raises(IntentValidationError):
            parse_intent(event, payload)
