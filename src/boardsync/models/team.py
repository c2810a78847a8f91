"""User and team models for the store's auxiliary query surface."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from boardsync.models.enums import MemberRole


class User(BaseModel):
    """A board user."""

    id: int
    name: str
    email: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class Team(BaseModel):
    """A team whose tasks share a broadcast room."""

    id: int
    name: str
    created_by: int
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class TeamMember(BaseModel):
    """A user's membership in a team."""

    team_id: int
    user: User
    role: MemberRole = MemberRole.MEMBER
