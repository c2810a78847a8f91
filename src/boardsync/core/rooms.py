"""Team room membership: which sessions receive a team's broadcasts."""

from __future__ import annotations

import logging

logger = logging.getLogger("boardsync.rooms")


def room_name(team_id: int) -> str:
    """Display name of a team's room, e.g. ``team:3``."""
    return f"team:{team_id}"


class RoomMembership:
    """Team id -> joined session ids, with at most one room per session.

    Every method runs without suspending, so in a single event loop a
    room switch is atomic: the old membership is gone before the new one
    is visible to any broadcast. A multi-threaded host must guard this
    object with its own lock.
    """

    def __init__(self) -> None:
        self._rooms: dict[int, set[str]] = {}
        self._session_rooms: dict[str, int] = {}

    def join(self, session_id: str, team_id: int) -> int | None:
        """Put *session_id* in *team_id*'s room.

        Leaves whatever room the session was in first. Joining the room the
        session is already in is a no-op.

        Returns:
            The team id of the room that was left, if any.
        """
        current = self._session_rooms.get(session_id)
        if current == team_id:
            return None
        if current is not None:
            self._discard(session_id, current)
        self._rooms.setdefault(team_id, set()).add(session_id)
        self._session_rooms[session_id] = team_id
        logger.debug(
            "Session %s joined %s",
            session_id,
            room_name(team_id),
            extra={"session_id": session_id, "team_id": team_id, "left_team_id": current},
        )
        return current

    def leave(self, session_id: str, team_id: int | None = None) -> int | None:
        """Remove *session_id* from its room.

        When *team_id* is given, only leave if that is the session's room.
        Leaving when not a member is a no-op.

        Returns:
            The team id that was left, or ``None``.
        """
        current = self._session_rooms.get(session_id)
        if current is None or (team_id is not None and team_id != current):
            return None
        self._discard(session_id, current)
        logger.debug(
            "Session %s left %s",
            session_id,
            room_name(current),
            extra={"session_id": session_id, "team_id": current},
        )
        return current

    def _discard(self, session_id: str, team_id: int) -> None:
        members = self._rooms.get(team_id)
        if members is not None:
            members.discard(session_id)
            if not members:
                del self._rooms[team_id]
        self._session_rooms.pop(session_id, None)

    def members(self, team_id: int) -> frozenset[str]:
        """Snapshot of the session ids joined to *team_id*."""
        return frozenset(self._rooms.get(team_id, ()))

    def room_of(self, session_id: str) -> int | None:
        return self._session_rooms.get(session_id)

    def is_member(self, session_id: str, team_id: int) -> bool:
        return self._session_rooms.get(session_id) == team_id

    @property
    def room_count(self) -> int:
        return len(self._rooms)
