"""Normalise raw store rows into the wire task representation."""

from __future__ import annotations

from typing import Any

from boardsync.models.task import Task, TaskRow

# Row columns carried onto the wire. Anything else the store returns is dropped.
_WIRE_COLUMNS = frozenset(Task.model_fields)


def map_task_row(row: TaskRow) -> Task:
    """Build a :class:`Task` from a store row.

    Only columns present in the row are set, so a column the store did not
    return stays absent on the wire while a ``NULL`` column serialises as
    ``null``.
    """
    return Task(**{key: value for key, value in row.items() if key in _WIRE_COLUMNS})


def task_payload(row: TaskRow) -> dict[str, Any]:
    """Map a store row straight to its JSON-encodable wire dict."""
    return map_task_row(row).to_wire()
