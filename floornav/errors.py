"""Typed failure kinds raised by the routing engine.

All kinds derive from `ValueError` so adapters can treat them like any other
invalid-query error. Most of them are recovered inside the engine; only
`UnknownRoom` is meant to reach the caller.
"""

from __future__ import annotations


class RoutingError(ValueError):
    """Base class for routing engine failures."""


class EmptyInput(RoutingError):
    """No segments, rooms or floors to route over."""


class NoPathFound(RoutingError):
    """Snapped start and end nodes live in disconnected graph components."""


class DegenerateInput(RoutingError):
    """A direction was required but the vector has zero length."""


class UnresolvedPortal(RoutingError):
    """Declared target floor has no portal with the same type and number."""


class TransitionPlanningFailed(RoutingError):
    """Hop budget exhausted or no viable portal at some planning step."""


class UnknownRoom(RoutingError):
    """A referenced room id is absent from the venue dataset."""

    def __init__(self, room_id: str, floor_id: str | None = None) -> None:
        self.room_id = room_id
        self.floor_id = floor_id
        where = f" on floor '{floor_id}'" if floor_id is not None else ""
        super().__init__(f"Room '{room_id}' was not found{where}")
