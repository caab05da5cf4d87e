"""Route assembly: same-floor and multi-floor legs with one bearing per leg.

Path-based bearings fall back to a straight-line bearing between the same two
points when no path exists or the path is degenerate. Failed transition
planning degrades to a single "change floors manually" leg instead of raising.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum

from floornav.bearing import DEFAULT_MAX_LEGS, BearingResult, direct_bearing, neutral_bearing, path_bearing
from floornav.errors import DegenerateInput, EmptyInput, TransitionPlanningFailed
from floornav.geometry import Point
from floornav.graph import FloorGraph
from floornav.pathfinding import find_path
from floornav.transitions import MAX_HOPS, Transition, describe_transition, plan_transitions
from floornav.venue import Room, Venue

logger = logging.getLogger(__name__)

MANUAL_ENTRY_CONFIDENCE = 0.5
MANUAL_FLOOR_CHANGE_NOTE = "Change floors manually"
MANUAL_ENTRY_NOTE = "Exit location on this floor is unknown; enter the floor manually and head for the room"


class LegType(str, Enum):
    DIRECT_ROUTE = "direct-route"
    ROUTE_TO_PORTAL = "route-to-portal"
    PORTAL_TRANSITION = "portal-transition"
    ROUTE_FROM_PORTAL = "route-from-portal"


@dataclass(slots=True)
class Leg:
    """One contiguous navigable or instructional part of a route."""

    floor_id: str
    leg_type: LegType
    from_id: str | None = None
    from_point: Point | None = None
    to_id: str | None = None
    to_point: Point | None = None
    bearing: BearingResult | None = None
    path: list[Point] = field(default_factory=list)
    instruction: str | None = None


@dataclass(slots=True)
class Route:
    start_room_id: str
    end_room_id: str
    legs: list[Leg] = field(default_factory=list)
    transitions: list[Transition] = field(default_factory=list)
    degraded: bool = False
    note: str | None = None


def bearing_between(
    graph: FloorGraph,
    start: Point,
    end: Point,
    max_legs: int = DEFAULT_MAX_LEGS,
) -> tuple[BearingResult | None, list[Point]]:
    """Path-based bearing from `start` to `end`, falling back to a direct line.

    `start` is prepended to the graph path so the first leg reflects the walk
    from the door onto the corridor network.

    Returns:
        Tuple of (bearing or None when both points coincide, walked points).
    """
    path = find_path(graph, start, end)
    if path is not None:
        walked = [start, *path]
        try:
            return path_bearing(walked, max_legs=max_legs), walked
        except (DegenerateInput, EmptyInput) as exc:
            logger.debug("Path bearing on floor %s unusable (%s); using direct bearing", graph.floor_id, exc)
    else:
        logger.warning("No path on floor %s from %s to %s; using direct bearing", graph.floor_id, start, end)

    try:
        return direct_bearing(start, end), [start, end]
    except DegenerateInput:
        return None, [start]


def _same_floor_route(venue: Venue, start: Room, end: Room, max_legs: int) -> Route:
    start_pt = venue.access_point(start)
    end_pt = venue.access_point(end)
    bearing, walked = bearing_between(venue.routing_graph(start.floor_id), start_pt, end_pt, max_legs)
    leg = Leg(
        floor_id=start.floor_id,
        leg_type=LegType.DIRECT_ROUTE,
        from_id=start.room_id,
        from_point=start_pt,
        to_id=end.room_id,
        to_point=end_pt,
        bearing=bearing,
        path=walked,
    )
    return Route(start_room_id=start.room_id, end_room_id=end.room_id, legs=[leg])


def fallback_route(venue: Venue, start: Room, end: Room) -> Route:
    """Single placeholder leg telling the traveler to change floors manually."""
    start_pt = venue.access_point(start)
    leg = Leg(
        floor_id=start.floor_id,
        leg_type=LegType.DIRECT_ROUTE,
        from_id=start.room_id,
        from_point=start_pt,
        to_id=end.room_id,
        bearing=neutral_bearing(start_pt),
        instruction=f"{MANUAL_FLOOR_CHANGE_NOTE} to floor {end.floor_id}",
    )
    return Route(
        start_room_id=start.room_id,
        end_room_id=end.room_id,
        legs=[leg],
        degraded=True,
        note=MANUAL_FLOOR_CHANGE_NOTE,
    )


def _manual_entry_leg(venue: Venue, end: Room, from_id: str | None) -> Leg:
    end_pt = venue.access_point(end)
    try:
        bearing = direct_bearing(end_pt, end.anchor)
    except DegenerateInput:
        bearing = neutral_bearing(end.anchor)
    return Leg(
        floor_id=end.floor_id,
        leg_type=LegType.ROUTE_FROM_PORTAL,
        from_id=from_id,
        to_id=end.room_id,
        to_point=end.anchor,
        bearing=replace(bearing, confidence=MANUAL_ENTRY_CONFIDENCE),
        instruction=MANUAL_ENTRY_NOTE,
    )


def _multi_floor_route(
    venue: Venue,
    start: Room,
    end: Room,
    transitions: list[Transition],
    max_legs: int,
) -> Route:
    legs: list[Leg] = []
    anchor: Point | None = venue.access_point(start)
    anchor_id: str | None = start.room_id
    anchor_floor = start.floor_id

    for transition in transitions:
        portal = transition.portal
        on_floor = anchor is not None and anchor_floor == transition.from_floor

        if on_floor and portal.center is not None:
            bearing, walked = bearing_between(venue.routing_graph(transition.from_floor), anchor, portal.center, max_legs)
            legs.append(
                Leg(
                    floor_id=transition.from_floor,
                    leg_type=LegType.ROUTE_TO_PORTAL,
                    from_id=anchor_id,
                    from_point=anchor,
                    to_id=portal.portal_id,
                    to_point=portal.center,
                    bearing=bearing,
                    path=walked,
                )
            )
        else:
            legs.append(
                Leg(
                    floor_id=transition.from_floor,
                    leg_type=LegType.ROUTE_TO_PORTAL,
                    from_id=anchor_id if on_floor else None,
                    from_point=anchor if on_floor else None,
                    to_id=portal.portal_id,
                    to_point=portal.center,
                    instruction=f"Find {portal.display_name} on floor {transition.from_floor}",
                )
            )

        legs.append(
            Leg(
                floor_id=transition.from_floor,
                leg_type=LegType.PORTAL_TRANSITION,
                from_id=portal.portal_id,
                from_point=portal.center,
                to_id=transition.matching_portal.portal_id,
                to_point=transition.matching_portal.center,
                instruction=describe_transition(transition),
            )
        )

        anchor = transition.matching_portal.center
        anchor_id = transition.matching_portal.portal_id
        anchor_floor = transition.to_floor

    if anchor is None or anchor_floor != end.floor_id:
        legs.append(_manual_entry_leg(venue, end, anchor_id if anchor_floor == end.floor_id else None))
        degraded = True
    else:
        end_pt = venue.access_point(end)
        bearing, walked = bearing_between(venue.routing_graph(end.floor_id), anchor, end_pt, max_legs)
        legs.append(
            Leg(
                floor_id=end.floor_id,
                leg_type=LegType.ROUTE_FROM_PORTAL,
                from_id=anchor_id,
                from_point=anchor,
                to_id=end.room_id,
                to_point=end_pt,
                bearing=bearing,
                path=walked,
            )
        )
        degraded = False

    return Route(
        start_room_id=start.room_id,
        end_room_id=end.room_id,
        legs=legs,
        transitions=transitions,
        degraded=degraded,
        note=MANUAL_ENTRY_NOTE if degraded else None,
    )


def plan_route(
    venue: Venue,
    start_room_id: str,
    end_room_id: str,
    start_floor_id: str | None = None,
    end_floor_id: str | None = None,
    max_legs: int = DEFAULT_MAX_LEGS,
    max_hops: int = MAX_HOPS,
) -> Route:
    """Assemble a route between two rooms, possibly on different floors.

    Raises:
        UnknownRoom: If either room is missing; callers must not render a route.
    """
    start = venue.find_room(start_room_id, start_floor_id)
    end = venue.find_room(end_room_id, end_floor_id)

    if start.floor_id == end.floor_id:
        return _same_floor_route(venue, start, end, max_legs)

    try:
        transitions = plan_transitions(
            venue,
            start_floor=start.floor_id,
            start_point=venue.access_point(start),
            destination_floor=end.floor_id,
            target_room=end,
            max_hops=max_hops,
        )
    except TransitionPlanningFailed as exc:
        logger.warning("Transition planning failed for %s -> %s: %s", start.room_id, end.room_id, exc)
        return fallback_route(venue, start, end)

    return _multi_floor_route(venue, start, end, transitions, max_legs)
