"""Multi-hop floor transition planning.

Each planning step picks one portal on the current floor, in priority order:

1. accessible direct: a portal leading straight to the destination whose
   counterpart can actually reach the target room's access point;
2. plain direct: any portal leading straight to the destination;
3. stepwise: a portal moving one floor (or more) in the right vertical direction.

Floors without any declared portal are passed through to the adjacent floor.
A hop budget bounds the loop against cyclic portal data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from floornav.errors import TransitionPlanningFailed
from floornav.geometry import Point, distance
from floornav.pathfinding import shortest_path
from floornav.portals import Portal, PortalType, counterpart_or_virtual
from floornav.venue import Room, Venue

logger = logging.getLogger(__name__)

MAX_HOPS = 10


@dataclass(slots=True)
class Transition:
    """One planned floor-to-floor hop."""

    from_floor: str
    to_floor: str
    portal: Portal
    matching_portal: Portal


def _distance_or_inf(point: Point | None, portal: Portal) -> float:
    if point is None or portal.center is None:
        return float("inf")
    return distance(point, portal.center)


def _nearest(portals: Iterable[Portal], point: Point | None) -> Portal | None:
    ranked = sorted(portals, key=lambda p: _distance_or_inf(point, p))
    return ranked[0] if ranked else None


def accessible_portals(venue: Venue, floor_id: str, room: Room) -> list[Portal]:
    """Portals on `floor_id` with a same-floor path to the room's access point.

    Ranked by path length, nearest first.
    """
    graph = venue.routing_graph(floor_id)
    target = venue.access_point(room)

    reachable: list[tuple[float, Portal]] = []
    for portal in venue.routable_portals(floor_id):
        if portal.center is None:
            continue
        result = shortest_path(graph, portal.center, target)
        if result is not None:
            reachable.append((result.length, portal))

    reachable.sort(key=lambda item: item[0])
    return [portal for _, portal in reachable]


def _accessible_direct(
    candidates: list[Portal],
    destination: str,
    accessible: list[Portal],
    point: Point | None,
) -> Portal | None:
    for target_portal in accessible:
        matches = [p for p in candidates if p.target_floor == destination and p.key == target_portal.key]
        if matches:
            return _nearest(matches, point)
    return None


def _plain_direct(candidates: list[Portal], destination: str, point: Point | None) -> Portal | None:
    return _nearest([p for p in candidates if p.target_floor == destination], point)


def _stepwise(
    venue: Venue,
    candidates: list[Portal],
    current: str,
    destination: str,
    point: Point | None,
) -> Portal | None:
    current_num = venue.floor(current).number
    direction = 1 if venue.floor(destination).number > current_num else -1
    adjacent = venue.adjacent_floor(current, direction)

    onward = [p for p in candidates if (venue.floor(p.target_floor).number - current_num) * direction > 0]
    next_floor = [p for p in onward if p.target_floor == adjacent]
    return _nearest(next_floor, point) or _nearest(onward, point)


def plan_transitions(
    venue: Venue,
    start_floor: str,
    start_point: Point | None,
    destination_floor: str,
    target_room: Room | None = None,
    max_hops: int = MAX_HOPS,
) -> list[Transition]:
    """Plan the portal hops from `start_floor` to `destination_floor`.

    Args:
        venue: Built venue.
        start_floor: Floor the traveler starts on.
        start_point: Traveler position on the start floor, used to rank portals.
        destination_floor: Floor to reach.
        target_room: Final room, enabling the accessibility pre-check.
        max_hops: Loop bound against cyclic portal data.

    Returns:
        Ordered transitions. Empty when both floors are the same or every
        intermediate floor was passed through without a portal.

    Raises:
        TransitionPlanningFailed: If no viable portal exists at some step or the
            hop budget is exhausted.
    """
    current = str(start_floor)
    destination = str(destination_floor)
    venue.floor(current)
    venue.floor(destination)

    point = start_point
    transitions: list[Transition] = []

    accessible: list[Portal] = []
    if target_room is not None and current != destination:
        accessible = accessible_portals(venue, destination, target_room)
        logger.debug(
            "Accessible portals on floor %s for room %s: %s",
            destination,
            target_room.room_id,
            [p.portal_id for p in accessible],
        )

    hops = 0
    while current != destination:
        if hops >= max_hops:
            raise TransitionPlanningFailed(
                f"Hop budget of {max_hops} exhausted between floors {start_floor} and {destination}"
            )
        hops += 1

        if not venue.portals_on(current):
            direction = 1 if venue.floor(destination).number > venue.floor(current).number else -1
            nxt = venue.adjacent_floor(current, direction)
            if nxt is None:
                raise TransitionPlanningFailed(f"No floor beyond {current} towards {destination}")
            logger.debug("Floor %s declares no portals; passing through to %s", current, nxt)
            current = nxt
            point = None
            continue

        candidates = venue.routable_portals(current)
        portal = (
            _accessible_direct(candidates, destination, accessible, point)
            or _plain_direct(candidates, destination, point)
            or _stepwise(venue, candidates, current, destination, point)
        )
        if portal is None:
            raise TransitionPlanningFailed(f"No usable portal on floor {current} towards floor {destination}")

        matching = counterpart_or_virtual(portal, venue.portals_on(portal.target_floor))
        transitions.append(
            Transition(
                from_floor=current,
                to_floor=portal.target_floor,
                portal=portal,
                matching_portal=matching,
            )
        )
        logger.debug("Floor %s -> %s via %s (match %s)", current, portal.target_floor, portal.portal_id, matching.portal_id)

        current = portal.target_floor
        point = matching.center

    return transitions


def describe_transition(transition: Transition) -> str:
    """Human-readable instruction for a portal hop."""
    portal = transition.portal
    verb = "Take" if portal.kind is PortalType.ELEVATOR else "Use"
    text = f"{verb} {portal.display_name} from floor {transition.from_floor} to floor {transition.to_floor}"
    if transition.matching_portal.virtual:
        text += " (no matching exit found; change floors manually)"
    return text
