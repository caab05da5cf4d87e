"""Unit tests for floornav.route."""

from __future__ import annotations

import pytest

from floornav.errors import UnknownRoom
from floornav.geometry import Segment
from floornav.route import MANUAL_ENTRY_CONFIDENCE, LegType, bearing_between, plan_route
from floornav.utils import route_payload
from floornav.venue import Door, FloorData, PortalState, Room, Venue, build_venue


def seg(segment_id: str, p1: tuple[float, float], p2: tuple[float, float]) -> Segment:
    return Segment(segment_id=segment_id, p1=p1, p2=p2)


def door(door_id: str, floor_id: str, center: tuple[float, float]) -> Door:
    x, y = center
    return Door(door_id=door_id, endpoint1=(x - 2.0, y), endpoint2=(x + 2.0, y), floor_id=floor_id)


def _two_floors(status: str = "On", upper_portals: dict[str, tuple[float, float]] | None = None) -> Venue:
    floor0 = FloorData(
        floor_id="0",
        rooms=[Room(room_id="A", room_type="Office", anchor=(0.0, -10.0), floor_id="0")],
        doors=[door("A_door", "0", (0.0, -2.0))],
        segments=[seg("s1", (0.0, 0.0), (100.0, 0.0))],
        portal_anchors={"Elevator.1.1": (100.0, 0.0)},
    )
    upper = upper_portals if upper_portals is not None else {"Elevator.1.0": (100.0, 0.0)}
    floor1 = FloorData(
        floor_id="1",
        rooms=[Room(room_id="B", room_type="Lab", anchor=(0.0, -10.0), floor_id="1")],
        doors=[door("B_door", "1", (0.0, -2.0))],
        segments=[seg("t1", (0.0, 0.0), (100.0, 0.0))],
        portal_anchors=upper,
    )
    states = [PortalState("Elevator.1.1", "0", status)]
    states.extend(PortalState(label, "1", status) for label in upper)
    return build_venue([floor0, floor1], states)


def test_same_floor_route_has_one_direct_leg(single_floor_venue: Venue) -> None:
    route = plan_route(single_floor_venue, "A", "B")

    assert not route.degraded
    assert route.transitions == []
    assert len(route.legs) == 1

    leg = route.legs[0]
    assert leg.leg_type is LegType.DIRECT_ROUTE
    assert leg.from_point == (0.0, -2.0)
    assert leg.to_point == (100.0, -2.0)
    assert leg.path[0] == (0.0, -2.0)
    assert leg.path[-1] == (100.0, 0.0)
    assert leg.bearing is not None
    assert leg.bearing.compass == "East"
    assert 85.0 < leg.bearing.compass_angle < 95.0
    assert leg.bearing.segments_used == 3


def test_disconnected_floor_falls_back_to_direct_bearing() -> None:
    floor = FloorData(
        floor_id="0",
        rooms=[
            Room(room_id="A", room_type="Office", anchor=(0.0, -10.0), floor_id="0"),
            Room(room_id="B", room_type="Office", anchor=(300.0, -10.0), floor_id="0"),
        ],
        doors=[door("A_door", "0", (0.0, -2.0)), door("B_door", "0", (300.0, -2.0))],
        segments=[seg("s1", (0.0, 0.0), (50.0, 0.0)), seg("s2", (200.0, 0.0), (300.0, 0.0))],
    )
    route = plan_route(build_venue([floor]), "A", "B")

    leg = route.legs[0]
    assert leg.path == [(0.0, -2.0), (300.0, -2.0)]
    assert leg.bearing is not None
    assert leg.bearing.compass_angle == pytest.approx(90.0)
    assert leg.bearing.distance == pytest.approx(300.0)
    assert leg.bearing.confidence == pytest.approx(0.6)


def test_bearing_between_coincident_points_returns_none(single_floor_venue: Venue) -> None:
    graph = single_floor_venue.routing_graph("0")
    bearing, walked = bearing_between(graph, (0.0, 0.0), (0.0, 0.0))

    assert bearing is None
    assert walked == [(0.0, 0.0)]


def test_multi_floor_route_uses_stairs_that_reach_the_room(two_floor_venue: Venue) -> None:
    route = plan_route(two_floor_venue, "A", "B")

    assert not route.degraded
    assert [leg.leg_type for leg in route.legs] == [
        LegType.ROUTE_TO_PORTAL,
        LegType.PORTAL_TRANSITION,
        LegType.ROUTE_FROM_PORTAL,
    ]

    to_portal, hop, from_portal = route.legs
    assert to_portal.floor_id == "0"
    assert to_portal.to_id == "Stairs.2.1"
    assert to_portal.to_point == (100.0, 0.0)
    assert to_portal.bearing is not None and to_portal.bearing.compass == "East"

    assert hop.bearing is None
    assert hop.instruction == "Use Stairs 2 from floor 0 to floor 1"

    assert from_portal.floor_id == "1"
    assert from_portal.from_id == "Stairs.2.0"
    assert from_portal.from_point == (200.0, 0.0)
    assert from_portal.to_point == (300.0, -2.0)
    assert from_portal.bearing is not None and from_portal.bearing.compass == "East"


def test_virtual_counterpart_produces_manual_entry_leg() -> None:
    venue = _two_floors(upper_portals={"Stairs.7.0": (50.0, 0.0)})

    route = plan_route(venue, "A", "B")

    assert route.degraded
    assert route.transitions[0].matching_portal.virtual
    last = route.legs[-1]
    assert last.leg_type is LegType.ROUTE_FROM_PORTAL
    assert last.from_point is None
    assert last.from_id == "Elevator.1.virtual"
    assert last.to_point == (0.0, -10.0)
    assert last.bearing is not None
    assert last.bearing.confidence == MANUAL_ENTRY_CONFIDENCE
    # access point (0, -2) to anchor (0, -10) heads North
    assert last.bearing.compass == "North"


def test_failed_planning_degrades_to_manual_floor_change() -> None:
    venue = _two_floors(status="Off")

    route = plan_route(venue, "A", "B")

    assert route.degraded
    assert route.transitions == []
    assert len(route.legs) == 1

    leg = route.legs[0]
    assert leg.leg_type is LegType.DIRECT_ROUTE
    assert leg.instruction == "Change floors manually to floor 1"
    assert leg.bearing is not None
    assert leg.bearing.compass_angle == 0.0
    assert leg.bearing.confidence == 0.0


def test_unknown_room_is_reported(single_floor_venue: Venue) -> None:
    with pytest.raises(UnknownRoom, match="'Z' was not found"):
        plan_route(single_floor_venue, "A", "Z")

    with pytest.raises(UnknownRoom, match="on floor '1'"):
        plan_route(single_floor_venue, "A", "B", end_floor_id="1")


def test_route_payload_is_json_friendly(two_floor_venue: Venue) -> None:
    payload = route_payload(plan_route(two_floor_venue, "A", "B"))

    assert payload["degraded"] is False
    assert [leg["leg_type"] for leg in payload["legs"]] == ["route-to-portal", "portal-transition", "route-from-portal"]
    assert payload["legs"][0]["from_point"] == {"x": 0.0, "y": -2.0}
    assert payload["transitions"][0]["portal"]["type"] == "Stairs"
    assert payload["transitions"][0]["matching_portal"]["center"] == {"x": 200.0, "y": 0.0}
