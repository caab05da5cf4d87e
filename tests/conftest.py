"""Pytest global fixtures and test isolation hooks."""

from __future__ import annotations

import pytest

from floornav.api import STATE
from floornav.config import RoutingConfig
from floornav.geometry import Segment
from floornav.venue import Door, FloorData, PortalState, Room, Venue, build_venue


@pytest.fixture(autouse=True)
def reset_processing_state() -> None:
    """Reset in-memory API state before each test."""
    STATE.venue = None
    STATE.config = RoutingConfig()
    STATE.validation_report = None


def seg(segment_id: str, p1: tuple[float, float], p2: tuple[float, float]) -> Segment:
    return Segment(segment_id=segment_id, p1=p1, p2=p2)


def door(door_id: str, floor_id: str, center: tuple[float, float], half_width: float = 2.0) -> Door:
    x, y = center
    return Door(door_id=door_id, endpoint1=(x - half_width, y), endpoint2=(x + half_width, y), floor_id=floor_id)


@pytest.fixture()
def single_floor_venue() -> Venue:
    """One floor: corridor along y=0 with rooms A and B above it."""
    floor = FloorData(
        floor_id="0",
        rooms=[
            Room(room_id="A", room_type="Office", anchor=(0.0, -10.0), floor_id="0"),
            Room(room_id="B", room_type="Office", anchor=(100.0, -10.0), floor_id="0"),
        ],
        doors=[door("A_door", "0", (0.0, -2.0)), door("B_door", "0", (100.0, -2.0))],
        segments=[seg("s1", (0.0, 0.0), (50.0, 0.0)), seg("s2", (50.0, 0.0), (100.0, 0.0))],
    )
    return build_venue([floor])


@pytest.fixture()
def two_floor_venue() -> Venue:
    """Floor 1 has two corridor islands; only the stairs reach room B.

    Floor 0: corridor (0,0)-(100,0), room A, Elevator 1 near the start,
    Stairs 2 at the far end.
    Floor 1: island (0,0)-(50,0) with Elevator 1, island (200,0)-(300,0)
    with Stairs 2 and room B.
    """
    floor0 = FloorData(
        floor_id="0",
        rooms=[Room(room_id="A", room_type="Office", anchor=(0.0, -10.0), floor_id="0")],
        doors=[door("A_door", "0", (0.0, -2.0))],
        segments=[seg("s1", (0.0, 0.0), (100.0, 0.0))],
        portal_anchors={"Elevator.1.1": (5.0, 0.0), "Stairs.2.1": (100.0, 0.0)},
    )
    floor1 = FloorData(
        floor_id="1",
        rooms=[Room(room_id="B", room_type="Lab", anchor=(300.0, -10.0), floor_id="1")],
        doors=[door("B_door", "1", (300.0, -2.0))],
        segments=[seg("t1", (0.0, 0.0), (50.0, 0.0)), seg("t2", (200.0, 0.0), (300.0, 0.0))],
        portal_anchors={"Elevator.1.0": (0.0, 0.0), "Stairs.2.0": (200.0, 0.0)},
    )
    states = [
        PortalState("Elevator.1.1", "0", "On"),
        PortalState("Stairs.2.1", "0", "On"),
        PortalState("Elevator.1.0", "1", "On"),
        PortalState("Stairs.2.0", "1", "On"),
    ]
    return build_venue([floor0, floor1], states)


@pytest.fixture()
def venue_payload() -> dict:
    """JSON payload equivalent of a small two-floor venue."""
    return {
        "floors": [
            {
                "floor_id": 0,
                "rooms": [
                    {"room_id": "A", "room_type": "Office", "anchor": {"x": 0, "y": -10}},
                    {
                        "room_id": "C",
                        "room_type": "Office",
                        "vertices": [{"x": 90, "y": -20}, {"x": 110, "y": -20}, {"x": 110, "y": -4}, {"x": 90, "y": -4}],
                    },
                ],
                "doors": [
                    {"door_id": "A_door", "endpoint1": {"x": -2, "y": -2}, "endpoint2": {"x": 2, "y": -2}},
                    {"door_id": "C_door", "endpoint1": {"x": 98, "y": -2}, "endpoint2": {"x": 102, "y": -2}},
                ],
                "segments": [
                    {"segment_id": "s1", "endpoint1": {"x": 0, "y": 0}, "endpoint2": {"x": 100, "y": 0}},
                    {"segment_id": "s2", "endpoint1": {"x": 100, "y": 0}, "endpoint2": {"x": 200, "y": 0}},
                ],
                "portals": [{"portal_id": "Elevator.1.1", "anchor": {"x": 200, "y": 0}}],
            },
            {
                "floor_id": "1",
                "rooms": [{"room_id": "B", "room_type": "Lab", "anchor": {"x": 0, "y": -110}}],
                "doors": [{"door_id": "B_door", "endpoint1": {"x": -2, "y": -100}, "endpoint2": {"x": 2, "y": -100}}],
                "segments": [
                    {"segment_id": "t1", "endpoint1": {"x": 200, "y": 0}, "endpoint2": {"x": 0, "y": 0}},
                    {"segment_id": "t2", "endpoint1": {"x": 0, "y": 0}, "endpoint2": {"x": 0, "y": -100}},
                ],
                "portals": [{"portal_id": "Elevator.1.0", "anchor": {"x": 200, "y": 0}}],
            },
        ],
        "portals": [
            {"portal_id": "Elevator.1.1", "floor_id": 0, "status": "On"},
            {"portal_id": "Elevator.1.0", "floor_id": "1", "status": "On"},
        ],
    }
