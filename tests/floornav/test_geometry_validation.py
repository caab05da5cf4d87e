"""Unit tests for venue validation checks."""

from __future__ import annotations

from floornav.geometry import Segment
from floornav.geometry_validation import validate_venue
from floornav.venue import Door, FloorData, PortalState, Room, Venue, build_venue


def _kinds(report: dict) -> list[str]:
    return [issue["kind"] for issue in report["issues"]]


def test_clean_single_floor_passes(single_floor_venue: Venue) -> None:
    report = validate_venue(single_floor_venue)

    assert report["ok"] is True
    assert report["issues"] == []
    assert report["summary"]["floors"] == 1
    assert report["summary"]["door_checks"] == 2


def test_disconnected_islands_are_warned(two_floor_venue: Venue) -> None:
    report = validate_venue(two_floor_venue)

    assert report["ok"] is True
    assert _kinds(report) == ["disconnected_graph"]
    assert report["issues"][0]["floor"] == "1"
    assert report["issues"][0]["components"] == 2
    assert report["summary"]["portal_checks"] == 4


def test_bad_portals_and_far_doors_are_reported() -> None:
    floor = FloorData(
        floor_id="0",
        rooms=[Room(room_id="A", room_type="Office", anchor=(0.0, -10.0), floor_id="0")],
        doors=[Door(door_id="A_door", endpoint1=(0.0, -300.0), endpoint2=(4.0, -300.0), floor_id="0")],
        segments=[Segment("s1", (0.0, 0.0), (100.0, 0.0))],
        portal_anchors={"Elevator.1.5": (100.0, 0.0)},
    )
    venue = build_venue(
        [floor],
        [
            PortalState("Elevator.1.5", "0"),
            PortalState("Stairs.2.1", "0"),
            PortalState("Lift-3", "0"),
        ],
    )

    report = validate_venue(venue)

    kinds = _kinds(report)
    assert "door_clearance" in kinds
    assert "portal_target" in kinds
    assert "portal_label" in kinds
    assert kinds.count("portal_unresolved") == 2
    assert report["ok"] is False
    assert report["summary"]["errors"] == 2


def test_rooms_without_corridors_are_warned() -> None:
    floor = FloorData(
        floor_id="0",
        rooms=[Room(room_id="A", room_type="Office", anchor=(0.0, 0.0), floor_id="0")],
    )

    report = validate_venue(build_venue([floor]))

    assert _kinds(report) == ["empty_graph"]


def test_door_gap_threshold_is_configurable(single_floor_venue: Venue) -> None:
    report = validate_venue(single_floor_venue, door_corridor_max_gap=1.0)

    assert _kinds(report) == ["door_clearance", "door_clearance"]


def test_zero_length_segments_are_warned() -> None:
    floor = FloorData(
        floor_id="0",
        segments=[
            Segment("s1", (0.0, 0.0), (100.0, 0.0)),
            Segment("dot", (100.0, 0.0), (100.5, 0.0)),
        ],
    )

    report = validate_venue(build_venue([floor]))

    assert _kinds(report) == ["zero_length_segment"]
    assert report["issues"][0]["count"] == 1
    assert report["ok"] is True
