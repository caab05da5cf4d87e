"""Helpers converting engine values into JSON-friendly payloads."""

from __future__ import annotations

from typing import Any, Iterable

from floornav.bearing import BearingResult
from floornav.geometry import Point
from floornav.portals import Portal
from floornav.route import Leg, Route
from floornav.transitions import Transition


def point_payload(point: Point | None) -> dict[str, float] | None:
    if point is None:
        return None
    return {"x": float(point[0]), "y": float(point[1])}


def to_serializable_points(points: Iterable[Point]) -> list[dict[str, float]]:
    """Convert `(x, y)` tuples to JSON-friendly dictionary objects."""
    return [{"x": float(x), "y": float(y)} for x, y in points]


def bearing_payload(bearing: BearingResult | None) -> dict[str, Any] | None:
    if bearing is None:
        return None
    return {
        "start_point": point_payload(bearing.start_point),
        "end_point": point_payload(bearing.end_point),
        "direction_vector": list(bearing.direction_vector),
        "angle_degrees": bearing.angle_degrees,
        "compass_angle": bearing.compass_angle,
        "compass": bearing.compass,
        "confidence": bearing.confidence,
        "distance": bearing.distance,
        "segments_used": bearing.segments_used,
    }


def portal_payload(portal: Portal) -> dict[str, Any]:
    return {
        "portal_id": portal.portal_id,
        "floor_id": portal.floor_id,
        "type": portal.kind.value,
        "number": portal.number,
        "target_floor": portal.target_floor,
        "center": point_payload(portal.center),
        "active": portal.active,
        "virtual": portal.virtual,
    }


def transition_payload(transition: Transition) -> dict[str, Any]:
    return {
        "from_floor": transition.from_floor,
        "to_floor": transition.to_floor,
        "portal": portal_payload(transition.portal),
        "matching_portal": portal_payload(transition.matching_portal),
    }


def leg_payload(leg: Leg) -> dict[str, Any]:
    return {
        "floor_id": leg.floor_id,
        "leg_type": leg.leg_type.value,
        "from_id": leg.from_id,
        "from_point": point_payload(leg.from_point),
        "to_id": leg.to_id,
        "to_point": point_payload(leg.to_point),
        "bearing": bearing_payload(leg.bearing),
        "path": to_serializable_points(leg.path),
        "instruction": leg.instruction,
    }


def route_payload(route: Route) -> dict[str, Any]:
    return {
        "start_room_id": route.start_room_id,
        "end_room_id": route.end_room_id,
        "degraded": route.degraded,
        "note": route.note,
        "legs": [leg_payload(leg) for leg in route.legs],
        "transitions": [transition_payload(t) for t in route.transitions],
    }
