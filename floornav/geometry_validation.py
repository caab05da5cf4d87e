"""Quality checks for a built venue's corridor, door and portal data."""

from __future__ import annotations

from typing import Any

from shapely.geometry import LineString, Point

from floornav.portals import PortalType
from floornav.venue import Venue


def _corridor_lines(venue: Venue, floor_id: str) -> list[LineString]:
    graph = venue.floor(floor_id).graph
    return [LineString([graph.nodes[e.source], graph.nodes[e.target]]) for e in graph.edges]


def validate_venue(venue: Venue, door_corridor_max_gap: float = 50.0) -> dict[str, Any]:
    """Validate corridor connectivity, door placement and portal resolution."""
    issues: list[dict[str, Any]] = []
    door_checks = 0
    portal_checks = 0

    for floor_id in venue.ordered_floor_ids:
        floor = venue.floor(floor_id)
        graph = floor.graph

        if graph.degenerate_segments:
            issues.append(
                {
                    "kind": "zero_length_segment",
                    "severity": "warning",
                    "floor": floor_id,
                    "count": graph.degenerate_segments,
                    "message": f"{graph.degenerate_segments} segment(s) collapse to a single node and were dropped",
                }
            )

        if graph.is_empty:
            if floor.rooms:
                issues.append(
                    {
                        "kind": "empty_graph",
                        "severity": "warning",
                        "floor": floor_id,
                        "message": "Floor has rooms but no walkable segments",
                    }
                )
        else:
            components = graph.components()
            if len(components) > 1:
                issues.append(
                    {
                        "kind": "disconnected_graph",
                        "severity": "warning",
                        "floor": floor_id,
                        "components": len(components),
                        "message": f"Corridor graph has {len(components)} disconnected components",
                    }
                )

        # Door-to-corridor clearance checks.
        lines = _corridor_lines(venue, floor_id)
        for door in floor.doors:
            door_checks += 1
            door_pt = Point(door.center)
            if lines and any(line.distance(door_pt) <= door_corridor_max_gap for line in lines):
                continue
            issues.append(
                {
                    "kind": "door_clearance",
                    "severity": "warning",
                    "floor": floor_id,
                    "door_id": door.door_id,
                    "message": f"Door is not within {door_corridor_max_gap:.1f} units of any corridor",
                }
            )

        for portal in floor.portals:
            portal_checks += 1
            if portal.center is None:
                issues.append(
                    {
                        "kind": "portal_unresolved",
                        "severity": "warning",
                        "floor": floor_id,
                        "portal_id": portal.portal_id,
                        "message": "Portal has no resolvable center on its floor",
                    }
                )
            if portal.kind is PortalType.UNKNOWN:
                issues.append(
                    {
                        "kind": "portal_label",
                        "severity": "warning",
                        "floor": floor_id,
                        "portal_id": portal.portal_id,
                        "message": "Portal label is malformed and will never be routed",
                    }
                )
            elif portal.kind in (PortalType.ELEVATOR, PortalType.STAIRS) and not venue.has_floor(portal.target_floor):
                issues.append(
                    {
                        "kind": "portal_target",
                        "severity": "error",
                        "floor": floor_id,
                        "portal_id": portal.portal_id,
                        "message": f"Declared target floor '{portal.target_floor}' is not part of the venue",
                    }
                )

    error_count = sum(1 for issue in issues if issue.get("severity") == "error")
    warning_count = sum(1 for issue in issues if issue.get("severity") == "warning")

    return {
        "ok": error_count == 0,
        "summary": {
            "floors": len(venue.ordered_floor_ids),
            "door_checks": door_checks,
            "portal_checks": portal_checks,
            "errors": error_count,
            "warnings": warning_count,
        },
        "issues": issues,
    }
