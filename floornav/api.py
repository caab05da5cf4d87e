"""FastAPI routes exposing venue loading, floor paths and room-to-room routes.

Flow:
- `POST /venue` builds the venue from extracted floor geometry and portal states.
- `POST /path` and `POST /route` query the latest venue.
- `POST /alignment` compares a live heading against a route bearing.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Annotated, Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, BeforeValidator, Field, model_validator

from floornav.bearing import heading_delta, is_aligned
from floornav.config import RoutingConfig, load_config
from floornav.errors import RoutingError, UnknownRoom
from floornav.geometry import Segment, centroid
from floornav.geometry_validation import validate_venue
from floornav.pathfinding import shortest_path
from floornav.route import plan_route
from floornav.utils import portal_payload, route_payload, to_serializable_points
from floornav.venue import Door, FloorData, PortalState, Room, Venue, build_venue


@dataclass
class ProcessingState:
    """In-memory state for the latest loaded venue."""

    venue: Venue | None = None
    config: RoutingConfig = field(default_factory=RoutingConfig)
    validation_report: dict[str, Any] | None = None


STATE = ProcessingState()


def _coerce_id(value: Any) -> str:
    if value is None:
        raise ValueError("identifier is required")
    return str(value)


FloorId = Annotated[str, BeforeValidator(_coerce_id)]


class XYPoint(BaseModel):
    """Drawing-space coordinate."""

    x: float
    y: float

    def as_tuple(self) -> tuple[float, float]:
        return float(self.x), float(self.y)


class RoomPayload(BaseModel):
    room_id: str
    room_type: str = "Unknown"
    anchor: XYPoint | None = None
    vertices: list[XYPoint] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_geometry(self) -> "RoomPayload":
        """Ensure caller provides an anchor or outline vertices."""
        if self.anchor is None and not self.vertices:
            raise ValueError(f"Room '{self.room_id}' needs an anchor or vertices")
        return self


class DoorPayload(BaseModel):
    door_id: str
    endpoint1: XYPoint
    endpoint2: XYPoint


class SegmentPayload(BaseModel):
    segment_id: str
    endpoint1: XYPoint
    endpoint2: XYPoint


class PortalAnchorPayload(BaseModel):
    portal_id: str
    anchor: XYPoint


class FloorPayload(BaseModel):
    floor_id: FloorId
    rooms: list[RoomPayload] = Field(default_factory=list)
    doors: list[DoorPayload] = Field(default_factory=list)
    segments: list[SegmentPayload] = Field(default_factory=list)
    portals: list[PortalAnchorPayload] = Field(default_factory=list)


class PortalStatePayload(BaseModel):
    portal_id: str
    floor_id: FloorId
    status: str = "On"


class VenueRequest(BaseModel):
    """Request payload for building a venue."""

    floors: list[FloorPayload] = Field(..., min_length=1)
    portals: list[PortalStatePayload] = Field(default_factory=list)


class FloorPathRequest(BaseModel):
    floor_id: FloorId
    start: XYPoint
    goal: XYPoint


class FloorPathResponse(BaseModel):
    floor_id: FloorId
    path: list[dict[str, float]]
    length: float
    used_teleport: bool


class RouteRequest(BaseModel):
    start_room_id: str
    goal_room_id: str
    start_floor_id: FloorId | None = None
    goal_floor_id: FloorId | None = None


class AlignmentRequest(BaseModel):
    current_heading: float
    target_heading: float
    tolerance: float | None = Field(default=None, ge=0, le=180)


def _floor_data(payload: FloorPayload) -> FloorData:
    """Convert a validated floor payload into engine input."""
    fid = payload.floor_id
    rooms: list[Room] = []
    for room in payload.rooms:
        anchor = room.anchor.as_tuple() if room.anchor else centroid(v.as_tuple() for v in room.vertices)
        if anchor is None:
            raise ValueError(f"Room '{room.room_id}' has no usable geometry")
        rooms.append(Room(room_id=room.room_id, room_type=room.room_type, anchor=anchor, floor_id=fid))

    return FloorData(
        floor_id=fid,
        rooms=rooms,
        doors=[
            Door(door_id=d.door_id, endpoint1=d.endpoint1.as_tuple(), endpoint2=d.endpoint2.as_tuple(), floor_id=fid)
            for d in payload.doors
        ],
        segments=[
            Segment(segment_id=s.segment_id, p1=s.endpoint1.as_tuple(), p2=s.endpoint2.as_tuple())
            for s in payload.segments
        ],
        portal_anchors={p.portal_id: p.anchor.as_tuple() for p in payload.portals},
    )


def _floor_summary(venue: Venue, floor_id: str) -> dict[str, Any]:
    floor = venue.floor(floor_id)
    return {
        "floor_id": floor_id,
        "number": floor.number,
        "node_count": floor.graph.node_count,
        "edge_count": floor.graph.edge_count,
        "room_count": len(floor.rooms),
        "door_count": len(floor.doors),
        "portals": [portal_payload(p) for p in floor.portals],
        "teleport_pairs": [pair.number for pair in floor.teleport_pairs],
    }


def _serialize_room(room: Room) -> dict[str, Any]:
    return {
        "room_id": room.room_id,
        "room_type": room.room_type,
        "floor_id": room.floor_id,
        "anchor": {"x": room.anchor[0], "y": room.anchor[1]},
    }


def _latest_venue_or_400() -> Venue:
    """Get the latest venue or raise 400."""
    if STATE.venue is None:
        raise HTTPException(status_code=400, detail="No venue loaded yet")
    return STATE.venue


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(title="floornav API", version="0.1.0")

    raw_origins = os.getenv("FLOORNAV_CORS_ORIGINS", "*").strip()
    if raw_origins == "*":
        cors_origins = ["*"]
        allow_credentials = False
    else:
        cors_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
        allow_credentials = True

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health() -> dict[str, Any]:
        """Health endpoint with loaded-venue metadata."""
        return {
            "status": "ok",
            "version": app.version,
            "venue_loaded": STATE.venue is not None,
        }

    @app.post("/venue")
    async def load_venue(payload: VenueRequest) -> dict[str, Any]:
        """Build every floor graph, resolve portals and validate the dataset."""
        try:
            config = load_config()
            venue = build_venue(
                [_floor_data(floor) for floor in payload.floors],
                [PortalState(portal_id=p.portal_id, floor_id=p.floor_id, status=p.status) for p in payload.portals],
                tolerance=config.snap_tolerance,
            )
            report = validate_venue(venue)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=f"Venue processing failed: {exc}") from exc
        except Exception as exc:  # pragma: no cover - safety net
            raise HTTPException(status_code=500, detail=f"Unexpected venue processing error: {exc}") from exc

        STATE.venue = venue
        STATE.config = config
        STATE.validation_report = report

        return {
            "message": "Venue processed successfully",
            "floor_count": len(venue.ordered_floor_ids),
            "room_count": len(venue.rooms()),
            "floors": [_floor_summary(venue, fid) for fid in venue.ordered_floor_ids],
            "validation_report": report,
        }

    @app.get("/floors")
    async def get_floors() -> dict[str, Any]:
        """Return floor metadata for the latest venue."""
        venue = _latest_venue_or_400()
        return {"floors": [_floor_summary(venue, fid) for fid in venue.ordered_floor_ids]}

    @app.get("/rooms")
    async def get_rooms(floor_id: str | None = Query(default=None)) -> dict[str, Any]:
        """Return rooms of the latest venue, optionally for one floor."""
        venue = _latest_venue_or_400()
        if floor_id is not None and not venue.has_floor(floor_id):
            raise HTTPException(status_code=404, detail=f"Floor '{floor_id}' was not found")
        return {"rooms": [_serialize_room(room) for room in venue.rooms(floor_id)]}

    @app.post("/path", response_model=FloorPathResponse)
    async def find_floor_path(payload: FloorPathRequest) -> FloorPathResponse:
        """Compute a shortest corridor path between two points on one floor."""
        venue = _latest_venue_or_400()
        if not venue.has_floor(payload.floor_id):
            raise HTTPException(status_code=404, detail=f"Floor '{payload.floor_id}' was not found")

        result = shortest_path(
            venue.routing_graph(payload.floor_id),
            payload.start.as_tuple(),
            payload.goal.as_tuple(),
        )
        if result is None:
            raise HTTPException(status_code=404, detail="No navigable path found")

        return FloorPathResponse(
            floor_id=payload.floor_id,
            path=to_serializable_points(result.points),
            length=result.length,
            used_teleport=result.used_teleport,
        )

    @app.post("/route")
    async def find_route(payload: RouteRequest) -> dict[str, Any]:
        """Compute a room-to-room route with one bearing per leg."""
        venue = _latest_venue_or_400()
        try:
            route = plan_route(
                venue,
                payload.start_room_id,
                payload.goal_room_id,
                start_floor_id=payload.start_floor_id,
                end_floor_id=payload.goal_floor_id,
                max_legs=STATE.config.bearing_max_legs,
                max_hops=STATE.config.max_hops,
            )
        except UnknownRoom as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except RoutingError as exc:
            raise HTTPException(status_code=400, detail=f"Invalid route query: {exc}") from exc
        except Exception as exc:  # pragma: no cover - safety net
            raise HTTPException(status_code=500, detail=f"Unexpected routing error: {exc}") from exc

        return route_payload(route)

    @app.post("/alignment")
    async def check_alignment(payload: AlignmentRequest) -> dict[str, Any]:
        """Report whether a live heading is within tolerance of the target bearing."""
        tolerance = payload.tolerance if payload.tolerance is not None else STATE.config.alignment_tolerance_deg
        return {
            "aligned": is_aligned(payload.current_heading, payload.target_heading, tolerance),
            "delta": heading_delta(payload.current_heading, payload.target_heading),
            "tolerance": tolerance,
        }

    return app
