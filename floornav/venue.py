"""Venue aggregate: per-floor graphs, rooms, doors and resolved portals.

A `Venue` is built once from extracted floor datasets and is read-only
afterwards. Query functions receive the venue and an explicit floor id instead
of relying on a "current floor" pointer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from floornav.errors import EmptyInput, UnknownRoom
from floornav.geometry import Point, Segment, distance, midpoint
from floornav.graph import SNAP_TOLERANCE, FloorGraph, build_floor_graph, with_teleports
from floornav.portals import Portal, TeleportPair, collect_teleport_pairs, make_portal, teleport_edges

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Room:
    room_id: str
    room_type: str
    anchor: Point
    floor_id: str


@dataclass(slots=True, frozen=True)
class Door:
    door_id: str
    endpoint1: Point
    endpoint2: Point
    floor_id: str

    @property
    def center(self) -> Point:
        return midpoint(self.endpoint1, self.endpoint2)


@dataclass(slots=True, frozen=True)
class PortalState:
    """Venue-wide portal declaration with its on/off status."""

    portal_id: str
    floor_id: str
    status: str = "On"


@dataclass(slots=True)
class FloorData:
    """Raw geometry extracted for one floor."""

    floor_id: str
    rooms: list[Room] = field(default_factory=list)
    doors: list[Door] = field(default_factory=list)
    segments: list[Segment] = field(default_factory=list)
    portal_anchors: dict[str, Point] = field(default_factory=dict)


@dataclass(slots=True)
class Floor:
    """Built floor: graph plus semantic anchors."""

    floor_id: str
    number: int
    graph: FloorGraph
    rooms: dict[str, Room]
    doors: list[Door]
    portals: list[Portal] = field(default_factory=list)
    teleport_pairs: list[TeleportPair] = field(default_factory=list)


def floor_number(floor_id: str) -> int:
    """Numeric level of a floor id such as "-1", "0" or "3"."""
    try:
        return int(str(floor_id).strip())
    except ValueError as exc:
        raise ValueError(f"Floor id '{floor_id}' is not a numeric level") from exc


class Venue:
    """Mapping from floor id to built floor, with routing queries."""

    def __init__(self, floors: dict[str, Floor]) -> None:
        if not floors:
            raise EmptyInput("A venue needs at least one floor")
        self.floors = floors
        self._ordered = sorted(floors, key=lambda f: floors[f].number)

    @property
    def ordered_floor_ids(self) -> list[str]:
        return list(self._ordered)

    def has_floor(self, floor_id: str) -> bool:
        return str(floor_id) in self.floors

    def floor(self, floor_id: str) -> Floor:
        try:
            return self.floors[str(floor_id)]
        except KeyError as exc:
            raise ValueError(f"Floor '{floor_id}' is not part of this venue") from exc

    def adjacent_floor(self, floor_id: str, direction: int) -> str | None:
        """Next floor up (`direction > 0`) or down (`direction < 0`) in level order."""
        idx = self._ordered.index(str(floor_id))
        nxt = idx + (1 if direction > 0 else -1)
        if 0 <= nxt < len(self._ordered):
            return self._ordered[nxt]
        return None

    def rooms(self, floor_id: str | None = None) -> list[Room]:
        if floor_id is not None:
            return list(self.floor(floor_id).rooms.values())
        return [room for fid in self._ordered for room in self.floors[fid].rooms.values()]

    def find_room(self, room_id: str, floor_id: str | None = None) -> Room:
        """Look a room up on one floor, or on every floor in level order.

        Raises:
            UnknownRoom: If no floor holds the room.
        """
        if floor_id is not None:
            if not self.has_floor(floor_id):
                raise UnknownRoom(room_id, floor_id)
            room = self.floors[str(floor_id)].rooms.get(room_id)
            if room is None:
                raise UnknownRoom(room_id, floor_id)
            return room

        for fid in self._ordered:
            room = self.floors[fid].rooms.get(room_id)
            if room is not None:
                return room
        raise UnknownRoom(room_id)

    def access_point(self, room: Room) -> Point:
        """Where a traveler enters or leaves a room.

        A door whose id starts with `<room_id>_` wins (nearest one if several),
        then the nearest door on the floor, then the room anchor itself.
        """
        doors = self.floor(room.floor_id).doors
        if not doors:
            return room.anchor

        own = [d for d in doors if d.door_id.startswith(f"{room.room_id}_")]
        pool = own or doors
        best = min(pool, key=lambda d: distance(room.anchor, d.center))
        return best.center

    def portals_on(self, floor_id: str) -> list[Portal]:
        return list(self.floor(floor_id).portals)

    def routable_portals(self, floor_id: str) -> list[Portal]:
        """Active cross-floor portals whose declared target is a venue floor."""
        return [p for p in self.floor(floor_id).portals if p.is_routable and self.has_floor(p.target_floor)]

    def routing_graph(self, floor_id: str) -> FloorGraph:
        """Floor graph overlaid with the floor's active teleport directions."""
        floor = self.floor(floor_id)
        return with_teleports(floor.graph, teleport_edges(floor.graph, floor.teleport_pairs))


def _resolve_portal_center(portal_id: str, data: FloorData) -> Point | None:
    if portal_id in data.portal_anchors:
        return data.portal_anchors[portal_id]
    for door in data.doors:
        if door.door_id == portal_id:
            return door.center
    for room in data.rooms:
        if room.room_id == portal_id:
            return room.anchor
    return None


def build_venue(
    floors: Iterable[FloorData],
    portal_states: Iterable[PortalState] = (),
    tolerance: float = SNAP_TOLERANCE,
) -> Venue:
    """Build every floor graph, then resolve portals across the whole venue.

    Portals are resolved only after all floors exist, because matching and
    center lookup need every floor's doors and rooms.

    Raises:
        EmptyInput: If no floor datasets are given.
        ValueError: On duplicate or non-numeric floor ids.
    """
    datasets: dict[str, FloorData] = {}
    for data in floors:
        fid = str(data.floor_id)
        if fid in datasets:
            raise ValueError(f"Duplicate floor id '{fid}'")
        datasets[fid] = data
    if not datasets:
        raise EmptyInput("No floor datasets supplied")

    built: dict[str, Floor] = {}
    for fid, data in datasets.items():
        graph = build_floor_graph(fid, data.segments, tolerance=tolerance)
        built[fid] = Floor(
            floor_id=fid,
            number=floor_number(fid),
            graph=graph,
            rooms={room.room_id: room for room in data.rooms},
            doors=list(data.doors),
        )

    for state in portal_states:
        fid = str(state.floor_id)
        if fid not in built:
            logger.warning("Portal '%s' references unknown floor '%s'; ignored", state.portal_id, fid)
            continue
        center = _resolve_portal_center(state.portal_id, datasets[fid])
        built[fid].portals.append(make_portal(state.portal_id, fid, state.status, center=center))

    for floor in built.values():
        floor.teleport_pairs = collect_teleport_pairs(floor.portals)

    logger.info(
        "Built venue with %d floors, %d nodes, %d portals",
        len(built),
        sum(f.graph.node_count for f in built.values()),
        sum(len(f.portals) for f in built.values()),
    )
    return Venue(built)
