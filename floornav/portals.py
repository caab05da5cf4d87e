"""Typed inter-floor portals and same-floor teleport pairs.

Portal labels follow `type.number.target`, e.g. `Elevator.2.-1` (elevator 2
leading to floor -1) or `Stop.4.A` (side A of same-floor connector 4).
Malformed labels parse to an Unknown/0/"0" sentinel so venue loading never
fails on bad markup; those portals are kept for reporting but never routed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from floornav.errors import UnresolvedPortal
from floornav.geometry import Point
from floornav.graph import Edge, FloorGraph, teleport_edge
from floornav.pathfinding import nearest_node

logger = logging.getLogger(__name__)

ACTIVE_STATUS = "On"


class PortalType(str, Enum):
    ELEVATOR = "Elevator"
    STAIRS = "Stairs"
    STOP = "Stop"
    UNKNOWN = "Unknown"


_TYPE_PREFIXES: tuple[tuple[str, PortalType], ...] = (
    ("elev", PortalType.ELEVATOR),
    ("stair", PortalType.STAIRS),
    ("stop", PortalType.STOP),
)


@dataclass(slots=True, frozen=True)
class PortalLabel:
    """Parsed `type.number.target` triple."""

    kind: PortalType
    number: int
    target: str

    @property
    def is_sentinel(self) -> bool:
        return self.kind is PortalType.UNKNOWN


UNKNOWN_LABEL = PortalLabel(kind=PortalType.UNKNOWN, number=0, target="0")


def parse_portal_type(raw: str) -> PortalType:
    token = raw.strip().lower()
    for prefix, kind in _TYPE_PREFIXES:
        if token.startswith(prefix):
            return kind
    return PortalType.UNKNOWN


def parse_portal_label(label: str) -> PortalLabel:
    """Parse a portal label, falling back to the Unknown sentinel."""
    parts = str(label).strip().split(".")
    if len(parts) != 3:
        return UNKNOWN_LABEL

    kind = parse_portal_type(parts[0])
    if kind is PortalType.UNKNOWN:
        return UNKNOWN_LABEL

    try:
        number = int(parts[1])
    except ValueError:
        return UNKNOWN_LABEL

    target = parts[2].strip()
    if not target:
        return UNKNOWN_LABEL
    if kind is PortalType.STOP:
        target = target.upper()
    return PortalLabel(kind=kind, number=number, target=target)


@dataclass(slots=True)
class Portal:
    """Typed connector endpoint on one floor."""

    portal_id: str
    floor_id: str
    kind: PortalType
    number: int
    target_floor: str
    center: Point | None = None
    active: bool = False
    virtual: bool = False

    @property
    def key(self) -> tuple[PortalType, int]:
        return self.kind, self.number

    @property
    def is_routable(self) -> bool:
        """Active, parsed, cross-floor portal usable by the transition planner."""
        return self.active and not self.virtual and self.kind in (PortalType.ELEVATOR, PortalType.STAIRS)

    @property
    def display_name(self) -> str:
        return f"{self.kind.value} {self.number}"


def make_portal(
    portal_id: str,
    floor_id: str,
    status: str = ACTIVE_STATUS,
    center: Point | None = None,
) -> Portal:
    """Build a portal from its label and on/off status."""
    label = parse_portal_label(portal_id)
    if label.is_sentinel:
        logger.warning("Portal label '%s' on floor %s is malformed; treating as Unknown", portal_id, floor_id)
    return Portal(
        portal_id=str(portal_id),
        floor_id=str(floor_id),
        kind=label.kind,
        number=label.number,
        target_floor=label.target,
        center=center,
        active=str(status).strip() == ACTIVE_STATUS,
    )


def virtual_portal(source: Portal) -> Portal:
    """Coordinate-less stand-in on the source portal's target floor."""
    return Portal(
        portal_id=f"{source.kind.value}.{source.number}.virtual",
        floor_id=source.target_floor,
        kind=source.kind,
        number=source.number,
        target_floor=source.floor_id,
        center=None,
        active=False,
        virtual=True,
    )


def match_portal(source: Portal, candidates: Iterable[Portal]) -> Portal:
    """Find the counterpart of `source` among the target floor's portals.

    A counterpart shares type and number. Portals with a known center are
    preferred, then active ones.

    Raises:
        UnresolvedPortal: If the target floor has no portal with the same key.
    """
    matches = [p for p in candidates if p.key == source.key and p.floor_id == source.target_floor and not p.virtual]
    if not matches:
        raise UnresolvedPortal(
            f"{source.display_name} on floor {source.floor_id} has no counterpart on floor {source.target_floor}"
        )
    matches.sort(key=lambda p: (p.center is None, not p.active))
    return matches[0]


def counterpart_or_virtual(source: Portal, candidates: Iterable[Portal]) -> Portal:
    """Matched counterpart, or a virtual portal signalling a manual crossing.

    A counterpart without a resolvable center is replaced by a virtual portal
    as well.
    """
    try:
        match = match_portal(source, candidates)
    except UnresolvedPortal as exc:
        logger.warning("%s; using a virtual portal", exc)
        return virtual_portal(source)

    if match.center is None:
        logger.warning(
            "Counterpart %s on floor %s has no resolvable center; using a virtual portal",
            match.portal_id,
            match.floor_id,
        )
        return virtual_portal(source)
    return match


@dataclass(slots=True, frozen=True)
class TeleportPair:
    """Two same-floor Stop endpoints of one fixed connector.

    Each side's own active flag licenses travel away from that side only.
    """

    number: int
    side_a: Portal
    side_b: Portal

    @property
    def a_to_b(self) -> bool:
        return self.side_a.active

    @property
    def b_to_a(self) -> bool:
        return self.side_b.active


def collect_teleport_pairs(portals: Iterable[Portal]) -> list[TeleportPair]:
    """Pair `Stop.N.A` with `Stop.N.B` on one floor, regardless of activity."""
    sides: dict[int, dict[str, Portal]] = {}
    for portal in portals:
        if portal.kind is not PortalType.STOP:
            continue
        if portal.target_floor not in ("A", "B"):
            logger.warning("Stop portal '%s' has side '%s'; expected A or B", portal.portal_id, portal.target_floor)
            continue
        sides.setdefault(portal.number, {}).setdefault(portal.target_floor, portal)

    pairs: list[TeleportPair] = []
    for number in sorted(sides):
        entry = sides[number]
        if "A" in entry and "B" in entry:
            pairs.append(TeleportPair(number=number, side_a=entry["A"], side_b=entry["B"]))
    return pairs


def teleport_edges(graph: FloorGraph, pairs: Iterable[TeleportPair]) -> list[Edge]:
    """Directed teleport edges between the nodes nearest to each Stop side."""
    edges: list[Edge] = []
    for pair in pairs:
        if pair.side_a.center is None or pair.side_b.center is None:
            continue
        node_a = nearest_node(graph, pair.side_a.center)
        node_b = nearest_node(graph, pair.side_b.center)
        if node_a is None or node_b is None or node_a == node_b:
            continue
        if pair.a_to_b:
            edges.append(teleport_edge(node_a, node_b))
        if pair.b_to_a:
            edges.append(teleport_edge(node_b, node_a))
    return edges
