"""Floor graph construction from loosely drawn corridor segments.

Purpose:
- Deduplicate segment endpoints into nodes using a snapping tolerance.
- Build an undirected, weighted, parallel-edge-free adjacency list.
- Overlay directed teleport edges at query time without mutating the base graph.

Usage example:
    >>> from floornav.geometry import Segment
    >>> graph = build_floor_graph("0", [Segment("s1", (0, 0), (10, 0))])
    >>> graph.node_count
    2
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from floornav.geometry import Point, Segment, distance

logger = logging.getLogger(__name__)

SNAP_TOLERANCE = 1.0
TELEPORT_WEIGHT = 1e-3


@dataclass(slots=True, frozen=True)
class Edge:
    """Weighted connection between two node ids.

    Base edges are undirected and stored once with `source < target`; the
    adjacency list holds both orientations. Teleport edges are directed.
    """

    source: int
    target: int
    weight: float
    is_teleport: bool = False

    def reversed(self) -> "Edge":
        return Edge(source=self.target, target=self.source, weight=self.weight, is_teleport=self.is_teleport)


@dataclass(frozen=True)
class FloorGraph:
    """Immutable node set and adjacency list for one floor."""

    floor_id: str
    nodes: tuple[Point, ...] = ()
    edges: tuple[Edge, ...] = ()
    adjacency: dict[int, tuple[Edge, ...]] = field(default_factory=dict)
    degenerate_segments: int = 0

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def neighbors(self, node_id: int) -> tuple[Edge, ...]:
        return self.adjacency.get(node_id, ())

    def components(self) -> list[set[int]]:
        """Connected components of the adjacency list, teleport edges included."""
        seen: set[int] = set()
        out: list[set[int]] = []
        for start in range(self.node_count):
            if start in seen:
                continue
            comp = {start}
            stack = [start]
            while stack:
                cur = stack.pop()
                for edge in self.neighbors(cur):
                    if edge.target not in comp:
                        comp.add(edge.target)
                        stack.append(edge.target)
            seen |= comp
            out.append(comp)
        return out


def snap_point(nodes: list[Point], point: Point, tolerance: float = SNAP_TOLERANCE) -> int:
    """Resolve a point to a node id, creating a node when none is close enough.

    The first existing node within `tolerance` wins, so merges depend on input
    order. This is not nearest-neighbour clustering.
    """
    for node_id, coord in enumerate(nodes):
        if distance(coord, point) <= tolerance:
            return node_id
    nodes.append((float(point[0]), float(point[1])))
    return len(nodes) - 1


def build_floor_graph(
    floor_id: str,
    segments: Iterable[Segment],
    tolerance: float = SNAP_TOLERANCE,
) -> FloorGraph:
    """Build a floor graph from walkable segments.

    Args:
        floor_id: Owning floor identifier.
        segments: Corridor line segments.
        tolerance: Snapping distance under which endpoints share a node.

    Returns:
        FloorGraph. An empty segment list yields a graph with zero nodes.

    Raises:
        ValueError: If tolerance is negative.
    """
    if tolerance < 0:
        raise ValueError("tolerance must be >= 0")

    nodes: list[Point] = []
    edges: list[Edge] = []
    edge_keys: set[tuple[int, int]] = set()
    degenerate = 0

    for seg in segments:
        a = snap_point(nodes, seg.p1, tolerance)
        b = snap_point(nodes, seg.p2, tolerance)
        if a == b:
            degenerate += 1
            continue

        u, v = sorted((a, b))
        if (u, v) in edge_keys:
            continue
        edge_keys.add((u, v))
        # Snapped coordinates keep edge weights consistent with node positions.
        edges.append(Edge(source=u, target=v, weight=distance(nodes[u], nodes[v])))

    adjacency: dict[int, list[Edge]] = {node_id: [] for node_id in range(len(nodes))}
    for edge in edges:
        adjacency[edge.source].append(edge)
        adjacency[edge.target].append(edge.reversed())

    logger.debug(
        "Built floor graph %s: %d nodes, %d edges, %d zero-length segments skipped",
        floor_id,
        len(nodes),
        len(edges),
        degenerate,
    )

    return FloorGraph(
        floor_id=str(floor_id),
        nodes=tuple(nodes),
        edges=tuple(edges),
        adjacency={node_id: tuple(out) for node_id, out in adjacency.items()},
        degenerate_segments=degenerate,
    )


def with_teleports(graph: FloorGraph, teleport_edges: Sequence[Edge]) -> FloorGraph:
    """Return a new graph whose adjacency also holds directed teleport edges.

    The base graph is left untouched.
    """
    if not teleport_edges:
        return graph

    adjacency = {node_id: list(out) for node_id, out in graph.adjacency.items()}
    for edge in teleport_edges:
        if not (0 <= edge.source < graph.node_count and 0 <= edge.target < graph.node_count):
            raise ValueError(f"Teleport edge {edge.source}->{edge.target} references unknown nodes")
        if edge.source == edge.target:
            continue
        adjacency[edge.source].append(edge)

    return FloorGraph(
        floor_id=graph.floor_id,
        nodes=graph.nodes,
        edges=graph.edges,
        adjacency={node_id: tuple(out) for node_id, out in adjacency.items()},
        degenerate_segments=graph.degenerate_segments,
    )


def teleport_edge(source: int, target: int) -> Edge:
    """Near-zero-weight directed connector not backed by drawn geometry."""
    return Edge(source=source, target=target, weight=TELEPORT_WEIGHT, is_teleport=True)
