"""Dijkstra shortest paths on a single floor graph.

Purpose:
- Snap free-space query points to their nearest graph node.
- Compute shortest node routes over base and teleport edges.

Usage example:
    >>> from floornav.geometry import Segment
    >>> from floornav.graph import build_floor_graph
    >>> g = build_floor_graph("0", [Segment("a", (0, 0), (10, 0)), Segment("b", (10, 0), (10, 10))])
    >>> find_path(g, (0, 0), (10, 10))
    [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)]
"""

from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass

from floornav.errors import NoPathFound
from floornav.geometry import Point, distance
from floornav.graph import FloorGraph

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PathResult:
    """Structured shortest-path result payload."""

    node_ids: list[int]
    points: list[Point]
    length: float
    used_teleport: bool = False


def nearest_node(graph: FloorGraph, point: Point) -> int | None:
    """Return the node id closest to `point`; first node wins ties."""
    best_id: int | None = None
    best_dist = float("inf")
    for node_id, coord in enumerate(graph.nodes):
        d = distance(coord, point)
        if d < best_dist:
            best_dist = d
            best_id = node_id
    return best_id


def dijkstra(graph: FloorGraph, start: int) -> tuple[dict[int, float], dict[int, int], dict[int, bool]]:
    """Single-source Dijkstra from node `start`.

    Returns:
        Tuple of (distance map, predecessor map, teleport-hop map). The
        teleport-hop map records whether the edge into a node was a teleport.
    """
    if not (0 <= start < graph.node_count):
        raise ValueError("Start node is out of graph bounds")

    dist: dict[int, float] = {start: 0.0}
    came_from: dict[int, int] = {}
    via_teleport: dict[int, bool] = {}
    closed: set[int] = set()

    # (distance, node_id) keeps equal-distance pops stable by node id.
    open_heap: list[tuple[float, int]] = [(0.0, start)]

    while open_heap:
        current_dist, current = heapq.heappop(open_heap)
        if current in closed:
            continue
        closed.add(current)

        for edge in graph.neighbors(current):
            nbr = edge.target
            if nbr in closed:
                continue
            tentative = current_dist + edge.weight
            if tentative < dist.get(nbr, float("inf")):
                dist[nbr] = tentative
                came_from[nbr] = current
                via_teleport[nbr] = edge.is_teleport
                heapq.heappush(open_heap, (tentative, nbr))

    return dist, came_from, via_teleport


def shortest_path_between_nodes(graph: FloorGraph, start: int, goal: int) -> PathResult:
    """Shortest route between two node ids.

    Raises:
        NoPathFound: If `goal` is unreachable from `start`.
    """
    if start == goal:
        return PathResult(node_ids=[start], points=[graph.nodes[start]], length=0.0)

    dist, came_from, via_teleport = dijkstra(graph, start)
    if goal not in came_from:
        raise NoPathFound(f"Node {goal} is unreachable from node {start} on floor {graph.floor_id}")

    node_ids = [goal]
    used_teleport = False
    current = goal
    while current in came_from:
        used_teleport = used_teleport or via_teleport[current]
        current = came_from[current]
        node_ids.append(current)
    node_ids.reverse()

    return PathResult(
        node_ids=node_ids,
        points=[graph.nodes[n] for n in node_ids],
        length=dist[goal],
        used_teleport=used_teleport,
    )


def shortest_path(graph: FloorGraph, start: Point, end: Point) -> PathResult | None:
    """Snap both query points and compute the shortest node route.

    Returns None for an empty graph or when the snapped nodes are disconnected.
    """
    if graph.is_empty:
        return None

    start_id = nearest_node(graph, start)
    end_id = nearest_node(graph, end)
    if start_id is None or end_id is None:
        return None

    logger.debug("Floor %s: snapped %s -> node %d, %s -> node %d", graph.floor_id, start, start_id, end, end_id)

    try:
        return shortest_path_between_nodes(graph, start_id, end_id)
    except NoPathFound as exc:
        logger.debug("%s", exc)
        return None


def find_path(graph: FloorGraph, start: Point, end: Point) -> list[Point] | None:
    """Node-coordinate path between two points, or None if no path exists."""
    result = shortest_path(graph, start, end)
    if result is None:
        return None
    return result.points
