"""Plain 2-D geometry helpers shared across the routing engine.

Coordinates live in the venue's local drawing space. Floors are not spatially
aligned to each other, so points from different floors must never be compared.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

Point = tuple[float, float]


@dataclass(slots=True, frozen=True)
class Segment:
    """Undirected walkable line between two points."""

    segment_id: str
    p1: Point
    p2: Point

    @property
    def length(self) -> float:
        return distance(self.p1, self.p2)


def as_point(value: Sequence[float]) -> Point:
    """Coerce a 2-item sequence into a float `(x, y)` tuple."""
    if len(value) < 2:
        raise ValueError("Point must have x and y coordinates")
    return float(value[0]), float(value[1])


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(b[0] - a[0], b[1] - a[1])


def midpoint(a: Point, b: Point) -> Point:
    return (a[0] + b[0]) / 2.0, (a[1] + b[1]) / 2.0


def centroid(points: Iterable[Sequence[float]]) -> Point | None:
    """Vertex-average anchor of a shape's source geometry.

    Rect, polygon and path outlines are all reduced to their vertex list by the
    extraction adapter, so the anchor is the plain mean of those vertices.
    Returns None for an empty vertex list.
    """
    sx = 0.0
    sy = 0.0
    count = 0
    for p in points:
        x, y = as_point(p)
        if math.isnan(x) or math.isnan(y):
            continue
        sx += x
        sy += y
        count += 1
    if count == 0:
        return None
    return sx / count, sy / count


def segments_to_points(segments: Sequence[Segment]) -> list[Point]:
    """Convert a chained segment list into a polyline.

    The first segment contributes both endpoints, every following segment only
    its end point.
    """
    if not segments:
        return []
    points = [segments[0].p1]
    points.extend(seg.p2 for seg in segments)
    return points


def points_to_segments(points: Sequence[Point], prefix: str = "seg") -> list[Segment]:
    """Convert a polyline into consecutive segments."""
    return [
        Segment(segment_id=f"{prefix}-{idx}", p1=as_point(points[idx]), p2=as_point(points[idx + 1]))
        for idx in range(len(points) - 1)
    ]


def polyline_length(points: Sequence[Point]) -> float:
    """Total length of a polyline."""
    return float(sum(distance(points[i], points[i + 1]) for i in range(len(points) - 1)))
