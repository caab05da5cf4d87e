"""Compass bearing estimation from path geometry.

Purpose:
- Convert a straight point-to-point vector into a compass bearing.
- Estimate a stable heading from the first legs of a routed path.
- Map bearings to compass labels and check live-heading alignment.

Convention: drawing space is screen-like, so -y points North and +x East.
The `90 - atan2(dy, dx)` form, which reads +y as North, is not used.
Bearings are degrees clockwise from North in [0, 360).

Usage example:
    >>> direct_bearing((0, 0), (10, 0)).compass_angle
    90.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from floornav.errors import DegenerateInput, EmptyInput
from floornav.geometry import Point

DEFAULT_MAX_LEGS = 5
MIN_SEGMENT_LENGTH = 1.0
CONFIDENCE_DISTANCE = 500.0
DEFAULT_ALIGNMENT_TOLERANCE_DEG = 20.0

COMPASS_8 = (
    "North",
    "Northeast",
    "East",
    "Southeast",
    "South",
    "Southwest",
    "West",
    "Northwest",
)

COMPASS_16 = (
    "North",
    "North-Northeast",
    "Northeast",
    "East-Northeast",
    "East",
    "East-Southeast",
    "Southeast",
    "South-Southeast",
    "South",
    "South-Southwest",
    "Southwest",
    "West-Southwest",
    "West",
    "West-Northwest",
    "Northwest",
    "North-Northwest",
)


@dataclass(slots=True, frozen=True)
class BearingResult:
    """Direction a traveler should face, with a confidence in [0, 1]."""

    start_point: Point
    end_point: Point
    direction_vector: tuple[float, float]
    angle_degrees: float
    compass_angle: float
    compass: str
    confidence: float
    distance: float | None = None
    segments_used: int | None = None


def _normalize_angle(angle: float) -> float:
    out = float(angle) % 360.0
    # -1e-15 % 360 rounds to 360.0 in floating point.
    return 0.0 if out >= 360.0 else out


def compass_angle(dx: float, dy: float) -> float:
    """Bearing of a drawing-space vector, clockwise from North (-y)."""
    return _normalize_angle(90.0 + math.degrees(math.atan2(dy, dx)))


def compass_label(angle: float, points: int = 8) -> str:
    """Nearest-sector compass label for an 8- or 16-point rose."""
    if points == 8:
        rose = COMPASS_8
    elif points == 16:
        rose = COMPASS_16
    else:
        raise ValueError("points must be 8 or 16")

    sector = 360.0 / len(rose)
    index = int(math.floor(_normalize_angle(angle) / sector + 0.5)) % len(rose)
    return rose[index]


def direct_bearing(p1: Point, p2: Point, compass_points: int = 8) -> BearingResult:
    """Bearing of the straight line from `p1` to `p2`.

    Confidence grows with distance and caps at 1.0 for 500 drawing units.

    Raises:
        DegenerateInput: If both points coincide.
    """
    vec = np.asarray(p2, dtype=float) - np.asarray(p1, dtype=float)
    length = float(np.hypot(vec[0], vec[1]))
    if length == 0.0:
        raise DegenerateInput(f"Cannot derive a direction from {p1} to itself")

    unit = vec / length
    angle = compass_angle(float(unit[0]), float(unit[1]))
    return BearingResult(
        start_point=(float(p1[0]), float(p1[1])),
        end_point=(float(p2[0]), float(p2[1])),
        direction_vector=(float(unit[0]), float(unit[1])),
        angle_degrees=math.degrees(math.atan2(unit[1], unit[0])),
        compass_angle=angle,
        compass=compass_label(angle, compass_points),
        confidence=min(1.0, length / CONFIDENCE_DISTANCE),
        distance=length,
    )


def path_bearing(
    points: Sequence[Point],
    max_legs: int = DEFAULT_MAX_LEGS,
    compass_points: int = 8,
) -> BearingResult:
    """Length-weighted heading over the first `max_legs` path segments.

    Segments shorter than one unit are treated as noise. Each remaining
    segment's unit direction is weighted by its length, so long sustained legs
    dominate initial jitter. Confidence rewards both the coherence of the
    summed vector and the number of usable segments.

    Raises:
        EmptyInput: If fewer than two points are given.
        DegenerateInput: If no usable segment remains or the segments cancel out.
    """
    if max_legs <= 0:
        raise ValueError("max_legs must be > 0")
    if len(points) < 2:
        raise EmptyInput("A path bearing needs at least two points")

    coords = np.asarray(points[: max_legs + 1], dtype=float)
    deltas = np.diff(coords, axis=0)
    lengths = np.hypot(deltas[:, 0], deltas[:, 1])
    usable = lengths >= MIN_SEGMENT_LENGTH

    segments_used = int(np.count_nonzero(usable))
    total_weight = float(lengths[usable].sum())
    if segments_used == 0 or total_weight == 0.0:
        raise DegenerateInput("No path segment is long enough to estimate a direction")

    # unit direction * length == raw delta
    weighted = deltas[usable].sum(axis=0) / total_weight
    magnitude = float(np.hypot(weighted[0], weighted[1]))
    if magnitude == 0.0:
        raise DegenerateInput("Path segments cancel out to a zero direction")

    unit = weighted / magnitude
    angle = compass_angle(float(unit[0]), float(unit[1]))
    return BearingResult(
        start_point=(float(points[0][0]), float(points[0][1])),
        end_point=(float(points[-1][0]), float(points[-1][1])),
        direction_vector=(float(unit[0]), float(unit[1])),
        angle_degrees=math.degrees(math.atan2(unit[1], unit[0])),
        compass_angle=angle,
        compass=compass_label(angle, compass_points),
        confidence=min(1.0, magnitude * segments_used / max_legs),
        segments_used=segments_used,
    )


def neutral_bearing(point: Point) -> BearingResult:
    """Zero-confidence North placeholder for degraded routes."""
    p = (float(point[0]), float(point[1]))
    return BearingResult(
        start_point=p,
        end_point=p,
        direction_vector=(0.0, -1.0),
        angle_degrees=-90.0,
        compass_angle=0.0,
        compass=COMPASS_8[0],
        confidence=0.0,
    )


def heading_delta(current_heading: float, target_heading: float) -> float:
    """Signed smallest rotation from current to target, in (-180, 180]."""
    delta = _normalize_angle(target_heading - current_heading)
    return delta - 360.0 if delta > 180.0 else delta


def is_aligned(
    current_heading: float,
    target_heading: float,
    tolerance: float = DEFAULT_ALIGNMENT_TOLERANCE_DEG,
) -> bool:
    """True when the live heading lies within ±tolerance of the target."""
    if tolerance < 0:
        raise ValueError("tolerance must be >= 0")
    return abs(heading_delta(current_heading, target_heading)) <= tolerance
