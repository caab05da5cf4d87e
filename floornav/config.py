"""Environment-driven routing configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from floornav.bearing import DEFAULT_ALIGNMENT_TOLERANCE_DEG, DEFAULT_MAX_LEGS
from floornav.graph import SNAP_TOLERANCE
from floornav.transitions import MAX_HOPS


@dataclass(slots=True, frozen=True)
class RoutingConfig:
    """Tunables shared by venue building and route queries."""

    snap_tolerance: float = SNAP_TOLERANCE
    max_hops: int = MAX_HOPS
    bearing_max_legs: int = DEFAULT_MAX_LEGS
    alignment_tolerance_deg: float = DEFAULT_ALIGNMENT_TOLERANCE_DEG


def _env_number(name: str, default: float, cast: type) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got '{raw}'") from exc
    return value


def load_config() -> RoutingConfig:
    """Read `FLOORNAV_*` overrides from the environment.

    Raises:
        ValueError: If a value is not a number or is out of range.
    """
    snap = float(_env_number("FLOORNAV_SNAP_TOLERANCE", SNAP_TOLERANCE, float))
    hops = int(_env_number("FLOORNAV_MAX_HOPS", MAX_HOPS, int))
    legs = int(_env_number("FLOORNAV_BEARING_MAX_LEGS", DEFAULT_MAX_LEGS, int))
    tolerance = float(_env_number("FLOORNAV_ALIGNMENT_TOLERANCE_DEG", DEFAULT_ALIGNMENT_TOLERANCE_DEG, float))

    if snap < 0:
        raise ValueError("FLOORNAV_SNAP_TOLERANCE must be >= 0")
    if hops <= 0:
        raise ValueError("FLOORNAV_MAX_HOPS must be > 0")
    if legs <= 0:
        raise ValueError("FLOORNAV_BEARING_MAX_LEGS must be > 0")
    if not 0 <= tolerance <= 180:
        raise ValueError("FLOORNAV_ALIGNMENT_TOLERANCE_DEG must be within [0, 180]")

    return RoutingConfig(
        snap_tolerance=snap,
        max_hops=hops,
        bearing_max_legs=legs,
        alignment_tolerance_deg=tolerance,
    )
