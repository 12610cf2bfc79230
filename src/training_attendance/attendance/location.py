from __future__ import annotations

import math
from typing import Callable, Optional

from ..classes.model import TrainingClass
from ..core.constants import (
    FAR_DISTANCE_METERS,
    NOTE_FAR_FROM_CLASS,
    NOTE_NO_CHECKIN_LOCATION,
    NOTE_NO_CLASS_LOCATION,
)

DistanceFn = Callable[[float, float, float, float], float]

EARTH_RADIUS_METERS = 6_371_000


def haversine_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two WGS84 points, in metres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def describe_location(
    training_class: Optional[TrainingClass],
    lat: Optional[float],
    lng: Optional[float],
    *,
    distance_fn: DistanceFn = haversine_meters,
    far_meters: float = FAR_DISTANCE_METERS,
) -> Optional[str]:
    """Location note stored on a check-in, or None when the position is fine."""

    if training_class is None or not training_class.has_coordinates:
        return NOTE_NO_CLASS_LOCATION
    if lat is None or lng is None:
        return NOTE_NO_CHECKIN_LOCATION

    distance = distance_fn(training_class.latitude, training_class.longitude, float(lat), float(lng))
    if distance > far_meters:
        return NOTE_FAR_FROM_CLASS.format(distance=f"{distance:.0f}")
    return None
