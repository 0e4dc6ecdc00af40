"""
Geofencing utilities for commuting check-in/check-out.

Haversine great-circle distance between a reported position and the registered
reference locations; a position is accepted when it falls inside the radius of
at least one active location.
"""
from __future__ import annotations
from dataclasses import dataclass
from math import radians, cos, sin, asin, sqrt
from typing import Iterable, Optional

from training_pay.exceptions import NoActiveLocationError, OutOfRangeError, ValidationError

EARTH_RADIUS_M = 6371000.0


@dataclass(frozen=True)
class Position:
    lat: float
    lng: float

    def __post_init__(self):
        if not (-90 <= float(self.lat) <= 90) or not (-180 <= float(self.lng) <= 180):
            raise ValidationError(f"Invalid coordinates: ({self.lat}, {self.lng})")


@dataclass(frozen=True)
class GeofenceMatch:
    location: object
    distance_m: float


def haversine_m(lat1, lng1, lat2, lng2) -> float:
    """Great-circle distance between two points in meters."""
    dlat = radians(float(lat2) - float(lat1))
    dlng = radians(float(lng2) - float(lng1))
    a = sin(dlat / 2) ** 2 + cos(radians(float(lat1))) * cos(radians(float(lat2))) * sin(dlng / 2) ** 2
    c = 2 * asin(sqrt(a))
    return EARTH_RADIUS_M * c


def validate(position: Position, locations: Iterable) -> GeofenceMatch:
    """
    Accept `position` if it lies within radius of any active location.

    Locations need latitude, longitude, radius_m and is_active attributes.
    Returns the closest accepting location. Fails closed when nothing is active.
    """
    active = [loc for loc in locations if getattr(loc, "is_active", True)]
    if not active:
        raise NoActiveLocationError()

    best: Optional[GeofenceMatch] = None
    nearest = None
    for loc in active:
        dist = haversine_m(position.lat, position.lng, loc.latitude, loc.longitude)
        if nearest is None or dist < nearest:
            nearest = dist
        if dist <= float(loc.radius_m) and (best is None or dist < best.distance_m):
            best = GeofenceMatch(location=loc, distance_m=dist)

    if best is None:
        raise OutOfRangeError(
            f"Position is {int(nearest)}m from the nearest active location.",
            nearest_m=nearest,
        )
    return best


def format_distance(distance_m: float) -> str:
    if distance_m >= 1000:
        return f"{distance_m / 1000:.1f} km"
    return f"{int(distance_m)} m"
