"""Great-circle helpers for providers that lack native distance data."""
from __future__ import annotations

import math
from typing import Optional, Tuple

from .exceptions import CoordinateError
from .models import Coordinates

EARTH_RADIUS_KM = 6371.0
KM_PER_MILE = 1.609344


def destination_point(origin: Coordinates, bearing: float, distance_km: float) -> Coordinates:
    """Point reached from ``origin`` after ``distance_km`` along ``bearing`` degrees."""
    delta = float(distance_km) / EARTH_RADIUS_KM
    theta = math.radians(float(bearing))
    phi1 = math.radians(origin.lat)
    lambda1 = math.radians(origin.lng)

    sin_phi2 = math.sin(phi1) * math.cos(delta) + math.cos(phi1) * math.sin(delta) * math.cos(theta)
    phi2 = math.asin(sin_phi2)
    y = math.sin(theta) * math.sin(delta) * math.cos(phi1)
    x = math.cos(delta) - math.sin(phi1) * sin_phi2
    lambda2 = lambda1 + math.atan2(y, x)

    return Coordinates(
        lat=math.degrees(phi2),
        lng=(math.degrees(lambda2) + 540) % 360 - 180,
    )


def great_circle_distance_km(a: Coordinates, b: Coordinates) -> float:
    """Haversine distance in kilometers."""
    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    d_phi = phi2 - phi1
    d_lambda = math.radians(b.lng - a.lng)
    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))


def bounding_box(origin: Coordinates, radius_km: float) -> Tuple[Coordinates, Coordinates]:
    """Top-left and bottom-right corners of a box enclosing the radius circle."""
    corner_distance = math.sqrt(2) * float(radius_km)
    return (
        destination_point(origin, 315, corner_distance),
        destination_point(origin, 135, corner_distance),
    )


class Coordinate:
    """Stateful helper: set the origin once, then resolve several targets."""

    def __init__(self) -> None:
        self._origin: Optional[Coordinates] = None

    @property
    def origin(self) -> Coordinates:
        if self._origin is None:
            raise CoordinateError("Origin not set; call from_point() first.")
        return self._origin

    def from_point(self, lat: float, lng: float) -> "Coordinate":
        self._origin = Coordinates(lat=float(lat), lng=float(lng))
        return self

    def to(self, bearing: float, distance_km: float) -> Coordinates:
        return destination_point(self.origin, bearing, distance_km)

    def distance_to(self, target: Coordinates) -> float:
        return great_circle_distance_km(self.origin, target)
