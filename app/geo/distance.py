"""Great-circle geometry on a spherical Earth.

All angles are handled in double-precision radians internally; inputs and
outputs are decimal degrees and kilometres.
"""
import math
from dataclasses import dataclass

from app.core.errors import Reason, ValidationError

EARTH_RADIUS_KM = 6371.0

COMPASS_POINTS = ["N", "NE", "E", "SE", "S", "SW", "W", "NW"]


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class Coordinate:
    """A validated (latitude, longitude) pair in decimal degrees.

    Construction fails with ``ValidationError`` for anything outside
    [-90, 90] x [-180, 180], including NaN, so every distance computation
    downstream can assume valid input.
    """

    latitude: float
    longitude: float

    def __post_init__(self):
        if not _is_number(self.latitude) or not -90 <= self.latitude <= 90:
            raise ValidationError(
                f"Latitude must be between -90 and 90, got {self.latitude!r}",
                Reason.INVALID_COORDINATE,
            )
        if not _is_number(self.longitude) or not -180 <= self.longitude <= 180:
            raise ValidationError(
                f"Longitude must be between -180 and 180, got {self.longitude!r}",
                Reason.INVALID_COORDINATE,
            )


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, point: Coordinate) -> bool:
        return (
            self.min_lat <= point.latitude <= self.max_lat
            and self.min_lng <= point.longitude <= self.max_lng
        )


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates in kilometres."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = math.radians(b.latitude - a.latitude)
    d_lng = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    )
    # Rounding can push h just past 1 for near-antipodal points
    h = min(1.0, max(0.0, h))
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def bounding_box(center: Coordinate, radius_km: float) -> BoundingBox:
    """
    Lat/lng box containing every point within ``radius_km`` of ``center``.

    Used as a cheap, index-friendly prefilter before the exact Haversine
    test. The box may be larger than the circle but never smaller:

    - latitude bounds are center +/- the angular radius, clamped to [-90, 90];
    - longitude half-width is ``asin(sin(r) / cos(lat))``, the widest
      longitude offset a point on the circle can reach;
    - if the circle reaches a pole or crosses the antimeridian, the
      longitude range becomes the whole [-180, 180].
    """
    angular = radius_km / EARTH_RADIUS_KM
    angular_deg = math.degrees(angular)

    min_lat = center.latitude - angular_deg
    max_lat = center.latitude + angular_deg

    if min_lat <= -90 or max_lat >= 90:
        return BoundingBox(max(min_lat, -90.0), min(max_lat, 90.0), -180.0, 180.0)

    ratio = math.sin(angular) / math.cos(math.radians(center.latitude))
    if ratio >= 1:
        return BoundingBox(min_lat, max_lat, -180.0, 180.0)

    delta_lng = math.degrees(math.asin(ratio))
    min_lng = center.longitude - delta_lng
    max_lng = center.longitude + delta_lng

    # No split ranges at the antimeridian; a full-width box is still correct.
    if min_lng < -180 or max_lng > 180:
        return BoundingBox(min_lat, max_lat, -180.0, 180.0)

    return BoundingBox(min_lat, max_lat, min_lng, max_lng)


def bearing_deg(origin: Coordinate, target: Coordinate) -> float:
    """Initial bearing from origin to target, normalised to [0, 360)."""
    lat1 = math.radians(origin.latitude)
    lat2 = math.radians(target.latitude)
    d_lng = math.radians(target.longitude - origin.longitude)

    y = math.sin(d_lng) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(d_lng)
    return (math.degrees(math.atan2(y, x)) + 360) % 360


def compass_direction(bearing: float) -> str:
    return COMPASS_POINTS[round(bearing / 45) % 8]


def center_point(coordinates: list[Coordinate]) -> Coordinate | None:
    """Geographic midpoint of a set of coordinates (mean of unit vectors)."""
    if not coordinates:
        return None
    if len(coordinates) == 1:
        return coordinates[0]

    x = y = z = 0.0
    for coord in coordinates:
        lat = math.radians(coord.latitude)
        lng = math.radians(coord.longitude)
        x += math.cos(lat) * math.cos(lng)
        y += math.cos(lat) * math.sin(lng)
        z += math.sin(lat)

    total = len(coordinates)
    x, y, z = x / total, y / total, z / total

    lng = math.atan2(y, x)
    lat = math.atan2(z, math.sqrt(x * x + y * y))
    return Coordinate(math.degrees(lat), math.degrees(lng))


def format_coordinate(coord: Coordinate) -> str:
    """Format as e.g. ``33.8688S, 151.2093E``."""
    lat_dir = "N" if coord.latitude >= 0 else "S"
    lng_dir = "E" if coord.longitude >= 0 else "W"
    return f"{abs(coord.latitude):.4f}{lat_dir}, {abs(coord.longitude):.4f}{lng_dir}"
