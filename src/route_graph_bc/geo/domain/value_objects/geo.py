from math import radians, cos, sin, atan2, sqrt
from typing import Sequence, Tuple

# Earth's radius in meters
EARTH_RADIUS_M = 6_371_000

# (longitude, latitude) in degrees, GeoJSON axis order
LonLat = Tuple[float, float]


def haversine_distance(p1: Sequence[float], p2: Sequence[float]) -> float:
    """Calculate the great-circle distance between two (lon, lat) points.

    Args:
        p1: First point as (lon, lat) in degrees
        p2: Second point as (lon, lat) in degrees

    Returns:
        Distance in meters. NaN coordinates yield NaN.
    """
    lon1, lat1 = p1[0], p1[1]
    lon2, lat2 = p2[0], p2[1]

    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    delta_lat = radians(lat2 - lat1)
    delta_lon = radians(lon2 - lon1)

    a = sin(delta_lat / 2) ** 2 + cos(lat1_rad) * cos(lat2_rad) * sin(delta_lon / 2) ** 2
    # Rounding can push a past 1 for near-antipodal points; NaN passes through
    if a > 1.0:
        a = 1.0
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return EARTH_RADIUS_M * c


def project_onto_segment(
    point: Sequence[float],
    a: Sequence[float],
    b: Sequence[float],
) -> LonLat:
    """Project a point onto the segment [a, b].

    Works on raw (lon, lat) degrees as planar coordinates, which is accurate
    enough at city scale and matches the distances already stored for links.

    Args:
        point: Point to project as (lon, lat)
        a: Segment start as (lon, lat)
        b: Segment end as (lon, lat)

    Returns:
        Closest point of the segment as (lon, lat). A zero-length segment
        returns a.
    """
    px, py = point[0], point[1]
    ax, ay = a[0], a[1]
    bx, by = b[0], b[1]

    abx = bx - ax
    aby = by - ay
    length_sq = abx * abx + aby * aby

    if length_sq == 0:
        return (ax, ay)

    t = ((px - ax) * abx + (py - ay) * aby) / length_sq

    # Explicit comparisons so a NaN parameter stays NaN
    if t < 0.0:
        t = 0.0
    elif t > 1.0:
        t = 1.0

    return (ax + t * abx, ay + t * aby)
