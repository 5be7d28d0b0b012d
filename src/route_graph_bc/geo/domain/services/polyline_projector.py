"""Projection of points onto route polylines.

A polyline is an ordered sequence of (lon, lat) vertices. Projection picks the
segment closest to the point and reports how far along the polyline the
projected position is, measured from the first vertex.
"""

import math
from dataclasses import dataclass
from typing import Sequence

from src.route_graph_bc.geo.domain.value_objects.geo import (
    LonLat,
    haversine_distance,
    project_onto_segment,
)


@dataclass(frozen=True)
class PolylineProjection:
    """Result of projecting a point onto a polyline."""

    cum_dist: float  # meters from the first vertex to projected_point
    projected_point: LonLat
    distance: float  # meters from the original point to projected_point
    segment_index: int  # index of the winning segment (-1 if none could be scored)


def polyline_length(coords: Sequence[Sequence[float]]) -> float:
    """Total length of a polyline in meters."""
    total = 0.0
    for i in range(len(coords) - 1):
        total += haversine_distance(coords[i], coords[i + 1])
    return total


def project_on_polyline(
    coords: Sequence[Sequence[float]],
    point: Sequence[float],
) -> PolylineProjection:
    """Project a point onto the closest segment of a polyline.

    Every segment is scored by the haversine distance between the point and
    its projection onto that segment. The segment with the smallest distance
    wins; on a tie the earlier segment is kept.

    Args:
        coords: Polyline vertices as (lon, lat), at least 2
        point: Point to project as (lon, lat)

    Returns:
        PolylineProjection with cum_dist in [0, polyline_length(coords)].

    Raises:
        ValueError: If the polyline has fewer than 2 vertices.
    """
    if len(coords) < 2:
        raise ValueError(f"Polyline needs at least 2 points, got {len(coords)}")

    origin = (point[0], point[1])
    best = PolylineProjection(
        cum_dist=0.0,
        projected_point=origin,
        distance=math.inf,
        segment_index=-1,
    )

    cumulative = 0.0
    for i in range(len(coords) - 1):
        a = coords[i]
        b = coords[i + 1]
        segment_length = haversine_distance(a, b)

        projected = project_onto_segment(point, a, b)
        dist = haversine_distance(point, projected)

        if dist < best.distance:
            along = min(haversine_distance(a, projected), segment_length)
            best = PolylineProjection(
                cum_dist=cumulative + along,
                projected_point=projected,
                distance=dist,
                segment_index=i,
            )
        cumulative += segment_length

    return best
