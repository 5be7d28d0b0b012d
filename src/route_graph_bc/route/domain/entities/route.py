import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from src.route_graph_bc.geo.domain.value_objects.geo import LonLat
from src.route_graph_bc.matching.domain.exceptions import InvalidRouteGeometryError


class RouteStatus(str, Enum):
    """Lifecycle status of a route."""
    DRAFT = "draft"
    ACTIVE = "active"
    DEPRECATED = "deprecated"


@dataclass
class Route:
    """Route entity - a transit line with its drawn path.

    geometry is a GeoJSON geometry object, e.g.
    {"type": "LineString", "coordinates": [[lon, lat], ...]}.
    """

    id: str
    geometry: Optional[dict] = None
    status: Optional[str] = None
    deleted_at: Optional[datetime] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_deprecated(self) -> bool:
        return self.status == RouteStatus.DEPRECATED.value

    @property
    def is_linkable(self) -> bool:
        """Whether the route takes part in route graph builds."""
        return not self.is_deleted and not self.is_deprecated

    def line_coordinates(self) -> List[LonLat]:
        """Return the LineString vertices as (lon, lat) tuples.

        Raises:
            InvalidRouteGeometryError: If geometry is missing, not a
                LineString, has fewer than 2 vertices or a malformed vertex.
        """
        geometry = self.geometry
        if not geometry or geometry.get("type") != "LineString":
            raise InvalidRouteGeometryError(self.id)

        coordinates = geometry.get("coordinates") or []
        if len(coordinates) < 2:
            raise InvalidRouteGeometryError(
                self.id, f"LineString needs at least 2 points, got {len(coordinates)}"
            )

        return [_to_lon_lat(self.id, vertex) for vertex in coordinates]


def _to_lon_lat(route_id: str, vertex: Any) -> LonLat:
    try:
        lon, lat = float(vertex[0]), float(vertex[1])
    except (TypeError, ValueError, IndexError, KeyError):
        raise InvalidRouteGeometryError(route_id, f"Malformed vertex {vertex!r}")
    if math.isnan(lon) or math.isnan(lat):
        raise InvalidRouteGeometryError(route_id, f"Malformed vertex {vertex!r}")
    return (lon, lat)
