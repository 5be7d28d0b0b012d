from dataclasses import dataclass

from src.route_graph_bc.geo.domain.value_objects.geo import LonLat


@dataclass(frozen=True)
class GraphNode:
    """Graph node entity - a stop or intersection routes can pass through."""

    id: str
    lat: float
    lng: float

    @property
    def position(self) -> LonLat:
        """Return position as (lon, lat), the axis order of route geometries."""
        return (self.lng, self.lat)
