from dataclasses import dataclass


@dataclass(frozen=True)
class RouteGraphLink:
    """Link between a route and a graph node lying on it.

    order_index is the 1-based position of the node along the route and
    distance_from_start_m the rounded distance, along the route, from its
    first vertex to the node's projection.
    """

    route_id: str
    graph_node_id: str
    order_index: int
    distance_from_start_m: int

    def to_dict(self) -> dict:
        return {
            "route_id": self.route_id,
            "graph_node_id": self.graph_node_id,
            "order_index": self.order_index,
            "distance_from_start_m": self.distance_from_start_m,
        }
