"""Match graph nodes to a route polyline.

Pipeline: project every node onto the route, keep the ones within the
proximity threshold, sort them by distance along the route, drop repeated
node ids (first occurrence after sorting wins) and number the survivors.
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from src.route_graph_bc.geo.domain.services.polyline_projector import project_on_polyline
from src.route_graph_bc.graph_node.domain.entities.graph_node import GraphNode
from src.route_graph_bc.route_graph_node.domain.entities.route_graph_link import RouteGraphLink

# Maximum distance (meters) between a node and the route to link them
DEFAULT_PROXIMITY_THRESHOLD_M = 50.0


@dataclass(frozen=True)
class NodeCandidate:
    """A node close enough to the route, before ordering."""
    node_id: str
    cum_dist: float  # meters along the route
    distance: float  # perpendicular meters to the route


def find_candidates(
    coords: Sequence[Sequence[float]],
    nodes: Iterable[GraphNode],
    threshold_m: float = DEFAULT_PROXIMITY_THRESHOLD_M,
) -> List[NodeCandidate]:
    """Project nodes onto the route and keep those within threshold_m (inclusive)."""
    candidates = []
    for node in nodes:
        projection = project_on_polyline(coords, node.position)
        if projection.distance <= threshold_m:
            candidates.append(NodeCandidate(
                node_id=node.id,
                cum_dist=projection.cum_dist,
                distance=projection.distance,
            ))
    return candidates


def order_candidates(candidates: Iterable[NodeCandidate]) -> List[NodeCandidate]:
    """Sort candidates along the route and drop repeated node ids.

    The sort is stable, so equal cum_dist values keep their input order, and
    the first occurrence of a node id after sorting is the one kept (not
    necessarily the closest one).
    """
    ordered = sorted(candidates, key=lambda c: c.cum_dist)

    unique = []
    seen = set()
    for candidate in ordered:
        if candidate.node_id not in seen:
            unique.append(candidate)
            seen.add(candidate.node_id)
    return unique


def round_meters(value: float) -> int:
    """Round to the nearest meter, halves rounding up."""
    return int(math.floor(value + 0.5))


def match_route_nodes(
    route_id: str,
    coords: Sequence[Sequence[float]],
    nodes: Iterable[GraphNode],
    threshold_m: float = DEFAULT_PROXIMITY_THRESHOLD_M,
) -> List[RouteGraphLink]:
    """Compute the full, ordered link set of a route."""
    unique = order_candidates(find_candidates(coords, nodes, threshold_m))
    return [
        RouteGraphLink(
            route_id=route_id,
            graph_node_id=candidate.node_id,
            order_index=index + 1,
            distance_from_start_m=round_meters(candidate.cum_dist),
        )
        for index, candidate in enumerate(unique)
    ]
