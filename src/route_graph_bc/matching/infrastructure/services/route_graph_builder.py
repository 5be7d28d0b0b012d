import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from src.route_graph_bc.graph_node.domain.entities.graph_node import GraphNode
from src.route_graph_bc.matching.domain.exceptions import InvalidRouteGeometryError
from src.route_graph_bc.matching.domain.services.node_matcher import (
    DEFAULT_PROXIMITY_THRESHOLD_M,
    match_route_nodes,
)
from src.route_graph_bc.matching.infrastructure.repositories.route_graph_store import (
    RouteGraphStoreInterface,
)
from src.route_graph_bc.matching.infrastructure.services.route_lock_registry import RouteLockRegistry
from src.route_graph_bc.route.domain.entities.route import Route
from src.route_graph_bc.route_graph_node.domain.entities.route_graph_link import RouteGraphLink

logger = logging.getLogger(__name__)


@dataclass
class RouteGraphBuildResult:
    """Outcome of building one route's links."""
    route_id: str
    links: List[RouteGraphLink] = field(default_factory=list)
    written: bool = False

    @property
    def count(self) -> int:
        return len(self.links)


class RouteGraphBuilder:
    """Builds and persists the canonical link set of a route.

    The store is injected; the builder never touches routes or graph nodes,
    only the links of the route being built.
    """

    def __init__(
        self,
        store: RouteGraphStoreInterface,
        lock_registry: Optional[RouteLockRegistry] = None,
        threshold_meters: Optional[float] = None,
    ):
        self.store = store
        self.lock_registry = lock_registry or RouteLockRegistry()
        self.threshold_meters = (
            DEFAULT_PROXIMITY_THRESHOLD_M if threshold_meters is None else threshold_meters
        )

    def compute_links(self, route: Route, nodes: Sequence[GraphNode]) -> List[RouteGraphLink]:
        """Compute a route's links without writing them.

        Raises:
            InvalidRouteGeometryError: If the route has no usable LineString.
        """
        try:
            coords = route.line_coordinates()
        except InvalidRouteGeometryError as e:
            logger.warning(f"Route {route.id} has invalid geometry ({e.reason}), skipping")
            raise

        return match_route_nodes(route.id, coords, nodes, self.threshold_meters)

    def build(
        self,
        route: Route,
        nodes: Sequence[GraphNode],
        dry_run: bool = False,
    ) -> RouteGraphBuildResult:
        """Recompute and replace a route's links.

        Builds of the same route are serialized, in this process by the lock
        registry and across processes by the store's route lock; the old
        links are replaced as a whole. A dry run takes no store lock.
        """
        with self.lock_registry.hold(route.id):
            if not dry_run:
                self.store.lock_route(route.id)
            links = self.compute_links(route, nodes)
            if dry_run:
                logger.info(f"DRY RUN - Route {route.id}: {len(links)} nodes would be linked")
                return RouteGraphBuildResult(route_id=route.id, links=links)

            self.store.replace_links(route.id, links)

        logger.debug(f"Route {route.id}: replaced links with {len(links)} rows")
        return RouteGraphBuildResult(route_id=route.id, links=links, written=True)
