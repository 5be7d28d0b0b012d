import logging
from dataclasses import dataclass
from typing import Optional

from src.route_graph_bc.matching.domain.exceptions import (
    MissingRouteIdError,
    RouteNotFoundError,
    RouteNotLinkableError,
)
from src.route_graph_bc.matching.infrastructure.repositories.route_graph_store import (
    RouteGraphStoreInterface,
)
from src.route_graph_bc.matching.infrastructure.services.route_graph_builder import RouteGraphBuilder
from src.route_graph_bc.matching.infrastructure.services.route_lock_registry import RouteLockRegistry

logger = logging.getLogger(__name__)


@dataclass
class RouteGraphUpdateResult:
    route_id: str
    count: int

    @property
    def message(self) -> str:
        return f"Linked {self.count} nodes to route"


class SingleRouteHandler:
    """On-demand entry point: rebuild one route's links, e.g. after an edit."""

    def __init__(
        self,
        store: RouteGraphStoreInterface,
        lock_registry: Optional[RouteLockRegistry] = None,
        threshold_meters: Optional[float] = None,
    ):
        self.store = store
        self.lock_registry = lock_registry or RouteLockRegistry()
        self.builder = RouteGraphBuilder(
            store, lock_registry=self.lock_registry, threshold_meters=threshold_meters
        )

    def handle(self, route_id: Optional[str]) -> RouteGraphUpdateResult:
        """Rebuild the links of route_id.

        The route is read under its process lock and the store's route lock,
        so a concurrent rebuild, here or in another worker, cannot write links
        computed from an older geometry after this one.

        Raises:
            MissingRouteIdError: No route id given.
            RouteNotFoundError: Route missing or soft-deleted.
            RouteNotLinkableError: Route is deprecated.
            InvalidRouteGeometryError: Geometry missing or not a LineString.
            UpstreamReadError: Route or nodes could not be read.
            LinkWriteError: Links could not be replaced.
        """
        if not route_id or not str(route_id).strip():
            raise MissingRouteIdError()

        with self.lock_registry.hold(route_id):
            self.store.lock_route(route_id)
            route = self.store.get_route(route_id)
            if route is None:
                raise RouteNotFoundError(route_id)
            if route.is_deprecated:
                raise RouteNotLinkableError(route_id, route.status)

            nodes = self.store.get_all_nodes()
            build = self.builder.build(route, nodes)

        logger.info(f"Route {route_id}: {build.count} nodes linked")
        return RouteGraphUpdateResult(route_id=route_id, count=build.count)
