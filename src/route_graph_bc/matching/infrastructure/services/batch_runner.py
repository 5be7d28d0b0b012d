"""Rebuild the route graph links of every active route.

Routes and graph nodes are loaded once; each route is then built on its own,
and a failing route is logged and counted without stopping the run.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

from src.route_graph_bc.graph_node.domain.entities.graph_node import GraphNode
from src.route_graph_bc.matching.domain.exceptions import InvalidRouteGeometryError
from src.route_graph_bc.matching.infrastructure.repositories.route_graph_store import (
    RouteGraphStoreInterface,
)
from src.route_graph_bc.matching.infrastructure.services.route_graph_builder import RouteGraphBuilder
from src.route_graph_bc.matching.infrastructure.services.route_lock_registry import RouteLockRegistry
from src.route_graph_bc.route.domain.entities.route import Route

logger = logging.getLogger(__name__)


@dataclass
class BatchRunResult:
    """Aggregate outcome of a batch run."""
    routes_total: int = 0
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    links_written: int = 0
    dry_run: bool = False
    duration_seconds: float = 0.0
    route_counts: Dict[str, int] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> dict:
        return {
            "routes_total": self.routes_total,
            "succeeded": self.succeeded,
            "skipped": self.skipped,
            "failed": self.failed,
            "links_written": self.links_written,
            "dry_run": self.dry_run,
            "duration_seconds": round(self.duration_seconds, 2),
            "errors": dict(self.errors),
        }


class RouteGraphBatchRunner:
    """Maintenance entry point: rebuild links for all active routes."""

    def __init__(
        self,
        store: RouteGraphStoreInterface,
        lock_registry: Optional[RouteLockRegistry] = None,
        threshold_meters: Optional[float] = None,
    ):
        self.store = store
        self.builder = RouteGraphBuilder(
            store, lock_registry=lock_registry, threshold_meters=threshold_meters
        )

    def _build_current(self, listed: Route, nodes: Sequence[GraphNode], dry_run: bool):
        """Build a listed route from its current row.

        The listing is read once at the start; the route is read again under
        its locks so the links follow the latest edit. Returns None when the
        route was deleted or deprecated in between.
        """
        if dry_run:
            return self.builder.build(listed, nodes, dry_run=True)

        with self.builder.lock_registry.hold(listed.id):
            self.store.lock_route(listed.id)
            route = self.store.get_route(listed.id)
            if route is None or not route.is_linkable:
                logger.info(f"Route {listed.id}: no longer active, skipping")
                return None
            return self.builder.build(route, nodes)

    def run(self, dry_run: bool = False) -> BatchRunResult:
        """Run the batch.

        Raises:
            UpstreamReadError: If the routes or the graph nodes cannot be
                loaded; there is nothing to iterate in that case.
        """
        started = time.monotonic()
        routes = self.store.get_active_routes()
        nodes = self.store.get_all_nodes()
        logger.info(f"Building route graph for {len(routes)} routes against {len(nodes)} nodes")

        result = BatchRunResult(routes_total=len(routes), dry_run=dry_run)

        for route in routes:
            try:
                build = self._build_current(route, nodes, dry_run)
            except InvalidRouteGeometryError as e:
                result.skipped += 1
                result.errors[route.id] = str(e)
                continue
            except Exception as e:
                logger.error(f"Route {route.id}: failed to build links: {e}")
                result.failed += 1
                result.errors[route.id] = str(e)
                continue

            if build is None:
                result.skipped += 1
                result.errors[route.id] = "Route is no longer active"
                continue

            result.succeeded += 1
            result.route_counts[route.id] = build.count
            if build.written:
                result.links_written += build.count
            logger.info(f"Route {route.id}: {build.count} nodes linked")

        result.duration_seconds = time.monotonic() - started
        logger.info(
            f"{'DRY RUN - ' if dry_run else ''}Route graph batch finished: "
            f"{result.succeeded} ok, {result.skipped} skipped, {result.failed} failed, "
            f"{result.links_written} links written in {result.duration_seconds:.1f}s"
        )
        return result
