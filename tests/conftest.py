"""Pytest configuration and fixtures."""

from typing import Dict, Iterable, List, Optional, Sequence

import pytest
from fastapi.testclient import TestClient

from app import app
from adapters.http.api.route_graph.routers.route_graph_router import get_route_graph_store
from core.rate_limiter import limiter
from src.route_graph_bc.graph_node.domain.entities.graph_node import GraphNode
from src.route_graph_bc.matching.domain.exceptions import LinkWriteError, UpstreamReadError
from src.route_graph_bc.matching.infrastructure.repositories.route_graph_store import (
    RouteGraphStoreInterface,
)
from src.route_graph_bc.route.domain.entities.route import Route
from src.route_graph_bc.route_graph_node.domain.entities.route_graph_link import RouteGraphLink


class InMemoryRouteGraphStore(RouteGraphStoreInterface):
    """Route graph store kept in dicts, with switches to simulate failures."""

    def __init__(
        self,
        routes: Optional[Iterable[Route]] = None,
        nodes: Optional[Iterable[GraphNode]] = None,
    ):
        self.routes: Dict[str, Route] = {route.id: route for route in routes or []}
        self.nodes: List[GraphNode] = list(nodes or [])
        self.links: Dict[str, List[RouteGraphLink]] = {}
        self.fail_reads = False
        self.fail_writes_for: set = set()
        self.write_count = 0
        # ("lock" | "get_route" | "replace", route_id) in call order
        self.calls: List[tuple] = []

    def get_active_routes(self) -> List[Route]:
        if self.fail_reads:
            raise UpstreamReadError("Route source unavailable")
        return [self.routes[key] for key in sorted(self.routes) if self.routes[key].is_linkable]

    def get_route(self, route_id: str) -> Optional[Route]:
        self.calls.append(("get_route", route_id))
        if self.fail_reads:
            raise UpstreamReadError("Route source unavailable")
        route = self.routes.get(route_id)
        if route is None or route.is_deleted:
            return None
        return route

    def get_all_nodes(self) -> List[GraphNode]:
        if self.fail_reads:
            raise UpstreamReadError("Node source unavailable")
        return list(self.nodes)

    def get_links(self, route_id: str) -> List[RouteGraphLink]:
        return list(self.links.get(route_id, []))

    def lock_route(self, route_id: str) -> None:
        self.calls.append(("lock", route_id))

    def replace_links(self, route_id: str, links: Sequence[RouteGraphLink]) -> int:
        self.calls.append(("replace", route_id))
        if route_id in self.fail_writes_for:
            raise LinkWriteError(f"Failed to write links for route {route_id}")
        self.links[route_id] = list(links)
        self.write_count += 1
        return len(links)


def line_route(route_id: str, coordinates, status: str = "active", **kwargs) -> Route:
    """Route with a LineString geometry built from [[lon, lat], ...]."""
    return Route(
        id=route_id,
        geometry={"type": "LineString", "coordinates": coordinates},
        status=status,
        **kwargs,
    )


@pytest.fixture
def make_store():
    """Factory for in-memory stores."""
    return InMemoryRouteGraphStore


@pytest.fixture
def make_route():
    """Factory for LineString routes."""
    return line_route


@pytest.fixture
def toy_route():
    """Route running north along the prime meridian, one degree per segment."""
    return line_route("R1", [[0, 0], [0, 1], [0, 2]])


@pytest.fixture
def store(toy_route):
    return InMemoryRouteGraphStore(routes=[toy_route])


@pytest.fixture
def client(store):
    """Create a test client for the FastAPI app backed by the in-memory store."""
    limiter.reset()
    app.dependency_overrides[get_route_graph_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def api_base_url():
    """Base URL for route graph API endpoints."""
    return "/api/v1/route-graph"
