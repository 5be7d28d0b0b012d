import json
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from sqlalchemy import delete, func, or_, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.route_graph_bc.graph_node.domain.entities.graph_node import GraphNode
from src.route_graph_bc.graph_node.infrastructure.models import GraphNodeModel
from src.route_graph_bc.matching.domain.exceptions import LinkWriteError, UpstreamReadError
from src.route_graph_bc.route.domain.entities.route import Route, RouteStatus
from src.route_graph_bc.route.infrastructure.models import RouteModel
from src.route_graph_bc.route_graph_node.domain.entities.route_graph_link import RouteGraphLink
from src.route_graph_bc.route_graph_node.infrastructure.models import RouteGraphNodeModel

logger = logging.getLogger(__name__)


class RouteGraphStoreInterface(ABC):
    """Read access to routes and graph nodes, write access to route links."""

    @abstractmethod
    def get_active_routes(self) -> List[Route]:
        """Get routes that are neither soft-deleted nor deprecated."""
        pass

    @abstractmethod
    def get_route(self, route_id: str) -> Optional[Route]:
        """Get a route by ID, None if missing or soft-deleted."""
        pass

    @abstractmethod
    def get_all_nodes(self) -> List[GraphNode]:
        """Get every graph node, ordered by ID."""
        pass

    @abstractmethod
    def get_links(self, route_id: str) -> List[RouteGraphLink]:
        """Get a route's links ordered by order_index."""
        pass

    @abstractmethod
    def lock_route(self, route_id: str) -> None:
        """Hold off other processes' builds of a route until the transaction ends."""
        pass

    @abstractmethod
    def replace_links(self, route_id: str, links: Sequence[RouteGraphLink]) -> int:
        """Atomically replace all links of a route. Returns rows written."""
        pass


class SQLAlchemyRouteGraphStore(RouteGraphStoreInterface):
    """PostgreSQL/PostGIS implementation over a caller-owned session."""

    def __init__(self, session: Session):
        self.session = session

    def _route_query(self):
        return select(
            RouteModel.id,
            RouteModel.status,
            RouteModel.deleted_at,
            func.ST_AsGeoJSON(RouteModel.geometry).label("geojson"),
        )

    @staticmethod
    def _to_route(row) -> Route:
        return Route(
            id=row.id,
            geometry=json.loads(row.geojson) if row.geojson else None,
            status=row.status,
            deleted_at=row.deleted_at,
        )

    def get_active_routes(self) -> List[Route]:
        query = (
            self._route_query()
            .where(RouteModel.deleted_at.is_(None))
            .where(or_(
                RouteModel.status.is_(None),
                RouteModel.status != RouteStatus.DEPRECATED.value,
            ))
            .order_by(RouteModel.id)
        )
        try:
            rows = self.session.execute(query).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load routes: {e}")
            raise UpstreamReadError(f"Failed to load routes: {e}") from e
        return [self._to_route(row) for row in rows]

    def get_route(self, route_id: str) -> Optional[Route]:
        query = (
            self._route_query()
            .where(RouteModel.id == route_id)
            .where(RouteModel.deleted_at.is_(None))
        )
        try:
            row = self.session.execute(query).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load route {route_id}: {e}")
            raise UpstreamReadError(f"Failed to load route {route_id}: {e}") from e
        return self._to_route(row) if row else None

    def get_all_nodes(self) -> List[GraphNode]:
        query = select(GraphNodeModel.id, GraphNodeModel.lat, GraphNodeModel.lng).order_by(GraphNodeModel.id)
        try:
            rows = self.session.execute(query).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load graph nodes: {e}")
            raise UpstreamReadError(f"Failed to load graph nodes: {e}") from e
        return [GraphNode(id=row.id, lat=row.lat, lng=row.lng) for row in rows]

    def get_links(self, route_id: str) -> List[RouteGraphLink]:
        query = (
            select(RouteGraphNodeModel)
            .where(RouteGraphNodeModel.route_id == route_id)
            .order_by(RouteGraphNodeModel.order_index)
        )
        try:
            rows = self.session.execute(query).scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load links for route {route_id}: {e}")
            raise UpstreamReadError(f"Failed to load links for route {route_id}: {e}") from e
        return [
            RouteGraphLink(
                route_id=row.route_id,
                graph_node_id=row.graph_node_id,
                order_index=row.order_index,
                distance_from_start_m=row.distance_from_start_m,
            )
            for row in rows
        ]

    def lock_route(self, route_id: str) -> None:
        """Take a transaction-scoped advisory lock on the route id.

        Released on commit or rollback, so the reads made after it and the
        link rewrite in replace_links are covered by the same lock.
        """
        try:
            self.session.execute(
                text("SELECT pg_advisory_xact_lock(hashtext(:route_id))"),
                {"route_id": route_id},
            )
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to lock route {route_id}: {e}")
            raise UpstreamReadError(f"Failed to lock route {route_id}: {e}") from e

    def replace_links(self, route_id: str, links: Sequence[RouteGraphLink]) -> int:
        """Delete and re-insert a route's links, then commit.

        Runs in the caller's transaction, after any reads made under
        lock_route. The advisory lock is taken again here (it stacks within a
        session) so a direct call is serialized too. On failure the
        transaction is rolled back and the previous links stay.
        """
        try:
            self.session.execute(
                text("SELECT pg_advisory_xact_lock(hashtext(:route_id))"),
                {"route_id": route_id},
            )
            self.session.execute(
                delete(RouteGraphNodeModel).where(RouteGraphNodeModel.route_id == route_id)
            )
            if links:
                self.session.execute(
                    RouteGraphNodeModel.__table__.insert(),
                    [link.to_dict() for link in links],
                )
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to write links for route {route_id}: {e}")
            raise LinkWriteError(f"Failed to write links for route {route_id}: {e}") from e

        return len(links)
