from dependency_injector import containers, providers

from src.route_graph_bc.matching.infrastructure.repositories.route_graph_store import (
    SQLAlchemyRouteGraphStore,
)
from src.route_graph_bc.matching.infrastructure.services.batch_runner import RouteGraphBatchRunner
from src.route_graph_bc.matching.infrastructure.services.route_lock_registry import RouteLockRegistry
from src.route_graph_bc.matching.infrastructure.services.single_route_handler import SingleRouteHandler


class RouteGraphContainer(containers.DeclarativeContainer):
    """Dependency injection container for the Route Graph bounded context.

    The store needs a session, which each entry point owns:
    container.single_route_handler(store=container.route_graph_store(session=db))
    """

    config = providers.Configuration()

    # Shared by every build started from this container
    lock_registry = providers.Singleton(RouteLockRegistry)

    # Repository (session passed at call time)
    route_graph_store = providers.Factory(SQLAlchemyRouteGraphStore)

    # Entry points (store passed at call time)
    single_route_handler = providers.Factory(
        SingleRouteHandler,
        lock_registry=lock_registry,
        threshold_meters=config.proximity_threshold_meters,
    )

    batch_runner = providers.Factory(
        RouteGraphBatchRunner,
        lock_registry=lock_registry,
        threshold_meters=config.proximity_threshold_meters,
    )


def create_route_graph_container() -> RouteGraphContainer:
    """Build a container configured from settings."""
    from core.config import settings

    container = RouteGraphContainer()
    container.config.proximity_threshold_meters.from_value(
        settings.route_graph.ROUTE_GRAPH_PROXIMITY_THRESHOLD_METERS
    )
    return container
