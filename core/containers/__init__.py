from .route_graph_container import RouteGraphContainer, create_route_graph_container

__all__ = ["RouteGraphContainer", "create_route_graph_container"]
