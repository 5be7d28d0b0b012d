from .route_graph_node_model import RouteGraphNodeModel

__all__ = ["RouteGraphNodeModel"]
