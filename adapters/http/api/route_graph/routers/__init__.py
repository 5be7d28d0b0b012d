from .route_graph_router import router as route_graph_router

__all__ = ["route_graph_router"]
