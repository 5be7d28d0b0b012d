from .route_graph_schemas import (
    RouteGraphUpdateRequest,
    RouteGraphUpdateResponse,
    RouteGraphErrorResponse,
    RouteGraphLinkResponse,
    RouteGraphLinksResponse,
    RouteGraphRebuildResponse,
)

__all__ = [
    "RouteGraphUpdateRequest",
    "RouteGraphUpdateResponse",
    "RouteGraphErrorResponse",
    "RouteGraphLinkResponse",
    "RouteGraphLinksResponse",
    "RouteGraphRebuildResponse",
]
