import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from core.containers import RouteGraphContainer
from core.database import get_db
from core.rate_limiter import limiter, RateLimits
from src.route_graph_bc.matching.domain.exceptions import RouteGraphError
from src.route_graph_bc.matching.infrastructure.repositories.route_graph_store import (
    RouteGraphStoreInterface,
    SQLAlchemyRouteGraphStore,
)
from adapters.http.api.route_graph.schemas import (
    RouteGraphUpdateRequest,
    RouteGraphUpdateResponse,
    RouteGraphErrorResponse,
    RouteGraphLinkResponse,
    RouteGraphLinksResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/route-graph", tags=["Route Graph"])


def get_route_graph_store(db: Session = Depends(get_db)) -> RouteGraphStoreInterface:
    """Dependency that provides a route graph store bound to the request session."""
    return SQLAlchemyRouteGraphStore(db)


def get_route_graph_container(request: Request) -> RouteGraphContainer:
    return request.app.state.route_graph_container


@router.post(
    "/update-route-graph-nodes",
    response_model=RouteGraphUpdateResponse,
    responses={
        400: {"model": RouteGraphErrorResponse},
        404: {"model": RouteGraphErrorResponse},
        409: {"model": RouteGraphErrorResponse},
        500: {"model": RouteGraphErrorResponse},
    },
)
@limiter.limit(RateLimits.ROUTE_GRAPH_UPDATE)
def update_route_graph_nodes(
    request: Request,
    payload: RouteGraphUpdateRequest,
    store: RouteGraphStoreInterface = Depends(get_route_graph_store),
    container: RouteGraphContainer = Depends(get_route_graph_container),
):
    """Rebuild the graph nodes linked to a route.

    Call after a route's geometry changes. Replaces all links of the route
    with the nodes lying within the proximity threshold, ordered along it.
    """
    handler = container.single_route_handler(store=store)

    try:
        result = handler.handle(payload.route_id)
    except RouteGraphError as e:
        if e.status_code >= 500:
            logger.error(f"Route graph update failed for {payload.route_id}: {e}")
        return JSONResponse(status_code=e.status_code, content={"error": str(e)})
    except Exception as e:
        logger.exception(f"Unexpected error updating route graph for {payload.route_id}")
        return JSONResponse(status_code=500, content={"error": str(e) or "Internal server error"})

    return RouteGraphUpdateResponse(
        success=True,
        count=result.count,
        message=result.message,
    )


@router.get("/routes/{route_id}/nodes", response_model=RouteGraphLinksResponse)
@limiter.limit(RateLimits.ROUTE_GRAPH_LINKS)
def get_route_graph_nodes(
    request: Request,
    route_id: str,
    store: RouteGraphStoreInterface = Depends(get_route_graph_store),
):
    """Get the graph nodes linked to a route, in order along the route."""
    try:
        route = store.get_route(route_id)
        if route is None:
            raise HTTPException(status_code=404, detail=f"Route {route_id} not found")
        links = store.get_links(route_id)
    except RouteGraphError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    return RouteGraphLinksResponse(
        route_id=route_id,
        count=len(links),
        nodes=[
            RouteGraphLinkResponse(
                graph_node_id=link.graph_node_id,
                order_index=link.order_index,
                distance_from_start_m=link.distance_from_start_m,
            )
            for link in links
        ],
    )
