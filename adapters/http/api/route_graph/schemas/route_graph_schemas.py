from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional


class RouteGraphUpdateRequest(BaseModel):
    """Request to rebuild one route's graph links."""
    model_config = ConfigDict(populate_by_name=True)

    route_id: Optional[str] = Field(None, alias="routeId")

    @field_validator("route_id", mode="before")
    @classmethod
    def coerce_numeric_id(cls, value):
        # Route ids may arrive as JSON numbers
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class RouteGraphUpdateResponse(BaseModel):
    """Response after rebuilding one route's graph links."""
    success: bool
    count: int
    message: str


class RouteGraphErrorResponse(BaseModel):
    error: str


class RouteGraphLinkResponse(BaseModel):
    """A graph node linked to a route."""
    graph_node_id: str
    order_index: int
    distance_from_start_m: int


class RouteGraphLinksResponse(BaseModel):
    route_id: str
    count: int
    nodes: List[RouteGraphLinkResponse]


class RouteGraphRebuildResponse(BaseModel):
    status: str
    message: str
