"""
Exceptions raised while building route graph links.

Each exception carries the HTTP status the on-demand endpoint answers with.
"""


class RouteGraphError(Exception):
    """Base exception for route graph building"""
    status_code = 500


class RouteGraphInputError(RouteGraphError):
    """Raised when the request or the route itself cannot be processed"""
    status_code = 400


class MissingRouteIdError(RouteGraphInputError):
    """Raised when no route id is supplied"""

    def __init__(self, message: str = "Missing routeId"):
        super().__init__(message)


class RouteNotFoundError(RouteGraphInputError):
    """Raised when the route does not exist or is soft-deleted"""
    status_code = 404

    def __init__(self, route_id: str):
        self.route_id = route_id
        super().__init__("Route not found")


class InvalidRouteGeometryError(RouteGraphInputError):
    """Raised when a route's geometry is missing or not a usable LineString"""

    def __init__(self, route_id: str, reason: str = "Invalid geometry"):
        self.route_id = route_id
        self.reason = reason
        super().__init__(reason)


class RouteNotLinkableError(RouteGraphInputError):
    """Raised when an existing route is excluded from linking (deprecated)"""
    status_code = 409

    def __init__(self, route_id: str, status: str):
        self.route_id = route_id
        self.status = status
        super().__init__(f"Route is {status}")


class UpstreamReadError(RouteGraphError):
    """Raised when routes or graph nodes cannot be read"""
    pass


class LinkWriteError(RouteGraphError):
    """Raised when replacing a route's links fails"""
    pass
