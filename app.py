import hmac

from dotenv import load_dotenv
load_dotenv()  # Load .env file before importing settings

from fastapi import FastAPI, BackgroundTasks, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from core.config import settings
from core.containers import RouteGraphContainer, create_route_graph_container
from core.rate_limiter import limiter, rate_limit_exceeded_handler, RateLimits
from adapters.http.api.route_graph.schemas import RouteGraphRebuildResponse


def run_route_graph_rebuild(container: RouteGraphContainer) -> None:
    """Run the full route graph batch with its own session."""
    from core.database import create_session

    db = create_session()
    try:
        runner = container.batch_runner(store=container.route_graph_store(session=db))
        runner.run()
    finally:
        db.close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    # Settings validation is done automatically in core/config.py on import

    app = FastAPI(
        title="Route Graph API",
        description="Links transit routes to the graph nodes lying along them",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # One container per application: its lock registry serializes
    # same-route builds across requests
    app.state.route_graph_container = create_route_graph_container()

    # CORS middleware - called from the route editor in the browser
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # Register routers
    from adapters.http.api.route_graph.routers import route_graph_router
    app.include_router(route_graph_router, prefix="/api/v1")

    @app.get("/health")
    @limiter.limit(RateLimits.HEALTH)
    async def health_check(request: Request):
        """Health check endpoint."""
        return {
            "status": "healthy",
            "proximity_threshold_meters": settings.route_graph.ROUTE_GRAPH_PROXIMITY_THRESHOLD_METERS,
        }

    @app.post("/admin/rebuild-route-graph", response_model=RouteGraphRebuildResponse)
    @limiter.limit(RateLimits.ADMIN_REBUILD)
    async def rebuild_route_graph(
        request: Request,
        background_tasks: BackgroundTasks,
        x_admin_token: str = Header(None, alias="X-Admin-Token")
    ):
        """Rebuild the graph links of every active route.

        The batch runs in a background task to not block the request.
        Routes that fail are logged and skipped; the others are rebuilt.

        Requires X-Admin-Token header for authentication.
        """
        # Verify admin token (using constant-time comparison to prevent timing attacks)
        if not x_admin_token or not settings.ADMIN_TOKEN:
            raise HTTPException(status_code=401, detail="Unauthorized: Missing admin token")
        if not hmac.compare_digest(settings.ADMIN_TOKEN, x_admin_token):
            raise HTTPException(status_code=401, detail="Unauthorized: Invalid admin token")

        background_tasks.add_task(run_route_graph_rebuild, request.app.state.route_graph_container)

        return RouteGraphRebuildResponse(
            status="rebuild_initiated",
            message="Route graph rebuild started in background",
        )

    return app


app = create_app()
