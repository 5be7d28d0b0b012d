import logging
from typing import Optional

from celery import shared_task

from core.containers import create_route_graph_container
from core.database import create_session
from src.route_graph_bc.matching.domain.exceptions import RouteGraphInputError, UpstreamReadError

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def rebuild_route_graph(self, dry_run: bool = False):
    """Rebuild route_graph_nodes for every active route.

    Runs periodically (Celery beat). Per-route failures are reported in the
    result; only a failure to load routes or nodes triggers a retry.
    """
    container = create_route_graph_container()
    db = create_session()
    try:
        runner = container.batch_runner(store=container.route_graph_store(session=db))
        result = runner.run(dry_run=dry_run)
        return result.to_dict()
    except UpstreamReadError as e:
        logger.error(f"Route graph rebuild failed: {e}")
        raise self.retry(exc=e)
    finally:
        db.close()


@shared_task(bind=True, max_retries=3, default_retry_delay=10)
def update_route_graph_for_route(self, route_id: Optional[str]):
    """Rebuild the links of a single route, e.g. after its geometry changed."""
    container = create_route_graph_container()
    db = create_session()
    try:
        handler = container.single_route_handler(store=container.route_graph_store(session=db))
        result = handler.handle(route_id)
        return {"success": True, "route_id": result.route_id, "count": result.count}
    except RouteGraphInputError as e:
        # Retrying cannot fix bad input
        logger.warning(f"Route graph update for {route_id} rejected: {e}")
        return {"success": False, "route_id": route_id, "error": str(e)}
    except Exception as e:
        logger.error(f"Route graph update for {route_id} failed: {e}")
        raise self.retry(exc=e)
    finally:
        db.close()
