#!/usr/bin/env python3
"""Populate route_graph_nodes from route geometries and graph nodes.

For every active route (not soft-deleted, not deprecated) this script:
1. Projects every graph node onto the route's LineString
2. Keeps the nodes within the proximity threshold (default 50 m)
3. Orders them by distance along the route
4. Replaces the route's rows in route_graph_nodes

Usage:
    python scripts/populate_route_graph_nodes.py
    python scripts/populate_route_graph_nodes.py --dry-run
    python scripts/populate_route_graph_nodes.py --route-id 42
    python scripts/populate_route_graph_nodes.py --threshold 75
"""

import sys
import argparse
import logging
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.containers import create_route_graph_container
from core.database import create_session
from src.route_graph_bc.matching.domain.exceptions import RouteGraphError

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description='Populate route_graph_nodes from route geometries')
    parser.add_argument('--route-id', help='Only rebuild this route')
    parser.add_argument('--dry-run', action='store_true', help='Compute links without writing them')
    parser.add_argument('--threshold', type=float, help='Max distance from route (meters)')
    args = parser.parse_args()

    container = create_route_graph_container()
    if args.threshold is not None:
        container.config.proximity_threshold_meters.from_value(args.threshold)

    db = create_session()
    try:
        store = container.route_graph_store(session=db)

        if args.route_id:
            if args.dry_run:
                logger.error("--dry-run is only supported for full rebuilds")
                return 2
            try:
                result = container.single_route_handler(store=store).handle(args.route_id)
            except RouteGraphError as e:
                logger.error(f"Route {args.route_id}: {e}")
                return 1
            logger.info(result.message)
            return 0

        result = container.batch_runner(store=store).run(dry_run=args.dry_run)
        for route_id, error in result.errors.items():
            logger.warning(f"  {route_id}: {error}")
        return 0 if result.success else 1
    finally:
        db.close()


if __name__ == '__main__':
    sys.exit(main())
