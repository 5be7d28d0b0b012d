# Models registry for Alembic autogenerate
# Import all SQLAlchemy models here so Alembic can detect them

from src.route_graph_bc.route.infrastructure.models import RouteModel
from src.route_graph_bc.graph_node.infrastructure.models import GraphNodeModel
from src.route_graph_bc.route_graph_node.infrastructure.models import RouteGraphNodeModel

__all__ = [
    "RouteModel",
    "GraphNodeModel",
    "RouteGraphNodeModel",
]
