from sqlalchemy import Column, Integer, String, ForeignKey, Index
from core.base import Base


class RouteGraphNodeModel(Base):
    """SQLAlchemy model for the nodes linked to a route.

    Rows for a route are always rewritten as a whole by the route graph
    builder, never patched.
    """

    __tablename__ = "route_graph_nodes"

    # Composite primary key: each node appears only once per route
    route_id = Column(String(100), ForeignKey("routes.id", ondelete="CASCADE"), primary_key=True)
    graph_node_id = Column(String(100), ForeignKey("graph_nodes.id", ondelete="CASCADE"), primary_key=True)

    order_index = Column(Integer, nullable=False)  # 1-based position along the route
    distance_from_start_m = Column(Integer, nullable=False)

    __table_args__ = (
        Index('idx_route_graph_nodes_order', 'route_id', 'order_index'),
    )
