from sqlalchemy import Column, String, Float
from core.base import Base


class GraphNodeModel(Base):
    """SQLAlchemy model for graph nodes (stops and intersections)."""

    __tablename__ = "graph_nodes"

    id = Column(String(100), primary_key=True)
    name = Column(String(255), nullable=True)
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
