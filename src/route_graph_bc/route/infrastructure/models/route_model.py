from sqlalchemy import Column, String, DateTime
from geoalchemy2 import Geometry
from core.base import Base


class RouteModel(Base):
    """SQLAlchemy model for Route.

    Owned by the route editor; route graph builds only read it.
    """

    __tablename__ = "routes"

    id = Column(String(100), primary_key=True)
    name = Column(String(255), nullable=True)
    status = Column(String(20), nullable=True, index=True)  # draft, active, deprecated

    # Soft delete marker
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # Route geometry, expected to be a LineString
    geometry = Column(Geometry(geometry_type='GEOMETRY', srid=4326), nullable=True)
