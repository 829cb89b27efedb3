import uuid

from sqlalchemy import Column, String, Integer, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from core.base import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class StopModel(Base):
    """Bus stop. Geometry lives in the routing service; only the point is kept here."""

    __tablename__ = "stops"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    lat = Column(Float, nullable=False)
    lon = Column(Float, nullable=False)


class RouteModel(Base):
    """Route operated by a company. Stops are versioned through RouteVersionModel."""

    __tablename__ = "routes"

    id = Column(String(36), primary_key=True, default=_uuid)
    company_id = Column(String(36), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    # No FK to avoid a cycle with route_versions.route_id
    current_version_id = Column(String(36), nullable=True)

    versions = relationship(
        "RouteVersionModel",
        back_populates="route",
        foreign_keys="RouteVersionModel.route_id",
        cascade="all, delete-orphan",
    )

    @property
    def current_version(self):
        for version in self.versions:
            if version.id == self.current_version_id:
                return version
        return None


class RouteVersionModel(Base):
    """Immutable snapshot of a route's stop sequence."""

    __tablename__ = "route_versions"
    __table_args__ = (
        UniqueConstraint("route_id", "version_number", name="uq_route_versions_route_number"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    route_id = Column(String(36), ForeignKey("routes.id", ondelete="CASCADE"), nullable=False, index=True)
    version_number = Column(Integer, nullable=False, default=1)

    route = relationship("RouteModel", back_populates="versions", foreign_keys=[route_id])
    stops = relationship(
        "RouteStopModel",
        back_populates="route_version",
        cascade="all, delete-orphan",
        order_by="RouteStopModel.sequence_number",
    )


class RouteStopModel(Base):
    """Stop within a route version, with cumulative distance and travel time."""

    __tablename__ = "route_stops"

    id = Column(String(36), primary_key=True, default=_uuid)
    route_version_id = Column(
        String(36),
        ForeignKey("route_versions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    stop_id = Column(String(36), ForeignKey("stops.id"), nullable=False)
    sequence_number = Column(Integer, nullable=False)
    distance_from_start = Column(Float, nullable=False, default=0.0)  # km
    duration_from_start = Column(Integer, nullable=False, default=0)  # minutes

    route_version = relationship("RouteVersionModel", back_populates="stops")
    stop = relationship("StopModel")
