from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.utils.clock import utcnow


class Sensor(Base):
    __tablename__ = "sensors"

    id = Column(Integer, primary_key=True, index=True)
    station_id = Column(Integer, ForeignKey("stations.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    unit = Column(String, nullable=False)
    min_value = Column(Float, nullable=True)
    max_value = Column(Float, nullable=True)
    # soft ceiling, distinct from the hard max_value
    alert_threshold = Column(Float, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    station = relationship("Station", back_populates="sensors", lazy="joined")
    readings = relationship("Reading", back_populates="sensor", cascade="all, delete")
    alerts = relationship("Alert", back_populates="sensor", cascade="all, delete")

    def __repr__(self) -> str:
        return f"<Sensor(id={self.id}, name={self.name}, type={self.type})>"
