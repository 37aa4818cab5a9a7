from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.utils.clock import utcnow


class Reading(Base):
    __tablename__ = "readings"
    __table_args__ = (Index("ix_readings_sensor_timestamp", "sensor_id", "timestamp"),)

    id = Column(Integer, primary_key=True, index=True)
    sensor_id = Column(Integer, ForeignKey("sensors.id", ondelete="CASCADE"), nullable=False)
    station_id = Column(Integer, ForeignKey("stations.id", ondelete="CASCADE"), nullable=False, index=True)
    value = Column(Float, nullable=False)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    sensor = relationship("Sensor", back_populates="readings", lazy="joined")
    station = relationship("Station", lazy="joined")

    def __repr__(self) -> str:
        return f"<Reading(id={self.id}, sensor={self.sensor_id}, value={self.value})>"
