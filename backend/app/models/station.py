from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text, func, select
from sqlalchemy.orm import column_property, relationship

from app.core.database import Base
from app.models.reading import Reading
from app.utils.clock import utcnow


class Station(Base):
    __tablename__ = "stations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    sensors = relationship(
        "Sensor",
        back_populates="station",
        lazy="selectin",
        order_by="Sensor.id",
        cascade="all, delete",
    )
    reading_count = column_property(
        select(func.count(Reading.id)).where(Reading.station_id == id).correlate_except(Reading).scalar_subquery()
    )

    def __repr__(self) -> str:
        return f"<Station(id={self.id}, name={self.name})>"
