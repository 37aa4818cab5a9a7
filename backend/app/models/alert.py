from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.models.enums import AlertStatus
from app.utils.clock import utcnow

ACTIVE_ONLY = text(f"status = '{AlertStatus.ACTIVE.value}'")


class Alert(Base):
    __tablename__ = "alerts"
    __table_args__ = (
        # at most one ACTIVE alert per sensor
        Index(
            "uq_alerts_active_sensor",
            "sensor_id",
            unique=True,
            sqlite_where=ACTIVE_ONLY,
            postgresql_where=ACTIVE_ONLY,
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    sensor_id = Column(Integer, ForeignKey("sensors.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    message = Column(String, nullable=False)
    value = Column(Float, nullable=False)
    threshold = Column(Float, nullable=False)
    status = Column(String, default=AlertStatus.ACTIVE.value, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)

    sensor = relationship("Sensor", back_populates="alerts", lazy="joined")
    user = relationship("User", lazy="joined")

    def __repr__(self) -> str:
        return f"<Alert(id={self.id}, sensor={self.sensor_id}, status={self.status})>"
