import uuid
import enum
from sqlalchemy import Column, String, Float, DateTime, Enum, Text

from floodline.core.time_utils import get_utc_now
from floodline.db.base import Base

class FloodSeverity(str, enum.Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'

class FloodStatus(str, enum.Enum):
    ACTIVE = 'active'
    RESOLVED = 'resolved'

class Flood(Base):
    """
    A flood event. (title, lat, lng) is the natural key used by the
    government feed reconciliation.
    """
    __tablename__ = "floods"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=True, index=True)
    description = Column(Text, nullable=True)
    severity = Column(
        Enum(FloodSeverity, values_callable=lambda e: [m.value for m in e]),
        default=FloodSeverity.LOW,
        nullable=False,
    )
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    status = Column(
        Enum(FloodStatus, values_callable=lambda e: [m.value for m in e]),
        default=FloodStatus.ACTIVE,
        nullable=False,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), default=get_utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=get_utc_now, onupdate=get_utc_now, nullable=False)

    @property
    def location(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}
