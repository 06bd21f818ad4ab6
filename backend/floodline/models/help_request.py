import uuid
import enum
from sqlalchemy import Column, String, Float, DateTime, Enum, Text, ForeignKey

from floodline.core.time_utils import get_utc_now
from floodline.db.base import Base

class HelpRequestStatus(str, enum.Enum):
    PENDING = 'pending'
    IN_PROGRESS = 'in-progress'
    RESOLVED = 'resolved'

class HelpRequest(Base):
    __tablename__ = "help_requests"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    name = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    type = Column(String(100), nullable=True, index=True)
    description = Column(Text, nullable=True)
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)
    status = Column(
        Enum(HelpRequestStatus, values_callable=lambda e: [m.value for m in e]),
        default=HelpRequestStatus.PENDING,
        nullable=False,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), default=get_utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=get_utc_now, onupdate=get_utc_now, nullable=False)

    @property
    def location(self) -> dict | None:
        if self.lat is None and self.lng is None:
            return None
        return {"lat": self.lat, "lng": self.lng}
