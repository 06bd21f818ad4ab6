import uuid
import enum
from sqlalchemy import Column, String, Integer, Float, DateTime, Enum, Text

from floodline.core.time_utils import get_utc_now
from floodline.db.base import Base

class ShelterStatus(str, enum.Enum):
    AVAILABLE = 'available'
    FULL = 'full'
    CLOSED = 'closed'

class Shelter(Base):
    """
    An evacuation shelter. (name, lat, lng) is the natural key used by the
    government feed reconciliation.
    """
    __tablename__ = "shelters"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False, index=True)
    capacity = Column(Integer, nullable=True)
    current_occupancy = Column(Integer, default=0, nullable=False)
    facilities = Column(Text, nullable=True)
    contact = Column(String(255), nullable=True)
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    status = Column(
        Enum(ShelterStatus, values_callable=lambda e: [m.value for m in e]),
        default=ShelterStatus.AVAILABLE,
        nullable=False,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), default=get_utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=get_utc_now, onupdate=get_utc_now, nullable=False)

    @property
    def location(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}

    def refresh_status(self, revert_full: bool = True) -> None:
        """
        Full whenever occupancy reaches a known positive capacity;
        a full shelter with room again goes back to available.
        Every write path calls this after touching capacity or occupancy.

        revert_full=False only ever promotes to full. Feed reconciliation
        uses it so a feed-reported "full" is not undone by our occupancy.
        """
        occupancy = self.current_occupancy or 0
        if self.capacity and self.capacity > 0 and occupancy >= self.capacity:
            if self.status != ShelterStatus.FULL:
                self.status = ShelterStatus.FULL
        elif revert_full and self.status == ShelterStatus.FULL:
            self.status = ShelterStatus.AVAILABLE
