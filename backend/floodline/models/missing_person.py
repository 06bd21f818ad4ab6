import uuid
import enum
from sqlalchemy import Column, String, Integer, DateTime, Enum, Text

from floodline.core.time_utils import get_utc_now
from floodline.db.base import Base

class MissingPersonStatus(str, enum.Enum):
    MISSING = 'missing'
    FOUND = 'found'

class MissingPerson(Base):
    __tablename__ = "missing_persons"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False, index=True)
    age = Column(Integer, nullable=True)
    last_seen = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    photo_url = Column(String(512), nullable=True)
    contact = Column(String(255), nullable=True)
    status = Column(
        Enum(MissingPersonStatus, values_callable=lambda e: [m.value for m in e]),
        default=MissingPersonStatus.MISSING,
        nullable=False,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), default=get_utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=get_utc_now, onupdate=get_utc_now, nullable=False)
