from typing import Optional
from datetime import datetime
from pydantic import Field

from floodline.models.missing_person import MissingPersonStatus
from floodline.schemas.common import CamelModel


class MissingPersonCreate(CamelModel):
    name: str = Field(..., min_length=1)
    age: Optional[int] = Field(default=None, ge=0)
    last_seen: Optional[str] = None
    description: Optional[str] = None
    photo_url: Optional[str] = None
    contact: Optional[str] = None

class MissingPersonUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    age: Optional[int] = Field(default=None, ge=0)
    last_seen: Optional[str] = None
    description: Optional[str] = None
    photo_url: Optional[str] = None
    contact: Optional[str] = None
    status: Optional[MissingPersonStatus] = None

class MissingPersonOut(CamelModel):
    id: str
    name: str
    age: Optional[int] = None
    last_seen: Optional[str] = None
    description: Optional[str] = None
    photo_url: Optional[str] = None
    contact: Optional[str] = None
    status: MissingPersonStatus
    created_at: datetime
    updated_at: datetime
