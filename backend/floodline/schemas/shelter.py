from typing import Optional
from datetime import datetime
from pydantic import Field

from floodline.models.shelter import ShelterStatus
from floodline.schemas.common import CamelModel, Location


class ShelterCreate(CamelModel):
    name: str = Field(..., min_length=1)
    capacity: Optional[int] = Field(default=None, ge=0)
    current_occupancy: int = Field(default=0, ge=0)
    facilities: Optional[str] = None
    contact: Optional[str] = None
    location: Location

class ShelterUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    capacity: Optional[int] = Field(default=None, ge=0)
    current_occupancy: Optional[int] = Field(default=None, ge=0)
    facilities: Optional[str] = None
    contact: Optional[str] = None
    location: Optional[Location] = None
    status: Optional[ShelterStatus] = None

class OccupancyUpdate(CamelModel):
    current_occupancy: int = Field(..., ge=0)

class ShelterOut(CamelModel):
    id: str
    name: str
    capacity: Optional[int] = None
    current_occupancy: int
    facilities: Optional[str] = None
    contact: Optional[str] = None
    location: Location
    status: ShelterStatus
    created_at: datetime
    updated_at: datetime
