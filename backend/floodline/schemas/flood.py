from typing import Optional
from datetime import datetime

from floodline.models.flood import FloodSeverity, FloodStatus
from floodline.schemas.common import CamelModel, Location


class FloodCreate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    severity: FloodSeverity = FloodSeverity.LOW
    location: Location

class FloodUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    severity: Optional[FloodSeverity] = None
    location: Optional[Location] = None
    status: Optional[FloodStatus] = None

class FloodOut(CamelModel):
    id: str
    title: Optional[str] = None
    description: Optional[str] = None
    severity: FloodSeverity
    location: Location
    status: FloodStatus
    created_at: datetime
    updated_at: datetime
