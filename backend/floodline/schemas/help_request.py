from typing import Optional
from datetime import datetime

from floodline.models.help_request import HelpRequestStatus
from floodline.schemas.common import CamelModel, Location


class HelpRequestCreate(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    location: Optional[Location] = None

class HelpRequestUpdate(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    location: Optional[Location] = None
    status: Optional[HelpRequestStatus] = None

class HelpRequestStatusUpdate(CamelModel):
    status: HelpRequestStatus

class HelpRequestOut(CamelModel):
    id: str
    user_id: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    location: Optional[Location] = None
    status: HelpRequestStatus
    created_at: datetime
    updated_at: datetime
