from typing import List, Optional

from floodline.schemas.common import CamelModel


class FloodSeverityCounts(CamelModel):
    low: int = 0
    medium: int = 0
    high: int = 0

class TypeCount(CamelModel):
    type: Optional[str] = None
    count: int

class StatusCount(CamelModel):
    status: Optional[str] = None
    count: int

class ShelterCapacity(CamelModel):
    total_capacity: int
    total_occupancy: int
    available_spaces: int
    occupancy_rate: float

class MissingPersonCounts(CamelModel):
    missing: int = 0
    found: int = 0

class TotalActive(CamelModel):
    total: int
    active: int

class TotalAvailable(CamelModel):
    total: int
    available: int

class TotalPending(CamelModel):
    total: int
    pending: int

class TotalStillMissing(CamelModel):
    total: int
    still_missing: int

class Overview(CamelModel):
    floods: TotalActive
    shelters: TotalAvailable
    help_requests: TotalPending
    missing_persons: TotalStillMissing

class TimelinePoint(CamelModel):
    date: str
    count: int

class FloodStats(CamelModel):
    total: int
    active: int
    resolved: int
    by_severity: FloodSeverityCounts

class ShelterStats(CamelModel):
    total: int
    available: int
    full: int
    closed: int
    total_capacity: int
    total_occupancy: int
    available_spaces: int

class MissingPersonStats(CamelModel):
    total: int
    missing: int
    found: int

class HelpRequestStats(CamelModel):
    total: int
    pending: int
    in_progress: int
    resolved: int

class HelpRequestBreakdown(HelpRequestStats):
    by_type: List[TypeCount]
    by_status: List[StatusCount]

class AdminDashboardStats(CamelModel):
    total_users: int
    total_requests: int
    pending_requests: int
    resolved_requests: int
