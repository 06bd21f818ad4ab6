import enum
from typing import Optional
from pydantic import BaseModel, computed_field


class SyncStatus(str, enum.Enum):
    COMPLETED = 'completed'
    NOT_CONFIGURED = 'not_configured'
    ALREADY_RUNNING = 'already_running'
    FEED_UNAVAILABLE = 'feed_unavailable'
    FEED_FORMAT_INVALID = 'feed_format_invalid'
    FAILED = 'failed'


class SyncSummary(BaseModel):
    """Outcome of one reconciliation run for one collection."""
    collection: str
    status: SyncStatus
    received: int = 0
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0
    failed: int = 0
    message: str = ""

    @computed_field
    @property
    def success(self) -> bool:
        return self.status in (SyncStatus.COMPLETED, SyncStatus.NOT_CONFIGURED)


class SyncResponse(BaseModel):
    success: bool
    message: str
    floods: Optional[SyncSummary] = None
    shelters: Optional[SyncSummary] = None
