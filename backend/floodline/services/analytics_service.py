from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from floodline.core.time_utils import get_utc_now, local_day
from floodline.models.flood import Flood, FloodSeverity, FloodStatus
from floodline.models.help_request import HelpRequest, HelpRequestStatus
from floodline.models.missing_person import MissingPerson, MissingPersonStatus
from floodline.models.shelter import Shelter, ShelterStatus
from floodline.models.user import User
from floodline.schemas.analytics import (
    AdminDashboardStats,
    FloodSeverityCounts,
    FloodStats,
    HelpRequestBreakdown,
    HelpRequestStats,
    MissingPersonCounts,
    MissingPersonStats,
    Overview,
    ShelterCapacity,
    ShelterStats,
    StatusCount,
    TimelinePoint,
    TotalActive,
    TotalAvailable,
    TotalPending,
    TotalStillMissing,
    TypeCount,
)


def _key(value: Any) -> Any:
    return getattr(value, "value", value)


class AnalyticsService:
    """
    Read-only grouped counts over the record store.
    """

    @staticmethod
    async def count(db: AsyncSession, model, *criteria) -> int:
        stmt = select(func.count()).select_from(model)
        if criteria:
            stmt = stmt.where(*criteria)
        return int((await db.execute(stmt)).scalar_one())

    @staticmethod
    async def group_counts(db: AsyncSession, column, *criteria) -> List[Tuple[Any, int]]:
        stmt = select(column, func.count()).group_by(column)
        if criteria:
            stmt = stmt.where(*criteria)
        rows = (await db.execute(stmt)).all()
        return [(_key(k), int(n)) for k, n in rows]

    @classmethod
    async def flood_severity(cls, db: AsyncSession, *criteria) -> FloodSeverityCounts:
        counts = dict(await cls.group_counts(db, Flood.severity, *criteria))
        return FloodSeverityCounts(**{s.value: counts.get(s.value, 0) for s in FloodSeverity})

    @classmethod
    async def flood_stats(cls, db: AsyncSession) -> FloodStats:
        return FloodStats(
            total=await cls.count(db, Flood),
            active=await cls.count(db, Flood, Flood.status == FloodStatus.ACTIVE),
            resolved=await cls.count(db, Flood, Flood.status == FloodStatus.RESOLVED),
            by_severity=await cls.flood_severity(db, Flood.status == FloodStatus.ACTIVE),
        )

    @staticmethod
    async def shelter_totals(db: AsyncSession) -> Tuple[int, int]:
        stmt = select(
            func.coalesce(func.sum(Shelter.capacity), 0),
            func.coalesce(func.sum(Shelter.current_occupancy), 0),
        )
        capacity, occupancy = (await db.execute(stmt)).one()
        return int(capacity), int(occupancy)

    @classmethod
    async def shelter_capacity(cls, db: AsyncSession) -> ShelterCapacity:
        capacity, occupancy = await cls.shelter_totals(db)
        rate = round(occupancy / capacity * 100, 1) if capacity > 0 else 0.0
        return ShelterCapacity(
            total_capacity=capacity,
            total_occupancy=occupancy,
            available_spaces=capacity - occupancy,
            occupancy_rate=rate,
        )

    @classmethod
    async def shelter_stats(cls, db: AsyncSession) -> ShelterStats:
        by_status = dict(await cls.group_counts(db, Shelter.status))
        capacity, occupancy = await cls.shelter_totals(db)
        return ShelterStats(
            total=sum(by_status.values()),
            available=by_status.get(ShelterStatus.AVAILABLE.value, 0),
            full=by_status.get(ShelterStatus.FULL.value, 0),
            closed=by_status.get(ShelterStatus.CLOSED.value, 0),
            total_capacity=capacity,
            total_occupancy=occupancy,
            available_spaces=capacity - occupancy,
        )

    @classmethod
    async def missing_person_counts(cls, db: AsyncSession) -> MissingPersonCounts:
        counts = dict(await cls.group_counts(db, MissingPerson.status))
        return MissingPersonCounts(**{s.value: counts.get(s.value, 0) for s in MissingPersonStatus})

    @classmethod
    async def missing_person_stats(cls, db: AsyncSession) -> MissingPersonStats:
        counts = await cls.missing_person_counts(db)
        return MissingPersonStats(total=counts.missing + counts.found, missing=counts.missing, found=counts.found)

    @classmethod
    async def help_request_stats(cls, db: AsyncSession) -> HelpRequestStats:
        counts = dict(await cls.group_counts(db, HelpRequest.status))
        return HelpRequestStats(
            total=sum(counts.values()),
            pending=counts.get(HelpRequestStatus.PENDING.value, 0),
            in_progress=counts.get(HelpRequestStatus.IN_PROGRESS.value, 0),
            resolved=counts.get(HelpRequestStatus.RESOLVED.value, 0),
        )

    @classmethod
    async def help_requests_by_type(cls, db: AsyncSession) -> List[TypeCount]:
        return [TypeCount(type=k, count=n) for k, n in await cls.group_counts(db, HelpRequest.type)]

    @classmethod
    async def help_requests_by_status(cls, db: AsyncSession) -> List[StatusCount]:
        return [StatusCount(status=k, count=n) for k, n in await cls.group_counts(db, HelpRequest.status)]

    @classmethod
    async def help_request_breakdown(cls, db: AsyncSession) -> HelpRequestBreakdown:
        stats = await cls.help_request_stats(db)
        return HelpRequestBreakdown(
            **stats.model_dump(),
            by_type=await cls.help_requests_by_type(db),
            by_status=await cls.help_requests_by_status(db),
        )

    @classmethod
    async def admin_dashboard(cls, db: AsyncSession) -> AdminDashboardStats:
        stats = await cls.help_request_stats(db)
        return AdminDashboardStats(
            total_users=await cls.count(db, User),
            total_requests=stats.total,
            pending_requests=stats.pending,
            resolved_requests=stats.resolved,
        )

    @classmethod
    async def overview(cls, db: AsyncSession) -> Overview:
        missing = await cls.missing_person_counts(db)
        return Overview(
            floods=TotalActive(
                total=await cls.count(db, Flood),
                active=await cls.count(db, Flood, Flood.status == FloodStatus.ACTIVE),
            ),
            shelters=TotalAvailable(
                total=await cls.count(db, Shelter),
                available=await cls.count(db, Shelter, Shelter.status == ShelterStatus.AVAILABLE),
            ),
            help_requests=TotalPending(
                total=await cls.count(db, HelpRequest),
                pending=await cls.count(db, HelpRequest, HelpRequest.status == HelpRequestStatus.PENDING),
            ),
            missing_persons=TotalStillMissing(
                total=missing.missing + missing.found,
                still_missing=missing.missing,
            ),
        )

    @staticmethod
    async def help_request_timeline(
        db: AsyncSession, days: int = 7, now: Optional[datetime] = None
    ) -> List[TimelinePoint]:
        """Help requests per local calendar day over the last `days` days, oldest first."""
        since = (now or get_utc_now()) - timedelta(days=days)
        stmt = select(HelpRequest.created_at).where(HelpRequest.created_at >= since)
        buckets: Dict[str, int] = {}
        for created_at in (await db.execute(stmt)).scalars():
            day = local_day(created_at)
            buckets[day] = buckets.get(day, 0) + 1
        return [TimelinePoint(date=day, count=buckets[day]) for day in sorted(buckets)]
