from typing import Any, List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from floodline.api import deps
from floodline.db.session import get_db
from floodline.schemas.analytics import (
    FloodSeverityCounts,
    MissingPersonCounts,
    Overview,
    ShelterCapacity,
    StatusCount,
    TimelinePoint,
    TypeCount,
)
from floodline.services.analytics_service import AnalyticsService

router = APIRouter()

@router.get("/flood-severity", response_model=FloodSeverityCounts)
async def flood_severity(db: AsyncSession = Depends(get_db)) -> Any:
    return await AnalyticsService.flood_severity(db)

@router.get("/help-requests-by-type", response_model=List[TypeCount])
async def help_requests_by_type(db: AsyncSession = Depends(get_db)) -> Any:
    return await AnalyticsService.help_requests_by_type(db)

@router.get("/shelter-capacity", response_model=ShelterCapacity)
async def shelter_capacity(db: AsyncSession = Depends(get_db)) -> Any:
    return await AnalyticsService.shelter_capacity(db)

@router.get("/missing-persons-status", response_model=MissingPersonCounts)
async def missing_persons_status(db: AsyncSession = Depends(get_db)) -> Any:
    return await AnalyticsService.missing_person_counts(db)

@router.get(
    "/help-requests-by-status",
    response_model=List[StatusCount],
    dependencies=[Depends(deps.get_current_admin)],
)
async def help_requests_by_status(db: AsyncSession = Depends(get_db)) -> Any:
    return await AnalyticsService.help_requests_by_status(db)

@router.get("/overview", response_model=Overview, dependencies=[Depends(deps.get_current_admin)])
async def overview(db: AsyncSession = Depends(get_db)) -> Any:
    return await AnalyticsService.overview(db)

@router.get("/timeline", response_model=List[TimelinePoint], dependencies=[Depends(deps.get_current_admin)])
async def timeline(db: AsyncSession = Depends(get_db)) -> Any:
    """
    Help requests per local calendar day over the last week.
    """
    return await AnalyticsService.help_request_timeline(db, days=7)
