from typing import Any, List
from fastapi import APIRouter, Depends, status
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from floodline.api import deps
from floodline.core.exceptions import ValidationError
from floodline.db.session import get_db
from floodline.models.flood import Flood, FloodSeverity, FloodStatus
from floodline.schemas.analytics import FloodStats
from floodline.schemas.common import MessageResponse
from floodline.schemas.flood import FloodCreate, FloodOut, FloodUpdate
from floodline.services.analytics_service import AnalyticsService

router = APIRouter()

@router.get("", response_model=List[FloodOut])
async def read_floods(db: AsyncSession = Depends(get_db)) -> Any:
    """
    All flood markers, newest first.
    """
    result = await db.execute(select(Flood).order_by(desc(Flood.created_at)))
    return result.scalars().all()

@router.get("/active", response_model=List[FloodOut])
async def read_active_floods(db: AsyncSession = Depends(get_db)) -> Any:
    stmt = select(Flood).where(Flood.status == FloodStatus.ACTIVE).order_by(desc(Flood.created_at))
    result = await db.execute(stmt)
    return result.scalars().all()

@router.get("/severity/{level}", response_model=List[FloodOut])
async def read_floods_by_severity(level: str, db: AsyncSession = Depends(get_db)) -> Any:
    """
    Active floods of one severity level.
    """
    try:
        severity = FloodSeverity(level)
    except ValueError:
        raise ValidationError("Invalid severity level")
    stmt = select(Flood).where(Flood.severity == severity, Flood.status == FloodStatus.ACTIVE)
    result = await db.execute(stmt)
    return result.scalars().all()

@router.get("/admin/stats", response_model=FloodStats, dependencies=[Depends(deps.get_current_admin)])
async def flood_stats(db: AsyncSession = Depends(get_db)) -> Any:
    return await AnalyticsService.flood_stats(db)

@router.get("/{flood_id}", response_model=FloodOut)
async def read_flood(flood_id: str, db: AsyncSession = Depends(get_db)) -> Any:
    return await deps.get_or_404(db, Flood, flood_id)

@router.post(
    "",
    response_model=FloodOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(deps.get_current_admin)],
)
async def create_flood(request: FloodCreate, db: AsyncSession = Depends(get_db)) -> Any:
    flood = Flood(
        title=request.title,
        description=request.description,
        severity=request.severity,
        lat=request.location.lat,
        lng=request.location.lng,
    )
    db.add(flood)
    await db.commit()
    await db.refresh(flood)
    return flood

@router.patch("/{flood_id}", response_model=FloodOut, dependencies=[Depends(deps.get_current_admin)])
async def update_flood(flood_id: str, request: FloodUpdate, db: AsyncSession = Depends(get_db)) -> Any:
    flood = await deps.get_or_404(db, Flood, flood_id)
    changes = request.model_dump(exclude_unset=True, exclude={"location"})
    for field, value in changes.items():
        if value is not None:
            setattr(flood, field, value)
    if request.location is not None:
        flood.lat = request.location.lat
        flood.lng = request.location.lng
    await db.commit()
    await db.refresh(flood)
    return flood

@router.put("/{flood_id}/resolve", response_model=FloodOut, dependencies=[Depends(deps.get_current_admin)])
async def resolve_flood(flood_id: str, db: AsyncSession = Depends(get_db)) -> Any:
    flood = await deps.get_or_404(db, Flood, flood_id)
    flood.status = FloodStatus.RESOLVED
    await db.commit()
    await db.refresh(flood)
    return flood

@router.delete("/{flood_id}", response_model=MessageResponse, dependencies=[Depends(deps.get_current_admin)])
async def delete_flood(flood_id: str, db: AsyncSession = Depends(get_db)) -> Any:
    flood = await deps.get_or_404(db, Flood, flood_id)
    await db.delete(flood)
    await db.commit()
    return {"message": "Deleted"}
