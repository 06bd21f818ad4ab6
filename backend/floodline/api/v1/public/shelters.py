from typing import Any, List
from fastapi import APIRouter, Depends, status
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from floodline.api import deps
from floodline.db.session import get_db
from floodline.models.shelter import Shelter, ShelterStatus
from floodline.schemas.analytics import ShelterStats
from floodline.schemas.common import MessageResponse
from floodline.schemas.shelter import OccupancyUpdate, ShelterCreate, ShelterOut, ShelterUpdate
from floodline.services.analytics_service import AnalyticsService

router = APIRouter()

@router.get("", response_model=List[ShelterOut])
async def read_shelters(db: AsyncSession = Depends(get_db)) -> Any:
    result = await db.execute(select(Shelter).order_by(desc(Shelter.created_at)))
    return result.scalars().all()

@router.get("/available", response_model=List[ShelterOut])
async def read_available_shelters(db: AsyncSession = Depends(get_db)) -> Any:
    stmt = select(Shelter).where(Shelter.status == ShelterStatus.AVAILABLE).order_by(desc(Shelter.created_at))
    result = await db.execute(stmt)
    return result.scalars().all()

@router.get("/with-capacity", response_model=List[ShelterOut])
async def read_shelters_with_capacity(db: AsyncSession = Depends(get_db)) -> Any:
    """
    Shelters whose occupancy is still below their capacity.
    """
    stmt = (
        select(Shelter)
        .where(Shelter.capacity.is_not(None), Shelter.current_occupancy < Shelter.capacity)
        .order_by(desc(Shelter.created_at))
    )
    result = await db.execute(stmt)
    return result.scalars().all()

@router.get("/admin/stats", response_model=ShelterStats, dependencies=[Depends(deps.get_current_admin)])
async def shelter_stats(db: AsyncSession = Depends(get_db)) -> Any:
    return await AnalyticsService.shelter_stats(db)

@router.get("/{shelter_id}", response_model=ShelterOut)
async def read_shelter(shelter_id: str, db: AsyncSession = Depends(get_db)) -> Any:
    return await deps.get_or_404(db, Shelter, shelter_id)

@router.post(
    "",
    response_model=ShelterOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(deps.get_current_admin)],
)
async def create_shelter(request: ShelterCreate, db: AsyncSession = Depends(get_db)) -> Any:
    shelter = Shelter(
        name=request.name,
        capacity=request.capacity,
        current_occupancy=request.current_occupancy,
        facilities=request.facilities,
        contact=request.contact,
        lat=request.location.lat,
        lng=request.location.lng,
        status=ShelterStatus.AVAILABLE,
    )
    shelter.refresh_status()
    db.add(shelter)
    await db.commit()
    await db.refresh(shelter)
    return shelter

@router.patch("/{shelter_id}", response_model=ShelterOut, dependencies=[Depends(deps.get_current_admin)])
async def update_shelter(shelter_id: str, request: ShelterUpdate, db: AsyncSession = Depends(get_db)) -> Any:
    shelter = await deps.get_or_404(db, Shelter, shelter_id)
    changes = request.model_dump(exclude_unset=True, exclude={"location"})
    for field, value in changes.items():
        # capacity may be explicitly cleared; everything else ignores nulls
        if value is not None or field == "capacity":
            setattr(shelter, field, value)
    if request.location is not None:
        shelter.lat = request.location.lat
        shelter.lng = request.location.lng
    if "capacity" in changes or "current_occupancy" in changes:
        shelter.refresh_status()
    else:
        # A status edit alone cannot reopen a shelter that is at capacity
        shelter.refresh_status(revert_full=False)
    await db.commit()
    await db.refresh(shelter)
    return shelter

@router.patch(
    "/{shelter_id}/occupancy",
    response_model=ShelterOut,
    dependencies=[Depends(deps.get_current_admin)],
)
async def update_shelter_occupancy(
    shelter_id: str, request: OccupancyUpdate, db: AsyncSession = Depends(get_db)
) -> Any:
    shelter = await deps.get_or_404(db, Shelter, shelter_id)
    shelter.current_occupancy = request.current_occupancy
    shelter.refresh_status()
    await db.commit()
    await db.refresh(shelter)
    return shelter

@router.put("/{shelter_id}/close", response_model=ShelterOut, dependencies=[Depends(deps.get_current_admin)])
async def close_shelter(shelter_id: str, db: AsyncSession = Depends(get_db)) -> Any:
    shelter = await deps.get_or_404(db, Shelter, shelter_id)
    shelter.status = ShelterStatus.CLOSED
    await db.commit()
    await db.refresh(shelter)
    return shelter

@router.put("/{shelter_id}/open", response_model=ShelterOut, dependencies=[Depends(deps.get_current_admin)])
async def open_shelter(shelter_id: str, db: AsyncSession = Depends(get_db)) -> Any:
    shelter = await deps.get_or_404(db, Shelter, shelter_id)
    shelter.status = ShelterStatus.AVAILABLE
    shelter.refresh_status()
    await db.commit()
    await db.refresh(shelter)
    return shelter

@router.delete("/{shelter_id}", response_model=MessageResponse, dependencies=[Depends(deps.get_current_admin)])
async def delete_shelter(shelter_id: str, db: AsyncSession = Depends(get_db)) -> Any:
    shelter = await deps.get_or_404(db, Shelter, shelter_id)
    await db.delete(shelter)
    await db.commit()
    return {"message": "Deleted"}
