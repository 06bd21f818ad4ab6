from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from floodline.api import deps
from floodline.db.session import get_db
from floodline.models.missing_person import MissingPerson, MissingPersonStatus
from floodline.schemas.analytics import MissingPersonStats
from floodline.schemas.common import MessageResponse
from floodline.schemas.missing_person import MissingPersonCreate, MissingPersonOut, MissingPersonUpdate
from floodline.services.analytics_service import AnalyticsService

router = APIRouter()

@router.post("", response_model=MissingPersonOut, status_code=status.HTTP_201_CREATED)
async def report_missing_person(request: MissingPersonCreate, db: AsyncSession = Depends(get_db)) -> Any:
    """
    Public report; anyone can file one without an account.
    """
    person = MissingPerson(**request.model_dump(), status=MissingPersonStatus.MISSING)
    db.add(person)
    await db.commit()
    await db.refresh(person)
    return person

@router.get("", response_model=List[MissingPersonOut])
async def search_missing_persons(
    name: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
) -> Any:
    stmt = select(MissingPerson).order_by(desc(MissingPerson.created_at))
    if name:
        stmt = stmt.where(MissingPerson.name.ilike(f"%{name}%"))
    result = await db.execute(stmt)
    return result.scalars().all()

@router.get("/admin/stats", response_model=MissingPersonStats, dependencies=[Depends(deps.get_current_admin)])
async def missing_person_stats(db: AsyncSession = Depends(get_db)) -> Any:
    return await AnalyticsService.missing_person_stats(db)

@router.get("/{person_id}", response_model=MissingPersonOut)
async def read_missing_person(person_id: str, db: AsyncSession = Depends(get_db)) -> Any:
    return await deps.get_or_404(db, MissingPerson, person_id)

@router.put("/{person_id}/found", response_model=MissingPersonOut, dependencies=[Depends(deps.get_current_admin)])
async def mark_found(person_id: str, db: AsyncSession = Depends(get_db)) -> Any:
    person = await deps.get_or_404(db, MissingPerson, person_id)
    person.status = MissingPersonStatus.FOUND
    await db.commit()
    await db.refresh(person)
    return person

@router.patch("/{person_id}", response_model=MissingPersonOut, dependencies=[Depends(deps.get_current_admin)])
async def update_missing_person(
    person_id: str, request: MissingPersonUpdate, db: AsyncSession = Depends(get_db)
) -> Any:
    person = await deps.get_or_404(db, MissingPerson, person_id)
    for field, value in request.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(person, field, value)
    await db.commit()
    await db.refresh(person)
    return person

@router.delete("/{person_id}", response_model=MessageResponse, dependencies=[Depends(deps.get_current_admin)])
async def delete_missing_person(person_id: str, db: AsyncSession = Depends(get_db)) -> Any:
    person = await deps.get_or_404(db, MissingPerson, person_id)
    await db.delete(person)
    await db.commit()
    return {"message": "Deleted"}
