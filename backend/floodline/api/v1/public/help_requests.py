from typing import Any, List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

import structlog

from floodline.api import deps
from floodline.core.exceptions import Forbidden, ValidationError
from floodline.db.session import get_db
from floodline.models.help_request import HelpRequest, HelpRequestStatus
from floodline.models.user import UserRole
from floodline.schemas.analytics import HelpRequestStats
from floodline.schemas.auth import TokenPayload
from floodline.schemas.common import MessageResponse
from floodline.schemas.help_request import HelpRequestCreate, HelpRequestOut, HelpRequestUpdate
from floodline.services.analytics_service import AnalyticsService

logger = structlog.get_logger()
router = APIRouter()

@router.post("", response_model=HelpRequestOut, status_code=status.HTTP_201_CREATED)
async def create_help_request(
    request: HelpRequestCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Optional[TokenPayload] = Depends(deps.get_optional_user),
) -> Any:
    """
    Anyone can ask for help. A valid bearer token links the request to its sender.
    """
    help_request = HelpRequest(
        user_id=current_user.sub if current_user else None,
        name=request.name,
        phone=request.phone,
        type=request.type,
        description=request.description,
        lat=request.location.lat if request.location else None,
        lng=request.location.lng if request.location else None,
        status=HelpRequestStatus.PENDING,
    )
    db.add(help_request)
    await db.commit()
    await db.refresh(help_request)
    logger.info("help_request_created", help_request_id=help_request.id, type=help_request.type)
    return help_request

@router.get("", response_model=List[HelpRequestOut], dependencies=[Depends(deps.get_current_admin)])
async def read_help_requests(db: AsyncSession = Depends(get_db)) -> Any:
    result = await db.execute(select(HelpRequest).order_by(desc(HelpRequest.created_at)))
    return result.scalars().all()

@router.get("/admin/stats", response_model=HelpRequestStats, dependencies=[Depends(deps.get_current_admin)])
async def help_request_stats(db: AsyncSession = Depends(get_db)) -> Any:
    return await AnalyticsService.help_request_stats(db)

@router.get(
    "/admin/by-status/{request_status}",
    response_model=List[HelpRequestOut],
    dependencies=[Depends(deps.get_current_admin)],
)
async def read_help_requests_by_status(request_status: str, db: AsyncSession = Depends(get_db)) -> Any:
    try:
        wanted = HelpRequestStatus(request_status)
    except ValueError:
        raise ValidationError("Invalid status")
    stmt = select(HelpRequest).where(HelpRequest.status == wanted).order_by(desc(HelpRequest.created_at))
    result = await db.execute(stmt)
    return result.scalars().all()

@router.get("/{request_id}", response_model=HelpRequestOut)
async def read_help_request(
    request_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
) -> Any:
    help_request = await deps.get_or_404(db, HelpRequest, request_id)
    if current_user.role != UserRole.ADMIN and help_request.user_id != current_user.sub:
        raise Forbidden("Access denied")
    return help_request

@router.patch("/{request_id}", response_model=HelpRequestOut, dependencies=[Depends(deps.get_current_admin)])
async def update_help_request(
    request_id: str, request: HelpRequestUpdate, db: AsyncSession = Depends(get_db)
) -> Any:
    help_request = await deps.get_or_404(db, HelpRequest, request_id)
    changes = request.model_dump(exclude_unset=True, exclude={"location"})
    for field, value in changes.items():
        if value is not None:
            setattr(help_request, field, value)
    if request.location is not None:
        help_request.lat = request.location.lat
        help_request.lng = request.location.lng
    await db.commit()
    await db.refresh(help_request)
    return help_request

@router.put("/{request_id}/resolve", response_model=HelpRequestOut, dependencies=[Depends(deps.get_current_admin)])
async def resolve_help_request(request_id: str, db: AsyncSession = Depends(get_db)) -> Any:
    help_request = await deps.get_or_404(db, HelpRequest, request_id)
    help_request.status = HelpRequestStatus.RESOLVED
    await db.commit()
    await db.refresh(help_request)
    return help_request

@router.delete("/{request_id}", response_model=MessageResponse, dependencies=[Depends(deps.get_current_admin)])
async def delete_help_request(request_id: str, db: AsyncSession = Depends(get_db)) -> Any:
    help_request = await deps.get_or_404(db, HelpRequest, request_id)
    await db.delete(help_request)
    await db.commit()
    return {"message": "Deleted"}
