from typing import Any, List
from fastapi import APIRouter, Depends
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

import structlog

from floodline.api import deps
from floodline.db.session import get_db
from floodline.models.help_request import HelpRequest
from floodline.models.user import User, UserRole
from floodline.schemas.analytics import AdminDashboardStats
from floodline.schemas.auth import TokenPayload, UserOut
from floodline.schemas.help_request import HelpRequestOut, HelpRequestStatusUpdate
from floodline.services.analytics_service import AnalyticsService

logger = structlog.get_logger()
router = APIRouter(dependencies=[Depends(deps.get_current_admin)])

@router.get("/users", response_model=List[UserOut])
async def read_users(db: AsyncSession = Depends(get_db)) -> Any:
    """
    Every account, newest first. Password hashes never leave the store.
    """
    result = await db.execute(select(User).order_by(desc(User.created_at)))
    return result.scalars().all()

@router.get("/stats", response_model=AdminDashboardStats)
async def dashboard_stats(db: AsyncSession = Depends(get_db)) -> Any:
    return await AnalyticsService.admin_dashboard(db)

@router.get("/help-requests", response_model=List[HelpRequestOut])
async def read_help_requests(db: AsyncSession = Depends(get_db)) -> Any:
    result = await db.execute(select(HelpRequest).order_by(desc(HelpRequest.created_at)))
    return result.scalars().all()

@router.patch("/help-requests/{request_id}/status", response_model=HelpRequestOut)
async def update_help_request_status(
    request_id: str, request: HelpRequestStatusUpdate, db: AsyncSession = Depends(get_db)
) -> Any:
    help_request = await deps.get_or_404(db, HelpRequest, request_id)
    help_request.status = request.status
    await db.commit()
    await db.refresh(help_request)
    return help_request

@router.patch("/users/{user_id}/make-admin", response_model=UserOut)
async def make_admin(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_admin: TokenPayload = Depends(deps.get_current_admin),
) -> Any:
    user = await deps.get_or_404(db, User, user_id)
    user.role = UserRole.ADMIN
    await db.commit()
    await db.refresh(user)
    logger.info("user_promoted", user_id=user.id, promoted_by=current_admin.sub)
    return user
