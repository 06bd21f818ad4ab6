from typing import Any
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from floodline.api import deps
from floodline.db.session import get_db
from floodline.schemas.analytics import HelpRequestBreakdown
from floodline.services.analytics_service import AnalyticsService

router = APIRouter()

@router.get("", response_model=HelpRequestBreakdown, dependencies=[Depends(deps.get_current_admin)])
async def help_request_breakdown(db: AsyncSession = Depends(get_db)) -> Any:
    return await AnalyticsService.help_request_breakdown(db)
