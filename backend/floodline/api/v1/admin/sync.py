from typing import Any
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import async_sessionmaker

from floodline.api import deps
from floodline.db.session import get_session_factory
from floodline.schemas.sync import SyncResponse
from floodline.services.gov_data_service import GovDataService

router = APIRouter(dependencies=[Depends(deps.get_current_admin)])

@router.post("/sync-gov-data", response_model=SyncResponse)
async def sync_gov_data(
    use_mock: bool = Query(default=False, alias="useMock"),
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> Any:
    """
    Run both reconciliations now, or seed the fixed mock dataset with ?useMock=1.
    Per-collection results are always returned; the status is 500 if either failed.
    """
    if use_mock:
        result = await GovDataService.seed_mock_data(session_factory)
    else:
        result = await GovDataService.sync_all(session_factory)
    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=result.model_dump(mode="json"),
        )
    return result
