from typing import Optional, Type, TypeVar
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from floodline.core.config import settings
from floodline.core.exceptions import Forbidden, NotFound, Unauthenticated
from floodline.models.user import UserRole
from floodline.schemas.auth import TokenPayload
from floodline.services.auth_service import AuthService

ModelT = TypeVar("ModelT")

# auto_error=False so a missing header reaches AuthService and yields our 401 body
reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_PREFIX}/auth/login",
    auto_error=False,
)

def get_current_user(token: Optional[str] = Depends(reusable_oauth2)) -> TokenPayload:
    return AuthService.authorize(token)

def get_optional_user(token: Optional[str] = Depends(reusable_oauth2)) -> Optional[TokenPayload]:
    """Identity if a valid token was sent, otherwise anonymous."""
    if not token:
        return None
    try:
        return AuthService.authorize(token)
    except Unauthenticated:
        return None

def get_current_admin(
    current_user: TokenPayload = Depends(get_current_user),
) -> TokenPayload:
    return AuthService.require_role(current_user, UserRole.ADMIN)

async def get_or_404(db: AsyncSession, model: Type[ModelT], record_id: str) -> ModelT:
    record = await db.get(model, record_id)
    if not record:
        raise NotFound()
    return record

def require_development() -> None:
    """Hard gate for bootstrap routes; runs before the request body is validated."""
    if not settings.is_development:
        raise Forbidden("Forbidden in production")
