from typing import Any, Optional
from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from floodline.api import deps
from floodline.db.session import get_db
from floodline.models.user import UserRole
from floodline.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    SeedAdminRequest,
    SeedAdminResponse,
)
from floodline.schemas.common import MessageResponse
from floodline.services.auth_service import AuthService

router = APIRouter()

@router.post("/register", response_model=MessageResponse)
async def register(request: RegisterRequest, db: AsyncSession = Depends(get_db)) -> Any:
    await AuthService.register(db, request.name, request.email, request.password)
    return {"message": "User registered successfully"}

@router.post("/login", response_model=LoginResponse)
async def login_access_token(request: LoginRequest, db: AsyncSession = Depends(get_db)) -> Any:
    """
    Exchange email and password for a 24h bearer token.
    """
    user, token = await AuthService.authenticate(db, request.email, request.password)
    return LoginResponse(
        message="Login successful",
        token=token,
        role=UserRole(user.role),
        user_id=user.id,
    )

@router.post(
    "/seed-admin",
    response_model=SeedAdminResponse,
    dependencies=[Depends(deps.require_development)],
)
async def seed_admin(
    request: Optional[SeedAdminRequest] = Body(default=None),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Development only: create or update an admin account.
    """
    request = request or SeedAdminRequest()
    user, created = await AuthService.bootstrap_admin(
        db,
        name=request.name,
        email=request.email,
        password=request.password,
        role=request.role,
    )
    return SeedAdminResponse(message="Admin created" if created else "Admin updated", email=user.email)
