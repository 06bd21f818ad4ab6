from typing import Annotated, Optional
from pydantic import BaseModel, BeforeValidator, EmailStr, Field
from datetime import datetime

from floodline.core.security import normalize_email
from floodline.models.user import UserRole
from floodline.schemas.common import CamelModel

NormalizedEmail = Annotated[EmailStr, BeforeValidator(normalize_email)]


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: NormalizedEmail
    password: str = Field(..., min_length=1)

class LoginRequest(BaseModel):
    email: Annotated[str, BeforeValidator(normalize_email)] = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

class LoginResponse(CamelModel):
    message: str
    token: str
    role: UserRole
    user_id: str

class SeedAdminRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[NormalizedEmail] = None
    password: Optional[str] = None
    role: Optional[str] = None

class SeedAdminResponse(BaseModel):
    message: str
    email: str

class TokenPayload(BaseModel):
    """Identity attached to a request once its bearer token is verified."""
    sub: str
    role: UserRole

class UserOut(CamelModel):
    id: str
    name: Optional[str] = None
    email: str
    phone: Optional[str] = None
    role: UserRole
    created_at: datetime
    updated_at: datetime
