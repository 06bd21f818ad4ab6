from typing import Optional, Tuple

from jose import JWTError
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from floodline.core import security
from floodline.core.config import settings
from floodline.core.exceptions import (
    DuplicateIdentity,
    Forbidden,
    InvalidCredentials,
    Unauthenticated,
)
from floodline.models.user import User, UserRole
from floodline.schemas.auth import TokenPayload

logger = structlog.get_logger()


class AuthService:
    """
    Accounts and stateless session tokens.

    A token carries a snapshot of the account's role taken at login. It is
    not re-checked against the users table on later requests, so a revoked
    administrator keeps admin access until the token expires (24h).
    """

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == security.normalize_email(email)))
        return result.scalar_one_or_none()

    @classmethod
    async def register(cls, db: AsyncSession, name: str, email: str, password: str) -> User:
        email = security.normalize_email(email)
        if await cls.get_by_email(db, email):
            raise DuplicateIdentity()

        user = User(
            name=name,
            email=email,
            password_hash=security.get_password_hash(password),
            role=UserRole.USER,
        )
        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            await db.rollback()
            raise DuplicateIdentity()
        await db.refresh(user)
        logger.info("user_registered", user_id=user.id)
        return user

    @classmethod
    async def authenticate(cls, db: AsyncSession, email: str, password: str) -> Tuple[User, str]:
        """
        Unknown email, missing hash and wrong password all raise the same
        InvalidCredentials; only the log line tells them apart.
        """
        email = security.normalize_email(email)
        user = await cls.get_by_email(db, email)
        if not user:
            logger.warning("login_failed", reason="unknown_email")
            raise InvalidCredentials()
        if not user.password_hash:
            logger.warning("login_failed", reason="no_password_set", user_id=user.id)
            raise InvalidCredentials()
        if not security.verify_password(password, user.password_hash):
            logger.warning("login_failed", reason="password_mismatch", user_id=user.id)
            raise InvalidCredentials()

        token = security.create_access_token(user.id, role=UserRole(user.role).value)
        logger.info("login_succeeded", user_id=user.id, role=UserRole(user.role).value)
        return user, token

    @staticmethod
    def authorize(token: Optional[str]) -> TokenPayload:
        if not token:
            raise Unauthenticated("No token provided")
        try:
            payload = security.decode_access_token(token)
            return TokenPayload(**payload)
        except (JWTError, PydanticValidationError):
            raise Unauthenticated("Invalid token")

    @staticmethod
    def require_role(current_user: TokenPayload, role: UserRole) -> TokenPayload:
        if current_user.role != role:
            raise Forbidden("Admin access required")
        return current_user

    @classmethod
    async def bootstrap_admin(
        cls,
        db: AsyncSession,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
        role: Optional[str] = None,
    ) -> Tuple[User, bool]:
        """
        Create or update an account straight to the admin role, bypassing
        registration. Refused unless ENVIRONMENT is exactly "development".
        Returns (user, created).
        """
        if not settings.is_development:
            logger.warning("bootstrap_admin_refused", environment=settings.ENVIRONMENT)
            raise Forbidden("Forbidden in production")

        email = security.normalize_email(email or settings.DEFAULT_ADMIN_EMAIL)
        name = name or settings.DEFAULT_ADMIN_NAME
        password_hash = security.get_password_hash(password or settings.DEFAULT_ADMIN_PASSWORD)
        target_role = UserRole.USER if role and role != UserRole.ADMIN.value else UserRole.ADMIN

        user = await cls.get_by_email(db, email)
        created = user is None
        if created:
            user = User(name=name, email=email, password_hash=password_hash, role=target_role)
            db.add(user)
        else:
            user.name = name
            user.password_hash = password_hash
            user.role = target_role
        await db.commit()
        await db.refresh(user)
        logger.info("bootstrap_admin", user_id=user.id, created=created, role=target_role.value)
        return user, created
