import unittest
from typing import Optional

import httpx

from floodline.core import security
from floodline.db.base import Base
from floodline.db.init_db import init_models
from floodline.db.session import build_engine, build_session_factory, get_db, get_session_factory
from floodline.main import app
from floodline.models.user import User, UserRole


class DatabaseTestCase(unittest.IsolatedAsyncioTestCase):
    """
    Every test gets its own in-memory SQLite store with all tables created.
    """

    async def asyncSetUp(self):
        self.engine = build_engine("sqlite+aiosqlite://")
        self.session_factory = build_session_factory(self.engine)
        await init_models(self.engine)

    async def asyncTearDown(self):
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await self.engine.dispose()

    async def create_user(
        self,
        email: str = "user@example.com",
        password: str = "secret123",
        role: UserRole = UserRole.USER,
        name: str = "Test User",
    ) -> User:
        async with self.session_factory() as db:
            user = User(
                name=name,
                email=email,
                password_hash=security.get_password_hash(password),
                role=role,
            )
            db.add(user)
            await db.commit()
            await db.refresh(user)
            return user


class ApiTestCase(DatabaseTestCase):
    """
    Drives the FastAPI app in-process. Lifespan does not run under
    ASGITransport, so the scheduler stays off.
    """

    async def asyncSetUp(self):
        await super().asyncSetUp()

        async def override_get_db():
            async with self.session_factory() as session:
                yield session

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_session_factory] = lambda: self.session_factory
        self.client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")

    async def asyncTearDown(self):
        await self.client.aclose()
        app.dependency_overrides.clear()
        await super().asyncTearDown()

    def auth_headers(self, user: User, role: Optional[UserRole] = None) -> dict:
        token = security.create_access_token(user.id, role=(role or UserRole(user.role)).value)
        return {"Authorization": f"Bearer {token}"}

    async def create_admin(self, email: str = "admin@example.com") -> User:
        return await self.create_user(email=email, role=UserRole.ADMIN, name="Admin")
