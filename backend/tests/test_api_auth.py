import unittest
from datetime import timedelta
from unittest.mock import patch

from floodline.core import security
from floodline.core.config import settings
from floodline.core.time_utils import get_utc_now
from floodline.models.user import UserRole
from testing_support import ApiTestCase


class TestAuthRoutes(ApiTestCase):

    async def register(self, email="dana@example.com", password="secret123", name="Dana"):
        return await self.client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": password},
        )

    async def test_health(self):
        response = await self.client.get("/api/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    async def test_register_then_login(self):
        response = await self.register()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"message": "User registered successfully"})

        response = await self.client.post(
            "/api/auth/login", json={"email": "DANA@example.com", "password": "secret123"}
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["message"], "Login successful")
        self.assertEqual(body["role"], "user")
        self.assertIn("userId", body)
        payload = security.decode_access_token(body["token"])
        self.assertEqual(payload["sub"], body["userId"])

    async def test_duplicate_registration(self):
        await self.register()
        response = await self.register(email="Dana@Example.com")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"message": "Email already exists"})

    async def test_register_validation(self):
        for body in [
            {"email": "x@example.com", "password": "pw"},
            {"name": "X", "email": "not-an-email", "password": "pw"},
            {"name": "X", "email": "x@example.com", "password": ""},
        ]:
            with self.subTest(body=body):
                response = await self.client.post("/api/auth/register", json=body)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["message"], "Validation error")

    async def test_wrong_password_and_unknown_email_look_the_same(self):
        await self.register()
        wrong = await self.client.post(
            "/api/auth/login", json={"email": "dana@example.com", "password": "nope"}
        )
        unknown = await self.client.post(
            "/api/auth/login", json={"email": "ghost@example.com", "password": "secret123"}
        )
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(wrong.json(), unknown.json())
        self.assertEqual(wrong.json(), {"message": "Invalid credentials"})


class TestAccessControl(ApiTestCase):

    async def test_missing_token(self):
        response = await self.client.get("/api/admin/users")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"message": "No token provided"})

    async def test_garbage_token(self):
        response = await self.client.get(
            "/api/admin/users", headers={"Authorization": "Bearer not.a.token"}
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"message": "Invalid token"})

    async def test_expired_token(self):
        admin = await self.create_admin()
        token = security.create_access_token(
            admin.id, role="admin", issued_at=get_utc_now() - timedelta(hours=25)
        )
        response = await self.client.get(
            "/api/admin/users", headers={"Authorization": f"Bearer {token}"}
        )
        self.assertEqual(response.status_code, 401)

    async def test_user_role_forbidden_on_admin_routes(self):
        user = await self.create_user()
        response = await self.client.get("/api/admin/users", headers=self.auth_headers(user))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json(), {"message": "Admin access required"})

    async def test_admin_lists_users_without_password_hashes(self):
        admin = await self.create_admin()
        await self.create_user()
        response = await self.client.get("/api/admin/users", headers=self.auth_headers(admin))
        self.assertEqual(response.status_code, 200)
        users = response.json()
        self.assertEqual(len(users), 2)
        for user in users:
            self.assertNotIn("passwordHash", user)
            self.assertNotIn("password_hash", user)

    async def test_make_admin(self):
        admin = await self.create_admin()
        user = await self.create_user()
        response = await self.client.patch(
            f"/api/admin/users/{user.id}/make-admin", headers=self.auth_headers(admin)
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["role"], "admin")

        # The user's old token still carries the old role until it expires
        old_headers = self.auth_headers(user, role=UserRole.USER)
        response = await self.client.get("/api/admin/users", headers=old_headers)
        self.assertEqual(response.status_code, 403)

    async def test_make_admin_unknown_user(self):
        admin = await self.create_admin()
        response = await self.client.patch(
            "/api/admin/users/does-not-exist/make-admin", headers=self.auth_headers(admin)
        )
        self.assertEqual(response.status_code, 404)


class TestSeedAdmin(ApiTestCase):

    async def test_forbidden_outside_development(self):
        response = await self.client.post("/api/auth/seed-admin")
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json(), {"message": "Forbidden in production"})

    async def test_forbidden_even_with_malformed_body(self):
        response = await self.client.post("/api/auth/seed-admin", json={"email": "nope"})
        self.assertEqual(response.status_code, 403)

    @patch.object(settings, "ENVIRONMENT", "development")
    async def test_creates_default_admin_in_development(self):
        response = await self.client.post("/api/auth/seed-admin")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"message": "Admin created", "email": "admin@flood.lk"})

        response = await self.client.post(
            "/api/auth/login", json={"email": "admin@flood.lk", "password": "admin123"}
        )
        self.assertEqual(response.json()["role"], "admin")

        response = await self.client.post("/api/auth/seed-admin", json={"password": "rotated"})
        self.assertEqual(response.json()["message"], "Admin updated")


if __name__ == "__main__":
    unittest.main()
