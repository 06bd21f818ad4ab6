import unittest
from unittest.mock import patch

from floodline.core import security
from floodline.core.config import settings
from floodline.core.exceptions import DuplicateIdentity, Forbidden, InvalidCredentials
from floodline.models.user import User, UserRole
from floodline.services.auth_service import AuthService
from testing_support import DatabaseTestCase


class TestRegistration(DatabaseTestCase):

    async def test_register_normalizes_email_and_hashes_password(self):
        async with self.session_factory() as db:
            user = await AuthService.register(db, "Alice", "  Alice@Example.com ", "secret123")

        self.assertEqual(user.email, "alice@example.com")
        self.assertEqual(user.role, UserRole.USER)
        self.assertNotEqual(user.password_hash, "secret123")
        self.assertTrue(security.verify_password("secret123", user.password_hash))

    async def test_duplicate_email_rejected_case_insensitively(self):
        async with self.session_factory() as db:
            await AuthService.register(db, "Alice", "alice@example.com", "secret123")
            with self.assertRaises(DuplicateIdentity):
                await AuthService.register(db, "Other", "ALICE@example.com", "different")


class TestAuthentication(DatabaseTestCase):

    async def asyncSetUp(self):
        await super().asyncSetUp()
        async with self.session_factory() as db:
            self.user = await AuthService.register(db, "Bob", "bob@example.com", "secret123")

    async def test_login_with_mixed_case_email(self):
        async with self.session_factory() as db:
            user, token = await AuthService.authenticate(db, "BOB@Example.com", "secret123")

        self.assertEqual(user.id, self.user.id)
        identity = AuthService.authorize(token)
        self.assertEqual(identity.sub, self.user.id)
        self.assertEqual(identity.role, UserRole.USER)

    async def test_failures_are_indistinguishable(self):
        messages = []
        async with self.session_factory() as db:
            for email, password in [
                ("BOB@example.com", "wrong-password"),
                ("nobody@example.com", "secret123"),
            ]:
                with self.assertRaises(InvalidCredentials) as ctx:
                    await AuthService.authenticate(db, email, password)
                messages.append((ctx.exception.status_code, ctx.exception.message))

        self.assertEqual(messages[0], messages[1])
        self.assertEqual(messages[0], (401, "Invalid credentials"))

    async def test_account_without_password_cannot_log_in(self):
        async with self.session_factory() as db:
            db.add(User(name="Imported", email="imported@example.com", password_hash=None))
            await db.commit()
            with self.assertRaises(InvalidCredentials):
                await AuthService.authenticate(db, "imported@example.com", "")

    async def test_role_in_token_is_a_snapshot(self):
        async with self.session_factory() as db:
            _, token = await AuthService.authenticate(db, "bob@example.com", "secret123")
            user = await AuthService.get_by_email(db, "bob@example.com")
            user.role = UserRole.ADMIN
            await db.commit()

        # Existing token keeps the role it was issued with
        self.assertEqual(AuthService.authorize(token).role, UserRole.USER)
        with self.assertRaises(Forbidden):
            AuthService.require_role(AuthService.authorize(token), UserRole.ADMIN)


class TestBootstrapAdmin(DatabaseTestCase):

    async def test_refused_outside_development(self):
        for environment in ["production", "test", "Development", "dev"]:
            with patch.object(settings, "ENVIRONMENT", environment):
                async with self.session_factory() as db:
                    with self.assertRaises(Forbidden):
                        await AuthService.bootstrap_admin(db)

    @patch.object(settings, "ENVIRONMENT", "development")
    async def test_creates_default_admin_then_updates_it(self):
        async with self.session_factory() as db:
            admin, created = await AuthService.bootstrap_admin(db)
        self.assertTrue(created)
        self.assertEqual(admin.email, settings.DEFAULT_ADMIN_EMAIL)
        self.assertEqual(admin.role, UserRole.ADMIN)

        async with self.session_factory() as db:
            again, created = await AuthService.bootstrap_admin(db, name="Ops", password="n3w-pass")
        self.assertFalse(created)
        self.assertEqual(again.id, admin.id)
        self.assertEqual(again.name, "Ops")

        async with self.session_factory() as db:
            _, token = await AuthService.authenticate(db, settings.DEFAULT_ADMIN_EMAIL, "n3w-pass")
        self.assertEqual(AuthService.authorize(token).role, UserRole.ADMIN)

    @patch.object(settings, "ENVIRONMENT", "development")
    async def test_promotes_existing_account(self):
        existing = await self.create_user(email="carol@example.com")
        async with self.session_factory() as db:
            admin, created = await AuthService.bootstrap_admin(db, email="Carol@Example.com")
        self.assertFalse(created)
        self.assertEqual(admin.id, existing.id)
        self.assertEqual(admin.role, UserRole.ADMIN)

    @patch.object(settings, "ENVIRONMENT", "development")
    async def test_non_admin_role_request_creates_plain_user(self):
        async with self.session_factory() as db:
            user, _ = await AuthService.bootstrap_admin(db, email="tester@example.com", role="user")
        self.assertEqual(user.role, UserRole.USER)


if __name__ == "__main__":
    unittest.main()
