import unittest
from datetime import timedelta

from jose import JWTError

from floodline.core import security
from floodline.core.exceptions import Unauthenticated
from floodline.core.time_utils import get_utc_now
from floodline.models.user import UserRole
from floodline.services.auth_service import AuthService


class TestPasswordHashing(unittest.TestCase):

    def test_hash_verifies_only_the_original_password(self):
        hashed = security.get_password_hash("secret123")
        self.assertNotEqual(hashed, "secret123")
        self.assertTrue(security.verify_password("secret123", hashed))
        self.assertFalse(security.verify_password("Secret123", hashed))

    def test_normalize_email(self):
        self.assertEqual(security.normalize_email("  Alice@Example.COM "), "alice@example.com")
        self.assertIsNone(security.normalize_email(None))


class TestSessionTokens(unittest.TestCase):

    def test_token_carries_subject_and_role(self):
        token = security.create_access_token("user-1", role="admin")
        payload = security.decode_access_token(token)
        self.assertEqual(payload["sub"], "user-1")
        self.assertEqual(payload["role"], "admin")
        self.assertEqual(payload["exp"] - payload["iat"], 24 * 60 * 60)

    def test_token_accepted_just_before_expiry(self):
        issued = get_utc_now() - timedelta(hours=23, minutes=59)
        token = security.create_access_token("user-1", role="user", issued_at=issued)
        identity = AuthService.authorize(token)
        self.assertEqual(identity.sub, "user-1")
        self.assertEqual(identity.role, UserRole.USER)

    def test_token_rejected_after_expiry(self):
        issued = get_utc_now() - timedelta(hours=24, minutes=1)
        token = security.create_access_token("user-1", role="user", issued_at=issued)
        with self.assertRaises(JWTError):
            security.decode_access_token(token)
        with self.assertRaises(Unauthenticated) as ctx:
            AuthService.authorize(token)
        self.assertEqual(ctx.exception.message, "Invalid token")

    def test_tampered_token_rejected(self):
        token = security.create_access_token("user-1", role="user")
        header, payload, signature = token.split(".")
        forged = ".".join([header, payload, signature[::-1]])
        with self.assertRaises(Unauthenticated):
            AuthService.authorize(forged)

    def test_missing_token(self):
        with self.assertRaises(Unauthenticated) as ctx:
            AuthService.authorize(None)
        self.assertEqual(ctx.exception.message, "No token provided")

    def test_unknown_role_claim_rejected(self):
        token = security.create_access_token("user-1", role="superuser")
        with self.assertRaises(Unauthenticated):
            AuthService.authorize(token)


if __name__ == "__main__":
    unittest.main()
