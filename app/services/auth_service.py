"""
Account Service - registration, login and email verification.

Registration creates:
- a `users` document (hashed password, 6-digit verification code)
- for non-admin roles, the role document under the same id
  (`students`, `institutions` or `companies`)
"""

import logging
from typing import Optional

from app.core.auth import hash_password, token_for_user, verify_password
from app.core.config import get_settings
from app.core.errors import (
    AuthenticationError, ConflictError, DependencyError, NotFoundError,
    UnauthorizedError, ValidationError
)
from app.db.mongodb import COLLECTIONS
from app.db.store import DocumentStore
from app.services.email_service import send_verification_email
from app.utils.helpers import generate_verification_code, utcnow, validate_email

logger = logging.getLogger(__name__)

ROLES = ("student", "institution", "company", "admin")
ROLE_COLLECTIONS = {
    "student": COLLECTIONS["students"],
    "institution": COLLECTIONS["institutions"],
    "company": COLLECTIONS["companies"],
}
# Keys callers may not set through additionalData
RESERVED_FIELDS = {"id", "uid", "email", "name", "role", "password", "isVerified", "verificationCode", "status"}
PRIVATE_USER_FIELDS = ("password", "verificationCode")


def public_user(user: dict) -> dict:
    return {k: v for k, v in user.items() if k not in PRIVATE_USER_FIELDS}


class AuthService:

    def __init__(self, store: DocumentStore):
        self.store = store
        self.settings = get_settings()

    def find_user_by_email(self, email: str) -> Optional[dict]:
        users = self.store.query(COLLECTIONS["users"], email=email.strip().lower())
        return users[0] if users else None

    def register(
        self,
        email: str,
        password: str,
        name: str,
        role: str,
        additional_data: Optional[dict] = None
    ) -> dict:
        """
        Create an account and send the verification code.

        Returns {"token", "user", "emailSent"} and, in debug mode, the
        verification code itself.
        """
        email = (email or "").strip().lower()
        if not validate_email(email):
            raise ValidationError("Invalid email address")
        if role not in ROLES:
            raise ValidationError(f"Role must be one of: {', '.join(ROLES)}")
        if self.find_user_by_email(email):
            raise ConflictError("User already exists with this email")

        extra = {k: v for k, v in (additional_data or {}).items() if k not in RESERVED_FIELDS}
        code = generate_verification_code()
        now = utcnow()

        user_id = self.store.add(COLLECTIONS["users"], {
            **extra,
            "email": email,
            "name": name,
            "role": role,
            "password": hash_password(password),
            "isVerified": False,
            "verificationCode": code,
            "status": "active",
            "createdAt": now,
            "updatedAt": now
        })

        if role in ROLE_COLLECTIONS:
            self.store.set(ROLE_COLLECTIONS[role], user_id, {
                **extra,
                "uid": user_id,
                "email": email,
                "name": name,
                "status": "approved",
                "createdAt": now,
                "updatedAt": now
            })

        email_sent = False
        try:
            email_sent = send_verification_email(email, code)
        except DependencyError as e:
            logger.warning("Registration continues without verification email: %s", e.message)

        logger.info("User registered: %s as %s", email, role)

        result = {
            "token": token_for_user(user_id, role, email),
            "user": {"id": user_id, "email": email, "name": name, "role": role, "isVerified": False},
            "emailSent": email_sent
        }
        if self.settings.debug:
            result["verificationCode"] = code
        return result

    def login(self, email: str, password: str) -> dict:
        user = self.find_user_by_email(email or "")
        if not user or not verify_password(password, user.get("password")):
            raise AuthenticationError("Invalid email or password")

        if user.get("status") == "suspended":
            raise UnauthorizedError("Account suspended. Contact the administrator.")
        if self.settings.require_email_verification and not user.get("isVerified"):
            raise UnauthorizedError("Please verify your email before logging in")

        logger.info("User logged in: %s", user["email"])
        return {
            "token": token_for_user(user["id"], user["role"], user["email"]),
            "user": {
                "id": user["id"],
                "email": user["email"],
                "name": user.get("name"),
                "role": user["role"],
                "isVerified": bool(user.get("isVerified"))
            }
        }

    def _mark_verified(self, user_id: str) -> None:
        now = utcnow()
        self.store.update(COLLECTIONS["users"], user_id, {
            "isVerified": True,
            "verificationCode": None,
            "verifiedAt": now,
            "updatedAt": now
        })

    def verify_email(self, email: str, code: str) -> None:
        user = self.find_user_by_email(email or "")
        if not user:
            raise NotFoundError("User not found")
        if user.get("isVerified"):
            raise ConflictError("Email already verified")
        if not code or str(code).strip() != user.get("verificationCode"):
            raise ValidationError("Invalid verification code")

        self._mark_verified(user["id"])
        logger.info("Email verified: %s", user["email"])

    def dev_verify(self, email: str) -> None:
        """Verify without a code. Only available in debug mode."""
        if not self.settings.debug:
            raise UnauthorizedError("Development verification is disabled")
        user = self.find_user_by_email(email or "")
        if not user:
            raise NotFoundError("User not found")
        self._mark_verified(user["id"])

    def get_profile(self, identity: dict) -> dict:
        """Account data plus the role document, without credentials."""
        user = self.store.get(COLLECTIONS["users"], identity["id"])
        if not user:
            raise NotFoundError("User not found")

        result = {"user": public_user(user)}
        role_collection = ROLE_COLLECTIONS.get(user.get("role"))
        if role_collection:
            result["profile"] = self.store.get(role_collection, identity["id"])
        return result


def get_auth_service(store: DocumentStore) -> AuthService:
    return AuthService(store)
