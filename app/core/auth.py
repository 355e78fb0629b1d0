"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification
- FastAPI dependencies for protected routes

Every protected route receives the identity {id, role, email, name}.
"""

from datetime import timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.config import get_settings
from app.core.errors import AuthenticationError, UnauthorizedError
from app.db.mongodb import COLLECTIONS
from app.db.store import DocumentStore, get_store
from app.utils.helpers import utcnow

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor (missing tokens are reported as 401 below)
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Stored value is not a recognizable hash
        return False


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def token_for_user(user_id: str, role: str, email: str) -> str:
    return create_access_token(data={"sub": user_id, "role": role, "email": email})


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    store: DocumentStore = Depends(get_store)
) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    if credentials is None:
        raise AuthenticationError("Access denied. No token provided.")

    payload = decode_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise AuthenticationError("Invalid or expired token")

    user_id = payload["sub"]
    user = store.get(COLLECTIONS["users"], user_id)
    if not user:
        raise AuthenticationError("Invalid token. User not found.")

    if user.get("status") == "suspended":
        raise UnauthorizedError("Account suspended")

    return {
        "id": user_id,
        "role": user.get("role"),
        "email": user.get("email"),
        "name": user.get("name")
    }


def require_role(role: str):
    """Build a dependency that only lets one role through."""

    async def dependency(user: dict = Depends(get_current_user)) -> dict:
        if user["role"] != role:
            raise UnauthorizedError("Access denied. Insufficient permissions.")
        return user

    return dependency


get_current_student = require_role("student")
get_current_institution = require_role("institution")
get_current_company = require_role("company")
get_current_admin = require_role("admin")
