"""
Authentication Routes

POST /auth/register     - Register new user (returns JWT token)
POST /auth/login        - Login and get JWT token
POST /auth/verify-email - Verify email with the 6-digit code
POST /auth/dev-verify   - Verify without a code (debug mode only)
GET  /auth/profile      - Get current user info
"""

from fastapi import APIRouter, Depends

from app.core.auth import get_current_user
from app.db.store import DocumentStore, get_store
from app.services.auth_service import get_auth_service
from app.schemas.schemas import (
    DevVerifyRequest, LoginRequest, MessageResponse, RegisterRequest, VerifyEmailRequest
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", status_code=201)
async def register(request: RegisterRequest, store: DocumentStore = Depends(get_store)):
    """
    Register a new user account.

    Students, institutions and companies also get their role profile.
    A verification code is emailed (or logged when SMTP is not configured).
    """
    result = get_auth_service(store).register(
        email=request.email,
        password=request.password,
        name=request.name,
        role=request.role.value,
        additional_data=request.additional_data
    )
    return {"success": True, "message": "User registered successfully. Please verify your email.", **result}


@router.post("/login")
async def login(request: LoginRequest, store: DocumentStore = Depends(get_store)):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    result = get_auth_service(store).login(request.email, request.password)
    return {"success": True, "message": "Login successful", **result}


@router.post("/verify-email", response_model=MessageResponse)
async def verify_email(request: VerifyEmailRequest, store: DocumentStore = Depends(get_store)):
    get_auth_service(store).verify_email(request.email, request.code)
    return MessageResponse(message="Email verified successfully")


@router.post("/dev-verify", response_model=MessageResponse)
async def dev_verify(request: DevVerifyRequest, store: DocumentStore = Depends(get_store)):
    get_auth_service(store).dev_verify(request.email)
    return MessageResponse(message="Email verified (development)")


@router.get("/profile")
async def get_profile(user: dict = Depends(get_current_user), store: DocumentStore = Depends(get_store)):
    """Get current authenticated user's info."""
    return {"success": True, **get_auth_service(store).get_profile(user)}
