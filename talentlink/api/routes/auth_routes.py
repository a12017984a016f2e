"""
Authentication Routes

POST /auth/register - Register new user (returns token)
POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info
POST /auth/refresh - Issue a fresh token for the current user
"""

from fastapi import APIRouter, HTTPException, Depends
from pymongo.errors import DuplicateKeyError

from talentlink.core.auth import hash_password, verify_password, create_user_token, get_current_user
from talentlink.services.user_service import UserService
from talentlink.schemas.schemas import (
    RegisterRequest, LoginRequest, AuthResponse, CurrentUserResponse, TokenRefreshResponse
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(request: RegisterRequest):
    """
    Register a new user account.

    The response already carries an access token.
    """
    users = UserService()
    if users.email_exists(request.email):
        raise HTTPException(status_code=400, detail="User already exists with this email")

    try:
        user = users.create(
            name=request.name,
            email=request.email,
            password_hash=hash_password(request.password),
            role=request.role,
            wallet_address=request.wallet_address
        )
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="User already exists with this email")

    return AuthResponse(token=create_user_token(user), user=user)


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    users = UserService()
    credentials = users.get_credentials(request.email)

    if not credentials or not verify_password(request.password, credentials["password_hash"]):
        raise HTTPException(status_code=400, detail="Invalid credentials")

    user = users.get_private_profile(credentials["id"])
    return AuthResponse(token=create_user_token(user), user=user)


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(user: dict = Depends(get_current_user)):
    """Get current authenticated user's info."""
    return CurrentUserResponse(user=UserService().get_private_profile(user["id"]))


@router.post("/refresh", response_model=TokenRefreshResponse)
async def refresh_token(user: dict = Depends(get_current_user)):
    return TokenRefreshResponse(token=create_user_token(user))
