# app/routers/auth.py
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.user import (
    UserCreate, UserResponse, AuthResponse, LoginRequest,
    ChangePasswordRequest, RefreshRequest,
)
from app.database import get_db
from app.utils.password import hash_password, verify_password
from app.core.security import create_access_token, create_refresh_token, token_claims
from app.core.auth import get_current_user, decode_token
from app.core.errors import ConflictError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _auth_response(user: User) -> AuthResponse:
    claims = token_claims(user)
    return AuthResponse(
        token=create_access_token(claims),
        refresh_token=create_refresh_token({"sub": claims["sub"]}),
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=ApiResponse[AuthResponse], status_code=status.HTTP_201_CREATED)
async def register(user_in: UserCreate, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).where(User.email == user_in.email))
    if result.scalar_one_or_none():
        raise ConflictError("User already exists with this email")

    user = User(
        email=user_in.email,
        hashed_password=hash_password(user_in.password),
        first_name=user_in.first_name,
        last_name=user_in.last_name,
        role="employee",
        department=user_in.department,
        manager_id=None,
        date_of_birth=user_in.date_of_birth,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Registered user %s (%s)", user.id, user.role)
    return ApiResponse(data=_auth_response(user))


@router.post("/login", response_model=ApiResponse[AuthResponse])
async def login(credentials: LoginRequest, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).where(User.email == credentials.email))
    user = result.scalar_one_or_none()

    if not user or not user.is_active or not verify_password(credentials.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return ApiResponse(data=_auth_response(user))


@router.post("/refresh", response_model=ApiResponse[AuthResponse])
async def refresh(request: RefreshRequest, db: AsyncSession = Depends(get_db)):
    user_id = decode_token(request.refresh_token, "refresh")
    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid or expired token")
    return ApiResponse(data=_auth_response(user))


@router.get("/profile", response_model=ApiResponse[UserResponse])
async def get_profile(current_user: User = Depends(get_current_user)):
    return ApiResponse(data=UserResponse.model_validate(current_user))


@router.post("/change-password", response_model=ApiResponse[None])
async def change_password(
    request: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    # 1. Verify current password
    if not verify_password(request.current_password, current_user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect"
        )

    # 2. Prevent reusing same password
    if verify_password(request.new_password, current_user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="New password must be different"
        )

    current_user.hashed_password = hash_password(request.new_password)
    db.add(current_user)
    await db.commit()

    return ApiResponse(message="Password updated successfully")
