# app/routers/users.py
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from app.database import get_db
from app.core.auth import require_roles
from app.core.errors import ConflictError, NotFoundError
from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.user import (
    AdminUserCreate, UserUpdate, UserResponse, UserStats, RoleBreakdown, Role,
)
from app.utils.password import hash_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])

NEW_USER_WINDOW_DAYS = 30
NOT_NULLABLE = ("first_name", "last_name", "role", "is_active")


async def get_user_or_404(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


async def check_manager(db: AsyncSession, manager_id: Optional[int]) -> None:
    if manager_id is None:
        return
    manager = await db.get(User, manager_id)
    if manager is None or manager.role != "manager" or not manager.is_active:
        raise HTTPException(400, "Manager must be an active user with the manager role")


@router.get("", response_model=ApiResponse[List[UserResponse]])
async def list_users(
    role: Optional[Role] = Query(None),
    active: Optional[bool] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles("admin", "hr"))
):
    query = select(User)
    if role is not None:
        query = query.where(User.role == role)
    if active is not None:
        query = query.where(User.is_active.is_(active))
    result = await db.execute(query.order_by(User.first_name, User.last_name, User.id))
    return ApiResponse(data=[UserResponse.model_validate(u) for u in result.scalars()])


@router.get("/stats", response_model=ApiResponse[UserStats])
async def user_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles("admin", "hr"))
):
    result = await db.execute(select(User.role, User.is_active, User.created_at))
    rows = result.all()

    since = datetime.now(timezone.utc) - timedelta(days=NEW_USER_WINDOW_DAYS)
    breakdown = RoleBreakdown()
    recent = 0
    for role, _, created_at in rows:
        if hasattr(breakdown, role):
            setattr(breakdown, role, getattr(breakdown, role) + 1)
        if created_at is not None:
            if created_at.tzinfo is None:
                created_at = created_at.replace(tzinfo=timezone.utc)
            if created_at >= since:
                recent += 1

    return ApiResponse(data=UserStats(
        total_users=len(rows),
        active_users=sum(1 for _, is_active, _ in rows if is_active),
        new_users_last_30_days=recent,
        role_breakdown=breakdown,
    ))


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles("admin", "hr"))
):
    user = await get_user_or_404(db, user_id)
    return ApiResponse(data=UserResponse.model_validate(user))


@router.post("", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
async def create_user(
    user_in: AdminUserCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles("admin"))
):
    existing = await db.execute(select(User).where(User.email == user_in.email))
    if existing.scalar_one_or_none():
        raise ConflictError("User already exists with this email")
    await check_manager(db, user_in.manager_id)

    user = User(
        email=user_in.email,
        hashed_password=hash_password(user_in.password),
        first_name=user_in.first_name,
        last_name=user_in.last_name,
        role=user_in.role,
        department=user_in.department,
        manager_id=user_in.manager_id,
        date_of_birth=user_in.date_of_birth,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("User %s created user %s (%s)", current_user.id, user.id, user.role)
    return ApiResponse(data=UserResponse.model_validate(user), message="User created successfully")


@router.patch("/{user_id}", response_model=ApiResponse[UserResponse])
async def update_user(
    user_id: int,
    user_in: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles("admin"))
):
    user = await get_user_or_404(db, user_id)
    changes = user_in.model_dump(exclude_unset=True)

    cleared = sorted(f for f in NOT_NULLABLE if f in changes and changes[f] is None)
    if cleared:
        raise HTTPException(400, f"Fields cannot be cleared: {cleared}")
    if "manager_id" in changes:
        if changes["manager_id"] == user.id:
            raise HTTPException(400, "A user cannot be their own manager")
        await check_manager(db, changes["manager_id"])
    if user.id == current_user.id and (
        changes.get("is_active") is False or changes.get("role", "admin") != "admin"
    ):
        raise HTTPException(400, "You cannot demote or deactivate your own account")

    for field, value in changes.items():
        setattr(user, field, value)
    await db.commit()
    await db.refresh(user)
    logger.info("User %s updated user %s: %s", current_user.id, user.id, sorted(changes))
    return ApiResponse(data=UserResponse.model_validate(user), message="User updated successfully")


@router.delete("/{user_id}", response_model=ApiResponse[UserResponse])
async def deactivate_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles("admin"))
):
    """Deactivate rather than delete: updates, interviews and projects keep their history."""
    user = await get_user_or_404(db, user_id)
    if user.id == current_user.id:
        raise HTTPException(400, "You cannot deactivate your own account")

    user.is_active = False
    await db.commit()
    await db.refresh(user)
    logger.info("User %s deactivated user %s", current_user.id, user.id)
    return ApiResponse(data=UserResponse.model_validate(user), message="User deactivated successfully")
