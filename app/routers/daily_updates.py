from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from datetime import datetime, timezone
from typing import List
from app.database import get_db
from app.core.auth import get_current_user, require_roles
from app.core.errors import ConflictError, ForbiddenError, NotFoundError
from app.models.daily_update import DailyUpdate
from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.daily_update import DailyUpdateCreate, DailyUpdateResponse, TeamDailyUpdateResponse
from app.schemas.user import UserSummary

router = APIRouter(prefix="/api/daily-updates", tags=["daily-updates"])

ALREADY_SUBMITTED = "You have already submitted an update for today"


async def team_member_ids(db: AsyncSession, user: User) -> List[int]:
    """Direct reports for a manager, everyone for other privileged roles."""
    query = select(User.id)
    if user.role == "manager":
        query = query.where(User.manager_id == user.id)
    result = await db.execute(query)
    return [row[0] for row in result.all()]


@router.post("", response_model=ApiResponse[DailyUpdateResponse], status_code=status.HTTP_201_CREATED)
async def create_daily_update(
    update_in: DailyUpdateCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    today = datetime.now(timezone.utc).date()
    existing = await db.execute(
        select(DailyUpdate.id)
        .where(DailyUpdate.user_id == current_user.id)
        .where(DailyUpdate.date == today)
    )
    if existing.scalar_one_or_none():
        raise ConflictError(ALREADY_SUBMITTED)

    update = DailyUpdate(
        user_id=current_user.id,
        date=today,
        tasks=update_in.tasks,
        accomplishments=update_in.accomplishments,
        challenges=update_in.challenges,
        next_day_plans=update_in.next_day_plans,
        progress_score=update_in.progress_score,
    )
    db.add(update)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent submission for the same day
        await db.rollback()
        raise ConflictError(ALREADY_SUBMITTED)
    await db.refresh(update)
    return ApiResponse(data=DailyUpdateResponse.model_validate(update))


@router.get("", response_model=ApiResponse[List[DailyUpdateResponse]])
async def get_my_daily_updates(
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    result = await db.execute(
        select(DailyUpdate)
        .where(DailyUpdate.user_id == current_user.id)
        .order_by(DailyUpdate.date.desc())
        .limit(limit)
    )
    return ApiResponse(data=[DailyUpdateResponse.model_validate(u) for u in result.scalars()])


@router.get("/team", response_model=ApiResponse[List[TeamDailyUpdateResponse]])
async def get_team_daily_updates(
    limit: int = Query(20, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles("manager", "admin"))
):
    member_ids = await team_member_ids(db, current_user)
    result = await db.execute(
        select(DailyUpdate, User)
        .join(User, User.id == DailyUpdate.user_id)
        .where(DailyUpdate.user_id.in_(member_ids))
        .order_by(DailyUpdate.date.desc(), DailyUpdate.id.desc())
        .limit(limit)
    )

    updates = []
    for update, author in result.all():
        item = DailyUpdateResponse.model_validate(update).model_dump()
        item["user"] = UserSummary(
            first_name=author.first_name,
            last_name=author.last_name,
            email=author.email,
        )
        updates.append(TeamDailyUpdateResponse(**item))
    return ApiResponse(data=updates)


@router.get("/{update_id}", response_model=ApiResponse[DailyUpdateResponse])
async def get_daily_update(
    update_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    update = await db.get(DailyUpdate, update_id)
    if not update:
        raise NotFoundError("Daily update not found")

    if update.user_id != current_user.id and current_user.role not in ("manager", "admin"):
        raise ForbiddenError("Access denied")

    return ApiResponse(data=DailyUpdateResponse.model_validate(update))
