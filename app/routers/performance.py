from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional
from app.database import get_db
from app.core.auth import get_current_user, require_roles
from app.core.errors import ForbiddenError, NotFoundError
from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.performance import PerformanceReport, TeamMemberOverview
from app.services.performance import build_performance_report, build_team_overview

router = APIRouter(prefix="/api/performance", tags=["performance"])


def can_view(viewer: User, target: User) -> bool:
    if viewer.id == target.id or viewer.role in ("hr", "admin"):
        return True
    return viewer.role == "manager" and target.manager_id == viewer.id


@router.get("", response_model=ApiResponse[PerformanceReport])
async def get_performance(
    user_id: Optional[int] = Query(None, alias="userId"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    target = current_user
    if user_id is not None and user_id != current_user.id:
        target = await db.get(User, user_id)
        if not target:
            raise NotFoundError("User not found")

    if not can_view(current_user, target):
        raise ForbiddenError("Access denied")

    report = await build_performance_report(db, target)
    return ApiResponse(data=report)


@router.get("/team", response_model=ApiResponse[List[TeamMemberOverview]])
async def get_team_performance(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles("manager", "hr", "admin"))
):
    query = select(User).order_by(User.id)
    if current_user.role == "manager":
        query = query.where(User.manager_id == current_user.id)
    else:
        query = query.where(User.role == "employee")
    members = (await db.execute(query)).scalars().all()

    return ApiResponse(data=await build_team_overview(db, members))
