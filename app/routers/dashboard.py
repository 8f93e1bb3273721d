from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from app.database import get_db
from app.core.auth import get_current_user, require_roles
from app.core.errors import LeaderboardEntryNotFound
from app.models.daily_update import DailyUpdate
from app.models.interview import MockInterview, InterviewFeedback
from app.models.project import Project
from app.models.user import User
from app.repositories.store import UpdateRecord
from app.routers.projects import load_members, projects_for_user, to_response
from app.schemas.common import ApiResponse
from app.schemas.daily_update import DailyUpdateResponse, TeamDailyUpdateResponse
from app.schemas.dashboard import (
    AdminDashboard, DepartmentStats, EmployeeDashboard, EmployeePerformanceStats,
    HRDashboard, ManagerDashboard, NextBirthday, RecentActivity, SystemStats,
    TeamPerformanceStats,
)
from app.schemas.interview import FeedbackResponse, InterviewResponse
from app.schemas.user import UserResponse, UserSummary
from app.services.leaderboard import LeaderboardService, get_leaderboard_service
from app.services.scoring import average_progress, calculate_streaks, round_one

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

RECENT_ACTIVITY_DAYS = 30


def birthday_in_year(dob: date, year: int) -> date:
    try:
        return dob.replace(year=year)
    except ValueError:
        # Feb 29 in a non-leap year
        return date(year, 2, 28)


def find_next_birthday(people: Iterable[User], today: date) -> Optional[NextBirthday]:
    candidates = []
    for person in people:
        if person.date_of_birth is None:
            continue
        upcoming = birthday_in_year(person.date_of_birth, today.year)
        if upcoming < today:
            upcoming = birthday_in_year(person.date_of_birth, today.year + 1)
        candidates.append((upcoming, person.id, person))

    if not candidates:
        return None
    upcoming, _, person = min(candidates, key=lambda c: (c[0], c[1]))
    return NextBirthday(
        user_id=person.id,
        first_name=person.first_name,
        last_name=person.last_name,
        birthday=upcoming,
        days_until=(upcoming - today).days,
    )


async def count(db: AsyncSession, query) -> int:
    return (await db.execute(query)).scalar_one() or 0


@router.get("/employee", response_model=ApiResponse[EmployeeDashboard])
async def get_employee_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    leaderboard: LeaderboardService = Depends(get_leaderboard_service)
):
    today = datetime.now(timezone.utc).date()

    history = (await db.execute(
        select(DailyUpdate)
        .where(DailyUpdate.user_id == current_user.id)
        .order_by(DailyUpdate.date.desc())
    )).scalars().all()
    recent_updates = history[:5]
    records = [UpdateRecord(user_id=u.user_id, date=u.date, progress_score=u.progress_score) for u in history]

    interviews = (await db.execute(
        select(MockInterview)
        .where(or_(MockInterview.candidate_id == current_user.id, MockInterview.interviewer_id == current_user.id))
        .where(MockInterview.status == "scheduled")
        .order_by(MockInterview.scheduled_at)
    )).scalars().all()

    projects = [p for p in await projects_for_user(db, current_user.id) if p.status == "active"]
    members = await load_members(db, [p.id for p in projects])

    try:
        position = (await leaderboard.rank_for(current_user.id, "monthly")).rank
    except LeaderboardEntryNotFound:
        position = None

    people = (await db.execute(
        select(User).where(User.is_active.is_(True)).where(User.date_of_birth.is_not(None))
    )).scalars().all()

    return ApiResponse(data=EmployeeDashboard(
        user=UserResponse.model_validate(current_user),
        recent_updates=[DailyUpdateResponse.model_validate(u) for u in recent_updates],
        upcoming_interviews=[InterviewResponse.model_validate(i) for i in interviews],
        current_projects=[to_response(p, members[p.id]) for p in projects],
        leaderboard_position=position,
        performance_stats=EmployeePerformanceStats(
            avg_progress_score=round_one(average_progress(records[:5])),
            update_streak=calculate_streaks(records, today).current_streak,
            total_updates=len(history),
        ),
        next_birthday=find_next_birthday(people, today),
    ))


@router.get("/manager", response_model=ApiResponse[ManagerDashboard])
async def get_manager_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles("manager", "admin"))
):
    team = (await db.execute(
        select(User).where(User.manager_id == current_user.id).order_by(User.id)
    )).scalars().all()
    by_id = {member.id: member for member in team}

    recent_updates = []
    if by_id:
        recent_updates = (await db.execute(
            select(DailyUpdate)
            .where(DailyUpdate.user_id.in_(list(by_id)))
            .order_by(DailyUpdate.date.desc(), DailyUpdate.id.desc())
            .limit(10)
        )).scalars().all()

    team_updates = []
    for update in recent_updates:
        author = by_id[update.user_id]
        item = DailyUpdateResponse.model_validate(update).model_dump()
        item["user"] = UserSummary(first_name=author.first_name, last_name=author.last_name)
        team_updates.append(TeamDailyUpdateResponse(**item))

    projects = await projects_for_user(db, current_user.id)
    members = await load_members(db, [p.id for p in projects])
    scores = [UpdateRecord(user_id=u.user_id, date=u.date, progress_score=u.progress_score) for u in recent_updates]

    return ApiResponse(data=ManagerDashboard(
        user=UserResponse.model_validate(current_user),
        team_members=[UserResponse.model_validate(m) for m in team],
        recent_team_updates=team_updates,
        team_projects=[to_response(p, members[p.id]) for p in projects],
        team_performance_stats=TeamPerformanceStats(
            team_size=len(team),
            avg_team_score=round_one(average_progress(scores)),
            active_projects=sum(1 for p in projects if p.status == "active"),
        ),
    ))


@router.get("/hr", response_model=ApiResponse[HRDashboard])
async def get_hr_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles("hr", "admin"))
):
    scheduled = (await db.execute(
        select(MockInterview)
        .where(MockInterview.status == "scheduled")
        .order_by(MockInterview.scheduled_at)
    )).scalars().all()

    feedback = (await db.execute(
        select(InterviewFeedback)
        .order_by(InterviewFeedback.created_at.desc(), InterviewFeedback.id.desc())
        .limit(5)
    )).scalars().all()

    employees = await count(db, select(func.count(User.id)).where(User.role == "employee"))
    completed = await count(db, select(func.count(MockInterview.id)).where(MockInterview.status == "completed"))

    return ApiResponse(data=HRDashboard(
        user=UserResponse.model_validate(current_user),
        scheduled_interviews=[InterviewResponse.model_validate(i) for i in scheduled],
        recent_feedback=[FeedbackResponse.model_validate(f) for f in feedback],
        department_stats=DepartmentStats(
            total_employees=employees,
            pending_interviews=len(scheduled),
            completed_interviews=completed,
        ),
    ))


@router.get("/admin", response_model=ApiResponse[AdminDashboard])
async def get_admin_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles("admin"))
):
    since = datetime.now(timezone.utc) - timedelta(days=RECENT_ACTIVITY_DAYS)

    system_stats = SystemStats(
        total_users=await count(db, select(func.count(User.id))),
        active_users=await count(db, select(func.count(User.id)).where(User.is_active.is_(True))),
        total_projects=await count(db, select(func.count(Project.id))),
        pending_interviews=await count(
            db, select(func.count(MockInterview.id)).where(MockInterview.status == "scheduled")
        ),
    )
    recent_activity = RecentActivity(
        new_users=await count(db, select(func.count(User.id)).where(User.created_at >= since)),
        new_updates=await count(db, select(func.count(DailyUpdate.id)).where(DailyUpdate.date >= since.date())),
        completed_interviews=await count(
            db,
            select(func.count(MockInterview.id))
            .where(MockInterview.status == "completed")
            .where(func.coalesce(MockInterview.updated_at, MockInterview.created_at) >= since),
        ),
    )

    return ApiResponse(data=AdminDashboard(
        user=UserResponse.model_validate(current_user),
        system_stats=system_stats,
        recent_activity=recent_activity,
    ))
