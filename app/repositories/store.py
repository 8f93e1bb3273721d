"""
Read-side repository over users, daily updates, interviews and projects.

The leaderboard depends only on the ``PerformanceStore`` interface. The
SQLAlchemy implementation is injected per request, and tests substitute an
in-memory one.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.database import AsyncSessionLocal
from app.models.daily_update import DailyUpdate
from app.models.interview import InterviewFeedback, MockInterview
from app.models.project import Project, project_members
from app.models.user import User


# ---------------------------------------------------------------------------
# Records (plain dataclasses, detached from the ORM)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EmployeeRecord:
    id: int
    first_name: str
    last_name: str
    department: str


@dataclass(frozen=True)
class UpdateRecord:
    user_id: int
    date: date
    progress_score: int


@dataclass(frozen=True)
class InterviewRecord:
    id: int
    candidate_id: int
    status: str
    scheduled_at: datetime


# ---------------------------------------------------------------------------
# Interface
# ---------------------------------------------------------------------------

class PerformanceStore(ABC):
    """Everything the scoring layer is allowed to read."""

    @abstractmethod
    async def list_active_employees(self) -> list[EmployeeRecord]:
        """Active users with role ``employee``, ordered by id."""

    @abstractmethod
    async def get_daily_updates(self, user_id: int, limit: int = 100) -> list[UpdateRecord]:
        """Up to ``limit`` most recent updates, newest first."""

    @abstractmethod
    async def get_interviews(self, user_id: int) -> list[InterviewRecord]:
        """Interviews in which ``user_id`` is the candidate."""

    @abstractmethod
    async def get_feedback_rating(self, interview_id: int) -> Optional[float]:
        """Mean overall rating from reviewers other than the candidate, None if there is none."""

    @abstractmethod
    async def count_active_projects(self, user_id: int) -> int:
        """Active projects the user manages or is a member of."""


# ---------------------------------------------------------------------------
# SQLAlchemy implementation
# ---------------------------------------------------------------------------

class SqlPerformanceStore(PerformanceStore):
    """
    Every read opens its own session so callers may gather reads
    concurrently; an AsyncSession must never be shared between tasks.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def list_active_employees(self) -> list[EmployeeRecord]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(User)
                .where(User.is_active.is_(True))
                .where(User.role == "employee")
                .order_by(User.id)
            )
            return [
                EmployeeRecord(
                    id=user.id,
                    first_name=user.first_name,
                    last_name=user.last_name,
                    department=user.department or "Unknown",
                )
                for user in result.scalars().all()
            ]

    async def get_daily_updates(self, user_id: int, limit: int = 100) -> list[UpdateRecord]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(DailyUpdate.user_id, DailyUpdate.date, DailyUpdate.progress_score)
                .where(DailyUpdate.user_id == user_id)
                .order_by(DailyUpdate.date.desc())
                .limit(limit)
            )
            return [
                UpdateRecord(user_id=row.user_id, date=row.date, progress_score=row.progress_score)
                for row in result.all()
            ]

    async def get_interviews(self, user_id: int) -> list[InterviewRecord]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(MockInterview)
                .where(MockInterview.candidate_id == user_id)
                .order_by(MockInterview.scheduled_at.desc())
            )
            return [
                InterviewRecord(
                    id=interview.id,
                    candidate_id=interview.candidate_id,
                    status=interview.status,
                    scheduled_at=interview.scheduled_at,
                )
                for interview in result.scalars().all()
            ]

    async def get_feedback_rating(self, interview_id: int) -> Optional[float]:
        """Mean rating from reviewers. A candidate's self-assessment is not scored."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(func.avg(InterviewFeedback.overall_rating))
                .where(InterviewFeedback.interview_id == interview_id)
                .where(InterviewFeedback.submitted_by != InterviewFeedback.candidate_id)
            )
            rating = result.scalar_one()
            return float(rating) if rating is not None else None

    async def count_active_projects(self, user_id: int) -> int:
        member_of = select(project_members.c.project_id).where(project_members.c.user_id == user_id)
        async with self._session_factory() as session:
            result = await session.execute(
                select(func.count(Project.id))
                .where(Project.status == "active")
                .where(or_(Project.manager_id == user_id, Project.id.in_(member_of)))
            )
            return result.scalar_one() or 0


def get_performance_store() -> PerformanceStore:
    return SqlPerformanceStore(AsyncSessionLocal)
