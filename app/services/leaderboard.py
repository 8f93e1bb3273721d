"""
Leaderboard aggregation.

For a scoring period every active employee gets a composite score built
from four sub-metrics (see ``app.services.scoring``), then the whole list is
ranked. Entries are derived per request and never persisted.

Reads for all employees are fanned out with ``asyncio.gather`` and awaited
together. The contract is all-or-nothing: if any read fails, the exception
propagates and no partial leaderboard is returned.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import Depends

from app.config import settings
from app.core.errors import LeaderboardEntryNotFound
from app.repositories.store import EmployeeRecord, PerformanceStore, get_performance_store
from app.services.scoring import (
    Period,
    average_progress,
    composite_score,
    count_work_days,
    mean_rating,
    period_start,
    project_contribution,
    rank_entries,
    round_one,
    update_consistency,
)

logger = logging.getLogger(__name__)


@dataclass
class LeaderboardEntry:
    user_id: int
    first_name: str
    last_name: str
    department: str
    total_score: float
    update_consistency: float
    average_progress_score: float
    interview_performance: float
    project_contributions: float
    last_updated: datetime
    rank: int = 0


@dataclass
class Leaderboard:
    period: str
    generated_at: datetime
    entries: list[LeaderboardEntry] = field(default_factory=list)


class LeaderboardService:
    def __init__(self, store: PerformanceStore, update_limit: int = 100):
        self._store = store
        self._update_limit = update_limit

    async def build(self, period: Period = "monthly", now: Optional[datetime] = None) -> Leaderboard:
        now = now or datetime.now(timezone.utc)
        window_start = period_start(period, now).date()
        window_end = now.date()
        work_days = count_work_days(window_start, window_end)

        employees = await self._store.list_active_employees()
        entries = await asyncio.gather(*(
            self._score(employee, window_start, window_end, work_days, now)
            for employee in employees
        ))

        ranked = rank_entries(entries)
        logger.debug(
            "Built %s leaderboard: %d entries, window %s..%s (%d work days)",
            period, len(ranked), window_start, window_end, work_days,
        )
        return Leaderboard(period=period, generated_at=now, entries=ranked)

    async def rank_for(
        self, user_id: int, period: Period = "monthly", now: Optional[datetime] = None
    ) -> LeaderboardEntry:
        """Entry for a single user. Builds the full leaderboard to do so."""
        leaderboard = await self.build(period, now)
        for entry in leaderboard.entries:
            if entry.user_id == user_id:
                return entry
        raise LeaderboardEntryNotFound()

    async def _score(
        self,
        employee: EmployeeRecord,
        window_start: date,
        window_end: date,
        work_days: int,
        now: datetime,
    ) -> LeaderboardEntry:
        updates, interview_rating, active_projects = await asyncio.gather(
            self._store.get_daily_updates(employee.id, self._update_limit),
            self._interview_performance(employee.id),
            self._store.count_active_projects(employee.id),
        )

        in_window = [u for u in updates if window_start <= u.date <= window_end]
        avg_progress = average_progress(in_window)
        consistency = update_consistency(len(in_window), work_days)
        projects = project_contribution(active_projects)

        return LeaderboardEntry(
            user_id=employee.id,
            first_name=employee.first_name,
            last_name=employee.last_name,
            department=employee.department,
            total_score=composite_score(avg_progress, consistency, interview_rating, projects),
            update_consistency=round_one(consistency),
            average_progress_score=round_one(avg_progress),
            interview_performance=round_one(interview_rating),
            project_contributions=round_one(projects),
            last_updated=now,
        )

    async def _interview_performance(self, user_id: int) -> float:
        """Mean overall rating across completed interviews that have feedback."""
        interviews = await self._store.get_interviews(user_id)
        completed = [i for i in interviews if i.status == "completed"]
        ratings = await asyncio.gather(*(
            self._store.get_feedback_rating(interview.id) for interview in completed
        ))
        return mean_rating([r for r in ratings if r is not None])


def get_leaderboard_service(
    store: PerformanceStore = Depends(get_performance_store),
) -> LeaderboardService:
    return LeaderboardService(store, update_limit=settings.LEADERBOARD_UPDATE_LIMIT)
