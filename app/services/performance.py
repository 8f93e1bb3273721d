from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from app.models.daily_update import DailyUpdate
from app.models.interview import MockInterview, InterviewFeedback
from app.models.user import User
from app.repositories.store import UpdateRecord
from app.schemas.daily_update import DailyUpdateResponse
from app.schemas.interview import FeedbackResponse
from app.schemas.performance import (
    Achievement, InterviewWithFeedback, MonthlyProgress, PerformanceGoals,
    PerformanceMetrics, PerformanceReport, TeamMemberOverview, TeamMemberUser,
)
from app.schemas.user import UserResponse, UserSummary
from app.services.scoring import (
    average_progress, calculate_streaks, count_work_days, mean_rating,
    round_one, update_consistency,
)

HISTORY_LIMIT = 100
CONSISTENCY_WINDOW_DAYS = 30
MONTHS_SHOWN = 6

def _records(updates: Sequence[DailyUpdate]) -> List[UpdateRecord]:
    return [UpdateRecord(user_id=u.user_id, date=u.date, progress_score=u.progress_score) for u in updates]

async def get_recent_updates(db: AsyncSession, user_id: int, limit: int) -> List[DailyUpdate]:
    result = await db.execute(
        select(DailyUpdate)
        .where(DailyUpdate.user_id == user_id)
        .order_by(DailyUpdate.date.desc())
        .limit(limit)
    )
    return list(result.scalars().all())

async def get_completed_interviews(db: AsyncSession, candidate_id: int) -> List[MockInterview]:
    result = await db.execute(
        select(MockInterview)
        .where(MockInterview.candidate_id == candidate_id)
        .where(MockInterview.status == "completed")
        .order_by(MockInterview.scheduled_at.desc())
    )
    return list(result.scalars().all())

def calculate_monthly_progress(updates: Sequence[UpdateRecord]) -> List[MonthlyProgress]:
    """Update count and average score per month, newest month first."""
    buckets = defaultdict(list)
    for update in updates:
        buckets[update.date.strftime("%Y-%m")].append(update.progress_score)

    months = sorted(buckets, reverse=True)[:MONTHS_SHOWN]
    return [
        MonthlyProgress(
            month=month,
            updates=len(buckets[month]),
            avg_score=round_one(sum(buckets[month]) / len(buckets[month])),
        )
        for month in months
    ]

def generate_achievements(
    metrics: PerformanceMetrics, completed_interviews: int, achieved_at: datetime
) -> List[Achievement]:
    achievements = []

    if metrics.current_streak >= 7:
        achievements.append(Achievement(
            id="streak-7", title="Week Warrior",
            description="Maintained a 7-day update streak",
            achieved_at=achieved_at, type="streak",
        ))
    if metrics.longest_streak >= 30:
        achievements.append(Achievement(
            id="streak-30", title="Month Master",
            description="Achieved a 30-day update streak",
            achieved_at=achieved_at, type="streak",
        ))
    if metrics.average_progress_score >= 8:
        achievements.append(Achievement(
            id="high-performer", title="High Performer",
            description="Maintained an average progress score of 8+",
            achieved_at=achieved_at, type="score",
        ))
    if metrics.update_consistency >= 90:
        achievements.append(Achievement(
            id="consistent-performer", title="Consistent Performer",
            description="Achieved 90%+ update consistency",
            achieved_at=achieved_at, type="consistency",
        ))
    if completed_interviews >= 3:
        achievements.append(Achievement(
            id="interview-veteran", title="Interview Veteran",
            description="Completed 3+ mock interviews",
            achieved_at=achieved_at, type="interview",
        ))

    return achievements

async def build_performance_report(
    db: AsyncSession, target_user: User, now: Optional[datetime] = None
) -> PerformanceReport:
    now = now or datetime.now(timezone.utc)
    today = now.date()

    updates = await get_recent_updates(db, target_user.id, HISTORY_LIMIT)
    records = _records(updates)

    # Consistency over the last 30 days
    window_start = today - timedelta(days=CONSISTENCY_WINDOW_DAYS)
    recent = [r for r in records if window_start <= r.date <= today]
    consistency = update_consistency(len(recent), count_work_days(window_start, today))

    streaks = calculate_streaks(records, today)

    completed = await get_completed_interviews(db, target_user.id)
    recent_interviews = []
    ratings = []
    for interview in completed:
        feedback_result = await db.execute(
            select(InterviewFeedback)
            .where(InterviewFeedback.interview_id == interview.id)
            .order_by(InterviewFeedback.created_at.desc(), InterviewFeedback.id.desc())
        )
        feedback = feedback_result.scalars().all()
        # same rule as the leaderboard: reviewer feedback only, averaged per interview
        scored = [f.overall_rating for f in feedback if f.submitted_by != f.candidate_id]
        if scored:
            ratings.append(mean_rating(scored))

        interviewer = await db.get(User, interview.interviewer_id)
        item = InterviewWithFeedback.model_validate(interview)
        if feedback:
            item.feedback = FeedbackResponse.model_validate(feedback[0])
        if interviewer:
            item.interviewer = UserSummary(first_name=interviewer.first_name, last_name=interviewer.last_name)
        recent_interviews.append(item)

    metrics = PerformanceMetrics(
        total_updates=len(records),
        average_progress_score=round_one(average_progress(records)),
        update_consistency=round_one(consistency),
        current_streak=streaks.current_streak,
        longest_streak=streaks.longest_streak,
        completed_interviews=len(completed),
        average_interview_score=round_one(mean_rating(ratings)),
        monthly_progress=calculate_monthly_progress(records),
    )

    return PerformanceReport(
        user=UserResponse.model_validate(target_user),
        metrics=metrics,
        recent_updates=[DailyUpdateResponse.model_validate(u) for u in updates[:10]],
        recent_interviews=recent_interviews[:5],
        goals=PerformanceGoals(),
        achievements=generate_achievements(metrics, len(completed), now),
    )

async def build_team_overview(db: AsyncSession, members: Sequence[User]) -> List[TeamMemberOverview]:
    overview = []
    for member in members:
        updates = await get_recent_updates(db, member.id, 30)
        completed = await db.execute(
            select(func.count(MockInterview.id))
            .where(MockInterview.candidate_id == member.id)
            .where(MockInterview.status == "completed")
        )
        overview.append(TeamMemberOverview(
            user=TeamMemberUser(
                id=member.id,
                first_name=member.first_name,
                last_name=member.last_name,
                email=member.email,
                department=member.department,
            ),
            recent_updates=len(updates),
            average_score=round_one(average_progress(_records(updates))),
            completed_interviews=completed.scalar_one() or 0,
            last_update_date=updates[0].date if updates else None,
        ))
    return overview
