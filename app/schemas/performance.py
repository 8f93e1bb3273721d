from datetime import date, datetime
from typing import List, Literal, Optional
from app.schemas.common import CamelModel
from app.schemas.user import UserResponse, UserSummary
from app.schemas.daily_update import DailyUpdateResponse
from app.schemas.interview import FeedbackResponse, InterviewResponse

class MonthlyProgress(CamelModel):
    month: str  # "YYYY-MM"
    updates: int
    avg_score: float

class PerformanceMetrics(CamelModel):
    total_updates: int
    average_progress_score: float
    update_consistency: float
    current_streak: int
    longest_streak: int
    completed_interviews: int
    average_interview_score: float
    monthly_progress: List[MonthlyProgress]

class PerformanceGoals(CamelModel):
    daily_update_target: int = 22  # roughly the weekdays in a month
    progress_score_target: int = 8
    interview_score_target: int = 7

class Achievement(CamelModel):
    id: str
    title: str
    description: str
    achieved_at: datetime
    type: Literal["streak", "score", "consistency", "interview"]

class InterviewWithFeedback(InterviewResponse):
    feedback: Optional[FeedbackResponse] = None
    interviewer: Optional[UserSummary] = None

class PerformanceReport(CamelModel):
    user: UserResponse
    metrics: PerformanceMetrics
    recent_updates: List[DailyUpdateResponse]
    recent_interviews: List[InterviewWithFeedback]
    goals: PerformanceGoals
    achievements: List[Achievement]

class TeamMemberUser(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    department: Optional[str] = None

class TeamMemberOverview(CamelModel):
    user: TeamMemberUser
    recent_updates: int
    average_score: float
    completed_interviews: int
    last_update_date: Optional[date] = None
