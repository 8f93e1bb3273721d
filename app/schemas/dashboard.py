from datetime import date
from typing import List, Optional
from app.schemas.common import CamelModel
from app.schemas.user import UserResponse
from app.schemas.daily_update import DailyUpdateResponse, TeamDailyUpdateResponse
from app.schemas.interview import FeedbackResponse, InterviewResponse
from app.schemas.project import ProjectResponse

class NextBirthday(CamelModel):
    user_id: int
    first_name: str
    last_name: str
    birthday: date
    days_until: int

class EmployeePerformanceStats(CamelModel):
    avg_progress_score: float
    update_streak: int
    total_updates: int

class EmployeeDashboard(CamelModel):
    user: UserResponse
    recent_updates: List[DailyUpdateResponse]
    upcoming_interviews: List[InterviewResponse]
    current_projects: List[ProjectResponse]
    leaderboard_position: Optional[int] = None
    performance_stats: EmployeePerformanceStats
    next_birthday: Optional[NextBirthday] = None

class TeamPerformanceStats(CamelModel):
    team_size: int
    avg_team_score: float
    active_projects: int

class ManagerDashboard(CamelModel):
    user: UserResponse
    team_members: List[UserResponse]
    recent_team_updates: List[TeamDailyUpdateResponse]
    team_projects: List[ProjectResponse]
    team_performance_stats: TeamPerformanceStats

class DepartmentStats(CamelModel):
    total_employees: int
    pending_interviews: int
    completed_interviews: int

class HRDashboard(CamelModel):
    user: UserResponse
    scheduled_interviews: List[InterviewResponse]
    recent_feedback: List[FeedbackResponse]
    department_stats: DepartmentStats

class SystemStats(CamelModel):
    total_users: int
    active_users: int
    total_projects: int
    pending_interviews: int

class RecentActivity(CamelModel):
    new_users: int
    new_updates: int
    completed_interviews: int

class AdminDashboard(CamelModel):
    user: UserResponse
    system_stats: SystemStats
    recent_activity: RecentActivity
