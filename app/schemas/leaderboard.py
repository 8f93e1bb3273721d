from datetime import datetime
from typing import List
from app.schemas.common import CamelModel

class LeaderboardUser(CamelModel):
    first_name: str
    last_name: str
    department: str

class LeaderboardEntryResponse(CamelModel):
    user_id: int
    user: LeaderboardUser
    total_score: float
    rank: int
    update_consistency: float
    average_progress_score: float
    interview_performance: float
    project_contributions: float
    last_updated: datetime

class LeaderboardResponse(CamelModel):
    entries: List[LeaderboardEntryResponse]
    period: str
    generated_at: datetime
