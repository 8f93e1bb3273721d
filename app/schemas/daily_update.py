from pydantic import Field
from datetime import date, datetime
from typing import List, Optional
from app.schemas.common import CamelModel
from app.schemas.user import UserSummary

class DailyUpdateCreate(CamelModel):
    tasks: List[str] = Field(..., min_length=1)
    accomplishments: List[str] = Field(..., min_length=1)
    challenges: List[str] = Field(..., min_length=1)
    next_day_plans: List[str] = Field(..., min_length=1)
    progress_score: int = Field(..., ge=1, le=10)

class DailyUpdateResponse(CamelModel):
    id: int
    user_id: int
    date: date
    tasks: List[str]
    accomplishments: List[str]
    challenges: List[str]
    next_day_plans: List[str]
    progress_score: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class TeamDailyUpdateResponse(DailyUpdateResponse):
    user: UserSummary
