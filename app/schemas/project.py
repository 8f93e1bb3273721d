from pydantic import Field
from datetime import date, datetime
from typing import List, Literal, Optional
from app.schemas.common import CamelModel

ProjectStatus = Literal["planning", "active", "completed", "on-hold"]
ProjectPriority = Literal["low", "medium", "high"]

class ProjectCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    team_members: List[int] = []
    start_date: date
    end_date: Optional[date] = None
    status: ProjectStatus = "planning"
    priority: ProjectPriority = "medium"

class ProjectStatusUpdate(CamelModel):
    status: ProjectStatus

class ProjectResponse(CamelModel):
    id: int
    name: str
    description: str
    manager_id: int
    team_members: List[int] = []
    start_date: date
    end_date: Optional[date] = None
    status: str
    priority: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
