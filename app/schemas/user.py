from pydantic import EmailStr, Field
from typing import Literal, Optional
from datetime import date, datetime
from app.schemas.common import CamelModel

Role = Literal["admin", "hr", "manager", "employee", "interviewer"]

class UserCreate(CamelModel):
    """Self-registration. Role and manager are assigned by an admin afterwards."""
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    department: Optional[str] = None
    date_of_birth: Optional[date] = None

class AdminUserCreate(UserCreate):
    role: Role = "employee"
    manager_id: Optional[int] = None

class UserUpdate(CamelModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[Role] = None
    department: Optional[str] = None
    manager_id: Optional[int] = None
    date_of_birth: Optional[date] = None
    is_active: Optional[bool] = None

class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=72)

class RefreshRequest(CamelModel):
    refresh_token: str

class UserResponse(CamelModel):
    id: int
    email: EmailStr
    first_name: str
    last_name: str
    role: str
    department: Optional[str] = None
    manager_id: Optional[int] = None
    date_of_birth: Optional[date] = None
    is_active: bool
    created_at: Optional[datetime] = None

class UserSummary(CamelModel):
    first_name: str
    last_name: str
    email: Optional[str] = None

class AuthResponse(CamelModel):
    token: str
    refresh_token: str
    user: UserResponse

class RoleBreakdown(CamelModel):
    admin: int = 0
    hr: int = 0
    manager: int = 0
    employee: int = 0
    interviewer: int = 0

class UserStats(CamelModel):
    total_users: int
    active_users: int
    new_users_last_30_days: int
    role_breakdown: RoleBreakdown

class InterviewerOption(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    department: str
    role: str
