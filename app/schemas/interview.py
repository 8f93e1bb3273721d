from pydantic import Field, field_validator, model_validator
from datetime import datetime, timezone
from typing import List, Literal, Optional
from app.schemas.common import CamelModel

InterviewType = Literal["technical", "behavioral", "system-design", "general"]
InterviewStatus = Literal["scheduled", "in-progress", "completed", "cancelled"]

MAX_DURATION_MINUTES = 480

class InterviewCreate(CamelModel):
    candidate_id: int
    interviewer_id: int
    scheduled_at: datetime
    duration: int = Field(..., gt=0, le=MAX_DURATION_MINUTES)  # minutes
    type: InterviewType

class InterviewStatusUpdate(CamelModel):
    status: InterviewStatus

class InterviewResponse(CamelModel):
    id: int
    candidate_id: int
    interviewer_id: int
    scheduled_by: int
    scheduled_at: datetime
    duration: int
    type: str
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("scheduled_at", "created_at", "updated_at")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # sqlite hands back naive values for timezone-aware columns
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

class FeedbackRatings(CamelModel):
    communication: int = Field(..., ge=1, le=5)
    confidence: int = Field(..., ge=1, le=5)
    presence_of_mind: int = Field(..., ge=1, le=5)
    interpersonal_skills: int = Field(..., ge=1, le=5)
    body_gesture: int = Field(..., ge=1, le=5)
    technical_question_handling: int = Field(..., ge=1, le=5)
    coding_elaboration: int = Field(..., ge=1, le=5)
    energy_in_interview: int = Field(..., ge=1, le=5)
    analytical_thinking: int = Field(..., ge=1, le=5)

class FeedbackCreate(CamelModel):
    overall_rating: Optional[float] = Field(None, ge=1, le=10)
    ratings: Optional[FeedbackRatings] = None
    written_feedback: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def require_some_rating(self):
        if self.overall_rating is None and self.ratings is None:
            raise ValueError("Either overallRating or ratings is required")
        return self

class FeedbackResponse(CamelModel):
    id: int
    interview_id: int
    candidate_id: int
    submitted_by: int
    overall_rating: float
    ratings: Optional[FeedbackRatings] = None
    written_feedback: str
    created_at: Optional[datetime] = None

class PendingInterviewResponse(InterviewResponse):
    feedback: List[FeedbackResponse] = []
