from sqlalchemy import Column, Integer, Float, String, Text, DateTime, ForeignKey, JSON, UniqueConstraint, func
from app.database import Base

INTERVIEW_TYPES = ("technical", "behavioral", "system-design", "general")
INTERVIEW_STATUSES = ("scheduled", "in-progress", "completed", "cancelled")

class MockInterview(Base):
    __tablename__ = "mock_interviews"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    interviewer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    scheduled_by = Column(Integer, ForeignKey("users.id"), nullable=False)  # HR/admin
    scheduled_at = Column(DateTime(timezone=True), nullable=False)
    duration = Column(Integer, nullable=False)  # minutes
    type = Column(String, nullable=False)
    status = Column(String, nullable=False, default="scheduled")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

class InterviewFeedback(Base):
    __tablename__ = "interview_feedback"

    id = Column(Integer, primary_key=True, index=True)
    interview_id = Column(Integer, ForeignKey("mock_interviews.id"), nullable=False, index=True)
    candidate_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    submitted_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    overall_rating = Column(Float, nullable=False)  # 1–10
    ratings = Column(JSON, nullable=True)  # per-category 1–5 scores
    written_feedback = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("interview_id", "submitted_by", name="uq_feedback_interview_submitter"),
    )
