import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from datetime import datetime, timedelta, timezone
from typing import List
from app.database import get_db
from app.core.auth import get_current_user, require_roles
from app.core.errors import ConflictError, ForbiddenError, NotFoundError
from app.models.interview import MockInterview, InterviewFeedback
from app.models.user import User
from app.schemas.user import InterviewerOption
from app.schemas.common import ApiResponse
from app.schemas.interview import (
    MAX_DURATION_MINUTES, InterviewCreate, InterviewResponse, InterviewStatusUpdate,
    FeedbackCreate, FeedbackResponse, PendingInterviewResponse,
)
from app.services.scoring import round_one

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/interviews", tags=["interviews"])

PRIVILEGED = ("hr", "admin")


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def resolve_overall_rating(feedback_in: FeedbackCreate) -> float:
    """Explicit overall rating, or the 1–5 category mean scaled to 1–10."""
    if feedback_in.overall_rating is not None:
        return feedback_in.overall_rating
    scores = list(feedback_in.ratings.model_dump().values())
    return round_one(sum(scores) / len(scores) * 2)


def overlaps(existing: MockInterview, start: datetime, length: timedelta) -> bool:
    """True when ``existing`` shares any time with ``[start, start + length)``."""
    existing_start = as_utc(existing.scheduled_at)
    return existing_start < start + length and existing_start + timedelta(minutes=existing.duration) > start


async def get_interview_or_404(db: AsyncSession, interview_id: int) -> MockInterview:
    interview = await db.get(MockInterview, interview_id)
    if not interview:
        raise NotFoundError("Interview not found")
    return interview


def is_participant(user: User, interview: MockInterview) -> bool:
    return user.id in (interview.candidate_id, interview.interviewer_id, interview.scheduled_by)


@router.post("", response_model=ApiResponse[InterviewResponse], status_code=status.HTTP_201_CREATED)
async def schedule_interview(
    interview_in: InterviewCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*PRIVILEGED))
):
    candidate = await db.get(User, interview_in.candidate_id)
    interviewer = await db.get(User, interview_in.interviewer_id)
    if not candidate or not interviewer:
        raise NotFoundError("Candidate or interviewer not found")

    if candidate.role != "employee" or interviewer.role not in ("employee", "manager"):
        raise HTTPException(
            400, "Candidates must be employees and interviewers must be employees or managers"
        )

    # Interviewer must be free around the requested slot
    start = as_utc(interview_in.scheduled_at)
    length = timedelta(minutes=interview_in.duration)
    nearby = await db.execute(
        select(MockInterview)
        .where(MockInterview.interviewer_id == interviewer.id)
        .where(MockInterview.status != "cancelled")
        .where(MockInterview.scheduled_at > start - timedelta(minutes=MAX_DURATION_MINUTES))
        .where(MockInterview.scheduled_at < start + length)
    )
    if any(overlaps(existing, start, length) for existing in nearby.scalars()):
        raise ConflictError("Interviewer is not available at the scheduled time")

    interview = MockInterview(
        candidate_id=candidate.id,
        interviewer_id=interviewer.id,
        scheduled_by=current_user.id,
        scheduled_at=start,
        duration=interview_in.duration,
        type=interview_in.type,
        status="scheduled",
    )
    db.add(interview)
    await db.commit()
    await db.refresh(interview)
    logger.info("Interview %s scheduled for candidate %s", interview.id, candidate.id)
    return ApiResponse(data=InterviewResponse.model_validate(interview))


@router.get("", response_model=ApiResponse[List[InterviewResponse]])
async def list_interviews(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    query = select(MockInterview)
    if current_user.role not in PRIVILEGED:
        query = query.where(or_(
            MockInterview.candidate_id == current_user.id,
            MockInterview.interviewer_id == current_user.id,
            MockInterview.scheduled_by == current_user.id,
        ))
    result = await db.execute(query.order_by(MockInterview.scheduled_at.desc()).limit(50))
    return ApiResponse(data=[InterviewResponse.model_validate(i) for i in result.scalars()])


@router.get("/pending", response_model=ApiResponse[List[PendingInterviewResponse]])
async def pending_interviews(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*PRIVILEGED))
):
    result = await db.execute(
        select(MockInterview)
        .where(MockInterview.status == "scheduled")
        .order_by(MockInterview.scheduled_at)
    )
    interviews = result.scalars().all()

    pending = []
    for interview in interviews:
        feedback = await db.execute(
            select(InterviewFeedback).where(InterviewFeedback.interview_id == interview.id)
        )
        item = PendingInterviewResponse.model_validate(interview)
        item.feedback = [FeedbackResponse.model_validate(f) for f in feedback.scalars()]
        pending.append(item)
    return ApiResponse(data=pending)


@router.get("/available-interviewers", response_model=ApiResponse[List[InterviewerOption]])
async def available_interviewers(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*PRIVILEGED))
):
    """Active employees and managers who can sit on an interview panel."""
    result = await db.execute(
        select(User)
        .where(User.role.in_(("employee", "manager")))
        .where(User.is_active.is_(True))
        .order_by(User.first_name, User.last_name)
    )
    options = [
        InterviewerOption(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            department=user.department or "General",
            role=user.role,
        )
        for user in result.scalars()
    ]
    return ApiResponse(data=options)


@router.patch("/{interview_id}/status", response_model=ApiResponse[InterviewResponse])
async def update_interview_status(
    interview_id: int,
    status_in: InterviewStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    interview = await get_interview_or_404(db, interview_id)
    if current_user.role not in PRIVILEGED and current_user.id != interview.interviewer_id:
        raise ForbiddenError("Only HR, admin, or the interviewer can update the status")

    interview.status = status_in.status
    interview.updated_at = datetime.now(timezone.utc)
    db.add(interview)
    await db.commit()
    await db.refresh(interview)
    return ApiResponse(data=InterviewResponse.model_validate(interview))


@router.post(
    "/{interview_id}/feedback",
    response_model=ApiResponse[FeedbackResponse],
    status_code=status.HTTP_201_CREATED,
)
async def submit_feedback(
    interview_id: int,
    feedback_in: FeedbackCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    interview = await get_interview_or_404(db, interview_id)
    if current_user.role not in PRIVILEGED and current_user.id not in (
        interview.interviewer_id, interview.candidate_id
    ):
        raise ForbiddenError("Only interviewers, candidates, HR, or admin can submit feedback")

    existing = await db.execute(
        select(InterviewFeedback.id)
        .where(InterviewFeedback.interview_id == interview.id)
        .where(InterviewFeedback.submitted_by == current_user.id)
    )
    if existing.scalar_one_or_none():
        raise ConflictError("Feedback already submitted for this interview")

    feedback = InterviewFeedback(
        interview_id=interview.id,
        candidate_id=interview.candidate_id,
        submitted_by=current_user.id,
        overall_rating=resolve_overall_rating(feedback_in),
        ratings=feedback_in.ratings.model_dump() if feedback_in.ratings else None,
        written_feedback=feedback_in.written_feedback,
    )
    db.add(feedback)
    await db.commit()
    await db.refresh(feedback)
    return ApiResponse(data=FeedbackResponse.model_validate(feedback))


@router.get("/{interview_id}/feedback", response_model=ApiResponse[List[FeedbackResponse]])
async def get_interview_feedback(
    interview_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    interview = await get_interview_or_404(db, interview_id)
    if current_user.role not in PRIVILEGED and not is_participant(current_user, interview):
        raise ForbiddenError("Access denied")

    result = await db.execute(
        select(InterviewFeedback)
        .where(InterviewFeedback.interview_id == interview.id)
        .order_by(InterviewFeedback.created_at)
    )
    return ApiResponse(data=[FeedbackResponse.model_validate(f) for f in result.scalars()])
