"""
Leaderboard router.

GET /api/leaderboard        ranked entries for every active employee
GET /api/leaderboard/rank   the caller's own entry
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_user
from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.leaderboard import LeaderboardEntryResponse, LeaderboardResponse, LeaderboardUser
from app.services.leaderboard import (
    Leaderboard,
    LeaderboardEntry,
    LeaderboardService,
    get_leaderboard_service,
)
from app.services.scoring import Period

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])

PERIOD_QUERY = Query(
    default="monthly",
    description="Trailing window: weekly (7 days), monthly (1 month) or quarterly (3 months).",
)


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def entry_to_response(entry: LeaderboardEntry) -> LeaderboardEntryResponse:
    return LeaderboardEntryResponse(
        user_id=entry.user_id,
        user=LeaderboardUser(
            first_name=entry.first_name,
            last_name=entry.last_name,
            department=entry.department,
        ),
        total_score=entry.total_score,
        rank=entry.rank,
        update_consistency=entry.update_consistency,
        average_progress_score=entry.average_progress_score,
        interview_performance=entry.interview_performance,
        project_contributions=entry.project_contributions,
        last_updated=entry.last_updated,
    )


def leaderboard_to_response(leaderboard: Leaderboard) -> LeaderboardResponse:
    return LeaderboardResponse(
        entries=[entry_to_response(e) for e in leaderboard.entries],
        period=leaderboard.period,
        generated_at=leaderboard.generated_at,
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=ApiResponse[LeaderboardResponse],
    summary="Ranked performance leaderboard",
)
async def get_leaderboard(
    period: Period = PERIOD_QUERY,
    current_user: User = Depends(get_current_user),
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    """
    Score every active employee over the trailing period and rank them.

    ``totalScore`` blends average progress (40%), update consistency (30%),
    interview rating (20%) and active project involvement (10%). Ties are
    broken by user id so the ordering is reproducible.
    """
    leaderboard = await service.build(period)
    return ApiResponse(data=leaderboard_to_response(leaderboard))


@router.get(
    "/rank",
    response_model=ApiResponse[LeaderboardEntryResponse],
    summary="The caller's leaderboard entry",
    responses={404: {"description": "Caller is not an active employee."}},
)
async def get_my_rank(
    period: Period = PERIOD_QUERY,
    current_user: User = Depends(get_current_user),
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    entry = await service.rank_for(current_user.id, period)
    return ApiResponse(data=entry_to_response(entry))
