"""
Performance scoring arithmetic.

Shared by the leaderboard, the per-user performance report and the employee
dashboard. Every function here is pure: callers pass already-fetched
records plus an explicit ``today``/``now``, so results are reproducible.

Composite score
---------------
    total = avg_progress * 0.4
          + (consistency / 10) * 0.3
          + interview_rating * 0.2
          + project_contribution * 0.1

Each input is bounded to 0–10 (consistency to 0–100, scaled down by 10) and
the weights sum to 1.0, so ``total`` is bounded to 0–10 as well.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Literal, Sequence, TypeVar

from dateutil.relativedelta import relativedelta

from app.repositories.store import UpdateRecord

Period = Literal["weekly", "monthly", "quarterly"]

PROGRESS_WEIGHT = 0.4
CONSISTENCY_WEIGHT = 0.3
INTERVIEW_WEIGHT = 0.2
PROJECT_WEIGHT = 0.1

POINTS_PER_ACTIVE_PROJECT = 2
MAX_PROJECT_POINTS = 10
MAX_CONSISTENCY = 100.0


@dataclass(frozen=True)
class StreakResult:
    current_streak: int
    longest_streak: int


def round_one(value: float) -> float:
    """Round half up to one decimal place (2.25 -> 2.3, not 2.2)."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Streaks
# ---------------------------------------------------------------------------

def calculate_streaks(updates: Iterable[UpdateRecord], today: date) -> StreakResult:
    """
    Current streak: consecutive calendar days with an update, walking back
    from ``today``. A history whose newest day is not today has none.

    Longest streak: the longest run of consecutive calendar days anywhere in
    the history. Weekends are not skipped.
    """
    days = sorted({update.date for update in updates}, reverse=True)
    if not days:
        return StreakResult(current_streak=0, longest_streak=0)

    current = 0
    for offset, day in enumerate(days):
        if day != today - timedelta(days=offset):
            break
        current += 1

    longest = 0
    run = 1
    for newer, older in zip(days, days[1:]):
        if (newer - older).days == 1:
            run += 1
        else:
            longest = max(longest, run)
            run = 1
    longest = max(longest, run)

    return StreakResult(current_streak=current, longest_streak=longest)


# ---------------------------------------------------------------------------
# Consistency
# ---------------------------------------------------------------------------

def count_work_days(start: date, end: date) -> int:
    """Monday–Friday dates in ``[start, end]``, both ends inclusive."""
    work_days = 0
    current = start
    while current <= end:
        if current.weekday() < 5:
            work_days += 1
        current += timedelta(days=1)
    return work_days


def update_consistency(update_count: int, work_days: int) -> float:
    """Percentage of expected weekday submissions made, capped at 100."""
    if work_days <= 0:
        return 0.0
    return min(update_count / work_days * 100, MAX_CONSISTENCY)


# ---------------------------------------------------------------------------
# Sub-metrics and composite
# ---------------------------------------------------------------------------

def average_progress(updates: Sequence[UpdateRecord]) -> float:
    if not updates:
        return 0.0
    return sum(update.progress_score for update in updates) / len(updates)


def mean_rating(ratings: Sequence[float]) -> float:
    if not ratings:
        return 0.0
    return sum(ratings) / len(ratings)


def project_contribution(active_project_count: int) -> float:
    return float(min(active_project_count * POINTS_PER_ACTIVE_PROJECT, MAX_PROJECT_POINTS))


def composite_score(
    avg_progress: float,
    consistency: float,
    interview_rating: float,
    projects: float,
) -> float:
    total = (
        avg_progress * PROGRESS_WEIGHT
        + (consistency / 10) * CONSISTENCY_WEIGHT
        + interview_rating * INTERVIEW_WEIGHT
        + projects * PROJECT_WEIGHT
    )
    return round_one(total)


# ---------------------------------------------------------------------------
# Periods and ranking
# ---------------------------------------------------------------------------

def period_start(period: Period, now: datetime) -> datetime:
    """Start of the trailing window that ends at ``now``."""
    if period == "weekly":
        return now - timedelta(days=7)
    if period == "monthly":
        return now - relativedelta(months=1)
    if period == "quarterly":
        return now - relativedelta(months=3)
    raise ValueError(f"Unknown period: {period!r}")


Ranked = TypeVar("Ranked")


def rank_entries(entries: Iterable[Ranked]) -> list[Ranked]:
    """
    Order by ``total_score`` descending, ties by ``user_id`` ascending, and
    stamp dense 1-based ranks onto the entries.
    """
    ranked = sorted(entries, key=lambda entry: (-entry.total_score, entry.user_id))
    for index, entry in enumerate(ranked):
        entry.rank = index + 1
    return ranked
