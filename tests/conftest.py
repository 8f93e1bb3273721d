"""
Shared pytest fixtures.

Points the app at a throwaway SQLite file so no Postgres is required for
tests. Tables are recreated for every test.
"""
import asyncio
import itertools
import os
from datetime import date, datetime, timezone

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test_trackzen.db"
os.environ["SQLALCHEMY_DATABASE_URL"] = ""
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SEED_DEMO_DATA"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import insert

from app.core.security import create_access_token, token_claims
from app.database import AsyncSessionLocal, Base, engine
from app.main import app
from app.models.daily_update import DailyUpdate
from app.models.interview import InterviewFeedback, MockInterview
from app.models.project import Project, project_members
from app.models.user import User
from app.utils.password import hash_password

DEFAULT_PASSWORD = "password123"

_emails = itertools.count(1)


def run(coro):
    return asyncio.run(coro)


async def _recreate_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def _save(obj):
    async with AsyncSessionLocal() as db:
        db.add(obj)
        await db.commit()
        await db.refresh(obj)
    return obj


@pytest.fixture(autouse=True)
def reset_db():
    run(_recreate_tables())
    yield


@pytest.fixture()
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def make_user():
    def _make(role="employee", first_name="Test", last_name="User", email=None,
              department="Engineering", manager_id=None, date_of_birth=None,
              is_active=True, password=DEFAULT_PASSWORD):
        user = User(
            email=email or f"user{next(_emails)}@trackzen.com",
            hashed_password=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            role=role,
            department=department,
            manager_id=manager_id,
            date_of_birth=date_of_birth,
            is_active=is_active,
        )
        return run(_save(user))
    return _make


@pytest.fixture()
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(token_claims(user))}"}
    return _headers


@pytest.fixture()
def add_update():
    def _add(user, on: date, progress_score=7):
        update = DailyUpdate(
            user_id=user.id,
            date=on,
            tasks=["task"],
            accomplishments=["done"],
            challenges=["none"],
            next_day_plans=["more"],
            progress_score=progress_score,
        )
        return run(_save(update))
    return _add


@pytest.fixture()
def add_project():
    def _add(manager, members=(), status="active", name="Project", start_date=date(2026, 1, 1)):
        async def _create():
            async with AsyncSessionLocal() as db:
                project = Project(
                    name=name,
                    description="",
                    manager_id=manager.id,
                    start_date=start_date,
                    status=status,
                    priority="medium",
                )
                db.add(project)
                await db.flush()
                if members:
                    await db.execute(
                        insert(project_members),
                        [{"project_id": project.id, "user_id": m.id} for m in members],
                    )
                await db.commit()
                await db.refresh(project)
                return project
        return run(_create())
    return _add


@pytest.fixture()
def add_interview():
    def _add(candidate, interviewer, scheduler=None, status="scheduled", rating=None,
             scheduled_at=datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc), duration=60):
        interview = run(_save(MockInterview(
            candidate_id=candidate.id,
            interviewer_id=interviewer.id,
            scheduled_by=(scheduler or interviewer).id,
            scheduled_at=scheduled_at,
            duration=duration,
            type="technical",
            status=status,
        )))
        if rating is not None:
            run(_save(InterviewFeedback(
                interview_id=interview.id,
                candidate_id=candidate.id,
                submitted_by=interviewer.id,
                overall_rating=rating,
                written_feedback="Solid answers",
            )))
        return interview
    return _add
