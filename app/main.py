# app/main.py
import logging
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy import exc as sa_exc
from app.config import settings
from app.database import engine, Base, AsyncSessionLocal
from app.core.errors import (
    TrackZenException,
    trackzen_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler,
)
# models must be imported so their tables register on Base.metadata
from app.models import user, daily_update, interview, project  # noqa: F401
from app.routers import auth, users, daily_updates, interviews, projects, leaderboard, performance, dashboard
from app.services.seed import seed_demo_data

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="TrackZen", version="1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.cors_origins_list != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(TrackZenException, trackzen_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# Include Routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(daily_updates.router)
app.include_router(interviews.router)
app.include_router(projects.router)
app.include_router(leaderboard.router)
app.include_router(performance.router)
app.include_router(dashboard.router)

# Create DB Tables (no migrations)
@app.on_event("startup")
async def startup_event():
    # create tables (async). ignore duplicate-object errors from previous partial runs.
    async with engine.begin() as conn:
        try:
            await conn.run_sync(Base.metadata.create_all)
        except sa_exc.IntegrityError as e:
            msg = str(getattr(e, "orig", e))
            if "duplicate key value violates unique constraint" in msg or "already exists" in msg:
                logger.warning("Ignored duplicate DDL error during create_all: %s", msg)
            else:
                raise

    if settings.SEED_DEMO_DATA:
        async with AsyncSessionLocal() as db:
            await seed_demo_data(db)

@app.get("/api/ping")
def ping():
    return {"message": "pong"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
