from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, JSON, UniqueConstraint, func
from app.database import Base

class DailyUpdate(Base):
    __tablename__ = "daily_updates"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)  # calendar day (UTC)

    # Free-form bullet lists
    tasks = Column(JSON, nullable=False, default=list)
    accomplishments = Column(JSON, nullable=False, default=list)
    challenges = Column(JSON, nullable=False, default=list)
    next_day_plans = Column(JSON, nullable=False, default=list)

    progress_score = Column(Integer, nullable=False)  # 1–10

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_daily_update_user_date"),
    )
