# app/config.py
from pydantic_settings import BaseSettings
from typing import List, Optional
from pydantic import Field

class Settings(BaseSettings):
    SECRET_KEY: str = Field("change-me-in-production")
    ALGORITHM: str = Field("HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60 * 24)
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(7)
    BCRYPT_ROUNDS: int = Field(12)

    DATABASE_URL: str = Field("sqlite+aiosqlite:///./trackzen.db")
    SQLALCHEMY_DATABASE_URL: Optional[str] = None
    DB_ECHO: bool = Field(False)

    LOG_LEVEL: str = Field("INFO")

    # Comma-separated allowed origins, or "*" to allow all.
    CORS_ORIGINS: str = Field("*")

    # How many of a user's most recent daily updates the leaderboard reads.
    LEADERBOARD_UPDATE_LIMIT: int = Field(100)

    SEED_DEMO_DATA: bool = Field(False)

    model_config = {
        "env_file": ".env",
        "extra": "allow",
    }

    @property
    def effective_database_url(self) -> str:
        url = self.SQLALCHEMY_DATABASE_URL or self.DATABASE_URL
        # Ensure asyncpg is used
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @property
    def cors_origins_list(self) -> List[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

settings = Settings()
