from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    # JWT Configuration
    SECRET_KEY: str = "change-me-pos-sync-secret"  # Set via environment in production
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12  # Tills stay logged in for a full shift

    # Database
    DATABASE_URL: Optional[str] = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "pos"
    DB_PASSWORD: str = "pos_password"
    DB_NAME: str = "pos_db"
    DB_ECHO: bool = False

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql+psycopg2://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # Sync engine limits
    SYNC_MAX_BATCH_SIZE: int = 50  # Records per push
    SYNC_MAX_PULL_SIZE: int = 100  # Changes per pull response (aggregate)

    # Logging
    LOG_LEVEL: str = "INFO"

    # URLs
    FRONTEND_URL: str = "http://localhost:3000"

    class Config:
        env_file = ".env"
        extra = "ignore"  # Allow extra fields in .env file

settings = Settings()
