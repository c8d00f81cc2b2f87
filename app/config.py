from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Health Wallet API"
    app_version: str = "0.1.0"
    api_prefix: str = "/api"
    log_level: str = "INFO"

    database_url: str = "sqlite:///./health_wallet.db"

    # Report file storage
    upload_dir: str = "uploads/reports"
    max_upload_bytes: int = 10 * 1024 * 1024  # 10MB

    # Auth settings
    jwt_secret_key: str = "change-me"  # Required in production
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days
    password_min_length: int = 8

    # Vitals
    default_trend_days: int = 30
    max_trend_days: int = 3650

    cors_origins: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    class Config:
        env_file = ".env"


settings = Settings()
