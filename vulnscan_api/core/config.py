# vulnscan_api/core/config.py
import os
from pathlib import Path
from pydantic_settings import BaseSettings

PACKAGE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    # Database configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./data/vulnscan.db")

    # Acunetix engine
    ACUNETIX_API_URL: str = "https://localhost:3443/api/v1"
    ACUNETIX_API_KEY: str = ""
    ACUNETIX_TIMEOUT: float = 30.0
    ACUNETIX_VERIFY_SSL: bool = False

    # Access tokens
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_MINUTES: int = 60 * 24 * 7

    # Optional administrator created when the users table is empty
    FIRST_ADMIN_USERNAME: str | None = None
    FIRST_ADMIN_EMAIL: str | None = None
    FIRST_ADMIN_PASSWORD: str | None = None

    # Scan types and report formats offered to clients
    SCAN_PROFILES_FILE: str = str(PACKAGE_DIR / "scan_profiles.yaml")

    LOG_LEVEL: str = "INFO"

    # Project Information
    PROJECT_NAME: str = "Vulnerability Scan Gateway"

    class Config:
        case_sensitive = True
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = "ignore"


settings = Settings()
