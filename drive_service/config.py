# drive_service/config.py
import os
from typing import List


def _csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    """Application configuration settings"""

    # App
    APP_NAME: str = "Personal Drive"
    VERSION: str = "1.0.0"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS
    CORS_ORIGINS: List[str] = _csv(
        os.getenv(
            "CORS_ORIGINS",
            "http://localhost:3000,http://localhost:5000,http://localhost:5173",
        )
    )

    # Upload / quota
    MAX_UPLOAD_SIZE: int = int(os.getenv("MAX_UPLOAD_SIZE", 10 * 1024 * 1024))  # 10MB per file
    DEFAULT_STORAGE_LIMIT: int = int(os.getenv("DEFAULT_STORAGE_LIMIT", 104857600))  # 100MB per user
    DEFAULT_RECENT_LIMIT: int = int(os.getenv("DEFAULT_RECENT_LIMIT", 4))

    # Implicit demo account (no real authentication)
    DEMO_USERNAME: str = os.getenv("DEMO_USERNAME", "demo")
    DEMO_PASSWORD: str = os.getenv("DEMO_PASSWORD", "password")

    # Monitoring
    METRICS_ENABLED: bool = os.getenv("METRICS_ENABLED", "true").lower() == "true"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return os.getenv("ENVIRONMENT", "development").lower() == "production"


settings = Settings()
