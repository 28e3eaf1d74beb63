"""
Centralized application configuration
"""
import json
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings, loaded from environment and .env"""

    # API Settings
    API_TITLE: str = "StockLedger API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Per-user inventory and sales tracking"
    API_DEBUG: bool = False

    # Storage
    # "memory" keeps everything in-process, "postgres" uses DATABASE_URL
    STORAGE_BACKEND: str = "memory"
    DATABASE_URL: Optional[str] = None
    DB_CONNECT_RETRIES: int = 3
    DB_RETRY_DELAY: float = 1.0
    CONNECTION_TIMEOUT: int = 10

    # Auth
    AUTH_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:3000,https://yourdomain.com" or '["http://localhost:3000"]'
    ALLOWED_ORIGINS: Optional[str] = "*"

    # Sell / undo transactions
    TRANSACTION_MAX_ATTEMPTS: int = 5
    TRANSACTION_RETRY_DELAY: float = 0.01
    TRANSACTION_TIMEOUT: float = 5.0

    LOG_LEVEL: str = "INFO"

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["*"]

        # Try JSON parse first (for array format)
        try:
            origins = json.loads(self.ALLOWED_ORIGINS)
            if isinstance(origins, list):
                return origins
        except (json.JSONDecodeError, ValueError):
            pass

        # Fall back to comma-separated string
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
