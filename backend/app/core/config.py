from pydantic_settings import BaseSettings
from typing import List, Any
import json


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "Classdesk API"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    API_VERSION: str = "v1"

    # "tasks" (user/admin task manager) or "grading" (student/teacher records)
    DEPLOYMENT_PROFILE: str = "grading"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 3000

    # ==========================================
    # Database (MongoDB)
    # ==========================================
    MONGODB_URL: str
    MONGODB_DB_NAME: str = "classdesk"
    MONGODB_TLS: bool = False
    MONGODB_MIN_POOL_SIZE: int = 0
    MONGODB_MAX_POOL_SIZE: int = 10
    MONGODB_SERVER_SELECTION_TIMEOUT_MS: int = 5000
    MONGODB_CONNECT_TIMEOUT_MS: int = 10000
    MONGODB_SOCKET_TIMEOUT_MS: int = 45000

    # Connect retry policy: delay = min(base * 2^attempt, max)
    MONGODB_MAX_RETRIES: int = 5
    MONGODB_RETRY_BASE_DELAY: float = 1.0  # seconds
    MONGODB_RETRY_MAX_DELAY: float = 30.0  # seconds
    MONGODB_RECONNECT_DELAY: float = 5.0  # seconds, after an unexpected drop

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days
    BCRYPT_ROUNDS: int = 12  # 4 for dev (fast), 12 for prod (secure)

    # Shared secret for self-assigning an elevated role (teacher/admin)
    ADMIN_REGISTRATION_CODE: str = ""

    # ==========================================
    # HTTP
    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    CORS_ORIGINS_STR: str = "http://localhost:5173,http://localhost:5174"
    FRONTEND_URL: str = ""

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string, plus FRONTEND_URL"""
        origins = parse_cors_origins(self.CORS_ORIGINS_STR)
        if self.FRONTEND_URL and self.FRONTEND_URL not in origins:
            origins.append(self.FRONTEND_URL)
        return origins

    MAX_REQUEST_SIZE: int = 10 * 1024  # 10KB JSON bodies

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    def is_dev_mode(self) -> bool:
        """Check if running in development mode"""
        return self.ENVIRONMENT == "development"


# Create settings instance
settings = Settings()
