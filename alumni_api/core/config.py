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
    APP_NAME: str = "Alumni Network API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    SECRET_KEY: str
    API_PREFIX: str = "/api"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 5000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes
    DB_ECHO: bool = False

    # ==========================================
    # Security
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    BCRYPT_ROUNDS: int = 12  # 4 for dev (fast), 12 for prod (secure)
    MAX_REQUEST_SIZE_MB: int = 10

    # CORS (stored as comma-separated string, parsed to list)
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://127.0.0.1:3000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 100
    RATE_LIMIT_STORAGE_URI: str = "memory://"  # e.g. redis://localhost:6379/2
    AUTH_RATE_LIMIT: str = "5/minute"
    REGISTER_RATE_LIMIT: str = "3/minute"

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/alumni_api.log"

    # ==========================================
    # Notifications - Email (SMTP)
    # ==========================================
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_USE_TLS: bool = True
    EMAIL_FROM: str = "noreply@alumninetwork.com"
    EMAIL_FROM_NAME: str = "Alumni Network"

    # ==========================================
    # Notifications - SMS gateway
    # ==========================================
    SMS_GATEWAY_URL: str = ""
    SMS_GATEWAY_API_KEY: str = ""
    SMS_SENDER_ID: str = "ALUMNI"
    SMS_REQUEST_TIMEOUT: int = 10  # seconds

    # ==========================================
    # Pagination & business defaults
    # ==========================================
    DEFAULT_PAGE_SIZE: int = 20
    ADMIN_USERS_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 100
    JOB_DEFAULT_EXPIRY_DAYS: int = 30
    DASHBOARD_RECENT_LIMIT: int = 5

    # ==========================================
    # Site settings (served by GET /admin/settings)
    # ==========================================
    SITE_NAME: str = "Alumni Network"
    SITE_DESCRIPTION: str = "Connect with your fellow alumni"
    CONTACT_EMAIL: str = "admin@alumninetwork.com"
    SUPPORT_PHONE: str = "+1234567890"
    DEFAULT_CURRENCY: str = "USD"
    STRIPE_ENABLED: bool = True
    MOBILE_MONEY_ENABLED: bool = True
    PUSH_NOTIFICATIONS_ENABLED: bool = True
    JOB_BOARD_ENABLED: bool = True
    EVENTS_ENABLED: bool = True
    ANNOUNCEMENTS_ENABLED: bool = True
    MESSAGING_ENABLED: bool = True

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings


# Create settings instance
settings = Settings()
