"""Application configuration"""
from typing import List, Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    API_KEYS_HASH: str = "api-keys"
    API_KEY_NAMES_HASH: str = "api_key_names"
    MEDIA_KEYS_HASH: str = "media_keys"

    # Authentication
    LOGIN_PASSWD: Optional[str] = None       # Admin secret for /keys (X-Login-Passwd header)
    PUBLISH_PASSWORD: Optional[str] = None   # Shared secret for /publish-multi (X-Publish-Password header)

    # API key tokens
    API_KEYS_JWT_SECRET_KEY: Optional[str] = None  # HS256 secret; auto-generated per process if absent
    JWT_ALGORITHM: str = "HS256"
    DEFAULT_KEY_NAME: str = "New API Key"
    DEFAULT_RATE_LIMIT: int = 100
    DEFAULT_RATE_TIMEFRAME: int = 60  # seconds

    # Publishing platforms (shared credentials, used by /publish-multi only)
    DEV_TO_API_KEY: Optional[str] = None
    MEDIUM_API_KEY: Optional[str] = None
    DEVTO_API_BASE: str = "https://dev.to/api"
    MEDIUM_API_BASE: str = "https://api.medium.com/v1"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Monitoring
    METRICS_ENABLED: bool = True
    METRICS_PATH: str = "/metrics"
    SLOW_REQUEST_SECONDS: float = 5.0

    class Config:
        env_file = ".env"
        case_sensitive = True
        frozen = True

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string into list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]


settings = Settings()


def get_settings() -> Settings:
    """Dependency returning the process-wide settings (overridable in tests)"""
    return settings
