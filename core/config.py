"""
Application configuration using Pydantic Settings
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # CSV source
    CSV_URL: str = "http://support.ctecg.co.za/files/Customers.csv"
    USE_LOCAL_CSV: bool = False

    # Connection and retry
    MAX_RETRIES: int = 3
    RETRY_DELAY: float = 1.0  # seconds, multiplied by the attempt number
    CONNECTION_TIMEOUT: float = 15.0
    CONNECTION_CHECK_TIMEOUT: float = 5.0
    MIN_CONTENT_LENGTH: int = 100

    # Refresh and caching (seconds)
    REFRESH_INTERVAL: int = 30
    CACHE_TIMEOUT: int = 300
    FILE_CACHE_TIMEOUT: int = 600

    # Relay used when the source cannot be reached directly
    CORS_PROXY: str = "https://api.allorigins.win/get?url={url}"

    # Storage
    CACHE_DIR: str = ".cache/contacts"
    EXPORT_DIR: str = "exports"

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
