"""
Application configuration using Pydantic Settings
"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Local destination database (ledger + fetched records)
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/cron_jobs.db"

    # Remote line-of-business databases (SQLAlchemy async URLs)
    ERP_DSN: Optional[str] = None
    ORACLE_DSN_GC: Optional[str] = None
    ORACLE_DSN_TH: Optional[str] = None
    ORACLE_DSN_OS: Optional[str] = None
    GOLF_SITES: List[str] = ["GC", "TH", "OS"]

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8005

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    TIMEZONE: str = "Asia/Taipei"

    # Job engine
    MAX_RETRIES: int = 3
    RETRY_BACKOFF_BASE_SECONDS: float = 60.0
    SCHEDULER_ENABLED: bool = True
    FUNERAL_INVOICE_SCHEDULE: str = "0 6 * * *"
    GOLF_SUMMARY_SCHEDULE: str = "* 12 * * *"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    def golf_dsn(self, site_id: str) -> Optional[str]:
        """Return the DSN configured for a golf site, if any."""
        return getattr(self, f"ORACLE_DSN_{site_id.upper()}", None)


settings = Settings()
