"""
LeaseDesk Configuration
Loads settings from .env file using Pydantic v2 with BaseSettings
"""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ==================== Project Info ====================
    PROJECT_NAME: str = "LeaseDesk"
    VERSION: str = "1.0.0"

    # ==================== Database ====================
    DATABASE_URL: str = "sqlite:///leasedesk_local.db"

    # ==================== Uploads ====================
    UPLOADS_DIR: str = "uploads"
    LEASES_SUBDIR: str = "leases"
    SIGNATURES_SUBDIR: str = "signatures"

    # ==================== Organisation (template letterhead) ====================
    COMPANY_NAME: str = "Property Management Solutions"
    COMPANY_ADDRESS: str = "123 Property Street, Management City, 12345"
    COMPANY_PHONE: str = "+27 11 123 4567"
    COMPANY_EMAIL: str = "info@propertymanagement.co.za"

    # ==================== Formatting ====================
    CURRENCY_SYMBOL: str = "R"
    DISPLAY_DATE_FORMAT: str = "%d %B %Y"
    DISPLAY_TIME_FORMAT: str = "%H:%M:%S"

    # ==================== Document Generation ====================
    PDF_PRIMARY_ENABLED: bool = True
    PDF_RENDER_TIMEOUT_MS: int = 30000
    PDF_SETTLE_DELAY_MS: int = 2000
    PDF_FALLBACK_MAX_CHARS: int = 2000

    # ==================== Features ====================
    DEBUG: bool = False
    TESTING: bool = False
    LOG_LEVEL: str = "INFO"

    # ==================== Configuration Loading ====================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow",
        validate_default=True,
    )

    # ==================== Properties ====================
    @property
    def leases_prefix(self) -> str:
        return self.LEASES_SUBDIR.strip("/")

    @property
    def signatures_prefix(self) -> str:
        return self.SIGNATURES_SUBDIR.strip("/")


# ==================== Settings Singleton ====================
@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
