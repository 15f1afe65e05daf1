from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import computed_field
from functools import lru_cache
from pathlib import Path

# Get the project root (repository root, next to backend/)
PROJECT_ROOT = Path(__file__).parent.parent.parent


class Settings(BaseSettings):

    # Application
    app_env: str = "development"
    app_debug: bool = False
    frontend_url: str = "http://localhost:5173"
    prometheus_enabled: bool = True

    # PostgreSQL Configuration
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "rarefind_db"
    postgres_user: str = "rarefind_user"
    postgres_password: str = ""

    # SQLite (local dev and tests)
    use_sqlite: bool = False
    sqlite_url: str = "sqlite+aiosqlite:///./data/rarefind.db"

    @computed_field
    @property
    def database_url(self) -> str:
        """Return the appropriate database URL based on configuration."""
        if self.use_sqlite:
            return self.sqlite_url
        return f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    # Database pooling (PostgreSQL)
    db_pool_size: int = 5
    db_max_overflow: int = 5
    db_pool_recycle: int = 1800

    # Redis-backed client storage (drafts, rate-limit timestamps)
    redis_url: str = ""
    client_storage_prefix: str = "rarefind:client"

    # Inquiry store: "database" writes through SQLAlchemy, "hosted" through the
    # hosted REST store
    inquiry_store_backend: str = "database"
    supabase_url: str = ""
    supabase_anon_key: str = ""
    inquiries_table: str = "contact_inquiries"
    store_request_timeout_seconds: float = 10.0

    # Staff access to stored inquiries (X-Admin-Key); listing is off when unset
    admin_api_key: str = ""

    # Notification function
    notification_function_url: str = ""
    notification_timeout_seconds: float = 15.0

    @computed_field
    @property
    def notification_endpoint(self) -> str:
        """Explicit function URL, or the hosted project's function path."""
        if self.notification_function_url:
            return self.notification_function_url
        if self.supabase_url:
            return f"{self.supabase_url.rstrip('/')}/functions/v1/send-contact-notification"
        return ""

    # Submission policy
    inquiry_rate_limit_max: int = 3
    inquiry_rate_limit_window_minutes: int = 60
    submission_max_attempts: int = 3
    submission_backoff_base_seconds: float = 1.0
    submission_backoff_factor: float = 2.0
    submission_backoff_max_seconds: float = 5.0
    submission_max_manual_retries: int = 2

    # Email (Resend)
    resend_api_key: str = ""
    resend_api_url: str = "https://api.resend.com/emails"
    email_from_address: str = "noreply@rarefindtalent.com"
    email_from_name: str = "Rare Find Talent"
    owner_email: str = "contact@rarefindtalent.com"
    email_timeout_seconds: float = 10.0

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


# Singleton instance for easy import
settings = get_settings()
