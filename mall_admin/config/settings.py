from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""  # anon key, respects row-level security
    supabase_service_role_key: Optional[str] = None  # Required for privileged mutations

    # Session
    session_secret: str = "change-me"
    session_cookie_name: str = "admin_session"
    session_max_age_days: int = 7
    session_algorithm: str = "HS256"

    # Public site cache invalidation
    revalidate_url: Optional[str] = None
    revalidate_secret: Optional[str] = None
    revalidate_timeout: float = 5.0

    # Uploads
    storage_backend: str = "supabase"  # supabase | s3
    max_upload_size_mb: int = 2

    # AWS S3 (will read from uppercase env vars automatically)
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "ap-southeast-1"
    s3_bucket_name: Optional[str] = None
    s3_public_base_url: Optional[str] = None

    # App
    app_name: str = "mall-admin"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    login_rate_limit: str = "10/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def session_max_age_seconds(self) -> int:
        return self.session_max_age_days * 24 * 60 * 60

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
