"""Application configuration from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_name: str = "The Green Field"
    debug: bool = True
    secret_key: str = "dev-secret-change-in-production"
    api_prefix: str = "/api"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite+aiosqlite:///./greenfield.db"
    database_echo: bool = False

    # Auth
    access_token_expire_minutes: int = 60 * 24 * 7
    refresh_token_expire_days: int = 30
    jwt_algorithm: str = "HS256"

    # Bootstrap admin, created on startup when both are set
    admin_email: str | None = None
    admin_password: str | None = None
    admin_name: str = "Admin User"

    # Booking rules
    venue_timezone: str = "Asia/Dhaka"
    booking_buffer_minutes: int = 15
    booking_horizon_days: int = 7

    # Payment screenshots
    upload_dir: str = "uploads"
    max_upload_bytes: int = 5 * 1024 * 1024

    model_config = {"env_prefix": "GF_", "env_file": ".env", "extra": "ignore"}


settings = Settings()
