from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env from backend project root so it loads regardless of cwd
_BACKEND_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _BACKEND_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(_ENV_FILE), ".env", "../.env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str

    # JWT
    secret_key: str
    access_token_expire_minutes: int = 24 * 60
    algorithm: str = "HS256"
    bcrypt_rounds: int = 12

    # Password reset links
    password_reset_expire_minutes: int = 60
    frontend_url: str = "http://localhost:3000"

    # CORS
    cors_origins: str = "http://localhost:3000"

    # Booking rules. default_timezone is used when a request carries no zone
    # and for rendering times in emails and listings; storage is always UTC.
    default_timezone: str = "UTC"
    thank_you_delay_hours: int = 24

    # Background jobs
    scheduler_enabled: bool = True
    reminder_poll_seconds: int = 60
    thank_you_poll_seconds: int = 10 * 60

    # Env
    env: str = "development"

    # Email (SMTP). Leave smtp_host empty to disable sending.
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    from_email: str = ""
    from_name: str = "Meeting Booker"
    # Public URL for logo in emails
    email_logo_url: str = ""
    # Branding shown to clients
    site_name: str = "Meeting Booker"

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def email_enabled(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_password and self.from_email)


settings = Settings()
