"""Application settings and configuration helpers."""
from functools import lru_cache
import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

# Google's public test key pair always verifies successfully.
RECAPTCHA_TEST_SECRET = "6LeIxAcTAAAAAGG-vFI1TnRWxMZNFuojJ4WifJWe"


class Settings(BaseModel):
    """Runtime configuration loaded from environment variables."""

    database_url: str = Field(
        default="sqlite+aiosqlite:///./portal.db", alias="DATABASE_URL"
    )
    company_email_domain: str = Field(default="@eil.com", alias="COMPANY_EMAIL_DOMAIN")

    session_cookie_name: str = Field(default="eil_session", alias="SESSION_COOKIE_NAME")
    session_ttl_hours: int = Field(default=24, alias="SESSION_TTL_HOURS")
    remember_me_days: int = Field(default=30, alias="REMEMBER_ME_DAYS")
    session_cookie_secure: bool = Field(default=False, alias="SESSION_COOKIE_SECURE")

    recaptcha_secret_key: str = Field(default=RECAPTCHA_TEST_SECRET, alias="RECAPTCHA_SECRET_KEY")
    recaptcha_verify_url: str = Field(
        default="https://www.google.com/recaptcha/api/siteverify",
        alias="RECAPTCHA_VERIFY_URL",
    )

    frontend_url: str = Field(default="http://localhost:5000", alias="FRONTEND_URL")
    smtp_host: str | None = Field(default=None, alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_user: str | None = Field(default=None, alias="SMTP_USER")
    smtp_password: str | None = Field(default=None, alias="SMTP_PASSWORD")
    smtp_from: str = Field(default="noreply@eil.com", alias="SMTP_FROM")
    smtp_starttls: bool = Field(default=True, alias="SMTP_STARTTLS")

    reset_token_ttl_minutes: int = Field(default=60, alias="RESET_TOKEN_TTL_MINUTES")
    login_rate_limit: int = Field(default=5, alias="LOGIN_RATE_LIMIT")
    login_rate_window_seconds: int = Field(default=15 * 60, alias="LOGIN_RATE_WINDOW_SECONDS")
    reset_rate_limit: int = Field(default=3, alias="RESET_RATE_LIMIT")
    reset_rate_window_seconds: int = Field(default=60 * 60, alias="RESET_RATE_WINDOW_SECONDS")

    # Only enable behind a reverse proxy that overwrites X-Forwarded-For.
    trust_proxy_headers: bool = Field(default=False, alias="TRUST_PROXY_HEADERS")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance built from the process environment."""

    return Settings.model_validate(dict(os.environ))


def configure_logging(level: str = "INFO") -> None:
    """Install a basic root handler for the service loggers."""

    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
