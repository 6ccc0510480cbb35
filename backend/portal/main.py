"""FastAPI application entry point."""
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from . import models
from .auth import router as auth_router
from .config import Settings, configure_logging, get_settings
from .database import build_engine, build_sessionmaker
from .errors import register_exception_handlers
from .mailer import Mailer, build_mailer
from .rate_limit import FixedWindowRateLimiter
from .recaptcha import CaptchaVerifier, RecaptchaVerifier
from .routers.dashboard import router as dashboard_router


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(models.Base.metadata.create_all)


def create_app(
    settings: Optional[Settings] = None,
    *,
    engine: Optional[AsyncEngine] = None,
    captcha: Optional[CaptchaVerifier] = None,
    mailer: Optional[Mailer] = None,
) -> FastAPI:
    """Build the portal API with its collaborators attached to ``app.state``."""

    settings = settings or get_settings()
    engine = engine or build_engine(settings.database_url)

    app = FastAPI(title="EIL Login Portal", version="0.1.0")
    app.state.settings = settings
    app.state.engine = engine
    app.state.sessionmaker = build_sessionmaker(engine)
    app.state.captcha = captcha or RecaptchaVerifier(
        settings.recaptcha_secret_key,
        verify_url=settings.recaptcha_verify_url,
    )
    app.state.mailer = mailer or build_mailer(settings)
    app.state.login_limiter = FixedWindowRateLimiter(
        settings.login_rate_limit, settings.login_rate_window_seconds
    )
    app.state.password_reset_limiter = FixedWindowRateLimiter(
        settings.reset_rate_limit, settings.reset_rate_window_seconds
    )

    register_exception_handlers(app)
    app.include_router(auth_router)
    app.include_router(dashboard_router)

    @app.on_event("startup")
    async def on_startup() -> None:
        """Ensure database tables exist."""

        await create_tables(engine)

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        await engine.dispose()

    @app.get("/api/health", tags=["system"])
    async def healthcheck() -> dict[str, str]:
        """Simple liveness probe for uptime checks."""

        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    return app


def build_app() -> FastAPI:
    """Entry point for ``uvicorn --factory portal.main:build_app``."""

    settings = get_settings()
    configure_logging(settings.log_level)
    return create_app(settings)
