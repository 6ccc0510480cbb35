"""Authentication routes: register, login, logout, current user, password reset."""
import logging
from datetime import timedelta

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from .authentication import Authenticated, AuthenticationFlow, LoginContext
from .config import Settings
from .dependencies import (
    get_captcha_verifier,
    get_current_user,
    get_db_session,
    get_mailer,
    get_session_id,
    get_session_store,
    get_settings_dependency,
)
from .errors import ValidationError
from .mailer import Mailer
from .models import User
from .rate_limit import client_ip, login_rate_limit, password_reset_rate_limit
from .recaptcha import CaptchaVerifier
from .reset_tokens import ResetTokenIssuer
from .schemas import (
    ForgotPasswordRequest,
    MessageResponse,
    ResetPasswordRequest,
    UserCreate,
    UserLogin,
    UserRead,
    is_company_email,
)
from .sessions import SessionStore
from .users import get_user_by_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])

FORGOT_PASSWORD_MESSAGE = "If the email exists, a reset link has been sent"


def _session_ttl(settings: Settings) -> timedelta:
    return timedelta(hours=settings.session_ttl_hours)


def _set_session_cookie(response: Response, settings: Settings, result: Authenticated) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=result.session_id,
        max_age=int(result.session_ttl.total_seconds()),
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


def _require_company_email(email: str, settings: Settings) -> None:
    domain = settings.company_email_domain
    if not is_company_email(email, domain):
        raise ValidationError(f"Email must be from the company domain ({domain})")


def _flow(session: AsyncSession, store: SessionStore, captcha: CaptchaVerifier) -> AuthenticationFlow:
    return AuthenticationFlow(session, store, captcha)


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register_user(
    payload: UserCreate,
    response: Response,
    settings: Settings = Depends(get_settings_dependency),
    session: AsyncSession = Depends(get_db_session),
    store: SessionStore = Depends(get_session_store),
    captcha: CaptchaVerifier = Depends(get_captcha_verifier),
) -> User:
    """Create an account and log it in."""

    _require_company_email(payload.email, settings)
    result = await _flow(session, store, captcha).register(payload, _session_ttl(settings))
    _set_session_cookie(response, settings, result)
    return result.user


@router.post("/login", response_model=UserRead, dependencies=[Depends(login_rate_limit)])
async def login(
    payload: UserLogin,
    request: Request,
    response: Response,
    settings: Settings = Depends(get_settings_dependency),
    session: AsyncSession = Depends(get_db_session),
    store: SessionStore = Depends(get_session_store),
    captcha: CaptchaVerifier = Depends(get_captcha_verifier),
) -> User:
    """Authenticate against a role and start a session."""

    context = LoginContext(
        ip_address=client_ip(request),
        session_ttl=_session_ttl(settings),
        remember_me_ttl=timedelta(days=settings.remember_me_days),
    )
    result = await _flow(session, store, captcha).login(payload, context)
    _set_session_cookie(response, settings, result)
    return result.user


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    settings: Settings = Depends(get_settings_dependency),
    session_id: str | None = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
) -> MessageResponse:
    await store.destroy(session_id)
    response.delete_cookie(
        settings.session_cookie_name,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return MessageResponse(message="Logged out")


@router.get("/user", response_model=UserRead)
async def current_user(user: User = Depends(get_current_user)) -> User:
    return user


async def _send_reset_email(mailer: Mailer, email: str, token: str) -> None:
    try:
        await mailer.send_password_reset(email, token)
    except Exception:
        logger.exception("Failed to deliver password reset email to %s", email)


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    dependencies=[Depends(password_reset_rate_limit)],
)
async def forgot_password(
    payload: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings_dependency),
    session: AsyncSession = Depends(get_db_session),
    mailer: Mailer = Depends(get_mailer),
) -> MessageResponse:
    """Issue a reset token; the response never reveals whether the account exists."""

    _require_company_email(payload.email, settings)
    issuer = ResetTokenIssuer(session, ttl=timedelta(minutes=settings.reset_token_ttl_minutes))
    token = await issuer.issue(payload.email)
    if await get_user_by_email(session, payload.email) is not None:
        background_tasks.add_task(_send_reset_email, mailer, payload.email, token)
    else:
        logger.info("Password reset requested for unknown email %s", payload.email)
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    payload: ResetPasswordRequest,
    session: AsyncSession = Depends(get_db_session),
    store: SessionStore = Depends(get_session_store),
) -> MessageResponse:
    user = await ResetTokenIssuer(session).redeem(payload.token, payload.new_password)
    await store.destroy_for_user(user.id)
    return MessageResponse(message="Password reset successfully")
