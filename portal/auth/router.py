"""
Auth Router - sign in / sign up / sign out
"""
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse

from portal.config import get_settings
from portal.errors import AuthError
from portal.templating import error_toast, render, toast
from .guard import get_access_token, get_session_provider
from .session import Session, SessionProvider

router = APIRouter(prefix="/auth", tags=["auth"])


def set_session_cookie(response: RedirectResponse, session: Session) -> RedirectResponse:
    settings = get_settings()
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session.access_token,
        httponly=True,
        max_age=settings.SESSION_COOKIE_MAX_AGE,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return response


def clear_session_cookie(response):
    response.delete_cookie(get_settings().SESSION_COOKIE_NAME)
    return response


def _landing_with_error(request: Request, error: AuthError, email: str, mode: str):
    return render(
        request,
        "landing.html",
        {
            "toast": error_toast(error, title="Authentication failed"),
            "email": email,
            "mode": mode,
        },
        status_code=400,
    )


# =============================================
# Sign in / sign up
# =============================================

@router.post("/sign-in")
async def sign_in(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    provider: SessionProvider = Depends(get_session_provider),
):
    """Email/password sign-in, then on to the dashboard"""
    if not email.strip() or not password:
        return _landing_with_error(
            request, AuthError("Email and password are required"), email, "sign-in"
        )

    try:
        session = provider.sign_in(email.strip(), password)
    except AuthError as e:
        return _landing_with_error(request, e, email, "sign-in")

    return set_session_cookie(RedirectResponse(url="/dashboard", status_code=303), session)


@router.post("/sign-up")
async def sign_up(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    provider: SessionProvider = Depends(get_session_provider),
):
    """Create an account; signs straight in unless email confirmation is on"""
    if not email.strip() or not password:
        return _landing_with_error(
            request, AuthError("Email and password are required"), email, "sign-up"
        )

    try:
        session = provider.sign_up(email.strip(), password)
    except AuthError as e:
        return _landing_with_error(request, e, email, "sign-up")

    if session is None:
        return render(
            request,
            "landing.html",
            {
                "toast": toast("Check your email", "Confirm your address, then sign in."),
                "email": email,
                "mode": "sign-in",
            },
        )

    return set_session_cookie(RedirectResponse(url="/dashboard", status_code=303), session)


# =============================================
# Sign out
# =============================================

def _sign_out(request: Request, provider: SessionProvider) -> RedirectResponse:
    provider.sign_out(get_access_token(request))
    return clear_session_cookie(RedirectResponse(url="/?signed_out=1", status_code=303))


@router.post("/sign-out")
async def sign_out(request: Request, provider: SessionProvider = Depends(get_session_provider)):
    """Sign out"""
    return _sign_out(request, provider)


@router.get("/sign-out")
async def sign_out_get(request: Request, provider: SessionProvider = Depends(get_session_provider)):
    """Sign out (GET)"""
    return _sign_out(request, provider)
