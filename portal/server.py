"""
Club 6713 Members Portal - FastAPI web server

Data source: Supabase (Auth + `events` table)
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger
from dotenv import load_dotenv

from portal.auth.router import clear_session_cookie, router as auth_router
from portal.auth.session import SessionProvider
from portal.config import get_settings
from portal.errors import AuthError, PermissionDenied, StoreError, ValidationError
from portal.events.router import api_router as events_api_router, router as events_router
from portal.logging_config import setup_logging
from portal.pages import router as pages_router
from portal.templating import STATIC_DIR

load_dotenv()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings)
    app.state.session_provider = SessionProvider()
    if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
        logger.warning("SUPABASE_URL or SUPABASE_KEY is not set; every session lookup will fail")
    logger.info(f"Portal started ({settings.CLUB_NAME})")
    yield
    logger.info("Portal stopped")


app = FastAPI(
    title="Club 6713 Members Portal",
    description="Members dashboard, event requests, personal training and room booking",
    version="1.0.0",
    lifespan=lifespan,
)

app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

app.include_router(pages_router)
app.include_router(auth_router)
app.include_router(events_router)
app.include_router(events_api_router)


# ==================== Error handling ====================

def _is_api_request(request: Request) -> bool:
    return request.url.path.startswith("/api/")


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    """No session: redirect to the landing page (API callers get 401)"""
    if _is_api_request(request):
        response = JSONResponse(status_code=401, content={"detail": exc.message})
    else:
        response = RedirectResponse(url="/", status_code=303)
    return clear_session_cookie(response)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.message, "fields": exc.fields})


@app.exception_handler(PermissionDenied)
async def permission_denied_handler(request: Request, exc: PermissionDenied):
    return JSONResponse(status_code=403, content={"detail": exc.message})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    return JSONResponse(status_code=502, content={"detail": exc.message})


@app.get("/api/status")
async def api_status():
    """Health check"""
    settings = get_settings()
    return {
        "status": "ok",
        "club": settings.CLUB_NAME,
        "supabase_configured": bool(settings.SUPABASE_URL and settings.SUPABASE_KEY),
    }

