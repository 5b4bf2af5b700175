"""
Jinja2 templates and toast helpers
"""
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates

from portal.config import get_settings

PROJECT_ROOT = Path(__file__).parent.parent
TEMPLATES_DIR = PROJECT_ROOT / "templates"
STATIC_DIR = PROJECT_ROOT / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def toast(title: str, description: str = "", variant: str = "default") -> Dict[str, str]:
    """User-visible notification; variant is `default` or `destructive`"""
    return {"title": title, "description": description, "variant": variant}


def error_toast(error: Exception, title: str = "Error") -> Dict[str, str]:
    return toast(title, getattr(error, "message", None) or str(error), variant="destructive")


def render(
    request: Request,
    name: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
):
    settings = get_settings()
    page_context = {
        "club_name": settings.CLUB_NAME,
        "toast": None,
    }
    page_context.update(context or {})
    return templates.TemplateResponse(request, name, page_context, status_code=status_code)
