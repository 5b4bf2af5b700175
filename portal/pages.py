"""
Pages Router - landing, dashboard, personal training, room booking
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from portal.auth.guard import SessionGuard, get_access_token, get_session_provider, session_guard
from portal.auth.session import SessionProvider
from portal.config import get_settings
from portal.templating import render, toast

router = APIRouter(tags=["pages"])

MENU_ITEMS = [
    {
        "title": "Events",
        "description": "View calendar and host events",
        "icon": "calendar",
        "path": "/events",
    },
    {
        "title": "Personal Training",
        "description": "Book your training sessions",
        "icon": "dumbbell",
        "path": "/personal-training",
    },
    {
        "title": "Room Booking",
        "description": "Reserve club rooms",
        "icon": "door",
        "path": "/room-booking",
    },
]


@router.get("/")
async def landing_page(
    request: Request,
    signed_out: bool = False,
    provider: SessionProvider = Depends(get_session_provider),
):
    """Landing page; members with a live session go straight to the dashboard"""
    if provider.get_session(get_access_token(request)) is not None:
        return RedirectResponse(url="/dashboard", status_code=303)

    context = {"mode": "sign-in", "email": ""}
    if signed_out:
        context["toast"] = toast("Signed out", "You have been successfully signed out.")
    return render(request, "landing.html", context)


@router.get("/dashboard")
async def dashboard_page(request: Request, guard: SessionGuard = Depends(session_guard)):
    """Members dashboard"""
    session = guard.check()
    return render(request, "dashboard.html", {"menu_items": MENU_ITEMS, "session": session})


@router.get("/personal-training")
async def personal_training_page(request: Request, guard: SessionGuard = Depends(session_guard)):
    """Embedded third-party scheduling widget"""
    guard.check()
    return render(
        request,
        "personal_training.html",
        {"booking_url": get_settings().PERSONAL_TRAINING_URL},
    )


@router.get("/room-booking")
async def room_booking_page(request: Request, guard: SessionGuard = Depends(session_guard)):
    """Placeholder until the room booking system is integrated"""
    guard.check()
    return render(
        request,
        "room_booking.html",
        {"provider_name": get_settings().ROOM_BOOKING_PROVIDER},
    )
