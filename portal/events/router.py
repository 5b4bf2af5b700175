"""
Events Router

HTML:
    GET  /events                      calendar + my requests
    POST /events                      submit a hosting request
    POST /events/{event_id}/withdraw  withdraw an own pending request

JSON:
    GET    /api/events/approved
    GET    /api/events/mine
    POST   /api/events
    DELETE /api/events/{event_id}
"""
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, Form, Query, Request
from pydantic import BaseModel

from database.supabase_client import create_supabase_client
from portal.auth.guard import SessionGuard, session_guard, require_session
from portal.auth.session import Session
from portal.errors import PermissionDenied, StoreError, ValidationError
from portal.templating import error_toast, render, toast
from .models import Event, EventLists
from .presenter import build_board, events_on
from .service import EventWorkflow
from .store import EventStore

router = APIRouter(tags=["events"])
api_router = APIRouter(prefix="/api/events", tags=["events"])


def get_event_store(session: Session = Depends(require_session)) -> EventStore:
    """Store bound to the member's own token, so RLS applies"""
    return EventStore(create_supabase_client(access_token=session.access_token))


def get_event_workflow(store: EventStore = Depends(get_event_store)) -> EventWorkflow:
    return EventWorkflow(store)


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _parse_month(value: Optional[str]) -> Optional[Tuple[int, int]]:
    if not value:
        return None
    try:
        parsed = datetime.strptime(value, "%Y-%m")
    except ValueError:
        return None
    return parsed.year, parsed.month


def _render_events(
    request: Request,
    guard: SessionGuard,
    lists: EventLists,
    selected: Optional[date],
    month: Optional[Tuple[int, int]] = None,
    toast_data: Optional[Dict[str, str]] = None,
    form: Optional[Dict[str, str]] = None,
    status_code: int = 200,
):
    session = guard.check()
    board = build_board(lists, session.user_id, selected=selected, month=month)
    return render(
        request,
        "events.html",
        {
            "board": board,
            "toast": toast_data,
            "form": form or {},
            "show_form": bool(form),
            "session": session,
        },
        status_code=status_code,
    )


# =============================================
# HTML
# =============================================

@router.get("/events")
async def events_page(
    request: Request,
    date_param: Optional[str] = Query(None, alias="date"),
    month: Optional[str] = Query(None),
    guard: SessionGuard = Depends(session_guard),
    workflow: EventWorkflow = Depends(get_event_workflow),
):
    """Calendar of approved events and the member's own requests"""
    selected = _parse_date(date_param) or date.today()
    session = guard.check()

    try:
        lists = await workflow.refresh(session.user_id)
    except StoreError as e:
        return _render_events(
            request, guard, EventLists(), selected, _parse_month(month),
            toast_data=error_toast(e),
        )

    return _render_events(request, guard, lists, selected, _parse_month(month))


@router.post("/events")
async def submit_event_request(
    request: Request,
    title: str = Form(""),
    description: str = Form(""),
    event_date: str = Form(""),
    event_time: str = Form(""),
    guard: SessionGuard = Depends(session_guard),
    workflow: EventWorkflow = Depends(get_event_workflow),
):
    """Request to host an event"""
    session = guard.check()
    form = {
        "title": title,
        "description": description,
        "event_date": event_date,
        "event_time": event_time,
    }
    selected = _parse_date(event_date) or date.today()

    try:
        lists = await workflow.submit(session.user_id, **form)
    except (ValidationError, StoreError) as e:
        status_code = 400 if isinstance(e, ValidationError) else 502
        try:
            lists = await workflow.refresh(session.user_id)
        except StoreError:
            lists = EventLists()
        return _render_events(
            request, guard, lists, selected,
            toast_data=error_toast(e), form=form, status_code=status_code,
        )

    return _render_events(
        request, guard, lists, selected,
        toast_data=toast(
            "Event request submitted!",
            "We'll review your request and get back to you soon.",
        ),
    )


@router.post("/events/{event_id}/withdraw")
async def withdraw_event_request(
    request: Request,
    event_id: str,
    guard: SessionGuard = Depends(session_guard),
    workflow: EventWorkflow = Depends(get_event_workflow),
):
    """Withdraw an own pending request"""
    session = guard.check()

    try:
        lists = await workflow.withdraw(session.user_id, event_id)
    except (PermissionDenied, StoreError) as e:
        status_code = 403 if isinstance(e, PermissionDenied) else 502
        try:
            lists = await workflow.refresh(session.user_id)
        except StoreError:
            lists = EventLists()
        return _render_events(
            request, guard, lists, date.today(),
            toast_data=error_toast(e), status_code=status_code,
        )

    return _render_events(
        request, guard, lists, date.today(),
        toast_data=toast("Request withdrawn", "Your event request has been removed."),
    )


# =============================================
# JSON API
# =============================================

class EventRequestIn(BaseModel):
    """Raw request body; required fields are checked by the workflow"""
    title: Optional[str] = None
    description: Optional[str] = None
    event_date: Optional[str] = None
    event_time: Optional[str] = None


class EventListsOut(BaseModel):
    approved: List[Event]
    mine: List[Event]


@api_router.get("/approved", response_model=List[Event])
async def api_approved_events(
    date_param: Optional[str] = Query(None, alias="date", description="YYYY-MM-DD"),
    session: Session = Depends(require_session),
    store: EventStore = Depends(get_event_store),
):
    """Approved events, optionally only those on one date"""
    selected = _parse_date(date_param)
    if date_param and selected is None:
        raise ValidationError("date must be YYYY-MM-DD", fields=["date"])

    approved = await store.list_approved()
    return events_on(selected, approved) if selected else approved


@api_router.get("/mine", response_model=List[Event])
async def api_my_events(
    session: Session = Depends(require_session),
    store: EventStore = Depends(get_event_store),
):
    """The member's own requests, newest first"""
    return await store.list_mine(session.user_id)


@api_router.post("", response_model=EventListsOut, status_code=201)
async def api_submit_event(
    body: EventRequestIn,
    session: Session = Depends(require_session),
    workflow: EventWorkflow = Depends(get_event_workflow),
):
    """Submit a hosting request; returns both lists re-read from the store"""
    lists = await workflow.submit(session.user_id, **body.model_dump())
    return EventListsOut(approved=lists.approved, mine=lists.mine)


@api_router.delete("/{event_id}", response_model=EventListsOut)
async def api_withdraw_event(
    event_id: str,
    session: Session = Depends(require_session),
    workflow: EventWorkflow = Depends(get_event_workflow),
):
    """Withdraw an own pending request; returns both lists re-read from the store"""
    lists = await workflow.withdraw(session.user_id, event_id)
    return EventListsOut(approved=lists.approved, mine=lists.mine)
