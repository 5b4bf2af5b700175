"""
Event Store

Supabase `events` table client: list approved, list mine, submit, withdraw.
Ownership/status rules for withdraw are checked here and again by the
delete filter, which mirrors the `events_delete_own_pending` RLS policy.
"""
from typing import Any, Dict, List, Optional
from uuid import UUID

import httpx
from loguru import logger
from postgrest.exceptions import APIError
from supabase import Client

from portal.errors import PermissionDenied, StoreError
from .models import Event, EventRequest, EventStatus

EVENTS_TABLE = "events"
EVENT_COLUMNS = (
    "id, title, description, event_date, event_time, status, "
    "created_by, google_calendar_id, created_at"
)

STORE_ERRORS = (APIError, httpx.HTTPError)


def _error_message(error: Exception) -> str:
    if isinstance(error, APIError) and error.message:
        return error.message
    return str(error) or error.__class__.__name__


def _is_uuid(value: Any) -> bool:
    try:
        UUID(str(value))
    except ValueError:
        return False
    return True


class EventStore:
    """`events` table operations"""

    def __init__(self, client: Client):
        self.supabase = client

    def _rows_to_events(self, rows: List[Dict[str, Any]]) -> List[Event]:
        return [Event(**row) for row in rows or []]

    # =============================================
    # Queries
    # =============================================

    async def list_approved(self) -> List[Event]:
        """Every approved event, ascending by date (then time)"""
        try:
            response = self.supabase.table(EVENTS_TABLE).select(EVENT_COLUMNS).eq(
                "status", EventStatus.APPROVED.value
            ).order("event_date").order("event_time").execute()
        except STORE_ERRORS as e:
            logger.error(f"Approved events query failed: {e}")
            raise StoreError(_error_message(e)) from e

        return self._rows_to_events(response.data)

    async def list_mine(self, user_id: str) -> List[Event]:
        """Every event created by `user_id`, newest first"""
        try:
            response = self.supabase.table(EVENTS_TABLE).select(EVENT_COLUMNS).eq(
                "created_by", user_id
            ).order("created_at", desc=True).execute()
        except STORE_ERRORS as e:
            logger.error(f"My events query failed (user={user_id}): {e}")
            raise StoreError(_error_message(e)) from e

        return self._rows_to_events(response.data)

    async def get(self, event_id: str) -> Optional[Event]:
        """The event, or None when missing or `event_id` is not a UUID"""
        if not _is_uuid(event_id):
            return None

        try:
            response = self.supabase.table(EVENTS_TABLE).select(EVENT_COLUMNS).eq(
                "id", event_id
            ).limit(1).execute()
        except STORE_ERRORS as e:
            logger.error(f"Event lookup failed (id={event_id}): {e}")
            raise StoreError(_error_message(e)) from e

        rows = response.data or []
        return Event(**rows[0]) if rows else None

    # =============================================
    # Mutations
    # =============================================

    async def submit(self, user_id: str, request: EventRequest) -> Event:
        """
        Insert a new pending request owned by `user_id`

        The returned row is informational only; list views are re-read by the
        caller.
        """
        row = request.to_row(created_by=user_id)

        try:
            response = self.supabase.table(EVENTS_TABLE).insert(row).execute()
        except STORE_ERRORS as e:
            logger.error(f"Event insert failed (user={user_id}): {e}")
            raise StoreError(_error_message(e)) from e

        if not response.data:
            raise StoreError("The event request could not be saved")

        event = Event(**response.data[0])
        logger.info(f"Event request submitted: id={event.id} user={user_id} date={event.event_date}")
        return event

    async def withdraw(self, user_id: str, event_id: str) -> None:
        """
        Delete `event_id`

        Raises:
            PermissionDenied: not found, not owned by `user_id`, or not pending
            StoreError: data store failure
        """
        event = await self.get(event_id)

        if event is None or not event.can_withdraw(user_id):
            logger.warning(
                f"Withdraw rejected: id={event_id} user={user_id} "
                f"owner={event.created_by if event else None} status={event.status if event else None}"
            )
            raise PermissionDenied("Only your own pending requests can be withdrawn")

        try:
            response = self.supabase.table(EVENTS_TABLE).delete().eq(
                "id", event_id
            ).eq("created_by", user_id).eq(
                "status", EventStatus.PENDING.value
            ).execute()
        except STORE_ERRORS as e:
            logger.error(f"Event delete failed (id={event_id}): {e}")
            raise StoreError(_error_message(e)) from e

        # status changed between the read and the delete
        if not response.data:
            logger.warning(f"Withdraw matched no row: id={event_id} user={user_id}")
            raise PermissionDenied("Only your own pending requests can be withdrawn")

        logger.info(f"Event request withdrawn: id={event_id} user={user_id}")
