"""
Event Workflow

Every mutation is followed by a full re-read of both list views
(read-after-write via re-query). Insert/delete return values are never
patched into the lists.
"""
from typing import Any

from .models import EventLists, EventRequest
from .store import EventStore


class EventWorkflow:
    """Event request workflow for one member"""

    def __init__(self, store: EventStore):
        self.store = store

    async def refresh(self, user_id: str) -> EventLists:
        """Re-read approved events and the member's own requests"""
        approved = await self.store.list_approved()
        mine = await self.store.list_mine(user_id)
        return EventLists(approved=approved, mine=mine)

    async def submit(self, user_id: str, **fields: Any) -> EventLists:
        """
        Validate and submit a hosting request, then re-read

        Raises:
            ValidationError: before any insert, when a required field is empty
            StoreError: insert or re-read failed
        """
        request = EventRequest.from_fields(**fields)
        await self.store.submit(user_id, request)
        return await self.refresh(user_id)

    async def withdraw(self, user_id: str, event_id: str) -> EventLists:
        """
        Withdraw an own pending request, then re-read

        Raises:
            PermissionDenied: not the owner's pending request
            StoreError: delete or re-read failed
        """
        await self.store.withdraw(user_id, event_id)
        return await self.refresh(user_id)
