"""
Events Module

Event hosting requests: members submit, an approver decides out of band,
approved events show on the shared calendar.
"""
from .models import Event, EventLists, EventRequest, EventStatus
from .store import EventStore
from .service import EventWorkflow
from .presenter import EventBoard, StatusBadge, build_board, events_on, status_badge

__all__ = [
    "Event",
    "EventLists",
    "EventRequest",
    "EventStatus",
    "EventStore",
    "EventWorkflow",
    "EventBoard",
    "StatusBadge",
    "build_board",
    "events_on",
    "status_badge",
]
