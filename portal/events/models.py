"""
Event Models - Pydantic model definitions
"""
from datetime import date, datetime, time
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, field_validator
from pydantic import ValidationError as PydanticValidationError

from portal.errors import ValidationError


class EventStatus(str, Enum):
    """Event request status"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


REQUIRED_FIELDS = ("title", "event_date", "event_time")

FIELD_LABELS = {
    "title": "Event Title",
    "description": "Event Description",
    "event_date": "Event Date",
    "event_time": "Event Time",
}


# =============================================
# Request Models
# =============================================

class EventRequest(BaseModel):
    """Event hosting request submitted by a member"""
    title: str
    description: Optional[str] = None
    event_date: date
    event_time: time

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v

    @field_validator("description")
    @classmethod
    def blank_description_is_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v

    @classmethod
    def from_fields(
        cls,
        title: Any = None,
        description: Any = None,
        event_date: Any = None,
        event_time: Any = None,
    ) -> "EventRequest":
        """
        Build a request from raw form/JSON values

        Raises:
            ValidationError: a required field is empty or a value does not parse
        """
        values = {
            "title": title,
            "description": description,
            "event_date": event_date,
            "event_time": event_time,
        }
        missing = [
            name for name in REQUIRED_FIELDS
            if values[name] is None or not str(values[name]).strip()
        ]
        if missing:
            labels = ", ".join(FIELD_LABELS[name] for name in missing)
            raise ValidationError(f"Please fill in: {labels}", fields=missing)

        try:
            return cls(**values)
        except PydanticValidationError as e:
            fields = [str(err["loc"][0]) for err in e.errors() if err.get("loc")]
            labels = ", ".join(FIELD_LABELS.get(name, name) for name in fields)
            raise ValidationError(f"Invalid value for: {labels}", fields=fields) from e

    def to_row(self, created_by: str) -> dict:
        """Row for the `events` table; new requests always start pending"""
        return {
            "title": self.title,
            "description": self.description,
            "event_date": self.event_date.isoformat(),
            "event_time": self.event_time.strftime("%H:%M"),
            "created_by": created_by,
            "status": EventStatus.PENDING.value,
        }


# =============================================
# Stored Models
# =============================================

class Event(BaseModel):
    """Row of the `events` table"""
    id: str
    title: str
    description: Optional[str] = None
    event_date: date
    event_time: time
    # raw value, unknown statuses are kept and rendered as pending
    status: Optional[str] = EventStatus.PENDING.value
    created_by: str
    google_calendar_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("id", "created_by", mode="before")
    @classmethod
    def coerce_identifier(cls, v):
        return str(v) if v is not None else v

    @property
    def is_pending(self) -> bool:
        return self.status == EventStatus.PENDING.value

    @property
    def is_approved(self) -> bool:
        return self.status == EventStatus.APPROVED.value

    def can_withdraw(self, user_id: Optional[str]) -> bool:
        """Only the creator, and only while pending"""
        return user_id is not None and self.created_by == str(user_id) and self.is_pending


class EventLists(BaseModel):
    """Both list views, always re-read together after a mutation"""
    approved: List[Event] = []
    mine: List[Event] = []
