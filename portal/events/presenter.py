"""
Event List Presenter

Pure derivations over the fetched lists:
- calendar filter (approved events on the selected date)
- status badge (approved / rejected / pending-default)
- month grid for the calendar widget

Dates are naive calendar dates end to end; the selected date is compared
with `event_date` as-is, with no timezone conversion.
"""
import calendar
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Set, Tuple

from .models import Event, EventLists, EventStatus


@dataclass(frozen=True)
class StatusBadge:
    key: str
    label: str
    css_class: str


STATUS_BADGES = {
    EventStatus.APPROVED: StatusBadge("approved", "Approved", "badge badge-approved"),
    EventStatus.REJECTED: StatusBadge("rejected", "Rejected", "badge badge-rejected"),
    EventStatus.PENDING: StatusBadge("pending", "Pending", "badge badge-pending"),
}


def status_badge(status: Optional[str]) -> StatusBadge:
    """Map a status to its badge; anything unrecognized gets the pending badge"""
    try:
        return STATUS_BADGES[EventStatus(status)]
    except ValueError:
        return STATUS_BADGES[EventStatus.PENDING]


def events_on(selected: Optional[date], events: Iterable[Event]) -> List[Event]:
    """Events whose `event_date` equals `selected`"""
    if selected is None:
        return []
    return [event for event in events if event.event_date == selected]


@dataclass
class CalendarDay:
    day: date
    in_month: bool
    has_events: bool
    is_selected: bool
    is_today: bool


def month_grid(
    year: int,
    month: int,
    approved: Iterable[Event],
    selected: Optional[date] = None,
    today: Optional[date] = None,
) -> List[List[CalendarDay]]:
    """Weeks (Sunday first) covering `year-month`"""
    today = today or date.today()
    event_days: Set[date] = {event.event_date for event in approved}

    weeks = []
    for week in calendar.Calendar(firstweekday=calendar.SUNDAY).monthdatescalendar(year, month):
        weeks.append([
            CalendarDay(
                day=day,
                in_month=day.month == month,
                has_events=day in event_days,
                is_selected=day == selected,
                is_today=day == today,
            )
            for day in week
        ])
    return weeks


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


@dataclass
class MyEventRow:
    event: Event
    badge: StatusBadge
    can_withdraw: bool


@dataclass
class EventBoard:
    """Everything the events page renders"""
    selected_date: Optional[date]
    year: int
    month: int
    weeks: List[List[CalendarDay]]
    events_on_date: List[Event]
    approved: List[Event]
    my_events: List[MyEventRow] = field(default_factory=list)

    @property
    def month_label(self) -> str:
        return f"{calendar.month_name[self.month]} {self.year}"

    @property
    def prev_month(self) -> str:
        year, month = shift_month(self.year, self.month, -1)
        return f"{year:04d}-{month:02d}"

    @property
    def next_month(self) -> str:
        year, month = shift_month(self.year, self.month, 1)
        return f"{year:04d}-{month:02d}"


def build_board(
    lists: EventLists,
    user_id: str,
    selected: Optional[date] = None,
    month: Optional[Tuple[int, int]] = None,
    today: Optional[date] = None,
) -> EventBoard:
    """Partition the fetched lists into the calendar view and the member's own requests"""
    today = today or date.today()
    anchor = selected or today
    year, month_number = month or (anchor.year, anchor.month)

    # the store only returns approved rows for this list, but the
    # calendar must never show anything else
    approved = [event for event in lists.approved if event.is_approved]

    return EventBoard(
        selected_date=selected,
        year=year,
        month=month_number,
        weeks=month_grid(year, month_number, approved, selected=selected, today=today),
        events_on_date=events_on(selected, approved),
        approved=approved,
        my_events=[
            MyEventRow(
                event=event,
                badge=status_badge(event.status),
                can_withdraw=event.can_withdraw(user_id),
            )
            for event in lists.mine
        ],
    )
