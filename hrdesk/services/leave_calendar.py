import calendar
import logging
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from hrdesk.core.exceptions import ValidationError
from hrdesk.models.leave_request import LeaveRequest, LeaveStatus, LeaveType
from hrdesk.schemas.leave import LeaveCalendarEvent

logger = logging.getLogger(__name__)

DEFAULT_COLOR = "#6b7280"

# Status colors win over type colors
STATUS_COLORS = {
    LeaveStatus.PENDING.value: "#f59e0b",
    LeaveStatus.APPROVED.value: "#10b981",
    LeaveStatus.REJECTED.value: "#ef4444",
    LeaveStatus.CANCELLED.value: "#9ca3af",
}

TYPE_COLORS = {
    LeaveType.CASUAL.value: "#3b82f6",
    LeaveType.SICK.value: "#8b5cf6",
    LeaveType.ANNUAL.value: "#06b6d4",
    LeaveType.MATERNITY.value: "#ec4899",
    LeaveType.PATERNITY.value: "#6366f1",
    LeaveType.UNPAID.value: "#78716c",
}


def resolve_color(status: str, leave_type: str) -> str:
    return STATUS_COLORS.get(status) or TYPE_COLORS.get(leave_type) or DEFAULT_COLOR


def exclusive_end(to_date: date) -> date:
    """Day after to_date; date.max has no successor and is returned as is."""
    if to_date >= date.max:
        return date.max
    return to_date + timedelta(days=1)


def month_bounds(year: int, month: int):
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid month: {month}. Must be between 1 and 12.")
    if not 1 <= year <= 9999:
        raise ValidationError(f"Invalid year: {year}")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def get_leave_calendar(
    db: Session,
    year: int,
    month: int,
    user_id: Optional[int] = None
) -> List[LeaveCalendarEvent]:
    """
    One display event per leave request overlapping the month.

    `end` is exclusive (to_date + 1 day), the convention calendar widgets use
    for all-day events.
    """
    month_start, month_end = month_bounds(year, month)

    query = db.query(LeaveRequest).options(joinedload(LeaveRequest.user)).filter(
        LeaveRequest.from_date <= month_end,
        LeaveRequest.to_date >= month_start
    )
    if user_id is not None:
        query = query.filter(LeaveRequest.user_id == user_id)
    leaves = query.order_by(LeaveRequest.from_date.asc(), LeaveRequest.id.asc()).all()

    events = []
    for leave in leaves:
        user_name = leave.user_name or f"User #{leave.user_id}"
        events.append(LeaveCalendarEvent(
            id=leave.id,
            title=f"{user_name} - {leave.type}",
            start=leave.from_date,
            end=exclusive_end(leave.to_date),
            type=leave.type,
            status=leave.status,
            user_id=leave.user_id,
            user_name=user_name,
            all_day=True,
            color=resolve_color(leave.status, leave.type),
        ))

    logger.debug(f"Calendar {year}-{month:02d}: {len(events)} event(s)")
    return events
