"""
Leave Service Layer

Business logic for leave requests: application, the approval state machine,
self-service cancellation, balances, listings and statistics.

Architecture:
- Router -> Service (this module) -> Ledger / Models
- Every function takes the request-scoped Session explicitly
- Ledger mutations happen only on approval and on reversal of an approval
"""
import logging
from datetime import date, datetime, timezone
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, update
from sqlalchemy.orm import Session, joinedload

from hrdesk.core.config import settings
from hrdesk.core.exceptions import (
    AuthorizationError,
    InsufficientBalanceError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from hrdesk.models.leave_balance import LeaveBalance
from hrdesk.models.leave_request import HalfDayType, LeaveRequest, LeaveStatus, LeaveType
from hrdesk.models.user import User
from hrdesk.schemas.leave import LeaveApplyRequest, LeaveStats, RemainingBalance
from hrdesk.services.audit import AuditService
from hrdesk.services.user_service import get_user, list_employees
from hrdesk.services.leave_calculator import count_leave_days
from hrdesk.services.leave_ledger import LeaveLedger, available_days, tracked_prefix

logger = logging.getLogger(__name__)

# Admin-driven transitions; anything not listed is refused
ALLOWED_TRANSITIONS: Dict[LeaveStatus, set] = {
    LeaveStatus.PENDING: {LeaveStatus.APPROVED, LeaveStatus.REJECTED, LeaveStatus.CANCELLED},
    LeaveStatus.APPROVED: {LeaveStatus.REJECTED, LeaveStatus.CANCELLED},
    LeaveStatus.REJECTED: set(),
    LeaveStatus.CANCELLED: set(),
}


def _parse_leave_type(value: str) -> LeaveType:
    try:
        return LeaveType(str(value).strip().upper())
    except ValueError:
        raise ValidationError(
            f"Invalid leave type: {value}",
            details={"allowed": [t.value for t in LeaveType]}
        )


def _parse_status(value: str) -> LeaveStatus:
    try:
        return LeaveStatus(str(value).strip().upper())
    except ValueError:
        raise ValidationError(
            f"Invalid leave status: {value}",
            details={"allowed": [s.value for s in LeaveStatus]}
        )


def _snapshot(leave: LeaveRequest) -> dict:
    return {
        "status": leave.status,
        "approved_by": leave.approved_by,
        "approved_at": leave.approved_at,
        "comments": leave.comments,
    }


def get_leave_request(db: Session, leave_id: int) -> LeaveRequest:
    leave = db.query(LeaveRequest).options(
        joinedload(LeaveRequest.user),
        joinedload(LeaveRequest.approver)
    ).filter(LeaveRequest.id == leave_id).first()
    if not leave:
        raise NotFoundError(f"Leave request {leave_id} not found")
    return leave


# =========================
# Balance
# =========================

def get_leave_balance(db: Session, user_id: int, year: Optional[int] = None) -> LeaveBalance:
    """
    Return the user's balance for `year` (default: current year), creating it
    with the default allotments if it does not exist yet.
    """
    get_user(db, user_id)
    year = year or date.today().year

    balance = LeaveLedger(db).get_or_create(user_id, year)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(balance)
    return balance


# =========================
# Application
# =========================

def apply_leave(db: Session, user_id: int, data: LeaveApplyRequest) -> LeaveRequest:
    """
    Create a PENDING leave request.

    Tracked types (CASUAL/SICK/ANNUAL) must have `total - used >= days` for the
    year of from_date. Nothing is reserved here: the ledger only moves on
    approval, so concurrent pending requests are each checked against the
    current used balance alone.
    """
    get_user(db, user_id)
    leave_type = _parse_leave_type(data.type)

    if data.from_date > data.to_date:
        raise ValidationError(
            "from_date must be on or before to_date",
            details={"from_date": data.from_date.isoformat(), "to_date": data.to_date.isoformat()}
        )

    if data.to_date >= date.max:
        # the calendar's exclusive end (to_date + 1 day) must stay representable
        raise ValidationError(
            f"to_date must be before {date.max.isoformat()}",
            details={"to_date": data.to_date.isoformat()}
        )

    half_day_type = None
    if data.half_day:
        if not data.half_day_type:
            raise ValidationError("half_day_type is required for half-day leave")
        try:
            half_day_type = HalfDayType(data.half_day_type.strip().upper())
        except ValueError:
            raise ValidationError(
                f"Invalid half_day_type: {data.half_day_type}",
                details={"allowed": [h.value for h in HalfDayType]}
            )

    days = count_leave_days(data.from_date, data.to_date, data.half_day)

    if tracked_prefix(leave_type.value):
        balance = LeaveLedger(db).get_or_create(user_id, data.from_date.year)
        available = available_days(balance, leave_type.value)
        if available < days:
            logger.warning(
                f"Leave application rejected for user {user_id}: {days} {leave_type.value} day(s) requested, {available} available"
            )
            db.rollback()
            raise InsufficientBalanceError(leave_type.value, days, available)

    leave = LeaveRequest(
        user_id=user_id,
        type=leave_type.value,
        from_date=data.from_date,
        to_date=data.to_date,
        days=days,
        reason=data.reason or "",
        status=LeaveStatus.PENDING.value,
        half_day=data.half_day,
        half_day_type=half_day_type.value if half_day_type else None,
        emergency=data.emergency,
    )
    db.add(leave)
    try:
        db.flush()
        AuditService.log(
            db,
            action="apply_leave",
            entity_type="leave_request",
            entity_id=leave.id,
            user_id=user_id,
            details={"type": leave.type, "days": days, "from_date": leave.from_date, "to_date": leave.to_date},
            after_state=_snapshot(leave)
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(leave)

    logger.info(
        f"Leave request {leave.id} created for user {user_id} ({leave.type}, {days} day(s))",
        extra={"leave_id": leave.id, "user_id": user_id}
    )
    return leave


# =========================
# Approval state machine
# =========================

def _claim_transition(
    db: Session,
    leave: LeaveRequest,
    current: LeaveStatus,
    new_status: LeaveStatus,
    approver_id: int,
    comments: Optional[str]
) -> bool:
    """
    Move the request to new_status only if it still holds `current`.

    A single UPDATE ... WHERE status = :current, so of two concurrent
    approvals exactly one matches a row and goes on to touch the ledger.
    """
    result = db.execute(
        update(LeaveRequest)
        .where(LeaveRequest.id == leave.id, LeaveRequest.status == current.value)
        .values(
            status=new_status.value,
            approved_by=approver_id,
            approved_at=datetime.now(timezone.utc) if new_status == LeaveStatus.APPROVED else None,
            comments=comments,
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def update_leave_status(
    db: Session,
    leave_id: int,
    approver_id: int,
    status: str,
    comments: Optional[str] = None
) -> LeaveRequest:
    """
    Admin-driven status change.

    PENDING may move to APPROVED, REJECTED or CANCELLED; APPROVED may be reversed
    to REJECTED or CANCELLED. Approving debits the ledger by `days`; reversing an
    approval credits it back (clamped at zero). The status change and the ledger
    adjustment commit together.
    """
    leave = get_leave_request(db, leave_id)
    new_status = _parse_status(status)
    if new_status == LeaveStatus.PENDING:
        raise ValidationError("A leave request cannot be moved back to PENDING")

    current = LeaveStatus(leave.status)
    if new_status not in ALLOWED_TRANSITIONS[current]:
        logger.warning(f"Refused leave {leave_id} transition {current.value} -> {new_status.value}")
        raise InvalidStateError(
            f"Cannot change leave request from {current.value} to {new_status.value}",
            details={"current_status": current.value, "requested_status": new_status.value}
        )

    get_user(db, approver_id)
    before_state = _snapshot(leave)

    ledger = LeaveLedger(db)
    year = leave.from_date.year
    ledger_delta = 0.0
    try:
        if not _claim_transition(db, leave, current, new_status, approver_id, comments):
            logger.warning(f"Leave {leave_id} changed status concurrently, {current.value} -> {new_status.value} refused")
            raise InvalidStateError(
                f"Leave request {leave_id} is no longer {current.value}",
                details={"expected_status": current.value, "requested_status": new_status.value}
            )
        db.refresh(leave)

        if new_status == LeaveStatus.APPROVED:
            if ledger.increment(leave.user_id, year, leave.type, leave.days) is not None:
                ledger_delta = leave.days
        elif current == LeaveStatus.APPROVED:
            if ledger.decrement(leave.user_id, year, leave.type, leave.days) is not None:
                ledger_delta = -leave.days

        AuditService.log(
            db,
            action=f"leave_{new_status.value.lower()}",
            entity_type="leave_request",
            entity_id=leave.id,
            user_id=approver_id,
            details={
                "owner_id": leave.user_id,
                "type": leave.type,
                "days": leave.days,
                "ledger_year": year,
                "ledger_delta": ledger_delta,
            },
            before_state=before_state,
            after_state=_snapshot(leave)
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(leave)

    logger.info(
        f"Leave request {leave.id}: {current.value} -> {new_status.value} by user {approver_id}",
        extra={"leave_id": leave.id, "ledger_delta": ledger_delta}
    )
    return leave


def cancel_leave_request(db: Session, leave_id: int, user_id: int) -> LeaveRequest:
    """Owner cancels their own PENDING request. The ledger is never touched."""
    leave = get_leave_request(db, leave_id)

    if leave.user_id != user_id:
        logger.warning(f"User {user_id} attempted to cancel leave {leave_id} owned by {leave.user_id}")
        raise AuthorizationError("You can only cancel your own leave requests")

    if leave.status != LeaveStatus.PENDING.value:
        raise InvalidStateError(
            f"Only pending leave requests can be cancelled (current status: {leave.status})",
            details={"current_status": leave.status}
        )

    before_state = _snapshot(leave)
    leave.status = LeaveStatus.CANCELLED.value
    try:
        db.flush()
        AuditService.log(
            db,
            action="cancel_leave",
            entity_type="leave_request",
            entity_id=leave.id,
            user_id=user_id,
            details={"type": leave.type, "days": leave.days},
            before_state=before_state,
            after_state=_snapshot(leave)
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(leave)

    logger.info(f"Leave request {leave.id} cancelled by owner {user_id}")
    return leave


# =========================
# Listings
# =========================

def _filtered_query(
    db: Session,
    status: Optional[str] = None,
    user_id: Optional[int] = None,
    year: Optional[int] = None,
    leave_type: Optional[str] = None
):
    query = db.query(LeaveRequest).options(
        joinedload(LeaveRequest.user),
        joinedload(LeaveRequest.approver)
    )
    if status:
        query = query.filter(LeaveRequest.status == _parse_status(status).value)
    if user_id is not None:
        query = query.filter(LeaveRequest.user_id == user_id)
    if year:
        query = query.filter(
            LeaveRequest.from_date >= date(year, 1, 1),
            LeaveRequest.from_date <= date(year, 12, 31)
        )
    if leave_type:
        query = query.filter(LeaveRequest.type == _parse_leave_type(leave_type).value)
    return query


def _paginate(query, page: int, limit: int) -> Tuple[List[LeaveRequest], int]:
    page = max(page, 1)
    limit = min(max(limit, 1), settings.max_page_size)
    total = query.order_by(None).count()
    items = query.order_by(
        LeaveRequest.created_at.desc(),
        LeaveRequest.id.desc()
    ).offset((page - 1) * limit).limit(limit).all()
    return items, total


def get_my_leaves(
    db: Session,
    user_id: int,
    status: Optional[str] = None,
    year: Optional[int] = None,
    leave_type: Optional[str] = None,
    page: int = 1,
    limit: int = settings.default_page_size
) -> Tuple[List[LeaveRequest], int]:
    get_user(db, user_id)
    query = _filtered_query(db, status=status, user_id=user_id, year=year, leave_type=leave_type)
    return _paginate(query, page, limit)


def get_all_leaves(
    db: Session,
    status: Optional[str] = None,
    user_id: Optional[int] = None,
    year: Optional[int] = None,
    leave_type: Optional[str] = None,
    page: int = 1,
    limit: int = settings.default_page_size
) -> Tuple[List[LeaveRequest], int]:
    query = _filtered_query(db, status=status, user_id=user_id, year=year, leave_type=leave_type)
    return _paginate(query, page, limit)


# =========================
# Statistics & lookups
# =========================

def get_leave_stats(db: Session, user_id: Optional[int] = None, year: Optional[int] = None) -> LeaveStats:
    """Request counts per status for `year`; with a user, also their remaining balance."""
    year = year or date.today().year
    if user_id is not None:
        get_user(db, user_id)

    query = db.query(LeaveRequest.status, func.count(LeaveRequest.id)).filter(
        LeaveRequest.from_date >= date(year, 1, 1),
        LeaveRequest.from_date <= date(year, 12, 31)
    )
    if user_id is not None:
        query = query.filter(LeaveRequest.user_id == user_id)
    counts = {row[0]: row[1] for row in query.group_by(LeaveRequest.status).all()}

    leave_balance = None
    if user_id is not None:
        balance = get_leave_balance(db, user_id, year)
        leave_balance = RemainingBalance(
            casual=balance.casual_remaining,
            sick=balance.sick_remaining,
            annual=balance.annual_remaining,
        )

    return LeaveStats(
        year=year,
        total_leaves=sum(counts.values()),
        pending=counts.get(LeaveStatus.PENDING.value, 0),
        approved=counts.get(LeaveStatus.APPROVED.value, 0),
        rejected=counts.get(LeaveStatus.REJECTED.value, 0),
        cancelled=counts.get(LeaveStatus.CANCELLED.value, 0),
        leave_balance=leave_balance,
    )


def list_leave_types() -> List[Dict[str, str]]:
    return [{"value": t.value, "label": f"{t.value.title()} Leave"} for t in LeaveType]


def list_leave_statuses() -> List[Dict[str, str]]:
    return [{"value": s.value, "label": s.value.title()} for s in LeaveStatus]


def get_users_for_leave_management(db: Session) -> List[User]:
    return list_employees(db)
