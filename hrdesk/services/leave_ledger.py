"""
Leave Balance Ledger

Keeps the (user, year) -> {casual, sick, annual} x {total, used} mapping.
Only current totals live here; individual adjustments are recorded by the
audit trail.

Counter updates are issued as single UPDATE statements evaluated by the
database (used = used + :days), never as read-modify-write from Python, so
two approvals for the same user/year/type cannot lose each other's update.
"""
import logging
from typing import Optional

from sqlalchemy import case, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hrdesk.core.config import LeaveAllotments, settings
from hrdesk.models.leave_balance import LeaveBalance

logger = logging.getLogger(__name__)

# Leave types with a ledger column prefix; everything else is untracked
TRACKED_LEAVE_TYPES = {
    "CASUAL": "casual",
    "SICK": "sick",
    "ANNUAL": "annual",
}


def tracked_prefix(leave_type: str) -> Optional[str]:
    """Column prefix for a leave type (case-insensitive), or None when untracked."""
    return TRACKED_LEAVE_TYPES.get(str(leave_type).upper())


def available_days(balance: LeaveBalance, leave_type: str) -> Optional[float]:
    prefix = tracked_prefix(leave_type)
    if prefix is None:
        return None
    return getattr(balance, f"{prefix}_total") - getattr(balance, f"{prefix}_used")


class LeaveLedger:
    def __init__(self, db: Session, allotments: Optional[LeaveAllotments] = None):
        self.db = db
        self.allotments = allotments or settings.leave_allotments

    def _find(self, user_id: int, year: int) -> Optional[LeaveBalance]:
        return self.db.query(LeaveBalance).filter(
            LeaveBalance.user_id == user_id,
            LeaveBalance.year == year
        ).first()

    def get_or_create(self, user_id: int, year: int) -> LeaveBalance:
        """
        Return the balance row for (user_id, year), creating it with the
        configured default allotments on first use. Flushes, does not commit.
        """
        balance = self._find(user_id, year)
        if balance:
            return balance

        balance = LeaveBalance(
            user_id=user_id,
            year=year,
            casual_total=self.allotments.casual,
            casual_used=0.0,
            sick_total=self.allotments.sick,
            sick_used=0.0,
            annual_total=self.allotments.annual,
            annual_used=0.0,
        )
        try:
            with self.db.begin_nested():
                self.db.add(balance)
        except IntegrityError:
            # Lost the race against a concurrent creator; theirs is identical
            logger.info(f"Leave balance for user {user_id}/{year} created concurrently, reusing it")
            return self.db.query(LeaveBalance).filter(
                LeaveBalance.user_id == user_id,
                LeaveBalance.year == year
            ).one()

        logger.info(
            f"Created leave balance for user {user_id}/{year}",
            extra={"user_id": user_id, "year": year}
        )
        return balance

    def _adjust(self, user_id: int, year: int, leave_type: str, days: float, increase: bool) -> Optional[LeaveBalance]:
        prefix = tracked_prefix(leave_type)
        if prefix is None:
            return None

        balance = self.get_or_create(user_id, year)
        column = getattr(LeaveBalance, f"{prefix}_used")
        if increase:
            new_value = column + days
        else:
            new_value = case((column - days < 0, 0.0), else_=column - days)

        self.db.execute(
            update(LeaveBalance)
            .where(LeaveBalance.id == balance.id)
            .values({column: new_value})
            .execution_options(synchronize_session=False)
        )
        self.db.refresh(balance)
        logger.info(
            f"Ledger {'debit' if increase else 'credit'} of {days} {prefix} day(s) for user {user_id}/{year}",
            extra={"user_id": user_id, "year": year, "leave_type": prefix, "days": days}
        )
        return balance

    def increment(self, user_id: int, year: int, leave_type: str, days: float) -> Optional[LeaveBalance]:
        """Add days to the *_used counter of leave_type. No-op (None) for untracked types."""
        return self._adjust(user_id, year, leave_type, days, increase=True)

    def decrement(self, user_id: int, year: int, leave_type: str, days: float) -> Optional[LeaveBalance]:
        """Subtract days from the *_used counter, clamped at zero. No-op (None) for untracked types."""
        return self._adjust(user_id, year, leave_type, days, increase=False)
