# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import (
    user, leave_balance, leave_request, audit_log,
    salary_structure, payslip
)

# Explicit class exports for cleaner imports
from .user import User, UserRole
from .leave_balance import LeaveBalance
from .leave_request import LeaveRequest, LeaveStatus, LeaveType, HalfDayType
from .audit_log import AuditLog
from .salary_structure import SalaryStructure
from .payslip import Payslip, PayslipStatus

__all__ = [
    "User",
    "UserRole",
    "LeaveBalance",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveType",
    "HalfDayType",
    "AuditLog",
    "SalaryStructure",
    "Payslip",
    "PayslipStatus",
]
