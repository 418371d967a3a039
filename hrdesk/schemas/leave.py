from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Optional


class LeaveApplyRequest(BaseModel):
    type: str = Field(..., description="CASUAL, SICK, ANNUAL, MATERNITY, PATERNITY or UNPAID")
    from_date: date
    to_date: date
    reason: Optional[str] = Field(None, max_length=1000)
    half_day: bool = False
    half_day_type: Optional[str] = Field(None, description="FIRST_HALF or SECOND_HALF")
    emergency: bool = False


class LeaveStatusUpdate(BaseModel):
    status: str
    approver_id: int
    comments: Optional[str] = Field(None, max_length=1000)


class LeaveRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    user_name: Optional[str] = None
    type: str
    from_date: date
    to_date: date
    days: float
    reason: Optional[str] = None
    status: str
    approved_by: Optional[int] = None
    approved_by_name: Optional[str] = None
    approved_at: Optional[datetime] = None
    half_day: bool
    half_day_type: Optional[str] = None
    emergency: bool
    comments: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LeaveBalanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    year: int
    casual_total: float
    casual_used: float
    casual_remaining: float
    sick_total: float
    sick_used: float
    sick_remaining: float
    annual_total: float
    annual_used: float
    annual_remaining: float


class RemainingBalance(BaseModel):
    casual: float
    sick: float
    annual: float


class LeaveStats(BaseModel):
    year: int
    total_leaves: int
    pending: int
    approved: int
    rejected: int
    cancelled: int
    leave_balance: Optional[RemainingBalance] = None


class LeaveCalendarEvent(BaseModel):
    id: int
    title: str
    start: date
    end: date  # exclusive: to_date + 1 day
    type: str
    status: str
    user_id: int
    user_name: str
    all_day: bool = True
    color: str


class Option(BaseModel):
    value: str
    label: str
