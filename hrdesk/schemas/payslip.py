from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Dict, List, Optional

from hrdesk.schemas.user import UserBrief


class SalaryStructureCreate(BaseModel):
    """Monthly salary components."""
    basic_salary: float = Field(..., ge=0)
    hra: float = Field(0.0, ge=0)
    special_allowance: float = Field(0.0, ge=0)
    travel_allowance: float = Field(0.0, ge=0)
    medical_allowance: float = Field(0.0, ge=0)
    pf: float = Field(0.0, ge=0)
    professional_tax: float = Field(0.0, ge=0)
    tds: float = Field(0.0, ge=0)
    other_deductions: float = Field(0.0, ge=0)
    effective_from: date


class SalaryStructureResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    earnings: Dict[str, float]
    deductions: Dict[str, float]
    effective_from: date
    created_at: Optional[datetime] = None


class GeneratePayslipsRequest(BaseModel):
    user_id: int
    months: List[int]
    year: int = Field(..., ge=1900, le=9999)


class PayslipStatusUpdate(BaseModel):
    status: str


class PayslipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    month: int
    year: int
    earnings: Dict[str, float]
    deductions: Dict[str, float]
    gross_pay: float
    total_deduct: float
    net_pay: float
    status: str
    created_at: Optional[datetime] = None
    user: Optional[UserBrief] = None


class FailedMonth(BaseModel):
    month: int
    reason: str


class GeneratePayslipsResult(BaseModel):
    success_count: int
    failed_count: int
    payslips: List[PayslipResponse]
    failed_months: List[FailedMonth]
    message: str


class PayslipStats(BaseModel):
    total_payslips: int
    paid_payslips: int
    total_net_pay: float
