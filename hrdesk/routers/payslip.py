"""
Payslip Router

HTTP endpoints for salary structures and payslips.
All business logic is delegated to the payslip service layer.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from hrdesk.core.schemas import ApiResponse, ErrorInfo
from hrdesk.database import get_db
from hrdesk.core.exceptions import NotFoundError
from hrdesk.schemas.payslip import (
    GeneratePayslipsRequest,
    GeneratePayslipsResult,
    PayslipResponse,
    PayslipStats,
    PayslipStatusUpdate,
    SalaryStructureCreate,
    SalaryStructureResponse,
)
from hrdesk.schemas.user import UserBrief
from hrdesk.services import payslip_service

router = APIRouter(
    prefix="/payslips",
    tags=["payslips"]
)


# =========================
# Salary Structure
# =========================

@router.post("/salary/{user_id}", response_model=ApiResponse[SalaryStructureResponse], status_code=status.HTTP_201_CREATED)
def create_salary_structure(user_id: int, request: SalaryStructureCreate, db: Session = Depends(get_db)):
    salary = payslip_service.create_salary_structure(db, user_id, request)
    return ApiResponse.ok(SalaryStructureResponse.model_validate(salary))


@router.get("/salary/{user_id}", response_model=ApiResponse[SalaryStructureResponse])
def get_salary_structure(user_id: int, db: Session = Depends(get_db)):
    salary = payslip_service.get_latest_salary_structure(db, user_id)
    if not salary:
        raise NotFoundError(f"No salary structure for user {user_id}")
    return ApiResponse.ok(SalaryStructureResponse.model_validate(salary))


# =========================
# Generation
# =========================

@router.post("/generate", response_model=ApiResponse[GeneratePayslipsResult], status_code=status.HTTP_201_CREATED)
def generate_payslips(request: GeneratePayslipsRequest, db: Session = Depends(get_db)):
    result = payslip_service.generate_payslips(db, request.user_id, request.months, request.year)
    if result.success_count == 0:
        body = ApiResponse[GeneratePayslipsResult](
            success=False,
            data=result,
            error=ErrorInfo(
                code="NOTHING_GENERATED",
                message="No payslips were generated. They may already exist for the selected months."
            )
        )
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.to_dict())
    return ApiResponse.ok(result)


# =========================
# Admin views
# =========================

@router.get("/admin/all", response_model=ApiResponse[List[PayslipResponse]])
def get_all_payslips(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = None,
    status: Optional[str] = None,
    db: Session = Depends(get_db)
):
    payslips = payslip_service.get_all_payslips(db, month=month, year=year, status=status)
    return ApiResponse.ok([PayslipResponse.model_validate(p) for p in payslips])


@router.get("/admin/users", response_model=ApiResponse[List[UserBrief]])
def get_users_for_payslip(db: Session = Depends(get_db)):
    users = payslip_service.get_users_for_payslip(db)
    return ApiResponse.ok([UserBrief.model_validate(u) for u in users])


@router.get("/admin/stats", response_model=ApiResponse[PayslipStats])
def get_payslip_stats(db: Session = Depends(get_db)):
    return ApiResponse.ok(payslip_service.get_payslip_stats(db))


@router.get("/years", response_model=ApiResponse[List[int]])
def get_available_years(db: Session = Depends(get_db)):
    return ApiResponse.ok(payslip_service.get_available_years(db))


@router.get("/user/{user_id}", response_model=ApiResponse[List[PayslipResponse]])
def get_user_payslips(user_id: int, db: Session = Depends(get_db)):
    payslips = payslip_service.get_payslips_by_user(db, user_id)
    return ApiResponse.ok([PayslipResponse.model_validate(p) for p in payslips])


@router.get("/{payslip_id}", response_model=ApiResponse[PayslipResponse])
def get_payslip(payslip_id: int, db: Session = Depends(get_db)):
    payslip = payslip_service.get_payslip_by_id(db, payslip_id)
    return ApiResponse.ok(PayslipResponse.model_validate(payslip))


@router.put("/{payslip_id}/status", response_model=ApiResponse[PayslipResponse])
def update_payslip_status(payslip_id: int, request: PayslipStatusUpdate, db: Session = Depends(get_db)):
    payslip = payslip_service.update_payslip_status(db, payslip_id, request.status)
    return ApiResponse.ok(PayslipResponse.model_validate(payslip))


@router.delete("/{payslip_id}", response_model=ApiResponse[dict])
def delete_payslip(payslip_id: int, db: Session = Depends(get_db)):
    payslip_service.delete_payslip(db, payslip_id)
    return ApiResponse.ok({"id": payslip_id, "deleted": True})
