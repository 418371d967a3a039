"""
Payslip Service Layer

Salary structures and monthly payslip generation.

Architecture:
- Router -> Service (this module) -> Models
- A payslip snapshots the earnings/deductions of the latest salary structure,
  so later structure changes never rewrite issued payslips
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from hrdesk.core.exceptions import NotFoundError, ValidationError
from hrdesk.models.payslip import Payslip, PayslipStatus
from hrdesk.models.salary_structure import SalaryStructure
from hrdesk.models.user import User
from hrdesk.schemas.payslip import (
    FailedMonth,
    GeneratePayslipsResult,
    PayslipResponse,
    PayslipStats,
    SalaryStructureCreate,
)
from hrdesk.services.audit import AuditService
from hrdesk.services.user_service import get_user, list_employees

logger = logging.getLogger(__name__)


def calculate_totals(earnings: Dict[str, Any], deductions: Dict[str, Any]) -> Dict[str, float]:
    gross_pay = sum(float(v) for v in earnings.values())
    total_deduct = sum(float(v) for v in deductions.values())
    return {
        "gross_pay": round(gross_pay, 2),
        "total_deduct": round(total_deduct, 2),
        "net_pay": round(gross_pay - total_deduct, 2),
    }


# =========================
# Salary Structure
# =========================

def create_salary_structure(db: Session, user_id: int, data: SalaryStructureCreate) -> SalaryStructure:
    get_user(db, user_id)

    earnings = {
        "basic": data.basic_salary,
        "hra": data.hra,
        "special_allowance": data.special_allowance,
        "travel_allowance": data.travel_allowance,
        "medical_allowance": data.medical_allowance,
    }
    deductions = {
        "pf": data.pf,
        "professional_tax": data.professional_tax,
        "tds": data.tds,
        "other_deductions": data.other_deductions,
    }

    salary = SalaryStructure(
        user_id=user_id,
        earnings=earnings,
        deductions=deductions,
        effective_from=data.effective_from,
    )
    db.add(salary)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(salary)
    logger.info(f"Salary structure {salary.id} created for user {user_id} effective {data.effective_from}")
    return salary


def get_latest_salary_structure(db: Session, user_id: int) -> Optional[SalaryStructure]:
    return db.query(SalaryStructure).filter(
        SalaryStructure.user_id == user_id
    ).order_by(
        SalaryStructure.effective_from.desc(),
        SalaryStructure.id.desc()
    ).first()


# =========================
# Payslip Generation (Multiple Months)
# =========================

def generate_payslips(db: Session, user_id: int, months: List[int], year: int) -> GeneratePayslipsResult:
    """
    Generate one payslip per requested month from the user's latest salary structure.

    Months that already have a payslip are skipped and reported in
    `failed_months`; the others are created with status GENERATED.
    """
    get_user(db, user_id)

    if not months:
        raise ValidationError("Please select at least one month")
    invalid_months = [m for m in months if m < 1 or m > 12]
    if invalid_months:
        raise ValidationError(
            f"Invalid months: {', '.join(str(m) for m in invalid_months)}. Must be between 1 and 12.",
            details={"invalid_months": invalid_months}
        )

    salary = get_latest_salary_structure(db, user_id)
    if not salary:
        raise NotFoundError("Salary structure not found. Please create salary structure first.")

    totals = calculate_totals(salary.earnings, salary.deductions)
    if totals["net_pay"] < 0:
        raise ValidationError("Net pay cannot be negative", details=totals)

    created: List[Payslip] = []
    failed: List[FailedMonth] = []

    # dict.fromkeys keeps the caller's order while dropping duplicate months
    for month in dict.fromkeys(months):
        exists = db.query(Payslip).filter(
            Payslip.user_id == user_id,
            Payslip.month == month,
            Payslip.year == year
        ).first()
        if exists:
            failed.append(FailedMonth(month=month, reason="Payslip already exists"))
            continue

        payslip = Payslip(
            user_id=user_id,
            month=month,
            year=year,
            earnings=dict(salary.earnings),
            deductions=dict(salary.deductions),
            status=PayslipStatus.GENERATED.value,
            **totals
        )
        try:
            with db.begin_nested():
                db.add(payslip)
        except IntegrityError:
            failed.append(FailedMonth(month=month, reason="Payslip already exists"))
            continue
        created.append(payslip)

    try:
        if created:
            AuditService.log(
                db,
                action="generate_payslips",
                entity_type="payslip",
                entity_id=None,
                user_id=user_id,
                details={
                    "year": year,
                    "months": [p.month for p in created],
                    "net_pay": totals["net_pay"],
                }
            )
        db.commit()
    except Exception:
        db.rollback()
        raise

    for payslip in created:
        db.refresh(payslip)

    logger.info(
        f"Payslip generation for user {user_id}/{year}: {len(created)} created, {len(failed)} skipped",
        extra={"user_id": user_id, "year": year}
    )
    return GeneratePayslipsResult(
        success_count=len(created),
        failed_count=len(failed),
        payslips=[PayslipResponse.model_validate(p) for p in created],
        failed_months=failed,
        message=(
            f"Successfully generated {len(created)} payslip(s)"
            if created else "No payslips were generated"
        ),
    )


# =========================
# Fetch Payslips
# =========================

def get_payslips_by_user(db: Session, user_id: int) -> List[Payslip]:
    get_user(db, user_id)
    return db.query(Payslip).options(joinedload(Payslip.user)).filter(
        Payslip.user_id == user_id
    ).order_by(Payslip.year.desc(), Payslip.month.desc()).all()


def get_all_payslips(
    db: Session,
    month: Optional[int] = None,
    year: Optional[int] = None,
    status: Optional[str] = None
) -> List[Payslip]:
    query = db.query(Payslip).options(joinedload(Payslip.user))
    if month:
        query = query.filter(Payslip.month == month)
    if year:
        query = query.filter(Payslip.year == year)
    if status:
        query = query.filter(Payslip.status == _parse_status(status).value)
    return query.order_by(Payslip.year.desc(), Payslip.month.desc(), Payslip.id.desc()).all()


def get_payslip_by_id(db: Session, payslip_id: int) -> Payslip:
    payslip = db.query(Payslip).options(joinedload(Payslip.user)).filter(
        Payslip.id == payslip_id
    ).first()
    if not payslip:
        raise NotFoundError(f"Payslip {payslip_id} not found")
    return payslip


def delete_payslip(db: Session, payslip_id: int) -> None:
    payslip = get_payslip_by_id(db, payslip_id)
    before_state = {
        "user_id": payslip.user_id,
        "month": payslip.month,
        "year": payslip.year,
        "net_pay": payslip.net_pay,
        "status": payslip.status,
    }
    db.delete(payslip)
    try:
        AuditService.log(
            db,
            action="delete_payslip",
            entity_type="payslip",
            entity_id=payslip_id,
            user_id=before_state["user_id"],
            details={},
            before_state=before_state
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info(f"Payslip {payslip_id} deleted")


def _parse_status(value: str) -> PayslipStatus:
    try:
        return PayslipStatus(str(value).strip().upper())
    except ValueError:
        raise ValidationError(
            f"Invalid payslip status: {value}",
            details={"allowed": [s.value for s in PayslipStatus]}
        )


def update_payslip_status(db: Session, payslip_id: int, status: str) -> Payslip:
    new_status = _parse_status(status)
    payslip = get_payslip_by_id(db, payslip_id)
    previous = payslip.status

    payslip.status = new_status.value
    try:
        db.flush()
        AuditService.log(
            db,
            action="update_payslip_status",
            entity_type="payslip",
            entity_id=payslip.id,
            user_id=payslip.user_id,
            details={},
            before_state={"status": previous},
            after_state={"status": payslip.status}
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(payslip)
    logger.info(f"Payslip {payslip.id}: {previous} -> {payslip.status}")
    return payslip


def get_users_for_payslip(db: Session) -> List[User]:
    return list_employees(db)


def get_payslip_stats(db: Session) -> PayslipStats:
    total_payslips = db.query(func.count(Payslip.id)).scalar() or 0
    paid_payslips = db.query(func.count(Payslip.id)).filter(
        Payslip.status == PayslipStatus.PAID.value
    ).scalar() or 0
    total_net_pay = db.query(func.sum(Payslip.net_pay)).scalar() or 0.0
    return PayslipStats(
        total_payslips=total_payslips,
        paid_payslips=paid_payslips,
        total_net_pay=round(float(total_net_pay), 2),
    )


def get_available_years(db: Session) -> List[int]:
    rows = db.query(Payslip.year).distinct().order_by(Payslip.year.desc()).all()
    return [row[0] for row in rows]
