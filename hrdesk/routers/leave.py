"""
Leave Router

HTTP endpoints for leave balances, applications, approvals and the calendar.
All business logic is delegated to the leave service layer.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from hrdesk.core.config import settings
from hrdesk.core.schemas import ApiResponse, Page, PaginationMeta
from hrdesk.database import get_db
from hrdesk.schemas.leave import (
    LeaveApplyRequest,
    LeaveBalanceResponse,
    LeaveCalendarEvent,
    LeaveRequestResponse,
    LeaveStats,
    LeaveStatusUpdate,
    Option,
)
from hrdesk.schemas.user import UserBrief
from hrdesk.services import leave_calendar, leave_service

router = APIRouter(
    prefix="/leave",
    tags=["leave"]
)



def _page(items, total: int, page: int, limit: int) -> Page[LeaveRequestResponse]:
    return Page[LeaveRequestResponse](
        items=[LeaveRequestResponse.model_validate(i) for i in items],
        pagination=PaginationMeta.build(page, limit, total),
    )


# =====================
# Lookups
# =====================

@router.get("/types", response_model=ApiResponse[List[Option]])
def get_leave_types():
    return ApiResponse.ok(leave_service.list_leave_types())


@router.get("/statuses", response_model=ApiResponse[List[Option]])
def get_leave_statuses():
    return ApiResponse.ok(leave_service.list_leave_statuses())


# =====================
# User Routes
# =====================

@router.get("/balance/{user_id}", response_model=ApiResponse[LeaveBalanceResponse])
def get_leave_balance(user_id: int, year: Optional[int] = Query(None, ge=1900, le=9999), db: Session = Depends(get_db)):
    """Leave balance for the year (created with default allotments on first access)."""
    balance = leave_service.get_leave_balance(db, user_id, year)
    return ApiResponse.ok(LeaveBalanceResponse.model_validate(balance))


@router.post("/apply/{user_id}", response_model=ApiResponse[LeaveRequestResponse], status_code=status.HTTP_201_CREATED)
def apply_leave(user_id: int, request: LeaveApplyRequest, db: Session = Depends(get_db)):
    leave = leave_service.apply_leave(db, user_id, request)
    return ApiResponse.ok(LeaveRequestResponse.model_validate(leave))


@router.get("/my/{user_id}", response_model=ApiResponse[Page[LeaveRequestResponse]])
def get_my_leaves(
    user_id: int,
    status: Optional[str] = None,
    year: Optional[int] = None,
    type: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db)
):
    items, total = leave_service.get_my_leaves(
        db, user_id, status=status, year=year, leave_type=type, page=page, limit=limit
    )
    return ApiResponse.ok(_page(items, total, page, limit))


@router.put("/cancel/{leave_id}/{user_id}", response_model=ApiResponse[LeaveRequestResponse])
def cancel_leave(leave_id: int, user_id: int, db: Session = Depends(get_db)):
    """Owner cancels a pending request."""
    leave = leave_service.cancel_leave_request(db, leave_id, user_id)
    return ApiResponse.ok(LeaveRequestResponse.model_validate(leave))


@router.get("/stats/{user_id}", response_model=ApiResponse[LeaveStats])
def get_user_leave_stats(user_id: int, year: Optional[int] = Query(None, ge=1900, le=9999), db: Session = Depends(get_db)):
    return ApiResponse.ok(leave_service.get_leave_stats(db, user_id=user_id, year=year))


@router.get("/calendar/{year}/{month}", response_model=ApiResponse[List[LeaveCalendarEvent]])
def get_leave_calendar(year: int, month: int, user_id: Optional[int] = None, db: Session = Depends(get_db)):
    events = leave_calendar.get_leave_calendar(db, year, month, user_id=user_id)
    return ApiResponse.ok(events)


# =====================
# Admin Routes
# =====================

@router.get("/admin/all", response_model=ApiResponse[Page[LeaveRequestResponse]])
def get_all_leaves(
    status: Optional[str] = None,
    user_id: Optional[int] = None,
    year: Optional[int] = None,
    type: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db)
):
    items, total = leave_service.get_all_leaves(
        db, status=status, user_id=user_id, year=year, leave_type=type, page=page, limit=limit
    )
    return ApiResponse.ok(_page(items, total, page, limit))


@router.get("/admin/users", response_model=ApiResponse[List[UserBrief]])
def get_users_for_leave_management(db: Session = Depends(get_db)):
    users = leave_service.get_users_for_leave_management(db)
    return ApiResponse.ok([UserBrief.model_validate(u) for u in users])


@router.get("/admin/stats", response_model=ApiResponse[LeaveStats])
def get_leave_stats(year: Optional[int] = Query(None, ge=1900, le=9999), db: Session = Depends(get_db)):
    return ApiResponse.ok(leave_service.get_leave_stats(db, year=year))


@router.get("/admin/{leave_id}", response_model=ApiResponse[LeaveRequestResponse])
def get_leave_request(leave_id: int, db: Session = Depends(get_db)):
    leave = leave_service.get_leave_request(db, leave_id)
    return ApiResponse.ok(LeaveRequestResponse.model_validate(leave))


@router.put("/admin/status/{leave_id}", response_model=ApiResponse[LeaveRequestResponse])
def update_leave_status(leave_id: int, update: LeaveStatusUpdate, db: Session = Depends(get_db)):
    """Approve, reject or cancel a request; reversing an approval restores the balance."""
    leave = leave_service.update_leave_status(
        db, leave_id, update.approver_id, update.status, update.comments
    )
    return ApiResponse.ok(LeaveRequestResponse.model_validate(leave))
