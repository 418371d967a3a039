from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from hrdesk.core.schemas import ApiResponse
from hrdesk.database import get_db
from hrdesk.schemas.user import UserCreate, UserResponse
from hrdesk.services import user_service

router = APIRouter(
    prefix="/users",
    tags=["users"]
)


@router.post("", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
def create_user(request: UserCreate, db: Session = Depends(get_db)):
    user = user_service.create_user(db, request)
    return ApiResponse.ok(UserResponse.model_validate(user))


@router.get("", response_model=ApiResponse[List[UserResponse]])
def list_users(active_only: bool = True, db: Session = Depends(get_db)):
    users = user_service.list_users(db, active_only=active_only)
    return ApiResponse.ok([UserResponse.model_validate(u) for u in users])


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
def get_user(user_id: int, db: Session = Depends(get_db)):
    return ApiResponse.ok(UserResponse.model_validate(user_service.get_user(db, user_id)))
