import logging
from typing import List

from sqlalchemy.orm import Session

from hrdesk.core.exceptions import InvalidStateError, NotFoundError
from hrdesk.models.user import User, UserRole
from hrdesk.schemas.user import UserCreate

logger = logging.getLogger(__name__)


def create_user(db: Session, data: UserCreate) -> User:
    email = data.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise InvalidStateError(f"User with email {email} already exists")

    user = User(name=data.name, email=email, phone=data.phone, role=data.role, is_active=True)
    db.add(user)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(user)
    logger.info(f"Created user {user.id} <{email}> ({user.role.value})")
    return user


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError(f"User {user_id} not found")
    return user


def list_users(db: Session, active_only: bool = True) -> List[User]:
    query = db.query(User)
    if active_only:
        query = query.filter(User.is_active.is_(True))
    return query.order_by(User.id.asc()).all()


def list_employees(db: Session) -> List[User]:
    """Active users with role USER, by name: the people leave and payslips are managed for."""
    return db.query(User).filter(
        User.is_active.is_(True),
        User.role == UserRole.USER
    ).order_by(User.name.asc()).all()
