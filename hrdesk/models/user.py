from sqlalchemy import Column, Integer, String, Enum, DateTime, Boolean
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from hrdesk.database import Base


class UserRole(str, enum.Enum):
    """
    ADMIN: approves leave, manages salary structures and payslips.
    USER: applies for leave and views own payslips.
    """
    ADMIN = "ADMIN"
    USER = "USER"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=True)
    email = Column(String, unique=True, index=True, nullable=False)
    phone = Column(String, nullable=True)
    role = Column(Enum(UserRole), default=UserRole.USER, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    leave_requests = relationship(
        "LeaveRequest", foreign_keys="[LeaveRequest.user_id]", back_populates="user"
    )
    leave_balances = relationship("LeaveBalance", back_populates="user")

    def __repr__(self):
        return f"<User {self.email} ({self.role.value})>"

    @property
    def display_name(self) -> str:
        return self.name or self.email
