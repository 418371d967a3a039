from sqlalchemy import Column, Integer, Float, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from hrdesk.database import Base


class LeaveBalance(Base):
    """Per-user, per-year allotment and consumption of the tracked leave types."""
    __tablename__ = "leave_balances"
    __table_args__ = (UniqueConstraint("user_id", "year", name="uq_leave_balance_user_year"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    casual_total = Column(Float, default=0.0, nullable=False)
    casual_used = Column(Float, default=0.0, nullable=False)
    sick_total = Column(Float, default=0.0, nullable=False)
    sick_used = Column(Float, default=0.0, nullable=False)
    annual_total = Column(Float, default=0.0, nullable=False)
    annual_used = Column(Float, default=0.0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="leave_balances")

    @property
    def casual_remaining(self) -> float:
        return self.casual_total - self.casual_used

    @property
    def sick_remaining(self) -> float:
        return self.sick_total - self.sick_used

    @property
    def annual_remaining(self) -> float:
        return self.annual_total - self.annual_used
