from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from hrdesk.database import Base
import enum


class PayslipStatus(str, enum.Enum):
    GENERATED = "GENERATED"
    PROCESSED = "PROCESSED"
    PAID = "PAID"


class Payslip(Base):
    __tablename__ = "payslips"
    __table_args__ = (UniqueConstraint("user_id", "month", "year", name="uq_payslip_user_period"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False, index=True)
    earnings = Column(JSON, nullable=False)
    deductions = Column(JSON, nullable=False)
    gross_pay = Column(Float, nullable=False)
    total_deduct = Column(Float, nullable=False)
    net_pay = Column(Float, nullable=False)
    status = Column(String, default=PayslipStatus.GENERATED.value, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User")
