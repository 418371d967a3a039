"""
Seed demo users, leave balances and a salary structure.

Usage: python -m scripts.seed_data
"""
from datetime import date

from hrdesk.database import SessionLocal, init_db
from hrdesk.models.user import User, UserRole
from hrdesk.schemas.payslip import SalaryStructureCreate
from hrdesk.services import payslip_service
from hrdesk.services.leave_ledger import LeaveLedger

DEMO_USERS = [
    ("Admin", "admin@example.com", UserRole.ADMIN),
    ("Asha Rao", "asha@example.com", UserRole.USER),
    ("Ben Ortiz", "ben@example.com", UserRole.USER),
]


def seed():
    init_db()
    db = SessionLocal()
    try:
        year = date.today().year
        for name, email, role in DEMO_USERS:
            user = db.query(User).filter(User.email == email).first()
            if user:
                print(f"User {email} already exists. Skipping.")
                continue
            user = User(name=name, email=email, role=role, is_active=True)
            db.add(user)
            db.flush()
            LeaveLedger(db).get_or_create(user.id, year)
            db.commit()
            print(f"Created {role.value} -> {email}")

            if role == UserRole.USER:
                payslip_service.create_salary_structure(db, user.id, SalaryStructureCreate(
                    basic_salary=50000,
                    hra=20000,
                    special_allowance=10000,
                    travel_allowance=3000,
                    medical_allowance=2000,
                    pf=6000,
                    professional_tax=200,
                    tds=5000,
                    other_deductions=0,
                    effective_from=date(year, 1, 1),
                ))
                print(f"  salary structure created for {email}")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
