from datetime import date

import pytest

from hrdesk.core.exceptions import NotFoundError, ValidationError
from hrdesk.models.audit_log import AuditLog
from hrdesk.models.payslip import Payslip
from hrdesk.schemas.payslip import SalaryStructureCreate
from hrdesk.services import payslip_service


def _structure(db_session, user, **overrides):
    fields = dict(
        basic_salary=50000,
        hra=20000,
        special_allowance=5000,
        pf=6000,
        professional_tax=200,
        tds=3800,
        effective_from=date(2024, 1, 1),
    )
    fields.update(overrides)
    return payslip_service.create_salary_structure(db_session, user.id, SalaryStructureCreate(**fields))


def test_calculate_totals():
    totals = payslip_service.calculate_totals({"basic": 1000, "hra": 250.555}, {"pf": 120})
    assert totals == {"gross_pay": 1250.56, "total_deduct": 120.0, "net_pay": 1130.56}


def test_latest_structure_wins(db_session, employee):
    _structure(db_session, employee, basic_salary=40000, effective_from=date(2023, 4, 1))
    newer = _structure(db_session, employee, basic_salary=55000, effective_from=date(2024, 4, 1))

    latest = payslip_service.get_latest_salary_structure(db_session, employee.id)
    assert latest.id == newer.id
    assert latest.earnings["basic"] == 55000


def test_salary_structure_unknown_user(db_session):
    with pytest.raises(NotFoundError):
        payslip_service.create_salary_structure(
            db_session, 424242, SalaryStructureCreate(basic_salary=1, effective_from=date(2024, 1, 1))
        )


def test_generate_payslips(db_session, employee):
    _structure(db_session, employee)

    result = payslip_service.generate_payslips(db_session, employee.id, [1, 2, 3], 2024)

    assert result.success_count == 3
    assert result.failed_count == 0
    assert [p.month for p in result.payslips] == [1, 2, 3]
    payslip = result.payslips[0]
    assert payslip.gross_pay == 75000
    assert payslip.total_deduct == 10000
    assert payslip.net_pay == 65000
    assert payslip.status == "GENERATED"
    assert payslip.earnings["basic"] == 50000

    audit = db_session.query(AuditLog).filter(AuditLog.action == "generate_payslips").one()
    assert audit.details["months"] == [1, 2, 3]


def test_generate_skips_existing_months(db_session, employee):
    _structure(db_session, employee)
    payslip_service.generate_payslips(db_session, employee.id, [5], 2024)

    result = payslip_service.generate_payslips(db_session, employee.id, [4, 5, 6], 2024)

    assert result.success_count == 2
    assert result.failed_count == 1
    assert result.failed_months[0].month == 5
    assert result.failed_months[0].reason == "Payslip already exists"
    assert db_session.query(Payslip).filter(Payslip.user_id == employee.id).count() == 3


def test_generate_nothing_when_all_exist(db_session, employee):
    _structure(db_session, employee)
    payslip_service.generate_payslips(db_session, employee.id, [7], 2024)

    result = payslip_service.generate_payslips(db_session, employee.id, [7], 2024)
    assert result.success_count == 0
    assert result.message == "No payslips were generated"


def test_generate_duplicate_months_in_request(db_session, employee):
    _structure(db_session, employee)
    result = payslip_service.generate_payslips(db_session, employee.id, [3, 3, 3], 2024)
    assert result.success_count == 1
    assert result.failed_count == 0


def test_same_month_in_different_year_is_allowed(db_session, employee):
    _structure(db_session, employee)
    payslip_service.generate_payslips(db_session, employee.id, [1], 2023)
    result = payslip_service.generate_payslips(db_session, employee.id, [1], 2024)
    assert result.success_count == 1


@pytest.mark.parametrize("months", [[], [0], [1, 13], [-2]])
def test_generate_rejects_bad_months(db_session, employee, months):
    _structure(db_session, employee)
    with pytest.raises(ValidationError):
        payslip_service.generate_payslips(db_session, employee.id, months, 2024)


def test_generate_without_structure(db_session, employee):
    with pytest.raises(NotFoundError):
        payslip_service.generate_payslips(db_session, employee.id, [1], 2024)


def test_generate_unknown_user(db_session):
    with pytest.raises(NotFoundError):
        payslip_service.generate_payslips(db_session, 313131, [1], 2024)


def test_generate_rejects_negative_net(db_session, employee):
    _structure(db_session, employee, basic_salary=1000, hra=0, special_allowance=0, tds=5000)
    with pytest.raises(ValidationError):
        payslip_service.generate_payslips(db_session, employee.id, [1], 2024)
    assert db_session.query(Payslip).count() == 0


def test_payslip_snapshots_structure(db_session, employee):
    _structure(db_session, employee)
    first = payslip_service.generate_payslips(db_session, employee.id, [1], 2024).payslips[0]

    _structure(db_session, employee, basic_salary=90000, effective_from=date(2024, 6, 1))

    stored = payslip_service.get_payslip_by_id(db_session, first.id)
    assert stored.earnings["basic"] == 50000


def test_update_status(db_session, employee):
    _structure(db_session, employee)
    payslip = payslip_service.generate_payslips(db_session, employee.id, [2], 2024).payslips[0]

    updated = payslip_service.update_payslip_status(db_session, payslip.id, "paid")
    assert updated.status == "PAID"

    audit = db_session.query(AuditLog).filter(AuditLog.action == "update_payslip_status").one()
    assert audit.before_state == {"status": "GENERATED"}
    assert audit.after_state == {"status": "PAID"}


def test_update_status_rejects_unknown_value(db_session, employee):
    _structure(db_session, employee)
    payslip = payslip_service.generate_payslips(db_session, employee.id, [2], 2024).payslips[0]
    with pytest.raises(ValidationError):
        payslip_service.update_payslip_status(db_session, payslip.id, "VOID")


def test_delete_payslip(db_session, employee):
    _structure(db_session, employee)
    payslip = payslip_service.generate_payslips(db_session, employee.id, [8], 2024).payslips[0]

    payslip_service.delete_payslip(db_session, payslip.id)

    with pytest.raises(NotFoundError):
        payslip_service.get_payslip_by_id(db_session, payslip.id)
    audit = db_session.query(AuditLog).filter(AuditLog.action == "delete_payslip").one()
    assert audit.before_state["month"] == 8


def test_listing_stats_and_years(db_session, employee, make_user):
    other = make_user(name="Ben Ortiz")
    _structure(db_session, employee)
    _structure(db_session, other, basic_salary=30000, hra=0, special_allowance=0, pf=0, professional_tax=0, tds=0)

    payslip_service.generate_payslips(db_session, employee.id, [1, 2], 2023)
    generated = payslip_service.generate_payslips(db_session, other.id, [1], 2024).payslips
    payslip_service.update_payslip_status(db_session, generated[0].id, "PAID")

    mine = payslip_service.get_payslips_by_user(db_session, employee.id)
    assert [(p.year, p.month) for p in mine] == [(2023, 2), (2023, 1)]

    assert len(payslip_service.get_all_payslips(db_session, year=2023)) == 2
    assert len(payslip_service.get_all_payslips(db_session, month=1)) == 2
    assert [p.user_id for p in payslip_service.get_all_payslips(db_session, status="paid")] == [other.id]

    stats = payslip_service.get_payslip_stats(db_session)
    assert stats.total_payslips == 3
    assert stats.paid_payslips == 1
    assert stats.total_net_pay == 65000 * 2 + 30000

    assert payslip_service.get_available_years(db_session) == [2024, 2023]


def test_users_for_payslip_excludes_admins_and_inactive(db_session, employee, admin_user, make_user):
    make_user(name="Gone Away", is_active=False)
    users = payslip_service.get_users_for_payslip(db_session)
    assert [u.id for u in users] == [employee.id]
