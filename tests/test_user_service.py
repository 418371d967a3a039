import pytest

from hrdesk.core.exceptions import NotFoundError
from hrdesk.services import leave_service, payslip_service, user_service


def test_get_user_returns_row(db_session, employee):
    assert user_service.get_user(db_session, employee.id).name == "Asha Rao"


def test_get_user_unknown_id(db_session):
    with pytest.raises(NotFoundError):
        user_service.get_user(db_session, 848484)


def test_employee_lists_agree(db_session, employee, admin_user, make_user):
    colleague = make_user(name="Ben Ortiz")
    make_user(name="Gone Away", is_active=False)

    expected = [employee.id, colleague.id]
    assert [u.id for u in user_service.list_employees(db_session)] == expected
    assert [u.id for u in leave_service.get_users_for_leave_management(db_session)] == expected
    assert [u.id for u in payslip_service.get_users_for_payslip(db_session)] == expected
