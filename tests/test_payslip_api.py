SALARY = {
    "basic_salary": 40000,
    "hra": 16000,
    "pf": 4800,
    "professional_tax": 200,
    "effective_from": "2024-01-01",
}


def _setup_salary(client, user_id):
    response = client.post(f"/api/payslips/salary/{user_id}", json=SALARY)
    assert response.status_code == 201
    return response.json()["data"]


def _generate(client, user_id, months, year=2024):
    return client.post("/api/payslips/generate", json={"user_id": user_id, "months": months, "year": year})


def test_salary_structure_round_trip(client, employee):
    created = _setup_salary(client, employee.id)
    assert created["earnings"]["basic"] == 40000
    assert created["deductions"]["pf"] == 4800

    response = client.get(f"/api/payslips/salary/{employee.id}")
    assert response.status_code == 200
    assert response.json()["data"]["id"] == created["id"]


def test_salary_structure_missing_is_404(client, employee):
    response = client.get(f"/api/payslips/salary/{employee.id}")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_salary_structure_negative_component_is_422(client, employee):
    response = client.post(f"/api/payslips/salary/{employee.id}", json={**SALARY, "hra": -1})
    assert response.status_code == 422


def test_generate_payslips(client, employee):
    _setup_salary(client, employee.id)

    response = _generate(client, employee.id, [1, 2])
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["success_count"] == 2
    assert data["payslips"][0]["net_pay"] == 51000
    assert data["payslips"][0]["user"]["name"] == "Asha Rao"


def test_generate_nothing_is_400_with_result(client, employee):
    _setup_salary(client, employee.id)
    _generate(client, employee.id, [3])

    response = _generate(client, employee.id, [3])
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "NOTHING_GENERATED"
    assert body["data"]["failed_months"] == [{"month": 3, "reason": "Payslip already exists"}]


def test_generate_invalid_month_is_400(client, employee):
    _setup_salary(client, employee.id)
    response = _generate(client, employee.id, [13])
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_generate_without_structure_is_404(client, employee):
    assert _generate(client, employee.id, [1]).status_code == 404


def test_payslip_lifecycle(client, employee):
    _setup_salary(client, employee.id)
    payslip_id = _generate(client, employee.id, [4]).json()["data"]["payslips"][0]["id"]

    response = client.get(f"/api/payslips/{payslip_id}")
    assert response.status_code == 200
    assert response.json()["data"]["month"] == 4

    response = client.put(f"/api/payslips/{payslip_id}/status", json={"status": "PROCESSED"})
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "PROCESSED"

    response = client.put(f"/api/payslips/{payslip_id}/status", json={"status": "SHREDDED"})
    assert response.status_code == 400

    response = client.delete(f"/api/payslips/{payslip_id}")
    assert response.status_code == 200
    assert response.json()["data"] == {"id": payslip_id, "deleted": True}

    assert client.get(f"/api/payslips/{payslip_id}").status_code == 404


def test_listings(client, employee, admin_user):
    _setup_salary(client, employee.id)
    _generate(client, employee.id, [1, 2], year=2023)
    _generate(client, employee.id, [1], year=2024)

    mine = client.get(f"/api/payslips/user/{employee.id}").json()["data"]
    assert [(p["year"], p["month"]) for p in mine] == [(2024, 1), (2023, 2), (2023, 1)]

    filtered = client.get("/api/payslips/admin/all", params={"year": 2023}).json()["data"]
    assert len(filtered) == 2

    assert client.get("/api/payslips/years").json()["data"] == [2024, 2023]

    stats = client.get("/api/payslips/admin/stats").json()["data"]
    assert stats == {"total_payslips": 3, "paid_payslips": 0, "total_net_pay": 153000.0}

    users = client.get("/api/payslips/admin/users").json()["data"]
    assert [u["id"] for u in users] == [employee.id]


def test_user_payslips_unknown_user_is_404(client):
    assert client.get("/api/payslips/user/999999").status_code == 404
