def test_create_and_get_user(client):
    response = client.post("/api/users", json={"name": "Priya Nair", "email": "Priya@Example.com"})
    assert response.status_code == 201
    user = response.json()["data"]
    assert user["email"] == "priya@example.com"
    assert user["role"] == "USER"

    response = client.get(f"/api/users/{user['id']}")
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Priya Nair"


def test_duplicate_email_is_409(client):
    client.post("/api/users", json={"name": "Priya Nair", "email": "priya@example.com"})
    response = client.post("/api/users", json={"name": "Other", "email": "PRIYA@example.com"})
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INVALID_STATE"


def test_invalid_email_is_422(client):
    response = client.post("/api/users", json={"name": "Nobody", "email": "not-an-email"})
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "REQUEST_VALIDATION"


def test_list_users_hides_inactive_by_default(client, employee, make_user):
    inactive = make_user(name="Gone Away", is_active=False)

    ids = [u["id"] for u in client.get("/api/users").json()["data"]]
    assert employee.id in ids
    assert inactive.id not in ids

    ids = [u["id"] for u in client.get("/api/users", params={"active_only": False}).json()["data"]]
    assert inactive.id in ids


def test_unknown_user_is_404(client):
    assert client.get("/api/users/123456").status_code == 404
