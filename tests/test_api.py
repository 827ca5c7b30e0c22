import csv
import io
import time
from datetime import datetime, timedelta
from decimal import Decimal

from jose import jwt

from supplies_inventory import auth, crud
from supplies_inventory.config import ALGORITHM, SECRET_KEY

from conftest import ADMIN_EMAIL, DEMO_PASSWORD, MANAGER_EMAIL, item_payload, login


def test_health(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_login_returns_token_and_user(client):
    response = client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": DEMO_PASSWORD})

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["role"] == "admin"
    assert body["user"]["last_login"] is not None


def test_login_rejects_bad_credentials(client):
    assert client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": "wrong"}).status_code == 401
    assert client.post("/auth/login", json={"email": "nobody@mworx.com", "password": DEMO_PASSWORD}).status_code == 401


def test_login_rejects_inactive_user(client, db):
    user = crud.get_user_by_email(db, MANAGER_EMAIL)
    user.is_active = False
    db.commit()

    response = client.post("/auth/login", json={"email": MANAGER_EMAIL, "password": DEMO_PASSWORD})
    assert response.status_code == 401


def test_endpoints_require_token(client):
    assert client.get("/items").status_code in (401, 403)
    bad = {"Authorization": "Bearer not-a-token"}
    assert client.get("/items", headers=bad).status_code == 401


def test_me_and_logout(client, manager_headers):
    me = client.get("/auth/me", headers=manager_headers)
    assert me.json()["email"] == MANAGER_EMAIL

    assert client.post("/auth/logout", headers=manager_headers).status_code == 200
    actions = [a["action"] for a in client.get("/activities", headers=manager_headers).json()]
    assert actions[:2] == ["logout", "login"]


def test_item_crud(client, manager_headers):
    created = client.post("/items", json=item_payload(), headers=manager_headers)
    assert created.status_code == 201
    item = created.json()
    assert item["updated_by"] == MANAGER_EMAIL
    assert Decimal(item["unit_price"]) == Decimal("24.50")

    fetched = client.get(f"/items/{item['id']}", headers=manager_headers)
    assert fetched.json()["product_id"] == "MWX-100"

    updated = client.put(f"/items/{item['id']}", json={"quantity": 5}, headers=manager_headers)
    assert updated.status_code == 200
    assert updated.json()["quantity"] == 5
    assert updated.json()["name"] == "Cyan Ink"

    assert client.delete(f"/items/{item['id']}", headers=manager_headers).status_code == 204
    assert client.get(f"/items/{item['id']}", headers=manager_headers).status_code == 404
    assert client.delete(f"/items/{item['id']}", headers=manager_headers).status_code == 404
    assert client.put(f"/items/{item['id']}", json={"quantity": 1}, headers=manager_headers).status_code == 404


def test_duplicate_product_id_is_rejected(client, admin_headers):
    first = client.post("/items", json=item_payload(), headers=admin_headers).json()
    second = client.post("/items", json=item_payload(product_id="MWX-200"), headers=admin_headers).json()

    duplicate = client.post("/items", json=item_payload(), headers=admin_headers)
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "Product ID already exists"

    clash = client.put(f"/items/{second['id']}", json={"product_id": "MWX-100"}, headers=admin_headers)
    assert clash.status_code == 400

    same = client.put(f"/items/{first['id']}", json={"product_id": "MWX-100"}, headers=admin_headers)
    assert same.status_code == 200


def test_malformed_items_are_rejected(client, admin_headers):
    for bad in (
        {"quantity": -1},
        {"unit_price": "-0.01"},
        {"unit_price": "NaN"},
        {"reorder_point": -5},
        {"category": "Snacks"},
        {"name": ""},
    ):
        response = client.post("/items", json=item_payload(**bad), headers=admin_headers)
        assert response.status_code == 422, bad


def test_update_rejects_null_for_required_fields(client, admin_headers):
    item = client.post("/items", json=item_payload(), headers=admin_headers).json()

    for bad in ({"name": None}, {"quantity": None}, {"unit_price": None}, {"category": None}):
        response = client.put(f"/items/{item['id']}", json=bad, headers=admin_headers)
        assert response.status_code == 422, bad

    cleared = client.put(f"/items/{item['id']}", json={"location": None}, headers=admin_headers)
    assert cleared.status_code == 200
    assert cleared.json()["location"] is None
    assert cleared.json()["name"] == "Cyan Ink"


def test_update_of_missing_item_is_404_even_when_product_id_clashes(client, admin_headers):
    client.post("/items", json=item_payload(), headers=admin_headers)

    response = client.put("/items/no-such-item", json={"product_id": "MWX-100"}, headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Inventory item not found"


def test_expired_token_is_rejected(client, db):
    user = crud.get_user_by_email(db, ADMIN_EMAIL)
    expired = jwt.encode(
        {"sub": user.id, "role": user.role, "exp": datetime.utcnow() - timedelta(minutes=1)},
        SECRET_KEY, algorithm=ALGORITHM,
    )

    response = client.get("/auth/me", headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == 401


def test_issued_token_names_account_and_role(client, db):
    user = crud.get_user_by_email(db, MANAGER_EMAIL)

    claims = jwt.decode(auth.issue_token(user), SECRET_KEY, algorithms=[ALGORITHM])

    assert (claims["sub"], claims["email"], claims["role"]) == (user.id, MANAGER_EMAIL, "manager")
    assert claims["exp"] > time.time()


def test_read_only_user_cannot_change_inventory(client, db):
    crud.create_user(
        db, user_id="3", email="clerk@mworx.com", name="Clerk", role="user",
        password_hash=auth.hash_password(DEMO_PASSWORD),
    )
    headers = login(client, "clerk@mworx.com")

    assert client.get("/items", headers=headers).status_code == 200
    assert client.post("/items", json=item_payload(), headers=headers).status_code == 403
    assert client.post("/alerts/acknowledge-all", headers=headers).status_code == 403
    assert client.get("/users", headers=headers).status_code == 403


def test_list_items_search_filter_and_sort(client, admin_headers):
    client.post("/items", json=item_payload(product_id="A-1", name="Matte Laminate", category="Finishing Materials", quantity=5), headers=admin_headers)
    client.post("/items", json=item_payload(product_id="A-2", name="Cyan Ink", quantity=80), headers=admin_headers)
    client.post("/items", json=item_payload(product_id="A-3", name="Magenta Ink", quantity=30), headers=admin_headers)

    by_quantity = client.get("/items", params={"sort_by": "quantity"}, headers=admin_headers).json()
    assert [i["product_id"] for i in by_quantity] == ["A-2", "A-3", "A-1"]

    inks = client.get("/items", params={"search": "ink", "category": "Ink & Toners"}, headers=admin_headers).json()
    assert [i["name"] for i in inks] == ["Cyan Ink", "Magenta Ink"]

    assert client.get("/items", params={"sort_by": "colour"}, headers=admin_headers).status_code == 422


def test_alert_lifecycle(client, admin_headers):
    toner = client.post("/items", json=item_payload(product_id="T-1", quantity=0), headers=admin_headers).json()
    client.post("/items", json=item_payload(product_id="T-2", name="Yellow Ink", quantity=15), headers=admin_headers)

    alerts = client.get("/alerts", headers=admin_headers).json()
    assert sorted(a["alert_type"] for a in alerts) == ["low_stock", "out_of_stock"]

    out_of_stock = next(a for a in alerts if a["alert_type"] == "out_of_stock")
    acked = client.post(f"/alerts/{out_of_stock['id']}/acknowledge", headers=admin_headers)
    assert acked.json()["acknowledged"] is True
    assert client.post("/alerts/missing/acknowledge", headers=admin_headers).status_code == 404

    summary = client.get("/alerts/summary", headers=admin_headers).json()
    assert summary == {"total": 2, "unacknowledged": 1, "high_severity": 1, "out_of_stock": 1}

    high = client.get("/alerts", params={"severity": "high"}, headers=admin_headers).json()
    assert [a["item_id"] for a in high] == [toner["id"]]

    # Another inventory change must not reset the acknowledgement
    client.post("/items", json=item_payload(product_id="T-3", name="Spare Paper", quantity=500), headers=admin_headers)
    acknowledged = client.get("/alerts", params={"status": "acknowledged"}, headers=admin_headers).json()
    assert [a["id"] for a in acknowledged] == [out_of_stock["id"]]

    assert client.post("/alerts/acknowledge-all", headers=admin_headers).json() == {"acknowledged_count": 1}
    assert client.get("/alerts", params={"status": "unacknowledged"}, headers=admin_headers).json() == []


def test_dashboard(client, admin_headers):
    client.post("/items", json=item_payload(product_id="D-1", quantity=0, reorder_point=50), headers=admin_headers)
    client.post("/items", json=item_payload(product_id="D-2", name="A4 Paper", category="Paper",
                                            quantity=250, unit_price="12.99", reorder_point=50), headers=admin_headers)

    stats = client.get("/dashboard", headers=admin_headers).json()

    assert stats["total_items"] == 2
    assert stats["out_of_stock_items"] == 1
    assert stats["low_stock_items"] == 0
    assert Decimal(stats["total_value"]) == Decimal("3247.50")
    assert stats["categories_count"] == 2
    assert stats["top_categories"][0]["name"] == "Paper"
    assert [a["action"] for a in stats["recent_activities"]] == ["create", "create", "login"]


def test_activities_limit(client, admin_headers):
    for n in range(12):
        client.post("/items", json=item_payload(product_id=f"L-{n}"), headers=admin_headers)

    assert len(client.get("/activities", headers=admin_headers).json()) == 13
    assert len(client.get("/activities", params={"limit": 5}, headers=admin_headers).json()) == 5
    assert client.get("/activities", params={"limit": 51}, headers=admin_headers).status_code == 422
    assert len(client.get("/dashboard", headers=admin_headers).json()["recent_activities"]) == 10


def test_export_csv_records_activity(client, admin_headers):
    client.post("/items", json=item_payload(quantity=0), headers=admin_headers)

    response = client.get("/export/csv", headers=admin_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    rows = list(csv.DictReader(io.StringIO(response.text)))
    assert len(rows) == 1
    assert rows[0]["product_id"] == "MWX-100"
    assert rows[0]["stock_status"] == "out_of_stock"

    latest = client.get("/activities", params={"limit": 1}, headers=admin_headers).json()[0]
    assert latest["action"] == "export"
    assert latest["details"] == "Exported 1 inventory items to CSV"


def test_users_and_categories(client, admin_headers, manager_headers):
    users = client.get("/users", headers=admin_headers).json()
    assert [u["email"] for u in users] == [ADMIN_EMAIL, MANAGER_EMAIL]
    assert "password_hash" not in users[0]
    assert client.get("/users", headers=manager_headers).status_code == 403

    categories = client.get("/categories").json()
    assert categories[0] == "Paper"
    assert len(categories) == 8
