import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from gatepass.db.session import get_db
from gatepass.main import app
from gatepass.services.auth import MockAuthProvider, get_auth_provider


@pytest.fixture()
def client(engine):
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_auth_provider] = lambda: MockAuthProvider()
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


def _bearer(client, email):
    response = client.post("/api/v1/auth/token", json={"email": email, "password": "123456"})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def _sign_in(client, email):
    return client.post(
        "/auth/signin",
        data={"email": email, "password": "123456"},
        follow_redirects=False,
    )


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert response.headers["X-Request-ID"]
    assert response.headers["X-Frame-Options"] == "DENY"


def test_api_requires_authentication(client):
    response = client.get("/api/v1/tickets/on-sale")

    assert response.status_code == 401
    assert response.json() == {"code": "http_error", "message": "Authorization required"}


def test_token_login_and_me(client):
    headers = _bearer(client, "joao@cliente.com")

    me = client.get("/api/v1/auth/me", headers=headers).json()

    assert me["email"] == "joao@cliente.com"
    assert me["is_admin"] is False
    assert me["is_approved"] is True


def test_bad_credentials_return_hint(client):
    response = client.post("/api/v1/auth/token", json={"email": "joao@cliente.com", "password": "nope"})

    assert response.status_code == 401
    assert "alice@gatepass.com" in response.json()["message"]


def test_signup_unavailable_with_demo_accounts(client):
    response = client.post(
        "/api/v1/auth/signup",
        json={"email": "maria@example.com", "password": "secret123", "full_name": "Maria", "phone": "11"},
    )

    assert response.status_code == 400


def test_refresh_issues_new_access_token(client):
    pair = client.post("/api/v1/auth/token", json={"email": "joao@cliente.com", "password": "123456"}).json()

    response = client.post("/api/v1/auth/refresh", json={"refresh_token": pair["refresh_token"]})
    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"

    rejected = client.post("/api/v1/auth/refresh", json={"refresh_token": pair["access_token"]})
    assert rejected.status_code == 401


def test_ticket_checkout_and_installments(client):
    admin = _bearer(client, "alice@gatepass.com")
    buyer = _bearer(client, "joao@cliente.com")

    forbidden = client.post(
        "/api/v1/tickets", json={"event": "Show", "price": "90", "available_quantity": 5}, headers=buyer
    )
    assert forbidden.status_code == 403

    created = client.post(
        "/api/v1/tickets",
        json={"event": "Show", "event_date": "2030-05-01", "price": "150.00", "available_quantity": 5},
        headers=admin,
    )
    assert created.status_code == 201
    ticket_id = created.json()["id"]

    on_sale = client.get("/api/v1/tickets/on-sale", headers=buyer).json()
    assert [t["id"] for t in on_sale] == [ticket_id]

    purchase = client.post(
        "/api/v1/checkout",
        json={"quantity": 2, "payment_method": "credit", "installments": 2, "ticket_id": ticket_id},
        headers=buyer,
    )
    assert purchase.status_code == 201, purchase.text
    body = purchase.json()
    assert body["total"] == "300.00"
    assert body["amount_paid"] == "159.00"
    assert len(body["charges"]) == 1

    charges = client.get("/api/v1/checkout/charges", headers=buyer).json()
    assert [c["amount"] for c in charges] == ["159.00"]

    paid = client.post(f"/api/v1/checkout/charges/{charges[0]['id']}/pay", headers=buyer)
    assert paid.status_code == 200
    assert paid.json()["status"] == "paid"
    again = client.post(f"/api/v1/checkout/charges/{charges[0]['id']}/pay", headers=buyer)
    assert again.status_code == 409

    accesses = client.get("/api/v1/accesses", headers=buyer).json()
    assert [a["event"] for a in accesses] == ["Show"]

    ticket = client.get(f"/api/v1/tickets/{ticket_id}", headers=buyer).json()
    assert ticket["available_quantity"] == 3
    assert ticket["sold_quantity"] == 2


def test_quote_errors_use_error_envelope(client):
    buyer = _bearer(client, "joao@cliente.com")

    pix_split = client.post(
        "/api/v1/checkout/quote", json={"quantity": 1, "payment_method": "pix", "installments": 2}, headers=buyer
    )
    assert pix_split.status_code == 422
    assert pix_split.json()["code"] == "http_error"

    missing = client.post("/api/v1/checkout/quote", json={}, headers=buyer)
    assert missing.status_code == 422
    assert missing.json()["code"] == "validation_error"
    assert missing.json()["details"]["errors"]


def test_plans_catalogue(client):
    featured = client.get("/api/v1/plans/featured").json()
    assert featured["most_popular"]["key"] == "20-6"
    assert featured["best_value"]["key"] == "50-12"

    quarterly = client.get("/api/v1/plans", params={"months": 3}).json()
    assert len(quarterly) == 5

    buyer = _bearer(client, "joao@cliente.com")
    response = client.post("/api/v1/plans/subscribe", json={"tickets": 20, "months": 6}, headers=buyer)
    assert response.status_code == 201
    assert response.json()["duration"] == "semiannual"
    assert response.json()["auto_renew"] is True

    missing = client.post("/api/v1/plans/subscribe", json={"tickets": 15, "months": 6}, headers=buyer)
    assert missing.status_code == 404


def test_subscription_lifecycle(client):
    headers = _bearer(client, "alice@gatepass.com")

    created = client.post(
        "/api/v1/subscriptions",
        json={"plan": "Premium", "price": "49.90", "duration": "monthly", "auto_renew": True},
        headers=headers,
    )
    assert created.status_code == 201
    sub_id = created.json()["id"]

    cancelled = client.post(f"/api/v1/subscriptions/{sub_id}/cancel", headers=headers)
    assert cancelled.json()["status"] == "cancelled"

    other = _bearer(client, "joao@cliente.com")
    assert client.get(f"/api/v1/subscriptions/{sub_id}", headers=other).status_code == 404


def test_admin_endpoints(client):
    admin = _bearer(client, "alice@gatepass.com")
    buyer = _bearer(client, "joao@cliente.com")

    assert client.get("/api/v1/admin/stats", headers=buyer).status_code == 403

    stats = client.get("/api/v1/admin/stats", headers=admin).json()
    assert stats["total_users"] == 2
    assert client.get("/api/v1/admin/tickets", headers=admin).json() == []

    users = client.get("/api/v1/users", params={"q": "joao"}, headers=admin).json()
    assert [u["email"] for u in users] == ["joao@cliente.com"]
    assert users[0]["total_paid"] == "0.00"

    revoked = client.post("/api/v1/users/client-user-id/revoke", headers=admin).json()
    assert revoked["approved"] is False
    assert client.get("/api/v1/tickets/on-sale", headers=buyer).status_code == 403

    approved = client.post("/api/v1/users/client-user-id/approve", headers=admin).json()
    assert approved["approved"] is True

    expired = client.post("/api/v1/admin/subscriptions/expire", headers=admin)
    assert expired.json() == {"expired": 0}


# ---------- Pages ----------


def test_dashboard_requires_sign_in(client):
    response = client.get("/dashboard", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/auth"


def test_failed_sign_in_flashes_hint(client):
    response = client.post(
        "/auth/signin",
        data={"email": "joao@cliente.com", "password": "wrong"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/auth?tab=signin"

    page = client.get("/auth")
    assert "Sign in failed" in page.text
    assert "Demo accounts" in page.text


def test_client_dashboard_and_checkout(client):
    response = _sign_in(client, "joao@cliente.com")
    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"

    dashboard = client.get("/dashboard?tab=buy&quantity=3&step=1")
    assert dashboard.status_code == 200
    assert "Buy tickets" in dashboard.text
    assert "R$ 360,00" in dashboard.text

    review = client.post("/checkout/review", data={"quantity": "2"})
    assert "Order summary" in review.text
    assert "R$ 95,40" in review.text

    no_method = client.post("/checkout", data={"quantity": "2", "installments": "1"})
    assert "Select a payment method" in no_method.text

    done = client.post(
        "/checkout",
        data={"quantity": "2", "payment_method": "credit", "installments": "3"},
        follow_redirects=False,
    )
    assert done.status_code == 303
    after = client.get(done.headers["location"])
    assert "Purchase processed!" in after.text
    assert "2 ticket(s) - Total: R$ 190,80" in after.text
    assert "Open installments" in after.text

    plans = client.get("/dashboard?tab=plans")
    assert "Most popular" in plans.text
    assert "Best value" in plans.text


def test_client_cannot_use_admin_forms(client):
    _sign_in(client, "joao@cliente.com")

    response = client.post(
        "/tickets",
        data={"event": "Sneaky", "price": "1", "available_quantity": "1"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/auth"


def test_admin_dashboard_tabs(client):
    _sign_in(client, "alice@gatepass.com")

    created = client.post(
        "/tickets",
        data={"event": "Jazz Night", "price": "80,00", "available_quantity": "20", "event_date": "2030-01-20"},
        follow_redirects=False,
    )
    assert created.status_code == 303
    tickets = client.get(created.headers["location"])
    assert "Ticket created!" in tickets.text
    assert "Jazz Night" in tickets.text

    invalid = client.post("/tickets", data={"event": "", "price": "1", "available_quantity": "1"})
    assert "Could not create ticket" in invalid.text

    users = client.get("/dashboard?tab=users&q=alice")
    assert "alice@gatepass.com" in users.text

    overview = client.get("/dashboard?tab=admin")
    assert "Open charges" in overview.text


def test_logout_clears_session(client):
    _sign_in(client, "joao@cliente.com")

    response = client.get("/logout", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/"

    assert client.get("/dashboard", follow_redirects=False).status_code == 303
