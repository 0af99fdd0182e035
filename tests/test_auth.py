from datetime import timedelta
from decimal import Decimal

import pytest

from havenhouse.core.config import settings
from havenhouse.core.security import create_access_token, decode_access_token
from havenhouse.models import StaffUser
from havenhouse.utils.dates import utcnow
from havenhouse.utils.route_guard import resolve_redirect

from .conftest import STAFF_PASSWORD

LOGIN_URL = "/api/v1/staff/auth"


class TestStaffLogin:

    def test_login_success(self, client, staff_user, db_session):
        response = client.post(LOGIN_URL, json={"email": staff_user.email, "password": STAFF_PASSWORD})
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["user"]["firstName"] == "Dana"
        assert body["user"]["lastName"] == "Reyes"

        claims = decode_access_token(body["token"])
        assert claims["kind"] == "staff"
        assert claims["sub"] == staff_user.id
        assert claims["role"] == "admin"

        cookie = response.headers["set-cookie"]
        assert cookie.startswith(f"{settings.staff_cookie_name}=")
        assert "HttpOnly" in cookie

        db_session.expire_all()
        assert db_session.get(StaffUser, staff_user.id).last_login is not None

    def test_email_is_case_insensitive(self, client, staff_user):
        response = client.post(LOGIN_URL, json={"email": "Manager@HavenHouse.TEST", "password": STAFF_PASSWORD})
        assert response.status_code == 200

    def test_wrong_password_and_unknown_email_look_the_same(self, client, staff_user):
        wrong_password = client.post(LOGIN_URL, json={"email": staff_user.email, "password": "nope"})
        unknown_email = client.post(LOGIN_URL, json={"email": "nobody@havenhouse.test", "password": "nope"})
        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.json() == unknown_email.json() == {"detail": "Invalid credentials"}

    def test_inactive_staff_cannot_login(self, client, staff_user, db_session):
        staff_user.is_active = False
        db_session.commit()
        response = client.post(LOGIN_URL, json={"email": staff_user.email, "password": STAFF_PASSWORD})
        assert response.status_code == 401

    def test_missing_credentials(self, client):
        response = client.post(LOGIN_URL, json={"email": "manager@havenhouse.test"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Email and password are required"

    def test_logout_clears_cookie(self, client):
        response = client.delete(LOGIN_URL)
        assert response.status_code == 200
        assert response.json() == {"success": True}
        cookie = response.headers["set-cookie"]
        assert cookie.startswith(f"{settings.staff_cookie_name}=")
        assert "Max-Age=0" in cookie


class TestProtectedRoutes:

    def test_requires_authentication(self, client):
        response = client.get("/api/v1/applications")
        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    def test_cookie_session(self, staff_client):
        assert staff_client.get("/api/v1/applications").status_code == 200

    def test_bearer_token(self, client, staff_user):
        token = create_access_token({"sub": staff_user.id, "kind": "staff"})
        response = client.get("/api/v1/applications", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200

    def test_expired_token(self, client, staff_user):
        token = create_access_token({"sub": staff_user.id, "kind": "staff"}, expires_delta=timedelta(minutes=-1))
        client.cookies.set(settings.staff_cookie_name, token)
        assert client.get("/api/v1/applications").status_code == 401

    def test_resident_token_is_not_a_staff_session(self, client, make_resident):
        resident = make_resident()
        token = create_access_token({"sub": resident.id, "kind": "resident"})
        client.cookies.set(settings.staff_cookie_name, token)
        assert client.get("/api/v1/applications").status_code == 401


class TestStaffAccounts:

    def test_create_staff(self, staff_client):
        response = staff_client.post("/api/v1/staff/users", json={
            "email": "Case.Worker@havenhouse.test",
            "password": "another-password",
            "first_name": "Casey",
            "last_name": "Worker",
        })
        assert response.status_code == 201
        assert response.json()["email"] == "case.worker@havenhouse.test"
        assert response.json()["role"] == "staff"
        assert "password_hash" not in response.json()

    def test_duplicate_email(self, staff_client, staff_user):
        response = staff_client.post("/api/v1/staff/users", json={
            "email": staff_user.email,
            "password": "another-password",
            "first_name": "Dup",
            "last_name": "Licate",
        })
        assert response.status_code == 400

    def test_short_password(self, staff_client):
        response = staff_client.post("/api/v1/staff/users", json={
            "email": "short@havenhouse.test",
            "password": "short",
            "first_name": "Short",
            "last_name": "Password",
        })
        assert response.status_code == 400


class TestResidentPortal:

    def test_login_and_overview(self, client, make_resident, make_payment):
        resident = make_resident(sobriety_date=utcnow().date() - timedelta(days=100))
        make_payment(resident, amount=Decimal("500.00"), due_date=utcnow().date() - timedelta(days=5))
        make_payment(resident, amount=Decimal("500.00"), status="paid",
                     due_date=utcnow().date() - timedelta(days=35), paid_date=utcnow().date() - timedelta(days=36))

        response = client.post("/api/v1/portal/login", json={"phone": resident.phone})
        assert response.status_code == 200
        assert response.json()["id"] == resident.id
        assert response.headers["set-cookie"].startswith(f"{settings.resident_cookie_name}=")

        client.cookies.set(settings.resident_cookie_name, create_access_token({"sub": resident.id, "kind": "resident"}))
        overview = client.get("/api/v1/portal/me")
        assert overview.status_code == 200
        body = overview.json()
        assert body["resident"]["id"] == resident.id
        assert body["sobriety_days"] == 100
        assert [p["effective_status"] for p in body["payments"]] == ["overdue", "paid"]
        assert Decimal(body["balance_due"]) == Decimal("500.00")

    def test_unknown_phone(self, client):
        response = client.post("/api/v1/portal/login", json={"phone": "555-999-9999"})
        assert response.status_code == 401

    def test_moved_out_resident_cannot_login(self, client, make_resident):
        resident = make_resident(status="moved_out", move_out_date=utcnow().date())
        response = client.post("/api/v1/portal/login", json={"phone": resident.phone})
        assert response.status_code == 401

    def test_overview_requires_resident_session(self, client):
        assert client.get("/api/v1/portal/me").status_code == 401


class TestRouteGuard:

    @pytest.mark.parametrize("path, cookies, expected", [
        ("/dashboard", {}, "/staff/login"),
        ("/dashboard/payments", {}, "/staff/login"),
        ("/staff/login", {}, None),
        ("/staff/login", {settings.staff_cookie_name: "token"}, "/dashboard"),
        ("/dashboard", {settings.staff_cookie_name: "token"}, None),
        ("/portal", {}, None),
        ("/portal/payments", {}, "/portal"),
        ("/portal/payments", {settings.resident_cookie_name: "token"}, None),
        ("/", {}, None),
        ("/api/v1/contact", {}, None),
        ("/staffing", {}, None),
        ("/dashboards", {}, None),
        ("/portals", {}, None),
        ("/staff", {}, "/staff/login"),
    ])
    def test_resolve_redirect(self, path, cookies, expected):
        assert resolve_redirect(path, cookies) == expected

    def test_middleware_redirects_pages(self, client):
        response = client.get("/dashboard", follow_redirects=False)
        assert response.status_code == 307
        assert response.headers["location"] == "/staff/login"

    def test_middleware_lets_api_through(self, client):
        assert client.get("/health").json() == {"status": "healthy"}
