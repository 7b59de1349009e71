"""
Tests for company signup, sign in and token checks.
"""

from cleanmanager.auth import create_customer_token
from cleanmanager.security_utils import generate_timed_token, verify_password

from conftest import TEST_PASSWORD


SIGNUP = {
    "companyName": "Fresh Homes",
    "companyEmail": "hello@freshhomes.test",
    "firstName": "Sam",
    "lastName": "Founder",
    "email": "Sam@FreshHomes.test",
    "password": "Cleaning123",
}


class TestSignup:

    async def test_creates_company_and_admin(self, client):
        response = await client.post("/api/auth/signup", json=SIGNUP)

        assert response.status_code == 201
        data = response.json()
        assert data["token"]
        assert data["user"]["email"] == "sam@freshhomes.test"
        assert data["user"]["role"] == "admin"
        assert data["company"]["name"] == "Fresh Homes"

    async def test_missing_fields(self, client):
        response = await client.post("/api/auth/signup", json={"email": "a@b.test"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Missing required fields"

    async def test_weak_password(self, client):
        response = await client.post("/api/auth/signup", json={**SIGNUP, "password": "short"})
        assert response.status_code == 400

    async def test_duplicate_email(self, client, admin_user):
        response = await client.post("/api/auth/signup", json={**SIGNUP, "email": admin_user.email})
        assert response.status_code == 409


class TestSignin:

    async def test_valid_credentials(self, client, admin_user):
        response = await client.post(
            "/api/auth/signin", json={"email": admin_user.email, "password": TEST_PASSWORD}
        )
        assert response.status_code == 200
        assert response.json()["user"]["id"] == admin_user.id

    async def test_wrong_password(self, client, admin_user):
        response = await client.post("/api/auth/signin", json={"email": admin_user.email, "password": "Wrong1234"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    async def test_employee_signin_by_username(self, client, employee):
        response = await client.post(
            "/api/auth/employee-signin", json={"username": employee.username, "password": TEST_PASSWORD}
        )
        assert response.status_code == 200
        assert response.json()["employee"]["id"] == employee.id

    async def test_inactive_employee_rejected(self, client, make_employee):
        inactive = make_employee(first_name="Ivy", status="inactive")
        response = await client.post(
            "/api/auth/employee-signin", json={"username": inactive.username, "password": TEST_PASSWORD}
        )
        assert response.status_code == 403


class TestTokens:

    async def test_me_requires_token(self, client):
        response = await client.get("/api/auth/me")
        assert response.status_code == 401

    async def test_me_returns_user_and_company(self, client, admin_headers, company):
        response = await client.get("/api/auth/me", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["company"]["id"] == company.id

    async def test_customer_token_rejected_on_back_office(self, client, customer):
        headers = {"Authorization": f"Bearer {create_customer_token(customer)}"}
        response = await client.get("/api/customers", headers=headers)
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token type"

    async def test_garbage_token(self, client):
        response = await client.get("/api/customers", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401


class TestPasswordReset:

    async def test_forgot_password_does_not_reveal_accounts(self, client, sent_emails):
        response = await client.post("/api/auth/forgot-password", json={"email": "nobody@nowhere.test"})
        assert response.status_code == 200
        assert "If an account exists" in response.json()["message"]
        sent_emails.assert_not_called()

    async def test_forgot_password_emails_known_user(self, client, admin_user, sent_emails):
        await client.post("/api/auth/forgot-password", json={"email": admin_user.email})
        sent_emails.assert_awaited_once()

    async def test_reset_password_with_valid_token(self, client, db, admin_user):
        token = generate_timed_token({"userId": admin_user.id, "email": admin_user.email}, salt="password-reset")
        response = await client.post("/api/auth/reset-password", json={"token": token, "password": "BrandNew456"})

        assert response.status_code == 200
        db.refresh(admin_user)
        assert verify_password("BrandNew456", admin_user.password_hash)

    async def test_reset_password_with_bad_token(self, client):
        response = await client.post("/api/auth/reset-password", json={"token": "bogus", "password": "BrandNew456"})
        assert response.status_code == 400
