"""
Tests for the customer portal: login codes, own records, profile and bookings.
"""

from datetime import timedelta

from cleanmanager.models import CleaningPlan, Customer
from cleanmanager.models_invoice import Invoice
from cleanmanager.utils.dates import utc_now

from conftest import recipients_of


async def request_code(client, email):
    response = await client.get("/api/customer-portal/auth", params={"email": email})
    assert response.status_code == 200
    return response.json()


class TestPortalLogin:

    async def test_code_request_and_verify(self, client, customer, sent_emails):
        data = await request_code(client, customer.email)
        assert data["devCode"]
        assert customer.email in recipients_of(sent_emails)

        response = await client.post(
            "/api/customer-portal/auth", json={"email": customer.email.upper(), "code": data["devCode"]}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["token"]
        assert body["customer"]["id"] == customer.id
        assert body["customer"]["companyName"] == "Sparkle Cleaning"

    async def test_unknown_email_gets_same_message(self, client, sent_emails):
        data = await request_code(client, "stranger@nowhere.test")
        assert "devCode" not in data
        assert data["message"].startswith("If a customer account exists")
        sent_emails.assert_not_called()

    async def test_wrong_code(self, client, customer):
        data = await request_code(client, customer.email)
        wrong = "000000" if data["devCode"] != "000000" else "111111"

        response = await client.post("/api/customer-portal/auth", json={"email": customer.email, "code": wrong})
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid code. Please try again."

    async def test_code_is_single_use(self, client, customer):
        data = await request_code(client, customer.email)
        payload = {"email": customer.email, "code": data["devCode"]}
        await client.post("/api/customer-portal/auth", json=payload)

        response = await client.post("/api/customer-portal/auth", json=payload)
        assert response.status_code == 400
        assert response.json()["detail"] == "No login code found. Please request a new code."

    async def test_code_requests_are_rate_limited(self, client, customer):
        for _ in range(5):
            await request_code(client, customer.email)
        response = await client.get("/api/customer-portal/auth", params={"email": customer.email})
        assert response.status_code == 429


class TestPortalRecords:

    async def test_jobs_only_for_this_customer(self, client, db, company, customer, customer_headers, make_job, employee):
        own = make_job([employee])
        other = Customer(company_id=company.id, first_name="Dan", last_name="Other", email="dan@customer.test", status="active")
        db.add(other)
        db.commit()
        make_job([employee], customer_id=other.id)

        data = (await client.get("/api/customer-portal/jobs", headers=customer_headers)).json()

        assert [j["id"] for j in data] == [own.id]
        assert data[0]["companyName"] == "Sparkle Cleaning"

    async def test_invoices(self, client, db, company, customer, customer_headers):
        db.add(
            Invoice(
                company_id=company.id,
                customer_id=customer.id,
                invoice_number="INV-0001",
                total=80,
                amount_due=80,
                status="sent",
                due_at=utc_now() + timedelta(days=14),
            )
        )
        db.commit()

        data = (await client.get("/api/customer-portal/invoices", headers=customer_headers)).json()
        assert [i["invoiceNumber"] for i in data] == ["INV-0001"]

    async def test_back_office_token_rejected(self, client, admin_headers):
        response = await client.get("/api/customer-portal/jobs", headers=admin_headers)
        assert response.status_code == 401


class TestPortalProfile:

    async def test_update_profile(self, client, customer_headers):
        response = await client.patch(
            "/api/customer-portal/profile",
            json={"accessInstructions": "Key under the mat", "phone": "07700900999"},
            headers=customer_headers,
        )
        assert response.status_code == 200
        assert response.json()["accessInstructions"] == "Key under the mat"
        assert response.json()["phone"] == "07700 900 999"
        assert response.json()["firstName"] == "Carla"

    async def test_empty_name_rejected(self, client, customer_headers):
        response = await client.patch("/api/customer-portal/profile", json={"firstName": " "}, headers=customer_headers)
        assert response.status_code == 400

    async def test_email_taken(self, client, db, company, customer_headers):
        db.add(Customer(company_id=company.id, first_name="Dan", last_name="Other", email="dan@customer.test", status="active"))
        db.commit()

        response = await client.patch(
            "/api/customer-portal/profile", json={"email": "dan@customer.test"}, headers=customer_headers
        )
        assert response.status_code == 409


class TestBookings:

    async def test_booking_notifies_office(self, client, customer_headers, plan, admin_user, sent_emails):
        preferred = (utc_now() + timedelta(days=3)).isoformat()
        response = await client.post(
            "/api/customer-portal/bookings",
            json={"planId": plan.id, "preferredDate": preferred, "notes": "Mornings please"},
            headers=customer_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["planName"] == "Standard Clean"
        assert data["address"] == "1 High Street, London, SW1A 1AA"
        assert admin_user.email in recipients_of(sent_emails)

        bookings = (await client.get("/api/customer-portal/bookings", headers=customer_headers)).json()
        assert [b["id"] for b in bookings] == [data["id"]]

    async def test_past_date_rejected(self, client, customer_headers):
        yesterday = (utc_now() - timedelta(days=1)).isoformat()
        response = await client.post(
            "/api/customer-portal/bookings", json={"preferredDate": yesterday}, headers=customer_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Preferred date cannot be in the past"

    async def test_plan_from_another_company(self, client, db, customer_headers, other_company):
        foreign = CleaningPlan(company_id=other_company.id, name="Rival Clean", price=50.0, is_active=True)
        db.add(foreign)
        db.commit()

        response = await client.post(
            "/api/customer-portal/bookings", json={"planId": foreign.id}, headers=customer_headers
        )
        assert response.status_code == 404
