"""
Tests for customer CRUD, validation and tenant isolation.
"""

from cleanmanager.models import Customer, EventLog

from conftest import recipients_of


NEW_CUSTOMER = {
    "firstName": "Bob",
    "lastName": "Builder",
    "email": "Bob@Example.test",
    "phone": "07700900456",
    "address": "22 Acacia Avenue",
    "city": "Leeds",
    "postcode": "LS1 1AA",
    "country": "United Kingdom",
}


class TestCreateCustomer:

    async def test_create_normalises_email_and_phone(self, client, admin_headers):
        response = await client.post("/api/customers", json=NEW_CUSTOMER, headers=admin_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "bob@example.test"
        assert data["phone"] == "07700 900 456"
        assert data["status"] == "active"
        assert data["customerType"] == "residential"

    async def test_required_fields(self, client, admin_headers):
        response = await client.post("/api/customers", json={"firstName": "Bob"}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "First name, last name, and email are required"

    async def test_invalid_phone(self, client, admin_headers):
        response = await client.post(
            "/api/customers", json={**NEW_CUSTOMER, "phone": "12345"}, headers=admin_headers
        )
        assert response.status_code == 400

    async def test_duplicate_email_in_company(self, client, admin_headers, customer):
        response = await client.post(
            "/api/customers",
            json={**NEW_CUSTOMER, "email": customer.email.upper()},
            headers=admin_headers,
        )
        assert response.status_code == 409
        assert response.json()["detail"] == "A customer with this email already exists"

    async def test_create_records_event(self, client, db, admin_headers, company):
        await client.post("/api/customers", json=NEW_CUSTOMER, headers=admin_headers)
        events = db.query(EventLog).filter(EventLog.company_id == company.id).all()
        assert "customer_created" in [e.event_type for e in events]


class TestReadCustomers:

    async def test_list_is_company_scoped(self, client, db, admin_headers, customer, other_company):
        db.add(
            Customer(
                company_id=other_company.id,
                first_name="Otto",
                last_name="Other",
                email="otto@other.test",
                status="active",
            )
        )
        db.commit()

        response = await client.get("/api/customers", headers=admin_headers)
        assert response.status_code == 200
        assert [c["id"] for c in response.json()] == [customer.id]

    async def test_other_company_customer_is_not_found(self, client, db, admin_headers, other_company):
        stranger = Customer(company_id=other_company.id, first_name="Otto", last_name="Other", email="o@o.test")
        db.add(stranger)
        db.commit()

        response = await client.get(f"/api/customers/{stranger.id}", headers=admin_headers)
        assert response.status_code == 404

    async def test_search(self, client, admin_headers, customer):
        response = await client.get("/api/customers", params={"search": "carla"}, headers=admin_headers)
        assert len(response.json()) == 1

        response = await client.get("/api/customers", params={"search": "zzz"}, headers=admin_headers)
        assert response.json() == []


class TestCustomerStatus:

    async def test_delete_deactivates_and_emails(self, client, db, admin_headers, customer, sent_emails):
        response = await client.delete(f"/api/customers/{customer.id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Customer deactivated"
        db.refresh(customer)
        assert customer.status == "inactive"
        assert customer.email in recipients_of(sent_emails)

    async def test_invalid_status(self, client, admin_headers, customer):
        response = await client.patch(
            f"/api/customers/{customer.id}/status", json={"status": "archived"}, headers=admin_headers
        )
        assert response.status_code == 400

    async def test_update_keeps_unset_fields(self, client, db, admin_headers, customer):
        response = await client.put(
            f"/api/customers/{customer.id}", json={"city": "Bristol"}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["city"] == "Bristol"
        assert response.json()["firstName"] == "Carla"
