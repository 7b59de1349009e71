"""
Tests for supplies inventory and employee supply requests.
"""

from conftest import employee_auth, recipients_of


class TestSupplies:

    async def test_create_sets_stock_status(self, client, admin_headers):
        response = await client.post(
            "/api/supplies", json={"name": " Bleach ", "quantity": 3, "minQuantity": 5}, headers=admin_headers
        )
        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Bleach"
        assert data["status"] == "low-stock"

    async def test_invalid_quantities_fall_back(self, client, admin_headers):
        data = (
            await client.post(
                "/api/supplies", json={"name": "Mop heads", "quantity": "lots", "minQuantity": -3}, headers=admin_headers
            )
        ).json()
        assert data["quantity"] == 0
        assert data["minQuantity"] == 0
        assert data["status"] == "out-of-stock"

    async def test_name_required(self, client, admin_headers):
        response = await client.post("/api/supplies", json={"name": "  "}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Supply name is required"

    async def test_update_recomputes_status(self, client, admin_headers):
        supply = (await client.post("/api/supplies", json={"name": "Gloves", "quantity": 1}, headers=admin_headers)).json()

        response = await client.put(f"/api/supplies/{supply['id']}", json={"quantity": 40}, headers=admin_headers)

        assert response.json()["status"] == "in-stock"
        assert response.json()["name"] == "Gloves"

    async def test_delete(self, client, admin_headers):
        supply = (await client.post("/api/supplies", json={"name": "Sponges"}, headers=admin_headers)).json()
        assert (await client.delete(f"/api/supplies/{supply['id']}", headers=admin_headers)).status_code == 200
        assert (await client.get(f"/api/supplies/{supply['id']}", headers=admin_headers)).status_code == 404


class TestSupplyRequests:

    async def _request(self, client, headers, **overrides):
        payload = {"items": [{"name": "Bleach", "quantity": 2}, {"name": ""}], "urgency": "high"}
        payload.update(overrides)
        response = await client.post("/api/employee/supply-requests", json=payload, headers=headers)
        assert response.status_code == 201
        return response.json()

    async def test_create_notifies_office(self, client, employee_headers, admin_user, sent_emails):
        request = await self._request(client, employee_headers)

        assert request["status"] == "pending"
        assert request["items"] == [{"name": "Bleach", "quantity": 2}]
        assert admin_user.email in recipients_of(sent_emails)

    async def test_requires_an_item(self, client, employee_headers):
        response = await client.post(
            "/api/employee/supply-requests", json={"items": [{"name": " "}]}, headers=employee_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "At least one item is required"

    async def test_invalid_urgency(self, client, employee_headers):
        response = await client.post(
            "/api/employee/supply-requests",
            json={"items": [{"name": "Bleach"}], "urgency": "yesterday"},
            headers=employee_headers,
        )
        assert response.status_code == 400

    async def test_employee_cancels_pending_request(self, client, employee_headers):
        request = await self._request(client, employee_headers)
        url = f"/api/employee/supply-requests/{request['id']}"

        response = await client.patch(url, json={"action": "cancel"}, headers=employee_headers)
        assert response.json()["status"] == "cancelled"

        response = await client.patch(url, json={"action": "cancel"}, headers=employee_headers)
        assert response.status_code == 400

    async def test_cannot_cancel_colleagues_request(self, client, employee_headers, make_employee):
        request = await self._request(client, employee_headers)
        colleague = make_employee(first_name="Cole")

        response = await client.patch(
            f"/api/employee/supply-requests/{request['id']}", json={"action": "cancel"}, headers=employee_auth(colleague)
        )
        assert response.status_code == 404

    async def test_review_flow(self, client, admin_headers, employee_headers, employee, sent_emails):
        request = await self._request(client, employee_headers)
        url = f"/api/supply-requests/{request['id']}"

        response = await client.patch(url, json={"action": "fulfill"}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Only approved requests can be fulfilled"

        response = await client.patch(url, json={"action": "approve", "reviewNotes": "Order placed"}, headers=admin_headers)
        assert response.json()["status"] == "approved"
        assert response.json()["reviewNotes"] == "Order placed"
        assert employee.email in recipients_of(sent_emails)

        response = await client.patch(url, json={"action": "fulfill"}, headers=admin_headers)
        assert response.json()["status"] == "fulfilled"
        assert response.json()["fulfilledAt"] is not None

    async def test_reopen_denied_request(self, client, admin_headers, employee_headers):
        request = await self._request(client, employee_headers)
        url = f"/api/supply-requests/{request['id']}"
        await client.patch(url, json={"action": "deny"}, headers=admin_headers)

        response = await client.patch(url, json={"action": "reopen"}, headers=admin_headers)

        assert response.json()["status"] == "pending"
        assert response.json()["reviewedBy"] is None

    async def test_office_summary_counts_urgent(self, client, admin_headers, employee_headers):
        await self._request(client, employee_headers)
        await self._request(client, employee_headers, urgency="low")

        data = (await client.get("/api/supply-requests", headers=admin_headers)).json()

        assert data["summary"]["total"] == 2
        assert data["summary"]["pending"] == 2
        assert data["summary"]["urgent"] == 1
