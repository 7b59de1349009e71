"""
Tests for the equipment register.
"""


class TestEquipment:

    async def test_create_defaults_to_available(self, client, admin_headers, employee):
        response = await client.post(
            "/api/equipment",
            json={
                "name": "Vacuum V8",
                "category": "Vacuums",
                "assignedTo": str(employee.id),
                "purchaseDate": "2025-01-15",
                "purchasePrice": 249.99,
            },
            headers=admin_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "available"
        assert data["assignedTo"] == employee.id
        assert data["assignedToName"] == employee.full_name
        assert data["purchaseDate"] == "2025-01-15"

    async def test_validation(self, client, admin_headers):
        response = await client.post("/api/equipment", json={"name": ""}, headers=admin_headers)
        assert response.json()["detail"] == "Equipment name is required"

        response = await client.post("/api/equipment", json={"name": "Steamer", "purchasePrice": -1}, headers=admin_headers)
        assert response.json()["detail"] == "Purchase price cannot be negative"

        response = await client.post("/api/equipment", json={"name": "Steamer", "purchaseDate": "someday"}, headers=admin_headers)
        assert response.status_code == 400

    async def test_assignee_must_belong_to_company(self, client, admin_headers, make_employee, other_company):
        outsider = make_employee(first_name="Otto", company_id=other_company.id)
        response = await client.post(
            "/api/equipment", json={"name": "Ladder", "assignedTo": outsider.id}, headers=admin_headers
        )
        assert response.status_code == 400

    async def test_update_status_and_unassign(self, client, admin_headers, employee):
        item = (
            await client.post("/api/equipment", json={"name": "Buffer", "assignedTo": employee.id}, headers=admin_headers)
        ).json()
        url = f"/api/equipment/{item['id']}"

        response = await client.put(url, json={"status": "maintenance", "assignedTo": None}, headers=admin_headers)
        assert response.json()["status"] == "maintenance"
        assert response.json()["assignedTo"] is None
        assert response.json()["name"] == "Buffer"

        response = await client.put(url, json={"status": "broken"}, headers=admin_headers)
        assert response.status_code == 400

    async def test_list_filters(self, client, admin_headers):
        await client.post("/api/equipment", json={"name": "Vacuum", "category": "Vacuums"}, headers=admin_headers)
        await client.post("/api/equipment", json={"name": "Mop", "category": "Floor"}, headers=admin_headers)

        data = (await client.get("/api/equipment?category=Floor", headers=admin_headers)).json()
        assert [e["name"] for e in data] == ["Mop"]

        data = (await client.get("/api/equipment?search=vac", headers=admin_headers)).json()
        assert [e["name"] for e in data] == ["Vacuum"]

    async def test_delete(self, client, admin_headers):
        item = (await client.post("/api/equipment", json={"name": "Bucket"}, headers=admin_headers)).json()
        await client.delete(f"/api/equipment/{item['id']}", headers=admin_headers)
        assert (await client.get(f"/api/equipment/{item['id']}", headers=admin_headers)).status_code == 404
