"""
Tests for employee time-off requests and office review.
"""

from conftest import employee_auth, recipients_of

# Monday to Sunday
WEEK = {"type": "holiday", "startDate": "2030-03-04", "endDate": "2030-03-10", "reason": "Family trip"}


async def request_time_off(client, headers, **overrides):
    response = await client.post("/api/employee/time-off", json={**WEEK, **overrides}, headers=headers)
    assert response.status_code == 201
    return response.json()


class TestTimeOff:

    async def test_counts_weekdays_only(self, client, employee_headers):
        data = await request_time_off(client, employee_headers)
        assert data["totalDays"] == 5
        assert data["status"] == "pending"

    async def test_required_fields(self, client, employee_headers):
        response = await client.post("/api/employee/time-off", json={"type": "holiday"}, headers=employee_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Type, start date, and end date are required"

    async def test_end_before_start(self, client, employee_headers):
        response = await client.post(
            "/api/employee/time-off",
            json={**WEEK, "startDate": "2030-03-10", "endDate": "2030-03-04"},
            headers=employee_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "End date must be after start date"

    async def test_overlapping_pending_request(self, client, employee_headers):
        await request_time_off(client, employee_headers)
        response = await client.post(
            "/api/employee/time-off",
            json={**WEEK, "startDate": "2030-03-08", "endDate": "2030-03-12"},
            headers=employee_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "You already have a pending request for overlapping dates"

    async def test_cancelled_request_frees_dates(self, client, employee_headers):
        first = await request_time_off(client, employee_headers)
        response = await client.patch(
            f"/api/employee/time-off/{first['id']}", json={"action": "cancel"}, headers=employee_headers
        )
        assert response.json()["status"] == "cancelled"

        await request_time_off(client, employee_headers)

    async def test_approve_emails_employee(self, client, admin_headers, employee_headers, employee, sent_emails):
        request = await request_time_off(client, employee_headers)

        response = await client.patch(
            f"/api/time-off/{request['id']}", json={"action": "approve", "reviewNotes": "Enjoy"}, headers=admin_headers
        )

        assert response.json()["status"] == "approved"
        assert response.json()["reviewNotes"] == "Enjoy"
        assert employee.email in recipients_of(sent_emails)

    async def test_review_only_once(self, client, admin_headers, employee_headers):
        request = await request_time_off(client, employee_headers)
        url = f"/api/time-off/{request['id']}"
        await client.patch(url, json={"action": "deny"}, headers=admin_headers)

        response = await client.patch(url, json={"action": "approve"}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Only pending requests can be reviewed"

    async def test_invalid_review_action(self, client, admin_headers, employee_headers):
        request = await request_time_off(client, employee_headers)
        response = await client.patch(f"/api/time-off/{request['id']}", json={"action": "maybe"}, headers=admin_headers)
        assert response.status_code == 400

    async def test_office_list_is_company_scoped(self, client, admin_headers, employee_headers, make_employee, other_company):
        await request_time_off(client, employee_headers)
        outsider = make_employee(first_name="Otto", company_id=other_company.id)
        await request_time_off(client, employee_auth(outsider))

        data = (await client.get("/api/time-off", headers=admin_headers)).json()
        assert len(data) == 1

    async def test_delete(self, client, admin_headers, employee_headers):
        request = await request_time_off(client, employee_headers)
        response = await client.delete(f"/api/time-off/{request['id']}", headers=admin_headers)
        assert response.json()["success"] is True
