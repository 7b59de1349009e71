"""
Tests for shift swap requests between two employees.
"""

from datetime import timedelta

from conftest import employee_auth, recipients_of


class TestShiftSwaps:

    async def test_office_swap_and_approve(self, client, db, admin_headers, make_job, make_employee, sent_emails):
        alice, bob = make_employee(first_name="Alice"), make_employee(first_name="Bob")
        job_a = make_job([alice])
        job_b = make_job([bob], starts_in=timedelta(days=2))

        response = await client.post(
            "/api/shift-swaps", json={"fromJobId": job_a.id, "toJobId": job_b.id}, headers=admin_headers
        )
        assert response.status_code == 201
        swap = response.json()
        assert swap["status"] == "pending"
        assert swap["requestedByRole"] == "company"
        assert {alice.email, bob.email} <= set(recipients_of(sent_emails))

        response = await client.patch(f"/api/shift-swaps/{swap['id']}", json={"status": "approved"}, headers=admin_headers)
        assert response.json()["status"] == "approved"

        db.refresh(job_a)
        db.refresh(job_b)
        assert job_a.assigned_to == bob.id
        assert job_b.assigned_to == alice.id
        assert [a.employee_id for a in job_a.assignments] == [bob.id]
        assert [a.employee_id for a in job_b.assignments] == [alice.id]

    async def test_decided_only_once(self, client, admin_headers, make_job, make_employee):
        alice, bob = make_employee(first_name="Alice"), make_employee(first_name="Bob")
        job_a, job_b = make_job([alice]), make_job([bob])
        swap = (
            await client.post("/api/shift-swaps", json={"fromJobId": job_a.id, "toJobId": job_b.id}, headers=admin_headers)
        ).json()
        await client.patch(f"/api/shift-swaps/{swap['id']}", json={"status": "rejected"}, headers=admin_headers)

        response = await client.patch(f"/api/shift-swaps/{swap['id']}", json={"status": "approved"}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Swap request already processed"

    async def test_same_job_rejected(self, client, admin_headers, make_job, employee):
        job = make_job([employee])
        response = await client.post(
            "/api/shift-swaps", json={"fromJobId": job.id, "toJobId": job.id}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Two different jobs are required"

    async def test_same_employee_rejected(self, client, admin_headers, make_job, employee):
        job_a, job_b = make_job([employee]), make_job([employee])
        response = await client.post(
            "/api/shift-swaps", json={"fromJobId": job_a.id, "toJobId": job_b.id}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Jobs must belong to two different employees"

    async def test_team_jobs_not_swappable(self, client, admin_headers, make_job, make_employee):
        alice, bob, cara = (make_employee(first_name=n) for n in ("Alice", "Bob", "Cara"))
        team_job, solo_job = make_job([alice, bob]), make_job([cara])
        response = await client.post(
            "/api/shift-swaps", json={"fromJobId": team_job.id, "toJobId": solo_job.id}, headers=admin_headers
        )
        assert response.status_code == 400
        assert "single assigned employee" in response.json()["detail"]

    async def test_only_scheduled_jobs(self, client, admin_headers, make_job, make_employee):
        alice, bob = make_employee(first_name="Alice"), make_employee(first_name="Bob")
        job_a, job_b = make_job([alice], status="in-progress"), make_job([bob])
        response = await client.post(
            "/api/shift-swaps", json={"fromJobId": job_a.id, "toJobId": job_b.id}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Both jobs must be scheduled to request a swap"

    async def test_employee_can_only_offer_own_job(self, client, make_job, make_employee):
        alice, bob = make_employee(first_name="Alice"), make_employee(first_name="Bob")
        job_a, job_b = make_job([alice]), make_job([bob])

        response = await client.post(
            "/api/employee/shift-swaps", json={"fromJobId": job_b.id, "toJobId": job_a.id}, headers=employee_auth(alice)
        )
        assert response.status_code == 403

        response = await client.post(
            "/api/employee/shift-swaps", json={"fromJobId": job_a.id, "toJobId": job_b.id}, headers=employee_auth(alice)
        )
        assert response.status_code == 201
        assert response.json()["requestedByRole"] == "employee"
        assert response.json()["requestedByEmployeeId"] == alice.id

    async def test_options_list_upcoming_jobs(self, client, make_job, make_employee):
        alice, bob = make_employee(first_name="Alice"), make_employee(first_name="Bob")
        soon = make_job([bob])
        make_job([bob], starts_in=timedelta(days=45))

        data = (await client.get("/api/employee/shift-swaps/options", headers=employee_auth(alice))).json()

        assert [j["id"] for j in data["jobs"]] == [soon.id]
        assert data["jobs"][0]["assignedTo"] == bob.id
        assert {e["id"] for e in data["employees"]} == {alice.id, bob.id}

    async def test_approval_rejected_after_job_reassigned(self, client, db, admin_headers, make_job, make_employee, customer):
        alice, bob, cara = (make_employee(first_name=n) for n in ("Alice", "Bob", "Cara"))
        job_a, job_b = make_job([alice]), make_job([bob])
        swap = (
            await client.post("/api/shift-swaps", json={"fromJobId": job_a.id, "toJobId": job_b.id}, headers=admin_headers)
        ).json()

        response = await client.put(
            f"/api/jobs/{job_a.id}",
            json={"title": job_a.title, "customerId": customer.id, "assignedEmployees": [cara.id]},
            headers=admin_headers,
        )
        assert response.status_code == 200

        response = await client.patch(f"/api/shift-swaps/{swap['id']}", json={"status": "approved"}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Jobs have changed since the swap was requested"

        db.expire_all()
        assert job_a.assigned_to == cara.id
        assert [a.employee_id for a in job_a.assignments] == [cara.id]
        assert job_b.assigned_to == bob.id
        assert [a.employee_id for a in job_b.assignments] == [bob.id]

        listed = (await client.get("/api/shift-swaps", headers=admin_headers)).json()
        assert [s["status"] for s in listed if s["id"] == swap["id"]] == ["pending"]

        response = await client.patch(f"/api/shift-swaps/{swap['id']}", json={"status": "rejected"}, headers=admin_headers)
        assert response.json()["status"] == "rejected"

    async def test_approval_rejected_once_job_started(self, client, db, admin_headers, make_job, make_employee):
        alice, bob = make_employee(first_name="Alice"), make_employee(first_name="Bob")
        job_a, job_b = make_job([alice]), make_job([bob])
        swap = (
            await client.post("/api/shift-swaps", json={"fromJobId": job_a.id, "toJobId": job_b.id}, headers=admin_headers)
        ).json()
        await client.post(f"/api/jobs/{job_b.id}/start", headers=admin_headers)

        response = await client.patch(f"/api/shift-swaps/{swap['id']}", json={"status": "approved"}, headers=admin_headers)
        assert response.status_code == 400

        db.expire_all()
        assert job_a.assigned_to == alice.id
        assert job_b.assigned_to == bob.id
