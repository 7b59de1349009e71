"""
Tests for the employee portal: responding to jobs, task updates and
GPS check-in / check-out with automatic completion.
"""

from cleanmanager.models import JobAssignment, JobCheckIn, JobEvent, JobTask
from cleanmanager.models_invoice import Invoice
from cleanmanager.security_utils import verify_password

from conftest import TEST_PASSWORD, employee_auth, recipients_of

SITE = {"latitude": 51.5, "longitude": -0.12}


class TestJobResponses:

    async def test_lists_only_own_jobs(self, client, make_job, employee, employee_headers, make_employee):
        mine = make_job([employee])
        make_job([make_employee(first_name="Other")])

        response = await client.get("/api/employee/jobs", headers=employee_headers)
        assert response.status_code == 200
        assert [j["id"] for j in response.json()] == [mine.id]

    async def test_accept_single_assignee_notifies_customer(
        self, client, make_job, employee, employee_headers, customer, sent_emails
    ):
        job = make_job([employee])
        response = await client.post(f"/api/employee/jobs/{job.id}/accept", headers=employee_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["awaitingOthers"] is False
        assert data["job"]["employeeAccepted"] is True
        assert customer.email in recipients_of(sent_emails)

    async def test_team_job_waits_for_everyone(self, client, make_job, employee, make_employee, employee_headers):
        teammate = make_employee(first_name="Tom")
        job = make_job([employee, teammate])

        response = await client.post(f"/api/employee/jobs/{job.id}/accept", headers=employee_headers)
        assert response.json()["awaitingOthers"] is True
        assert response.json()["job"]["employeeAccepted"] is False

        response = await client.post(f"/api/employee/jobs/{job.id}/accept", headers=employee_auth(teammate))
        assert response.json()["awaitingOthers"] is False

    async def test_accept_twice(self, client, make_job, employee, employee_headers):
        job = make_job([employee])
        await client.post(f"/api/employee/jobs/{job.id}/accept", headers=employee_headers)

        response = await client.post(f"/api/employee/jobs/{job.id}/accept", headers=employee_headers)
        assert response.status_code == 400

    async def test_decline_keeps_job_scheduled(self, client, db, make_job, employee, employee_headers):
        job = make_job([employee])
        response = await client.request(
            "DELETE",
            f"/api/employee/jobs/{job.id}/accept",
            json={"reason": "Clash with another booking"},
            headers=employee_headers,
        )

        assert response.status_code == 200
        db.refresh(job)
        assert job.status == "scheduled"
        assert job.assigned_to is None
        assert "Clash with another booking" in job.internal_notes

    async def test_unassigned_job_not_found(self, client, make_job, make_employee, employee_headers):
        job = make_job([make_employee(first_name="Other")])
        response = await client.post(f"/api/employee/jobs/{job.id}/accept", headers=employee_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Job not found or not assigned to you"


class TestTasksAndProfile:

    async def test_update_task_status(self, client, db, make_job, employee, employee_headers):
        job = make_job([employee])
        task = JobTask(job_id=job.id, title="Kitchen", order=0)
        db.add(task)
        db.commit()

        response = await client.patch(
            f"/api/employee/jobs/{job.id}/tasks/{task.id}", json={"status": "completed"}, headers=employee_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert response.json()["completedBy"] == employee.id

        response = await client.patch(
            f"/api/employee/jobs/{job.id}/tasks/{task.id}", json={"status": "done"}, headers=employee_headers
        )
        assert response.status_code == 400

    async def test_change_password(self, client, db, employee, employee_headers):
        response = await client.patch(
            "/api/employee/password",
            json={"currentPassword": TEST_PASSWORD, "newPassword": "NewSecret99"},
            headers=employee_headers,
        )
        assert response.status_code == 200
        db.refresh(employee)
        assert verify_password("NewSecret99", employee.password_hash)

    async def test_change_password_wrong_current(self, client, employee_headers):
        response = await client.patch(
            "/api/employee/password",
            json={"currentPassword": "Nope12345", "newPassword": "NewSecret99"},
            headers=employee_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Current password is incorrect"


class TestCheckIns:

    async def test_check_in_moves_job_in_progress(self, client, db, make_job, employee, employee_headers, admin_user):
        job = make_job([employee], **SITE)
        response = await client.post(
            f"/api/employee/jobs/{job.id}/check-in",
            json={"type": "check_in", **SITE},
            headers={**employee_headers, "User-Agent": "CleanerApp/1.0"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Checked in successfully"
        assert data["jobStatus"] == "in-progress"
        assert data["checkIn"]["isWithinRange"] is True
        assert data["checkIn"]["distanceFromJobSite"] == 0.0
        record = db.query(JobCheckIn).one()
        assert record.user_agent == "CleanerApp/1.0"

    async def test_far_away_check_in_is_recorded_out_of_range(self, client, make_job, employee, employee_headers):
        job = make_job([employee], **SITE)
        response = await client.post(
            f"/api/employee/jobs/{job.id}/check-in",
            json={"type": "check_in", "latitude": 51.6, "longitude": -0.12},
            headers=employee_headers,
        )
        assert response.status_code == 200
        assert response.json()["checkIn"]["isWithinRange"] is False

    async def test_missing_location(self, client, make_job, employee, employee_headers):
        job = make_job([employee], **SITE)
        response = await client.post(
            f"/api/employee/jobs/{job.id}/check-in", json={"type": "check_in"}, headers=employee_headers
        )
        check_in = response.json()["checkIn"]
        assert check_in["capturedAddress"] == "Location unavailable"
        assert check_in["isWithinRange"] is False

    async def test_missing_location_keeps_supplied_address(self, client, make_job, employee, employee_headers):
        job = make_job([employee], **SITE)
        response = await client.post(
            f"/api/employee/jobs/{job.id}/check-in",
            json={"type": "check_in", "address": "<b>Flat 2</b>, 1 High Street"},
            headers=employee_headers,
        )
        check_in = response.json()["checkIn"]
        assert check_in["capturedAddress"] == "Flat 2, 1 High Street"
        assert check_in["latitude"] is None
        assert check_in["isWithinRange"] is False

    async def test_ordering_rules(self, client, make_job, employee, employee_headers):
        job = make_job([employee], **SITE)
        url = f"/api/employee/jobs/{job.id}/check-in"

        response = await client.post(url, json={"type": "check_out", **SITE}, headers=employee_headers)
        assert response.json()["detail"] == "You must check in before checking out"

        await client.post(url, json={"type": "check_in", **SITE}, headers=employee_headers)
        response = await client.post(url, json={"type": "check_in", **SITE}, headers=employee_headers)
        assert response.json()["detail"] == "You have already checked in to this job"

        await client.post(url, json={"type": "check_out", **SITE}, headers=employee_headers)
        response = await client.post(url, json={"type": "check_out", **SITE}, headers=employee_headers)
        assert response.json()["detail"] == "You have already checked out of this job"

        response = await client.post(url, json={"type": "lunch"}, headers=employee_headers)
        assert response.status_code == 400

    async def test_check_out_completes_job_and_invoices(
        self, client, db, make_job, employee, employee_headers, customer, sent_emails
    ):
        job = make_job([employee], **SITE)
        url = f"/api/employee/jobs/{job.id}/check-in"
        await client.post(url, json={"type": "check_in", **SITE}, headers=employee_headers)

        response = await client.post(
            url, json={"type": "check_out", "comment": "Left keys in the usual place", **SITE}, headers=employee_headers
        )

        data = response.json()
        assert data["jobCompleted"] is True
        assert data["jobStatus"] == "completed"
        invoice = db.get(Invoice, data["invoiceId"])
        assert invoice.status == "sent"
        assert invoice.invoice_number.startswith("INV-0001 - Carla Customer - ")
        assert invoice.notes.startswith("Service completed on")

        events = [e.type for e in db.query(JobEvent).filter(JobEvent.job_id == job.id)]
        assert "check_out_comment" in events
        assert "job_completed" in events
        assert recipients_of(sent_emails).count(customer.email) >= 2

    async def test_team_job_completes_on_last_check_out(
        self, client, db, make_job, employee, make_employee, employee_headers
    ):
        teammate = make_employee(first_name="Tom")
        job = make_job([employee, teammate], **SITE)
        url = f"/api/employee/jobs/{job.id}/check-in"
        for headers in (employee_headers, employee_auth(teammate)):
            await client.post(url, json={"type": "check_in", **SITE}, headers=headers)

        first = await client.post(url, json={"type": "check_out", **SITE}, headers=employee_headers)
        assert first.json()["jobCompleted"] is False
        assignment = (
            db.query(JobAssignment)
            .filter(JobAssignment.job_id == job.id, JobAssignment.employee_id == employee.id)
            .one()
        )
        assert assignment.status == "completed"

        last = await client.post(url, json={"type": "check_out", **SITE}, headers=employee_auth(teammate))
        assert last.json()["jobCompleted"] is True

    async def test_status_summary(self, client, make_job, employee, employee_headers):
        job = make_job([employee], **SITE)
        url = f"/api/employee/jobs/{job.id}/check-in"
        await client.post(url, json={"type": "check_in", **SITE}, headers=employee_headers)

        response = await client.get(url, headers=employee_headers)
        data = response.json()
        assert data["status"] == "checked_in"
        assert data["hasCheckedIn"] is True
        assert data["hasCheckedOut"] is False
        assert len(data["checkIns"]) == 1

    async def test_office_lists_check_ins(self, client, make_job, employee, employee_headers, admin_headers):
        job = make_job([employee], **SITE)
        await client.post(
            f"/api/employee/jobs/{job.id}/check-in", json={"type": "check_in", **SITE}, headers=employee_headers
        )

        response = await client.get("/api/check-ins", params={"jobId": job.id}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()[0]["employeeId"] == employee.id
