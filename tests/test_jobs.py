"""
Tests for job scheduling, assignment rules and the job lifecycle.
"""

from datetime import timedelta

from cleanmanager.models import Job, JobAssignment, JobEvent
from cleanmanager.models_invoice import Invoice
from cleanmanager.utils.dates import utc_now

from conftest import recipients_of


def job_payload(customer, plan, employees, **overrides):
    payload = {
        "title": "Deep clean",
        "customerId": customer.id,
        "planId": plan.id,
        "location": "1 High Street",
        "city": "London",
        "postcode": "SW1A 1AA",
        "scheduledFor": (utc_now() + timedelta(days=2)).isoformat(),
        "assignedEmployees": [{"employeeId": e.id, "payAmount": 25} for e in employees],
    }
    payload.update(overrides)
    return payload


class TestCreateJob:

    async def test_create_assigns_and_copies_plan_tasks(
        self, client, db, admin_headers, customer, plan, employee, sent_emails
    ):
        response = await client.post(
            "/api/jobs", json=job_payload(customer, plan, [employee]), headers=admin_headers
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "scheduled"
        assert data["assignedTo"] == employee.id
        assert data["assignedEmployeeIds"] == [employee.id]
        assert data["durationMinutes"] == 120
        assert [t["title"] for t in data["tasks"]] == ["Kitchen", "Bathrooms"]
        assert employee.email in recipients_of(sent_emails)

    async def test_required_fields(self, client, admin_headers, customer, plan):
        response = await client.post(
            "/api/jobs", json=job_payload(customer, plan, [], title=""), headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Title, customer, plan, location, and assigned staff are required"

    async def test_past_schedule_rejected(self, client, admin_headers, customer, plan, employee):
        past = (utc_now() - timedelta(days=1)).isoformat()
        response = await client.post(
            "/api/jobs", json=job_payload(customer, plan, [employee], scheduledFor=past), headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Scheduled time cannot be in the past"

    async def test_pay_above_plan_price_rejected(self, client, admin_headers, customer, plan, employee):
        payload = job_payload(customer, plan, [employee])
        payload["assignedEmployees"] = [{"employeeId": employee.id, "payAmount": 500}]
        response = await client.post("/api/jobs", json=payload, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Employee pay cannot exceed cleaning plan price"

    async def test_unknown_employee(self, client, admin_headers, customer, plan):
        payload = job_payload(customer, plan, [])
        payload["assignedEmployees"] = [9999]
        response = await client.post("/api/jobs", json=payload, headers=admin_headers)
        assert response.status_code == 404

    async def test_back_created_complete_job_is_invoiced(
        self, client, db, admin_headers, customer, plan, employee
    ):
        past = (utc_now() - timedelta(days=3)).isoformat()
        payload = job_payload(
            customer, plan, [employee], scheduledFor=past, allowPast=True, backCreateComplete=True
        )
        response = await client.post("/api/jobs", json=payload, headers=admin_headers)

        assert response.status_code == 201
        assert response.json()["status"] == "completed"
        invoice = db.query(Invoice).filter(Invoice.job_id == response.json()["id"]).one()
        assert invoice.status == "sent"
        assert invoice.total == plan.price


def subjects_for(mock_send, address) -> list[str]:
    return [c.kwargs.get("subject") for c in mock_send.call_args_list if c.kwargs.get("to") == address]


def update_payload(job, customer, assigned):
    return {"title": job.title, "customerId": customer.id, "assignedEmployees": assigned}


class TestUpdateJob:

    async def test_reassignment_notifies_removed_and_added(
        self, client, admin_headers, make_job, make_employee, customer, sent_emails
    ):
        ann, ben = make_employee(first_name="Ann"), make_employee(first_name="Ben")
        job = make_job([ann])

        response = await client.put(
            f"/api/jobs/{job.id}",
            json=update_payload(job, customer, [{"employeeId": ben.id, "payAmount": 40}]),
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["assignedTo"] == ben.id
        assert data["assignedEmployeeIds"] == [ben.id]
        assert data["employeePay"] == 40
        assert subjects_for(sent_emails, ann.email) == ["Removed from job: Weekly clean"]
        assert subjects_for(sent_emails, ben.email) == ["New job assigned: Weekly clean"]

    async def test_acceptance_resets_only_when_assignees_change(
        self, client, admin_headers, make_job, make_employee, customer, sent_emails
    ):
        ann, ben = make_employee(first_name="Ann"), make_employee(first_name="Ben")
        job = make_job([ann, ben], employee_accepted=True, employee_accepted_at=utc_now())

        response = await client.put(
            f"/api/jobs/{job.id}", json=update_payload(job, customer, [ann.id, ben.id]), headers=admin_headers
        )
        assert response.json()["employeeAccepted"] is True
        assert sent_emails.call_count == 0

        response = await client.put(
            f"/api/jobs/{job.id}", json=update_payload(job, customer, [ann.id]), headers=admin_headers
        )
        data = response.json()
        assert data["employeeAccepted"] is False
        assert data["employeeAcceptedAt"] is None
        assert data["assignedEmployeeIds"] == [ann.id]
        assert recipients_of(sent_emails) == [ben.email]

    async def test_completed_job_reassignment_is_recorded(
        self, client, admin_headers, make_job, make_employee, customer, sent_emails
    ):
        ann, ben = make_employee(first_name="Ann"), make_employee(first_name="Ben")
        job = make_job([ann], status="completed", completed_at=utc_now())

        response = await client.put(
            f"/api/jobs/{job.id}",
            json={**update_payload(job, customer, [ben.id]), "status": "scheduled"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert response.json()["assignedTo"] == ben.id
        assert sent_emails.call_count == 0

        events = (await client.get(f"/api/jobs/{job.id}/timeline", headers=admin_headers)).json()
        changed = [e for e in events if e["type"] == "completed_assignee_changed"]
        assert len(changed) == 1
        assert changed[0]["meta"]["previousAssigneeId"] == ann.id
        assert changed[0]["meta"]["newAssigneeId"] == ben.id
        assert changed[0]["message"] == "Completed job reassigned from Ann Cleaner to Ben Cleaner"

    async def test_per_job_employee_needs_pay(self, client, db, admin_headers, make_job, make_employee, customer):
        ann, ben = make_employee(first_name="Ann"), make_employee(first_name="Ben")
        ben.pay_type = "per_job"
        db.commit()
        job = make_job([ann])

        response = await client.put(
            f"/api/jobs/{job.id}", json=update_payload(job, customer, [ben.id]), headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Pay per job is required for Ben Cleaner"
        db.expire_all()
        assert [a.employee_id for a in job.assignments] == [ann.id]

    async def test_pay_above_plan_price_rejected(self, client, admin_headers, make_job, employee, customer):
        job = make_job([employee])
        response = await client.put(
            f"/api/jobs/{job.id}",
            json=update_payload(job, customer, [{"employeeId": employee.id, "payAmount": 500}]),
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Employee pay cannot exceed cleaning plan price"

    async def test_employee_of_other_company_not_found(
        self, client, admin_headers, make_job, make_employee, employee, customer, other_company
    ):
        job = make_job([employee])
        outsider = make_employee(first_name="Otto", company_id=other_company.id)

        response = await client.put(
            f"/api/jobs/{job.id}", json=update_payload(job, customer, [outsider.id]), headers=admin_headers
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "One or more assigned employees were not found"


class TestJobLifecycle:

    async def test_start_then_complete_generates_invoice(
        self, client, db, admin_headers, make_job, employee, customer, sent_emails
    ):
        job = make_job([employee])

        response = await client.post(f"/api/jobs/{job.id}/start", headers=admin_headers)
        assert response.json()["status"] == "in-progress"

        response = await client.post(
            f"/api/jobs/{job.id}/complete", json={"actualPrice": 95}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert response.json()["actualPrice"] == 95

        invoice = db.query(Invoice).filter(Invoice.job_id == job.id).one()
        assert invoice.total == 95
        assert customer.email in recipients_of(sent_emails)

    async def test_complete_twice(self, client, admin_headers, make_job, employee):
        job = make_job([employee])
        await client.post(f"/api/jobs/{job.id}/complete", headers=admin_headers)

        response = await client.post(f"/api/jobs/{job.id}/complete", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Job is already completed"

    async def test_cancel_requires_reason(self, client, admin_headers, make_job, employee):
        job = make_job([employee])
        response = await client.post(f"/api/jobs/{job.id}/cancel", json={}, headers=admin_headers)
        assert response.status_code == 400

    async def test_cancel_notifies_customer_and_staff(
        self, client, admin_headers, make_job, employee, customer, sent_emails
    ):
        job = make_job([employee])
        response = await client.post(
            f"/api/jobs/{job.id}/cancel", json={"reason": "Customer away"}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        recipients = recipients_of(sent_emails)
        assert customer.email in recipients
        assert employee.email in recipients

    async def test_cannot_start_cancelled_job(self, client, admin_headers, make_job, employee):
        job = make_job([employee], status="cancelled")
        response = await client.post(f"/api/jobs/{job.id}/start", headers=admin_headers)
        assert response.status_code == 400

    async def test_timeline_records_events(self, client, admin_headers, make_job, employee):
        job = make_job([employee])
        await client.post(f"/api/jobs/{job.id}/start", headers=admin_headers)

        response = await client.get(f"/api/jobs/{job.id}/timeline", headers=admin_headers)
        assert "job_started" in [e["type"] for e in response.json()]


class TestJobQueries:

    async def test_filter_by_status_and_assignee(self, client, admin_headers, make_job, make_employee):
        first, second = make_employee(first_name="Ann"), make_employee(first_name="Ben")
        scheduled = make_job([first])
        make_job([second], status="completed")

        response = await client.get("/api/jobs", params={"status": "scheduled"}, headers=admin_headers)
        assert [j["id"] for j in response.json()] == [scheduled.id]

        response = await client.get("/api/jobs", params={"assignedTo": second.id}, headers=admin_headers)
        assert len(response.json()) == 1

    async def test_job_of_other_company_not_found(self, client, db, admin_headers, other_company):
        foreign = Job(company_id=other_company.id, title="Elsewhere", status="scheduled")
        db.add(foreign)
        db.commit()

        response = await client.get(f"/api/jobs/{foreign.id}", headers=admin_headers)
        assert response.status_code == 404

    async def test_delete_job(self, client, db, admin_headers, make_job, employee):
        job = make_job([employee])
        response = await client.delete(f"/api/jobs/{job.id}", headers=admin_headers)

        assert response.status_code == 200
        db.expire_all()
        assert db.get(Job, job.id) is None
        assert db.query(JobAssignment).filter(JobAssignment.job_id == job.id).count() == 0
        assert db.query(JobEvent).filter(JobEvent.job_id == job.id).count() == 0
