"""
Tests for the office side of portal booking requests: listing, declining
and converting a booking into a scheduled job.
"""

from datetime import timedelta

import pytest

from cleanmanager.models import BookingRequest, Job, JobEvent
from cleanmanager.utils.dates import utc_now

from conftest import recipients_of


@pytest.fixture
def make_booking(db, company, customer, plan):
    def _make(status="pending", company_id=None, with_plan=True, **extra):
        fields = {
            "company_id": company_id or company.id,
            "customer_id": customer.id,
            "plan_id": plan.id if with_plan else None,
            "preferred_date": (utc_now() + timedelta(days=3)).replace(microsecond=0),
            "address": "1 High Street, London, SW1A 1AA",
            "notes": "Mornings please",
            "status": status,
        }
        fields.update(extra)
        booking = BookingRequest(**fields)
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    return _make


class TestListBookings:

    async def test_status_filter(self, client, admin_headers, make_booking, other_company):
        first, second = make_booking(), make_booking()
        make_booking(status="declined")
        make_booking(company_id=other_company.id)

        response = await client.get("/api/booking-requests", params={"status": "pending"}, headers=admin_headers)
        assert response.status_code == 200
        assert {b["id"] for b in response.json()} == {first.id, second.id}
        assert response.json()[0]["customerName"] == "Carla Customer"
        assert response.json()[0]["planName"] == "Standard Clean"

        response = await client.get("/api/booking-requests", params={"status": "all"}, headers=admin_headers)
        assert len(response.json()) == 3

    async def test_invalid_status(self, client, admin_headers):
        response = await client.get("/api/booking-requests", params={"status": "lost"}, headers=admin_headers)
        assert response.status_code == 400

    async def test_other_company_booking_not_found(self, client, admin_headers, make_booking, other_company):
        foreign = make_booking(company_id=other_company.id)
        response = await client.get(f"/api/booking-requests/{foreign.id}", headers=admin_headers)
        assert response.status_code == 404


class TestDeclineBooking:

    async def test_decline_records_reason(self, client, admin_headers, admin_user, make_booking):
        booking = make_booking()
        response = await client.patch(
            f"/api/booking-requests/{booking.id}",
            json={"action": "decline", "reason": "<i>Fully booked</i> that week"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "declined"
        assert data["adminNotes"] == "Fully booked that week"
        assert data["reviewedBy"] == admin_user.id
        assert data["reviewedAt"] is not None

        response = await client.patch(
            f"/api/booking-requests/{booking.id}", json={"action": "decline"}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Only pending booking requests can be declined"

    async def test_invalid_action(self, client, admin_headers, make_booking):
        booking = make_booking()
        response = await client.patch(
            f"/api/booking-requests/{booking.id}", json={"action": "approve"}, headers=admin_headers
        )
        assert response.status_code == 400


class TestConvertBooking:

    async def test_portal_booking_becomes_scheduled_job(
        self, client, db, admin_headers, customer_headers, plan, employee, customer, sent_emails
    ):
        preferred = (utc_now() + timedelta(days=4)).replace(microsecond=0)
        booking = (
            await client.post(
                "/api/customer-portal/bookings",
                json={"planId": plan.id, "preferredDate": preferred.isoformat(), "notes": "Mornings please"},
                headers=customer_headers,
            )
        ).json()
        sent_emails.reset_mock()

        response = await client.post(
            f"/api/booking-requests/{booking['id']}/convert",
            json={"assignedEmployees": [{"employeeId": employee.id, "payAmount": 30}]},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()
        job = data["job"]
        assert data["booking"]["status"] == "converted"
        assert data["booking"]["convertedJobId"] == job["id"]
        assert job["status"] == "scheduled"
        assert job["title"] == "Standard Clean"
        assert job["customerId"] == customer.id
        assert job["description"] == "Mornings please"
        assert (job["location"], job["city"], job["postcode"]) == ("1 High Street", "London", "SW1A 1AA")
        assert job["estimatedPrice"] == 80
        assert job["assignedEmployeeIds"] == [employee.id]
        assert [t["title"] for t in job["tasks"]] == ["Kitchen", "Bathrooms"]
        assert job["internalNotes"] == f"Converted from booking request #{booking['id']}"
        assert db.get(Job, job["id"]).scheduled_for == preferred
        assert employee.email in recipients_of(sent_emails)

        events = db.query(JobEvent).filter(JobEvent.job_id == job["id"]).all()
        assert "booking_converted" in [e.type for e in events]

        response = await client.post(
            f"/api/booking-requests/{booking['id']}/convert",
            json={"assignedEmployees": [employee.id]},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "This booking request has already been converted to a job"

    async def test_free_text_address_used_as_location(self, client, admin_headers, make_booking, employee):
        booking = make_booking(address="Flat 4, 22 Mill Lane, Leeds")
        response = await client.post(
            f"/api/booking-requests/{booking.id}/convert",
            json={"assignedEmployees": [employee.id], "title": "First clean"},
            headers=admin_headers,
        )
        job = response.json()["job"]
        assert job["title"] == "First clean"
        assert job["location"] == "Flat 4, 22 Mill Lane, Leeds"
        assert job["city"] is None

    async def test_plan_required(self, client, admin_headers, make_booking, employee):
        booking = make_booking(with_plan=False)
        response = await client.post(
            f"/api/booking-requests/{booking.id}/convert",
            json={"assignedEmployees": [employee.id]},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Cleaning plan is required"

    async def test_failed_job_leaves_booking_pending(self, client, db, admin_headers, make_booking):
        booking = make_booking()
        response = await client.post(f"/api/booking-requests/{booking.id}/convert", json={}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Title, customer, plan, location, and assigned staff are required"
        db.expire_all()
        assert booking.status == "pending"
        assert db.query(Job).count() == 0

    async def test_declined_booking_cannot_be_converted(self, client, admin_headers, make_booking, employee):
        booking = make_booking(status="declined")
        response = await client.post(
            f"/api/booking-requests/{booking.id}/convert",
            json={"assignedEmployees": [employee.id]},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Declined booking requests cannot be converted"

    async def test_delete(self, client, db, admin_headers, make_booking):
        booking = make_booking()
        response = await client.delete(f"/api/booking-requests/{booking.id}", headers=admin_headers)
        assert response.status_code == 200
        db.expire_all()
        assert db.get(BookingRequest, booking.id) is None
