"""
Tests for dashboard statistics.
"""

from datetime import timedelta

from cleanmanager.models_invoice import Invoice
from cleanmanager.utils.dates import utc_now


def add_invoice(db, company, customer, number, **fields):
    invoice = Invoice(company_id=company.id, customer_id=customer.id, invoice_number=number, **fields)
    db.add(invoice)
    db.commit()
    return invoice


class TestDashboard:

    async def test_custom_range_stats(self, client, db, admin_headers, company, customer, employee, make_job):
        now = utc_now()
        make_job([employee])
        make_job([employee], status="completed", starts_in=-timedelta(hours=3), completed_at=now)
        add_invoice(db, company, customer, "INV-0001", total=100, amount_paid=100, amount_due=0, status="paid", paid_at=now)
        add_invoice(db, company, customer, "INV-0002", total=40, amount_paid=0, amount_due=40, status="sent")

        params = {
            "period": "custom",
            "startDate": (now - timedelta(days=5)).date().isoformat(),
            "endDate": (now + timedelta(days=5)).date().isoformat(),
        }
        response = await client.get("/api/dashboard/stats", params=params, headers=admin_headers)

        assert response.status_code == 200
        stats = response.json()
        assert stats["revenue"] == 100
        assert stats["previousRevenue"] == 0
        assert stats["revenueChange"] == 100.0
        assert stats["periodJobs"] == 2
        assert stats["completedJobs"] == 1
        assert stats["scheduledJobs"] == 1
        assert stats["completionRate"] == 50.0
        assert stats["activeEmployees"] == 1
        assert stats["totalCustomers"] == 1
        assert stats["outstandingInvoices"] == 1
        assert stats["outstandingAmount"] == 40

    async def test_default_period_is_month(self, client, admin_headers):
        stats = (await client.get("/api/dashboard/stats", headers=admin_headers)).json()
        assert stats["period"] == "month"
        assert stats["revenue"] == 0
        assert stats["completionRate"] == 0

    async def test_invalid_period(self, client, admin_headers):
        response = await client.get("/api/dashboard/stats?period=decade", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid period"

    async def test_custom_range_needs_both_dates(self, client, admin_headers):
        response = await client.get("/api/dashboard/stats?period=custom&startDate=2025-01-01", headers=admin_headers)
        assert response.status_code == 400

    async def test_other_companies_not_counted(self, client, db, admin_headers, other_company, make_employee):
        make_employee(first_name="Otto", company_id=other_company.id)
        stats = (await client.get("/api/dashboard/stats", headers=admin_headers)).json()
        assert stats["activeEmployees"] == 0
