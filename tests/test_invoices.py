"""
Tests for invoices, payments and the payment reminder run.
"""

from datetime import timedelta

from cleanmanager.models_invoice import Invoice
from cleanmanager.utils.dates import utc_now
from cleanmanager.worker import payment_reminders_task

from conftest import recipients_of


def invoice_payload(customer, **overrides):
    payload = {
        "customerId": customer.id,
        "items": [{"title": "Deep clean", "quantity": 2, "unitPrice": 40}],
        "taxRate": 20,
    }
    payload.update(overrides)
    return payload


async def create_invoice(client, headers, customer, **overrides):
    response = await client.post("/api/invoices", json=invoice_payload(customer, **overrides), headers=headers)
    assert response.status_code == 201
    return response.json()


class TestInvoices:

    async def test_manual_invoice_totals_and_email(self, client, admin_headers, customer, sent_emails):
        data = await create_invoice(client, admin_headers, customer)

        assert data["subtotal"] == 80
        assert data["taxAmount"] == 16
        assert data["total"] == 96
        assert data["amountDue"] == 96
        assert data["status"] == "sent"
        assert data["invoiceNumber"].startswith("INV-0001 - Carla Customer - ")
        assert customer.email in recipients_of(sent_emails)

    async def test_numbers_increase(self, client, admin_headers, customer):
        await create_invoice(client, admin_headers, customer)
        second = await create_invoice(client, admin_headers, customer)
        assert second["invoiceNumber"].startswith("INV-0002")

    async def test_stays_draft_when_email_fails(self, client, admin_headers, customer, sent_emails):
        sent_emails.side_effect = Exception("Resend down")
        data = await create_invoice(client, admin_headers, customer)
        assert data["status"] == "draft"

    async def test_requires_items(self, client, admin_headers, customer):
        response = await client.post(
            "/api/invoices", json=invoice_payload(customer, items=[]), headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "At least one invoice item is required"

    async def test_due_date_in_past(self, client, admin_headers, customer):
        yesterday = (utc_now() - timedelta(days=1)).date().isoformat()
        response = await client.post(
            "/api/invoices", json=invoice_payload(customer, dueAt=yesterday), headers=admin_headers
        )
        assert response.status_code == 400

    async def test_update_taxes_taxable_items_only(self, client, admin_headers, customer):
        invoice = await create_invoice(client, admin_headers, customer)
        response = await client.put(
            f"/api/invoices/{invoice['id']}",
            json={
                "items": [
                    {"title": "Clean", "quantity": 1, "unitPrice": 100},
                    {"title": "Parking", "quantity": 1, "unitPrice": 10, "taxable": False},
                ]
            },
            headers=admin_headers,
        )

        data = response.json()
        assert data["subtotal"] == 110
        assert data["taxAmount"] == 20
        assert data["total"] == 130

    async def test_generate_from_job_once(self, client, admin_headers, make_job, employee):
        job = make_job([employee], status="completed", actual_price=120.0)

        response = await client.post(f"/api/jobs/{job.id}/generate-invoice", headers=admin_headers)
        assert response.status_code == 201
        assert response.json()["total"] == 120
        assert response.json()["status"] == "draft"

        response = await client.post(f"/api/jobs/{job.id}/generate-invoice", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "An invoice already exists for this job"


class TestPayments:

    async def test_partial_then_full_payment(self, client, admin_headers, customer):
        invoice = await create_invoice(client, admin_headers, customer)

        response = await client.post(
            "/api/payments", json={"invoiceId": invoice["id"], "amount": 50}, headers=admin_headers
        )
        assert response.status_code == 201
        current = (await client.get(f"/api/invoices/{invoice['id']}", headers=admin_headers)).json()
        assert current["amountPaid"] == 50
        assert current["amountDue"] == 46
        assert current["status"] == "sent"

        await client.post("/api/payments", json={"invoiceId": invoice["id"], "amount": 46}, headers=admin_headers)
        current = (await client.get(f"/api/invoices/{invoice['id']}", headers=admin_headers)).json()
        assert current["status"] == "paid"
        assert current["paidAt"] is not None

    async def test_deleting_payment_reopens_invoice(self, client, admin_headers, customer):
        invoice = await create_invoice(client, admin_headers, customer)
        payment = (
            await client.post(
                "/api/payments", json={"invoiceId": invoice["id"], "amount": 96}, headers=admin_headers
            )
        ).json()

        response = await client.delete(f"/api/payments/{payment['id']}", headers=admin_headers)
        assert response.status_code == 200

        current = (await client.get(f"/api/invoices/{invoice['id']}", headers=admin_headers)).json()
        assert current["status"] == "sent"
        assert current["amountDue"] == 96

    async def test_rejects_non_positive_amount(self, client, admin_headers, customer):
        invoice = await create_invoice(client, admin_headers, customer)
        response = await client.post(
            "/api/payments", json={"invoiceId": invoice["id"], "amount": 0}, headers=admin_headers
        )
        assert response.status_code == 400

    async def test_paid_invoice_cannot_be_deleted(self, client, admin_headers, customer):
        invoice = await create_invoice(client, admin_headers, customer)
        await client.post("/api/payments", json={"invoiceId": invoice["id"], "amount": 96}, headers=admin_headers)

        response = await client.delete(f"/api/invoices/{invoice['id']}", headers=admin_headers)
        assert response.status_code == 400


class TestReminders:

    def _invoice(self, db, company, customer, due_in_days, status="sent"):
        invoice = Invoice(
            company_id=company.id,
            invoice_number=f"INV-{due_in_days + 100:04d}",
            customer_id=customer.id,
            subtotal=50,
            total=50,
            amount_paid=0,
            amount_due=50,
            status=status,
            issued_at=utc_now() - timedelta(days=20),
            due_at=utc_now() + timedelta(days=due_in_days),
        )
        db.add(invoice)
        db.commit()
        return invoice

    async def test_process_marks_overdue_and_reminds(
        self, client, db, admin_headers, company, customer, sent_emails
    ):
        overdue = self._invoice(db, company, customer, -1)
        upcoming = self._invoice(db, company, customer, 3)
        self._invoice(db, company, customer, 10)

        response = await client.post("/api/invoices/reminders/process", headers=admin_headers)

        assert response.status_code == 200
        summary = response.json()
        assert summary["markedOverdue"] == 1
        assert summary["sent"] == 2
        db.refresh(overdue)
        db.refresh(upcoming)
        assert overdue.status == "overdue"
        assert overdue.last_reminder_at is not None
        assert upcoming.last_reminder_at is not None

    async def test_same_day_reminders_are_not_repeated(self, client, db, admin_headers, company, customer):
        self._invoice(db, company, customer, 7)
        await client.post("/api/invoices/reminders/process", headers=admin_headers)

        response = await client.post("/api/invoices/reminders/process", headers=admin_headers)
        assert response.json()["processed"] == 0

    async def test_manual_reminder_requires_unpaid_invoice(self, client, db, admin_headers, company, customer):
        paid = self._invoice(db, company, customer, 5, status="paid")
        response = await client.post(f"/api/invoices/{paid.id}/send-reminder", headers=admin_headers)
        assert response.status_code == 400

    async def test_worker_task_uses_its_own_session(self, db, company, customer, monkeypatch):
        self._invoice(db, company, customer, 1)
        monkeypatch.setattr("cleanmanager.worker.SessionLocal", lambda: db)
        monkeypatch.setattr(db, "close", lambda: None)

        summary = await payment_reminders_task({})
        assert summary["sent"] == 1
