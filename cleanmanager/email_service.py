"""
Email Service using Resend
Compiles MJML templates to responsive HTML and sends them through Resend
"""

import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import EMAIL_FROM_ADDRESS, LOGIN_CODE_EXPIRY_SECONDS, RESEND_API_KEY
from .email_templates import (
    booking_request_template,
    check_in_notification_template,
    customer_status_template,
    employee_credentials_template,
    feedback_request_template,
    invoice_template,
    job_assigned_template,
    job_cancelled_template,
    job_completed_template,
    job_response_template,
    job_unassigned_template,
    password_reset_template,
    payment_receipt_template,
    payment_reminder_template,
    portal_login_code_template,
    shift_swap_template,
    supply_request_created_template,
    supply_request_status_template,
    time_off_status_template,
)

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # mjml_to_html returns a dict-like result with 'html' and 'errors'
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        html = getattr(result, "html", None)
        if html is not None:
            if getattr(result, "errors", None):
                logger.warning(f"MJML compilation warnings: {result.errors}")
            return html
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise Exception(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        Send response dict

    Raises:
        Exception: When Resend is not configured or the send fails
    """
    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise Exception("Email service not configured")

    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = resend.Emails.send(
            {
                "from": from_address or EMAIL_FROM_ADDRESS,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise Exception(f"Failed to send email: {str(e)}") from e


# ============================================
# Pre-built emails for back-office events
# ============================================


async def send_password_reset_email(to: str, user_name: str, reset_link: str) -> dict:
    return await send_email(
        to=to,
        subject="Reset your password",
        mjml_content=password_reset_template(user_name, reset_link),
    )


async def send_employee_credentials_email(
    to: str, employee_name: str, company_name: str, username: str, password: str
) -> dict:
    """Send login credentials to an employee"""
    return await send_email(
        to=to,
        subject=f"Your {company_name} employee account",
        mjml_content=employee_credentials_template(employee_name, company_name, username, password),
    )


async def send_customer_status_email(
    to: str, customer_name: str, company_name: str, is_active: bool
) -> dict:
    subject = (
        f"Your account with {company_name} has been reactivated"
        if is_active
        else f"Your account with {company_name} has been deactivated"
    )
    return await send_email(
        to=to,
        subject=subject,
        mjml_content=customer_status_template(customer_name, company_name, is_active),
    )


async def send_portal_login_code_email(to: str, customer_name: str, company_name: str, code: str) -> dict:
    """Send a one-time customer portal login code"""
    return await send_email(
        to=to,
        subject=f"Your {company_name} login code",
        mjml_content=portal_login_code_template(
            customer_name, company_name, code, LOGIN_CODE_EXPIRY_SECONDS // 60
        ),
    )


async def send_job_assigned_email(
    to: str,
    employee_name: str,
    company_name: str,
    job_title: str,
    scheduled_for: Optional[str],
    location: Optional[str],
    pay_amount: Optional[str] = None,
) -> dict:
    return await send_email(
        to=to,
        subject=f"New job assigned: {job_title}",
        mjml_content=job_assigned_template(
            employee_name, company_name, job_title, scheduled_for, location, pay_amount
        ),
    )


async def send_job_unassigned_email(
    to: str, employee_name: str, company_name: str, job_title: str, scheduled_for: Optional[str]
) -> dict:
    return await send_email(
        to=to,
        subject=f"Removed from job: {job_title}",
        mjml_content=job_unassigned_template(employee_name, company_name, job_title, scheduled_for),
    )


async def send_job_response_email(
    to: str, recipient_name: str, employee_name: str, job_title: str, accepted: bool, company_name: str
) -> dict:
    """Notify that an employee accepted or declined a job"""
    verb = "accepted" if accepted else "declined"
    return await send_email(
        to=to,
        subject=f"{employee_name} {verb} {job_title}",
        mjml_content=job_response_template(recipient_name, employee_name, job_title, accepted, company_name),
    )


async def send_job_completed_email(
    to: str, customer_name: str, company_name: str, job_title: str, feedback_url: Optional[str]
) -> dict:
    return await send_email(
        to=to,
        subject=f"Your clean is complete - {company_name}",
        mjml_content=job_completed_template(customer_name, company_name, job_title, feedback_url),
    )


async def send_feedback_request_email(
    to: str, customer_name: str, company_name: str, job_title: str, feedback_url: str
) -> dict:
    return await send_email(
        to=to,
        subject=f"How did {company_name} do?",
        mjml_content=feedback_request_template(customer_name, company_name, job_title, feedback_url),
    )


async def send_job_cancelled_email(
    to: str,
    recipient_name: str,
    company_name: str,
    job_title: str,
    scheduled_for: Optional[str],
    reason: str,
) -> dict:
    return await send_email(
        to=to,
        subject=f"Job cancelled: {job_title}",
        mjml_content=job_cancelled_template(recipient_name, company_name, job_title, scheduled_for, reason),
    )


async def send_check_in_notification_email(
    to: str,
    recipient_name: str,
    company_name: str,
    employee_name: str,
    job_title: str,
    check_type: str,
    checked_at: str,
    address: Optional[str],
    within_range: Optional[bool],
) -> dict:
    action = "checked in to" if check_type == "check_in" else "checked out of"
    return await send_email(
        to=to,
        subject=f"{employee_name} {action} {job_title}",
        mjml_content=check_in_notification_template(
            recipient_name,
            company_name,
            employee_name,
            job_title,
            check_type,
            checked_at,
            address,
            within_range,
        ),
    )


async def send_shift_swap_email(
    to: str, employee_name: str, company_name: str, status: str, from_job_title: str, to_job_title: str
) -> dict:
    return await send_email(
        to=to,
        subject=f"Shift swap {status}",
        mjml_content=shift_swap_template(employee_name, company_name, status, from_job_title, to_job_title),
    )


async def send_invoice_email(
    to: str,
    customer_name: str,
    company_name: str,
    invoice_number: str,
    amount: float,
    currency: str,
    due_date: Optional[str],
    payment_instructions: Optional[str] = None,
) -> dict:
    """Send an invoice to a customer"""
    return await send_email(
        to=to,
        subject=f"Invoice {invoice_number} from {company_name}",
        mjml_content=invoice_template(
            customer_name, company_name, invoice_number, amount, currency, due_date, payment_instructions
        ),
    )


async def send_payment_receipt_email(
    to: str,
    customer_name: str,
    company_name: str,
    invoice_number: str,
    amount: float,
    amount_due: float,
    currency: str,
) -> dict:
    return await send_email(
        to=to,
        subject=f"Payment received - {invoice_number}",
        mjml_content=payment_receipt_template(
            customer_name, company_name, invoice_number, amount, amount_due, currency
        ),
    )


async def send_payment_reminder_email(
    to: str,
    customer_name: str,
    company_name: str,
    invoice_number: str,
    amount_due: float,
    currency: str,
    due_date: Optional[str],
    days_offset: int,
    payment_instructions: Optional[str] = None,
) -> dict:
    subject = (
        f"Payment overdue: {invoice_number}" if days_offset < 0 else f"Payment reminder: {invoice_number}"
    )
    return await send_email(
        to=to,
        subject=subject,
        mjml_content=payment_reminder_template(
            customer_name,
            company_name,
            invoice_number,
            amount_due,
            currency,
            due_date,
            days_offset,
            payment_instructions,
        ),
    )


async def send_time_off_status_email(
    to: str,
    employee_name: str,
    company_name: str,
    status: str,
    start_date: str,
    end_date: str,
    review_notes: Optional[str],
) -> dict:
    return await send_email(
        to=to,
        subject=f"Time off request {status}",
        mjml_content=time_off_status_template(
            employee_name, company_name, status, start_date, end_date, review_notes
        ),
    )


async def send_supply_request_created_email(
    to: str, recipient_name: str, company_name: str, employee_name: str, item_summary: str, urgency: str
) -> dict:
    return await send_email(
        to=to,
        subject=f"Supply request from {employee_name}",
        mjml_content=supply_request_created_template(
            recipient_name, company_name, employee_name, item_summary, urgency
        ),
    )


async def send_supply_request_status_email(
    to: str,
    employee_name: str,
    company_name: str,
    status: str,
    item_summary: str,
    review_notes: Optional[str],
) -> dict:
    return await send_email(
        to=to,
        subject=f"Supply request {status}",
        mjml_content=supply_request_status_template(
            employee_name, company_name, status, item_summary, review_notes
        ),
    )


async def send_booking_request_email(
    to: str,
    recipient_name: str,
    company_name: str,
    customer_name: str,
    plan_name: Optional[str],
    preferred_date: Optional[str],
    address: Optional[str],
    notes: Optional[str],
) -> dict:
    return await send_email(
        to=to,
        subject=f"New booking request from {customer_name}",
        mjml_content=booking_request_template(
            recipient_name, company_name, customer_name, plan_name, preferred_date, address, notes
        ),
    )
