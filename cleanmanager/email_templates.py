"""
MJML Email Templates
Every transactional email the back-office sends, built on one base layout
"""

from typing import Optional

from .config import APP_NAME, FRONTEND_URL
from .utils.sanitization import escape_text as e
from .utils.sanitization import format_money

# Brand colours - Sky/Slate scheme
THEME = {
    "primary": "#0ea5e9",
    "primary_dark": "#0284c7",
    "primary_light": "#e0f2fe",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "success": "#16a34a",
    "warning": "#f59e0b",
    "danger": "#ef4444",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
    company_name: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{e(cta_url)}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {e(cta_label)}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    sender_line = e(company_name) if company_name else e(APP_NAME)

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{e(title)}</mj-title>
        <mj-preview>{e(preview_text)}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="28px 20px 0 20px">
          <mj-column>
            <mj-text font-size="20px" font-weight="700" color="{THEME['primary_dark']}" padding="0">
              {sender_line}
            </mj-text>
            <mj-divider border-color="{THEME['border']}" border-width="1px" padding="20px 0 0 0" />
          </mj-column>
        </mj-section>

        <mj-section background-color="#ffffff" padding="24px 40px 40px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {e(title)}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              Sent by {sender_line} via {e(APP_NAME)}.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _detail_rows(rows: list[tuple[str, Optional[str]]]) -> str:
    """Label/value block; rows with an empty value are skipped"""
    lines = [f"<strong>{e(label)}:</strong> {e(value)}" for label, value in rows if value]
    if not lines:
        return ""
    return f"""
    <mj-text font-size="14px" color="{THEME['text_muted']}" padding="10px 0">
      {'<br/>'.join(lines)}
    </mj-text>
    """


# ============================================================================
# ACCOUNT EMAILS
# ============================================================================


def password_reset_template(user_name: str, reset_link: str) -> str:
    content = f"""
    <mj-text>Hi {e(user_name)},</mj-text>
    <mj-text>
      We received a request to reset your password. The link below is valid for one hour.
    </mj-text>
    <mj-text font-size="14px" color="{THEME['text_muted']}">
      If you didn't ask for this, you can safely ignore this email.
    </mj-text>
    """
    return get_base_template(
        title="Reset your password",
        preview_text="Use this link to choose a new password",
        content_sections=content,
        cta_url=reset_link,
        cta_label="Reset Password",
    )


def employee_credentials_template(
    employee_name: str, company_name: str, username: str, password: str
) -> str:
    """Login details for a newly created (or reset) employee account"""
    content = f"""
    <mj-text>Hi {e(employee_name)},</mj-text>
    <mj-text>
      <strong>{e(company_name)}</strong> has set up your employee account. Use these details to sign in:
    </mj-text>
    <mj-text align="center" font-size="18px" color="{THEME['text_primary']}" padding="16px 0"
      container-background-color="{THEME['primary_light']}">
      Username: <strong>{e(username)}</strong><br/>
      Password: <strong>{e(password)}</strong>
    </mj-text>
    <mj-text font-size="14px" color="{THEME['text_muted']}">
      Please change your password after your first sign in.
    </mj-text>
    """
    return get_base_template(
        title="Your employee account",
        preview_text=f"Your login details for {company_name}",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/employee/login",
        cta_label="Sign In",
        company_name=company_name,
    )


def customer_status_template(customer_name: str, company_name: str, is_active: bool) -> str:
    if is_active:
        title = "Your account has been reactivated"
        body = "Your customer account is active again. We look forward to working with you."
    else:
        title = "Your account has been deactivated"
        body = (
            "Your customer account has been deactivated and no further visits will be scheduled. "
            "Contact us if you think this is a mistake."
        )
    content = f"""
    <mj-text>Hi {e(customer_name)},</mj-text>
    <mj-text>{body}</mj-text>
    """
    return get_base_template(
        title=title,
        preview_text=title,
        content_sections=content,
        company_name=company_name,
    )


def portal_login_code_template(customer_name: str, company_name: str, code: str, expiry_minutes: int) -> str:
    content = f"""
    <mj-text>Hi {e(customer_name)},</mj-text>
    <mj-text>Use this code to sign in to your customer portal:</mj-text>
    <mj-text align="center" font-size="36px" font-weight="700" letter-spacing="8px"
      color="{THEME['primary_dark']}" padding="20px 0">
      {e(code)}
    </mj-text>
    <mj-text font-size="14px" color="{THEME['text_muted']}">
      The code expires in {expiry_minutes} minutes and can only be used once.
    </mj-text>
    """
    return get_base_template(
        title="Your login code",
        preview_text=f"Your login code is {code}",
        content_sections=content,
        company_name=company_name,
    )


# ============================================================================
# JOB EMAILS
# ============================================================================


def job_assigned_template(
    employee_name: str,
    company_name: str,
    job_title: str,
    scheduled_for: Optional[str],
    location: Optional[str],
    pay_amount: Optional[str] = None,
) -> str:
    content = f"""
    <mj-text>Hi {e(employee_name)},</mj-text>
    <mj-text>You have been assigned a new job.</mj-text>
    {_detail_rows([("Job", job_title), ("When", scheduled_for), ("Where", location), ("Pay", pay_amount)])}
    <mj-text>Please accept the job in your portal so the office knows you're on it.</mj-text>
    """
    return get_base_template(
        title="New job assigned",
        preview_text=f"{job_title} - {scheduled_for or 'unscheduled'}",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/employee/jobs",
        cta_label="View Job",
        company_name=company_name,
    )


def job_unassigned_template(
    employee_name: str, company_name: str, job_title: str, scheduled_for: Optional[str]
) -> str:
    content = f"""
    <mj-text>Hi {e(employee_name)},</mj-text>
    <mj-text>You are no longer assigned to the following job:</mj-text>
    {_detail_rows([("Job", job_title), ("When", scheduled_for)])}
    """
    return get_base_template(
        title="Job assignment removed",
        preview_text=f"You were removed from {job_title}",
        content_sections=content,
        company_name=company_name,
    )


def job_response_template(
    recipient_name: str, employee_name: str, job_title: str, accepted: bool, company_name: str
) -> str:
    """Tells the office (or the customer) that an employee accepted or declined a job"""
    verb = "accepted" if accepted else "declined"
    content = f"""
    <mj-text>Hi {e(recipient_name)},</mj-text>
    <mj-text><strong>{e(employee_name)}</strong> has {verb} the job <strong>{e(job_title)}</strong>.</mj-text>
    """
    if not accepted:
        content += """
    <mj-text>The job may need to be reassigned.</mj-text>
        """
    return get_base_template(
        title=f"Job {verb}",
        preview_text=f"{employee_name} {verb} {job_title}",
        content_sections=content,
        company_name=company_name,
    )


def job_completed_template(
    customer_name: str, company_name: str, job_title: str, feedback_url: Optional[str]
) -> str:
    content = f"""
    <mj-text>Hi {e(customer_name)},</mj-text>
    <mj-text>Your cleaning <strong>{e(job_title)}</strong> has been completed.</mj-text>
    """
    if feedback_url:
        content += """
    <mj-text>We'd love to hear how it went. It only takes a moment.</mj-text>
        """
    return get_base_template(
        title="Your clean is complete",
        preview_text=f"{job_title} has been completed",
        content_sections=content,
        cta_url=feedback_url,
        cta_label="Leave Feedback" if feedback_url else None,
        company_name=company_name,
    )


def feedback_request_template(customer_name: str, company_name: str, job_title: str, feedback_url: str) -> str:
    content = f"""
    <mj-text>Hi {e(customer_name)},</mj-text>
    <mj-text>How did we do on <strong>{e(job_title)}</strong>? Rate your clean from 1 to 5 stars.</mj-text>
    """
    return get_base_template(
        title="How was your clean?",
        preview_text="Tell us how we did",
        content_sections=content,
        cta_url=feedback_url,
        cta_label="Rate Your Clean",
        company_name=company_name,
    )


def job_cancelled_template(
    recipient_name: str, company_name: str, job_title: str, scheduled_for: Optional[str], reason: str
) -> str:
    content = f"""
    <mj-text>Hi {e(recipient_name)},</mj-text>
    <mj-text>The following job has been cancelled:</mj-text>
    {_detail_rows([("Job", job_title), ("When", scheduled_for), ("Reason", reason)])}
    """
    return get_base_template(
        title="Job cancelled",
        preview_text=f"{job_title} was cancelled",
        content_sections=content,
        company_name=company_name,
    )


def check_in_notification_template(
    recipient_name: str,
    company_name: str,
    employee_name: str,
    job_title: str,
    check_type: str,
    checked_at: str,
    address: Optional[str],
    within_range: Optional[bool],
) -> str:
    arrived = check_type == "check_in"
    action = "arrived at" if arrived else "finished"
    range_note = None
    if within_range is not None:
        range_note = "Yes" if within_range else "No"
    content = f"""
    <mj-text>Hi {e(recipient_name)},</mj-text>
    <mj-text><strong>{e(employee_name)}</strong> has {action} <strong>{e(job_title)}</strong>.</mj-text>
    {_detail_rows([("Time", checked_at), ("Location", address), ("At job site", range_note)])}
    """
    return get_base_template(
        title="Cleaner checked in" if arrived else "Cleaner checked out",
        preview_text=f"{employee_name} {action} {job_title}",
        content_sections=content,
        company_name=company_name,
    )


def shift_swap_template(
    employee_name: str,
    company_name: str,
    status: str,
    from_job_title: str,
    to_job_title: str,
) -> str:
    """Shift swap proposed, approved or rejected"""
    messages = {
        "pending": "A shift swap has been proposed that involves you.",
        "approved": "A shift swap involving you has been approved. Your schedule has been updated.",
        "rejected": "A shift swap involving you was rejected. Your schedule is unchanged.",
    }
    content = f"""
    <mj-text>Hi {e(employee_name)},</mj-text>
    <mj-text>{messages.get(status, messages['pending'])}</mj-text>
    {_detail_rows([("Swap", f"{from_job_title} ↔ {to_job_title}")])}
    """
    return get_base_template(
        title=f"Shift swap {status}",
        preview_text=f"Shift swap {status}",
        content_sections=content,
        company_name=company_name,
    )


# ============================================================================
# BILLING EMAILS
# ============================================================================


def invoice_template(
    customer_name: str,
    company_name: str,
    invoice_number: str,
    amount: float,
    currency: str,
    due_date: Optional[str],
    payment_instructions: Optional[str] = None,
) -> str:
    content = f"""
    <mj-text>Hi {e(customer_name)},</mj-text>
    <mj-text>Here is your invoice from <strong>{e(company_name)}</strong>.</mj-text>
    <mj-text align="center" font-size="32px" font-weight="700" color="{THEME['text_primary']}" padding="20px 0">
      {e(format_money(amount, currency))}
    </mj-text>
    {_detail_rows([("Invoice", invoice_number), ("Due date", due_date), ("How to pay", payment_instructions)])}
    """
    return get_base_template(
        title="Your invoice",
        preview_text=f"Invoice {invoice_number} for {format_money(amount, currency)}",
        content_sections=content,
        company_name=company_name,
    )


def payment_receipt_template(
    customer_name: str,
    company_name: str,
    invoice_number: str,
    amount: float,
    amount_due: float,
    currency: str,
) -> str:
    balance_line = (
        "Your invoice is now paid in full. Thank you!"
        if amount_due <= 0
        else f"Remaining balance: {e(format_money(amount_due, currency))}"
    )
    content = f"""
    <mj-text>Hi {e(customer_name)},</mj-text>
    <mj-text>
      We received your payment of <strong>{e(format_money(amount, currency))}</strong>
      for invoice {e(invoice_number)}.
    </mj-text>
    <mj-text>{balance_line}</mj-text>
    """
    return get_base_template(
        title="Payment received",
        preview_text=f"Payment received for {invoice_number}",
        content_sections=content,
        company_name=company_name,
    )


def payment_reminder_template(
    customer_name: str,
    company_name: str,
    invoice_number: str,
    amount_due: float,
    currency: str,
    due_date: Optional[str],
    days_offset: int,
    payment_instructions: Optional[str] = None,
) -> str:
    """
    Payment reminder

    Args:
        days_offset: Days until the due date (positive) or days overdue (negative)
    """
    if days_offset > 0:
        timing = f"is due in {days_offset} day{'s' if days_offset != 1 else ''}"
        title = "Payment reminder"
    elif days_offset == 0:
        timing = "is due today"
        title = "Payment due today"
    else:
        overdue = abs(days_offset)
        timing = f"is {overdue} day{'s' if overdue != 1 else ''} overdue"
        title = "Payment overdue"

    content = f"""
    <mj-text>Hi {e(customer_name)},</mj-text>
    <mj-text>
      Invoice <strong>{e(invoice_number)}</strong> {timing}.
      The outstanding balance is <strong>{e(format_money(amount_due, currency))}</strong>.
    </mj-text>
    {_detail_rows([("Due date", due_date), ("How to pay", payment_instructions)])}
    <mj-text font-size="14px" color="{THEME['text_muted']}">
      If you've already paid, please disregard this reminder.
    </mj-text>
    """
    return get_base_template(
        title=title,
        preview_text=f"Invoice {invoice_number} {timing}",
        content_sections=content,
        company_name=company_name,
    )


# ============================================================================
# STAFF REQUESTS
# ============================================================================


def time_off_status_template(
    employee_name: str,
    company_name: str,
    status: str,
    start_date: str,
    end_date: str,
    review_notes: Optional[str],
) -> str:
    content = f"""
    <mj-text>Hi {e(employee_name)},</mj-text>
    <mj-text>Your time off request has been <strong>{e(status)}</strong>.</mj-text>
    {_detail_rows([("From", start_date), ("To", end_date), ("Notes", review_notes)])}
    """
    return get_base_template(
        title=f"Time off {status}",
        preview_text=f"Your time off request was {status}",
        content_sections=content,
        company_name=company_name,
    )


def supply_request_created_template(
    recipient_name: str, company_name: str, employee_name: str, item_summary: str, urgency: str
) -> str:
    content = f"""
    <mj-text>Hi {e(recipient_name)},</mj-text>
    <mj-text><strong>{e(employee_name)}</strong> has requested supplies.</mj-text>
    {_detail_rows([("Items", item_summary), ("Urgency", urgency)])}
    """
    return get_base_template(
        title="New supply request",
        preview_text=f"Supply request from {employee_name}",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/supplies/requests",
        cta_label="Review Request",
        company_name=company_name,
    )


def supply_request_status_template(
    employee_name: str, company_name: str, status: str, item_summary: str, review_notes: Optional[str]
) -> str:
    content = f"""
    <mj-text>Hi {e(employee_name)},</mj-text>
    <mj-text>Your supply request has been <strong>{e(status)}</strong>.</mj-text>
    {_detail_rows([("Items", item_summary), ("Notes", review_notes)])}
    """
    return get_base_template(
        title=f"Supply request {status}",
        preview_text=f"Your supply request was {status}",
        content_sections=content,
        company_name=company_name,
    )


# ============================================================================
# CUSTOMER PORTAL
# ============================================================================


def booking_request_template(
    recipient_name: str,
    company_name: str,
    customer_name: str,
    plan_name: Optional[str],
    preferred_date: Optional[str],
    address: Optional[str],
    notes: Optional[str],
) -> str:
    content = f"""
    <mj-text>Hi {e(recipient_name)},</mj-text>
    <mj-text><strong>{e(customer_name)}</strong> requested a booking from the customer portal.</mj-text>
    {_detail_rows([("Plan", plan_name), ("Preferred date", preferred_date), ("Address", address), ("Notes", notes)])}
    """
    return get_base_template(
        title="New booking request",
        preview_text=f"Booking request from {customer_name}",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/bookings",
        cta_label="View Booking",
        company_name=company_name,
    )
