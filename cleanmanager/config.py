import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
IS_PRODUCTION = ENVIRONMENT == "production"

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./cleanmanager.db")

APP_NAME = os.getenv("APP_NAME", "CleanManager")

# Security - CRITICAL: No default secret key in production
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

# Token lifetimes
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
CUSTOMER_TOKEN_EXPIRE_DAYS = int(os.getenv("CUSTOMER_TOKEN_EXPIRE_DAYS", "7"))
PASSWORD_RESET_MAX_AGE = int(os.getenv("PASSWORD_RESET_MAX_AGE", "3600"))

# Customer portal login codes
LOGIN_CODE_EXPIRY_SECONDS = int(os.getenv("LOGIN_CODE_EXPIRY_SECONDS", str(15 * 60)))
LOGIN_CODE_MAX_ATTEMPTS = int(os.getenv("LOGIN_CODE_MAX_ATTEMPTS", "3"))

# Frontend base URL for links in emails
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", f"{APP_NAME} <noreply@cleanmanager.app>")

# Job operations
MAX_CHECK_IN_DISTANCE_METERS = float(os.getenv("MAX_CHECK_IN_DISTANCE_METERS", "200"))
DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "GBP")
CHECKOUT_INVOICE_DUE_DAYS = int(os.getenv("CHECKOUT_INVOICE_DUE_DAYS", "14"))
JOB_INVOICE_DUE_DAYS = int(os.getenv("JOB_INVOICE_DUE_DAYS", "30"))

# Payment reminders (days relative to the due date)
REMINDER_DAYS_BEFORE_DUE = [
    int(d) for d in os.getenv("REMINDER_DAYS_BEFORE_DUE", "7,3,1").split(",") if d.strip()
]
REMINDER_DAYS_AFTER_DUE = [
    int(d) for d in os.getenv("REMINDER_DAYS_AFTER_DUE", "1,7,14,30").split(",") if d.strip()
]
