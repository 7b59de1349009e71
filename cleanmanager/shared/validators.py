"""Shared validation utilities"""

import re
from typing import Optional

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

UK_PHONE_ERROR = (
    "Invalid UK phone number. Must be a valid UK mobile (07xxx xxxxxx) or landline (01xxx xxxxxx)"
)


def is_valid_email(email: Optional[str]) -> bool:
    return bool(email) and bool(EMAIL_PATTERN.match(email.strip()))


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase, stripped email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")
    return email


def _normalize_uk_digits(phone: str) -> str:
    """Strip formatting and rewrite +44 / 44 prefixes to a leading 0"""
    cleaned = re.sub(r"[^\d+]", "", phone)
    if cleaned.startswith("+44"):
        cleaned = "0" + cleaned[3:]
    elif cleaned.startswith("44"):
        cleaned = "0" + cleaned[2:]
    return cleaned


def is_valid_uk_mobile(phone: Optional[str]) -> bool:
    if not phone:
        return False
    cleaned = re.sub(r"\s", "", phone)
    return bool(re.fullmatch(r"07\d{9}", cleaned) or re.fullmatch(r"\+447\d{9}", cleaned))


def is_valid_uk_landline(phone: Optional[str]) -> bool:
    """01/02/03 numbers of 10-11 digits, or the +44 equivalent"""
    if not phone:
        return False
    cleaned = re.sub(r"\s", "", phone)
    if re.fullmatch(r"\+44[1-3]\d{8,9}", cleaned):
        return True
    return bool(re.fullmatch(r"0[1-3]\d{8,9}", cleaned))


def is_valid_uk_phone(phone: Optional[str]) -> bool:
    return is_valid_uk_mobile(phone) or is_valid_uk_landline(phone)


def format_uk_phone(phone: Optional[str]) -> Optional[str]:
    """
    Format a UK phone number to a standard display format.

    07xxx xxxxxx for mobiles, 020 xxxx xxxx for London, 01xxx xxxxxx for other
    landlines. Unrecognised numbers are returned unchanged.
    """
    if not phone:
        return phone

    cleaned = _normalize_uk_digits(phone)

    if cleaned.startswith("07") and len(cleaned) == 11:
        return f"{cleaned[:5]} {cleaned[5:8]} {cleaned[8:]}"
    if cleaned.startswith("020") and len(cleaned) == 11:
        return f"{cleaned[:3]} {cleaned[3:7]} {cleaned[7:]}"
    if cleaned.startswith("01") and len(cleaned) == 11:
        return f"{cleaned[:5]} {cleaned[5:8]} {cleaned[8:]}"
    return phone


def validate_uk_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and format a UK phone number.

    Raises:
        ValueError: If the number is not a UK mobile or landline
    """
    if not phone:
        return phone
    if not is_valid_uk_phone(phone):
        raise ValueError(UK_PHONE_ERROR)
    return format_uk_phone(phone)
