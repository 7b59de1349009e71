"""
Security Utilities
Password hashing, bearer tokens, timed reset tokens and input sanitization
"""

import logging
import re
import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import bleach
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from jose import JWTError
from jose import jwt as jose_jwt
from passlib.context import CryptContext

from .config import SECRET_KEY

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ============================================================================
# PASSWORD SECURITY
# ============================================================================


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify password against bcrypt hash"""
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception as e:
        logger.error(f"Password verification error: {e}")
        return False


def check_password_strength(password: str) -> list[str]:
    """
    Return the list of unmet password rules (empty when the password is acceptable).
    Rules: at least 8 characters, one lowercase, one uppercase and one digit.
    """
    problems = []
    if len(password or "") < 8:
        problems.append("Password must be at least 8 characters long")
    if not re.search(r"[a-z]", password or ""):
        problems.append("Password must contain a lowercase letter")
    if not re.search(r"[A-Z]", password or ""):
        problems.append("Password must contain an uppercase letter")
    if not re.search(r"\d", password or ""):
        problems.append("Password must contain a number")
    return problems


def generate_employee_password(length: int = 12) -> str:
    """Random password with at least one upper, lower, digit and special character"""
    special = "!@#$%&*"
    alphabet = string.ascii_letters + string.digits + special
    chars = [
        secrets.choice(string.ascii_uppercase),
        secrets.choice(string.ascii_lowercase),
        secrets.choice(string.digits),
        secrets.choice(special),
    ]
    chars += [secrets.choice(alphabet) for _ in range(length - len(chars))]
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


# ============================================================================
# TOKEN GENERATION & VALIDATION
# ============================================================================


def generate_secure_token(length: int = 32) -> str:
    """Generate a cryptographically secure random token"""
    return secrets.token_urlsafe(length)


def generate_login_code() -> str:
    """Six digit numeric code for the customer portal"""
    return str(secrets.randbelow(900000) + 100000)


def constant_time_equals(a: str, b: str) -> bool:
    return secrets.compare_digest(str(a).encode(), str(b).encode())


def generate_timed_token(data: dict[str, Any], salt: str = "security-token") -> str:
    """
    Generate a time-limited token using itsdangerous
    Used for password reset links
    """
    serializer = URLSafeTimedSerializer(SECRET_KEY)
    return serializer.dumps(data, salt=salt)


def verify_timed_token(
    token: str, max_age: int = 3600, salt: str = "security-token"
) -> Optional[dict[str, Any]]:
    """
    Verify and decode a timed token

    Returns:
        Decoded data if valid, None if invalid or expired
    """
    serializer = URLSafeTimedSerializer(SECRET_KEY)
    try:
        return serializer.loads(token, salt=salt, max_age=max_age)
    except SignatureExpired:
        logger.warning("Token expired")
        return None
    except BadSignature:
        logger.warning("Invalid token signature")
        return None


def create_jwt_token(data: dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT token

    Args:
        data: Data to encode in the token
        expires_delta: Token expiration time (default 15 minutes)
    """
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=15))
    to_encode = {**data, "exp": expire}
    return jose_jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def verify_jwt_token(token: str) -> Optional[dict[str, Any]]:
    """
    Verify and decode a JWT token

    Returns:
        Decoded payload if valid, None if invalid or expired
    """
    try:
        return jose_jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None


# ============================================================================
# INPUT SANITIZATION
# ============================================================================


def sanitize_text(value: Optional[str], max_length: Optional[int] = None) -> Optional[str]:
    """Strip all markup from free text, trim whitespace and optionally truncate"""
    if value is None:
        return None
    cleaned = bleach.clean(str(value), tags=[], attributes={}, strip=True).strip()
    if max_length is not None:
        cleaned = cleaned[:max_length]
    return cleaned
