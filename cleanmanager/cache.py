"""
Short-lived key/value store for customer portal login codes
Backed by Redis when configured, otherwise kept in process memory
"""

import json
import logging
import time
from threading import Lock
from typing import Any, Optional

from .rate_limiter import get_redis_client

logger = logging.getLogger(__name__)


class Cache:
    """Redis cache wrapper with automatic serialization and a memory fallback"""

    def __init__(self):
        self.redis_client = None
        self._memory: dict[str, tuple[float, str]] = {}
        self._lock = Lock()

    def _get_client(self):
        """Lazy load Redis client"""
        if self.redis_client is None:
            self.redis_client = get_redis_client()
        return self.redis_client

    def get(self, key: str) -> Optional[Any]:
        client = self._get_client()
        if client is not None:
            try:
                value = client.get(key)
                return json.loads(value) if value else None
            except Exception as e:
                logger.error(f"❌ Cache get error for {key}: {e}")
                return None

        with self._lock:
            entry = self._memory.get(key)
            if not entry:
                return None
            expires_at, serialized = entry
            if time.time() >= expires_at:
                del self._memory[key]
                return None
            return json.loads(serialized)

    def set(self, key: str, value: Any, ttl: int = 3600) -> bool:
        """Set value in cache with TTL (default 1 hour)"""
        serialized = json.dumps(value)
        client = self._get_client()
        if client is not None:
            try:
                client.setex(key, ttl, serialized)
                return True
            except Exception as e:
                logger.error(f"❌ Cache set error for {key}: {e}")
                return False

        with self._lock:
            self._memory[key] = (time.time() + ttl, serialized)
        return True

    def delete(self, key: str) -> bool:
        client = self._get_client()
        if client is not None:
            try:
                client.delete(key)
                return True
            except Exception as e:
                logger.error(f"❌ Cache delete error for {key}: {e}")
                return False

        with self._lock:
            self._memory.pop(key, None)
        return True

    def clear_memory(self) -> None:
        with self._lock:
            self._memory.clear()


# Global cache instance
cache = Cache()


# Entries outlive the code so an expired code can be reported as such
EXPIRED_CODE_GRACE_SECONDS = 300


def _login_code_key(email: str) -> str:
    return f"portal_login_code:{email.strip().lower()}"


def store_login_code(email: str, code: str, ttl: int) -> bool:
    """Save a fresh code for this email, replacing any earlier one"""
    payload = {"code": code, "expiresAt": time.time() + ttl, "attempts": 0}
    return cache.set(_login_code_key(email), payload, ttl + EXPIRED_CODE_GRACE_SECONDS)


def get_login_code(email: str) -> Optional[dict]:
    return cache.get(_login_code_key(email))


def update_login_code(email: str, payload: dict) -> bool:
    """Write back attempt counts without extending the code's lifetime"""
    remaining = int(payload.get("expiresAt", 0) - time.time()) + EXPIRED_CODE_GRACE_SECONDS
    if remaining <= 0:
        return cache.delete(_login_code_key(email))
    return cache.set(_login_code_key(email), payload, remaining)


def delete_login_code(email: str) -> bool:
    return cache.delete(_login_code_key(email))
