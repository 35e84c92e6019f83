"""Validation for the notification signup form and a persistent rate limit."""

import logging
import re
import time

from qrthis.security import EMAIL_PATTERN, PHONE_FORMATTING, ValidationResult
from qrthis.storage import LocalStore

logger = logging.getLogger(__name__)

ONE_DAY = 24 * 60 * 60

_SUSPICIOUS_EMAIL = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"<script",
        r"javascript:",
        r"data:",
        r"vbscript:",
        r"'.*or.*1.*=.*1",
        r"union.*select",
    )
]

_SUSPICIOUS_NAME = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"<script",
        r"javascript:",
        r"'.*or.*1.*=.*1",
        r"union.*select",
        r"\*/",
        r"--",
    )
]


def validate_signup_email(email: str) -> ValidationResult:
    """Required. Returns the trimmed, lower-cased address as ``sanitized``."""
    if not email or not isinstance(email, str):
        return ValidationResult(False, "Email is required")

    normalized = email.strip().lower()

    if len(normalized) < 5 or len(normalized) > 254:
        return ValidationResult(False, "Email must be between 5 and 254 characters")

    if not EMAIL_PATTERN.match(normalized):
        return ValidationResult(False, "Please enter a valid email address")

    if any(p.search(normalized) for p in _SUSPICIOUS_EMAIL):
        return ValidationResult(False, "Invalid email format detected")

    return ValidationResult(True, sanitized=normalized)


def validate_signup_phone(phone: str | None) -> ValidationResult:
    """Optional. Accepts 7 to 20 digits with the usual punctuation."""
    if not phone or not isinstance(phone, str):
        return ValidationResult(True, sanitized="")

    trimmed = phone.strip()
    digits = PHONE_FORMATTING.sub("", trimmed)

    if len(digits) < 7 or len(digits) > 20:
        return ValidationResult(False, "Phone number must be between 7 and 20 digits")

    if not re.match(r"^\+?[1-9][0-9\s\-()]{6,19}$", trimmed):
        return ValidationResult(False, "Please enter a valid phone number")

    return ValidationResult(True, sanitized=re.sub(r"[^0-9+\-()\s]", "", trimmed))


def validate_name(name: str | None) -> ValidationResult:
    """Optional. Letters, spaces, hyphens, apostrophes and dots only."""
    if not name or not isinstance(name, str):
        return ValidationResult(True, sanitized="")

    trimmed = name.strip()
    if not trimmed:
        return ValidationResult(True, sanitized="")

    if len(trimmed) < 2 or len(trimmed) > 100:
        return ValidationResult(False, "Name must be between 2 and 100 characters")

    if not re.match(r"^[a-zA-Z\s\-'.]+$", trimmed):
        return ValidationResult(False, "Name contains invalid characters")

    if any(p.search(trimmed) for p in _SUSPICIOUS_NAME):
        return ValidationResult(False, "Invalid name format detected")

    return ValidationResult(True, sanitized=trimmed)


def sanitize_input(text: str, max_length: int = 1000) -> str:
    if not text or not isinstance(text, str):
        return ""

    sanitized = text.strip()[:max_length]
    sanitized = re.sub(r"[<>]", "", sanitized)
    sanitized = re.sub(r"javascript:", "", sanitized, flags=re.IGNORECASE)
    return re.sub(r"data:", "", sanitized, flags=re.IGNORECASE)


def is_rate_limited(
    store: LocalStore,
    key: str,
    max_requests: int = 3,
    window: float = ONE_DAY,
    now: float | None = None,
) -> bool:
    """Record a request under ``key`` unless the window is already full.

    Timestamps persist in ``store`` under ``rate_limit_<key>``. If the store
    cannot be read or written the request is let through.
    """
    now = time.time() if now is None else now
    storage_key = f"rate_limit_{key}"

    try:
        requests_made = store.get_item(storage_key) or []
        recent = [t for t in requests_made if now - t < window]

        if len(recent) >= max_requests:
            return True

        recent.append(now)
        store.set_item(storage_key, recent)
        return False
    except (OSError, ValueError, TypeError) as e:
        logger.warning("Rate limiting check failed: %s", e)
        return False
