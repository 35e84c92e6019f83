"""Input validation, sanitization and client-side rate limiting.

Validators never raise on bad input: they return a ``ValidationResult``
whose ``error`` is a message fit to show next to the input field.
"""

import re
import time
from dataclasses import dataclass
from typing import Callable
from urllib.parse import urlsplit

from qrthis import MAX_CHARACTERS

MAX_URL_LENGTH = 2048
MAX_EMAIL_LENGTH = 254


@dataclass
class ValidationResult:
    is_valid: bool
    error: str | None = None
    sanitized: str | None = None


def _fail(message: str) -> ValidationResult:
    return ValidationResult(is_valid=False, error=message)


_SCHEME = re.compile(r"^https?://", re.IGNORECASE)
_ALLOWED_SCHEMES = ("http", "https", "mailto", "tel", "sms")
_FORBIDDEN_HOST_CHARS = re.compile(r"[\s<>^|\\\"{}`]")

_UNSAFE_URL_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"javascript:",
        r"data:",
        r"vbscript:",
        r"file:",
        r"ftp:",
        r"<script[^>]*>",
        r"on\w+\s*=",
        r"eval\s*\(",
        r"expression\s*\(",
    )
]


def validate_url(url: str) -> ValidationResult:
    """Validate a link before it is encoded. A missing scheme means https."""
    if not url or not isinstance(url, str):
        return _fail("URL is required")

    trimmed = url.strip()
    if not trimmed:
        return _fail("URL cannot be empty")

    if len(trimmed) > MAX_URL_LENGTH:
        return _fail(f"URL is too long (max {MAX_URL_LENGTH} characters)")

    url_to_test = trimmed if _SCHEME.match(trimmed) else "https://" + trimmed

    try:
        parts = urlsplit(url_to_test)
        hostname = parts.hostname
        parts.port  # raises ValueError on a malformed port
    except ValueError:
        return _fail("Invalid URL format")

    if not hostname or _FORBIDDEN_HOST_CHARS.search(hostname):
        return _fail("Invalid URL format")

    if parts.scheme.lower() not in _ALLOWED_SCHEMES:
        return _fail("Protocol not allowed")

    if any(p.search(trimmed) for p in _UNSAFE_URL_PATTERNS):
        return _fail("Potentially unsafe URL detected")

    if len(hostname) < 4 or "." not in hostname:
        return _fail("Invalid domain format")

    return ValidationResult(is_valid=True)


EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)

_UNSAFE_EMAIL_PATTERNS = [
    re.compile(p, re.IGNORECASE) for p in (r"javascript:", r"<script", r"on\w+=")
]


def validate_email(email: str) -> ValidationResult:
    if not email or not isinstance(email, str):
        return _fail("Email is required")

    normalized = email.strip().lower()
    if not normalized:
        return _fail("Email cannot be empty")

    if len(normalized) > MAX_EMAIL_LENGTH:
        return _fail(f"Email is too long (max {MAX_EMAIL_LENGTH} characters)")

    if not EMAIL_PATTERN.match(normalized):
        return _fail("Invalid email format")

    if any(p.search(normalized) for p in _UNSAFE_EMAIL_PATTERNS):
        return _fail("Email contains invalid characters")

    return ValidationResult(is_valid=True)


PHONE_FORMATTING = re.compile(r"[\s\-().]")


def validate_phone(phone: str) -> ValidationResult:
    """Accept international numbers of 7 to 15 digits, formatting ignored."""
    if not phone or not isinstance(phone, str):
        return _fail("Phone number is required")

    trimmed = phone.strip()
    if not trimmed:
        return _fail("Phone number cannot be empty")

    digits = PHONE_FORMATTING.sub("", trimmed)

    if len(digits) < 7:
        return _fail("Phone number too short (minimum 7 digits)")
    if len(digits) > 15:
        return _fail("Phone number too long (maximum 15 digits)")
    if not re.match(r"^\+?[0-9]+$", digits):
        return _fail("Phone number contains invalid characters")
    if not re.match(r"^\+?[1-9][0-9]{6,14}$", digits):
        return _fail("Invalid phone number format")

    return ValidationResult(is_valid=True)


_WEP_KEY_LENGTHS = (5, 10, 13, 26)


def validate_wifi_network(ssid: str, password: str, security: str = "WPA") -> ValidationResult:
    if not ssid or not isinstance(ssid, str):
        return _fail("Network name (SSID) is required")

    trimmed_ssid = ssid.strip()
    if not trimmed_ssid:
        return _fail("Network name cannot be empty")
    if len(trimmed_ssid) > 32:
        return _fail("Network name too long (max 32 characters)")

    if security != "nopass":
        if not password or not isinstance(password, str):
            return _fail("Password is required for secured networks")

        trimmed_password = password.strip()
        if not trimmed_password:
            return _fail("Password cannot be empty")
        if security == "WPA" and len(trimmed_password) < 8:
            return _fail("WPA password must be at least 8 characters")
        if security == "WEP" and len(trimmed_password) not in _WEP_KEY_LENGTHS:
            return _fail("WEP password must be 5, 10, 13, or 26 characters")
        if len(trimmed_password) > 63:
            return _fail("Password too long (max 63 characters)")

    return ValidationResult(is_valid=True)


def sanitize_text_input(text: str, max_length: int = MAX_CHARACTERS) -> str:
    """Strip markup and script vectors from free text, then cap its length."""
    if not text or not isinstance(text, str):
        return ""

    sanitized = re.sub(r"[<>]", "", text)
    sanitized = re.sub(r"javascript:", "", sanitized, flags=re.IGNORECASE)
    sanitized = re.sub(r"on\w+\s*=", "", sanitized, flags=re.IGNORECASE)
    sanitized = re.sub(r"data:text/html", "", sanitized, flags=re.IGNORECASE)
    sanitized = re.sub(r"vbscript:", "", sanitized, flags=re.IGNORECASE)
    sanitized = sanitized.strip()

    # Keep single line breaks, squeeze longer whitespace runs
    sanitized = re.sub(r"\s{3,}", "  ", sanitized)

    return sanitized[:max_length]


_XSS_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"<script[^>]*>.*?</script>",
        r"<iframe[^>]*>.*?</iframe>",
        r"<object[^>]*>.*?</object>",
        r"<embed[^>]*>",
        r"on\w+\s*=",
        r"javascript:",
        r"vbscript:",
        r"data:text/html",
        r"expression\s*\(",
    )
]


def prevent_xss(text: str) -> str:
    for pattern in _XSS_PATTERNS:
        text = pattern.sub("", text)
    return text


def validate_qr_content(content: str, content_type: str) -> ValidationResult:
    """Validate content for the chosen QR type and return what to encode.

    Email and phone content gains its ``mailto:``/``tel:`` scheme; free text
    is sanitized. URLs are encoded as typed.
    """
    if not content or not isinstance(content, str):
        return _fail("Content is required")

    if len(content) > MAX_CHARACTERS:
        return _fail("Content exceeds maximum length")

    sanitized = content
    result = ValidationResult(is_valid=True)

    if content_type == "url":
        result = validate_url(content)
    elif content_type == "text":
        sanitized = sanitize_text_input(content)
        if not sanitized:
            return _fail("Content contains only unsafe characters")
    elif content_type == "email":
        address = content.replace("mailto:", "", 1)
        result = validate_email(address)
        if result.is_valid:
            sanitized = f"mailto:{address}"
    elif content_type == "phone":
        number = content.replace("tel:", "", 1)
        result = validate_phone(number)
        if result.is_valid:
            sanitized = f"tel:{number}"
    else:
        sanitized = sanitize_text_input(content)

    if not result.is_valid:
        return result

    return ValidationResult(is_valid=True, sanitized=sanitized)


class RateLimiter:
    """Sliding-window limiter keyed by client identifier.

    A client that fills its window is blocked for one further window, even
    if old attempts age out in the meantime.
    """

    def __init__(
        self,
        max_attempts: int = 10,
        window: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_attempts = max_attempts
        self.window = window
        self._clock = clock
        self._attempts: dict[str, list[float]] = {}
        self._blocked_until: dict[str, float] = {}

    def is_allowed(self, identifier: str) -> bool:
        now = self._clock()

        blocked_until = self._blocked_until.get(identifier)
        if blocked_until is not None:
            if now < blocked_until:
                return False
            del self._blocked_until[identifier]

        recent = [t for t in self._attempts.get(identifier, []) if now - t < self.window]

        if len(recent) >= self.max_attempts:
            self._blocked_until[identifier] = now + self.window
            self._attempts[identifier] = recent
            return False

        recent.append(now)
        self._attempts[identifier] = recent
        return True

    def reset(self, identifier: str) -> None:
        self._attempts.pop(identifier, None)
        self._blocked_until.pop(identifier, None)

    def cleanup(self) -> None:
        """Drop expired attempts and blocks for every identifier."""
        now = self._clock()
        for identifier, attempts in list(self._attempts.items()):
            recent = [t for t in attempts if now - t < self.window]
            if recent:
                self._attempts[identifier] = recent
            else:
                del self._attempts[identifier]

        for identifier, blocked_until in list(self._blocked_until.items()):
            if now >= blocked_until:
                del self._blocked_until[identifier]
