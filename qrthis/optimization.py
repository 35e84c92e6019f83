"""Smart text optimization, content-type detection and error correction."""

import re
from dataclasses import dataclass


@dataclass
class OptimizationResult:
    optimized: str
    saved: int


_WHITESPACE_RUN = re.compile(r"\s+")
_BLANK_LINES = re.compile(r"\n\s*\n")
_WWW_PREFIX = re.compile(r"https?://(?:www\.)+")
_BARE_HOST_SLASH = re.compile(r"https?://([^/]+)/?$")


def optimize_text(text: str) -> OptimizationResult:
    """Shrink content without changing what it means.

    Whitespace runs become a single space, ``www.`` is dropped from URLs
    and a bare ``https://host/`` loses its trailing slash. Applying the
    function to its own output changes nothing.
    """
    optimized = _WHITESPACE_RUN.sub(" ", text)
    optimized = _BLANK_LINES.sub("\n", optimized).strip()
    optimized = _WWW_PREFIX.sub("https://", optimized)
    optimized = _BARE_HOST_SLASH.sub(r"https://\1", optimized, count=1)
    optimized = optimized.strip()

    return OptimizationResult(optimized=optimized, saved=len(text) - len(optimized))


# Order matters: the first matching pattern wins.
CONTENT_PATTERNS = {
    "url": re.compile(r"^https?://.+", re.IGNORECASE),
    "email": re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$"),
    "phone": re.compile(r"^\+?[0-9\s\-()]{10,}$"),
    "wifi": re.compile(r"^WIFI:T:.+;S:.+;P:.+;;$"),
    "vcard": re.compile(r"^BEGIN:VCARD", re.IGNORECASE),
    "geo": re.compile(r"^geo:-?[0-9]+\.[0-9]+,-?[0-9]+\.[0-9]+"),
}

CONTENT_TYPES = tuple(CONTENT_PATTERNS) + ("text",)


def detect_content_type(text: str) -> str:
    trimmed = text.strip()
    for content_type, pattern in CONTENT_PATTERNS.items():
        if pattern.search(trimmed):
            return content_type
    return "text"


def get_optimal_error_correction(content: str) -> str:
    """Pick an error-correction level (L/M/Q/H) for the content.

    WiFi and contact cards are printed and kept, so they get H. Links and
    email addresses get M. Everything else trades redundancy for capacity
    as it grows.
    """
    content_type = detect_content_type(content)

    if content_type in ("wifi", "vcard"):
        return "H"
    if content_type in ("url", "email"):
        return "M"

    length = len(content)
    if length < 100:
        return "H"
    if length < 400:
        return "M"
    return "L"


_CONTENT_LABELS = {
    "url": "Website Link",
    "email": "Email Address",
    "phone": "Phone Number",
    "wifi": "WiFi Network",
    "vcard": "Contact Card",
    "geo": "Location",
    "text": "Text Content",
}

_CONTENT_TIPS = {
    "url": "Make sure this link is publicly accessible",
    "email": "This will open the user's email app",
    "phone": "This will dial the number automatically",
    "wifi": "Perfect for easy WiFi sharing",
    "vcard": "Great for contact information sharing",
}

_ERROR_CORRECTION_EXPLANATIONS = {
    "L": "Low (~7%) - Optimized for size, good for clean conditions",
    "M": "Medium (~15%) - Balanced protection and size",
    "Q": "Quartile (~25%) - Good protection for most uses",
    "H": "High (~30%) - Maximum protection, larger code",
}


def get_content_label(content_type: str) -> str:
    return _CONTENT_LABELS.get(content_type, "Text Content")


def get_content_tips(content_type: str) -> str | None:
    return _CONTENT_TIPS.get(content_type)


def get_error_correction_explanation(level: str) -> str:
    return _ERROR_CORRECTION_EXPLANATIONS.get(level, "Standard error correction")
