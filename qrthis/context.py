"""Guess where a QR code will be used and tune it for that setting."""

import re
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ContextOptimizations:
    error_correction: str
    size: str  # "small", "medium" or "large"
    tips: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class QRContext:
    type: str
    confidence: float
    optimizations: ContextOptimizations


# Checked in order; the first keyword hit wins.
CONTEXT_PATTERNS: dict[str, tuple[re.Pattern, ContextOptimizations]] = {
    "restaurant": (
        re.compile(r"menu|food|restaurant|cafe|dining|eat|order|table", re.IGNORECASE),
        ContextOptimizations("M", "large", [
            "Print on table tents for easy access",
            "Use high contrast for dim lighting conditions",
            "Consider adding your restaurant logo",
            "Test scanning from typical dining distance",
        ]),
    ),
    "event": (
        re.compile(r"event|wedding|party|conference|meeting|rsvp|invitation", re.IGNORECASE),
        ContextOptimizations("H", "medium", [
            "Perfect for printed invitations",
            "Include event date and time in content",
            "Test scanning from different distances",
            "Consider printing larger for older attendees",
        ]),
    ),
    "business": (
        re.compile(r"business|company|contact|professional|linkedin|corporate", re.IGNORECASE),
        ContextOptimizations("M", "small", [
            "Ideal for business cards",
            "Use professional color schemes",
            "Include complete contact information",
            "Test readability at business card size",
        ]),
    ),
    "social": (
        re.compile(r"instagram|twitter|facebook|linkedin|social|profile|follow", re.IGNORECASE),
        ContextOptimizations("L", "medium", [
            "Great for social media campaigns",
            "Works well on digital displays",
            "Consider brand colors for recognition",
            "Perfect for marketing materials",
        ]),
    ),
    "wifi": (
        re.compile(r"wifi|password|network|internet|ssid|wpa|wep", re.IGNORECASE),
        ContextOptimizations("H", "medium", [
            "High error correction for reliable connection",
            "Print clearly for guest access",
            "Include network name in visible text",
            "Consider laminating for durability",
        ]),
    ),
    "retail": (
        re.compile(r"store|shop|product|buy|purchase|price|sale|discount", re.IGNORECASE),
        ContextOptimizations("M", "medium", [
            "Perfect for product information",
            "Great for price comparisons",
            "Include clear call-to-action",
            "Test with typical shopping lighting",
        ]),
    ),
}


def _context(context_type: str, confidence: float) -> QRContext:
    return QRContext(context_type, confidence, CONTEXT_PATTERNS[context_type][1])


def detect_qr_context(content: str) -> QRContext | None:
    """Return the most likely usage context, or None when nothing fits.

    Keyword hits score 0.8. Social and LinkedIn domains score 0.9, and WiFi
    or vCard payloads are certain.
    """
    lowered = content.strip().lower()

    for context_type, (pattern, _) in CONTEXT_PATTERNS.items():
        if pattern.search(lowered):
            return _context(context_type, 0.8)

    if any(d in content for d in ("instagram.com", "twitter.com", "facebook.com")):
        return _context("social", 0.9)

    if "linkedin.com" in content:
        return _context("business", 0.9)

    if content.startswith("WIFI:"):
        return _context("wifi", 1.0)

    if content.startswith("BEGIN:VCARD"):
        return _context("business", 1.0)

    return None


_CONTEXT_LABELS = {
    "restaurant": "Restaurant & Dining",
    "event": "Event & Invitation",
    "business": "Business & Professional",
    "social": "Social Media",
    "wifi": "WiFi Network",
    "retail": "Retail & Shopping",
}

_CONTEXT_ICONS = {
    "restaurant": "🍽️",
    "event": "🎉",
    "business": "💼",
    "social": "📱",
    "wifi": "📶",
    "retail": "🛍️",
}


def get_context_label(context_type: str) -> str:
    return _CONTEXT_LABELS.get(context_type, context_type[:1].upper() + context_type[1:])


def get_context_icon(context_type: str) -> str:
    return _CONTEXT_ICONS.get(context_type, "🎯")
