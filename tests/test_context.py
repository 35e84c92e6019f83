import pytest

from qrthis.context import detect_qr_context, get_context_icon, get_context_label


@pytest.mark.parametrize("content,expected", [
    ("Check out our dinner menu", "restaurant"),
    ("Join our wedding RSVP", "event"),
    ("Professional services for your company", "business"),
    ("Follow us on instagram", "social"),
    ("Guest network login", "wifi"),
    ("Spring sale on every product", "retail"),
])
def test_keyword_contexts(content, expected):
    context = detect_qr_context(content)
    assert context.type == expected
    assert context.confidence == 0.8


def test_vcard_is_certain_business():
    context = detect_qr_context("BEGIN:VCARD\nFN:Ann\nEND:VCARD")
    assert context.type == "business"
    assert context.confidence == 1.0
    assert context.optimizations.size == "small"


def test_no_context():
    assert detect_qr_context("hello world") is None


def test_optimizations_come_with_context():
    context = detect_qr_context("Conference schedule")
    assert context.optimizations.error_correction == "H"
    assert "Perfect for printed invitations" in context.optimizations.tips


def test_labels_and_icons():
    assert get_context_label("restaurant") == "Restaurant & Dining"
    assert get_context_label("custom") == "Custom"
    assert get_context_icon("wifi") == "📶"
    assert get_context_icon("custom") == "🎯"
