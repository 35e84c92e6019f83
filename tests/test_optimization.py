import pytest

from qrthis.optimization import (
    CONTENT_TYPES,
    detect_content_type,
    get_content_label,
    get_content_tips,
    get_error_correction_explanation,
    get_optimal_error_correction,
    optimize_text,
)


class TestOptimizeText:
    def test_collapses_whitespace(self):
        result = optimize_text("hello    world\n\n\nagain  ")
        assert result.optimized == "hello world again"
        assert result.saved == len("hello    world\n\n\nagain  ") - len("hello world again")

    def test_drops_www_and_bare_trailing_slash(self):
        result = optimize_text("https://www.example.com/")
        assert result.optimized == "https://example.com"
        assert result.saved == 5

    def test_keeps_path_slash(self):
        assert optimize_text("https://example.com/menu/").optimized == "https://example.com/menu/"

    def test_surrounding_whitespace_does_not_block_url_rules(self):
        assert optimize_text("  https://www.example.com/  ").optimized == "https://example.com"

    @pytest.mark.parametrize("text", [
        "https://www.www.example.com/",
        "  spaced   out   text ",
        "https://www.example.com/path?q=1",
        "plain",
    ])
    def test_idempotent(self, text):
        once = optimize_text(text).optimized
        twice = optimize_text(once)
        assert twice.optimized == once
        assert twice.saved == 0

    def test_nothing_to_save(self):
        assert optimize_text("abc").saved == 0


class TestDetectContentType:
    @pytest.mark.parametrize("text,expected", [
        ("https://example.com", "url"),
        ("HTTP://EXAMPLE.COM", "url"),
        ("someone@example.com", "email"),
        ("+1 (555) 123-4567", "phone"),
        ("WIFI:T:WPA;S:Cafe;P:secret123;;", "wifi"),
        ("BEGIN:VCARD\nFN:Ann\nEND:VCARD", "vcard"),
        ("geo:37.7749,-122.4194", "geo"),
        ("just some words", "text"),
        ("", "text"),
    ])
    def test_detects(self, text, expected):
        assert detect_content_type(text) == expected

    def test_trims_before_matching(self):
        assert detect_content_type("   https://example.com  ") == "url"

    def test_bare_scheme_is_text(self):
        # the URL pattern needs something after "scheme://"
        assert detect_content_type("http://") == "text"
        assert detect_content_type("https://") == "text"
        assert detect_content_type("http://x") == "url"

    def test_every_result_is_a_known_type(self):
        for text in ("x", "a@b.co", "geo:1.0,2.0"):
            assert detect_content_type(text) in CONTENT_TYPES


class TestErrorCorrection:
    def test_structured_payloads_get_high(self):
        assert get_optimal_error_correction("WIFI:T:WPA;S:Cafe;P:secret123;;") == "H"
        assert get_optimal_error_correction("BEGIN:VCARD\nFN:Ann\nEND:VCARD") == "H"

    def test_links_and_email_get_medium(self):
        assert get_optimal_error_correction("https://example.com/" + "a" * 500) == "M"
        assert get_optimal_error_correction("someone@example.com") == "M"

    @pytest.mark.parametrize("length,expected", [(10, "H"), (99, "H"), (100, "M"), (399, "M"), (400, "L")])
    def test_text_by_length(self, length, expected):
        assert get_optimal_error_correction("x" * length) == expected


def test_labels_and_tips():
    assert get_content_label("wifi") == "WiFi Network"
    assert get_content_label("nonsense") == "Text Content"
    assert get_content_tips("url") == "Make sure this link is publicly accessible"
    assert get_content_tips("text") is None
    assert get_error_correction_explanation("H").startswith("High")
    assert get_error_correction_explanation("Z") == "Standard error correction"
