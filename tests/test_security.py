import pytest

from qrthis.security import (
    RateLimiter,
    prevent_xss,
    sanitize_text_input,
    validate_email,
    validate_phone,
    validate_qr_content,
    validate_url,
    validate_wifi_network,
)


class TestValidateUrl:
    @pytest.mark.parametrize("url", [
        "https://example.com",
        "example.com/menu",
        "http://sub.example.co.uk:8080/path?q=1",
    ])
    def test_accepts(self, url):
        assert validate_url(url).is_valid

    @pytest.mark.parametrize("url,error", [
        ("", "URL is required"),
        ("   ", "URL cannot be empty"),
        ("https://exa mple.com", "Invalid URL format"),
        ("https://example.com:99999", "Invalid URL format"),
        ("https://example.com/?x=javascript:alert(1)", "Potentially unsafe URL detected"),
        ("https://example.com/<script>", "Potentially unsafe URL detected"),
        ("localhost", "Invalid domain format"),
    ])
    def test_rejects(self, url, error):
        result = validate_url(url)
        assert not result.is_valid
        assert result.error == error

    def test_too_long(self):
        result = validate_url("https://example.com/" + "a" * 2048)
        assert result.error == "URL is too long (max 2048 characters)"


class TestValidateEmail:
    def test_accepts_and_normalizes(self):
        assert validate_email("  Someone@Example.com ").is_valid

    @pytest.mark.parametrize("email", ["", "no-at-sign", "a@", "a b@example.com"])
    def test_rejects(self, email):
        assert not validate_email(email).is_valid


class TestValidatePhone:
    def test_accepts_formatted_numbers(self):
        assert validate_phone("+1 (555) 123-4567").is_valid
        assert validate_phone("555.123.4567").is_valid

    @pytest.mark.parametrize("phone,error", [
        ("", "Phone number is required"),
        ("12345", "Phone number too short (minimum 7 digits)"),
        ("1234567890123456", "Phone number too long (maximum 15 digits)"),
        ("555-CALL-NOW1", "Phone number contains invalid characters"),
        ("0123456789", "Invalid phone number format"),
    ])
    def test_rejects(self, phone, error):
        assert validate_phone(phone).error == error


class TestValidateWifi:
    def test_wpa_needs_eight_characters(self):
        assert validate_wifi_network("Cafe", "short").error == "WPA password must be at least 8 characters"
        assert validate_wifi_network("Cafe", "coffee123").is_valid

    def test_wep_key_lengths(self):
        assert validate_wifi_network("Cafe", "abcde", "WEP").is_valid
        assert not validate_wifi_network("Cafe", "abcdef", "WEP").is_valid

    def test_open_network_needs_no_password(self):
        assert validate_wifi_network("Guest", "", "nopass").is_valid

    def test_ssid_limits(self):
        assert validate_wifi_network("", "coffee123").error == "Network name (SSID) is required"
        assert validate_wifi_network("   ", "coffee123").error == "Network name cannot be empty"
        assert not validate_wifi_network("x" * 33, "coffee123").is_valid


def test_sanitize_text_input_strips_script_vectors():
    assert sanitize_text_input("<b>hi</b> javascript:go() onclick=x") == "bhi/b go() x"
    assert sanitize_text_input("a     b") == "a  b"
    assert sanitize_text_input("x" * 3000, max_length=10) == "x" * 10


def test_prevent_xss():
    assert prevent_xss("hi<script>alert(1)</script>there") == "hithere"


class TestValidateQrContent:
    def test_email_gets_mailto(self):
        result = validate_qr_content("ann@example.com", "email")
        assert result.is_valid
        assert result.sanitized == "mailto:ann@example.com"

    def test_phone_gets_tel(self):
        assert validate_qr_content("+15551234567", "phone").sanitized == "tel:+15551234567"

    def test_text_is_sanitized(self):
        assert validate_qr_content("hello <world>", "text").sanitized == "hello world"

    def test_only_unsafe_text(self):
        assert validate_qr_content("<>", "text").error == "Content contains only unsafe characters"

    def test_url_kept_as_typed(self):
        assert validate_qr_content("https://example.com", "url").sanitized == "https://example.com"

    def test_too_long(self):
        assert validate_qr_content("x" * 2001, "text").error == "Content exceeds maximum length"


class TestRateLimiter:
    def test_rejects_attempt_past_the_limit(self, clock):
        limiter = RateLimiter(max_attempts=3, window=60, clock=clock)
        assert [limiter.is_allowed("a") for _ in range(4)] == [True, True, True, False]
        assert limiter.is_allowed("b")

    def test_full_window_blocks_for_one_more_window(self, clock):
        limiter = RateLimiter(max_attempts=2, window=10, clock=clock)
        assert limiter.is_allowed("a")
        clock.advance(5)
        assert limiter.is_allowed("a")
        clock.advance(4)
        assert not limiter.is_allowed("a")  # blocked until t+19

        clock.advance(3)  # first attempt has aged out, the block has not
        assert not limiter.is_allowed("a")
        clock.advance(7)
        assert limiter.is_allowed("a")

    def test_reset(self, clock):
        limiter = RateLimiter(max_attempts=1, window=60, clock=clock)
        limiter.is_allowed("a")
        assert not limiter.is_allowed("a")
        limiter.reset("a")
        assert limiter.is_allowed("a")

    def test_cleanup_drops_expired(self, clock):
        limiter = RateLimiter(max_attempts=1, window=5, clock=clock)
        limiter.is_allowed("a")
        limiter.is_allowed("a")
        clock.advance(20)
        limiter.cleanup()
        assert limiter._attempts == {}
        assert limiter._blocked_until == {}
