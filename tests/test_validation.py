import pytest

from qrthis.validation import (
    ONE_DAY,
    is_rate_limited,
    sanitize_input,
    validate_name,
    validate_signup_email,
    validate_signup_phone,
)


class TestSignupEmail:
    def test_normalizes(self):
        result = validate_signup_email("  Ann@Example.COM ")
        assert result.is_valid
        assert result.sanitized == "ann@example.com"

    @pytest.mark.parametrize("email,error", [
        ("", "Email is required"),
        ("a@b", "Email must be between 5 and 254 characters"),
        ("not-an-email", "Please enter a valid email address"),
    ])
    def test_rejects(self, email, error):
        assert validate_signup_email(email).error == error


class TestSignupPhone:
    def test_optional(self):
        assert validate_signup_phone(None).is_valid
        assert validate_signup_phone("").sanitized == ""

    def test_accepts(self):
        result = validate_signup_phone(" +1 (555) 123-4567 ")
        assert result.is_valid
        assert result.sanitized == "+1 (555) 123-4567"

    def test_rejects(self):
        assert validate_signup_phone("123").error == "Phone number must be between 7 and 20 digits"
        assert validate_signup_phone("0555123456").error == "Please enter a valid phone number"


class TestName:
    def test_optional(self):
        assert validate_name(None).is_valid
        assert validate_name("   ").sanitized == ""

    def test_accepts(self):
        assert validate_name(" Mary-Jane O'Neil ").sanitized == "Mary-Jane O'Neil"

    @pytest.mark.parametrize("name,error", [
        ("A", "Name must be between 2 and 100 characters"),
        ("Robert3", "Name contains invalid characters"),
        ("Bob -- drop", "Invalid name format detected"),
    ])
    def test_rejects(self, name, error):
        assert validate_name(name).error == error


def test_sanitize_input():
    assert sanitize_input("  <b>javascript:data:hi ") == "bhi"
    assert sanitize_input("x" * 50, max_length=5) == "xxxxx"
    assert sanitize_input(None) == ""


class TestIsRateLimited:
    def test_allows_up_to_max_then_limits(self, store):
        results = [is_rate_limited(store, "k", max_requests=3, now=100.0 + i) for i in range(4)]
        assert results == [False, False, False, True]
        assert store.get_item("rate_limit_k") == [100.0, 101.0, 102.0]

    def test_window_expires(self, store):
        for i in range(3):
            is_rate_limited(store, "k", now=float(i))
        assert is_rate_limited(store, "k", now=ONE_DAY - 1)
        assert not is_rate_limited(store, "k", now=ONE_DAY + 10)

    def test_broken_store_lets_request_through(self, tmp_path):
        from qrthis.storage import LocalStore

        path = tmp_path / "store.json"
        path.write_text("not json", encoding="utf-8")
        assert is_rate_limited(LocalStore(path), "k") is False
