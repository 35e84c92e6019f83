from qrthis.formatters import format_email, format_phone, format_vcard, format_wifi
from qrthis.optimization import detect_content_type


def test_format_wifi():
    assert format_wifi("Cafe_Main", "coffee123") == "WIFI:T:WPA;S:Cafe_Main;P:coffee123;;"
    assert format_wifi("Home", "abcde", "WEP") == "WIFI:T:WEP;S:Home;P:abcde;;"


def test_format_wifi_empty_security_defaults_to_wpa():
    assert format_wifi("Home", "password1", "").startswith("WIFI:T:WPA;")


def test_wifi_payload_is_detected_as_wifi():
    assert detect_content_type(format_wifi("Cafe", "coffee123")) == "wifi"


def test_format_vcard_full():
    card = format_vcard("Ann Lee", phone="+15551234567", email="ann@example.com", organization="Acme")
    assert card.split("\n") == [
        "BEGIN:VCARD",
        "VERSION:3.0",
        "FN:Ann Lee",
        "TEL:+15551234567",
        "EMAIL:ann@example.com",
        "ORG:Acme",
        "END:VCARD",
    ]


def test_format_vcard_skips_empty_fields():
    card = format_vcard("Ann Lee", phone="", email=None)
    assert card == "BEGIN:VCARD\nVERSION:3.0\nFN:Ann Lee\nEND:VCARD"
    assert detect_content_type(card) == "vcard"


def test_email_and_phone_schemes():
    assert format_email("a@b.co") == "mailto:a@b.co"
    assert format_phone("+15551234567") == "tel:+15551234567"
