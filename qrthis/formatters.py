"""Payload templates for structured QR content (WiFi, vCard, mail, phone)."""

WIFI_SECURITY_TYPES = ("WPA", "WEP", "nopass")


def format_wifi(ssid: str, password: str, security: str = "WPA") -> str:
    """Build the WiFi join payload understood by phone cameras.

    >>> format_wifi("Cafe_Main", "coffee123")
    'WIFI:T:WPA;S:Cafe_Main;P:coffee123;;'
    """
    return f"WIFI:T:{security or 'WPA'};S:{ssid};P:{password};;"


def format_vcard(
    name: str,
    phone: str | None = None,
    email: str | None = None,
    organization: str | None = None,
) -> str:
    """Build a vCard 3.0 block. Empty optional fields are left out."""
    lines = ["BEGIN:VCARD", "VERSION:3.0", f"FN:{name}"]
    if phone:
        lines.append(f"TEL:{phone}")
    if email:
        lines.append(f"EMAIL:{email}")
    if organization:
        lines.append(f"ORG:{organization}")
    lines.append("END:VCARD")
    return "\n".join(lines)


def format_email(address: str) -> str:
    return f"mailto:{address}"


def format_phone(number: str) -> str:
    return f"tel:{number}"
