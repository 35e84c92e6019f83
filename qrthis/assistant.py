"""Chat-style assistant that turns plain requests into QR content."""

import re
from dataclasses import dataclass, field
from datetime import datetime

from qrthis.formatters import format_wifi

GREETING = (
    "Hi! I'm your QR code AI assistant. I can help you create the perfect QR code "
    "for any use case. What would you like to create today?"
)


@dataclass
class Message:
    role: str  # "user" or "assistant"
    content: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class AssistantReply:
    content: str
    generated_content: str | None = None


_WIFI_CREDENTIALS = re.compile(
    r"name\s*(?:is|:|=)?\s*['\"]?(?P<ssid>[^'\"]+?)['\"]?"
    r"\s*(?:,|and|with)?\s*password\s*(?:is|:|=)?\s*"
    r"(?:'(?P<single_quoted>[^']+)'|\"(?P<double_quoted>[^\"]+)\"|['\"]?(?P<password>[^'\"\s]+))",
    re.IGNORECASE,
)
_URL_IN_TEXT = re.compile(r"(https?://\S+|www\.\S+|[a-zA-Z0-9-]+\.[a-zA-Z]{2,})")


def _has_any(text: str, *words: str) -> bool:
    return any(word in text for word in words)


def generate_response(user_input: str) -> AssistantReply:
    """Answer one message. Keyword groups are checked in priority order."""
    lowered = user_input.lower()

    if _has_any(lowered, "wifi", "network", "password"):
        match = _WIFI_CREDENTIALS.search(user_input)
        if match:
            ssid = match.group("ssid").strip()
            # quoted passwords may contain spaces
            password = next(
                group for group in match.group("single_quoted", "double_quoted", "password")
                if group is not None
            )
            return AssistantReply(
                f'Perfect! I\'ll create a WiFi QR code for "{ssid}". When scanned, devices '
                "will automatically connect to your network.\n\n"
                "💡 Tip: Print this and place it where guests can easily see it!",
                format_wifi(ssid, password),
            )
        return AssistantReply(
            "I'll help you create a WiFi QR code! I need:\n"
            "• Network name (SSID)\n• Password\n• Security type (usually WPA/WPA2)\n\n"
            "Please tell me your network name and password, like: "
            "'Network name is Cafe_Main and password is coffee123'"
        )

    if _has_any(lowered, "http", "www", "website", "link"):
        match = _URL_IN_TEXT.search(user_input)
        if match:
            url = match.group(0)
            if not url.lower().startswith("http"):
                url = "https://" + url
            return AssistantReply(
                f"Great! I'll create a QR code for {url}. This will open the website "
                "directly when scanned.\n\n"
                "💡 Tip: Test the link first to make sure it works correctly!",
                url,
            )
        return AssistantReply(
            "I'll help you create a website QR code! Please share the URL you'd like to "
            "use. I can also help optimize long URLs for better scanning."
        )

    if _has_any(lowered, "contact", "business", "phone", "email"):
        return AssistantReply(
            "I'll help create a contact QR code! What information should be included?\n"
            "• Name\n• Phone number\n• Email address\n• Company/Title\n• Website\n\n"
            "I can format this as a vCard for easy contact saving."
        )

    if _has_any(lowered, "event", "wedding", "party", "meeting"):
        return AssistantReply(
            "Exciting! For events, I can help create QR codes for:\n"
            "• Event website with details\n• RSVP form\n• Calendar invite\n"
            "• Location/directions\n• Photo sharing\n\n"
            "What's most important for your event?"
        )

    if _has_any(lowered, "instagram", "facebook", "twitter", "social"):
        return AssistantReply(
            "Perfect for social media! I can create QR codes for:\n"
            "• Instagram profile\n• Facebook page\n• Twitter/X profile\n• LinkedIn\n"
            "• TikTok\n• Or all profiles in one link\n\n"
            "Which platform would you like to start with?"
        )

    return AssistantReply(
        "I can help you create QR codes for:\n"
        "• 📶 WiFi networks\n• 🌐 Websites & URLs\n• 📞 Contact information\n"
        "• 📅 Events & calendars\n• 📱 Social media profiles\n• 📧 Email addresses\n"
        "• 💬 Text messages\n\nWhat would you like to create?"
    )


class QRAssistant:
    """Conversation state: the message log plus the last generated content."""

    def __init__(self):
        self.messages: list[Message] = [Message("assistant", GREETING)]
        self.generated_content: str | None = None

    def send(self, text: str) -> AssistantReply | None:
        """Post a user message and record the reply. Blank input is ignored."""
        if not text.strip():
            return None

        self.messages.append(Message("user", text))
        reply = generate_response(text)
        self.messages.append(Message("assistant", reply.content))

        if reply.generated_content:
            self.generated_content = reply.generated_content
        return reply
