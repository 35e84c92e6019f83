"""Local usage analytics kept in the user's own store, never sent anywhere."""

import logging
from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime
from urllib.parse import urlsplit

from qrthis.storage import LocalStore

logger = logging.getLogger(__name__)

STORAGE_KEY = "qrthis_analytics"
MAX_TRACKED_LENGTHS = 100


@dataclass
class Analytics:
    content_types: dict[str, int] = field(default_factory=dict)
    common_domains: dict[str, int] = field(default_factory=dict)
    avg_length: float = 0.0
    time_patterns: dict[str, int] = field(default_factory=dict)
    total_generated: int = 0
    lengths: list[int] = field(default_factory=list)


def get_analytics(store: LocalStore) -> Analytics:
    try:
        stored = store.get_item(STORAGE_KEY)
        if stored:
            return Analytics(**stored)
    except (OSError, ValueError, TypeError) as e:
        logger.info("Error loading analytics: %s", e)
    return Analytics()


def track_usage(
    store: LocalStore,
    content: str,
    content_type: str,
    now: datetime | None = None,
) -> None:
    """Count one generated code. Errors are logged and swallowed."""
    now = now or datetime.now()
    try:
        analytics = get_analytics(store)

        types = Counter(analytics.content_types)
        types[content_type] += 1
        analytics.content_types = dict(types)

        if content_type == "url":
            domain = urlsplit(content.strip()).hostname
            if domain:
                analytics.common_domains[domain] = analytics.common_domains.get(domain, 0) + 1

        analytics.lengths = (analytics.lengths + [len(content)])[-MAX_TRACKED_LENGTHS:]
        analytics.avg_length = sum(analytics.lengths) / len(analytics.lengths)

        hour = str(now.hour)
        analytics.time_patterns[hour] = analytics.time_patterns.get(hour, 0) + 1

        analytics.total_generated += 1

        store.set_item(STORAGE_KEY, asdict(analytics))
    except (OSError, ValueError, TypeError) as e:
        logger.info("Error tracking usage: %s", e)


def get_personalized_tips(store: LocalStore) -> list[str]:
    """At most two tips based on what the user tends to generate."""
    analytics = get_analytics(store)
    tips: list[str] = []

    if analytics.total_generated > 10 and analytics.content_types:
        most_used, count = Counter(analytics.content_types).most_common(1)[0]
        if most_used == "url" and count > 5:
            tips.append("You create a lot of URL QR codes. Consider bookmarking QRThis for quick access!")
        if most_used == "wifi" and count > 2:
            tips.append("You're a WiFi QR pro! Did you know you can create guest network codes too?")

    if analytics.avg_length > 500:
        tips.append("Your QR codes tend to be long. Try our optimization features for better scanning.")

    if analytics.total_generated > 20:
        tips.append("You're a power user! Remember you can save QR codes directly to your photos.")

    return tips[:2]
