"""Shorten long URLs so they encode into smaller, easier-to-scan codes."""

import logging
from dataclasses import dataclass
from urllib.parse import urlsplit

import requests

logger = logging.getLogger(__name__)

TINYURL_API = "https://tinyurl.com/api-create.php"
DEFAULT_TIMEOUT_SECONDS = 10


@dataclass
class UrlOptimizationBenefit:
    chars_saved: int
    percent_saved: int
    scan_improvement: str


def should_shorten_url(url: str) -> bool:
    """Long links and links carrying a query or fragment are worth shortening."""
    return len(url) > 60 or "?" in url or "#" in url


def is_valid_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return bool(parts.scheme) and bool(parts.netloc or parts.path)


def shorten_url(url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> str:
    """Shorten ``url`` with TinyURL's public API.

    Any failure (bad input, network, unexpected reply) is logged and the
    original URL comes back unchanged.
    """
    try:
        if not is_valid_url(url):
            raise ValueError("Invalid URL")

        response = requests.get(TINYURL_API, params={"url": url}, timeout=timeout)
        if not response.ok:
            raise ConnectionError("Shortening service unavailable")

        short_url = response.text.strip()
        if "tinyurl.com" not in short_url:
            raise ValueError("Invalid response from shortening service")
        return short_url
    except (requests.RequestException, ConnectionError, ValueError) as e:
        logger.error("URL shortening failed: %s", e)
        return url


def get_url_optimization_benefit(original_url: str, shortened_url: str) -> UrlOptimizationBenefit:
    chars_saved = len(original_url) - len(shortened_url)
    percent_saved = round(chars_saved / len(original_url) * 100) if original_url else 0

    scan_improvement = "Better"
    if percent_saved > 70:
        scan_improvement = "Excellent"
    elif percent_saved > 50:
        scan_improvement = "Much Better"

    return UrlOptimizationBenefit(chars_saved, percent_saved, scan_improvement)
