"""Brand color intelligence: contrast checks and palette suggestions."""

import logging
import math
import re
from dataclasses import dataclass, field
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

MIN_SCAN_CONTRAST = 3.0


@dataclass(frozen=True)
class BrandColors:
    primary: str
    secondary: str
    palette: list[str] = field(default_factory=list)
    source: str = ""


@dataclass(frozen=True)
class ColorValidation:
    is_valid: bool
    contrast: float
    recommendation: str
    accessibility: str  # "AAA", "AA" or "FAIL"


@dataclass(frozen=True)
class ColorSuggestion:
    foreground: str
    background: str
    name: str
    validation: ColorValidation


_HEX_COLOR = re.compile(r"#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})", re.IGNORECASE)


def hex_to_rgb(color: str) -> tuple[int, int, int] | None:
    match = _HEX_COLOR.fullmatch(color)
    if not match:
        return None
    return tuple(int(part, 16) for part in match.groups())


def relative_luminance(r: int, g: int, b: int) -> float:
    """WCAG 2.x relative luminance of an sRGB color."""

    def channel(c: int) -> float:
        c = c / 255
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    return 0.2126 * channel(r) + 0.7152 * channel(g) + 0.0722 * channel(b)


def calculate_contrast(foreground: str, background: str) -> float:
    """Contrast ratio between two hex colors, 1.0 to 21.0 (0 if unparsable)."""
    fg = hex_to_rgb(foreground)
    bg = hex_to_rgb(background)
    if fg is None or bg is None:
        return 0.0

    l1 = relative_luminance(*fg)
    l2 = relative_luminance(*bg)
    lighter, darker = max(l1, l2), min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)


def _round_half_up(value: float, digits: int = 2) -> float:
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def validate_qr_colors(foreground: str, background: str) -> ColorValidation:
    contrast = calculate_contrast(foreground, background)

    if contrast >= 7:
        accessibility, recommendation = "AAA", "Excellent contrast for scanning"
    elif contrast >= 4.5:
        accessibility, recommendation = "AA", "Good contrast for scanning"
    elif contrast >= MIN_SCAN_CONTRAST:
        accessibility, recommendation = "FAIL", "Acceptable for QR codes but not ideal"
    else:
        accessibility, recommendation = "FAIL", "Poor contrast - may not scan reliably"

    return ColorValidation(
        is_valid=contrast >= MIN_SCAN_CONTRAST,
        contrast=_round_half_up(contrast),
        recommendation=recommendation,
        accessibility=accessibility,
    )


KNOWN_BRAND_COLORS = {
    "twitter.com": BrandColors(
        "#1DA1F2", "#14171A",
        ["#1DA1F2", "#14171A", "#657786", "#AAB8C2", "#E1E8ED"], "Known brand colors",
    ),
    "facebook.com": BrandColors(
        "#1877F2", "#42145F",
        ["#1877F2", "#42145F", "#E4E6EA", "#F0F2F5", "#FFFFFF"], "Known brand colors",
    ),
    "instagram.com": BrandColors(
        "#E4405F", "#F77737",
        ["#E4405F", "#F77737", "#FCAF45", "#833AB4", "#C13584"], "Known brand colors",
    ),
    "linkedin.com": BrandColors(
        "#0A66C2", "#004182",
        ["#0A66C2", "#004182", "#378FE9", "#71C5E8", "#F3F6F8"], "Known brand colors",
    ),
    "youtube.com": BrandColors(
        "#FF0000", "#282828",
        ["#FF0000", "#282828", "#606060", "#909090", "#F9F9F9"], "Known brand colors",
    ),
    "github.com": BrandColors(
        "#24292F", "#0969DA",
        ["#24292F", "#0969DA", "#656D76", "#8B949E", "#F6F8FA"], "Known brand colors",
    ),
}

GENERIC_PALETTE = BrandColors(
    "#2563EB", "#1E40AF",
    ["#2563EB", "#1E40AF", "#3B82F6", "#60A5FA", "#93C5FD"], "Generic professional palette",
)


def _extract_domain(url: str) -> str | None:
    try:
        parts = urlsplit(url.strip())
        hostname = parts.hostname
    except ValueError:
        return None
    if not parts.scheme or not hostname:
        return None
    return hostname


def extract_brand_colors(url: str) -> BrandColors | None:
    """Palette for the site behind ``url``; None when it is not a URL."""
    domain = _extract_domain(url)
    if domain is None:
        logger.debug("No domain in %r, skipping brand colors", url)
        return None
    return KNOWN_BRAND_COLORS.get(domain, GENERIC_PALETTE)


def generate_qr_color_suggestions(brand_colors: BrandColors) -> list[ColorSuggestion]:
    """Scannable foreground/background pairs from a palette, best first."""
    suggestions = [
        ColorSuggestion(color, "#FFFFFF", "Brand Color on White", validate_qr_colors(color, "#FFFFFF"))
        for color in brand_colors.palette
    ]
    suggestions += [
        ColorSuggestion("#FFFFFF", color, "White on Brand Color", validate_qr_colors("#FFFFFF", color))
        for color in brand_colors.palette
    ]

    valid = [s for s in suggestions if s.validation.is_valid]
    return sorted(valid, key=lambda s: s.validation.contrast, reverse=True)
