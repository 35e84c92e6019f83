"""Live QR generator session: detection, auto-optimization and debounced preview.

``QRGeneratorSession`` keeps the state an input box needs while the user
types. Every keystroke (``set_input_text``) re-detects the content type and
restarts two timers: the preview timer renders the QR code once typing
pauses, and the optimization timer offers a tidied-up version of the text a
little later. ``SecureQRGenerator`` wraps a session with rate limits and
content validation for explicit "generate" actions.
"""

import hashlib
import logging
import os
import platform
import re
import threading
import time
from typing import Callable

from qrthis import (
    DEFAULT_BACKGROUND,
    DEFAULT_FOREGROUND,
    DEFAULT_MARGIN,
    DEFAULT_WIDTH,
    MAX_CHARACTERS,
)
from qrthis.analytics import get_personalized_tips, track_usage
from qrthis.errors import QRGenerationError
from qrthis.optimization import (
    detect_content_type,
    get_optimal_error_correction,
    optimize_text,
)
from qrthis.qr_generator import generate_qr_code, to_data_url
from qrthis.security import RateLimiter, validate_qr_content
from qrthis.storage import LocalStore

logger = logging.getLogger(__name__)


class Debouncer:
    """Run ``fn`` once calls stop arriving for ``delay`` seconds.

    Each ``call`` cancels the pending timer and starts a new one, so only
    the last arguments are ever used.
    """

    def __init__(self, delay: float, fn: Callable[..., object]):
        self.delay = delay
        self._fn = fn
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    def call(self, *args) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self._fn, args)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None and self._timer.is_alive()


class QRGeneratorSession:
    def __init__(
        self,
        store: LocalStore | None = None,
        max_characters: int = MAX_CHARACTERS,
        debounce_delay: float = 0.3,
        optimization_delay: float = 2.0,
        badge_duration: float = 5.0,
        width: int = DEFAULT_WIDTH,
        margin: int = DEFAULT_MARGIN,
        foreground: str = DEFAULT_FOREGROUND,
        background: str = DEFAULT_BACKGROUND,
        on_change: Callable[["QRGeneratorSession"], None] | None = None,
    ):
        self.store = store
        self.max_characters = max_characters
        self.width = width
        self.margin = margin
        self.foreground = foreground
        self.background = background
        self.on_change = on_change

        self.input_text = ""
        self.original_text = ""
        self.qr_code_data_url = ""
        self.is_generating = False
        self.error: str | None = None
        self.optimization_shown = False
        self.saved_chars = 0
        self.content_type = "text"
        self.error_correction_level = "M"
        self.personalized_tips: list[str] = get_personalized_tips(store) if store else []

        self._lock = threading.RLock()
        self._preview = Debouncer(debounce_delay, self.generate)
        self._optimizer = Debouncer(optimization_delay, self.apply_optimization)
        self._badge = Debouncer(badge_duration, self._hide_badge)

    @property
    def character_count(self) -> int:
        return len(self.input_text)

    @property
    def is_over_limit(self) -> bool:
        return self.character_count > self.max_characters

    def _set_text(self, text: str) -> None:
        self.input_text = text
        self.content_type = detect_content_type(text)
        self.error_correction_level = get_optimal_error_correction(text)
        self._preview.call(text)

    def set_input_text(self, text: str) -> None:
        """Handle a keystroke: update detection and restart both timers."""
        with self._lock:
            self._set_text(text)
            self.optimization_shown = False
            if text.strip():
                self._optimizer.call()
            else:
                self._optimizer.cancel()

    def apply_optimization(self) -> bool:
        """Replace the input with its optimized form if that saves anything.

        The previous text is kept so ``undo_optimization`` can restore it.
        """
        with self._lock:
            if not self.input_text.strip() or self.optimization_shown:
                return False

            result = optimize_text(self.input_text)
            if result.saved <= 0:
                return False

            self.original_text = self.input_text
            self.saved_chars = result.saved
            self.optimization_shown = True
            self._set_text(result.optimized)
            self._badge.call()
            logger.debug("Optimized input, saved %d characters", result.saved)
            return True

    def _hide_badge(self) -> None:
        with self._lock:
            self.optimization_shown = False

    def undo_optimization(self) -> None:
        with self._lock:
            if not self.original_text:
                return
            self._optimizer.cancel()
            self._badge.cancel()
            self._set_text(self.original_text)
            self.original_text = ""
            self.optimization_shown = False
            self.saved_chars = 0

    def generate(self, text: str | None = None) -> str:
        """Render ``text`` (default: the current input) and return its data URL.

        Problems are reported through ``error``; an empty string comes back
        whenever there is nothing to show.
        """
        text = self.input_text if text is None else text

        with self._lock:
            if not text.strip():
                self.qr_code_data_url = ""
                self.error = None
                self._notify()
                return ""

            if len(text) > self.max_characters:
                self.error = f"Text too long (max {self.max_characters} characters)"
                self.qr_code_data_url = ""
                self._notify()
                return ""

            self.is_generating = True
            self.error = None

            try:
                image = generate_qr_code(
                    text,
                    error_correction=get_optimal_error_correction(text),
                    width=self.width,
                    margin=self.margin,
                    foreground=self.foreground,
                    background=self.background,
                )
                self.qr_code_data_url = to_data_url(image)

                if self.store is not None:
                    track_usage(self.store, text, detect_content_type(text))
                    self.personalized_tips = get_personalized_tips(self.store)
            except QRGenerationError as e:
                logger.warning("QR generation failed: %s", e)
                self.error = "Failed to generate QR code. Please try again."
                self.qr_code_data_url = ""
            finally:
                self.is_generating = False

            self._notify()
            return self.qr_code_data_url

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self)

    def close(self) -> None:
        """Cancel every pending timer."""
        self._preview.cancel()
        self._optimizer.cancel()
        self._badge.cancel()


def default_client_id() -> str:
    """A stable identifier for this machine and user, used as a rate-limit key."""
    fingerprint = "|".join([
        platform.platform(),
        platform.node(),
        os.environ.get("USER", os.environ.get("USERNAME", "")),
        os.environ.get("LANG", ""),
        str(time.timezone),
    ])
    return "client_" + hashlib.sha256(fingerprint.encode("utf-8")).hexdigest()[:12]


qr_rate_limiter = RateLimiter(15, 60.0)
generate_rate_limiter = RateLimiter(5, 10.0)

_UNSAFE_CONTENT = [
    re.compile(p, re.IGNORECASE | re.DOTALL)
    for p in (
        r"<script[^>]*>.*?</script>",
        r"javascript:",
        r"data:text/html",
        r"vbscript:",
    )
]


class SecureQRGenerator:
    """Gate explicit generations behind rate limits and validation.

    Any refusal is stored in ``security_error`` and nothing is rendered.
    """

    def __init__(
        self,
        session: QRGeneratorSession,
        client_id: str | None = None,
        qr_limiter: RateLimiter = qr_rate_limiter,
        burst_limiter: RateLimiter = generate_rate_limiter,
        min_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.session = session
        self.client_id = client_id or default_client_id()
        self.qr_limiter = qr_limiter
        self.burst_limiter = burst_limiter
        self.min_interval = min_interval
        self._clock = clock
        self._last_generation: float | None = None
        self.security_error: str | None = None

    def _refuse(self, message: str) -> None:
        logger.info("Generation refused for %s: %s", self.client_id, message)
        self.security_error = message

    def generate(self, text: str, content_type: str = "text") -> str | None:
        self.security_error = None
        now = self._clock()

        if not self.qr_limiter.is_allowed(self.client_id):
            self._refuse("Rate limit exceeded. Please wait before generating another QR code.")
            return None

        if not self.burst_limiter.is_allowed(self.client_id):
            self._refuse("Please wait a moment between generations.")
            return None

        if self._last_generation is not None and now - self._last_generation < self.min_interval:
            self._refuse("Please wait at least 1 second between generations.")
            return None

        validation = validate_qr_content(text, content_type)
        if not validation.is_valid:
            self._refuse(validation.error or "Invalid content detected")
            return None

        if any(p.search(text) for p in _UNSAFE_CONTENT):
            self._refuse("Content contains potentially unsafe elements")
            return None

        self._last_generation = now
        return self.session.generate(validation.sanitized or text)

    def clear_security_error(self) -> None:
        self.security_error = None

    def reset_security(self) -> None:
        self.qr_limiter.reset(self.client_id)
        self.burst_limiter.reset(self.client_id)
        self.security_error = None
        self._last_generation = None
