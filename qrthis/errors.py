"""Exception types raised across QRThis."""


class QRThisError(Exception):
    """Base class for all QRThis errors."""


class QRGenerationError(QRThisError):
    """The QR encoder could not render the content."""


class RateLimitExceeded(QRThisError):
    """A client-side sliding window is full."""


class ArtGenerationError(QRThisError):
    """The AI image service failed or returned no image."""

    status_code = 500


class ArtRateLimitError(ArtGenerationError):
    status_code = 429


class ArtCreditsExhaustedError(ArtGenerationError):
    status_code = 402


class ArtServiceNotConfigured(ArtGenerationError):
    """No API key is available for the AI image service."""


class SignupValidationError(QRThisError):
    """One or more signup fields are invalid.

    ``errors`` maps the field name to its message.
    """

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))


class DuplicateSignupError(QRThisError):
    """The email already asked to be notified about this feature recently."""
