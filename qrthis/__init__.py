"""QRThis: smart QR code generation with content detection and AI art."""

__version__ = "1.0.0"

# Shared constants
MAX_CHARACTERS = 2000  # Longest content accepted from the input box
DEFAULT_WIDTH = 512  # Rendered QR width in pixels
DEFAULT_MARGIN = 2  # Quiet zone in modules
DEFAULT_FOREGROUND = "#000000"
DEFAULT_BACKGROUND = "#FFFFFF"
