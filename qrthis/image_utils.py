"""Image helpers: loading artwork, saving output and checking scannability."""

import os
from enum import Enum

from PIL import Image

from qrthis import DEFAULT_WIDTH


class VerifyResult(Enum):
    """Result of QR scannability verification."""
    SCANNABLE = "scannable"
    NOT_SCANNABLE = "not_scannable"
    SKIPPED = "skipped"  # pyzbar not installed


def load_and_resize_image(path: str, size: int = DEFAULT_WIDTH) -> Image.Image:
    """Load an image, center-crop it to a square and resize it.

    Raises:
        FileNotFoundError: If the image file doesn't exist.
        ValueError: If the file is not a valid image.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Image not found: {path}")

    try:
        with Image.open(path) as img:
            img = img.convert("RGB")
    except (OSError, SyntaxError) as e:
        raise ValueError(f"Could not open image '{path}': {e}")

    width, height = img.size
    side = min(width, height)
    left = (width - side) // 2
    top = (height - side) // 2
    img = img.crop((left, top, left + side, top + side))
    return img.resize((size, size), Image.LANCZOS)


def save_output(image: Image.Image, output_path: str) -> str:
    """Save ``image``; the format follows the output extension (.png, .jpg, .webp)."""
    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    ext = os.path.splitext(output_path)[1].lower()
    if ext in (".jpg", ".jpeg"):
        image = image.convert("RGB")
    image.save(output_path)
    return output_path


def verify_qr_scannable(image: Image.Image) -> tuple[VerifyResult, str | None]:
    """Attempt to decode a QR code from the image.

    Uses pyzbar if available, otherwise returns SKIPPED.

    Returns:
        Tuple of (VerifyResult, decoded_data: str | None).
    """
    try:
        from pyzbar.pyzbar import decode as pyzbar_decode
    except ImportError:
        return VerifyResult.SKIPPED, None

    results = pyzbar_decode(image)
    if results:
        return VerifyResult.SCANNABLE, results[0].data.decode("utf-8")
    return VerifyResult.NOT_SCANNABLE, None


def cleanup_temp_files(*paths: str) -> None:
    """Remove temporary files, silently ignoring errors."""
    for path in paths:
        if path:
            try:
                os.unlink(path)
            except OSError:
                pass
