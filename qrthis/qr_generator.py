"""Render QR codes through python-qrcode and export them as images."""

import base64
import io
import os

import qrcode
from qrcode.exceptions import DataOverflowError
from qrcode.image.styledpil import StyledPilImage
from qrcode.image.styles.colormasks import SolidFillColorMask
from qrcode.image.styles.moduledrawers.pil import (
    CircleModuleDrawer,
    GappedSquareModuleDrawer,
    RoundedModuleDrawer,
    SquareModuleDrawer,
)
from PIL import Image

from qrthis import (
    DEFAULT_BACKGROUND,
    DEFAULT_FOREGROUND,
    DEFAULT_MARGIN,
    DEFAULT_WIDTH,
    MAX_CHARACTERS,
)
from qrthis.brand_colors import hex_to_rgb
from qrthis.errors import QRGenerationError

ERROR_CORRECTION_LEVELS = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}

MODULE_STYLES = {
    "square": SquareModuleDrawer,
    "gapped": GappedSquareModuleDrawer,
    "rounded": RoundedModuleDrawer,
    "dots": CircleModuleDrawer,
}


def _rgb(color: str) -> tuple[int, int, int]:
    rgb = hex_to_rgb(color)
    if rgb is None:
        raise QRGenerationError(f"Invalid color '{color}'. Use a hex value like #1A2B3C.")
    return rgb


def generate_qr_code(
    content: str,
    error_correction: str = "M",
    width: int = DEFAULT_WIDTH,
    margin: int = DEFAULT_MARGIN,
    foreground: str = DEFAULT_FOREGROUND,
    background: str = DEFAULT_BACKGROUND,
    module_style: str | None = None,
) -> Image.Image:
    """Encode ``content`` as a square RGB QR image ``width`` pixels wide.

    Args:
        content: Text to encode, already formatted for its type.
        error_correction: One of L, M, Q, H.
        width: Output width and height in pixels.
        margin: Quiet zone around the code, in modules.
        foreground: Hex color of the dark modules.
        background: Hex color of the light modules and margin.
        module_style: Optional drawer name from ``MODULE_STYLES``.

    Raises:
        QRGenerationError: If the content is empty, too long for a QR code,
            or a parameter is invalid.
    """
    if not content.strip():
        raise QRGenerationError("QR content cannot be empty.")

    if len(content) > MAX_CHARACTERS:
        raise QRGenerationError(
            f"QR content too long ({len(content)} chars). Maximum is {MAX_CHARACTERS}."
        )

    level = ERROR_CORRECTION_LEVELS.get(error_correction)
    if level is None:
        raise QRGenerationError(
            f"Unknown error correction level '{error_correction}'. Choose from L, M, Q, H."
        )

    fill = _rgb(foreground)
    back = _rgb(background)

    qr = qrcode.QRCode(error_correction=level, box_size=10, border=margin)
    qr.add_data(content)
    try:
        qr.make(fit=True)
    except DataOverflowError as e:
        raise QRGenerationError(
            f"Content does not fit in a QR code at error correction {error_correction}."
        ) from e

    if module_style:
        drawer_class = MODULE_STYLES.get(module_style)
        if drawer_class is None:
            raise QRGenerationError(
                f"Unknown module style '{module_style}'. Choose from: {', '.join(MODULE_STYLES)}"
            )
        qr_image = qr.make_image(
            image_factory=StyledPilImage,
            module_drawer=drawer_class(),
            color_mask=SolidFillColorMask(back_color=back, front_color=fill),
        )
    else:
        qr_image = qr.make_image(fill_color=fill, back_color=back)

    qr_image = qr_image.convert("RGB")
    # Nearest keeps module edges sharp at any width
    return qr_image.resize((width, width), Image.NEAREST)


def to_data_url(image: Image.Image, fmt: str = "PNG") -> str:
    """Encode an image as a ``data:`` URL, the form previews are passed around in."""
    buffer = io.BytesIO()
    image.save(buffer, fmt)
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/{fmt.lower()};base64,{encoded}"


def image_from_data_url(data_url: str) -> Image.Image:
    """Decode a base64 ``data:image/...`` URL back into an RGB image."""
    if not data_url.startswith("data:image/") or ";base64," not in data_url:
        raise ValueError("Not a base64 image data URL")
    payload = data_url.split(",", 1)[1]
    image = Image.open(io.BytesIO(base64.b64decode(payload)))
    return image.convert("RGB")


def save_qr_image(image: Image.Image, output_path: str) -> str:
    """Save to ``output_path``, creating parent directories. Returns the path."""
    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    image.save(output_path)
    return output_path
