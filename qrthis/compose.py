"""Combine a scannable QR code with an AI-generated background, offline.

The AI service only paints the background. The QR pattern always comes
from python-qrcode, so the result scans no matter what the model draws.
"""

from enum import Enum

import qrcode
from qrcode.image.styledpil import StyledPilImage
from qrcode.image.styles.colormasks import ImageColorMask
from qrcode.image.styles.moduledrawers.pil import (
    CircleModuleDrawer,
    GappedSquareModuleDrawer,
    RoundedModuleDrawer,
)
from PIL import Image, ImageDraw


class BlendMode(Enum):
    """How the background and the QR code are combined."""

    OVERLAY = "overlay"  # QR on a light plate in the middle of the artwork
    TINTED = "tinted"    # Artwork colors the dark modules


# Module shape per art style for TINTED mode
STYLE_DRAWERS = {
    "watercolor": CircleModuleDrawer,
    "nature": CircleModuleDrawer,
    "minimalist": RoundedModuleDrawer,
    "corporate": RoundedModuleDrawer,
    "cyberpunk": GappedSquareModuleDrawer,
    "vintage": GappedSquareModuleDrawer,
}

DEFAULT_CANVAS_SIZE = 512


def _center_crop_square(img: Image.Image) -> Image.Image:
    """Take the largest centered square region from the image."""
    width, height = img.size
    if width == height:
        return img

    side = min(width, height)
    left = (width - side) // 2
    top = (height - side) // 2
    return img.crop((left, top, left + side, top + side))


def overlay_qr_on_background(
    qr_image: Image.Image,
    background: Image.Image,
    size: int = DEFAULT_CANVAS_SIZE,
    qr_ratio: float = 0.62,
    plate_padding: int = 12,
    plate_opacity: int = 230,
) -> Image.Image:
    """Lay ``qr_image`` in the middle of ``background`` on a rounded light plate.

    Args:
        qr_image: The rendered QR code (its own quiet zone included).
        background: Artwork; center-cropped to a square and resized.
        size: Output width and height in pixels.
        qr_ratio: Share of the canvas width taken by the QR code.
        plate_padding: Extra plate margin around the QR code, in pixels.
        plate_opacity: Alpha of the plate behind the code (0-255).

    Returns:
        RGB image of ``size`` x ``size`` pixels.
    """
    if not 0.2 <= qr_ratio <= 1.0:
        raise ValueError(f"qr_ratio must be between 0.2 and 1.0, got {qr_ratio}")

    canvas = _center_crop_square(background.convert("RGB")).resize((size, size), Image.LANCZOS)
    canvas = canvas.convert("RGBA")

    qr_side = int(size * qr_ratio)
    qr = qr_image.convert("RGB").resize((qr_side, qr_side), Image.NEAREST)
    offset = (size - qr_side) // 2

    plate = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    ImageDraw.Draw(plate).rounded_rectangle(
        (
            offset - plate_padding,
            offset - plate_padding,
            offset + qr_side + plate_padding,
            offset + qr_side + plate_padding,
        ),
        radius=plate_padding * 2,
        fill=(255, 255, 255, plate_opacity),
    )
    canvas = Image.alpha_composite(canvas, plate).convert("RGB")
    canvas.paste(qr, (offset, offset))
    return canvas


def tint_qr_with_background(
    data: str,
    background: Image.Image,
    style: str | None = None,
    box_size: int = 16,
) -> Image.Image:
    """Render ``data`` with the artwork coloring the dark modules."""
    qr = qrcode.QRCode(
        error_correction=qrcode.ERROR_CORRECT_H,
        box_size=box_size,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)

    drawer_class = STYLE_DRAWERS.get(style, GappedSquareModuleDrawer)

    mask = _center_crop_square(background.convert("RGB"))

    img = qr.make_image(
        image_factory=StyledPilImage,
        module_drawer=drawer_class(),
        color_mask=ImageColorMask(back_color=(255, 255, 255), color_mask_image=mask),
    )
    return img.convert("RGB")


def compose_art_qr(
    content: str,
    background: Image.Image,
    qr_image: Image.Image,
    mode: BlendMode = BlendMode.OVERLAY,
    style: str | None = None,
    size: int = DEFAULT_CANVAS_SIZE,
) -> Image.Image:
    if mode == BlendMode.TINTED:
        tinted = tint_qr_with_background(content, background, style=style)
        return tinted.resize((size, size), Image.NEAREST)
    return overlay_qr_on_background(qr_image, background, size=size)
