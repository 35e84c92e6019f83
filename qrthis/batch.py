"""Batch processing: many QR codes from one pasted list."""

import io
import logging
import os
import re
import time
import zipfile
from dataclasses import dataclass, field

from PIL import Image

from qrthis import DEFAULT_BACKGROUND, DEFAULT_FOREGROUND, DEFAULT_MARGIN, DEFAULT_WIDTH
from qrthis.optimization import OptimizationResult, detect_content_type, optimize_text
from qrthis.qr_generator import generate_qr_code, save_qr_image, to_data_url

logger = logging.getLogger(__name__)

BATCH_DELIMITERS = re.compile(r"[\n,;]")
BATCH_ERROR_CORRECTION = "M"


@dataclass
class BatchItem:
    content: str
    type: str
    optimized: OptimizationResult
    filename: str
    image: Image.Image | None = field(default=None, repr=False)

    @property
    def encoded_content(self) -> str:
        return self.optimized.optimized or self.content

    @property
    def data_url(self) -> str | None:
        return to_data_url(self.image) if self.image is not None else None


def generate_filename(content: str, content_type: str, index: int, timestamp: int | None = None) -> str:
    timestamp = int(time.time() * 1000) if timestamp is None else timestamp
    clean = re.sub(r"[^a-zA-Z0-9]", "", content)[:20]
    return f"qrthis-{content_type}-{clean or index}-{timestamp}.png"


def count_batch_items(text: str) -> int:
    """How many non-empty pieces the delimiters split ``text`` into (untrimmed)."""
    return sum(1 for piece in BATCH_DELIMITERS.split(text) if piece)


def parse_batch_content(text: str, timestamp: int | None = None) -> list[BatchItem]:
    """Split on newlines, commas or semicolons and classify every piece."""
    lines = [line.strip() for line in BATCH_DELIMITERS.split(text)]
    items = []
    for index, line in enumerate(line for line in lines if line):
        content_type = detect_content_type(line)
        items.append(
            BatchItem(
                content=line,
                type=content_type,
                optimized=optimize_text(line),
                filename=generate_filename(line, content_type, index, timestamp),
            )
        )
    return items


def generate_batch(
    items: list[BatchItem],
    width: int = DEFAULT_WIDTH,
    margin: int = DEFAULT_MARGIN,
    foreground: str = DEFAULT_FOREGROUND,
    background: str = DEFAULT_BACKGROUND,
) -> list[BatchItem]:
    """Render every item at error correction M. Fails on the first bad item."""
    for item in items:
        item.image = generate_qr_code(
            item.encoded_content,
            error_correction=BATCH_ERROR_CORRECTION,
            width=width,
            margin=margin,
            foreground=foreground,
            background=background,
        )
    logger.info("Generated %d batch QR codes", len(items))
    return items


def write_batch(items: list[BatchItem], directory: str) -> list[str]:
    """Save rendered items as PNG files in ``directory``; returns the paths."""
    paths = []
    for item in items:
        if item.image is None:
            raise ValueError(f"Batch item '{item.content}' has not been generated yet")
        paths.append(save_qr_image(item.image, os.path.join(directory, item.filename)))
    return paths


def write_batch_zip(items: list[BatchItem], output_path: str) -> str:
    """Bundle rendered items into one ZIP archive."""
    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    with zipfile.ZipFile(output_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for item in items:
            if item.image is None:
                raise ValueError(f"Batch item '{item.content}' has not been generated yet")
            buffer = io.BytesIO()
            item.image.save(buffer, "PNG")
            archive.writestr(item.filename, buffer.getvalue())
    return output_path
