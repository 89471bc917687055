"""Thumbnail generator service.

Wraps Pillow to render the photo of an image analysis (stored as a data
URI in the history) as a small PNG for history listings.

Example:
    tg = ThumbnailGenerator(max_size=(160, 160))
    png_bytes = tg.create_thumbnail(record.input)
"""
from __future__ import annotations

import io
from typing import Tuple

from PIL import Image

from utils.media_validation import parse_data_uri


class ThumbnailGenerator:
    """Generate PNG thumbnails that fit within `max_size`, preserving aspect ratio.

    Args:
        max_size: Maximum width and height for the thumbnail. Defaults to (160, 160).
        background: Color used to flatten transparent images. Defaults to white.
    """

    def __init__(self, max_size: Tuple[int, int] = (160, 160), background: Tuple[int, int, int] | None = None):
        self.max_size = max_size
        self.background = background or (255, 255, 255)

    def create_thumbnail(self, image_reference: str) -> bytes:
        """Return PNG thumbnail bytes for an image data URI.

        Raises:
            ValueError: If the reference cannot be decoded or opened as an image.
        """
        mime_type, raw = parse_data_uri(image_reference)
        if not mime_type.startswith("image/"):
            raise ValueError(f"Reference is not an image: {mime_type or 'unknown type'}")

        try:
            src = Image.open(io.BytesIO(raw))
            src.load()
        except Exception as exc:
            raise ValueError("Decoded bytes are not a supported image format") from exc

        src = src.convert("RGBA")
        src.thumbnail(self.max_size, Image.LANCZOS)

        flattened = Image.new("RGB", src.size, self.background)
        flattened.paste(src, mask=src.split()[3])

        out_io = io.BytesIO()
        flattened.save(out_io, format="PNG", optimize=True)
        return out_io.getvalue()
