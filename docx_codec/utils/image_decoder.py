"""
Image decoding helpers.

Reads pixel dimensions from raster image bytes with Pillow and maps file
extensions to image formats.
"""

import io
import logging
import posixpath
from typing import Tuple

from PIL import Image as PILImage
from PIL import UnidentifiedImageError

from ..exceptions import MediaError

logger = logging.getLogger(__name__)

FORMAT_BY_EXTENSION = {
    ".png": "png",
    ".jpg": "jpg",
    ".jpeg": "jpeg",
    ".gif": "gif",
    ".bmp": "bmp",
    ".tif": "tif",
    ".tiff": "tiff",
    ".svg": "svg",
    ".webp": "webp",
    ".wmf": "wmf",
    ".emf": "emf",
}

DEFAULT_FORMAT = "png"


def detect_format(filename: str) -> str:
    """Detect the image format from a file extension, defaulting to PNG."""
    ext = posixpath.splitext((filename or "").lower())[1]
    return FORMAT_BY_EXTENSION.get(ext, DEFAULT_FORMAT)


def read_dimensions(data: bytes) -> Tuple[int, int]:
    """
    Read pixel dimensions of an image.

    Args:
        data: Raw image bytes

    Returns:
        ``(width, height)`` in pixels

    Raises:
        MediaError: If the bytes are not a decodable image
    """
    if not data:
        raise MediaError("image data is empty", operation="read_dimensions")
    try:
        with PILImage.open(io.BytesIO(data)) as image:
            width, height = image.size
    except (UnidentifiedImageError, OSError) as e:
        raise MediaError("cannot decode image", details=str(e), operation="read_dimensions") from e
    logger.debug(f"Decoded image dimensions {width}x{height}")
    return width, height
