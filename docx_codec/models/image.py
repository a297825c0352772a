"""
Image model for DOCX documents.

Holds the raw bytes, pixel and EMU size, alt text, relationship id and
placement (inline or floating) of an embedded picture.
"""

import logging
import posixpath
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional

from ..constants import EMU_PER_PIXEL
from ..exceptions import InvalidArgumentError, MediaError
from ..utils.image_decoder import detect_format, read_dimensions
from ..utils.units import emu_to_pixels, inches_to_emu, inches_to_pixels, pixels_to_emu
from .base import Models

logger = logging.getLogger(__name__)


class ImagePositionType(Enum):
    INLINE = "inline"
    FLOATING = "floating"


class HorizontalAlign(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    INSIDE = "inside"
    OUTSIDE = "outside"


class VerticalAlign(Enum):
    TOP = "top"
    CENTER = "center"
    BOTTOM = "bottom"
    INSIDE = "inside"
    OUTSIDE = "outside"


class TextWrapType(Enum):
    NONE = "none"
    SQUARE = "square"
    TIGHT = "tight"
    THROUGH = "through"
    TOP_BOTTOM = "topBottom"
    BEHIND_TEXT = "behindText"
    IN_FRONT_TEXT = "inFrontText"


@dataclass
class ImageSize:
    """Image size in pixels (96 DPI) and English Metric Units."""

    width_px: int = 0
    height_px: int = 0
    width_emu: int = 0
    height_emu: int = 0

    @classmethod
    def from_pixels(cls, width_px: int, height_px: int) -> "ImageSize":
        return cls(width_px, height_px, pixels_to_emu(width_px), pixels_to_emu(height_px))

    @classmethod
    def from_inches(cls, width: float, height: float) -> "ImageSize":
        return cls(inches_to_pixels(width), inches_to_pixels(height), inches_to_emu(width), inches_to_emu(height))

    @classmethod
    def from_emu(cls, width_emu: int, height_emu: int) -> "ImageSize":
        return cls(emu_to_pixels(width_emu), emu_to_pixels(height_emu), width_emu, height_emu)


@dataclass
class ImagePosition:
    """Placement of an image; alignment and wrap apply to floating images."""

    type: ImagePositionType = ImagePositionType.INLINE
    h_align: Optional[HorizontalAlign] = None
    v_align: Optional[VerticalAlign] = None
    offset_x: int = 0
    offset_y: int = 0
    wrap_text: TextWrapType = TextWrapType.NONE
    z_order: int = 0
    behind_text: bool = False

    @property
    def is_floating(self) -> bool:
        return self.type == ImagePositionType.FLOATING


class Image(Models):
    """
    Represents an embedded image.

    ``target`` is the relationship target relative to ``word/``, for
    example ``media/image1.png``.
    """

    def __init__(
        self,
        image_id: str,
        data: bytes,
        target: str,
        content_type: str = "",
        size: Optional[ImageSize] = None,
    ):
        """
        Initialize image.

        Args:
            image_id: Document unique image id
            data: Raw image bytes
            target: Relationship target relative to ``word/``
            content_type: MIME type of the data
            size: Explicit size; read from the image header when omitted
        """
        super().__init__(image_id)
        if not data:
            raise InvalidArgumentError("image data cannot be empty", operation="Image")
        self.data: bytes = bytes(data)
        self.target: str = target
        self.content_type: str = content_type
        self.format: str = detect_format(target)
        self.relationship_id: str = ""
        self.description: str = ""
        self.position: ImagePosition = ImagePosition()

        if size is None:
            width, height = read_dimensions(self.data)
            size = ImageSize.from_pixels(width, height)
        self.size: ImageSize = size
        self.original_size: ImageSize = replace(size)

    @classmethod
    def from_package(cls, image_id: str, path: str, data: bytes, content_type: str = "") -> "Image":
        """
        Create an image from a media part of a loaded package.

        Undecodable formats such as EMF keep a zero size until the drawing
        extent is applied.
        """
        target = path.replace("\\", "/")
        if target.lower().startswith("word/"):
            target = target[len("word/"):]
        try:
            width, height = read_dimensions(data)
            size = ImageSize.from_pixels(width, height)
        except MediaError as e:
            logger.warning(f"Cannot read dimensions of {path}: {e}")
            size = ImageSize()
        return cls(image_id, data, target, content_type, size)

    @property
    def name(self) -> str:
        return posixpath.basename(self.target)

    def set_size(self, size: ImageSize) -> None:
        """
        Set display size.

        A zero width or height is derived from the original aspect ratio.
        """
        if size.width_px == 0 and size.height_px == 0:
            raise InvalidArgumentError("both width and height cannot be zero", operation="Image.set_size")

        original = self.original_size
        if size.width_px == 0 and original.height_px:
            width_px = int(size.height_px * original.width_px / original.height_px)
            size = replace(size, width_px=width_px, width_emu=width_px * EMU_PER_PIXEL)
        elif size.height_px == 0 and original.width_px:
            height_px = int(size.width_px * original.height_px / original.width_px)
            size = replace(size, height_px=height_px, height_emu=height_px * EMU_PER_PIXEL)
        self.size = size

    def set_description(self, description: str) -> None:
        self.description = description or ""

    def set_relationship_id(self, rel_id: str) -> None:
        self.relationship_id = rel_id

    def set_position(self, position: ImagePosition) -> None:
        if position is None:
            raise InvalidArgumentError("position cannot be None", operation="Image.set_position")
        self.position = position

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "target": self.target,
                "format": self.format,
                "width_emu": self.size.width_emu,
                "height_emu": self.size.height_emu,
                "description": self.description,
                "position": self.position.type.value,
            }
        )
        return data
