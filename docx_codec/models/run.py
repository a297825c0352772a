"""
Run model for DOCX documents.

A run is a stretch of text with one set of character formatting. It may
also carry line/page/column breaks, a single image and any number of
fields.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from ..constants import DEFAULT_COLOR, DEFAULT_FONT, DEFAULT_FONT_SIZE, MAX_FONT_SIZE, MIN_FONT_SIZE
from ..exceptions import InvalidArgumentError
from .base import Models
from .field import Field
from .image import Image

logger = logging.getLogger(__name__)

HEX_COLOR = re.compile(r"^[0-9A-Fa-f]{6}$")


class BreakType(Enum):
    """Break markers inside a run."""

    LINE = "line"
    PAGE = "page"
    COLUMN = "column"


class UnderlineStyle(Enum):
    NONE = "none"
    SINGLE = "single"
    DOUBLE = "double"
    THICK = "thick"
    DOTTED = "dotted"
    DASH = "dash"
    WAVE = "wave"


class HighlightColor(Enum):
    NONE = "none"
    YELLOW = "yellow"
    GREEN = "green"
    CYAN = "cyan"
    MAGENTA = "magenta"
    BLUE = "blue"
    RED = "red"
    DARK_BLUE = "darkBlue"
    DARK_CYAN = "darkCyan"
    DARK_GREEN = "darkGreen"
    DARK_MAGENTA = "darkMagenta"
    DARK_RED = "darkRed"
    DARK_YELLOW = "darkYellow"
    DARK_GRAY = "darkGray"
    LIGHT_GRAY = "lightGray"


@dataclass
class Font:
    """Font triple: Latin, East Asian and complex script faces."""

    name: str = DEFAULT_FONT
    east_asia: str = ""
    complex_script: str = ""


class Run(Models):
    """Represents a run of text with consistent formatting."""

    def __init__(self, element_id: Optional[str] = None, text: str = ""):
        super().__init__(element_id)
        self.text: str = text
        self.breaks: List[BreakType] = []
        self.font: Font = Font()
        self.color: str = DEFAULT_COLOR
        self.size: int = DEFAULT_FONT_SIZE
        self.bold: bool = False
        self.italic: bool = False
        self.strike: bool = False
        self.underline: UnderlineStyle = UnderlineStyle.NONE
        self.highlight: HighlightColor = HighlightColor.NONE
        self.image: Optional[Image] = None
        self.fields: List[Field] = []
        # Text is the rendered result of the attached fields
        self.is_field_result: bool = False

    def set_text(self, text: str) -> None:
        self.text = text or ""

    def add_text(self, text: str) -> None:
        """Append text to the run."""
        self.text += text

    def get_text(self) -> str:
        return self.text

    def add_break(self, break_type: BreakType = BreakType.LINE) -> None:
        if not isinstance(break_type, BreakType):
            raise InvalidArgumentError("invalid break type", details=repr(break_type), operation="Run.add_break")
        self.breaks.append(break_type)

    def set_font(self, font: Font) -> None:
        if font is None or not font.name:
            raise InvalidArgumentError("font name cannot be empty", operation="Run.set_font")
        self.font = font

    def set_color(self, color: str) -> None:
        """
        Set text color.

        Args:
            color: Six digit hex RGB value such as ``FF0000``
        """
        if not color or not HEX_COLOR.match(color):
            raise InvalidArgumentError("color must be a 6 digit hex value", details=repr(color), operation="Run.set_color")
        self.color = color.upper()

    def set_size(self, half_points: int) -> None:
        """
        Set font size in half-points.

        Args:
            half_points: Size between 2 and 3276 (1pt to 1638pt)
        """
        if half_points < MIN_FONT_SIZE or half_points > MAX_FONT_SIZE:
            raise InvalidArgumentError(
                f"font size must be between {MIN_FONT_SIZE} and {MAX_FONT_SIZE} half-points",
                details=str(half_points),
                operation="Run.set_size",
            )
        self.size = half_points

    def set_bold(self, bold: bool = True) -> None:
        self.bold = bool(bold)

    def set_italic(self, italic: bool = True) -> None:
        self.italic = bool(italic)

    def set_strike(self, strike: bool = True) -> None:
        self.strike = bool(strike)

    def set_underline(self, style: UnderlineStyle) -> None:
        if not isinstance(style, UnderlineStyle):
            raise InvalidArgumentError("invalid underline style", details=repr(style), operation="Run.set_underline")
        self.underline = style

    def set_highlight(self, color: HighlightColor) -> None:
        if not isinstance(color, HighlightColor):
            raise InvalidArgumentError("invalid highlight color", details=repr(color), operation="Run.set_highlight")
        self.highlight = color

    def set_image(self, image: Image) -> None:
        if image is None:
            raise InvalidArgumentError("image cannot be None", operation="Run.set_image")
        self.image = image

    def add_field(self, field: Field) -> None:
        if field is None:
            raise InvalidArgumentError("field cannot be None", operation="Run.add_field")
        self.fields.append(field)

    def has_content(self) -> bool:
        return bool(self.text or self.breaks or self.fields or self.image is not None)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "bold": self.bold,
                "italic": self.italic,
                "strike": self.strike,
                "underline": self.underline.value,
                "color": self.color,
                "size": self.size,
                "font": self.font.name,
                "highlight": self.highlight.value,
                "breaks": [b.value for b in self.breaks],
                "fields": [f.code for f in self.fields],
                "has_image": self.image is not None,
            }
        )
        return data
