"""
Paragraph model for DOCX documents.

Handles paragraph properties (style, alignment, indentation, spacing,
numbering), the ordered run list and heading bookmarks used by TOC
fields.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from ..constants import (
    DEFAULT_LINE_SPACING,
    HYPERLINK_COLOR,
    MAX_INDENT,
    MAX_SPACING,
    MIN_INDENT,
    MIN_SPACING,
)
from ..exceptions import InvalidArgumentError
from ..utils.id_manager import IDManager
from ..utils.relationships import RelationshipManager
from .base import Models
from .field import PROP_RELATIONSHIP_ID, Field, FieldType, new_field, new_hyperlink_field
from .image import Image
from .run import Run, UnderlineStyle

logger = logging.getLogger(__name__)

HEADING_STYLE = re.compile(r"^heading ?[1-9]$", re.IGNORECASE)


class Alignment(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFY = "both"
    DISTRIBUTE = "distribute"


class LineSpacingRule(Enum):
    AUTO = "auto"
    EXACT = "exact"
    AT_LEAST = "atLeast"


@dataclass
class Indentation:
    """Indentation in twips."""

    left: int = 0
    right: int = 0
    first_line: int = 0
    hanging: int = 0


@dataclass
class LineSpacing:
    rule: LineSpacingRule = LineSpacingRule.AUTO
    value: int = DEFAULT_LINE_SPACING


@dataclass
class NumberingReference:
    """Reference into the numbering part: abstract instance id and list level."""

    num_id: int
    level: int = 0


class Paragraph(Models):
    """
    Represents a paragraph.

    Runs are kept in append order. Paragraphs styled as headings receive a
    bookmark so a TOC can link to them.
    """

    def __init__(
        self,
        element_id: Optional[str] = None,
        id_manager: Optional[IDManager] = None,
        relationships: Optional[RelationshipManager] = None,
    ):
        super().__init__(element_id)
        self._id_manager = id_manager or IDManager()
        self._relationships = relationships
        self.style_name: str = ""
        self.alignment: Alignment = Alignment.LEFT
        self.indent: Indentation = Indentation()
        self.spacing_before: int = 0
        self.spacing_after: int = 0
        self.line_spacing: LineSpacing = LineSpacing()
        self.numbering: Optional[NumberingReference] = None
        self.runs: List[Run] = []
        self.bookmark_id: str = ""
        self.bookmark_name: str = ""

    def add_run(self, text: str = "") -> Run:
        """Append a new run and return it."""
        run = Run(self._id_manager.generate_unique_id("run"), text)
        run.parent = self
        self.runs.append(run)
        return run

    def add_field(self, field_type: FieldType) -> Field:
        """Append a run carrying a new field of ``field_type``."""
        field = new_field(field_type)
        self.add_run().add_field(field)
        return field

    def add_hyperlink(self, url: str, display_text: str = "") -> Run:
        """
        Append a hyperlink run.

        Registers an external hyperlink relationship and styles the run
        blue with a single underline. A ``#bookmark`` target links inside
        the document and needs no relationship.

        Args:
            url: Link target, a URL or ``#bookmark``
            display_text: Visible text, defaults to the URL

        Returns:
            Run carrying the hyperlink field
        """
        if not url:
            raise InvalidArgumentError("URL cannot be empty", operation="Paragraph.add_hyperlink")
        if self._relationships is None:
            raise InvalidArgumentError("paragraph is not attached to a document", operation="Paragraph.add_hyperlink")

        text = display_text or url
        field = new_hyperlink_field(url, text)
        rel_id = ""
        if not url.startswith("#"):
            rel_id = self._relationships.add_hyperlink(url)
            field.set_property(PROP_RELATIONSHIP_ID, rel_id)

        run = self.add_run(text)
        run.set_color(HYPERLINK_COLOR)
        run.set_underline(UnderlineStyle.SINGLE)
        run.add_field(field)
        run.is_field_result = True
        logger.debug(f"Added hyperlink {url} as {rel_id or 'anchor'}")
        return run

    def add_image_run(self, image: Image) -> Run:
        """Append a run displaying ``image``."""
        run = self.add_run()
        run.set_image(image)
        return run

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)

    def get_text(self) -> str:
        return self.text

    def fields(self) -> List[Field]:
        return [field for run in self.runs for field in run.fields]

    def set_style(self, style_name: str) -> None:
        """
        Apply a named paragraph style.

        Heading styles get a TOC bookmark if the paragraph has none yet.
        """
        if not style_name:
            raise InvalidArgumentError("style name cannot be empty", operation="Paragraph.set_style")
        self.style_name = style_name
        if HEADING_STYLE.match(style_name):
            self.ensure_bookmark()

    @property
    def heading_level(self) -> int:
        """Outline level 1..9 of a heading style, 0 for body text."""
        if not HEADING_STYLE.match(self.style_name):
            return 0
        return int(self.style_name[-1])

    def ensure_bookmark(self) -> str:
        """Return the paragraph's bookmark name, minting a ``_Toc`` one if it has none."""
        if not self.bookmark_id:
            number = self._id_manager.next_number("bookmark")
            self.bookmark_id = str(number)
            self.bookmark_name = f"_Toc{number:09d}"
        return self.bookmark_name

    def set_bookmark(self, bookmark_id: str, name: str) -> None:
        """Attach an existing bookmark, keeping its id and name."""
        if not bookmark_id or not name:
            raise InvalidArgumentError("bookmark id and name are required", details=f"{bookmark_id!r} {name!r}", operation="Paragraph.set_bookmark")
        self.bookmark_id = bookmark_id
        self.bookmark_name = name
        if bookmark_id.isdigit():
            self._id_manager.ensure_at_least("bookmark", int(bookmark_id))

    def set_alignment(self, alignment: Alignment) -> None:
        if not isinstance(alignment, Alignment):
            raise InvalidArgumentError("invalid alignment value", details=repr(alignment), operation="Paragraph.set_alignment")
        self.alignment = alignment

    def set_indent(self, indent: Indentation) -> None:
        """
        Set indentation in twips.

        Left/right accept -31680..31680, first-line and hanging 0..31680;
        first-line and hanging are mutually exclusive.
        """
        op = "Paragraph.set_indent"
        for name in ("left", "right"):
            value = getattr(indent, name)
            if value < MIN_INDENT or value > MAX_INDENT:
                raise InvalidArgumentError(f"{name} indent must be between {MIN_INDENT} and {MAX_INDENT} twips", details=str(value), operation=op)
        for name in ("first_line", "hanging"):
            value = getattr(indent, name)
            if value < 0 or value > MAX_INDENT:
                raise InvalidArgumentError(f"{name} indent must be between 0 and {MAX_INDENT} twips", details=str(value), operation=op)
        if indent.first_line > 0 and indent.hanging > 0:
            raise InvalidArgumentError("cannot have both first line indent and hanging indent", operation=op)
        self.indent = indent

    def _check_spacing(self, twips: int, op: str) -> None:
        if twips < MIN_SPACING or twips > MAX_SPACING:
            raise InvalidArgumentError(f"spacing must be between {MIN_SPACING} and {MAX_SPACING} twips", details=str(twips), operation=op)

    def set_spacing_before(self, twips: int) -> None:
        self._check_spacing(twips, "Paragraph.set_spacing_before")
        self.spacing_before = twips

    def set_spacing_after(self, twips: int) -> None:
        self._check_spacing(twips, "Paragraph.set_spacing_after")
        self.spacing_after = twips

    def set_line_spacing(self, value: int, rule: LineSpacingRule = LineSpacingRule.AUTO) -> None:
        if not isinstance(rule, LineSpacingRule):
            raise InvalidArgumentError("invalid line spacing rule", details=repr(rule), operation="Paragraph.set_line_spacing")
        self._check_spacing(value, "Paragraph.set_line_spacing")
        self.line_spacing = LineSpacing(rule, value)

    def set_numbering(self, num_id: int, level: int = 0) -> None:
        if num_id < 0:
            raise InvalidArgumentError("numbering id cannot be negative", details=str(num_id), operation="Paragraph.set_numbering")
        if level < 0 or level > 8:
            raise InvalidArgumentError("numbering level must be between 0 and 8", details=str(level), operation="Paragraph.set_numbering")
        self.numbering = NumberingReference(num_id, level)

    def clear_numbering(self) -> None:
        self.numbering = None

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "style": self.style_name,
                "alignment": self.alignment.value,
                "numbering": None if self.numbering is None else {"num_id": self.numbering.num_id, "level": self.numbering.level},
                "runs": [run.to_dict() for run in self.runs],
            }
        )
        return data
