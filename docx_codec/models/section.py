"""
Section model for DOCX documents.

Handles page size, orientation, margins, columns and the per-type
header/footer maps of a section, plus the section-break marker that
closes a section in the block sequence.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional

from ..constants import MAX_COLUMNS, PAGE_SIZE_A3, PAGE_SIZE_A4, PAGE_SIZE_LEGAL, PAGE_SIZE_LETTER, PAGE_SIZE_TABLOID
from ..exceptions import InvalidArgumentError, ValidationError
from ..utils.id_manager import IDManager
from ..utils.relationships import RelationshipManager
from .base import Models
from .paragraph import Paragraph

logger = logging.getLogger(__name__)


class Orientation(Enum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class HeaderFooterType(Enum):
    DEFAULT = "default"
    FIRST = "first"
    EVEN = "even"


class SectionBreakType(Enum):
    NEXT_PAGE = "nextPage"
    CONTINUOUS = "continuous"
    EVEN_PAGE = "evenPage"
    ODD_PAGE = "oddPage"


@dataclass
class PageSize:
    """Page size in twips."""

    width: int
    height: int


PAGE_A4 = PageSize(*PAGE_SIZE_A4)
PAGE_LETTER = PageSize(*PAGE_SIZE_LETTER)
PAGE_LEGAL = PageSize(*PAGE_SIZE_LEGAL)
PAGE_A3 = PageSize(*PAGE_SIZE_A3)
PAGE_TABLOID = PageSize(*PAGE_SIZE_TABLOID)


@dataclass
class Margins:
    """Page margins in twips; header/footer are distances from the page edge."""

    top: int = 1440
    right: int = 1440
    bottom: int = 1440
    left: int = 1440
    header: int = 720
    footer: int = 720


class HeaderFooter(Models):
    """
    Content of a header or footer part.

    ``relationship_id`` and ``target_path`` are set when the part is read
    from a package or allocated at write time.
    """

    kind = "header"

    def __init__(
        self,
        hf_type: HeaderFooterType = HeaderFooterType.DEFAULT,
        id_manager: Optional[IDManager] = None,
        relationships: Optional[RelationshipManager] = None,
    ):
        super().__init__()
        self.type = hf_type
        self._id_manager = id_manager or IDManager()
        self._relationships = relationships
        self.paragraphs: List[Paragraph] = []
        self.relationship_id: str = ""
        self.target_path: str = ""

    def add_paragraph(self) -> Paragraph:
        paragraph = Paragraph(self._id_manager.generate_unique_id("paragraph"), self._id_manager, self._relationships)
        paragraph.parent = self
        self.paragraphs.append(paragraph)
        return paragraph

    def set_existing_relationship(self, rel_id: str, target: str) -> None:
        """Bind this part to a relationship read from a package."""
        self.relationship_id = rel_id
        self.target_path = target

    def get_text(self) -> str:
        return "\n".join(p.text for p in self.paragraphs)


class Header(HeaderFooter):
    kind = "header"


class Footer(HeaderFooter):
    kind = "footer"


class Section(Models):
    """
    Represents a document section.

    New sections default to portrait A4 with one-inch margins and a
    single column.
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
        self.page_size: PageSize = PageSize(PAGE_A4.width, PAGE_A4.height)
        self.margins: Margins = Margins()
        self.orientation: Orientation = Orientation.PORTRAIT
        self.columns: int = 1
        self.headers: Dict[HeaderFooterType, Header] = {}
        self.footers: Dict[HeaderFooterType, Footer] = {}

    def set_page_size(self, size: PageSize) -> None:
        if size is None or size.width <= 0 or size.height <= 0:
            raise ValidationError("page width and height must be positive", details=repr(size), operation="Section.set_page_size")
        self.page_size = PageSize(size.width, size.height)

    def set_margins(self, margins: Margins) -> None:
        if margins is None or min(margins.top, margins.right, margins.bottom, margins.left) < 0:
            raise ValidationError("margins cannot be negative", details=repr(margins), operation="Section.set_margins")
        self.margins = margins

    def set_orientation(self, orientation: Orientation) -> None:
        if not isinstance(orientation, Orientation):
            raise ValidationError("orientation must be portrait or landscape", details=repr(orientation), operation="Section.set_orientation")
        self.orientation = orientation

    def set_columns(self, count: int) -> None:
        if count < 1 or count > MAX_COLUMNS:
            raise InvalidArgumentError(f"columns must be between 1 and {MAX_COLUMNS}", details=str(count), operation="Section.set_columns")
        self.columns = count

    def copy_layout_from(self, other: "Section") -> None:
        """Take page size, orientation, margins and columns from ``other``; headers are not copied."""
        self.page_size = PageSize(other.page_size.width, other.page_size.height)
        self.margins = replace(other.margins)
        self.orientation = other.orientation
        self.columns = other.columns

    def header(self, hf_type: HeaderFooterType = HeaderFooterType.DEFAULT) -> Header:
        """Return the header of ``hf_type``, creating it on first access."""
        if hf_type not in self.headers:
            self.headers[hf_type] = Header(hf_type, self._id_manager, self._relationships)
            logger.debug(f"Created {hf_type.value} header for section {self.id}")
        return self.headers[hf_type]

    def footer(self, hf_type: HeaderFooterType = HeaderFooterType.DEFAULT) -> Footer:
        """Return the footer of ``hf_type``, creating it on first access."""
        if hf_type not in self.footers:
            self.footers[hf_type] = Footer(hf_type, self._id_manager, self._relationships)
            logger.debug(f"Created {hf_type.value} footer for section {self.id}")
        return self.footers[hf_type]


class SectionBreak:
    """Block marker closing ``section`` with the given break type."""

    def __init__(self, section: Section, break_type: SectionBreakType = SectionBreakType.NEXT_PAGE):
        self.section = section
        self.break_type = break_type

    def __repr__(self) -> str:
        return f"SectionBreak(section={self.section.id!r}, type={self.break_type.value!r})"
