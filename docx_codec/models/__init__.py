"""
Models module for DOCX document models.

This module contains the model classes that represent document
elements as Python objects.
"""

from .base import Models
from .block import Block, BlockType
from .field import Field, FieldType, new_field, new_hyperlink_field, new_styleref_field, new_toc_field
from .image import (
    HorizontalAlign,
    Image,
    ImagePosition,
    ImagePositionType,
    ImageSize,
    TextWrapType,
    VerticalAlign,
)
from .metadata import Metadata
from .paragraph import Alignment, Indentation, LineSpacing, LineSpacingRule, NumberingReference, Paragraph
from .run import BreakType, Font, HighlightColor, Run, UnderlineStyle
from .section import (
    PAGE_A3,
    PAGE_A4,
    PAGE_LEGAL,
    PAGE_LETTER,
    PAGE_TABLOID,
    Footer,
    Header,
    HeaderFooter,
    HeaderFooterType,
    Margins,
    Orientation,
    PageSize,
    Section,
    SectionBreak,
    SectionBreakType,
)
from .table import (
    BorderLineStyle,
    BorderStyle,
    CellVerticalAlign,
    Table,
    TableBorders,
    TableCell,
    TableRow,
    TableWidth,
    VerticalMerge,
    WidthType,
)
from .toc import TOCEntry, TOCOptions

__all__ = [
    "TOCEntry",
    "TOCOptions",
    "Models",
    "Block",
    "BlockType",
    "Field",
    "FieldType",
    "new_field",
    "new_hyperlink_field",
    "new_styleref_field",
    "new_toc_field",
    "HorizontalAlign",
    "Image",
    "ImagePosition",
    "ImagePositionType",
    "ImageSize",
    "TextWrapType",
    "VerticalAlign",
    "Metadata",
    "Alignment",
    "Indentation",
    "LineSpacing",
    "LineSpacingRule",
    "NumberingReference",
    "Paragraph",
    "BreakType",
    "Font",
    "HighlightColor",
    "Run",
    "UnderlineStyle",
    "PAGE_A3",
    "PAGE_A4",
    "PAGE_LEGAL",
    "PAGE_LETTER",
    "PAGE_TABLOID",
    "Footer",
    "Header",
    "HeaderFooter",
    "HeaderFooterType",
    "Margins",
    "Orientation",
    "PageSize",
    "Section",
    "SectionBreak",
    "SectionBreakType",
    "BorderLineStyle",
    "BorderStyle",
    "CellVerticalAlign",
    "Table",
    "TableBorders",
    "TableCell",
    "TableRow",
    "TableWidth",
    "VerticalMerge",
    "WidthType",
]
