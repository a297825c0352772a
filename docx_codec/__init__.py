"""
DOCX Codec - round-trip reading and writing of Word documents.

Loads a DOCX package into an editable document model (paragraphs,
runs, fields, tables, images, sections with headers and footers) and
writes the model back as a valid package.

Main Components:
- Document: Aggregate root and ``load``/``load_bytes``/``load_stream``
- Parser: Archive reader, XML tree parser and hydrator
- Models: Semantic document models
- Export: WordML serializer and package writer
- Utils: Ids, relationships, media and logging helpers
"""

from .document import Document, PackagePart, load, load_bytes, load_stream
from .exceptions import (
    DocxCodecError,
    InvalidArgumentError,
    InvalidStateError,
    MediaError,
    PackageIOError,
    ParsingError,
    StructuralError,
    UnsupportedError,
    ValidationError,
)
from .models import (
    Alignment,
    BreakType,
    Field,
    FieldType,
    Footer,
    Header,
    HeaderFooterType,
    Image,
    ImagePosition,
    ImageSize,
    Margins,
    Metadata,
    Orientation,
    PageSize,
    Paragraph,
    Run,
    Section,
    SectionBreakType,
    Table,
    TableCell,
    TOCEntry,
    TOCOptions,
    VerticalMerge,
)
from .utils.logger import configure_logging, get_logger, set_log_level

__version__ = "1.0.0"

__all__ = [
    "Document",
    "PackagePart",
    "load",
    "load_bytes",
    "load_stream",
    "DocxCodecError",
    "InvalidArgumentError",
    "InvalidStateError",
    "MediaError",
    "PackageIOError",
    "ParsingError",
    "StructuralError",
    "UnsupportedError",
    "ValidationError",
    "Alignment",
    "BreakType",
    "Field",
    "FieldType",
    "Footer",
    "Header",
    "HeaderFooterType",
    "Image",
    "ImagePosition",
    "ImageSize",
    "Margins",
    "Metadata",
    "Orientation",
    "PageSize",
    "Paragraph",
    "Run",
    "Section",
    "SectionBreakType",
    "Table",
    "TableCell",
    "TOCEntry",
    "TOCOptions",
    "VerticalMerge",
    "configure_logging",
    "get_logger",
    "set_log_level",
]
