"""
Document aggregate root.

Owns the ordered block sequence (paragraphs, tables, section breaks),
the section chain and the document-wide collaborators (ids,
relationships, media). Entry points ``load``, ``load_bytes`` and
``load_stream`` read a package; ``Document.save`` writes one.
"""

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Union

from .constants import REL_TYPE_NUMBERING
from .exceptions import InvalidArgumentError, InvalidStateError
from .export.docx_exporter import DOCXExporter
from .models.block import Block, BlockType
from .models.field import Field, FieldType, new_toc_field
from .models.image import Image
from .models.metadata import Metadata
from .models.paragraph import Alignment, Indentation, Paragraph
from .models.section import HeaderFooterType, Section, SectionBreak, SectionBreakType
from .models.table import Table, VerticalMerge
from .models.toc import TOC_LEVEL_INDENT, TOCEntry, TOCOptions
from .parser.hydrator import hydrate_document
from .parser.package_reader import PackageReader, parse_package
from .utils.id_manager import IDManager
from .utils.media import MediaManager
from .utils.relationships import RelationshipManager

logger = logging.getLogger(__name__)


@dataclass
class PackagePart:
    """A part carried through from a loaded package unchanged."""

    name: str
    data: bytes
    content_type: str = ""


class Document:
    """
    Represents a Word document.

    Block order is append order and is the only source of truth for the
    order in which content is written. Sections are a derived view; the
    last section is the active one and a document always has at least one.
    """

    def __init__(self):
        self.id_manager = IDManager()
        self.relationships = RelationshipManager(self.id_manager)
        self.media = MediaManager(self.id_manager)
        self.metadata = Metadata()
        # Raw parts read from a package, written back unchanged
        self.styles_part: Optional[bytes] = None
        self.numbering_part: Optional[bytes] = None
        self.numbering_target: str = ""
        self.package_parts: Dict[str, PackagePart] = {}

        self._blocks: List[Block] = []
        self._sections: List[Section] = [self._new_section()]
        # Paragraph ids of the last generated TOC, replaced by regenerate_toc
        self._toc_paragraph_ids: List[str] = []

    def _new_section(self) -> Section:
        return Section(f"sect{self.id_manager.next_number('section')}", self.id_manager, self.relationships)

    # Content

    def _new_paragraph(self) -> Paragraph:
        return Paragraph(self.id_manager.generate_unique_id("paragraph"), self.id_manager, self.relationships)

    def add_paragraph(self) -> Paragraph:
        """Append a paragraph to the body."""
        paragraph = self._new_paragraph()
        self._blocks.append(Block(BlockType.PARAGRAPH, paragraph))
        return paragraph

    def add_table(self, rows: int, cols: int) -> Table:
        """
        Append a table to the body.

        Args:
            rows: Row count (1..1000)
            cols: Column count (1..63)

        Returns:
            New table
        """
        table = Table(self.id_manager.generate_unique_id("table"), rows, cols, self.id_manager, self.relationships)
        self._blocks.append(Block(BlockType.TABLE, table))
        return table

    def add_section(self, break_type: SectionBreakType = SectionBreakType.NEXT_PAGE) -> Section:
        """
        Close the current section with a break and start a new one.

        The new section takes over the page layout of the closed one but
        starts without headers or footers.

        Args:
            break_type: How the new section starts

        Returns:
            The new, now current section
        """
        if not isinstance(break_type, SectionBreakType):
            raise InvalidArgumentError("invalid section break type", details=repr(break_type), operation="Document.add_section")
        closing = self.current_section
        self._blocks.append(Block(BlockType.SECTION_BREAK, SectionBreak(closing, break_type)))

        section = self._new_section()
        section.copy_layout_from(closing)
        self._sections.append(section)
        logger.debug(f"Closed section {closing.id} with {break_type.value} break, opened {section.id}")
        return section

    def add_image(self, data: bytes, filename: str) -> Image:
        """
        Store image bytes and register an image relationship.

        Args:
            data: Raw image bytes
            filename: Original file name, used for the extension

        Returns:
            Image ready to be placed with ``Paragraph.add_image_run``
        """
        media = self.media.add(data, filename)
        target = media.path[len("word/"):]
        image = Image(media.id, media.data, target, media.content_type)
        image.set_relationship_id(self.relationships.add_image(target))
        logger.debug(f"Added image {target} as {image.relationship_id}")
        return image

    def set_numbering_part(self, data: bytes, target: str = "numbering.xml") -> None:
        """Attach numbering definitions to be written at ``target`` (relative to ``word/``)."""
        if not data:
            raise InvalidArgumentError("numbering data cannot be empty", operation="Document.set_numbering_part")
        self.numbering_part = bytes(data)
        self.numbering_target = target or "numbering.xml"
        self.relationships.ensure(REL_TYPE_NUMBERING, self.numbering_target)

    def set_styles_part(self, data: bytes) -> None:
        self.styles_part = bytes(data) if data else None

    def add_package_part(self, name: str, data: bytes, content_type: str = "") -> None:
        if not name:
            raise InvalidArgumentError("part name cannot be empty", operation="Document.add_package_part")
        self.package_parts[name] = PackagePart(name, bytes(data), content_type)

    def set_metadata(self, metadata: Metadata) -> None:
        if metadata is None:
            raise InvalidArgumentError("metadata cannot be None", operation="Document.set_metadata")
        self.metadata = metadata

    # Table of contents

    def scan_headings(self, max_level: int = 3) -> List[TOCEntry]:
        """
        Collect the body headings a TOC would list.

        Headings without a bookmark get a ``_Toc`` bookmark. Page numbers
        are placeholders; Word recalculates them when it updates fields.

        Args:
            max_level: Deepest heading level to include

        Returns:
            Entries in body order
        """
        entries = []
        for paragraph in self.paragraphs():
            level = paragraph.heading_level
            text = paragraph.text.strip()
            if level == 0 or level > max_level or not text:
                continue
            bookmark = paragraph.ensure_bookmark()
            entries.append(TOCEntry(level, text, bookmark, str(len(entries) + 1)))
        logger.debug(f"Found {len(entries)} headings up to level {max_level}")
        return entries

    def add_toc(self, options: Optional[TOCOptions] = None, entries: Optional[List[TOCEntry]] = None) -> Field:
        """
        Append a table of contents.

        Writes an optional title, a paragraph with the ``TOC`` field and one
        preview paragraph per entry.

        Args:
            options: TOC options, defaults to three levels with hyperlinks
            entries: Preview entries, usually from ``scan_headings``

        Returns:
            The TOC field
        """
        paragraphs, field = self._build_toc(options or TOCOptions(), entries or [])
        for paragraph in paragraphs:
            self._blocks.append(Block(BlockType.PARAGRAPH, paragraph))
        return field

    def regenerate_toc(self, options: Optional[TOCOptions] = None) -> Field:
        """
        Rebuild the TOC from the current headings.

        A TOC generated earlier by this document is replaced in place;
        otherwise the new one is inserted at the start of the body.

        Raises:
            InvalidStateError: If the document has no headings
        """
        options = options or TOCOptions()
        options.validate()
        entries = self.scan_headings(options.depth)
        if not entries:
            raise InvalidStateError("no headings found in document", operation="Document.regenerate_toc")

        position = 0
        if self._toc_paragraph_ids:
            old = set(self._toc_paragraph_ids)
            indexes = [i for i, b in enumerate(self._blocks) if b.type == BlockType.PARAGRAPH and b.element.id in old]
            if indexes:
                position = indexes[0]
            self._blocks = [b for b in self._blocks if not (b.type == BlockType.PARAGRAPH and b.element.id in old)]

        paragraphs, field = self._build_toc(options, entries)
        self._blocks[position:position] = [Block(BlockType.PARAGRAPH, p) for p in paragraphs]
        return field

    def _build_toc(self, options: TOCOptions, entries: List[TOCEntry]):
        options.validate()
        paragraphs = []

        if options.title:
            title = self._new_paragraph()
            run = title.add_run(options.title)
            run.set_bold()
            run.set_size(28)
            title.set_alignment(Alignment.CENTER)
            paragraphs.append(title)

        field_paragraph = self._new_paragraph()
        field = new_toc_field(options.switches())
        field_paragraph.add_run().add_field(field)
        paragraphs.append(field_paragraph)

        for entry in entries:
            paragraph = self._new_paragraph()
            paragraph.set_indent(Indentation(left=(entry.level - 1) * TOC_LEVEL_INDENT))
            if options.hyperlinks and entry.bookmark_name:
                paragraph.add_hyperlink(f"#{entry.bookmark_name}", entry.text)
            else:
                paragraph.add_run(entry.text)
            if options.page_numbers and entry.bookmark_name:
                paragraph.add_run("\t")
                page_ref = Field(FieldType.REF, f"PAGEREF {entry.bookmark_name} \\h")
                page_ref.set_result(entry.page_number)
                run = paragraph.add_run(entry.page_number)
                run.add_field(page_ref)
                run.is_field_result = True
            paragraphs.append(paragraph)

        self._toc_paragraph_ids = [p.id for p in paragraphs]
        logger.debug(f"Built TOC with {len(entries)} entries")
        return paragraphs, field

    # Header and footer helpers

    def add_page_number_footer(self, section: Optional[Section] = None) -> Paragraph:
        """Add a centered "Page X of Y" paragraph to the default footer of ``section``."""
        footer = (section or self.current_section).footer(HeaderFooterType.DEFAULT)
        paragraph = footer.add_paragraph()
        paragraph.add_run("Page ")
        paragraph.add_field(FieldType.PAGE_NUMBER)
        paragraph.add_run(" of ")
        paragraph.add_field(FieldType.PAGE_COUNT)
        paragraph.set_alignment(Alignment.CENTER)
        return paragraph

    def add_document_title_header(self, title: str, section: Optional[Section] = None) -> Paragraph:
        """Add a centered grey title paragraph to the default header of ``section``."""
        if not title:
            raise InvalidArgumentError("title cannot be empty", operation="Document.add_document_title_header")
        header = (section or self.current_section).header(HeaderFooterType.DEFAULT)
        paragraph = header.add_paragraph()
        run = paragraph.add_run(title)
        run.set_size(20)
        run.set_color("666666")
        paragraph.set_alignment(Alignment.CENTER)
        return paragraph

    # Views

    @property
    def current_section(self) -> Section:
        return self._sections[-1]

    def sections(self) -> List[Section]:
        return list(self._sections)

    def blocks(self) -> List[Block]:
        return list(self._blocks)

    def paragraphs(self) -> List[Paragraph]:
        """Top-level paragraphs in body order."""
        return [b.element for b in self._blocks if b.type == BlockType.PARAGRAPH]

    def tables(self) -> List[Table]:
        """Top-level tables in body order."""
        return [b.element for b in self._blocks if b.type == BlockType.TABLE]

    def get_text(self) -> str:
        parts = []
        for block in self._blocks:
            if block.type != BlockType.SECTION_BREAK:
                parts.append(block.element.get_text())
        return "\n".join(parts)

    def validate(self) -> bool:
        """
        Check structural invariants of the model.

        Raises:
            InvalidStateError: If a vertically continued cell has no merge
                start above it or a section break does not close a known
                section
        """
        known = {section.id for section in self._sections}
        for block in self._blocks:
            if block.type == BlockType.SECTION_BREAK and block.element.section.id not in known:
                raise InvalidStateError("section break closes an unknown section", details=block.element.section.id, operation="Document.validate")
            if block.type == BlockType.TABLE:
                _validate_table(block.element)
        return True

    # Output

    def save(self, path: Union[str, Path], application_name: Optional[str] = None) -> bool:
        """Write the document to ``path`` as a DOCX package."""
        return self._exporter(application_name).export(path)

    def to_bytes(self, application_name: Optional[str] = None) -> bytes:
        return self._exporter(application_name).to_bytes()

    def write_to(self, stream: BinaryIO, application_name: Optional[str] = None) -> int:
        """Write the package to a binary stream and return the byte count."""
        data = self.to_bytes(application_name)
        stream.write(data)
        return len(data)

    def _exporter(self, application_name: Optional[str]) -> DOCXExporter:
        if application_name:
            return DOCXExporter(self, application_name=application_name)
        return DOCXExporter(self)

    def __repr__(self) -> str:
        return f"Document(blocks={len(self._blocks)}, sections={len(self._sections)})"


def _validate_table(table: Table) -> None:
    for row_idx, row in enumerate(table.rows):
        for col_idx, cell in enumerate(row.cells):
            if cell.v_merge != VerticalMerge.CONTINUE or cell.is_h_merge_continuation:
                continue
            above = table.cell(row_idx - 1, col_idx) if row_idx > 0 else None
            if above is None or above.v_merge == VerticalMerge.NONE:
                raise InvalidStateError(
                    "vertical merge continuation without a merge start above",
                    details=f"table {table.id} cell ({row_idx}, {col_idx})",
                    operation="Document.validate",
                )
        for cell in row.cells:
            for nested in cell.tables:
                _validate_table(nested)


def _hydrate(reader: PackageReader) -> Document:
    parsed = parse_package(reader)
    document = Document()
    hydrate_document(document, parsed)
    return document


def load(path: Union[str, Path]) -> Document:
    """
    Load a DOCX file.

    Raises:
        StructuralError: If a required part is missing
        ParsingError: If the archive or an XML part is malformed
    """
    document = _hydrate(PackageReader.from_path(path))
    logger.info(f"Loaded document {path}: {len(document.blocks())} blocks, {len(document.sections())} sections")
    return document


def load_bytes(data: bytes) -> Document:
    return _hydrate(PackageReader.from_bytes(data))


def load_stream(stream: BinaryIO) -> Document:
    """Load a DOCX package from a readable binary stream."""
    if isinstance(stream, io.BytesIO):
        return load_bytes(stream.getvalue())
    return _hydrate(PackageReader.from_stream(stream))
