"""
Hydration engine.

Walks the parsed parts of a package and populates a ``Document``:
paragraphs and runs, complex and simple fields, hyperlinks, drawings,
tables with merged cells, numbering references and the section chain
with its headers and footers.
"""

import logging
import posixpath
import re
from typing import Callable, Dict, List, Optional, Set

from ..constants import (
    DEFAULT_FONT,
    PATH_APP_PROPERTIES,
    PATH_CONTENT_TYPES,
    PATH_CORE_PROPERTIES,
    PATH_DOCUMENT,
    PATH_DOCUMENT_RELS,
    PATH_NUMBERING,
    PATH_ROOT_RELS,
    PATH_STYLES,
    REL_TYPE_NUMBERING,
    MAX_TABLE_COLS,
)
from ..exceptions import InvalidArgumentError, InvalidStateError, StructuralError
from ..models.field import PROP_DISPLAY, PROP_RELATIONSHIP_ID, PROP_URL, Field, FieldType
from ..models.image import (
    HorizontalAlign,
    Image,
    ImagePosition,
    ImagePositionType,
    ImageSize,
    TextWrapType,
    VerticalAlign,
)
from ..models.metadata import Metadata, split_keywords
from ..models.paragraph import Alignment, Indentation, LineSpacingRule, Paragraph
from ..models.run import BreakType, Font, HighlightColor, Run, UnderlineStyle
from ..models.section import HeaderFooter, HeaderFooterType, Margins, Orientation, PageSize, Section, SectionBreakType
from ..models.table import (
    BorderLineStyle,
    BorderStyle,
    CellVerticalAlign,
    Table,
    TableBorders,
    TableCell,
    TableWidth,
    VerticalMerge,
    WidthType,
)
from ..utils.relationships import Relationship
from .package_reader import MediaPart, ParsedPackage, normalize_part_name
from .relationships import parse_relationships
from .xml_tree import Element

logger = logging.getLogger(__name__)

QUOTED = re.compile(r'"([^"]*)"')

ALIGNMENTS = {
    "left": Alignment.LEFT,
    "start": Alignment.LEFT,
    "center": Alignment.CENTER,
    "right": Alignment.RIGHT,
    "end": Alignment.RIGHT,
    "both": Alignment.JUSTIFY,
    "distribute": Alignment.DISTRIBUTE,
}

BREAK_TYPES = {
    "page": BreakType.PAGE,
    "column": BreakType.COLUMN,
    "textWrapping": BreakType.LINE,
}

SECTION_BREAK_TYPES = {t.value: t for t in SectionBreakType}

CELL_ALIGNMENTS = {
    "top": CellVerticalAlign.TOP,
    "center": CellVerticalAlign.CENTER,
    "bottom": CellVerticalAlign.BOTTOM,
}

WRAP_ELEMENTS = {
    "wrapSquare": TextWrapType.SQUARE,
    "wrapTight": TextWrapType.TIGHT,
    "wrapThrough": TextWrapType.THROUGH,
    "wrapTopAndBottom": TextWrapType.TOP_BOTTOM,
    "wrapNone": TextWrapType.NONE,
}

FALSE_VALUES = ("0", "false", "off", "no")

# Hidden bookmark Word keeps at the last edit position
GO_BACK_BOOKMARK = "_GoBack"

# Instruction keyword prefixes, checked in order
FIELD_KEYWORDS = (
    ("NUMPAGES", FieldType.PAGE_COUNT),
    ("PAGEREF", FieldType.REF),
    ("PAGE", FieldType.PAGE_NUMBER),
    ("TOC", FieldType.TOC),
    ("DATE", FieldType.DATE),
    ("TIME", FieldType.TIME),
    ("STYLEREF", FieldType.STYLE_REF),
    ("SEQ", FieldType.SEQ),
    ("REF", FieldType.REF),
)


def _is_on(element: Element) -> bool:
    """Evaluate an OOXML on/off property such as ``<w:b/>`` or ``<w:b w:val="0"/>``."""
    value = element.get_attr("val")
    return value is None or value.strip().lower() not in FALSE_VALUES


def _is_truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "on", "yes")


def _int_attr(element: Optional[Element], name: str, operation: str) -> Optional[int]:
    """Read an integer attribute; absent or blank gives None, garbage raises."""
    if element is None:
        return None
    value = element.get_attr(name)
    if value is None or not value.strip():
        return None
    try:
        return int(value.strip())
    except ValueError as e:
        raise InvalidArgumentError("invalid integer attribute", details=f"{name}={value}", operation=operation) from e


def normalize_target_path(target: str) -> str:
    """
    Resolve a relationship target of the main document to a package path.

    Backslashes become slashes, leading ``./``, ``/`` and ``../``
    segments are dropped and the result is rooted at ``word/``.
    """
    path = target.replace("\\", "/").strip()
    while True:
        if path.startswith("./"):
            path = path[2:]
        elif path.startswith("../"):
            path = path[3:]
        elif path.startswith("/"):
            path = path[1:]
        else:
            break
    if not path.lower().startswith("word/"):
        path = "word/" + path
    return path


def build_field_from_instruction(instruction: str) -> Optional[Field]:
    """
    Classify a field instruction.

    Args:
        instruction: Accumulated instruction text, e.g. ``PAGE \\* MERGEFORMAT``

    Returns:
        Field with the instruction as its code, or None for a blank
        instruction or a HYPERLINK without a quoted target
    """
    code = (instruction or "").strip()
    if not code:
        return None

    upper = code.upper()
    if upper.startswith("HYPERLINK"):
        match = QUOTED.search(code)
        if match is None or not match.group(1):
            logger.warning(f"HYPERLINK field without target: {code!r}")
            return None
        url = match.group(1)
        if "\\l" in code and "://" not in url and not url.startswith("mailto:"):
            url = "#" + url
        field = Field(FieldType.HYPERLINK, code)
        field.set_property(PROP_URL, url)
        return field

    field_type = FieldType.CUSTOM
    for keyword, candidate in FIELD_KEYWORDS:
        if upper.startswith(keyword):
            field_type = candidate
            break
    field = Field(field_type)
    field.set_code(code)
    return field


class FieldState:
    """
    State machine for complex fields.

    ``begin`` starts a field, ``instrText`` accumulates its instruction and
    ``separate`` builds the field object. The pending field attaches to
    the next run with content. A field closed by ``end`` before any such
    run attaches to an empty carrier run created for it.
    """

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self.active = False
        self.instruction: List[str] = []
        self.pending: Optional[Field] = None
        self.close_pending = False

    def begin(self) -> None:
        if self.active:
            logger.debug("Field begin while a field is open, discarding it")
        self.reset()
        self.active = True

    def add_instruction(self, text: str) -> None:
        if self.active and self.pending is None:
            self.instruction.append(text)

    def separate(self) -> None:
        if not self.active:
            return
        self.pending = build_field_from_instruction("".join(self.instruction))
        self.instruction = []

    def end(self) -> None:
        if not self.active:
            return
        if self.pending is not None:
            self.close_pending = True
        else:
            self.reset()

    def should_force_run(self) -> bool:
        return self.pending is not None and self.close_pending

    def attach_to_run(self, run: Run) -> None:
        if self.pending is None:
            return
        field = self.pending
        field.set_result(run.text)
        field.set_property(PROP_DISPLAY, run.text)
        run.add_field(field)
        run.is_field_result = True
        self.pending = None
        if self.close_pending:
            self.reset()


class DocumentHydrator:
    """
    Populates a document from a parsed package.

    Args:
        document: Empty document to fill
        parsed: Parsed package trees and relationships
    """

    def __init__(self, document, parsed: ParsedPackage):
        self.document = document
        self.parsed = parsed
        self.package = parsed.package
        self.relationships: Dict[str, Relationship] = {rel.id: rel for rel in parsed.document_relationships}
        self.media_parts: Dict[str, MediaPart] = {normalize_part_name(p.path): p for p in self.package.media.values()}
        self.header_trees: Dict[str, Element] = {normalize_part_name(n): t for n, t in parsed.header_trees.items()}
        self.footer_trees: Dict[str, Element] = {normalize_part_name(n): t for n, t in parsed.footer_trees.items()}
        self.current_section: Section = document.current_section
        self.hydrated_headers: Dict[str, Set[HeaderFooterType]] = {}
        self.hydrated_footers: Dict[str, Set[HeaderFooterType]] = {}
        self.hydrated_parts: Set[str] = set()
        self.suppress_sections = 0
        self.field_state = FieldState()

    def hydrate(self) -> None:
        """
        Populate the document.

        Raises:
            StructuralError: If the document has no body
            InvalidArgumentError: On attribute values the model rejects
            InvalidStateError: On dangling image references
        """
        body = self.parsed.document_tree.find_child("body")
        if body is None:
            raise StructuralError("document has no body", operation="hydrate", part=PATH_DOCUMENT)

        self._register_relationships()
        self._register_media()
        self._capture_parts()
        self._reserve_bookmark_ids()

        for child in body.children:
            if child.local == "p":
                if self._is_section_carrier(child):
                    self._apply_section_properties(child.find_child("pPr").find_child("sectPr"), closes_section=True)
                    continue
                self._hydrate_body_paragraph(child)
            elif child.local == "tbl":
                self._hydrate_table(child, self.document.add_table)
            elif child.local == "sectPr":
                self._apply_section_properties(child, closes_section=False)

        self._keep_unreferenced_parts()
        if self.parsed.core_properties_tree is not None:
            self.document.set_metadata(self._read_core_properties(self.parsed.core_properties_tree))

        logger.debug(
            f"Hydrated {len(self.document.blocks())} blocks in {len(self.document.sections())} sections"
        )

    # Package level

    def _register_relationships(self) -> None:
        document = self.document
        for rel in self.parsed.document_relationships:
            document.relationships.register_existing(rel.id, rel.type, rel.target, rel.target_mode)

        numbering = self.package.numbering
        if numbering:
            rel = next((r for r in self.parsed.document_relationships if r.type == REL_TYPE_NUMBERING), None)
            document.set_numbering_part(numbering, rel.target if rel is not None else "numbering.xml")

    def _register_media(self) -> None:
        for part in self.package.media.values():
            if part.data:
                self.document.media.register_existing(part.path, part.data, part.content_type)
            else:
                logger.warning(f"Skipping empty media part {part.path}")

    def _capture_parts(self) -> None:
        """Keep parts that are written back unchanged."""
        package = self.package
        if package.styles:
            self.document.set_styles_part(package.styles)

        regenerated = {
            PATH_CONTENT_TYPES,
            PATH_ROOT_RELS,
            PATH_DOCUMENT_RELS,
            PATH_DOCUMENT,
            PATH_STYLES,
            PATH_NUMBERING,
            PATH_CORE_PROPERTIES,
            PATH_APP_PROPERTIES,
        }
        if self.document.numbering_target:
            regenerated.add(normalize_part_name(normalize_target_path(self.document.numbering_target)))

        for name, data in package.raw_parts.items():
            normalized = normalize_part_name(name)
            if normalized in regenerated or normalized in self.media_parts:
                continue
            if normalized in self.header_trees or normalized in self.footer_trees:
                continue
            self.document.add_package_part(name, data, package.content_type_for(name))

    def _reserve_bookmark_ids(self) -> None:
        """Move the bookmark counter past every numeric id in the package."""
        trees = [self.parsed.document_tree, *self.header_trees.values(), *self.footer_trees.values()]
        highest = 0
        stack = list(trees)
        while stack:
            element = stack.pop()
            if element.local == "bookmarkStart":
                value = element.get_attr("id") or ""
                if value.isdigit():
                    highest = max(highest, int(value))
            stack.extend(element.children)
        if highest:
            self.document.id_manager.ensure_at_least("bookmark", highest)

    def _keep_unreferenced_parts(self) -> None:
        """Header/footer parts no section referenced travel through unchanged."""
        for trees in (self.header_trees, self.footer_trees):
            for normalized in trees:
                if normalized in self.hydrated_parts:
                    continue
                name = self.package.lookup_part(normalized)
                logger.debug(f"Keeping unreferenced part {name}")
                self.document.add_package_part(name, self.package.raw_parts[name], self.package.content_type_for(name))

    def _read_core_properties(self, root: Element) -> Metadata:
        metadata = Metadata()
        for child in root.children:
            value = child.text.strip()
            local = child.local
            if local == "title":
                metadata.title = value
            elif local == "subject":
                metadata.subject = value
            elif local == "creator":
                metadata.creator = value
            elif local == "keywords":
                metadata.keywords = split_keywords(value)
            elif local == "description":
                metadata.description = value
            elif local == "created":
                metadata.created = value
            elif local == "modified":
                metadata.modified = value
        return metadata

    # Sections

    @staticmethod
    def _is_section_carrier(element: Element) -> bool:
        """A paragraph whose only content is a section properties element."""
        ppr = element.find_child("pPr")
        if ppr is None or ppr.find_child("sectPr") is None:
            return False
        if any(child.local != "pPr" for child in element.children):
            return False
        return all(child.local in ("sectPr", "rPr") for child in ppr.children)

    def _apply_section_properties(self, sect_pr: Element, closes_section: bool) -> None:
        """
        Apply a ``sectPr`` to the active section.

        A paragraph-level ``sectPr`` closes the section; the next one opens
        with the break type it names. A ``sectPr`` without ``w:type`` still
        closes the section and opens a ``nextPage`` one, the schema default,
        rather than being folded into the following section.
        """
        if self.suppress_sections > 0:
            logger.debug("Ignoring nested section properties")
            return

        section = self.current_section
        self._apply_layout(section, sect_pr)
        self._hydrate_header_footer_refs(section, sect_pr)

        if closes_section:
            type_element = sect_pr.find_child("type")
            value = type_element.get_attr("val") if type_element is not None else None
            break_type = SECTION_BREAK_TYPES.get(value or "nextPage")
            if break_type is None:
                logger.warning(f"Unknown section break type {value!r}, using nextPage")
                break_type = SectionBreakType.NEXT_PAGE
            self.current_section = self.document.add_section(break_type)

    def _apply_layout(self, section: Section, sect_pr: Element) -> None:
        op = "hydrate.section"
        pg_sz = sect_pr.find_child("pgSz")
        if pg_sz is not None:
            width = _int_attr(pg_sz, "w", op)
            height = _int_attr(pg_sz, "h", op)
            if width and height:
                section.set_page_size(PageSize(width, height))
            orient = pg_sz.get_attr("orient")
            if orient in ("portrait", "landscape"):
                section.set_orientation(Orientation(orient))
            elif width and height:
                section.set_orientation(Orientation.LANDSCAPE if width > height else Orientation.PORTRAIT)

        pg_mar = sect_pr.find_child("pgMar")
        if pg_mar is not None:
            current = section.margins
            values = {}
            for name in ("top", "right", "bottom", "left", "header", "footer"):
                value = _int_attr(pg_mar, name, op)
                values[name] = getattr(current, name) if value is None else value
            section.set_margins(Margins(**values))

        cols = sect_pr.find_child("cols")
        if cols is not None:
            num = _int_attr(cols, "num", op)
            if num is not None and num >= 1:
                section.set_columns(num)

    def _hydrate_header_footer_refs(self, section: Section, sect_pr: Element) -> None:
        for child in sect_pr.children:
            if child.local == "headerReference":
                self._hydrate_reference(section, child, is_header=True)
            elif child.local == "footerReference":
                self._hydrate_reference(section, child, is_header=False)

    def _hydrate_reference(self, section: Section, ref: Element, is_header: bool) -> None:
        kind = "header" if is_header else "footer"
        rel_id = ref.get_attr("id")
        rel = self.relationships.get(rel_id or "")
        if rel is None:
            logger.warning(f"{kind} reference {rel_id!r} has no relationship")
            return

        try:
            hf_type = HeaderFooterType(ref.get_attr("type") or "default")
        except ValueError:
            logger.warning(f"Unknown {kind} type {ref.get_attr('type')!r}, using default")
            hf_type = HeaderFooterType.DEFAULT

        markers = self.hydrated_headers if is_header else self.hydrated_footers
        done = markers.setdefault(section.id, set())
        if hf_type in done:
            return
        done.add(hf_type)

        part: HeaderFooter = section.header(hf_type) if is_header else section.footer(hf_type)
        part.set_existing_relationship(rel.id, rel.target)

        normalized = normalize_part_name(normalize_target_path(rel.target))
        trees = self.header_trees if is_header else self.footer_trees
        tree = trees.get(normalized)
        if tree is None:
            logger.warning(f"{kind} part {rel.target} not found in package")
            return
        self.hydrated_parts.add(normalized)

        previous = self.relationships
        self.relationships = self._part_relationships(normalized, previous)
        self.suppress_sections += 1
        try:
            for child in tree.children:
                if child.local == "p":
                    self._hydrate_paragraph(child, part.add_paragraph())
        finally:
            self.suppress_sections -= 1
            self.relationships = previous
        logger.debug(f"Hydrated {kind} {rel.target} ({hf_type.value}) for section {section.id}")

    def _part_relationships(self, part_name: str, fallback: Dict[str, Relationship]) -> Dict[str, Relationship]:
        """Relationships of a header/footer part; images there resolve against its own rels."""
        rels_path = posixpath.join(posixpath.dirname(part_name), "_rels", posixpath.basename(part_name) + ".rels")
        data = self.package.get_part(rels_path)
        if not data:
            return fallback
        return {rel.id: rel for rel in parse_relationships(data, self.package.lookup_part(rels_path))}

    # Paragraphs and runs

    def _hydrate_body_paragraph(self, element: Element) -> None:
        self._hydrate_paragraph(element, self.document.add_paragraph())
        ppr = element.find_child("pPr")
        sect_pr = ppr.find_child("sectPr") if ppr is not None else None
        if sect_pr is not None:
            self._apply_section_properties(sect_pr, closes_section=True)

    def _hydrate_paragraph(self, element: Element, paragraph: Paragraph) -> None:
        bookmark = _first_bookmark(element)
        if bookmark is not None:
            paragraph.set_bookmark(bookmark.get_attr("id"), bookmark.get_attr("name"))
        self._apply_paragraph_properties(paragraph, element.find_child("pPr"))

        self.field_state.reset()
        for child in element.children:
            local = child.local
            if local == "r":
                self._hydrate_run(child, paragraph)
            elif local == "hyperlink":
                self._hydrate_hyperlink(child, paragraph)
            elif local == "fldSimple":
                self._hydrate_simple_field(child, paragraph)
        self.field_state.reset()

    def _apply_paragraph_properties(self, paragraph: Paragraph, ppr: Optional[Element]) -> None:
        op = "hydrate.paragraph"
        if ppr is None:
            paragraph.clear_numbering()
            return

        style = ppr.find_child("pStyle")
        if style is not None and style.get_attr("val"):
            paragraph.set_style(style.get_attr("val"))

        spacing = ppr.find_child("spacing")
        if spacing is not None:
            before = _int_attr(spacing, "before", op)
            if before is not None:
                paragraph.set_spacing_before(before)
            after = _int_attr(spacing, "after", op)
            if after is not None:
                paragraph.set_spacing_after(after)
            line = _int_attr(spacing, "line", op)
            if line is not None:
                rule = spacing.get_attr("lineRule")
                if rule == "exact":
                    paragraph.set_line_spacing(line, LineSpacingRule.EXACT)
                elif rule == "atLeast":
                    paragraph.set_line_spacing(line, LineSpacingRule.AT_LEAST)
                else:
                    paragraph.set_line_spacing(line, LineSpacingRule.AUTO)

        jc = ppr.find_child("jc")
        if jc is not None:
            alignment = ALIGNMENTS.get(jc.get_attr("val") or "")
            if alignment is None:
                logger.warning(f"Unknown paragraph alignment {jc.get_attr('val')!r}")
            else:
                paragraph.set_alignment(alignment)

        ind = ppr.find_child("ind")
        if ind is not None:
            left = _int_attr(ind, "left", op)
            if left is None:
                left = _int_attr(ind, "start", op)
            right = _int_attr(ind, "right", op)
            if right is None:
                right = _int_attr(ind, "end", op)
            paragraph.set_indent(
                Indentation(
                    left=left or 0,
                    right=right or 0,
                    first_line=_int_attr(ind, "firstLine", op) or 0,
                    hanging=_int_attr(ind, "hanging", op) or 0,
                )
            )

        num_pr = ppr.find_child("numPr")
        num_id_element = num_pr.find_child("numId") if num_pr is not None else None
        num_id = _int_attr(num_id_element, "val", op)
        if num_id is None:
            paragraph.clear_numbering()
        else:
            level = _int_attr(num_pr.find_child("ilvl"), "val", op)
            paragraph.set_numbering(num_id, level or 0)

    def _hydrate_run(self, element: Element, paragraph: Paragraph, extra_fields: Optional[List[Field]] = None) -> Optional[Run]:
        state = self.field_state
        text_parts: List[str] = []
        breaks: List[BreakType] = []
        drawings: List[Element] = []
        rpr: Optional[Element] = None

        for child in element.children:
            local = child.local
            if local == "rPr":
                rpr = child
            elif local == "t":
                text_parts.append(child.text)
            elif local == "tab":
                text_parts.append("\t")
            elif local == "br":
                break_type = BREAK_TYPES.get(child.get_attr("type") or "textWrapping")
                if break_type is None:
                    logger.warning(f"Unknown break type {child.get_attr('type')!r}, using line break")
                    break_type = BreakType.LINE
                breaks.append(break_type)
            elif local == "fldChar":
                char_type = child.get_attr("fldCharType")
                if char_type == "begin":
                    state.begin()
                elif char_type == "separate":
                    state.separate()
                elif char_type == "end":
                    state.end()
            elif local == "instrText":
                state.add_instruction(child.text)
            elif local == "drawing":
                drawings.append(child)

        text = "".join(text_parts)
        if not (text or breaks or extra_fields or drawings or state.should_force_run()):
            return None

        run = paragraph.add_run(text)
        for break_type in breaks:
            run.add_break(break_type)
        if rpr is not None:
            self._apply_run_properties(run, rpr)

        for index, drawing in enumerate(drawings):
            image = self._hydrate_drawing(drawing)
            if image is None:
                continue
            if run.image is None:
                run.set_image(image)
            else:
                paragraph.add_image_run(image)
                logger.debug(f"Run holds drawing {index + 1}, placed in its own run")

        state.attach_to_run(run)

        for field in extra_fields or []:
            field.set_result(run.text)
            field.set_property(PROP_DISPLAY, run.text)
            run.add_field(field)
            run.is_field_result = True
        return run

    def _apply_run_properties(self, run: Run, rpr: Element) -> None:
        op = "hydrate.run"
        has_size = rpr.find_child("sz") is not None
        for child in rpr.children:
            local = child.local
            if local == "b":
                run.set_bold(_is_on(child))
            elif local == "i":
                run.set_italic(_is_on(child))
            elif local == "strike":
                run.set_strike(_is_on(child))
            elif local == "u":
                value = child.get_attr("val") or "single"
                if value == "none":
                    continue
                try:
                    run.set_underline(UnderlineStyle(value))
                except ValueError:
                    logger.warning(f"Unknown underline style {value!r}, using single")
                    run.set_underline(UnderlineStyle.SINGLE)
            elif local == "color":
                value = child.get_attr("val")
                if value and value.lower() != "auto":
                    run.set_color(value)
            elif local == "sz" or (local == "szCs" and not has_size):
                size = _int_attr(child, "val", op)
                if size is not None:
                    run.set_size(size)
            elif local == "rFonts":
                name = child.get_attr("ascii") or child.get_attr("hAnsi")
                east_asia = child.get_attr("eastAsia") or ""
                complex_script = child.get_attr("cs") or ""
                if name or east_asia or complex_script:
                    run.set_font(Font(name or DEFAULT_FONT, east_asia, complex_script))
            elif local == "highlight":
                value = child.get_attr("val")
                if not value or value == "none":
                    continue
                try:
                    run.set_highlight(HighlightColor(value))
                except ValueError:
                    logger.warning(f"Unknown highlight color {value!r}")

    def _hydrate_hyperlink(self, element: Element, paragraph: Paragraph) -> None:
        self.field_state.reset()
        rel_id = element.get_attr("id")
        url = ""
        if rel_id:
            rel = self.relationships.get(rel_id)
            if rel is None:
                logger.warning(f"Hyperlink relationship {rel_id} not found")
            else:
                url = rel.target
        if not url and element.get_attr("anchor"):
            url = "#" + element.get_attr("anchor")

        for child in element.children:
            if child.local != "r":
                continue
            extra: List[Field] = []
            if url:
                code = f'HYPERLINK \\l "{url[1:]}"' if url.startswith("#") else f'HYPERLINK "{url}"'
                field = Field(FieldType.HYPERLINK, code)
                field.set_property(PROP_URL, url)
                if rel_id and rel_id in self.relationships:
                    field.set_property(PROP_RELATIONSHIP_ID, rel_id)
                extra.append(field)
            self._hydrate_run(child, paragraph, extra)
        self.field_state.reset()

    def _hydrate_simple_field(self, element: Element, paragraph: Paragraph) -> None:
        self.field_state.reset()
        instruction = element.get_attr("instr") or ""
        for child in element.children:
            if child.local != "r":
                continue
            field = build_field_from_instruction(instruction)
            self._hydrate_run(child, paragraph, [field] if field is not None else None)
        self.field_state.reset()

    # Drawings

    def _hydrate_drawing(self, drawing: Element) -> Optional[Image]:
        op = "hydrate.drawing"
        container = drawing.find_child("inline")
        floating = False
        if container is None:
            container = drawing.find_child("anchor")
            floating = container is not None
        if container is None:
            logger.warning("Drawing without inline or anchor container skipped")
            return None

        blip = container.find_descendant("blip")
        rel_id = blip.get_attr("embed") if blip is not None else None
        if not rel_id:
            logger.warning("Drawing without embedded picture skipped")
            return None

        rel = self.relationships.get(rel_id)
        if rel is None or not rel.target:
            raise InvalidStateError("image relationship not found", details=rel_id, operation=op)
        path = normalize_target_path(rel.target)
        part = self.media_parts.get(normalize_part_name(path))
        if part is None:
            raise InvalidStateError("image media part not found", details=rel.target, operation=op, part=path)

        media = self.document.media.register_existing(part.path, part.data, part.content_type)
        image = Image.from_package(media.id, media.path, media.data, media.content_type)
        image.set_relationship_id(rel_id)

        description = None
        doc_pr = container.find_child("docPr")
        if doc_pr is not None:
            description = doc_pr.get_attr("descr")
        if not description:
            c_nv_pr = container.find_descendant("cNvPr")
            description = c_nv_pr.get_attr("descr") if c_nv_pr is not None else None
        image.set_description(description or "")

        extent = container.find_child("extent")
        cx = _int_attr(extent, "cx", op)
        cy = _int_attr(extent, "cy", op)
        if not (cx and cy and cx > 0 and cy > 0):
            ext = container.find_descendant("ext")
            cx = _int_attr(ext, "cx", op)
            cy = _int_attr(ext, "cy", op)
        if cx and cy and cx > 0 and cy > 0:
            image.size = ImageSize.from_emu(cx, cy)

        if floating:
            image.set_position(self._read_anchor_position(container))
        return image

    def _read_anchor_position(self, anchor: Element) -> ImagePosition:
        op = "hydrate.drawing"
        position = ImagePosition(type=ImagePositionType.FLOATING)
        position.behind_text = _is_truthy(anchor.get_attr("behindDoc"))
        position.z_order = _int_attr(anchor, "relativeHeight", op) or 0

        for child in anchor.children:
            if child.local in WRAP_ELEMENTS:
                position.wrap_text = WRAP_ELEMENTS[child.local]
                break

        position_h = anchor.find_child("positionH")
        if position_h is not None:
            align = position_h.find_child("align")
            if align is not None and align.text:
                try:
                    position.h_align = HorizontalAlign(align.text.strip())
                except ValueError:
                    logger.warning(f"Unknown horizontal alignment {align.text!r}")
            position.offset_x = _int_attr_text(position_h.find_child("posOffset"), op)

        position_v = anchor.find_child("positionV")
        if position_v is not None:
            align = position_v.find_child("align")
            if align is not None and align.text:
                try:
                    position.v_align = VerticalAlign(align.text.strip())
                except ValueError:
                    logger.warning(f"Unknown vertical alignment {align.text!r}")
            position.offset_y = _int_attr_text(position_v.find_child("posOffset"), op)
        return position

    # Tables

    def _hydrate_table(self, element: Element, add_table: Callable[[int, int], Table]) -> Optional[Table]:
        op = "hydrate.table"
        rows = element.find_children("tr")
        if not rows:
            logger.warning("Table without rows skipped")
            return None

        grid = element.find_child("tblGrid")
        cols = len(grid.find_children("gridCol")) if grid is not None else 0
        for tr in rows:
            cols = max(cols, sum(self._grid_span(tc) for tc in tr.find_children("tc")))
        cols = max(1, min(cols, MAX_TABLE_COLS))

        table = add_table(len(rows), cols)
        self._apply_table_properties(table, element.find_child("tblPr"))

        for row_idx, tr in enumerate(rows):
            row = table.row(row_idx)
            tr_pr = tr.find_child("trPr")
            height = _int_attr(tr_pr.find_child("trHeight") if tr_pr is not None else None, "val", op)
            if height:
                row.set_height(height)

            col = 0
            for tc in tr.find_children("tc"):
                if col >= cols:
                    logger.warning(f"Row {row_idx} has more cells than grid columns")
                    break
                cell = row.cell(col)
                span = min(self._grid_span(tc), cols - col)
                self._apply_cell_properties(cell, tc.find_child("tcPr"), span)
                for follower_idx in range(col + 1, col + span):
                    follower = row.cell(follower_idx)
                    follower.h_merge_owner = cell
                    if cell.v_merge == VerticalMerge.CONTINUE:
                        follower.v_merge = VerticalMerge.CONTINUE
                self._hydrate_cell_content(cell, tc)
                col += span
        return table

    @staticmethod
    def _grid_span(tc: Element) -> int:
        tc_pr = tc.find_child("tcPr")
        span_element = tc_pr.find_child("gridSpan") if tc_pr is not None else None
        span = _int_attr(span_element, "val", "hydrate.table")
        return span if span and span > 1 else 1

    def _apply_table_properties(self, table: Table, tbl_pr: Optional[Element]) -> None:
        if tbl_pr is None:
            return
        style = tbl_pr.find_child("tblStyle")
        if style is not None and style.get_attr("val"):
            table.set_style(style.get_attr("val"))

        tbl_w = tbl_pr.find_child("tblW")
        if tbl_w is not None:
            try:
                width_type = WidthType(tbl_w.get_attr("type") or "auto")
            except ValueError:
                logger.warning(f"Unknown table width type {tbl_w.get_attr('type')!r}")
                width_type = WidthType.AUTO
            table.set_width(TableWidth(width_type, _int_attr(tbl_w, "w", "hydrate.table") or 0))

        jc = tbl_pr.find_child("jc")
        if jc is not None and jc.get_attr("val") in ALIGNMENTS:
            table.set_alignment(ALIGNMENTS[jc.get_attr("val")])

    def _apply_cell_properties(self, cell: TableCell, tc_pr: Optional[Element], span: int) -> None:
        op = "hydrate.table"
        if span > 1:
            cell.set_grid_span(span)
        if tc_pr is None:
            return

        tc_w = tc_pr.find_child("tcW")
        if tc_w is not None and (tc_w.get_attr("type") or "dxa") == "dxa":
            width = _int_attr(tc_w, "w", op)
            if width:
                cell.set_width(width)

        v_merge = tc_pr.find_child("vMerge")
        if v_merge is not None:
            cell.set_v_merge(VerticalMerge.RESTART if v_merge.get_attr("val") == "restart" else VerticalMerge.CONTINUE)

        v_align = tc_pr.find_child("vAlign")
        if v_align is not None:
            alignment = CELL_ALIGNMENTS.get(v_align.get_attr("val") or "")
            if alignment is None:
                logger.warning(f"Unknown cell vertical alignment {v_align.get_attr('val')!r}")
            else:
                cell.set_vertical_alignment(alignment)

        shd = tc_pr.find_child("shd")
        if shd is not None:
            fill = shd.get_attr("fill")
            if fill and fill.lower() != "auto":
                cell.set_shading(fill)

        borders = tc_pr.find_child("tcBorders")
        if borders is not None:
            cell.set_borders(self._read_borders(borders))

    def _read_borders(self, element: Element) -> TableBorders:
        borders = TableBorders()
        sides = {"top": "top", "left": "left", "start": "left", "bottom": "bottom", "right": "right", "end": "right"}
        for child in element.children:
            side = sides.get(child.local)
            if side is None:
                continue
            value = child.get_attr("val") or "none"
            try:
                line = BorderLineStyle(value)
            except ValueError:
                logger.warning(f"Unsupported border style {value!r}, using single")
                line = BorderLineStyle.SINGLE
            color = child.get_attr("color") or "000000"
            if color.lower() == "auto":
                color = "000000"
            setattr(borders, side, BorderStyle(line, _int_attr(child, "sz", "hydrate.table") or 0, color.upper()))
        return borders

    def _hydrate_cell_content(self, cell: TableCell, tc: Element) -> None:
        has_tables = tc.find_child("tbl") is not None
        self.suppress_sections += 1
        try:
            for child in tc.children:
                if child.local == "p":
                    if has_tables and all(c.local == "pPr" for c in child.children):
                        continue
                    self._hydrate_paragraph(child, cell.add_paragraph())
                elif child.local == "tbl":
                    self._hydrate_table(child, cell.add_table)
        finally:
            self.suppress_sections -= 1


def _first_bookmark(paragraph: Element) -> Optional[Element]:
    """First named bookmark opened directly in a paragraph, ignoring ``_GoBack``."""
    for child in paragraph.find_children("bookmarkStart"):
        name = child.get_attr("name")
        if name and name != GO_BACK_BOOKMARK and child.get_attr("id"):
            return child
    return None


def _int_attr_text(element: Optional[Element], operation: str) -> int:
    """Integer content of an element such as ``<wp:posOffset>``; absent gives 0."""
    if element is None or not element.text.strip():
        return 0
    try:
        return int(element.text.strip())
    except ValueError as e:
        raise InvalidArgumentError("invalid integer content", details=f"{element.local}={element.text}", operation=operation) from e


def hydrate_document(document, parsed: ParsedPackage) -> None:
    """Populate ``document`` from a parsed package."""
    DocumentHydrator(document, parsed).hydrate()
