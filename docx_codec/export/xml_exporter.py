"""
XML exporter for DOCX documents.

Serializes the document model to WordML element trees: the main
document, header and footer parts, the built-in style sheet and the
core/app property parts.
"""

import itertools
import logging
import xml.etree.ElementTree as ET
from typing import Iterator, List, Optional

from ..constants import (
    DEFAULT_COLOR,
    DEFAULT_FONT,
    DEFAULT_FONT_SIZE,
    DEFAULT_LINE_SPACING,
    HYPERLINK_COLOR,
    HYPERLINK_STYLE,
    NAMESPACE_PREFIXES,
    NS_EXTENDED_PROPERTIES,
    NS_XML,
    NS_XSI,
    PAGE_SIZE_LETTER,
)
from ..exceptions import StructuralError
from ..models.block import BlockType
from ..models.field import PROP_DISPLAY, PROP_RELATIONSHIP_ID, PROP_URL, Field, FieldType
from ..models.metadata import w3cdtf_now
from ..models.paragraph import Alignment, LineSpacingRule, Paragraph
from ..models.run import BreakType, HighlightColor, Run, UnderlineStyle
from ..models.section import HeaderFooter, HeaderFooterType, Orientation, Section, SectionBreakType
from ..models.table import BorderLineStyle, CellVerticalAlign, Table, TableCell, VerticalMerge
from .drawing import build_drawing, qn, sub

logger = logging.getLogger(__name__)

XML_SPACE = f"{{{NS_XML}}}space"
XSI_TYPE = f"{{{NS_XSI}}}type"

# (style id, display name, outline level, size in half-points)
BUILTIN_HEADINGS = (
    ("Title", "Title", None, 56),
    ("Heading1", "heading 1", 0, 32),
    ("Heading2", "heading 2", 1, 26),
    ("Heading3", "heading 3", 2, 24),
)


def _needs_preserve(text: str) -> bool:
    return text != text.strip()


class XMLExporter:
    """
    Serializes a document model to WordML.

    One drawing-id counter is shared by every paragraph and table
    serialized through this exporter so that each picture in the
    document gets a distinct ``wp:docPr`` id.
    """

    def __init__(self, document):
        """
        Initialize XML exporter.

        Args:
            document: Document to export
        """
        if document is None:
            raise StructuralError("document cannot be None", operation="XMLExporter")
        self.document = document
        self._drawing_ids: Iterator[int] = itertools.count(1)

        # Register namespaces to preserve prefixes in ET.tostring
        for prefix, uri in NAMESPACE_PREFIXES.items():
            ET.register_namespace(prefix, uri)

        logger.debug("XML exporter initialized")

    def next_drawing_id(self) -> int:
        return next(self._drawing_ids)

    @staticmethod
    def to_bytes(element: ET.Element) -> bytes:
        return ET.tostring(element, encoding="UTF-8", xml_declaration=True)

    # Document body

    def export_document(self) -> ET.Element:
        """
        Build the ``w:document`` tree.

        Blocks are written in order. A section break becomes an empty
        paragraph carrying the closed section's properties and break type;
        the last section's properties close the body.
        """
        root = ET.Element(qn("w:document"))
        body = sub(root, "w:body")

        for block in self.document.blocks():
            if block.type == BlockType.PARAGRAPH:
                body.append(self.export_paragraph(block.element))
            elif block.type == BlockType.TABLE:
                body.append(self.export_table(block.element))
            elif block.type == BlockType.SECTION_BREAK:
                p = sub(body, "w:p")
                pPr = sub(p, "w:pPr")
                pPr.append(self.export_section_properties(block.element.section, block.element.break_type))

        body.append(self.export_section_properties(self.document.current_section))
        return root

    def export_section_properties(self, section: Section, break_type: Optional[SectionBreakType] = None) -> ET.Element:
        """Build a ``w:sectPr`` for a section, with a ``w:type`` when it closes with a break."""
        sectPr = ET.Element(qn("w:sectPr"))
        for hf_type, header in section.headers.items():
            if header.relationship_id:
                sub(sectPr, "w:headerReference", w_type=hf_type.value, r_id=header.relationship_id)
        for hf_type, footer in section.footers.items():
            if footer.relationship_id:
                sub(sectPr, "w:footerReference", w_type=hf_type.value, r_id=footer.relationship_id)

        if break_type is not None:
            sub(sectPr, "w:type", w_val=break_type.value)

        width, height = section.page_size.width, section.page_size.height
        if width <= 0 or height <= 0:
            width, height = PAGE_SIZE_LETTER
        pgSz = sub(sectPr, "w:pgSz", w_w=str(width), w_h=str(height))
        if section.orientation == Orientation.LANDSCAPE:
            pgSz.set(qn("w:orient"), "landscape")

        margins = section.margins
        sub(
            sectPr,
            "w:pgMar",
            w_top=str(margins.top),
            w_right=str(margins.right),
            w_bottom=str(margins.bottom),
            w_left=str(margins.left),
            w_header=str(margins.header),
            w_footer=str(margins.footer),
            w_gutter="0",
        )
        if section.columns > 1:
            sub(sectPr, "w:cols", w_num=str(section.columns))
        if HeaderFooterType.FIRST in section.headers or HeaderFooterType.FIRST in section.footers:
            sub(sectPr, "w:titlePg")
        return sectPr

    def export_header_footer(self, part: HeaderFooter) -> ET.Element:
        """Build a ``w:hdr`` or ``w:ftr`` part tree."""
        root = ET.Element(qn("w:hdr" if part.kind == "header" else "w:ftr"))
        for paragraph in part.paragraphs:
            root.append(self.export_paragraph(paragraph))
        if not part.paragraphs:
            sub(root, "w:p")
        return root

    # Paragraphs

    def export_paragraph(self, paragraph: Paragraph) -> ET.Element:
        p = ET.Element(qn("w:p"))
        pPr = self._paragraph_properties(paragraph)
        if pPr is not None:
            p.append(pPr)

        if paragraph.bookmark_id:
            sub(p, "w:bookmarkStart", w_id=paragraph.bookmark_id, w_name=paragraph.bookmark_name)

        for run in paragraph.runs:
            if run.fields:
                self._expand_run_with_fields(p, run)
            elif run.image is None and "\n" in run.text:
                lines = run.text.split("\n")
                for index, line in enumerate(lines):
                    last = index == len(lines) - 1
                    r = self.export_run(run, text=line, include_breaks=last)
                    if not last:
                        sub(r, "w:br")
                    p.append(r)
            else:
                p.append(self.export_run(run))

        if paragraph.bookmark_id:
            sub(p, "w:bookmarkEnd", w_id=paragraph.bookmark_id)
        return p

    def _paragraph_properties(self, paragraph: Paragraph) -> Optional[ET.Element]:
        pPr = ET.Element(qn("w:pPr"))
        if paragraph.style_name:
            sub(pPr, "w:pStyle", w_val=paragraph.style_name)

        if paragraph.numbering is not None:
            numPr = sub(pPr, "w:numPr")
            sub(numPr, "w:ilvl", w_val=str(paragraph.numbering.level))
            sub(numPr, "w:numId", w_val=str(paragraph.numbering.num_id))

        line = paragraph.line_spacing
        custom_line = line.value != DEFAULT_LINE_SPACING or line.rule != LineSpacingRule.AUTO
        if paragraph.spacing_before or paragraph.spacing_after or custom_line:
            spacing = sub(pPr, "w:spacing")
            if paragraph.spacing_before:
                spacing.set(qn("w:before"), str(paragraph.spacing_before))
            if paragraph.spacing_after:
                spacing.set(qn("w:after"), str(paragraph.spacing_after))
            if custom_line:
                spacing.set(qn("w:line"), str(line.value))
                spacing.set(qn("w:lineRule"), line.rule.value)

        indent = paragraph.indent
        ind_attrs = {
            "w_left": indent.left,
            "w_right": indent.right,
            "w_firstLine": indent.first_line,
            "w_hanging": indent.hanging,
        }
        ind_attrs = {key: str(value) for key, value in ind_attrs.items() if value}
        if ind_attrs:
            sub(pPr, "w:ind", **ind_attrs)

        if paragraph.alignment != Alignment.LEFT:
            sub(pPr, "w:jc", w_val=paragraph.alignment.value)

        return pPr if len(pPr) else None

    # Runs

    def export_run(self, run: Run, text: Optional[str] = None, include_breaks: bool = True, style: str = "") -> ET.Element:
        """
        Build a ``w:r`` element.

        Args:
            run: Source run
            text: Text to write instead of ``run.text``
            include_breaks: Whether to append the run's break markers
            style: Character style id for ``w:rStyle``
        """
        r = ET.Element(qn("w:r"))
        rPr = self._run_properties(run, style)
        if rPr is not None:
            r.append(rPr)

        if run.image is not None:
            r.append(build_drawing(run.image, self.next_drawing_id()))
        else:
            self._add_text(r, run.text if text is None else text)

        if include_breaks:
            for break_type in run.breaks:
                br = sub(r, "w:br")
                if break_type == BreakType.PAGE:
                    br.set(qn("w:type"), "page")
                elif break_type == BreakType.COLUMN:
                    br.set(qn("w:type"), "column")
        return r

    @staticmethod
    def _add_text(r: ET.Element, text: str) -> None:
        """Append text, writing tabs as ``w:tab`` and newlines as ``w:br``."""
        for line_index, line in enumerate(text.split("\n")):
            if line_index:
                sub(r, "w:br")
            for index, chunk in enumerate(line.split("\t")):
                if index:
                    sub(r, "w:tab")
                if not chunk:
                    continue
                t = sub(r, "w:t")
                t.text = chunk
                if _needs_preserve(chunk):
                    t.set(XML_SPACE, "preserve")

    def _run_properties(self, run: Run, style: str = "") -> Optional[ET.Element]:
        """Run properties that differ from the defaults, in schema order."""
        rPr = ET.Element(qn("w:rPr"))
        if style:
            sub(rPr, "w:rStyle", w_val=style)

        font = run.font
        if font.name != DEFAULT_FONT or font.east_asia or font.complex_script:
            rFonts = sub(rPr, "w:rFonts")
            if font.name != DEFAULT_FONT:
                rFonts.set(qn("w:ascii"), font.name)
                rFonts.set(qn("w:hAnsi"), font.name)
            if font.east_asia:
                rFonts.set(qn("w:eastAsia"), font.east_asia)
            if font.complex_script:
                rFonts.set(qn("w:cs"), font.complex_script)

        if run.bold:
            sub(rPr, "w:b")
        if run.italic:
            sub(rPr, "w:i")
        if run.strike:
            sub(rPr, "w:strike")
        if run.color != DEFAULT_COLOR:
            sub(rPr, "w:color", w_val=run.color)
        if run.size != DEFAULT_FONT_SIZE:
            sub(rPr, "w:sz", w_val=str(run.size))
            sub(rPr, "w:szCs", w_val=str(run.size))
        if run.highlight != HighlightColor.NONE:
            sub(rPr, "w:highlight", w_val=run.highlight.value)
        if run.underline != UnderlineStyle.NONE:
            sub(rPr, "w:u", w_val=run.underline.value)

        return rPr if len(rPr) else None

    def _expand_run_with_fields(self, p: ET.Element, run: Run) -> None:
        """
        Write a run that carries fields.

        A hyperlink with a relationship id becomes a ``w:hyperlink``; any
        other field becomes a begin/instrText/separate/result/end sequence.
        """
        for field in run.fields:
            rel_id = field.get_property(PROP_RELATIONSHIP_ID)
            if field.field_type == FieldType.HYPERLINK and rel_id:
                hyperlink = sub(p, "w:hyperlink", r_id=rel_id)
                text = field.result or field.get_property(PROP_DISPLAY, "") or ""
                hyperlink.append(self.export_run(run, text=text, include_breaks=False, style=HYPERLINK_STYLE))
                continue

            if field.field_type != FieldType.HYPERLINK:
                was_dirty = field.is_dirty()
                field.update()
                if was_dirty:
                    field.mark_dirty()
            self._append_complex_field(p, run, field)

        remainder = "" if run.is_field_result else run.text
        if remainder or run.breaks or run.image is not None:
            p.append(self.export_run(run, text=remainder))

    def _append_complex_field(self, p: ET.Element, run: Run, field: Field) -> None:
        begin = self._field_run(p, run)
        fldChar = sub(begin, "w:fldChar", w_fldCharType="begin")
        if field.is_dirty():
            fldChar.set(qn("w:dirty"), "true")

        instr = sub(self._field_run(p, run), "w:instrText")
        instr.set(XML_SPACE, "preserve")
        instr.text = f" {self._instruction(field)} "

        sub(self._field_run(p, run), "w:fldChar", w_fldCharType="separate")
        result = field.result
        if result:
            r = self._field_run(p, run)
            self._add_text(r, result)
        sub(self._field_run(p, run), "w:fldChar", w_fldCharType="end")

    @staticmethod
    def _instruction(field: Field) -> str:
        """Field code, with in-document hyperlinks written as ``HYPERLINK \\l "anchor"``."""
        url = field.get_property(PROP_URL) or ""
        if field.field_type == FieldType.HYPERLINK and url.startswith("#") and "\\l" not in field.code:
            return f'HYPERLINK \\l "{url[1:]}"'
        return field.code

    def _field_run(self, p: ET.Element, run: Run) -> ET.Element:
        r = sub(p, "w:r")
        rPr = self._run_properties(run)
        if rPr is not None:
            r.append(rPr)
        return r

    # Tables

    def export_table(self, table: Table) -> ET.Element:
        tbl = ET.Element(qn("w:tbl"))
        tblPr = sub(tbl, "w:tblPr")
        if table.style_name:
            sub(tblPr, "w:tblStyle", w_val=table.style_name)
        sub(tblPr, "w:tblW", w_w=str(table.width.value), w_type=table.width.type.value)
        if table.alignment in (Alignment.CENTER, Alignment.RIGHT):
            sub(tblPr, "w:jc", w_val=table.alignment.value)
        sub(tblPr, "w:tblLook", w_val="04A0")

        tblGrid = sub(tbl, "w:tblGrid")
        first_row = table.rows[0]
        for col in range(table.column_count):
            width = first_row.cells[col].width
            sub(tblGrid, "w:gridCol", w_w=str(width if width > 0 else 0))

        for row in table.rows:
            tr = sub(tbl, "w:tr")
            if row.height > 0:
                trPr = sub(tr, "w:trPr")
                sub(trPr, "w:trHeight", w_val=str(row.height), w_hRule="atLeast")
            for cell in row.cells:
                if cell.is_h_merge_continuation:
                    continue
                tr.append(self._export_cell(cell))
        return tbl

    def _export_cell(self, cell: TableCell) -> ET.Element:
        tc = ET.Element(qn("w:tc"))
        tcPr = sub(tc, "w:tcPr")
        if cell.width > 0:
            sub(tcPr, "w:tcW", w_w=str(cell.width), w_type="dxa")
        else:
            sub(tcPr, "w:tcW", w_w="0", w_type="auto")
        if cell.grid_span > 1:
            sub(tcPr, "w:gridSpan", w_val=str(cell.grid_span))
        if cell.v_merge == VerticalMerge.RESTART:
            sub(tcPr, "w:vMerge", w_val="restart")
        elif cell.v_merge == VerticalMerge.CONTINUE:
            sub(tcPr, "w:vMerge")

        if not cell.borders.is_empty():
            tcBorders = sub(tcPr, "w:tcBorders")
            for side in ("top", "left", "bottom", "right"):
                border = getattr(cell.borders, side)
                if border.style == BorderLineStyle.NONE:
                    continue
                sub(tcBorders, f"w:{side}", w_val=border.style.value, w_sz=str(border.width), w_space="0", w_color=border.color)

        if cell.shading != "FFFFFF":
            sub(tcPr, "w:shd", w_val="clear", w_color="auto", w_fill=cell.shading)
        if cell.vertical_alignment != CellVerticalAlign.TOP:
            sub(tcPr, "w:vAlign", w_val=cell.vertical_alignment.value)

        for paragraph in cell.paragraphs:
            tc.append(self.export_paragraph(paragraph))
        if cell.tables:
            if not cell.paragraphs:
                sub(tc, "w:p")
            for nested in cell.tables:
                tc.append(self.export_table(nested))
            # A cell must end with a paragraph
            sub(tc, "w:p")
        elif not cell.paragraphs:
            sub(tc, "w:p")
        return tc

    # Auxiliary parts

    def export_styles(self) -> ET.Element:
        """Built-in minimal style sheet used when the document carries none."""
        styles = ET.Element(qn("w:styles"))
        doc_defaults = sub(styles, "w:docDefaults")
        rPrDefault = sub(sub(doc_defaults, "w:rPrDefault"), "w:rPr")
        sub(rPrDefault, "w:rFonts", w_ascii=DEFAULT_FONT, w_hAnsi=DEFAULT_FONT, w_eastAsia=DEFAULT_FONT, w_cs=DEFAULT_FONT)
        sub(rPrDefault, "w:sz", w_val=str(DEFAULT_FONT_SIZE))
        sub(rPrDefault, "w:szCs", w_val=str(DEFAULT_FONT_SIZE))
        pPrDefault = sub(sub(doc_defaults, "w:pPrDefault"), "w:pPr")
        sub(pPrDefault, "w:spacing", w_after="160", w_line="259", w_lineRule="auto")

        normal = sub(styles, "w:style", w_type="paragraph", w_default="1", w_styleId="Normal")
        sub(normal, "w:name", w_val="Normal")
        sub(normal, "w:qFormat")

        for style_id, name, outline, size in BUILTIN_HEADINGS:
            style = sub(styles, "w:style", w_type="paragraph", w_styleId=style_id)
            sub(style, "w:name", w_val=name)
            sub(style, "w:basedOn", w_val="Normal")
            sub(style, "w:next", w_val="Normal")
            sub(style, "w:qFormat")
            pPr = sub(style, "w:pPr")
            sub(pPr, "w:keepNext")
            if outline is not None:
                sub(pPr, "w:outlineLvl", w_val=str(outline))
            rPr = sub(style, "w:rPr")
            sub(rPr, "w:b")
            sub(rPr, "w:sz", w_val=str(size))
            sub(rPr, "w:szCs", w_val=str(size))

        hyperlink = sub(styles, "w:style", w_type="character", w_styleId=HYPERLINK_STYLE)
        sub(hyperlink, "w:name", w_val=HYPERLINK_STYLE)
        rPr = sub(hyperlink, "w:rPr")
        sub(rPr, "w:color", w_val=HYPERLINK_COLOR)
        sub(rPr, "w:u", w_val="single")

        grid = sub(styles, "w:style", w_type="table", w_styleId="TableGrid")
        sub(grid, "w:name", w_val="Table Grid")
        tblPr = sub(grid, "w:tblPr")
        tblBorders = sub(tblPr, "w:tblBorders")
        for side in ("top", "left", "bottom", "right", "insideH", "insideV"):
            sub(tblBorders, f"w:{side}", w_val="single", w_sz="4", w_space="0", w_color="auto")
        return styles

    def export_core_properties(self) -> ET.Element:
        metadata = self.document.metadata
        root = ET.Element(qn("cp:coreProperties"))
        for tag, value in (
            ("dc:title", metadata.title),
            ("dc:subject", metadata.subject),
            ("dc:creator", metadata.creator),
            ("cp:keywords", ", ".join(metadata.keywords)),
            ("dc:description", metadata.description),
        ):
            if value:
                sub(root, tag).text = value

        created = metadata.created or w3cdtf_now()
        modified = metadata.modified or created
        for tag, value in (("dcterms:created", created), ("dcterms:modified", modified)):
            element = sub(root, tag)
            element.set(XSI_TYPE, "dcterms:W3CDTF")
            element.text = value
        return root

    def export_app_properties(self, application_name: str) -> ET.Element:
        root = ET.Element("Properties", xmlns=NS_EXTENDED_PROPERTIES)
        ET.SubElement(root, "Application").text = application_name
        ET.SubElement(root, "DocSecurity").text = "0"
        ET.SubElement(root, "Paragraphs").text = str(len(self.document.paragraphs()))
        return root

    def header_footer_parts(self) -> List[HeaderFooter]:
        """All headers and footers of all sections, in section order."""
        parts: List[HeaderFooter] = []
        for section in self.document.sections():
            parts.extend(section.headers.values())
            parts.extend(section.footers.values())
        return parts
