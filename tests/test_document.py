"""
Tests for the Document aggregate.
"""

import pytest

from docx_codec import Document, load_bytes
from docx_codec.constants import REL_TYPE_IMAGE, REL_TYPE_NUMBERING
from docx_codec.exceptions import InvalidArgumentError, InvalidStateError
from docx_codec.models.block import BlockType
from docx_codec.models.field import PROP_URL, FieldType
from docx_codec.models.paragraph import Alignment
from docx_codec.models.section import HeaderFooterType, Orientation, SectionBreakType
from docx_codec.models.toc import TOCOptions
from docx_codec.models.table import VerticalMerge


class TestDocumentContent:
    """Test cases for building document content."""

    def test_new_document_has_one_section(self):
        document = Document()

        assert len(document.sections()) == 1
        assert document.blocks() == []

    def test_blocks_keep_append_order(self):
        document = Document()
        first = document.add_paragraph()
        table = document.add_table(2, 2)
        last = document.add_paragraph()

        assert [b.type for b in document.blocks()] == [BlockType.PARAGRAPH, BlockType.TABLE, BlockType.PARAGRAPH]
        assert document.paragraphs() == [first, last]
        assert document.tables() == [table]

    def test_get_text(self):
        document = Document()
        document.add_paragraph().add_run("Hello")
        document.add_section()
        document.add_paragraph().add_run("World")

        assert document.get_text() == "Hello\nWorld"

    def test_add_section(self):
        document = Document()
        first = document.current_section
        first.set_orientation(Orientation.LANDSCAPE)
        first.header().add_paragraph()

        second = document.add_section(SectionBreakType.EVEN_PAGE)

        assert document.current_section is second
        assert second.orientation == Orientation.LANDSCAPE
        assert second.headers == {}
        marker = document.blocks()[-1]
        assert marker.type == BlockType.SECTION_BREAK
        assert marker.element.section is first
        assert marker.element.break_type == SectionBreakType.EVEN_PAGE

    def test_add_section_rejects_unknown_type(self):
        document = Document()

        with pytest.raises(InvalidArgumentError):
            document.add_section("nextPage")
        assert len(document.sections()) == 1
        assert document.blocks() == []

    def test_add_image(self, png_bytes):
        document = Document()
        image = document.add_image(png_bytes(40, 20), "logo.PNG")

        rel = document.relationships.get(image.relationship_id)
        assert rel.type == REL_TYPE_IMAGE
        assert rel.target == "media/image1.png"
        assert image.size.width_px == 40
        assert document.media.get(image.id).path == "word/media/image1.png"

    def test_numbering_part(self):
        document = Document()
        document.set_numbering_part(b"<w:numbering/>")

        assert document.relationships.find(REL_TYPE_NUMBERING).target == "numbering.xml"
        with pytest.raises(InvalidArgumentError):
            document.set_numbering_part(b"")


class TestDocumentValidate:
    """Test cases for Document.validate."""

    def test_valid_document(self):
        document = Document()
        table = document.add_table(3, 3)
        table.cell(0, 0).merge(cols=2, rows=2)
        document.add_section()

        assert document.validate()

    def test_orphan_continuation(self):
        document = Document()
        table = document.add_table(2, 2)
        table.cell(1, 1).set_v_merge(VerticalMerge.CONTINUE)

        with pytest.raises(InvalidStateError) as exc_info:
            document.validate()

        assert "(1, 1)" in exc_info.value.details

    def test_orphan_continuation_in_nested_table(self):
        document = Document()
        nested = document.add_table(1, 1).cell(0, 0).add_table(2, 1)
        nested.cell(0, 0).set_v_merge(VerticalMerge.CONTINUE)

        with pytest.raises(InvalidStateError):
            document.validate()


@pytest.fixture
def outline():
    document = Document()
    for style, text in (("Heading1", "Introduction"), ("Heading2", "Scope"), ("Heading4", "Detail"), ("Heading1", "")):
        paragraph = document.add_paragraph()
        paragraph.set_style(style)
        paragraph.add_run(text)
    document.add_paragraph().add_run("Body text")
    return document


class TestTableOfContents:
    """Test cases for TOC generation."""

    def test_scan_headings(self, outline):
        entries = outline.scan_headings()
        headings = outline.paragraphs()

        assert [(e.level, e.text) for e in entries] == [(1, "Introduction"), (2, "Scope")]
        assert [e.bookmark_name for e in entries] == [headings[0].bookmark_name, headings[1].bookmark_name]
        assert [e.page_number for e in entries] == ["1", "2"]

    def test_scan_mints_missing_bookmark(self):
        document = Document()
        paragraph = document.add_paragraph()
        paragraph.style_name = "Heading3"
        paragraph.add_run("Appendix")

        entry = document.scan_headings()[0]

        assert entry.bookmark_name == paragraph.bookmark_name
        assert entry.bookmark_name.startswith("_Toc")

    def test_add_toc_with_entries(self, outline):
        entries = outline.scan_headings()
        field = outline.add_toc(entries=entries)

        title, field_paragraph, first, second = outline.paragraphs()[-4:]
        assert field.field_type == FieldType.TOC
        assert field.code == 'TOC \\o "1-3" \\h \\z \\u'
        assert field_paragraph.fields() == [field]
        assert title.text == "Table of Contents"
        assert title.alignment == Alignment.CENTER
        assert title.runs[0].bold

        link, page_ref = first.fields()
        assert link.get_property(PROP_URL) == f"#{entries[0].bookmark_name}"
        assert link.code == f'HYPERLINK \\l "{entries[0].bookmark_name}"'
        assert page_ref.code == f"PAGEREF {entries[0].bookmark_name} \\h"
        assert page_ref.result == "1"
        assert first.text == "Introduction\t1"
        assert first.indent.left == 0
        assert second.indent.left == 360

    def test_plain_toc(self, outline):
        options = TOCOptions(title="", page_numbers=False, hyperlinks=False)
        field = outline.add_toc(options, outline.scan_headings())

        field_paragraph, first, _ = outline.paragraphs()[-3:]
        assert field.code == 'TOC \\o "1-3" \\h \\n \\z \\u'
        assert field_paragraph.fields() == [field]
        assert first.fields() == []
        assert first.text == "Introduction"

    @pytest.mark.parametrize("depth", [0, 10])
    def test_invalid_depth(self, outline, depth):
        count = len(outline.blocks())

        with pytest.raises(InvalidArgumentError):
            outline.add_toc(TOCOptions(depth=depth))
        assert len(outline.blocks()) == count

    def test_regenerate_inserts_at_start_then_replaces(self, outline):
        outline.regenerate_toc()
        count = len(outline.blocks())
        outline.regenerate_toc(TOCOptions(depth=4))

        paragraphs = outline.paragraphs()
        assert len(outline.blocks()) == count + 1
        assert paragraphs[0].text == "Table of Contents"
        assert paragraphs[1].fields()[0].code.startswith('TOC \\o "1-4"')
        assert [p.text.split("\t")[0] for p in paragraphs[2:5]] == ["Introduction", "Scope", "Detail"]
        assert paragraphs[5].style_name == "Heading1"

    def test_regenerate_without_headings(self):
        document = Document()
        document.add_paragraph().add_run("No headings")

        with pytest.raises(InvalidStateError):
            document.regenerate_toc()

    def test_toc_links_survive_round_trip(self, outline):
        outline.regenerate_toc()

        paragraphs = load_bytes(outline.to_bytes()).paragraphs()

        toc = paragraphs[1].fields()[0]
        assert toc.field_type == FieldType.TOC
        assert toc.code.startswith('TOC \\o "1-3" \\h')
        heading = paragraphs[4]
        assert heading.text == "Introduction"
        link, page_ref = paragraphs[2].fields()
        assert link.field_type == FieldType.HYPERLINK
        assert link.get_property(PROP_URL) == f"#{heading.bookmark_name}"
        assert page_ref.code == f"PAGEREF {heading.bookmark_name} \\h"


class TestHeaderFooterHelpers:
    """Test cases for the header and footer shortcuts."""

    def test_page_number_footer(self):
        document = Document()
        paragraph = document.add_page_number_footer()

        footer = document.current_section.footers[HeaderFooterType.DEFAULT]
        assert footer.paragraphs == [paragraph]
        assert [f.field_type for f in paragraph.fields()] == [FieldType.PAGE_NUMBER, FieldType.PAGE_COUNT]
        assert paragraph.alignment == Alignment.CENTER

        loaded = load_bytes(document.to_bytes()).sections()[0]
        assert loaded.footers[HeaderFooterType.DEFAULT].get_text() == "Page 1 of 1"

    def test_document_title_header(self):
        document = Document()
        paragraph = document.add_document_title_header("Annual Report")

        run = paragraph.runs[0]
        assert document.current_section.headers[HeaderFooterType.DEFAULT].get_text() == "Annual Report"
        assert run.size == 20
        assert run.color == "666666"
        assert paragraph.alignment == Alignment.CENTER

    def test_document_title_header_requires_title(self):
        with pytest.raises(InvalidArgumentError):
            Document().add_document_title_header("")
