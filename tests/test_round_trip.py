"""
Write-then-read tests across the whole codec.
"""

import io

import pytest

from docx_codec import Document, load, load_bytes, load_stream
from docx_codec.models.block import BlockType
from docx_codec.models.field import PROP_URL, FieldType
from docx_codec.models.metadata import Metadata
from docx_codec.models.section import (
    PAGE_A4,
    PAGE_LETTER,
    HeaderFooterType,
    Orientation,
    PageSize,
    SectionBreakType,
)
from docx_codec.models.table import VerticalMerge
from tests.conftest import read_parts


def reload(document):
    return load_bytes(document.to_bytes())


class TestTextRoundTrip:
    """Test cases for paragraphs and runs."""

    def test_bold_run(self):
        document = Document()
        paragraph = document.add_paragraph()
        paragraph.add_run("Hello, ")
        paragraph.add_run("reader!").set_bold()

        loaded = reload(document)

        paragraphs = loaded.paragraphs()
        assert len(paragraphs) == 1
        assert paragraphs[0].text == "Hello, reader!"
        assert not paragraphs[0].runs[0].bold
        assert paragraphs[0].runs[1].bold

    def test_whitespace_and_tabs(self):
        document = Document()
        document.add_paragraph().add_run("  indented\tcolumn ")

        assert reload(document).paragraphs()[0].text == "  indented\tcolumn "

    def test_load_from_path_and_stream(self, temp_dir):
        document = Document()
        document.add_paragraph().add_run("On disk")
        path = temp_dir / "saved.docx"
        document.save(path)

        assert load(path).get_text() == "On disk"
        assert load(str(path)).get_text() == "On disk"
        with open(path, "rb") as handle:
            assert load_stream(handle).get_text() == "On disk"
        assert load_stream(io.BytesIO(path.read_bytes())).get_text() == "On disk"


class TestSectionRoundTrip:
    """Test cases for multi-section documents."""

    @pytest.fixture
    def two_sections(self):
        document = Document()
        first = document.current_section
        first.set_orientation(Orientation.LANDSCAPE)
        first.set_page_size(PageSize(PAGE_A4.height, PAGE_A4.width))
        first.set_columns(2)
        first.header().add_paragraph().add_run("Landscape header")
        document.add_paragraph().add_run("Wide page")

        second = document.add_section(SectionBreakType.EVEN_PAGE)
        second.set_orientation(Orientation.PORTRAIT)
        second.set_page_size(PAGE_LETTER)
        second.set_columns(3)
        second.footer().add_paragraph().add_run("Portrait footer")
        document.add_paragraph().add_run("Letter page")
        return document

    def test_layout_survives(self, two_sections):
        loaded = reload(two_sections)

        first, second = loaded.sections()
        assert first.orientation == Orientation.LANDSCAPE
        assert (first.page_size.width, first.page_size.height) == (16838, 11906)
        assert first.columns == 2
        assert second.orientation == Orientation.PORTRAIT
        assert (second.page_size.width, second.page_size.height) == (12240, 15840)
        assert second.columns == 3

    def test_break_type_and_block_order(self, two_sections):
        loaded = reload(two_sections)

        assert [b.type for b in loaded.blocks()] == [BlockType.PARAGRAPH, BlockType.SECTION_BREAK, BlockType.PARAGRAPH]
        assert loaded.blocks()[1].element.break_type == SectionBreakType.EVEN_PAGE
        assert loaded.get_text() == "Wide page\nLetter page"

    def test_headers_stay_with_their_section(self, two_sections):
        first, second = reload(two_sections).sections()

        assert first.headers[HeaderFooterType.DEFAULT].get_text() == "Landscape header"
        assert first.footers == {}
        assert second.headers == {}
        assert second.footers[HeaderFooterType.DEFAULT].get_text() == "Portrait footer"

    def test_second_round_trip_is_stable(self, two_sections):
        once = reload(two_sections)
        data = once.to_bytes()
        twice = load_bytes(data)

        names = [name for name in read_parts(data) if name.startswith("word/header") or name.startswith("word/footer")]
        assert sorted(names) == ["word/footer1.xml", "word/header1.xml"]
        assert twice.sections()[0].headers[HeaderFooterType.DEFAULT].get_text() == "Landscape header"
        assert twice.sections()[1].footers[HeaderFooterType.DEFAULT].get_text() == "Portrait footer"

    def test_first_page_header(self):
        document = Document()
        document.current_section.header(HeaderFooterType.FIRST).add_paragraph().add_run("Cover")
        document.add_paragraph()

        section = reload(document).sections()[0]

        assert section.headers[HeaderFooterType.FIRST].get_text() == "Cover"


class TestContentRoundTrip:
    """Test cases for images, tables, links, fields and metadata."""

    def test_image(self, png_bytes):
        document = Document()
        data = png_bytes(100, 50)
        image = document.add_image(data, "chart.png")
        image.set_description("Quarterly chart")
        document.add_paragraph().add_image_run(image)

        loaded_image = reload(document).paragraphs()[0].runs[0].image

        assert loaded_image.data == data
        assert loaded_image.target == "media/image1.png"
        assert loaded_image.size.width_emu == 952500
        assert loaded_image.size.height_emu == 476250
        assert loaded_image.description == "Quarterly chart"

    def test_table_merges(self):
        document = Document()
        table = document.add_table(3, 3)
        table.cell(0, 0).merge(cols=2, rows=2)
        table.cell(2, 2).add_paragraph().add_run("corner")

        loaded = reload(document).tables()[0]

        assert (loaded.row_count, loaded.column_count) == (3, 3)
        anchor = loaded.cell(0, 0)
        assert anchor.grid_span == 2
        assert anchor.v_merge == VerticalMerge.RESTART
        assert loaded.cell(0, 1).h_merge_owner is anchor
        assert loaded.cell(1, 0).v_merge == VerticalMerge.CONTINUE
        assert loaded.cell(1, 1).h_merge_owner is loaded.cell(1, 0)
        assert loaded.cell(2, 2).get_text() == "corner"

    def test_nested_table(self):
        document = Document()
        outer = document.add_table(1, 2)
        outer.cell(0, 1).add_table(2, 2).cell(1, 1).add_paragraph().add_run("inner")

        loaded = reload(document).tables()[0]

        nested = loaded.cell(0, 1).tables[0]
        assert nested.cell(1, 1).get_text() == "inner"

    def test_hyperlink(self):
        document = Document()
        document.add_paragraph().add_hyperlink("https://example.com/docs", "Docs")

        run = reload(document).paragraphs()[0].runs[0]

        field = run.fields[0]
        assert run.text == "Docs"
        assert field.field_type == FieldType.HYPERLINK
        assert field.get_property(PROP_URL) == "https://example.com/docs"

    def test_page_field(self):
        document = Document()
        paragraph = document.add_paragraph()
        paragraph.add_run("Page ")
        paragraph.add_field(FieldType.PAGE_NUMBER)

        loaded = reload(document).paragraphs()[0]

        fields = loaded.fields()
        assert len(fields) == 1
        assert fields[0].field_type == FieldType.PAGE_NUMBER
        assert fields[0].code == "PAGE"
        assert loaded.text == "Page 1"

    def test_metadata(self):
        document = Document()
        document.set_metadata(
            Metadata(
                title="Annual Report",
                creator="Finance",
                keywords=["budget", "2024"],
                created="2024-01-31T10:00:00Z",
            )
        )

        metadata = reload(document).metadata

        assert metadata.title == "Annual Report"
        assert metadata.creator == "Finance"
        assert metadata.keywords == ["budget", "2024"]
        assert metadata.created == "2024-01-31T10:00:00Z"
        assert metadata.modified == "2024-01-31T10:00:00Z"

    def test_heading_bookmark_survives(self):
        document = Document()
        heading = document.add_paragraph()
        heading.set_style("Heading1")
        heading.add_run("Overview")

        loaded = reload(document).paragraphs()[0]

        assert loaded.style_name == "Heading1"
        assert loaded.bookmark_name == heading.bookmark_name
        assert loaded.bookmark_id == heading.bookmark_id
