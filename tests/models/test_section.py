"""
Tests for the Section model and header/footer containers.
"""

import pytest

from docx_codec.exceptions import InvalidArgumentError, ValidationError
from docx_codec.models.section import (
    PAGE_LETTER,
    HeaderFooterType,
    Margins,
    Orientation,
    PageSize,
    Section,
)


class TestSection:
    """Test cases for Section."""

    def test_defaults(self):
        section = Section("sect1")

        assert (section.page_size.width, section.page_size.height) == (11906, 16838)
        assert section.orientation == Orientation.PORTRAIT
        assert section.margins.top == 1440
        assert section.margins.header == 720
        assert section.columns == 1

    def test_columns_range(self):
        section = Section()
        section.set_columns(10)

        assert section.columns == 10
        with pytest.raises(InvalidArgumentError):
            section.set_columns(11)
        with pytest.raises(InvalidArgumentError):
            section.set_columns(0)

    def test_page_size_validation(self):
        section = Section()
        section.set_page_size(PAGE_LETTER)

        assert section.page_size == PageSize(12240, 15840)
        assert section.page_size is not PAGE_LETTER
        with pytest.raises(ValidationError):
            section.set_page_size(PageSize(0, 100))

    def test_negative_margins_rejected(self):
        with pytest.raises(ValidationError):
            Section().set_margins(Margins(top=-1))

    def test_orientation_must_be_enum(self):
        with pytest.raises(ValidationError):
            Section().set_orientation("landscape")

    def test_copy_layout_skips_headers(self):
        source = Section("sect1")
        source.set_orientation(Orientation.LANDSCAPE)
        source.set_page_size(PageSize(16838, 11906))
        source.set_columns(2)
        source.header().add_paragraph().add_run("Title")

        target = Section("sect2")
        target.copy_layout_from(source)
        source.margins.left = 0

        assert target.orientation == Orientation.LANDSCAPE
        assert target.page_size.width == 16838
        assert target.columns == 2
        assert target.margins.left == 1440
        assert target.headers == {}

    def test_header_created_once(self):
        section = Section()
        header = section.header()

        assert section.header() is header
        assert section.header(HeaderFooterType.FIRST) is not header
        assert header.kind == "header"
        assert section.footer().kind == "footer"

    def test_header_text(self):
        header = Section().header()
        header.add_paragraph().add_run("one")
        header.add_paragraph().add_run("two")

        assert header.get_text() == "one\ntwo"
        assert header.paragraphs[0].parent is header
