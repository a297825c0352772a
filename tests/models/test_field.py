"""
Tests for the Field model and its factories.
"""

import threading

import pytest

from docx_codec.exceptions import ValidationError
from docx_codec.models.field import (
    PROP_DISPLAY,
    PROP_STYLE,
    PROP_URL,
    Field,
    FieldType,
    new_field,
    new_hyperlink_field,
    new_styleref_field,
    new_toc_field,
)


class TestField:
    """Test cases for Field."""

    def test_new_field_is_dirty_with_default_code(self):
        field = new_field(FieldType.PAGE_NUMBER)

        assert field.code == "PAGE"
        assert field.is_dirty()
        assert field.result == ""

    def test_update_computes_placeholder_and_clears_dirty(self):
        field = new_field(FieldType.PAGE_COUNT)
        field.update()

        assert field.result == "1"
        assert not field.is_dirty()

    def test_update_is_noop_when_clean(self):
        field = new_field(FieldType.TOC)
        field.update()
        field.set_result("cached")
        field.update()

        assert field.result == "cached"

    def test_set_code_marks_dirty(self):
        field = new_field(FieldType.SEQ)
        field.update()
        field.set_code("SEQ Table")

        assert field.is_dirty()
        assert field.code == "SEQ Table"

    @pytest.mark.parametrize("code", ["", "   ", None])
    def test_blank_code_rejected(self, code):
        field = new_field(FieldType.PAGE_NUMBER)

        with pytest.raises(ValidationError):
            field.set_code(code)
        assert field.code == "PAGE"

    def test_set_property_marks_dirty(self):
        field = new_field(FieldType.DATE)
        field.update()
        field.set_property("format", "d.M.yyyy")

        assert field.is_dirty()
        assert field.properties() == {"format": "d.M.yyyy"}

    def test_set_result_keeps_dirty_flag(self):
        field = Field(FieldType.REF, "REF bookmark")
        field.set_result("Chapter 1")

        assert field.is_dirty()
        field.update()
        assert field.result == "Chapter 1"

    def test_date_result_format(self):
        field = new_field(FieldType.DATE)
        field.update()

        month, day, year = field.result.split("/")
        assert len(year) == 4
        assert 1 <= int(month) <= 12
        assert 1 <= int(day) <= 31


class TestFieldFactories:
    """Test cases for the field factory functions."""

    def test_hyperlink_field_is_clean(self):
        field = new_hyperlink_field("https://example.com", "Example")

        assert field.field_type == FieldType.HYPERLINK
        assert field.code == 'HYPERLINK "https://example.com"'
        assert field.get_property(PROP_URL) == "https://example.com"
        assert field.get_property(PROP_DISPLAY) == "Example"
        assert field.result == "Example"
        assert not field.is_dirty()

    def test_toc_field_switches(self):
        field = new_toc_field({"levels": "1-2", "hidePageNumbers": "true"})

        assert field.code == 'TOC \\o "1-2" \\h \\n \\z \\u'
        assert field.get_property("levels") == "1-2"

    def test_toc_field_defaults(self):
        assert new_toc_field().code == 'TOC \\o "1-3" \\h \\z \\u'

    def test_styleref_field(self):
        field = new_styleref_field("Heading 2")

        assert field.code == 'STYLEREF "Heading 2"'
        assert field.get_property(PROP_STYLE) == "Heading 2"


class TestFieldConcurrency:
    """Test cases for using one field from several threads."""

    def test_concurrent_mutation_and_reads(self):
        """Readers never see a clean field whose result lags its display text."""
        field = new_hyperlink_field("https://example.com", "start")
        errors = []
        barrier = threading.Barrier(8)

        def write(worker):
            barrier.wait()
            try:
                for i in range(300):
                    label = f"w{worker}-{i}"
                    field.set_property(PROP_DISPLAY, label)
                    field.set_code(f'HYPERLINK "https://example.com/{label}"')
                    field.update()
            except Exception as e:
                errors.append(e)

        def read():
            barrier.wait()
            try:
                for _ in range(1000):
                    state = field.to_dict()
                    assert state["code"].startswith('HYPERLINK "https://example.com')
                    if not state["dirty"]:
                        assert state["result"] == state["properties"][PROP_DISPLAY]
                    field.result
                    field.is_dirty()
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=write, args=(n,)) for n in range(4)]
        threads += [threading.Thread(target=read) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        field.update()
        assert field.result == field.get_property(PROP_DISPLAY)
        assert not field.is_dirty()
